"""
Placeholder-digit handling.

Some outline PDFs embed digits with a font that has no text mapping; the text
extractor replaces each such glyph with ``#``. A ``#`` is therefore an unknown
digit, not a character to be discarded blindly: "##nd May" still says the day
has two digits and ends in 2, which leaves only 22.
"""

import re
from typing import Optional, Tuple

PLACEHOLDER = "#"

# One or two digits, or one/two placeholder glyphs ("#", "##", "# #")
NUMBER_TOKEN = r"(?:\d{1,2}|#(?:\s?#)?)"

# Digit groups only count when they start a word ("COMP1005 10%" -> "10")
_PERCENT_TAIL = re.compile(r"(?:^|(?<=\s))([\d#][\d#\s]*)%\s*$")


def strip_placeholders(text: str) -> str:
    """Remove placeholder glyphs and collapse whitespace."""
    return re.sub(r"\s{2,}", " ", text.replace(PLACEHOLDER, "")).strip()


def has_placeholder(text: str) -> bool:
    return PLACEHOLDER in text


def parse_number(token: str) -> Optional[int]:
    """Parse a number whose digits may be split by spaces.

    Args:
        token: Text such as "12", "1 2" or "#"

    Returns:
        The integer, or None if any glyph is a placeholder or nothing numeric is left
    """
    compact = re.sub(r"\s+", "", token)
    if not compact or not compact.isdigit():
        return None
    return int(compact)


def split_percent_tail(line: str) -> Optional[Tuple[str, Optional[int]]]:
    """Split a line ending in a percentage into (text before it, weight).

    Multi-digit values can arrive spaced out ("5 0 %"), so trailing digit
    groups are joined from the right for as long as the value stays a valid
    weight. When title text precedes the digits and the last group is a
    valid weight on its own, that group alone is the weight, so an ordinal
    in the title stays put ("Quiz 3 5 %" is "Quiz 3" at 5). A tail
    containing placeholders still counts as a percentage but has no
    readable weight.

    Args:
        line: One line of extracted text

    Returns:
        (head, weight) tuple, or None if the line does not end with "%"
    """
    match = _PERCENT_TAIL.search(line)
    if not match:
        return None

    start = match.start(1)
    parts = match.group(1).split()
    if has_placeholder(parts[-1]):
        consumed = 0
        for part in reversed(parts):
            if not has_placeholder(part):
                break
            consumed += 1
        weight = None
    elif line[:start].strip() and 0 < int(parts[-1]) <= 100:
        consumed, weight = 1, int(parts[-1])
    else:
        consumed = 0
        weight = None
        for k in range(1, len(parts) + 1):
            candidate = parts[-k:]
            if any(has_placeholder(p) for p in candidate):
                break
            value = int("".join(candidate))
            if value > 100:
                break
            if value > 0:
                consumed, weight = k, value
        if consumed == 0:
            consumed = 1

    kept = parts[:len(parts) - consumed]
    head = line[:start] + " ".join(kept)
    return head.strip(), weight


def resolve_ordinal_day(placeholder_count: int, suffix: str) -> Optional[int]:
    """Recover a day of month written entirely in placeholder glyphs.

    The ordinal suffix narrows the choices: a single unknown digit followed by
    "rd" can only be 3, and two unknown digits followed by "nd" can only be 22.
    "st" and "th" after two digits stay ambiguous (21/31, 10-30).

    Args:
        placeholder_count: Number of placeholder glyphs in the day
        suffix: Ordinal suffix (st, nd, rd, th)

    Returns:
        The day, or None if it cannot be determined
    """
    suffix = suffix.lower()
    if placeholder_count == 1:
        return {"st": 1, "nd": 2, "rd": 3}.get(suffix)
    if placeholder_count == 2:
        return {"nd": 22, "rd": 23}.get(suffix)
    return None
