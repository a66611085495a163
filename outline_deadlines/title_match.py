"""
Fuzzy assessment-title matching.

Different sources name the same assessment differently ("Lab Report" in the
calendar, "Laboratory Report" in the listing, "E-Test" vs "eTest"). Matching
is deterministic: a fixed list of strategies tried in order.
"""

import re
from typing import Callable, List, Tuple


def title_words(title: str) -> List[str]:
    """Lowercase letter-only words of three or more characters."""
    return [w for w in re.sub(r"[^a-z]", " ", title.lower()).split() if len(w) >= 3]


def normalize_title(title: str) -> str:
    """Lowercase title with everything but letters removed."""
    return re.sub(r"[^a-z]", "", title.lower())


def first_word_prefix(a: str, b: str) -> bool:
    """First significant words are prefixes of one another ("Laboratory" / "Lab")."""
    first_a, first_b = title_words(a)[0], title_words(b)[0]
    return first_a.startswith(first_b) or first_b.startswith(first_a)


def normalized_equal(a: str, b: str) -> bool:
    """Titles are identical once punctuation and digits are gone ("E-Test" / "eTest")."""
    return normalize_title(a) == normalize_title(b)


def single_word_containment(a: str, b: str) -> bool:
    """A one-word title appears among the other title's words ("Quiz" / "Workshop Quiz")."""
    words_a, words_b = title_words(a), title_words(b)
    short, long_ = (words_a, words_b) if len(words_a) <= len(words_b) else (words_b, words_a)
    if len(short) != 1 or len(short[0]) < 4:
        return False
    key = short[0]
    return any(w.startswith(key) or key.startswith(w) for w in long_)


# Tried in order; the first strategy that matches wins
TITLE_MATCHERS: Tuple[Callable[[str, str], bool], ...] = (
    first_word_prefix,
    normalized_equal,
    single_word_containment,
)


def titles_overlap(a: str, b: str) -> bool:
    """True if two titles probably name the same assessment.

    Args:
        a: First title
        b: Second title

    Returns:
        True when any matcher in TITLE_MATCHERS accepts the pair
    """
    if not title_words(a) or not title_words(b):
        return False
    return any(matcher(a, b) for matcher in TITLE_MATCHERS)


def ligature_gap_match(a: str, b: str) -> bool:
    """Match titles that differ only by a dropped ligature glyph.

    PDF fonts often encode "fl", "fi", "ff" or "st" as one glyph that the
    text extractor loses, turning "Reflection" into "Reection". The longer
    title must equal the shorter one plus a single 1-3 character gap that
    starts with "f" or "s".
    """
    na = normalize_title(re.sub(r"\bsem\b", "semester", a, flags=re.IGNORECASE))
    nb = normalize_title(re.sub(r"\bsem\b", "semester", b, flags=re.IGNORECASE))
    shorter, longer = (na, nb) if len(na) <= len(nb) else (nb, na)
    gap = len(longer) - len(shorter)
    if not shorter or gap < 1 or gap > 3:
        return False
    for pos in range(len(shorter) + 1):
        if longer[pos] not in "fs":
            continue
        if longer[:pos] == shorter[:pos] and longer[pos + gap:] == shorter[pos:]:
            return True
    return False


def titles_match(a: str, b: str) -> bool:
    """Overlap check used when merging sources, tolerant of lost ligatures."""
    return titles_overlap(a, b) or ligature_gap_match(a, b)


def shares_keyword(a: str, b: str) -> bool:
    """True if both titles contain the same word of five or more letters."""
    words_b = {w for w in title_words(b) if len(w) >= 5}
    return any(w in words_b for w in title_words(a) if len(w) >= 5)


def base_title(title: str) -> str:
    """Title without a trailing " - description" or parenthetical note."""
    stripped = re.sub(r"\s*[-–—]\s+\S.*$", "", title)
    stripped = re.sub(r"\s*\([^)]*\)\s*$", "", stripped)
    return re.sub(r"\s+", " ", stripped).strip()
