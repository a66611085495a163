"""
Line classifiers for text extracted from outline PDFs.

The assessment schedule table comes out of the PDF as a flat list of lines
in which titles, weights, labels and page furniture are interleaved. These
predicates decide what each line is.
"""

import re
from typing import List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .digits import split_percent_tail, strip_placeholders
from .models import MAX_WEEK, MIN_WEEK

_COLUMN_HEADERS = re.compile(
    r"^(Task\s*$|Value\s*$|Date Due|Unit\s*$|Outcome|Late\s*$|Extension|Accepted|Considered)",
    re.IGNORECASE,
)
_PAGE_FURNITURE = re.compile(
    r"^(Assessment Schedule|Assessment$|Faculty of|WASM:|CRICOS|Page\s+\d|The only auth)",
    re.IGNORECASE,
)
_YES_NO_PAIR = re.compile(r"\b(No\s+No|Yes\s+Yes|Yes\s+No|No\s+Yes)\b", re.IGNORECASE)
_WEEK_RANGE = re.compile(r"\b(\d{1,2})\s*[-–]\s*(\d{1,2})\b")
_ELLIPSIS = re.compile(r"\.{3}|…")


def is_percent_line(line: str) -> bool:
    """True when a line holds nothing but a percentage ("40 %", "# #%")."""
    tail = split_percent_tail(line)
    return tail is not None and tail[0] == ""


def ends_with_percent(line: str) -> bool:
    """True when title text is followed by a percentage on the same line."""
    tail = split_percent_tail(line)
    return tail is not None and tail[0] != ""


def percent_value(line: str) -> Optional[int]:
    tail = split_percent_tail(line)
    return tail[1] if tail else None


def extract_title_from_percent_line(line: str) -> str:
    tail = split_percent_tail(line)
    return tail[0] if tail else line.strip()


def is_noise_line(line: str) -> bool:
    """True for structural noise: labels, headers, footers, garbled glyph runs."""
    significant = re.sub(r"[\s,#]", "", line)
    if len(significant) <= 1 and len(line) > 3:
        return True
    return bool(
        re.match(r"^(Week:|Day:|Time:)", line, re.IGNORECASE)
        or _COLUMN_HEADERS.match(line)
        or _PAGE_FURNITURE.match(line)
        or _YES_NO_PAIR.search(line)
        or line.startswith("*")
    )


def is_tba_value(value: str, config: Optional[EngineConfig] = None) -> bool:
    """True when a Week:/Day: value describes the deadline rather than dating it."""
    config = config or DEFAULT_CONFIG
    return bool(config.tba_pattern().search(value))


def is_outcomes_line(line: str) -> bool:
    """Learning-outcome numbers such as "1,2,4"."""
    return bool(re.match(r"^\d[\d,\s]*$", line)) and len(line) < 20


def is_yes_no_line(line: str) -> bool:
    return bool(re.match(r"^(yes|no)$", line, re.IGNORECASE))


def is_combined_yes_no(line: str) -> bool:
    return bool(re.match(r"^(yes|no)\s+(yes|no)\s*$", line, re.IGNORECASE))


def is_meta_value(line: str) -> bool:
    return is_outcomes_line(line) or is_yes_no_line(line) or is_combined_yes_no(line)


def extract_all_weeks(text: str) -> List[int]:
    """All teaching weeks named in a Week: value.

    "Weeks 2-4" expands to [2, 3, 4]; "Teaching weeks 2,3,...,12" expands to
    2..12; otherwise every standalone number 1-20 is taken. Placeholder
    digits are dropped.

    Args:
        text: Raw Week: value

    Returns:
        Sorted, de-duplicated week numbers
    """
    text = strip_placeholders(text)
    match = _WEEK_RANGE.search(text)
    if match:
        low, high = sorted((int(match.group(1)), int(match.group(2))))
        return [w for w in range(low, high + 1) if MIN_WEEK <= w <= MAX_WEEK]

    numbers = sorted({int(n) for n in re.findall(r"\b(\d{1,2})\b", text)
                      if MIN_WEEK <= int(n) <= MAX_WEEK})
    if len(numbers) >= 2 and _ELLIPSIS.search(text):
        return list(range(numbers[0], numbers[-1] + 1))
    return numbers


def normalize_week_label(raw: str) -> Optional[str]:
    """Consistent display label ("Week 13", "Weeks 13-15", "Exam week")."""
    text = strip_placeholders(raw)
    if not text:
        return None
    if re.search(r"\bweek\b", text, re.IGNORECASE):
        return text
    if re.search(r"\bexam(ination)?\b", text, re.IGNORECASE):
        return "Exam week"
    match = re.match(r"^(\d{1,2})\s*[-–]\s*(\d{1,2})$", text)
    if match:
        return f"Weeks {match.group(1)}-{match.group(2)}"
    if re.match(r"^\d{1,2}$", text):
        return f"Week {text}"
    return text
