"""
Semester calendar arithmetic.

Maps (semester, year, teaching week, day offset) to calendar dates and parses
the loosely written dates found in outlines ("3rd May", "##nd May 23:59").
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional

import dateparser

from .digits import resolve_ordinal_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SemesterDates:
    """First and last day of a semester's teaching period."""
    start: date
    end: date
    weeks: int


# Published dates; these win over the formulas below
KNOWN_SEMESTER_DATES: Dict[int, Dict[int, SemesterDates]] = {
    2026: {
        1: SemesterDates(date(2026, 2, 16), date(2026, 5, 22), 14),
        2: SemesterDates(date(2026, 7, 20), date(2026, 10, 23), 14),
    },
    2027: {
        1: SemesterDates(date(2027, 2, 15), date(2027, 5, 21), 14),
        2: SemesterDates(date(2027, 7, 19), date(2027, 10, 22), 14),
    },
    2028: {
        1: SemesterDates(date(2028, 2, 14), date(2028, 5, 19), 14),
        2: SemesterDates(date(2028, 7, 17), date(2028, 10, 20), 14),
    },
}

# First year of the 14-week calendar
CALENDAR_CUTOVER_YEAR = 2026

MONTH_NAMES = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_FULL_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_ORDINAL_DATE = re.compile(r"(?<!\d)(\d{1,2})\s*(?:st|nd|rd|th)?\s+([A-Za-z]+)", re.IGNORECASE)
_SPACED_PLACEHOLDER_DATE = re.compile(r"#\s+#\s*(st|nd|rd|th)\s+([A-Za-z]+)", re.IGNORECASE)
_PLACEHOLDER_DATE = re.compile(r"(#+)\s*(st|nd|rd|th)\s+([A-Za-z]+)", re.IGNORECASE)
_CLOCK_TIME = re.compile(r"(\d{1,2})[:.]\s*(\d{2})\s*(AM|PM)?", re.IGNORECASE)


def nth_monday_on_or_after(start: date, n: int) -> date:
    """Return the n-th Monday falling on or after ``start``."""
    first = start + timedelta(days=(7 - start.weekday()) % 7)
    return first + timedelta(weeks=n - 1)


def calculate_semester_dates(year: int) -> Dict[int, SemesterDates]:
    """Estimate both semesters of a year from the university's calendar rules.

    Before 2026 semester 1 began on the fourth Monday on or after 1 February
    and ran 13 teaching weeks, with semester 2 starting eight weeks
    after it ended. From 2026 both semesters run 14 weeks: semester 1 from the
    first Monday on or after 14 February, semester 2 from the third Monday in
    July.

    Args:
        year: Academic year

    Returns:
        Mapping of semester number to SemesterDates
    """
    if year < CALENDAR_CUTOVER_YEAR:
        weeks = 13
        s1_start = nth_monday_on_or_after(date(year, 2, 1), 4)
        s1_end = s1_start + timedelta(weeks=weeks, days=-3)
        s2_start = s1_start + timedelta(weeks=weeks + 8)
    else:
        weeks = 14
        s1_start = nth_monday_on_or_after(date(year, 2, 14), 1)
        s1_end = s1_start + timedelta(weeks=weeks, days=-3)
        s2_start = nth_monday_on_or_after(date(year, 7, 1), 3)

    s2_end = s2_start + timedelta(weeks=weeks, days=-3)
    return {
        1: SemesterDates(s1_start, s1_end, weeks),
        2: SemesterDates(s2_start, s2_end, weeks),
    }


def get_semester_dates(year: int, semester: int) -> SemesterDates:
    """Published dates when known, otherwise the formula estimate."""
    known = KNOWN_SEMESTER_DATES.get(year, {}).get(semester)
    if known is not None:
        return known
    return calculate_semester_dates(year)[2 if semester == 2 else 1]


def semester_start(year: int, semester: int) -> date:
    """Monday of teaching week 1."""
    return get_semester_dates(year, semester).start


def get_semester_weeks(year: int, semester: int) -> int:
    return get_semester_dates(year, semester).weeks


def week_to_date(semester: int, year: int, week: int, day_offset: int = 0) -> date:
    """Convert a teaching week to a calendar date.

    Any integer week is accepted; the result is simply extrapolated.

    Args:
        semester: 1 or 2
        year: Academic year
        week: 1-based teaching week
        day_offset: Days after the Monday of that week (0 = Monday)

    Returns:
        The calendar date
    """
    return semester_start(year, semester) + timedelta(days=(week - 1) * 7 + day_offset)


def month_number(name: str) -> Optional[int]:
    """Month number for a full or abbreviated English month name."""
    return MONTH_NAMES.get(name.strip().lower())


def calendar_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date through dateparser, rejecting impossible days."""
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    parsed = dateparser.parse(
        f"{day} {_FULL_MONTHS[month - 1]} {year}",
        languages=["en"],
        settings={"DATE_ORDER": "DMY", "STRICT_PARSING": True},
    )
    if parsed is None:
        logger.debug("Rejected date %s-%s-%s", year, month, day)
        return None
    return parsed.date()


def parse_ordinal_date(text: str, year: int) -> Optional[date]:
    """Extract a "day + month" date from free text.

    Handles "3rd May", "15 March", "3 Sept 23:59" and days written in
    placeholder glyphs ("#rd May", "##nd May", "# #nd May"). Ambiguous
    placeholder days ("##st May") and unknown month names give None.

    Args:
        text: Free text containing a date
        year: Year to attach to the date

    Returns:
        The date, or None if no unambiguous date was found
    """
    if not text:
        return None

    for match in _ORDINAL_DATE.finditer(text):
        month = month_number(match.group(2))
        if month is None:
            continue
        return calendar_date(year, month, int(match.group(1)))

    match = _SPACED_PLACEHOLDER_DATE.search(text)
    if match:
        month = month_number(match.group(2))
        if month is None:
            return None
        day = resolve_ordinal_day(2, match.group(1))
        return calendar_date(year, month, day) if day else None

    match = _PLACEHOLDER_DATE.search(text)
    if match:
        month = month_number(match.group(3))
        if month is None:
            return None
        day = resolve_ordinal_day(len(match.group(1)), match.group(2))
        return calendar_date(year, month, day) if day else None

    return None


def parse_clock_time(text: str) -> Optional[str]:
    """Normalize "23:59", "5.00 PM" or "11:30am" to "HH:MM"."""
    if not text:
        return None
    match = _CLOCK_TIME.search(text)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    meridiem = (match.group(3) or "").upper()
    if meridiem == "PM" and hours < 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"
