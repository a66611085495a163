"""
Parser for the program calendar section of outline PDFs.

The program calendar lists every week of the semester, teaching or not:

    Program Calendar
    1. 16 February  Introduction  Worksheet 1
    2. 23 February  Arrays        Workshop Quiz
    #  April  Tuition Free Week
    ...

Week rows are counted in order, so the n-th row is dated n-1 weeks after
the semester start even when its printed date is unreadable.
"""

import logging
import re
from datetime import date
from typing import List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .digits import NUMBER_TOKEN, strip_placeholders
from .models import CalendarItem
from .schedule_parser import split_lines
from .semester import week_to_date

logger = logging.getLogger(__name__)

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
# Full row: "3. 2 March content"
WEEK_ROW_FULL = re.compile(rf"^{NUMBER_TOKEN}\s*\.\s+{NUMBER_TOKEN}\s+{_MONTH}", re.IGNORECASE)
WEEK_ROW_PREFIX = re.compile(rf"^{NUMBER_TOKEN}\s*\.\s+{NUMBER_TOKEN}\s+[A-Za-z]{{3,9}}\s*")
# Split row: "3." alone, content on the following lines
WEEK_ROW_SHORT = re.compile(rf"^{NUMBER_TOKEN}\s*\.\s*$")
# Non-teaching row printed without a dot: "#  April Tuition Free Week"
NO_DOT_WEEK_ROW = re.compile(rf"^{NUMBER_TOKEN}\s{{2,}}{_MONTH}", re.IGNORECASE)
CALENDAR_HEADER = re.compile(r"\bprogram\s+calendar\b", re.IGNORECASE)
SKIP_LINE = re.compile(
    r"program\s+calendar|CRICOS|The only authoritative|Faculty of|School of|WASM:|"
    r"Bentley Perth|^Page\s*\d|^Week\s*$|^Begin\s*$|^Assessment\s*$|"
    r"^Teaching\s*Week\s*$|^Semester\s*\d",
    re.IGNORECASE,
)

_HEADER_MAX_LENGTH = 60


class ProgramCalendarParser:
    """Walks the program calendar, counting week rows and matching keywords."""

    def __init__(self, lines: List[str], unit: str, year: int, semester: int,
                 config: EngineConfig):
        self.lines = lines
        self.unit = unit
        self.year = year
        self.semester = semester
        self.non_teaching = config.calendar_break_pattern()
        self.keywords = config.compiled_assessment_keywords()
        self.items: List[CalendarItem] = []
        self.week_count = 0

    def parse(self) -> List[CalendarItem]:
        i = 0
        while i < len(self.lines):
            line = self.lines[i]
            if SKIP_LINE.search(line):
                i += 1
            elif WEEK_ROW_FULL.match(line):
                self.week_count += 1
                parts, i, _ = self._collect_content(i + 1)
                if not self.non_teaching.search(line):
                    parts.insert(0, WEEK_ROW_PREFIX.sub("", line))
                    self._extract(" ".join(parts))
            elif WEEK_ROW_SHORT.match(line):
                self.week_count += 1
                parts, i, non_teaching = self._collect_content(i + 1)
                joined = " ".join(parts)
                if not non_teaching and not self.non_teaching.search(joined):
                    self._extract(joined)
            elif NO_DOT_WEEK_ROW.match(line) and self.non_teaching.search(line):
                self.week_count += 1
                trailing = self._non_teaching_trailing(line)
                if len(trailing) > 2:
                    self._extract(trailing, labelled=False)
                i += 1
            else:
                i += 1
        return self.items

    def _collect_content(self, i: int):
        """Gather the lines belonging to a week row.

        Returns:
            (content lines, index of the next unread line, whether a
            non-teaching marker ended the row)
        """
        parts = []
        while i < len(self.lines):
            line = self.lines[i]
            if WEEK_ROW_FULL.match(line) or WEEK_ROW_SHORT.match(line):
                return parts, i, False
            if SKIP_LINE.search(line):
                return parts, i + 1, False
            if NO_DOT_WEEK_ROW.match(line) and self.non_teaching.search(line):
                return parts, i, False
            if self.non_teaching.search(line):
                return parts, i + 1, True
            parts.append(line)
            i += 1
        return parts, i, False

    def _non_teaching_trailing(self, line: str) -> str:
        """Content printed after the break-week name on a dot-free row."""
        trailing = re.sub(r"^[#\d](?:\s[#\d])?\s{2,}[A-Za-z]+\s*", "", line)
        return _strip_break_words(trailing)

    def _week_date(self) -> date:
        return week_to_date(self.semester, self.year, self.week_count)

    def _extract(self, raw: str, labelled: bool = True) -> None:
        """Add an item for every assessment keyword found in a week's content."""
        content = strip_placeholders(raw)
        if len(content) < 3:
            return

        matched: List[str] = []
        for pattern, canonical in self.keywords:
            match = pattern.search(content)
            if not match:
                continue
            title = canonical or re.sub(r"\s+", " ", match.group(0)).strip()
            # "Workshop Quiz" already covers a bare "Quiz" in the same week
            if any(title in earlier for earlier in matched):
                continue
            matched.append(title)

            if any(item.title == title and item.week == self.week_count for item in self.items):
                continue
            self.items.append(CalendarItem(
                title=title,
                unit=self.unit,
                week=self.week_count,
                date=self._week_date(),
                week_label=f"Week {self.week_count}" if labelled else None,
                is_tba=False,
                calendar_sourced=True,
            ))


def _strip_break_words(text: str) -> str:
    text = re.sub(r"tuition[\s-]*free[\s-]*week\s*", "", text, flags=re.IGNORECASE)
    text = re.sub(r"study\s*week\s*", "", text, flags=re.IGNORECASE)
    text = re.sub(r"orientation\s*week\s*", "", text, flags=re.IGNORECASE)
    text = re.sub(r"examinations?\s*", "", text, flags=re.IGNORECASE)
    return text.strip()


def find_calendar_start(lines: List[str]) -> Optional[int]:
    """Index of the program calendar heading, ignoring long lines that merely mention it."""
    for index, line in enumerate(lines):
        if CALENDAR_HEADER.search(line) and len(line) < _HEADER_MAX_LENGTH:
            return index
    return None


def parse_calendar_from_text(text: str, unit: str, year: int, semester: int,
                             config: Optional[EngineConfig] = None) -> List[CalendarItem]:
    """Parse the program calendar out of PDF text.

    Args:
        text: Full extracted text, "#" standing for unreadable digits
        unit: Unit code attached to every item
        year: Academic year
        semester: 1 or 2
        config: Keyword configuration (defaults to DEFAULT_CONFIG)

    Returns:
        Calendar-sourced items, or an empty list if the section is missing
    """
    config = config or DEFAULT_CONFIG
    lines = split_lines(text or "")
    start = find_calendar_start(lines)
    if start is None:
        logger.debug("%s: no program calendar section", unit)
        return []

    items = ProgramCalendarParser(lines[start + 1:], unit, year, semester, config).parse()
    logger.debug("%s: %d program calendar items", unit, len(items))
    return items
