"""
Parser for the HTML program calendar.

The outline service ships the week-by-week program calendar as an HTML
table. Layouts vary between units, so columns are detected from the header
row:

- begin date: header contains both "begin" and "date"
- week: first header containing "week", or exactly "TW"
- assessment: header contains "assessment", or names a session type
  (workshop, lab, quiz) without also naming lecture/tutorial content

Some tables have no begin-date column and instead write the date inside
the week cell ("5 16 March"); those are handled too.
"""

import logging
import re
from datetime import date
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from .config import DEFAULT_CONFIG, EngineConfig
from .models import CalendarItem, valid_week
from .semester import calendar_date, month_number, parse_clock_time, parse_ordinal_date

logger = logging.getLogger(__name__)

# "(23:59 3rd May)" -> time "23:59", date "3rd May"
EXACT_TIME_RE = re.compile(r"\((\d{1,2}:\d{2})\s+(\d+\w*\s+\w+)\)")
WEIGHT_PCT_RE = re.compile(r"\((\d+)%\)")
_BEGIN_DATE = re.compile(r"^(\d{1,2})\s+(\w+)")
_EMBEDDED_DATE = re.compile(r"\d+\s+(\d{1,2})\s+([A-Za-z]+)")
_BARE_DATE = re.compile(r"^\d{1,2}\s+\w+$")


class CalendarTable:
    """Rows of cell text plus the detected column layout."""

    def __init__(self, html: str, config: EngineConfig):
        soup = BeautifulSoup(html or "", "html.parser")
        self.rows: List[List[str]] = []
        for tr in soup.find_all("tr"):
            self.rows.append([_cell_text(cell) for cell in tr.find_all(["th", "td"])])

        self.begin_date_col: Optional[int] = None
        self.week_col: Optional[int] = None
        self.assessment_cols: List[int] = []
        self.headers: List[str] = self.rows[0] if self.rows else []

        for index, header in enumerate(self.headers):
            text = header.lower()
            if "begin" in text and "date" in text:
                self.begin_date_col = index
            if self.week_col is None and ("week" in text or text.strip() == "tw"):
                self.week_col = index
            if _is_assessment_header(text, config):
                self.assessment_cols.append(index)

        self.embedded_dates = (
            self.begin_date_col is None
            and self.week_col is not None
            and len(self.rows) > 1
            and bool(_EMBEDDED_DATE.search(_cell(self.rows[1], self.week_col)))
        )

    def data_rows(self) -> List[List[str]]:
        return [row for row in self.rows[1:] if row]

    def week_number(self, row: List[str]) -> Optional[int]:
        if self.week_col is None:
            return None
        match = re.search(r"\d+", _cell(row, self.week_col))
        return valid_week(int(match.group())) if match else None

    def column_prefix(self, index: int) -> Optional[str]:
        """Title prefix for cells of a column when dates are embedded in the week cell."""
        if not self.embedded_dates:
            return None
        header = self.headers[index]
        text = header.lower()
        if "lab" in text:
            return "Lab"
        if "quiz" in text or "tut" in text:
            return "Quiz"
        words = header.split()
        return words[0] if words else None


def _cell_text(cell) -> str:
    text = cell.get_text(" ").replace("\xa0", " ")
    return re.sub(r"\s+", " ", text).strip()


def _cell(row: List[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def _is_assessment_header(text: str, config: EngineConfig) -> bool:
    if "assessment" in text:
        return True
    if not any(k in text for k in config.session_column_keywords):
        return False
    return not any(k in text for k in config.content_column_keywords)


def _day_month(text: str, pattern, year: int) -> Optional[date]:
    match = pattern.search(text)
    if not match:
        return None
    month = month_number(match.group(2))
    if month is None:
        return None
    return calendar_date(year, month, int(match.group(1)))


def clean_cell_title(raw: str) -> str:
    """Strip [notes], time overrides, weight annotations and trailing punctuation."""
    title = re.sub(r"\[[^\]]*\]", "", raw)
    title = EXACT_TIME_RE.sub("", title)
    title = re.sub(r"\(\d+%\)[^(]*", "", title)
    title = re.sub(r"[,;:]+$", "", title.strip())
    return title.strip()


def parse_calendar_table(html: str, unit_code: str, semester: int, year: int,
                         config: Optional[EngineConfig] = None) -> List[CalendarItem]:
    """Parse the HTML program calendar into dated calendar items.

    Args:
        html: Program calendar HTML
        unit_code: Unit code attached to every item
        semester: 1 or 2
        year: Academic year used to complete "16 March" style dates
        config: Keyword configuration (defaults to DEFAULT_CONFIG)

    Returns:
        CalendarItem list in table order; empty when the table has no usable
        date source or no assessment column
    """
    config = config or DEFAULT_CONFIG
    if not html:
        return []

    table = CalendarTable(html, config)
    has_date_source = table.begin_date_col is not None or table.embedded_dates
    if not has_date_source or not table.assessment_cols:
        logger.info("%s: program calendar has no usable date or assessment column", unit_code)
        return []

    break_week = config.break_week_pattern()
    items = []
    current_date: Optional[date] = None

    for row in table.data_rows():
        if table.embedded_dates:
            week_text = _cell(row, table.week_col)
            # Sub-rows continuing the previous week have no week number
            if not re.match(r"\d", week_text):
                continue
            current_date = _day_month(week_text, _EMBEDDED_DATE, year) or current_date
            if break_week.search(week_text) or current_date is None:
                continue
            base_date = current_date
        else:
            begin_text = _cell(row, table.begin_date_col)
            if not begin_text or break_week.search(begin_text):
                continue
            base_date = _day_month(begin_text, _BEGIN_DATE, year)
            if base_date is None:
                logger.debug("%s: unreadable begin date %r", unit_code, begin_text)
                continue

        week = table.week_number(row)
        for index in table.assessment_cols:
            item = _parse_assessment_cell(
                _cell(row, index), table.column_prefix(index), base_date, week, unit_code, year
            )
            if item is not None:
                items.append(item)

    logger.debug("%s: %d calendar items from HTML table", unit_code, len(items))
    return items


def _parse_assessment_cell(raw: str, prefix: Optional[str], base_date: date,
                           week: Optional[int], unit_code: str,
                           year: int) -> Optional[CalendarItem]:
    if not raw or raw == "-":
        return None

    title = clean_cell_title(raw)
    if not title:
        return None
    if prefix:
        title = f"{prefix} {title}"

    due_date = base_date
    exact_time = None
    override = EXACT_TIME_RE.search(raw)
    if override:
        exact_time = parse_clock_time(override.group(1))
        due_date = parse_ordinal_date(override.group(2), year) or base_date

    weight_match = WEIGHT_PCT_RE.search(raw)
    return CalendarItem(
        title=title,
        unit=unit_code,
        week=week,
        date=due_date,
        exact_time=exact_time,
        weight=int(weight_match.group(1)) if weight_match else None,
        is_tba=False,
        calendar_sourced=True,
        week_label=f"Week {week}" if week else None,
    )


def build_week_hints(html: str, config: Optional[EngineConfig] = None) -> Dict[str, int]:
    """Map every cell of the calendar to the teaching week it appears in.

    Used to give undated assessments an approximate week when their title
    shows up in a non-assessment column (e.g. "Lecture/Workshop").

    Args:
        html: Program calendar HTML
        config: Keyword configuration (defaults to DEFAULT_CONFIG)

    Returns:
        Lowercased normalized cell text -> teaching week (1-20)
    """
    config = config or DEFAULT_CONFIG
    hints: Dict[str, int] = {}
    if not html:
        return hints

    table = CalendarTable(html, config)
    if table.week_col is None:
        return hints

    break_week = config.break_week_pattern()
    for row in table.data_rows():
        week_text = _cell(row, table.week_col)
        if not week_text or break_week.search(week_text):
            continue
        week = table.week_number(row)
        if week is None:
            continue

        for index, raw in enumerate(row):
            if index in (table.week_col, table.begin_date_col):
                continue
            if not raw or raw in ("-", "–"):
                continue
            normalized = re.sub(r"\[[^\]]*\]", "", raw)
            normalized = re.sub(r"\(\d+%\)[^(]*", "", normalized)
            normalized = re.sub(r"\(\d{1,2}:\d{2}[^)]*\)", "", normalized)
            normalized = re.sub(r"[,;:]+$", "", normalized).strip()
            if len(normalized) < 4 or _BARE_DATE.match(normalized):
                continue
            hints[normalized.lower()] = week

    return hints
