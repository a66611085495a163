"""
Parser for the assessment schedule section of outline PDFs.

Each assessment row of the schedule table is flattened by text extraction
into something like:

    Assignment 1 - Design report
    40 %
    Week: Teaching weeks 5
    Day: 3rd April
    Time: 23:59

The ``Week:`` label is the anchor for each row. The title and weight are
found by scanning backwards from it, the day and time by scanning forwards.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .models import CalendarItem
from .pdf_lines import (
    ends_with_percent,
    extract_all_weeks,
    extract_title_from_percent_line,
    is_combined_yes_no,
    is_meta_value,
    is_noise_line,
    is_outcomes_line,
    is_percent_line,
    is_tba_value,
    is_yes_no_line,
    normalize_week_label,
    percent_value,
)
from .semester import parse_clock_time, parse_ordinal_date, week_to_date

logger = logging.getLogger(__name__)

WEEK_LINE = re.compile(r"^Week:\s*(.*)$", re.IGNORECASE)
DAY_LINE = re.compile(r"^Day:\s*(.+)$", re.IGNORECASE)
TIME_LINE = re.compile(r"^Time:\s*(.+)$", re.IGNORECASE)
SECTION_START = re.compile(r"^Assessment\s+Schedule\b", re.IGNORECASE)
SECTION_END = re.compile(r"^Detailed\s+Information|\bprogram\s+calendar\b", re.IGNORECASE)
_ROW_BOUNDARY = re.compile(r"^(Assessment Schedule|Learning Activities)", re.IGNORECASE)

UNKNOWN_TITLE = "Unknown task"


@dataclass
class RowMeta:
    """Right-hand columns of one schedule row."""
    outcomes: Optional[str] = None
    late_accepted: Optional[bool] = None
    extension_considered: Optional[bool] = None


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def schedule_section(lines: List[str]) -> List[str]:
    """Lines of the assessment schedule section, or all lines if it has no header."""
    start = next((i for i, line in enumerate(lines) if SECTION_START.match(line)), None)
    if start is None:
        return lines
    for end in range(start + 1, len(lines)):
        if SECTION_END.search(lines[end]):
            return lines[start:end]
    return lines[start:]


def _is_yes(value: str) -> bool:
    return value.lower() == "yes"


def parse_meta_rows(values: List[str]) -> List[RowMeta]:
    """Group a flat run of outcome and yes/no values into per-row triplets.

    Args:
        values: Meta-value lines in document order

    Returns:
        One RowMeta per schedule row
    """
    rows = []
    i = 0
    while i < len(values):
        line = values[i]
        meta = RowMeta()
        if is_outcomes_line(line):
            meta.outcomes = re.sub(r"\s", "", line)
            i += 1
            line = values[i] if i < len(values) else ""
        elif not (is_combined_yes_no(line) or is_yes_no_line(line)):
            i += 1
            continue

        if is_combined_yes_no(line):
            late, extension = line.split()[:2]
            meta.late_accepted = _is_yes(late)
            meta.extension_considered = _is_yes(extension)
            i += 1
        elif is_yes_no_line(line):
            meta.late_accepted = _is_yes(line)
            i += 1
            if i < len(values) and is_yes_no_line(values[i]):
                meta.extension_considered = _is_yes(values[i])
                i += 1
        rows.append(meta)
    return rows


def extract_meta_rows(section: List[str]) -> List[RowMeta]:
    """Pull the per-row meta block out of the schedule section.

    The renderer emits the outcome/late/extension columns of every row as one
    block between the first "Day:" and the first "Time:" label.
    """
    first_day = next((i for i, line in enumerate(section) if line.lower().startswith("day:")), None)
    if first_day is None:
        return []
    first_time = next((i for i in range(first_day + 1, len(section))
                       if section[i].lower().startswith("time:")), None)
    if first_time is None:
        return []
    return parse_meta_rows([line for line in section[first_day + 1:first_time] if is_meta_value(line)])


def clean_title(raw: str) -> str:
    """Turn collected title lines into a display title.

    Removes edge punctuation and placeholders, a leading row number, "(x N)"
    repeat counts and a " - description" suffix.
    """
    title = re.sub(r"\s+", " ", raw).strip()
    title = re.sub(r"^[,*#\s]+|[,*#\s]+$", "", title)
    title = re.sub(r"^\d{1,2}\s+", "", title)
    title = re.sub(r"\s*\([x×][\s\d#]*\)\s*", " ", title, flags=re.IGNORECASE)
    title = re.sub(r"\s+-\s+.+$", "", title)
    title = title.replace("#", "")
    title = re.sub(r"\s{2,}", " ", title).strip()
    return title or UNKNOWN_TITLE


class ScheduleParser:
    """Walks the schedule section row by row."""

    def __init__(self, lines: List[str], unit: str, year: int, semester: int,
                 config: EngineConfig):
        self.lines = lines
        self.unit = unit
        self.year = year
        self.semester = semester
        self.config = config
        self.meta_rows = extract_meta_rows(lines)

    def parse(self) -> List[CalendarItem]:
        items: List[CalendarItem] = []
        row_index = 0
        for index, line in enumerate(self.lines):
            match = WEEK_LINE.match(line)
            if not match:
                continue
            meta = self.meta_rows[row_index] if row_index < len(self.meta_rows) else RowMeta()
            row_index += 1
            items.extend(self._parse_row(index, match.group(1).strip(), meta))
        return items

    def _collect_title(self, anchor: int):
        """Scan backwards from a Week: line for the title and weight."""
        parts: List[str] = []
        found_percent = False
        weight = None

        for back in range(1, self.config.title_lookback + 1):
            if anchor - back < 0:
                break
            prev = self.lines[anchor - back]
            if WEEK_LINE.match(prev) or _ROW_BOUNDARY.match(prev):
                break
            if re.match(r"^(Day:|Time:)", prev, re.IGNORECASE):
                break

            if is_percent_line(prev):
                found_percent = True
                weight = percent_value(prev) or weight
                continue
            if not found_percent and ends_with_percent(prev):
                found_percent = True
                weight = percent_value(prev)
                head = extract_title_from_percent_line(prev)
                if head and not is_noise_line(head):
                    parts.insert(0, head)
                continue
            if found_percent:
                if not is_noise_line(prev) and len(prev) > 1:
                    parts.insert(0, prev)
                elif is_noise_line(prev) and parts:
                    break

        if not parts:
            for back in range(1, self.config.title_fallback_window + 1):
                if anchor - back < 0:
                    break
                prev = self.lines[anchor - back]
                if WEEK_LINE.match(prev) or SECTION_START.match(prev):
                    break
                if not is_noise_line(prev) and not is_percent_line(prev) and len(prev) > 2:
                    parts.insert(0, prev)
                    if len(parts) >= self.config.title_fallback_lines:
                        break

        return clean_title(" ".join(parts)), weight

    def _collect_day_time(self, anchor: int):
        """Scan forwards from a Week: line for the Day: and Time: values."""
        day = ""
        time_text = ""
        end = min(len(self.lines), anchor + 1 + self.config.forward_window)
        position = anchor + 1
        while position < end:
            ahead = self.lines[position]
            if WEEK_LINE.match(ahead):
                break
            day_match = DAY_LINE.match(ahead) if not day else None
            if day_match:
                day = day_match.group(1).strip()
                for offset in range(1, self.config.day_continuation_lines + 1):
                    if position + offset >= len(self.lines):
                        break
                    cont = self.lines[position + offset]
                    if TIME_LINE.match(cont) or WEEK_LINE.match(cont) or is_noise_line(cont):
                        break
                    if is_meta_value(cont):
                        break
                    day += " " + cont
                position += 1
                continue
            time_match = TIME_LINE.match(ahead)
            if time_match:
                time_text = time_match.group(1).strip()
                break
            position += 1
        return day, time_text

    def _parse_row(self, anchor: int, week_text: str, meta: RowMeta) -> List[CalendarItem]:
        title, weight = self._collect_title(anchor)
        day, time_text = self._collect_day_time(anchor)

        exact_date = parse_ordinal_date(day, self.year) if day else None
        weeks = extract_all_weeks(week_text)
        # An exact Day: date wins over a descriptive Week: value ("Exam week")
        is_tba = (
            (not weeks and exact_date is None)
            or (bool(day) and is_tba_value(day, self.config))
        )

        common = dict(
            title=title,
            unit=self.unit,
            weight=weight,
            exact_day=day or None,
            outcomes=meta.outcomes,
            late_accepted=meta.late_accepted,
            extension_considered=meta.extension_considered,
        )

        if not is_tba and len(weeks) > 1:
            return [
                CalendarItem(
                    week=week,
                    date=week_to_date(self.semester, self.year, week),
                    week_label=f"Week {week}",
                    is_tba=False,
                    **common,
                )
                for week in weeks
            ]

        due_date = None
        exact_time = None
        if not is_tba:
            if exact_date is not None:
                due_date = exact_date
                exact_time = parse_clock_time(time_text)
            elif weeks:
                due_date = week_to_date(self.semester, self.year, weeks[-1])

        if is_tba:
            logger.debug("%s: %r has no resolvable date (week=%r, day=%r)",
                         self.unit, title, week_text, day)

        return [CalendarItem(
            week=weeks[-1] if weeks else None,
            date=due_date,
            exact_time=exact_time,
            week_label=normalize_week_label(week_text),
            is_tba=is_tba,
            **common,
        )]


def parse_schedule_from_text(text: str, unit: str, year: int, semester: int,
                             config: Optional[EngineConfig] = None) -> List[CalendarItem]:
    """Parse the assessment schedule out of PDF text.

    Args:
        text: Full extracted text, "#" standing for unreadable digits
        unit: Unit code attached to every item
        year: Academic year
        semester: 1 or 2
        config: Keyword configuration (defaults to DEFAULT_CONFIG)

    Returns:
        CalendarItem list in document order, multi-week rows expanded
    """
    config = config or DEFAULT_CONFIG
    section = schedule_section(split_lines(text or ""))
    items = ScheduleParser(section, unit, year, semester, config).parse()
    logger.debug("%s: %d schedule items", unit, len(items))
    return items
