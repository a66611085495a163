"""
Data models for unit outline deadline extraction.

All models use Python dataclasses. Parsers produce ``AssessmentTitleItem`` and
``CalendarItem`` records; the reconciler turns them into ``ReconciledDeadline``
records, which are the only thing callers (CLI, exporter, cache) consume.

These models represent:
- Assessment inventory rows (title + weight)
- Candidate deadlines found in a calendar or schedule
- Final reconciled deadlines
- The outline payload returned by the outline web service
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

MIN_WEEK = 1
MAX_WEEK = 20


def valid_week(week: Optional[int]) -> Optional[int]:
    """Return the week when it lies in the teaching range, otherwise None."""
    if week is None or not MIN_WEEK <= week <= MAX_WEEK:
        return None
    return week


@dataclass(frozen=True)
class AssessmentTitleItem:
    """One row of the flat assessment listing.

    This is the authoritative record that an assessment exists; it carries no
    date information.
    """
    title: str                      # e.g. "Assignment", "Final Examination"
    weight: Optional[int] = None    # Percentage of the unit grade (0-100)
    outcomes: Optional[str] = None  # Learning outcomes assessed, e.g. "1,2,4"


@dataclass
class CalendarItem:
    """A candidate deadline found by one of the parsers.

    One instance per due-date occurrence: a quiz running in weeks 2-4 gives
    three items. When ``is_tba`` is True the date could not be resolved and
    ``week``/``date`` are only hints.
    """
    title: str
    unit: str                       # Unit code, e.g. "COMP1005"
    week: Optional[int] = None      # Teaching week 1-20
    date: Optional[date] = None     # Due date (calendar date only)
    exact_time: Optional[str] = None  # "HH:MM" when the source gave a time
    weight: Optional[int] = None
    is_tba: bool = False
    calendar_sourced: bool = False  # Dated from a week-by-week calendar table
    week_label: Optional[str] = None  # Display label, e.g. "Week 5", "Exam week"
    exact_day: Optional[str] = None   # Raw "Day:" text from a PDF schedule
    outcomes: Optional[str] = None
    late_accepted: Optional[bool] = None
    extension_considered: Optional[bool] = None

    def __post_init__(self):
        self.week = valid_week(self.week)


@dataclass(frozen=True)
class ReconciledDeadline:
    """A final deadline after merging all sources."""
    title: str
    unit: str
    week: Optional[int] = None
    date: Optional[date] = None
    exact_time: Optional[str] = None
    is_tba: bool = True
    weight: Optional[int] = None
    sourced_from_calendar: bool = False
    week_label: Optional[str] = None
    unit_name: Optional[str] = None  # e.g. "Fundamentals of Programming"
    outcomes: Optional[str] = None
    late_accepted: Optional[bool] = None
    extension_considered: Optional[bool] = None

    @classmethod
    def from_calendar_item(cls, item: CalendarItem,
                           unit_name: Optional[str] = None) -> "ReconciledDeadline":
        """Freeze a candidate; a non-TBA item without a date becomes TBA."""
        is_tba = item.is_tba or item.date is None
        return cls(
            title=item.title,
            unit=item.unit,
            week=item.week,
            date=None if is_tba else item.date,
            exact_time=None if is_tba else item.exact_time,
            is_tba=is_tba,
            weight=item.weight,
            sourced_from_calendar=item.calendar_sourced,
            week_label=item.week_label,
            unit_name=unit_name,
            outcomes=item.outcomes,
            late_accepted=item.late_accepted,
            extension_considered=item.extension_considered,
        )

    @property
    def due_datetime(self) -> Optional[datetime]:
        """Due date combined with the exact time (midnight when no time is known)."""
        if self.date is None:
            return None
        due_time = deserialize_time(self.exact_time) if self.exact_time else time(0, 0)
        return datetime.combine(self.date, due_time)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "unit": self.unit,
            "week": self.week,
            "date": serialize_date(self.date) if self.date else None,
            "exact_time": self.exact_time,
            "is_tba": self.is_tba,
            "weight": self.weight,
            "sourced_from_calendar": self.sourced_from_calendar,
            "week_label": self.week_label,
            "unit_name": self.unit_name,
            "outcomes": self.outcomes,
            "late_accepted": self.late_accepted,
            "extension_considered": self.extension_considered,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReconciledDeadline":
        return cls(
            title=data["title"],
            unit=data["unit"],
            week=data.get("week"),
            date=deserialize_date(data["date"]) if data.get("date") else None,
            exact_time=data.get("exact_time"),
            is_tba=data.get("is_tba", True),
            weight=data.get("weight"),
            sourced_from_calendar=data.get("sourced_from_calendar", False),
            week_label=data.get("week_label"),
            unit_name=data.get("unit_name"),
            outcomes=data.get("outcomes"),
            late_accepted=data.get("late_accepted"),
            extension_considered=data.get("extension_considered"),
        )


@dataclass
class UnitOutline:
    """Outline payload for one unit offering."""
    unit_code: str              # e.g. "COMP1005"
    title: str                  # Full unit name
    study_period: str = ""      # e.g. "Semester 1"
    year: str = ""              # e.g. "2026"
    as_task: str = ""           # Pipe-delimited assessment listing
    pc_text: str = ""           # HTML program calendar table
    raw: dict = field(default_factory=dict, repr=False)


# Serialization helpers for JSON conversion

def serialize_date(d: date) -> str:
    """Convert date to ISO format string."""
    return d.isoformat()


def deserialize_date(s: str) -> date:
    """Convert ISO format string to date."""
    return date.fromisoformat(s)


def deserialize_time(s: str) -> time:
    """Convert HH:MM string to time."""
    return time.fromisoformat(s)
