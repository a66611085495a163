"""Unit tests for data models."""

from datetime import date, datetime

from outline_deadlines.models import (
    AssessmentTitleItem, CalendarItem, ReconciledDeadline, UnitOutline,
    serialize_date, deserialize_date, deserialize_time, valid_week
)


def test_assessment_title_item():
    """Test AssessmentTitleItem model."""
    item = AssessmentTitleItem(title="Assignment", weight=40)
    assert item.title == "Assignment"
    assert item.weight == 40
    assert item.outcomes is None


def test_calendar_item_week_out_of_range_becomes_none():
    """Weeks outside 1-20 are dropped."""
    assert CalendarItem(title="Quiz", unit="COMP1005", week=0).week is None
    assert CalendarItem(title="Quiz", unit="COMP1005", week=21).week is None
    assert CalendarItem(title="Quiz", unit="COMP1005", week=20).week == 20
    assert valid_week(None) is None


def test_reconciled_deadline_from_undated_item_is_tba():
    """A resolved item without a date cannot stay resolved."""
    item = CalendarItem(title="Quiz", unit="COMP1005", week=4, is_tba=False)
    deadline = ReconciledDeadline.from_calendar_item(item)
    assert deadline.is_tba
    assert deadline.date is None
    assert deadline.week == 4


def test_reconciled_deadline_due_datetime():
    """Test due_datetime combines date and exact time."""
    deadline = ReconciledDeadline(
        title="Assignment", unit="COMP1005", date=date(2026, 5, 3),
        exact_time="23:59", is_tba=False
    )
    assert deadline.due_datetime == datetime(2026, 5, 3, 23, 59)

    untimed = ReconciledDeadline(title="Quiz", unit="COMP1005", date=date(2026, 3, 2), is_tba=False)
    assert untimed.due_datetime == datetime(2026, 3, 2, 0, 0)

    tba = ReconciledDeadline(title="Exam", unit="COMP1005")
    assert tba.due_datetime is None


def test_reconciled_deadline_dict_round_trip():
    """Test to_dict/from_dict preserve every field."""
    deadline = ReconciledDeadline(
        title="Practical Test 1", unit="COMP1005", week=3, date=date(2026, 3, 2),
        exact_time="09:00", is_tba=False, weight=20, sourced_from_calendar=True,
        week_label="Week 3", unit_name="Fundamentals of Programming",
        outcomes="1,2", late_accepted=False, extension_considered=True
    )
    assert ReconciledDeadline.from_dict(deadline.to_dict()) == deadline


def test_unit_outline_defaults():
    """Test UnitOutline model."""
    outline = UnitOutline(unit_code="COMP1005", title="Fundamentals of Programming")
    assert outline.as_task == ""
    assert outline.pc_text == ""


def test_date_serialization():
    """Test date serialization."""
    d = date(2026, 2, 16)
    s = serialize_date(d)
    assert s == "2026-02-16"
    assert deserialize_date(s) == d


def test_time_deserialization():
    """Test time deserialization."""
    t = deserialize_time("23:59")
    assert (t.hour, t.minute) == (23, 59)
