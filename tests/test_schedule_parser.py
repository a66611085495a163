"""Unit tests for the PDF assessment schedule parser."""

from datetime import date

from outline_deadlines.pdf_lines import extract_all_weeks, is_noise_line, normalize_week_label
from outline_deadlines.schedule_parser import (
    RowMeta, clean_title, parse_meta_rows, parse_schedule_from_text
)

SCHEDULE_TEXT = """
COMP1005 Fundamentals of Programming
Assessment Schedule
Task
Value
Date Due
1 Assignment 1 - Design report
40 %
Week: Teaching week 5
Day: 3rd April
1,2
No
Yes
2,3
Yes Yes
1,2,3,4
No No
Time: 23:59
2 Practical Test (x 3)
30 %
Week: Weeks 2-4
Day: Monday
Time: In class
3 Final Examination
30 %
Week: Exam week
Day: TBA
Time: TBA
Detailed Information
Week: 9
"""


def test_parse_schedule_rows():
    """Each Week: row yields its title, weight and date."""
    items = parse_schedule_from_text(SCHEDULE_TEXT, "COMP1005", 2026, 1)
    titles = [i.title for i in items]
    assert titles == ["Assignment 1", "Practical Test", "Practical Test", "Practical Test",
                      "Final Examination"]

    assignment = items[0]
    assert assignment.weight == 40
    assert assignment.date == date(2026, 4, 3)
    assert assignment.exact_time == "23:59"
    assert assignment.week == 5
    assert not assignment.is_tba


def test_multi_week_row_expands():
    """A "2-4" row becomes one item per week, dated at each week's Monday."""
    items = parse_schedule_from_text(SCHEDULE_TEXT, "COMP1005", 2026, 1)
    tests = [i for i in items if i.title == "Practical Test"]
    assert [t.week for t in tests] == [2, 3, 4]
    assert [t.date for t in tests] == [date(2026, 2, 23), date(2026, 3, 2), date(2026, 3, 9)]
    assert all(t.weight == 30 for t in tests)
    assert all(t.week_label == f"Week {t.week}" for t in tests)


def test_tba_row():
    """Rows with no usable week or day are TBA."""
    items = parse_schedule_from_text(SCHEDULE_TEXT, "COMP1005", 2026, 1)
    exam = items[-1]
    assert exam.is_tba
    assert exam.date is None
    assert exam.week_label == "Exam week"


def test_row_metadata():
    """Outcomes and late/extension flags are attached row by row."""
    items = parse_schedule_from_text(SCHEDULE_TEXT, "COMP1005", 2026, 1)
    assert items[0].outcomes == "1,2"
    assert items[0].late_accepted is False
    assert items[0].extension_considered is True
    assert items[1].outcomes == "2,3"
    assert items[-1].outcomes == "1,2,3,4"
    assert items[-1].late_accepted is False


def test_placeholder_digits():
    """Unreadable digits: weight unknown, day recovered from the suffix."""
    text = "Mid-Semester Test\n# #%\nWeek: #\nDay: ##nd April\nTime: 2:00 PM\n"
    items = parse_schedule_from_text(text, "COMP1005", 2026, 1)
    assert len(items) == 1
    item = items[0]
    assert item.title == "Mid-Semester Test"
    assert item.weight is None
    assert item.date == date(2026, 4, 22)
    assert item.exact_time == "14:00"
    assert item.week is None
    assert not item.is_tba


def test_descriptive_day_is_tba():
    """A Day: value describing the deadline makes the row TBA even with a week."""
    text = "Reflection\n10 %\nWeek: 6\nDay: Hours after your lab\nTime: TBA\n"
    items = parse_schedule_from_text(text, "COMP1005", 2026, 1)
    assert items[0].is_tba
    assert items[0].week == 6
    assert items[0].date is None


def test_empty_text():
    assert parse_schedule_from_text("", "COMP1005", 2026, 1) == []


def test_clean_title():
    assert clean_title("1 Assignment 1 - Design report") == "Assignment 1"
    assert clean_title("Practical Test (x 3)") == "Practical Test"
    assert clean_title("# Workshop Quiz ,") == "Workshop Quiz"
    assert clean_title("") == "Unknown task"


def test_parse_meta_rows():
    rows = parse_meta_rows(["1,2", "Yes", "No", "3", "No No"])
    assert rows == [
        RowMeta(outcomes="1,2", late_accepted=True, extension_considered=False),
        RowMeta(outcomes="3", late_accepted=False, extension_considered=False),
    ]


def test_extract_all_weeks():
    assert extract_all_weeks("Weeks 2-4") == [2, 3, 4]
    assert extract_all_weeks("Teaching weeks 2,3,...,6") == [2, 3, 4, 5, 6]
    assert extract_all_weeks("Weeks 3, 7 and 11") == [3, 7, 11]
    assert extract_all_weeks("Week # #") == []
    assert extract_all_weeks("Exam week") == []


def test_normalize_week_label():
    assert normalize_week_label("13") == "Week 13"
    assert normalize_week_label("13-15") == "Weeks 13-15"
    assert normalize_week_label("Examination period") == "Exam week"
    assert normalize_week_label("#") is None


def test_is_noise_line():
    assert is_noise_line("Week: 5")
    assert is_noise_line("Page 3 of 10")
    assert is_noise_line("Yes No")
    assert is_noise_line("# # #")
    assert not is_noise_line("Assignment 1")
