"""End-to-end tests for the extraction pipelines."""

from datetime import date

import pytest

from outline_deadlines import pipeline
from outline_deadlines.models import UnitOutline
from outline_deadlines.pipeline import (
    extract_deadlines_from_pdf, hint_week, outline_to_deadlines, pdf_to_deadlines
)

AS_TASK = (
    "1| Assignment| 40 percent| ULOs assessed 1|2;\n"
    "2| Practical Test| 30 percent| ULOs assessed 2|3;\n"
    "3| Final Examination| 30 percent| ULOs assessed 1|2|3|"
)

PC_TEXT = """
<table>
  <tr><th>Week</th><th>Begin Date</th><th>Lecture</th><th>Assessment</th></tr>
  <tr><td>1</td><td>16 February</td><td>Intro</td><td>-</td></tr>
  <tr><td>3</td><td>2 March</td><td>Loops</td><td>Practical Test</td></tr>
  <tr><td>5</td><td>16 March</td><td>Files</td><td>Assignment (40%) (23:59 3rd April)</td></tr>
  <tr><td>6</td><td>23 March</td><td>Arrays</td><td>Practical Test</td></tr>
</table>
"""

PDF_TEXT = """
COMP 1 0 0 5 (V. 2 ) Fundamentals of Programming
Assessment Schedule
Task
Value
1 Assignment 1 - Design report
40 %
Week: Teaching week 5
Day: 3rd April
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
Program Calendar
1. 16 February Introduction
2. 23 February Arrays
3. 2 March Functions Practical Test
4. 9 March Objects
5. 16 March Files Assignment due
"""


def test_outline_to_deadlines():
    """Listing entries are dated from the HTML calendar, the rest stay TBA."""
    outline = UnitOutline(unit_code="COMP1005", title="Fundamentals of Programming",
                          year="2026", as_task=AS_TASK, pc_text=PC_TEXT)

    deadlines = outline_to_deadlines(outline, semester=1)

    assert [d.title for d in deadlines] == [
        "Practical Test 1", "Practical Test 2", "Assignment", "Final Examination",
    ]
    first, second, assignment, exam = deadlines
    assert first.date == date(2026, 3, 2)
    assert second.date == date(2026, 3, 23)
    assert second.weight == 30
    assert assignment.date == date(2026, 4, 3)
    assert assignment.exact_time == "23:59"
    assert assignment.outcomes == "1,2"
    assert exam.is_tba
    assert all(d.unit_name == "Fundamentals of Programming" for d in deadlines)


def test_outline_without_calendar_is_all_tba():
    outline = UnitOutline(unit_code="COMP1005", title="", year="2026", as_task=AS_TASK)
    deadlines = outline_to_deadlines(outline)
    assert len(deadlines) == 3
    assert all(d.is_tba for d in deadlines)
    assert deadlines[0].unit_name is None


def test_hint_week():
    hints = {"loops": 3, "practical test": 6}
    assert hint_week("Practical Test", hints) == 6
    assert hint_week("Final Examination", hints) is None


def test_pdf_to_deadlines():
    """Schedule rows win; calendar repeats of dated rows are dropped."""
    deadlines = pdf_to_deadlines(PDF_TEXT, "COMP1005", 2026, 1)

    assert [d.title for d in deadlines] == [
        "Practical Test 1", "Practical Test 2", "Practical Test 3",
        "Assignment 1", "Final Examination",
    ]
    assert [d.date for d in deadlines[:3]] == [
        date(2026, 2, 23), date(2026, 3, 2), date(2026, 3, 9),
    ]
    assert deadlines[3].exact_time == "23:59"
    assert deadlines[-1].is_tba
    assert deadlines[0].unit_name == "Fundamentals of Programming"


def test_extract_deadlines_from_pdf_uses_filename(monkeypatch, tmp_path):
    """Unit, semester and year come from the file name when not given."""
    seen = {}

    def fake_pdf_to_deadlines(text, unit, year, semester, config=None):
        seen.update(text=text, unit=unit, year=year, semester=semester)
        return []

    monkeypatch.setattr(pipeline, "extract_pdf_text", lambda path: "text")
    monkeypatch.setattr(pipeline, "pdf_to_deadlines", fake_pdf_to_deadlines)

    extract_deadlines_from_pdf(tmp_path / "MATH1019_Semester_2_2027.pdf")
    assert seen == {"text": "text", "unit": "MATH1019", "year": 2027, "semester": 2}


def test_extract_deadlines_from_pdf_requires_unit(tmp_path):
    with pytest.raises(ValueError):
        extract_deadlines_from_pdf(tmp_path / "outline.pdf")
