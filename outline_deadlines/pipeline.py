"""
End-to-end extraction pipelines.

Two kinds of input are supported:

- the outline service payload (pipe-delimited assessment listing plus an
  HTML program calendar), handled by ``outline_to_deadlines``;
- the text of an outline PDF (assessment schedule plus program calendar
  sections), handled by ``pdf_to_deadlines``.

Both end the same way: reconcile, sort, number recurring items.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from .assessment_list import parse_assessment_list
from .config import DEFAULT_CONFIG, EngineConfig
from .html_calendar import build_week_hints, parse_calendar_table
from .models import AssessmentTitleItem, CalendarItem, ReconciledDeadline, UnitOutline
from .pdf_text import extract_pdf_text, parse_outline_filename, parse_unit_name
from .program_calendar import parse_calendar_from_text
from .reconciler import add_sequence_numbers, order_deadlines, reconcile
from .schedule_parser import parse_schedule_from_text
from .title_match import titles_overlap

logger = logging.getLogger(__name__)


def _finish(deadlines: List[ReconciledDeadline]) -> List[ReconciledDeadline]:
    return add_sequence_numbers(order_deadlines(deadlines))


def hint_week(title: str, hints: Dict[str, int]) -> Optional[int]:
    """Teaching week of the first calendar cell whose text matches the title."""
    for text, week in hints.items():
        if titles_overlap(text, title):
            return week
    return None


def inventory_to_schedule(inventory: List[AssessmentTitleItem], unit: str,
                          hints: Dict[str, int]) -> List[CalendarItem]:
    """Turn listing rows into undated schedule items, with a week hint where one exists."""
    items = []
    for entry in inventory:
        week = hint_week(entry.title, hints)
        items.append(CalendarItem(
            title=entry.title,
            unit=unit,
            week=week,
            weight=entry.weight,
            outcomes=entry.outcomes,
            is_tba=True,
            week_label=f"Week {week}" if week else None,
        ))
    return items


def outline_to_deadlines(outline: UnitOutline, unit_code: Optional[str] = None,
                         semester: int = 1, year: Optional[int] = None,
                         config: Optional[EngineConfig] = None) -> List[ReconciledDeadline]:
    """Deadlines for a unit from its outline service payload.

    The assessment listing decides which assessments exist; the HTML program
    calendar dates them. Listing entries the calendar never mentions stay TBA.

    Args:
        outline: Outline payload
        unit_code: Unit code (defaults to the payload's)
        semester: 1 or 2
        year: Academic year (defaults to the payload's, then the current year)
        config: Keyword configuration

    Returns:
        Ordered, numbered deadlines
    """
    config = config or DEFAULT_CONFIG
    unit = unit_code or outline.unit_code
    if year is None:
        year = int(outline.year) if str(outline.year).isdigit() else date.today().year

    inventory = parse_assessment_list(outline.as_task)
    calendar = parse_calendar_table(outline.pc_text, unit, semester, year, config)
    hints = build_week_hints(outline.pc_text, config)
    schedule = inventory_to_schedule(inventory, unit, hints)

    logger.info("%s S%d %d: %d listed assessments, %d calendar items",
                unit, semester, year, len(inventory), len(calendar))

    deadlines = _finish(reconcile(schedule, calendar, unit_name=outline.title or None))
    logger.info("%s: %d deadlines (%d TBA)", unit, len(deadlines),
                sum(1 for d in deadlines if d.is_tba))
    return deadlines


def pdf_to_deadlines(text: str, unit: str, year: int, semester: int,
                     config: Optional[EngineConfig] = None) -> List[ReconciledDeadline]:
    """Deadlines for a unit from the extracted text of its outline PDF.

    Args:
        text: Extracted PDF text
        unit: Unit code
        year: Academic year
        semester: 1 or 2
        config: Keyword configuration

    Returns:
        Ordered, numbered deadlines
    """
    config = config or DEFAULT_CONFIG
    schedule = parse_schedule_from_text(text, unit, year, semester, config)
    calendar = parse_calendar_from_text(text, unit, year, semester, config)
    logger.info("%s S%d %d: %d schedule items, %d program calendar items",
                unit, semester, year, len(schedule), len(calendar))

    unit_name = parse_unit_name(text, unit)
    return _finish(reconcile(schedule, calendar, unit_name=unit_name))


def extract_deadlines_from_pdf(pdf_path: Path, unit: Optional[str] = None,
                               year: Optional[int] = None, semester: Optional[int] = None,
                               config: Optional[EngineConfig] = None) -> List[ReconciledDeadline]:
    """Read a PDF and run ``pdf_to_deadlines``, filling gaps from the file name.

    Raises:
        ScannedDocumentError: If the PDF has no text layer
        ValueError: If no unit code is given or found in the file name
    """
    info = parse_outline_filename(str(pdf_path))
    unit = unit or info.unit
    if not unit:
        raise ValueError(f"Cannot tell the unit code from {Path(pdf_path).name}; pass it explicitly")
    year = year or info.year or date.today().year
    semester = semester or info.semester

    text = extract_pdf_text(pdf_path)
    return pdf_to_deadlines(text, unit, year, semester, config)
