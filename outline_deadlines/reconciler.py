"""
Reconciliation of schedule and calendar sources.

The assessment schedule knows what each assessment is (title, weight) but
often not when it is due; the program calendar knows which week things
happen in but uses shorter, generic titles. ``reconcile`` merges the two,
``add_sequence_numbers`` numbers recurring items and ``order_deadlines``
sorts the final list.
"""

import logging
from collections import Counter
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional

from .models import CalendarItem, ReconciledDeadline
from .title_match import base_title, shares_keyword, titles_match

logger = logging.getLogger(__name__)

# A schedule date this close to a calendar date is the same deadline
DUPLICATE_DATE_TOLERANCE_DAYS = 3


def _is_duplicate(resolved: CalendarItem, candidate: CalendarItem) -> bool:
    if resolved.is_tba or not titles_match(resolved.title, candidate.title):
        return False
    if resolved.week is None or resolved.week == candidate.week:
        return True
    if resolved.date and candidate.date:
        return abs((resolved.date - candidate.date).days) <= DUPLICATE_DATE_TOLERANCE_DAYS
    return False


def _find_prototype(items: List[CalendarItem], candidate: CalendarItem) -> Optional[CalendarItem]:
    """First weighted schedule entry the candidate appears to belong to."""
    for item in items:
        if item.weight is None:
            continue
        if titles_match(item.title, candidate.title) or shares_keyword(item.title, candidate.title):
            return item
    return None


def merge_calendar_items(schedule_items: Iterable[CalendarItem],
                         calendar_items: Iterable[CalendarItem]) -> List[CalendarItem]:
    """Merge calendar items into the schedule list.

    For each calendar item, in order:

    1. the first TBA schedule entry with a matching title is upgraded in place
       with the calendar's title, week and date;
    2. otherwise the item is dropped if a resolved entry with a matching title
       already covers that week (or a date within three days);
    3. otherwise it is appended, inheriting weight and row metadata from a
       related weighted schedule entry.

    Inputs are never modified.

    Args:
        schedule_items: Items from the assessment schedule or listing
        calendar_items: Calendar-sourced items

    Returns:
        New list of merged CalendarItems
    """
    merged = [replace(item) for item in schedule_items]

    for candidate in calendar_items:
        tba_index = next(
            (i for i, item in enumerate(merged)
             if item.is_tba and titles_match(item.title, candidate.title)),
            None,
        )
        if tba_index is not None:
            original = merged[tba_index]
            merged[tba_index] = replace(
                original,
                title=candidate.title,
                week=candidate.week,
                week_label=candidate.week_label,
                date=candidate.date,
                exact_time=candidate.exact_time,
                weight=candidate.weight if candidate.weight is not None else original.weight,
                is_tba=False,
                calendar_sourced=True,
            )
            logger.debug("Dated %r from calendar item %r", original.title, candidate.title)
            continue

        if any(_is_duplicate(item, candidate) for item in merged):
            continue

        prototype = _find_prototype(merged, candidate)
        if prototype is not None:
            merged.append(replace(
                candidate,
                weight=candidate.weight if candidate.weight is not None else prototype.weight,
                outcomes=prototype.outcomes,
                late_accepted=prototype.late_accepted,
                extension_considered=prototype.extension_considered,
            ))
        else:
            merged.append(replace(candidate))

    return merged


def reconcile(schedule_items: Iterable[CalendarItem],
              calendar_items: Iterable[CalendarItem],
              unit_name: Optional[str] = None) -> List[ReconciledDeadline]:
    """Merge schedule and calendar items into final deadlines.

    Pure: calling it twice on the same inputs gives equal results.

    Args:
        schedule_items: Items from the assessment schedule or listing
        calendar_items: Calendar-sourced items
        unit_name: Optional unit name attached to every deadline

    Returns:
        ReconciledDeadline list in merge order
    """
    merged = merge_calendar_items(list(schedule_items), list(calendar_items))
    return [ReconciledDeadline.from_calendar_item(item, unit_name) for item in merged]


def _sequence_key(deadline: ReconciledDeadline) -> str:
    return f"{deadline.unit}|{' '.join(base_title(deadline.title).lower().split())}"


def add_sequence_numbers(deadlines: List[ReconciledDeadline]) -> List[ReconciledDeadline]:
    """Number recurring assessments: three "Practical Test" become "Practical Test 1..3".

    Groups are keyed by unit and base title; numbering follows list order.
    Titles that occur once are left alone.

    Args:
        deadlines: Deadlines in their final order

    Returns:
        New list with renamed deadlines
    """
    counts = Counter(_sequence_key(d) for d in deadlines)
    seen: Dict[str, int] = {}
    numbered = []
    for deadline in deadlines:
        key = _sequence_key(deadline)
        if counts[key] <= 1:
            numbered.append(deadline)
            continue
        seen[key] = seen.get(key, 0) + 1
        numbered.append(replace(deadline, title=f"{base_title(deadline.title)} {seen[key]}"))
    return numbered


def order_deadlines(deadlines: Iterable[ReconciledDeadline]) -> List[ReconciledDeadline]:
    """Dated deadlines by due date and time, then TBA deadlines in their original order."""
    def sort_key(deadline: ReconciledDeadline):
        if deadline.is_tba or deadline.date is None:
            return (1, date.max, "")
        return (0, deadline.date, deadline.exact_time or "")
    return sorted(deadlines, key=sort_key)
