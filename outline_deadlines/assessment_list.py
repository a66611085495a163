"""
Parser for the flat assessment listing.

The outline service returns the unit's assessments as one pipe-delimited
string, one row per assessment, rows terminated by ";":

    1| Assignment| 40 percent| ULOs assessed 1|2|4;
    2| Practical Test| 20 percent| ULOs assessed 2|3;
    3| Final Examination| 40 percent| ULOs assessed 1|2|3|4|

The listing says which assessments exist but never when they are due.
"""

import logging
import re
from typing import List, Optional

from .models import AssessmentTitleItem

logger = logging.getLogger(__name__)

_ROW_SEPARATOR = re.compile(r";\s*\n|;\s*$")
_COLUMN_SEPARATOR = re.compile(r"\|\s*")
_WEIGHT = re.compile(r"(\d+)\s*percent", re.IGNORECASE)
_OUTCOMES_PREFIX = re.compile(r"^ULOs?\s+(?:assessed\s*)?", re.IGNORECASE)


def parse_assessment_list(text: str) -> List[AssessmentTitleItem]:
    """Parse the pipe-delimited assessment listing.

    Args:
        text: Raw listing text (may be empty)

    Returns:
        One AssessmentTitleItem per row that has a title
    """
    if not text:
        return []

    items = []
    for row in _ROW_SEPARATOR.split(text):
        if not row.strip():
            continue
        columns = _COLUMN_SEPARATOR.split(row)
        if len(columns) < 2:
            logger.debug("Skipping assessment row without columns: %r", row)
            continue

        title = columns[1].strip()
        if not title:
            continue

        weight_match = _WEIGHT.search(columns[2]) if len(columns) > 2 else None
        weight = int(weight_match.group(1)) if weight_match else None

        items.append(AssessmentTitleItem(
            title=title,
            weight=weight,
            outcomes=_parse_outcomes(columns[3:]),
        ))

    return items


def _parse_outcomes(columns: List[str]) -> Optional[str]:
    outcomes = []
    for column in columns:
        value = _OUTCOMES_PREFIX.sub("", column.strip()).strip()
        if value.isdigit():
            outcomes.append(value)
    return ",".join(outcomes) if outcomes else None
