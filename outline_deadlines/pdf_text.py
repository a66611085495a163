"""
Text extraction from outline PDFs.

Produces the line-oriented text the schedule and program-calendar parsers
expect. Glyphs without a text mapping (NUL characters, or pdfplumber's
"(cid:N)" markers) become "#", the placeholder for an unreadable digit.
"""

import logging
import re
from pathlib import Path
from typing import NamedTuple, Optional

import pdfplumber

from .digits import PLACEHOLDER

logger = logging.getLogger(__name__)

# A new line starts when a word sits more than this many points lower/higher
LINE_TOLERANCE = 3
# Fewer visible characters than this means the PDF has no text layer
MIN_TEXT_CHARS = 50

_UNMAPPED_GLYPH = re.compile(r"\(cid:\d+\)|\x00")
_VERSION_MARKER = re.compile(r"\(V\.\s*[#\d][^)]*\)\s*(.+)$", re.IGNORECASE)


class ScannedDocumentError(ValueError):
    """Raised when a PDF has no extractable text layer."""


class OutlineFileInfo(NamedTuple):
    unit: Optional[str]
    semester: int
    year: Optional[int]


def normalize_glyphs(text: str) -> str:
    """Replace unmapped glyphs with the placeholder and rejoin split words."""
    text = _UNMAPPED_GLYPH.sub(PLACEHOLDER, text)
    # A lone placeholder between letters is a lost ligature, not a digit
    return re.sub(r"([a-zA-Z]) # ([a-zA-Z])", r"\1\2", text)


def page_lines(page) -> str:
    """Rebuild a page's lines from word positions."""
    words = page.extract_words(use_text_flow=True, keep_blank_chars=False)
    lines = []
    current = []
    last_top = None
    for word in words:
        if last_top is not None and abs(word["top"] - last_top) > LINE_TOLERANCE:
            lines.append(" ".join(current))
            current = []
        current.append(word["text"])
        last_top = word["top"]
    if current:
        lines.append(" ".join(current))
    return "\n".join(lines)


def extract_pdf_text(pdf_path: Path) -> str:
    """Extract the text of every page of an outline PDF.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        Page texts joined by newlines, placeholders in place of unmapped glyphs

    Raises:
        ScannedDocumentError: If the PDF has no text layer
    """
    pages = []
    with pdfplumber.open(pdf_path) as pdf:
        for page in pdf.pages:
            pages.append(page_lines(page))

    text = normalize_glyphs("\n\n".join(pages))
    if len(re.sub(r"\s", "", text)) < MIN_TEXT_CHARS:
        raise ScannedDocumentError(
            f"{Path(pdf_path).name} has no text layer (scanned PDF?); "
            "use the unit's digital outline instead"
        )
    logger.debug("Extracted %d pages from %s", len(pages), pdf_path)
    return text


def parse_unit_name(text: str, unit_code: Optional[str] = None) -> Optional[str]:
    """Read the unit name from the outline header.

    The header line looks like "COMP 1 0 0 5 (V. 2 ) Fundamentals of
    Programming"; the name is whatever follows the version marker.

    Args:
        text: Extracted PDF text
        unit_code: Unit code; without one no name is looked up

    Returns:
        The unit name, or None if the header has no recognisable name
    """
    if not unit_code:
        return None
    header = [line.strip() for line in text.split("\n") if line.strip()][:20]
    for line in header:
        match = _VERSION_MARKER.search(line)
        if not match:
            continue
        candidate = re.sub(r"\s{2,}", " ", match.group(1).replace(PLACEHOLDER, "")).strip()
        if len(candidate) >= 5 and " " in candidate and candidate[0].isupper():
            return candidate
    return None


def parse_outline_filename(filename: str) -> OutlineFileInfo:
    """Unit code, semester and year from a file name like "COMP1005_Semester_1_2026.pdf".

    Semester defaults to 1; unit and year are None when absent.
    """
    name = Path(filename).name
    unit = re.search(r"([A-Z]{2,4}\d{4})", name)
    semester = re.search(r"[Ss]emester\s*_?([12])", name)
    year = re.search(r"(?<![\dA-Za-z])(20\d{2})(?!\d)", name)
    return OutlineFileInfo(
        unit=unit.group(1) if unit else None,
        semester=int(semester.group(1)) if semester else 1,
        year=int(year.group(1)) if year else None,
    )
