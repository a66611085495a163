"""Unit tests for PDF text extraction helpers."""

import pytest

from outline_deadlines import pdf_text
from outline_deadlines.pdf_text import (
    ScannedDocumentError, extract_pdf_text, normalize_glyphs, page_lines,
    parse_outline_filename, parse_unit_name
)


class FakePage:
    def __init__(self, words):
        self.words = words

    def extract_words(self, **kwargs):
        return self.words


class FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _word(text, top):
    return {"text": text, "top": top}


def test_normalize_glyphs():
    """Unmapped glyphs become placeholders; lost ligatures are closed up."""
    assert normalize_glyphs("Day: (cid:18)(cid:19)nd May") == "Day: ##nd May"
    assert normalize_glyphs("Week \x00") == "Week #"
    assert normalize_glyphs("Re (cid:3) ection") == "Reection"


def test_page_lines_groups_words_by_position():
    page = FakePage([
        _word("Assignment", 100.0), _word("1", 100.5),
        _word("40", 112.0), _word("%", 112.2),
        _word("Week:", 125.0), _word("5", 126.0),
    ])
    assert page_lines(page) == "Assignment 1\n40 %\nWeek: 5"


def test_extract_pdf_text(monkeypatch, tmp_path):
    words = [_word("Assessment Schedule for Fundamentals of Programming", 10)] + [
        _word(f"Week: {n} Day: (cid:5)rd May Time: 23:59", 20 + n * 10) for n in range(3)
    ]
    monkeypatch.setattr(pdf_text.pdfplumber, "open", lambda path: FakePdf([FakePage(words)]))

    text = extract_pdf_text(tmp_path / "COMP1005.pdf")
    assert text.splitlines()[0] == "Assessment Schedule for Fundamentals of Programming"
    assert "Day: #rd May" in text


def test_scanned_pdf_is_rejected(monkeypatch, tmp_path):
    monkeypatch.setattr(pdf_text.pdfplumber, "open",
                        lambda path: FakePdf([FakePage([]), FakePage([_word("1", 5)])]))
    with pytest.raises(ScannedDocumentError):
        extract_pdf_text(tmp_path / "scan.pdf")


def test_parse_unit_name():
    text = "Faculty of Science\nCOMP 1 0 0 5 (V. 2 ) Fundamentals of Programming\nAssessment Schedule"
    assert parse_unit_name(text, "COMP1005") == "Fundamentals of Programming"
    assert parse_unit_name(text) is None
    assert parse_unit_name("no header here", "COMP1005") is None


def test_parse_outline_filename():
    info = parse_outline_filename("COMP1005_Semester_2_2026.pdf")
    assert info.unit == "COMP1005"
    assert info.semester == 2
    assert info.year == 2026

    info = parse_outline_filename("/tmp/outlines/ISYS2001 outline.pdf")
    assert info.unit == "ISYS2001"
    assert info.semester == 1
    assert info.year is None
