"""Tests for the command line interface."""

import json
from datetime import date

import pytest

from outline_deadlines import main as cli
from outline_deadlines.config import load_config
from outline_deadlines.models import ReconciledDeadline
from outline_deadlines.semester import week_to_date

AS_TASK = "1| Assignment| 40 percent| ULOs assessed 1|2;\n2| Final Examination| 60 percent|"
PC_TEXT = (
    "<table><tr><th>Week</th><th>Begin Date</th><th>Assessment</th></tr>"
    "<tr><td>5</td><td>16 March</td><td>Assignment (23:59 3rd April)</td></tr></table>"
)


@pytest.fixture
def outline_files(tmp_path):
    as_task = tmp_path / "as_task.txt"
    as_task.write_text(AS_TASK, encoding="utf-8")
    pc_text = tmp_path / "pc_text.html"
    pc_text.write_text(PC_TEXT, encoding="utf-8")
    return as_task, pc_text


def test_outline_command_json(outline_files, tmp_path, capsys):
    """The outline command prints reconciled deadlines as JSON."""
    as_task, pc_text = outline_files
    cli.main(["outline", "--unit", "COMP1005", "--year", "2026", "--as-task", str(as_task),
              "--pc-text", str(pc_text), "--json", "--no-cache"])

    data = json.loads(capsys.readouterr().out)
    assert [d["title"] for d in data] == ["Assignment", "Final Examination"]
    assert data[0]["date"] == "2026-04-03"
    assert data[0]["exact_time"] == "23:59"
    assert data[1]["is_tba"] is True


def test_outline_command_writes_files(outline_files, tmp_path, capsys):
    as_task, pc_text = outline_files
    ics = tmp_path / "out.ics"
    output = tmp_path / "out.json"
    cli.main(["outline", "--unit", "COMP1005", "--year", "2026", "--as-task", str(as_task),
              "--pc-text", str(pc_text), "--no-cache", "--ics", str(ics), "--output", str(output)])

    assert ics.read_bytes().startswith(b"BEGIN:VCALENDAR")
    assert len(json.loads(output.read_text())) == 2
    assert "2 deadline(s)" in capsys.readouterr().out


def test_outline_command_uses_cache(outline_files, tmp_path, monkeypatch, capsys):
    """A second run is answered from the cache."""
    monkeypatch.setenv("OUTLINE_DEADLINES_CACHE_DIR", str(tmp_path / "cache"))
    as_task, pc_text = outline_files
    argv = ["outline", "--unit", "COMP1005", "--year", "2026", "--as-task", str(as_task),
            "--pc-text", str(pc_text), "--json"]
    cli.main(argv)
    first = capsys.readouterr().out

    def fail(*args, **kwargs):
        raise AssertionError("extraction should not run on a cache hit")

    monkeypatch.setattr(cli, "outline_to_deadlines", fail)
    cli.main(argv)
    assert capsys.readouterr().out == first


def test_pdf_command_cache_keyed_by_semester(tmp_path, monkeypatch, capsys):
    """The same PDF run for another semester is extracted again, not served from the cache."""
    monkeypatch.setenv("OUTLINE_DEADLINES_CACHE_DIR", str(tmp_path / "cache"))
    pdf = tmp_path / "COMP1005_2026.pdf"
    pdf.write_bytes(b"%PDF-1.4 outline")
    calls = []

    def fake_extract(pdf_path, unit=None, year=None, semester=None, config=None):
        calls.append((unit, year, semester))
        return [ReconciledDeadline(title="Assignment", unit=unit, week=5,
                                   date=week_to_date(semester, year, 5), is_tba=False)]

    monkeypatch.setattr(cli, "extract_deadlines_from_pdf", fake_extract)

    cli.main(["pdf", str(pdf), "--semester", "1", "--json"])
    assert json.loads(capsys.readouterr().out)[0]["date"] == "2026-03-16"
    cli.main(["pdf", str(pdf), "--semester", "2", "--json"])
    assert json.loads(capsys.readouterr().out)[0]["date"] == "2026-08-17"
    cli.main(["pdf", str(pdf), "--semester", "1", "--json"])
    assert json.loads(capsys.readouterr().out)[0]["date"] == "2026-03-16"

    assert calls == [("COMP1005", 2026, 1), ("COMP1005", 2026, 2)]


def test_outline_command_cache_keyed_by_title(outline_files, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("OUTLINE_DEADLINES_CACHE_DIR", str(tmp_path / "cache"))
    as_task, pc_text = outline_files
    argv = ["outline", "--unit", "COMP1005", "--year", "2026", "--as-task", str(as_task),
            "--pc-text", str(pc_text), "--json"]
    cli.main(argv + ["--title", "Fundamentals of Programming"])
    capsys.readouterr()

    titles = []
    real = cli.outline_to_deadlines

    def spy(outline, *args):
        titles.append(outline.title)
        return real(outline, *args)

    monkeypatch.setattr(cli, "outline_to_deadlines", spy)
    cli.main(argv + ["--title", "Programming Fundamentals"])
    assert titles == ["Programming Fundamentals"]


def test_outline_command_requires_year(outline_files):
    as_task, _ = outline_files
    with pytest.raises(SystemExit):
        cli.main(["outline", "--unit", "COMP1005", "--as-task", str(as_task)])


def test_missing_pdf_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["pdf", str(tmp_path / "missing.pdf"), "--no-cache"])
    assert exc.value.code == 1
    assert "not found" in capsys.readouterr().out


def test_format_deadline():
    dated = ReconciledDeadline(title="Quiz", unit="COMP1005", date=date(2026, 3, 9),
                               exact_time="09:00", is_tba=False, weight=5)
    assert "Mon 09 Mar 2026 09:00" in cli.format_deadline(dated)
    assert "5%" in cli.format_deadline(dated)

    tba = ReconciledDeadline(title="Exam", unit="COMP1005", week_label="Exam week")
    assert "TBA (Exam week?)" in cli.format_deadline(tba)


def test_load_config_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("OUTLINE_DEADLINES_TIMEZONE", "Australia/Sydney")
    monkeypatch.setenv("OUTLINE_DEADLINES_CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("OUTLINE_DEADLINES_BREAK_KEYWORDS", "Reading Week")
    config = load_config()
    assert config.timezone == "Australia/Sydney"
    assert config.cache_dir == tmp_path
    assert config.break_week_pattern().search("reading week")
    assert config.calendar_break_pattern().search("Reading Week")
