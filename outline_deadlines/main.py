"""
Main CLI entry point for unit outline deadline extraction.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .cache import LookupCache, compute_document_hash, compute_text_hash, get_cache_manager
from .config import load_config
from .icalendar_gen import ICalendarGenerator
from .models import ReconciledDeadline, UnitOutline
from .outline_client import OutlineApiError, OutlineClient
from .pdf_text import ScannedDocumentError, parse_outline_filename
from .pipeline import extract_deadlines_from_pdf, outline_to_deadlines


def format_deadline(deadline: ReconciledDeadline) -> str:
    """One line of the deadline table."""
    if deadline.is_tba:
        due = "TBA"
        if deadline.week_label:
            due += f" ({deadline.week_label}?)"
    else:
        due = deadline.date.strftime("%a %d %b %Y")
        if deadline.exact_time:
            due += f" {deadline.exact_time}"
    weight = f"{deadline.weight}%" if deadline.weight is not None else "-"
    return f"  {deadline.unit:<9} {deadline.title:<40} {weight:>5}  {due}"


def print_deadlines(deadlines: List[ReconciledDeadline], as_json: bool = False):
    if as_json:
        print(json.dumps([d.to_dict() for d in deadlines], indent=2))
        return
    if not deadlines:
        print("No assessments found.")
        return
    print(f"\n{len(deadlines)} deadline(s):")
    for deadline in deadlines:
        print(format_deadline(deadline))


def write_outputs(deadlines: List[ReconciledDeadline], args, timezone_str: str):
    """Write the optional .ics and JSON files requested on the command line."""
    if args.ics:
        cal_gen = ICalendarGenerator(timezone_str=timezone_str)
        calendar = cal_gen.generate_calendar(deadlines)
        cal_gen.export_to_file(calendar, Path(args.ics))
        print(f"Saved calendar to: {args.ics}", file=sys.stderr if args.json else sys.stdout)
    if args.output:
        with open(args.output, 'w') as f:
            json.dump([d.to_dict() for d in deadlines], f, indent=2)
        print(f"Saved deadlines to: {args.output}", file=sys.stderr if args.json else sys.stdout)


def run_pdf(args, config) -> List[ReconciledDeadline]:
    pdf_path = Path(args.pdf_path)
    if not pdf_path.exists():
        print(f"Error: PDF file not found: {pdf_path}")
        sys.exit(1)

    info = parse_outline_filename(pdf_path.name)
    unit = args.unit or info.unit
    year = args.year or info.year or date.today().year
    semester = args.semester or info.semester

    cache_manager = None if args.no_cache else get_cache_manager(config.cache_dir)
    # Dates depend on the unit, year and semester as well as the document
    cache_key = compute_text_hash(compute_document_hash(pdf_path), unit, str(year), str(semester))
    if cache_manager:
        cached = cache_manager.lookup(cache_key)
        if cached is not None:
            logging.getLogger(__name__).info("Using cached deadlines for %s", pdf_path)
            return cached

    deadlines = extract_deadlines_from_pdf(
        pdf_path, unit=unit, year=year, semester=semester, config=config
    )
    if cache_manager:
        cache_manager.store(cache_key, deadlines, unit=unit)
    return deadlines


def run_outline(args, config) -> List[ReconciledDeadline]:
    as_task = Path(args.as_task).read_text(encoding="utf-8")
    pc_text = Path(args.pc_text).read_text(encoding="utf-8") if args.pc_text else ""
    title = args.title or ""
    outline = UnitOutline(unit_code=args.unit, title=title, year=str(args.year),
                          as_task=as_task, pc_text=pc_text)

    cache_manager = None if args.no_cache else get_cache_manager(config.cache_dir)
    cache_key = compute_text_hash(args.unit, str(args.semester), str(args.year), title,
                                  as_task, pc_text)
    if cache_manager:
        cached = cache_manager.lookup(cache_key)
        if cached is not None:
            return cached

    deadlines = outline_to_deadlines(outline, args.unit, args.semester, args.year, config)
    if cache_manager:
        cache_manager.store(cache_key, deadlines, unit=args.unit)
    return deadlines


def run_fetch(args, config) -> List[ReconciledDeadline]:
    client = OutlineClient(lookup_cache=LookupCache())
    outline = client.fetch_outline(args.unit, args.semester, args.year)
    return outline_to_deadlines(outline, outline.unit_code, args.semester, args.year, config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract assessment deadlines from university unit outlines"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub, unit_required: bool):
        sub.add_argument("--unit", required=unit_required, help="Unit code, e.g. COMP1005")
        sub.add_argument("--semester", type=int, choices=(1, 2),
                         default=None if not unit_required else 1, help="Semester (1 or 2)")
        sub.add_argument("--year", type=int, help="Academic year, e.g. 2026")
        sub.add_argument("--json", action="store_true", help="Print deadlines as JSON")
        sub.add_argument("--ics", type=str, help="Write an iCalendar file to this path")
        sub.add_argument("--output", type=str, help="Write deadlines as JSON to this path")

    pdf = subparsers.add_parser("pdf", help="Extract deadlines from an outline PDF")
    pdf.add_argument("pdf_path", type=str, help="Path to unit outline PDF file")
    add_common(pdf, unit_required=False)
    pdf.add_argument("--no-cache", action="store_true",
                     help="Disable caching (reprocess PDF even if cached)")
    pdf.set_defaults(handler=run_pdf)

    outline = subparsers.add_parser(
        "outline", help="Extract deadlines from a saved assessment listing and program calendar"
    )
    outline.add_argument("--as-task", required=True, help="File with the pipe-delimited assessment listing")
    outline.add_argument("--pc-text", help="File with the HTML program calendar")
    outline.add_argument("--title", help="Unit name")
    add_common(outline, unit_required=True)
    outline.add_argument("--no-cache", action="store_true", help="Disable caching")
    outline.set_defaults(handler=run_outline)

    fetch = subparsers.add_parser("fetch", help="Fetch a unit outline online and extract deadlines")
    fetch.add_argument("unit_code", help="Unit code, e.g. COMP1005")
    fetch.add_argument("--semester", type=int, choices=(1, 2), default=1, help="Semester (1 or 2)")
    fetch.add_argument("--year", type=int, required=True, help="Academic year, e.g. 2026")
    fetch.add_argument("--json", action="store_true", help="Print deadlines as JSON")
    fetch.add_argument("--ics", type=str, help="Write an iCalendar file to this path")
    fetch.add_argument("--output", type=str, help="Write deadlines as JSON to this path")
    fetch.set_defaults(handler=run_fetch)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "outline" and args.year is None:
        parser.error("--year is required for the outline command")
    if args.command == "fetch":
        args.unit = args.unit_code

    config = load_config()
    try:
        deadlines = args.handler(args, config)
    except (OutlineApiError, ScannedDocumentError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_deadlines(deadlines, as_json=args.json)
    write_outputs(deadlines, args, config.timezone)


if __name__ == "__main__":
    main()
