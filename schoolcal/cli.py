"""
CLI (Command Line Interface).

Quick terminal commands on top of the exported schedule data, e.g.:

    schoolcal locate 2024-07-08T09:00
    schoolcal week-range 2024/2025 1 2
    schoolcal semesters --teacher T1
    schoolcal weeks --semester 1 --category lesson-plan
    schoolcal week --semester 1 --category task --week 2
    schoolcal expand --date 2025-01-06 --class 5A=08:00-09:00 --set title="Quiz 1"
    schoolcal interactive

Note:
- The drill-down browser lives in schoolcal/interactive.py
- This CLI prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Optional

from schoolcal.academic import (
    current_coordinate,
    format_range,
    locate,
    parse_instant,
    time_zone,
    week_date_range,
)
from schoolcal.expand import ExpansionError, expand, parse_class_spec
from schoolcal.model import CATEGORIES, DERIVED_RECORD_KEYS
from schoolcal.navigation import ALL_TEACHERS, NavigationCoordinate, breadcrumbs, view
from schoolcal.storage import load_class_types, load_items, load_teacher_names, save_requests


def _event_line(item: dict[str, Any]) -> str:
    dt = item["date_time"]
    title = str(item.get("title") or "").strip() or "(no title)"
    loc = str(item.get("location") or "").strip()
    cls = str(item.get("class_name") or "").strip()
    bits = [dt.strftime("%a %Y-%m-%d %H:%M"), title, f"({item.get('kind')})"]
    if cls:
        bits.append(cls)
    if loc:
        bits.append(f"@ {loc}")
    return " | ".join(bits)


def _load(args: argparse.Namespace) -> list[dict[str, Any]]:
    items, skipped = load_items(args.data_dir, tz=args.tz)
    if skipped:
        print(f"Warning: skipped {skipped} rows with missing or invalid date_time.")
    return items


def _coordinate(args: argparse.Namespace) -> NavigationCoordinate:
    """
    Build the navigation coordinate from --year/--teacher/--semester/--category/--week.
    """
    coord = NavigationCoordinate.start(args.year)
    coord = coord.select_teacher(args.teacher or ALL_TEACHERS)
    if getattr(args, "semester", None) is not None:
        coord = coord.select_semester(args.semester)
    if getattr(args, "category", None):
        coord = coord.select_category(args.category)
    if getattr(args, "week", None) is not None:
        coord = coord.select_week(args.week)
    return coord


def _cmd_locate(args: argparse.Namespace) -> int:
    """
    Print academic year, semester, week and week range of one timestamp.
    """
    try:
        dt = parse_instant(args.timestamp, tz=args.tz)
    except ValueError as e:
        print(str(e))
        return 1

    c = locate(dt)
    start, end = week_date_range(c.academic_year, c.semester, c.week)
    print(f"{dt.isoformat(timespec='minutes')} -> {c.academic_year} | Semester {c.semester} | Week {c.week}")
    print(f"Week range: {start.isoformat()} .. {end.isoformat()} ({format_range(start, end)})")
    return 0


def _cmd_week_range(args: argparse.Namespace) -> int:
    try:
        start, end = week_date_range(args.academic_year, args.semester, args.week)
    except ValueError as e:
        print(str(e))
        return 1
    print(f"{args.academic_year} | Semester {args.semester} | Week {args.week}: {start.isoformat()} .. {end.isoformat()}")
    return 0


def _cmd_semesters(args: argparse.Namespace) -> int:
    try:
        coord = _coordinate(args)
    except ValueError as e:
        print(str(e))
        return 1

    result = view(_load(args), coord)
    print(" > ".join(breadcrumbs(coord, load_teacher_names(args.data_dir))) + f" ({coord.academic_year})")
    for sem in (1, 2):
        print(f"Semester {sem}: {result.semester_counts.get(sem, 0)} items")
    return 0


def _cmd_weeks(args: argparse.Namespace) -> int:
    try:
        coord = _coordinate(args)
    except ValueError as e:
        print(str(e))
        return 1

    result = view(_load(args), coord)
    print(" > ".join(breadcrumbs(coord, load_teacher_names(args.data_dir))) + f" ({coord.academic_year})")
    if not result.weeks:
        print("No items.")
        return 0
    for b in result.weeks:
        print(f"Week {b.week:>2} | {format_range(b.start, b.end)} | {b.count} items")
    return 0


def _cmd_week(args: argparse.Namespace) -> int:
    try:
        coord = _coordinate(args)
    except ValueError as e:
        print(str(e))
        return 1

    result = view(_load(args), coord)
    print(" > ".join(breadcrumbs(coord, load_teacher_names(args.data_dir))) + f" ({coord.academic_year})")
    if not result.items:
        print("No items in that week.")
        return 0
    for it in result.items:
        print(f"- {_event_line(it)}")
    return 0


def _parse_payload(pairs: list[str]) -> dict[str, Any]:
    """
    --set key=value pairs -> payload dict. Values that parse as JSON are decoded.
    """
    payload: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid --set value (expected key=value): {pair!r}")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid --set value (empty key): {pair!r}")
        if key in DERIVED_RECORD_KEYS:
            raise ValueError(f"Invalid --set value ({key} is filled in per record): {pair!r}")
        try:
            payload[key] = json.loads(value)
        except json.JSONDecodeError:
            payload[key] = value
    return payload


def _cmd_expand(args: argparse.Namespace) -> int:
    try:
        assignments = [parse_class_spec(s) for s in args.classes]
        payload = _parse_payload(args.set)
    except ValueError as e:
        print(str(e))
        return 1

    try:
        requests = expand(args.dates, assignments, payload, class_types=load_class_types(args.data_dir))
    except ExpansionError as e:
        print("Cannot expand schedule:")
        for err in e.errors:
            print(f"- {err}")
        return 1

    for r in requests:
        print(f"{r.date.isoformat()} {r.start}-{r.end} | {r.class_id} ({r.class_type}) | {r.academic_year} S{r.semester}")
    print(f"Expanded {len(requests)} schedules.")

    out_path = (args.out or "").strip()
    if out_path:
        n = save_requests(requests, out_path, tz_offset=args.tz_offset)
        print(f"Wrote {n} records to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schoolcal", description="Academic calendar & schedule index CLI")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory with sessions/tests/teachers/classes JSON")
    parser.add_argument("--tz", type=str, default=None, help="Local time zone for aware timestamps (e.g. Asia/Jakarta)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_locate = sub.add_parser("locate", help="Academic year / semester / week of a timestamp")
    p_locate.add_argument("timestamp", type=str, help="ISO timestamp (e.g. 2024-07-08T09:00)")

    p_range = sub.add_parser("week-range", help="Date range of a semester week")
    p_range.add_argument("academic_year", type=str, help="Academic year (e.g. 2024/2025)")
    p_range.add_argument("semester", type=int, choices=[1, 2])
    p_range.add_argument("week", type=int)

    def add_scope(p: argparse.ArgumentParser) -> None:
        p.add_argument("--year", type=str, default=None, help="Academic year (default: current)")
        p.add_argument("--teacher", type=str, default=None, help="Teacher id (default: all teachers)")

    p_sem = sub.add_parser("semesters", help="Item counts per semester")
    add_scope(p_sem)

    p_weeks = sub.add_parser("weeks", help="Item counts per week of a semester/category")
    add_scope(p_weeks)
    p_weeks.add_argument("--semester", type=int, choices=[1, 2], required=True)
    p_weeks.add_argument("--category", type=str, choices=list(CATEGORIES), required=True)

    p_week = sub.add_parser("week", help="Items of one week, in chronological order")
    add_scope(p_week)
    p_week.add_argument("--semester", type=int, choices=[1, 2], required=True)
    p_week.add_argument("--category", type=str, choices=list(CATEGORIES), required=True)
    p_week.add_argument("--week", type=int, required=True)

    p_expand = sub.add_parser("expand", help="Expand dates x classes into schedule records")
    p_expand.add_argument("--date", dest="dates", action="append", default=[], help="Date YYYY-MM-DD (repeatable)")
    p_expand.add_argument(
        "--class", dest="classes", action="append", default=[], help="CLASS=HH:MM-HH:MM[:type] (repeatable)"
    )
    p_expand.add_argument("--set", action="append", default=[], help="Shared payload field key=value (repeatable)")
    p_expand.add_argument("--tz-offset", type=str, default=None, help="Offset appended to date_time (e.g. +07:00)")
    p_expand.add_argument("--out", type=str, default=None, help="Write records to this JSON file")

    sub.add_parser("interactive", help="Interactive drill-down browser")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.tz:
        try:
            time_zone(args.tz)
        except ValueError as e:
            print(str(e))
            raise SystemExit(1)

    if args.command == "locate":
        raise SystemExit(_cmd_locate(args))
    if args.command == "week-range":
        raise SystemExit(_cmd_week_range(args))
    if args.command == "semesters":
        raise SystemExit(_cmd_semesters(args))
    if args.command == "weeks":
        raise SystemExit(_cmd_weeks(args))
    if args.command == "week":
        raise SystemExit(_cmd_week(args))
    if args.command == "expand":
        raise SystemExit(_cmd_expand(args))

    if args.command == "interactive":
        from schoolcal.interactive import run_interactive

        run_interactive(data_dir=args.data_dir, tz=args.tz, academic_year=current_coordinate().academic_year)
        raise SystemExit(0)

    raise SystemExit(2)
