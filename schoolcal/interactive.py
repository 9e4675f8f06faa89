from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schoolcal.academic import academic_year_options, format_range, week_date_range
from schoolcal.model import CATEGORIES, CATEGORY_LABELS
from schoolcal.navigation import (
    ALL_TEACHERS,
    LEVEL_CATEGORIES,
    LEVEL_DETAILS,
    LEVEL_SEMESTERS,
    LEVEL_TEACHERS,
    LEVEL_WEEKS,
    LevelView,
    NavigationCoordinate,
    breadcrumbs,
    view,
    years_with_items,
)
from schoolcal.storage import load_items, load_teacher_names


console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _item_line(item: dict[str, Any]) -> str:
    dt = item["date_time"]
    title = _safe_str(item.get("title")).strip() or "(no title)"
    loc = _safe_str(item.get("location")).strip()
    cls = _safe_str(item.get("class_name")).strip()
    n_files = len(item.get("materials") or [])
    bits = [dt.strftime("%a %d %b %H:%M"), f"[bold]{escape(title)}[/]", f"[green]{item.get('kind')}[/]"]
    if cls:
        bits.append(f"[cyan]{escape(cls)}[/]")
    if loc:
        bits.append(f"@ {escape(loc)}")
    if n_files:
        bits.append(f"[yellow]{n_files}[/] files")
    return " | ".join(bits)


def _options_for(result: LevelView, teacher_names: dict[str, str]) -> list[tuple[Any, str]]:
    """
    Selectable rows of the current level as (value, label).
    """
    if result.level == LEVEL_TEACHERS:
        total = sum(result.teacher_counts.values())
        rows: list[tuple[Any, str]] = [(ALL_TEACHERS, f"[bold]All teachers[/] | [yellow]{total}[/] items")]
        ordered = sorted(result.teacher_counts.items(), key=lambda kv: teacher_names.get(kv[0], kv[0]).lower())
        for tid, n in ordered:
            rows.append((tid, f"{escape(teacher_names.get(tid, tid))} | [yellow]{n}[/] items"))
        return rows

    if result.level == LEVEL_SEMESTERS:
        return [(sem, f"Semester {sem} | [yellow]{result.semester_counts.get(sem, 0)}[/] items") for sem in (1, 2)]

    if result.level == LEVEL_CATEGORIES:
        return [
            (cat, f"{CATEGORY_LABELS[cat]} | [yellow]{result.category_counts.get(cat, 0)}[/] items")
            for cat in CATEGORIES
        ]

    if result.level == LEVEL_WEEKS:
        return [
            (b.week, f"Week {b.week} | {format_range(b.start, b.end)} | [yellow]{b.count}[/] items")
            for b in result.weeks
        ]

    return []


def _select(coord: NavigationCoordinate, value: Any) -> NavigationCoordinate:
    if coord.level == LEVEL_TEACHERS:
        return coord.select_teacher(value)
    if coord.level == LEVEL_SEMESTERS:
        return coord.select_semester(value)
    if coord.level == LEVEL_CATEGORIES:
        return coord.select_category(value)
    return coord.select_week(value)


def _print_level(
    coord: NavigationCoordinate,
    result: LevelView,
    options: list[tuple[Any, str]],
    teacher_names: dict[str, str],
) -> None:
    crumbs = " › ".join(breadcrumbs(coord, teacher_names))
    _println(f"\n=== {escape(crumbs)} ===")
    _println(f"Academic year: [bold]{coord.academic_year}[/]")

    if result.level == LEVEL_DETAILS:
        start, end = week_date_range(coord.academic_year, coord.semester, coord.week)
        _println(f"Week {coord.week}: {format_range(start, end)}")
        if not result.items:
            _println("No items in that week.")
            return
        table = Table(box=box.SIMPLE, title=f"Items ({len(result.items)})")
        table.add_column("#", justify="right")
        table.add_column("Item")
        for i, it in enumerate(result.items, start=1):
            table.add_row(str(i), _item_line(it))
        console.print(table)
        return

    if not options:
        _println("No items.")
        return

    table = Table(box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column(result.level.capitalize())
    for i, (_, label) in enumerate(options, start=1):
        table.add_row(str(i), label)
    console.print(table)


def _pick_academic_year(
    coord: NavigationCoordinate,
    items: list[dict[str, Any]],
    ask: Callable[[str], str],
) -> NavigationCoordinate:
    """
    Offer the usual picker years plus every year that has data.
    """
    years = sorted(set(academic_year_options()) | set(years_with_items(items)))
    for i, y in enumerate(years, start=1):
        marker = " (current)" if y == coord.academic_year else ""
        _println(f"{i}) {y}{marker}")
    pick = ask("Choose academic year (blank = keep): ").strip()
    if pick.isdigit() and 1 <= int(pick) <= len(years):
        return coord.select_academic_year(years[int(pick) - 1])
    return coord


def run_interactive(
    data_dir: str | Path | None = None,
    tz: Optional[str] = None,
    academic_year: Optional[str] = None,
    prompt_fn: Optional[Callable[[str], str]] = None,
) -> None:
    """
    Drill-down loop: Teachers -> Semester -> Category -> Week -> Items.
    """
    ask = prompt_fn if prompt_fn is not None else _prompt

    items, skipped = load_items(data_dir, tz=tz)
    teacher_names = load_teacher_names(data_dir)
    if skipped:
        _println(f"[yellow]Skipped {skipped} rows with missing or invalid date_time.[/]")

    coord = NavigationCoordinate.start(academic_year)

    while True:
        result = view(items, coord)
        options = _options_for(result, teacher_names)
        _print_level(coord, result, options, teacher_names)

        choice = ask("\n(number) open | (b) back | (y) academic year | (r) reload | (0) exit: ").strip().lower()

        if choice == "0":
            _println("Bye.")
            return
        if choice == "b":
            coord = coord.back()
            continue
        if choice == "y":
            coord = _pick_academic_year(coord, items, ask)
            continue
        if choice == "r":
            items, skipped = load_items(data_dir, tz=tz)
            teacher_names = load_teacher_names(data_dir)
            _println(f"Data reloaded: {len(items)} items.")
            continue
        if not choice:
            continue
        if not choice.isdigit():
            _println("Invalid choice.")
            continue

        i = int(choice)
        if not (1 <= i <= len(options)):
            _println("Out of range.")
            continue

        coord = _select(coord, options[i - 1][0])
