"""
Schedule indexing.

Groups shaped schedule items (see schoolcal.shape) into the drill-down
hierarchy used by the schedule browsers:

    Teachers -> Semester -> Category -> Week -> Items

Every function returns a fresh result and never mutates its input.
Callers scope the item list first (academic year, teacher), then ask for
the grouping of the level they display.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Any, Iterable

from schoolcal.academic import academic_year_of, semester_of, week_date_range, week_in_semester
from schoolcal.model import (
    CATEGORIES,
    CATEGORY_LESSON_PLAN,
    CATEGORY_MATERIALS,
    CATEGORY_TASK,
    KIND_SESSION,
    KIND_TEST,
    WeekBucket,
)


Item = dict[str, Any]


def _week_of(item: Item) -> int:
    dt = item["date_time"]
    return week_in_semester(dt, academic_year_of(dt))


def _chrono_key(item: Item) -> tuple:
    # id breaks ties so equal timestamps still render in a stable order
    return (item["date_time"], str(item.get("id", "")))


# ---------------------------------------------------------------------------
# Scope filters
# ---------------------------------------------------------------------------


def filter_by_academic_year(items: Iterable[Item], academic_year: str) -> list[Item]:
    return [it for it in items if academic_year_of(it["date_time"]) == academic_year]


def filter_by_semester(items: Iterable[Item], semester: int) -> list[Item]:
    return [it for it in items if semester_of(it["date_time"]) == semester]


def filter_by_teacher(items: Iterable[Item], teacher_id: str) -> list[Item]:
    tid = str(teacher_id or "").strip()
    return [it for it in items if str(it.get("teacher_id", "")).strip() == tid]


def in_category(item: Item, category: str) -> bool:
    """
    Category predicate.

    'materials' only looks at sessions: a test never counts as material,
    even when it carries files.
    """
    kind = item.get("kind")
    if category == CATEGORY_MATERIALS:
        return kind == KIND_SESSION and bool(item.get("materials"))
    if category == CATEGORY_LESSON_PLAN:
        return kind == KIND_SESSION
    if category == CATEGORY_TASK:
        return kind == KIND_TEST
    raise ValueError(f"Unknown category: {category!r}")


def filter_by_category(items: Iterable[Item], category: str) -> list[Item]:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category!r}")
    return [it for it in items if in_category(it, category)]


# ---------------------------------------------------------------------------
# Groupings
# ---------------------------------------------------------------------------


def count_by_semester(items: Iterable[Item]) -> dict[int, int]:
    """
    {1: n, 2: n} for items already restricted to one academic year.
    """
    counts = {1: 0, 2: 0}
    for it in items:
        counts[semester_of(it["date_time"])] += 1
    return counts


def count_by_category(items: Iterable[Item]) -> dict[str, int]:
    materialized = list(items)
    return {cat: sum(1 for it in materialized if in_category(it, cat)) for cat in CATEGORIES}


def count_by_teacher(items: Iterable[Item]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for it in items:
        tid = str(it.get("teacher_id", "")).strip()
        if tid:
            counts[tid] += 1
    return dict(counts)


def group_by_week(items: Iterable[Item], academic_year: str, semester: int) -> list[WeekBucket]:
    """
    Week buckets for a semester, sorted by week number (not first-seen order).

    Each bucket's date range comes from the (academic_year, semester) being
    browsed, independent of which items landed in it.
    """
    counts: dict[int, int] = defaultdict(int)
    for it in items:
        counts[_week_of(it)] += 1

    buckets: list[WeekBucket] = []
    for week in sorted(counts):
        start, end = week_date_range(academic_year, semester, week)
        buckets.append(WeekBucket(week=week, count=counts[week], start=start, end=end))
    return buckets


def items_in_week(items: Iterable[Item], week: int) -> list[Item]:
    """
    Items of one week, in chronological order.
    """
    return sorted((it for it in items if _week_of(it) == week), key=_chrono_key)
