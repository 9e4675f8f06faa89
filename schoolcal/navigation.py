"""
Drill-down navigation state.

The browser walks

    Teachers -> Semester -> Category -> Week -> Items

The current position is a NavigationCoordinate owned by the caller. It is
immutable: every select_*() returns a new coordinate with all deeper
levels cleared, and view() recomputes the grouping for the current level
from the item list it is given. Nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional

from schoolcal.academic import academic_year_of, current_coordinate, parse_academic_year
from schoolcal.index import (
    count_by_category,
    count_by_semester,
    count_by_teacher,
    filter_by_academic_year,
    filter_by_category,
    filter_by_semester,
    filter_by_teacher,
    group_by_week,
    items_in_week,
)
from schoolcal.model import CATEGORIES, CATEGORY_LABELS, WeekBucket


LEVEL_TEACHERS = "teachers"
LEVEL_SEMESTERS = "semesters"
LEVEL_CATEGORIES = "categories"
LEVEL_WEEKS = "weeks"
LEVEL_DETAILS = "details"

# Selecting this teacher id browses the items of every teacher
ALL_TEACHERS = "all"


@dataclass(frozen=True)
class NavigationCoordinate:
    academic_year: str
    teacher_id: Optional[str] = None
    semester: Optional[int] = None
    category: Optional[str] = None
    week: Optional[int] = None

    @classmethod
    def start(cls, academic_year: Optional[str] = None) -> "NavigationCoordinate":
        """
        Fresh coordinate at the root, for the given (or current) academic year.
        """
        year = academic_year if academic_year else current_coordinate().academic_year
        parse_academic_year(year)
        return cls(academic_year=year)

    @property
    def level(self) -> str:
        if self.teacher_id is None:
            return LEVEL_TEACHERS
        if self.semester is None:
            return LEVEL_SEMESTERS
        if self.category is None:
            return LEVEL_CATEGORIES
        if self.week is None:
            return LEVEL_WEEKS
        return LEVEL_DETAILS

    def select_teacher(self, teacher_id: str) -> "NavigationCoordinate":
        # Root scope changed: nothing below survives
        return NavigationCoordinate(academic_year=self.academic_year, teacher_id=teacher_id)

    def select_semester(self, semester: int) -> "NavigationCoordinate":
        if self.teacher_id is None:
            raise ValueError("Select a teacher first")
        if semester not in (1, 2):
            raise ValueError(f"Invalid semester: {semester!r}")
        return replace(self, semester=semester, category=None, week=None)

    def select_category(self, category: str) -> "NavigationCoordinate":
        if self.semester is None:
            raise ValueError("Select a semester first")
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category!r}")
        return replace(self, category=category, week=None)

    def select_week(self, week: int) -> "NavigationCoordinate":
        if self.category is None:
            raise ValueError("Select a category first")
        if week < 1:
            raise ValueError(f"Invalid week: {week!r}")
        return replace(self, week=week)

    def select_academic_year(self, academic_year: str) -> "NavigationCoordinate":
        return NavigationCoordinate.start(academic_year)

    def back(self) -> "NavigationCoordinate":
        """
        One level up (clears the deepest selection).
        """
        if self.week is not None:
            return replace(self, week=None)
        if self.category is not None:
            return replace(self, category=None)
        if self.semester is not None:
            return replace(self, semester=None)
        if self.teacher_id is not None:
            return replace(self, teacher_id=None)
        return self


@dataclass
class LevelView:
    """
    What the browser shows at one level. Only the fields of `level` are filled.
    """

    level: str
    teacher_counts: dict[str, int] = field(default_factory=dict)
    semester_counts: dict[int, int] = field(default_factory=dict)
    category_counts: dict[str, int] = field(default_factory=dict)
    weeks: list[WeekBucket] = field(default_factory=list)
    items: list[dict[str, Any]] = field(default_factory=list)


def breadcrumbs(coord: NavigationCoordinate, teacher_names: Optional[Mapping[str, str]] = None) -> list[str]:
    names = teacher_names or {}
    crumbs = ["Teachers"]
    if coord.teacher_id is not None:
        if coord.teacher_id == ALL_TEACHERS:
            crumbs.append("All teachers")
        else:
            crumbs.append(names.get(coord.teacher_id) or "Teacher")
    if coord.semester is not None:
        crumbs.append(f"Semester {coord.semester}")
    if coord.category is not None:
        crumbs.append(CATEGORY_LABELS[coord.category])
    if coord.week is not None:
        crumbs.append(f"Week {coord.week}")
    return crumbs


def scope_items(items: Iterable[dict[str, Any]], coord: NavigationCoordinate) -> list[dict[str, Any]]:
    """
    Items visible at the coordinate, before week selection.
    """
    scoped = filter_by_academic_year(items, coord.academic_year)
    if coord.teacher_id is not None and coord.teacher_id != ALL_TEACHERS:
        scoped = filter_by_teacher(scoped, coord.teacher_id)
    if coord.semester is not None:
        scoped = filter_by_semester(scoped, coord.semester)
    if coord.category is not None:
        scoped = filter_by_category(scoped, coord.category)
    return scoped


def view(items: Iterable[dict[str, Any]], coord: NavigationCoordinate) -> LevelView:
    scoped = scope_items(items, coord)
    level = coord.level

    if level == LEVEL_TEACHERS:
        return LevelView(level=level, teacher_counts=count_by_teacher(scoped))
    if level == LEVEL_SEMESTERS:
        return LevelView(level=level, semester_counts=count_by_semester(scoped))
    if level == LEVEL_CATEGORIES:
        return LevelView(level=level, category_counts=count_by_category(scoped))
    if level == LEVEL_WEEKS:
        return LevelView(level=level, weeks=group_by_week(scoped, coord.academic_year, coord.semester))
    return LevelView(level=level, items=items_in_week(scoped, coord.week))


def years_with_items(items: Iterable[dict[str, Any]]) -> list[str]:
    return sorted({academic_year_of(it["date_time"]) for it in items})
