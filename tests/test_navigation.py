"""
Unit tests for the drill-down navigation coordinate and level views.
"""

import unittest
from datetime import datetime

from schoolcal.navigation import (
    ALL_TEACHERS,
    LEVEL_CATEGORIES,
    LEVEL_DETAILS,
    LEVEL_SEMESTERS,
    LEVEL_TEACHERS,
    LEVEL_WEEKS,
    NavigationCoordinate,
    breadcrumbs,
    view,
    years_with_items,
)


def _item(iid: str, kind: str, when: datetime, teacher: str, materials=None) -> dict:
    return {
        "id": iid,
        "kind": kind,
        "date_time": when,
        "title": iid,
        "location": "",
        "class_name": "",
        "materials": materials or [],
        "teacher_id": teacher,
    }


ITEMS = [
    _item("s1", "session", datetime(2024, 7, 2, 9, 0), "T1", ["a.pdf"]),
    _item("s2", "session", datetime(2024, 7, 9, 11, 0), "T1"),
    _item("s3", "session", datetime(2024, 7, 9, 8, 0), "T1"),
    _item("s4", "session", datetime(2025, 2, 3, 9, 0), "T1"),
    _item("t1", "test", datetime(2024, 7, 10, 10, 0), "T1"),
    _item("x1", "session", datetime(2024, 7, 9, 9, 0), "T2"),
    _item("old", "session", datetime(2023, 9, 1, 9, 0), "T1"),
]


class TestCoordinate(unittest.TestCase):
    def test_levels_narrow_progressively(self) -> None:
        c = NavigationCoordinate.start("2024/2025")
        self.assertEqual(c.level, LEVEL_TEACHERS)
        c = c.select_teacher("T1")
        self.assertEqual(c.level, LEVEL_SEMESTERS)
        c = c.select_semester(1)
        self.assertEqual(c.level, LEVEL_CATEGORIES)
        c = c.select_category("lesson-plan")
        self.assertEqual(c.level, LEVEL_WEEKS)
        c = c.select_week(2)
        self.assertEqual(c.level, LEVEL_DETAILS)

    def test_changing_teacher_resets_everything_below(self) -> None:
        c = NavigationCoordinate.start("2024/2025").select_teacher("T1").select_semester(1).select_category("task")
        c2 = c.select_teacher("T2")
        self.assertEqual((c2.semester, c2.category, c2.week), (None, None, None))
        self.assertEqual(c2.academic_year, "2024/2025")

    def test_select_semester_clears_deeper_levels(self) -> None:
        c = (
            NavigationCoordinate.start("2024/2025")
            .select_teacher("T1")
            .select_semester(1)
            .select_category("task")
            .select_week(3)
        )
        c2 = c.select_semester(2)
        self.assertEqual((c2.category, c2.week), (None, None))

    def test_back(self) -> None:
        c = NavigationCoordinate.start("2024/2025").select_teacher("T1").select_semester(1)
        self.assertEqual(c.back().level, LEVEL_SEMESTERS)
        self.assertEqual(c.back().back().level, LEVEL_TEACHERS)
        self.assertEqual(c.back().back().back().level, LEVEL_TEACHERS)

    def test_out_of_order_selection_rejected(self) -> None:
        c = NavigationCoordinate.start("2024/2025")
        with self.assertRaises(ValueError):
            c.select_semester(1)
        with self.assertRaises(ValueError):
            c.select_teacher("T1").select_semester(3)
        with self.assertRaises(ValueError):
            NavigationCoordinate.start("2024-2025")

    def test_breadcrumbs(self) -> None:
        c = (
            NavigationCoordinate.start("2024/2025")
            .select_teacher("T1")
            .select_semester(1)
            .select_category("materials")
            .select_week(2)
        )
        self.assertEqual(
            breadcrumbs(c, {"T1": "Ms. Rina"}),
            ["Teachers", "Ms. Rina", "Semester 1", "Materials", "Week 2"],
        )
        self.assertEqual(breadcrumbs(c.select_teacher(ALL_TEACHERS)), ["Teachers", "All teachers"])


class TestView(unittest.TestCase):
    def test_teacher_level(self) -> None:
        v = view(ITEMS, NavigationCoordinate.start("2024/2025"))
        self.assertEqual(v.teacher_counts, {"T1": 5, "T2": 1})

    def test_semester_level(self) -> None:
        v = view(ITEMS, NavigationCoordinate.start("2024/2025").select_teacher("T1"))
        self.assertEqual(v.semester_counts, {1: 4, 2: 1})

    def test_category_level(self) -> None:
        c = NavigationCoordinate.start("2024/2025").select_teacher("T1").select_semester(1)
        self.assertEqual(view(ITEMS, c).category_counts, {"materials": 1, "lesson-plan": 3, "task": 1})

    def test_week_level(self) -> None:
        c = NavigationCoordinate.start("2024/2025").select_teacher("T1").select_semester(1).select_category("lesson-plan")
        weeks = view(ITEMS, c).weeks
        self.assertEqual([(b.week, b.count) for b in weeks], [(1, 1), (2, 2)])

    def test_detail_level_sorted(self) -> None:
        c = (
            NavigationCoordinate.start("2024/2025")
            .select_teacher("T1")
            .select_semester(1)
            .select_category("lesson-plan")
            .select_week(2)
        )
        self.assertEqual([it["id"] for it in view(ITEMS, c).items], ["s3", "s2"])

    def test_all_teachers(self) -> None:
        c = (
            NavigationCoordinate.start("2024/2025")
            .select_teacher(ALL_TEACHERS)
            .select_semester(1)
            .select_category("lesson-plan")
            .select_week(2)
        )
        self.assertEqual([it["id"] for it in view(ITEMS, c).items], ["s3", "x1", "s2"])

    def test_years_with_items(self) -> None:
        self.assertEqual(years_with_items(ITEMS), ["2023/2024", "2024/2025"])
        self.assertEqual(years_with_items([]), [])


if __name__ == "__main__":
    unittest.main()
