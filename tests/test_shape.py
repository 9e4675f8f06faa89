"""
Unit tests for shaping backend rows into schedule items.

Shaping contract:
- Common keys are normalized, kind-specific keys are carried through
- Rows without a usable timestamp are skipped and counted
- An unknown time zone is an error, not a skipped row
"""

import unittest
from datetime import datetime

from schoolcal.shape import shape_rows, shape_session, shape_test


class TestShapeSession(unittest.TestCase):
    def test_normal_session_row(self) -> None:
        row = {
            "id": "abc",
            "teacher_id": "T1",
            "topic": "Animals",
            "date_time": "2024-07-08T09:00:00+07:00",
            "location": "SD Sang Timur",
            "materials": ["https://files/a.pdf"],
            "cefr_level": "A1",
        }
        item = shape_session(row, tz="Asia/Jakarta")

        self.assertIsNotNone(item)
        assert item is not None

        self.assertEqual(item["kind"], "session")
        self.assertEqual(item["title"], "Animals")
        self.assertEqual(item["date_time"], datetime(2024, 7, 8, 9, 0))
        self.assertEqual(item["teacher_id"], "T1")
        self.assertEqual(item["materials"], ["https://files/a.pdf"])
        # kind-specific fields are carried through
        self.assertEqual(item["cefr_level"], "A1")

    def test_camel_case_row(self) -> None:
        item = shape_session({"id": "x", "teacherId": "T9", "topic": "T", "dateTime": "2025-01-06T10:00"})
        assert item is not None
        self.assertEqual(item["teacher_id"], "T9")
        self.assertEqual(item["materials"], [])

    def test_invalid_timestamp_returns_none(self) -> None:
        self.assertIsNone(shape_session({"id": "x", "topic": "T", "date_time": "not a date"}))
        self.assertIsNone(shape_session({"id": "x", "topic": "T"}))

    def test_single_material_string(self) -> None:
        item = shape_session({"id": "x", "date_time": "2025-01-06T10:00", "materials": " a.pdf "})
        assert item is not None
        self.assertEqual(item["materials"], ["a.pdf"])


class TestShapeTest(unittest.TestCase):
    def test_test_row(self) -> None:
        row = {
            "id": "t1",
            "teacher_id": "T1",
            "test_type": "QUIZ",
            "title": "Quiz 1",
            "date_time": "2025-02-03T10:00:00",
            "duration_minutes": 60,
            "class_name": "5A",
            "materials": ["quiz.pdf"],
        }
        item = shape_test(row)
        assert item is not None
        self.assertEqual(item["kind"], "test")
        self.assertEqual(item["title"], "Quiz 1")
        self.assertEqual(item["class_name"], "5A")
        self.assertEqual(item["duration_minutes"], 60)

    def test_title_falls_back_to_test_type(self) -> None:
        item = shape_test({"id": "t2", "test_type": "MID_SEMESTER", "date_time": "2025-02-03T10:00"})
        assert item is not None
        self.assertEqual(item["title"], "MID_SEMESTER")


class TestShapeRows(unittest.TestCase):
    def test_counts_skipped_rows(self) -> None:
        sessions = [
            {"id": "s1", "date_time": "2024-07-08T09:00"},
            {"id": "s2", "date_time": ""},
            "garbage",
        ]
        tests = [{"id": "t1", "date_time": "2024-07-09T09:00"}, {"id": "t2", "date_time": "2024-99-01"}]
        items, skipped = shape_rows(sessions, tests)
        self.assertEqual([it["id"] for it in items], ["s1", "t1"])
        self.assertEqual(skipped, 3)

    def test_unknown_time_zone_raises(self) -> None:
        with self.assertRaises(ValueError):
            shape_rows([{"id": "s1", "date_time": "2024-07-01T02:00:00+00:00"}], [], tz="Asia/Jakartaa")

    def test_zone_moves_item_across_semester_boundary(self) -> None:
        items, _ = shape_rows([{"id": "s1", "date_time": "2024-06-30T19:00:00+00:00"}], [], tz="Asia/Jakarta")
        self.assertEqual(items[0]["date_time"], datetime(2024, 7, 1, 2, 0))


if __name__ == "__main__":
    unittest.main()
