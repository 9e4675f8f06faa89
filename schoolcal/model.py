"""
Central data model definitions used across the project.

Schedule items themselves travel as plain dicts (see schoolcal.shape for
the canonical keys), the same way they come out of the backend export.
The structures below are the ones the core produces.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


# Item kinds
KIND_SESSION = "session"
KIND_TEST = "test"

# Categories of the drill-down navigation
CATEGORY_MATERIALS = "materials"
CATEGORY_LESSON_PLAN = "lesson-plan"
CATEGORY_TASK = "task"

CATEGORIES = (CATEGORY_MATERIALS, CATEGORY_LESSON_PLAN, CATEGORY_TASK)

CATEGORY_LABELS = {
    CATEGORY_MATERIALS: "Materials",
    CATEGORY_LESSON_PLAN: "Lesson Plan",
    CATEGORY_TASK: "Task/Assessment",
}

# Class type tags
CLASS_TYPE_BILINGUAL = "bilingual"
CLASS_TYPE_REGULAR = "regular"

# Record fields computed per (date, class); a shared payload never sets them
DERIVED_RECORD_KEYS = ("date_time", "class_name", "class_type", "duration_minutes", "academic_year", "semester")


@dataclass(frozen=True)
class WeekBucket:
    """
    One row of the week list: how many items fall into a week of a semester.
    """

    week: int
    count: int
    start: date
    end: date


@dataclass
class ClassAssignment:
    """
    One class of a bulk schedule, with its own time window.

    class_type overrides whatever the class metadata says.
    """

    class_id: str
    start: Optional[str]
    end: Optional[str]
    class_type: Optional[str] = None


@dataclass
class ConcreteRequest:
    """
    One schedule record produced by the bulk expander (one date x one class).
    """

    date: date
    start: str
    end: str
    date_time: datetime
    class_id: str
    class_type: str
    duration_minutes: int
    academic_year: str
    semester: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_record(self, tz_offset: Optional[str] = None) -> dict[str, Any]:
        """
        Flatten into the row shape the create collaborator expects.

        tz_offset (e.g. '+07:00') is appended to date_time when given.
        DERIVED_RECORD_KEYS always come from the request, overriding any
        payload value of the same name.
        """
        record = copy.deepcopy(self.payload)
        stamp = self.date_time.strftime("%Y-%m-%dT%H:%M:%S")
        record.update(
            {
                "date_time": f"{stamp}{tz_offset}" if tz_offset else stamp,
                "class_name": self.class_id,
                "class_type": self.class_type,
                "duration_minutes": self.duration_minutes,
                "academic_year": self.academic_year,
                "semester": str(self.semester),
            }
        )
        return record


@dataclass
class PersistResult:
    """
    Outcome of handing one ConcreteRequest to the create collaborator.
    """

    request: ConcreteRequest
    ok: bool
    record: Optional[Any] = None
    error: Optional[str] = None
    skipped: bool = False
