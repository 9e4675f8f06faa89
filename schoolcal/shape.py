"""
Shaping (backend rows -> schedule items).

Raw rows arrive as exported from the backend tables:

- class_sessions: id, teacher_id, topic, date_time, location, materials,
  skill_category, cefr_level, learning_objectives, ...
- test_schedules: id, teacher_id, test_type, title, date_time,
  duration_minutes, location, class_name, materials, class_type, ...

Every row becomes one item dict with the common keys

    id, kind, date_time, title, location, class_name, materials, teacher_id

while all other (kind-specific) keys are carried through untouched.

Important rules:
- date_time is parsed into a naive local datetime here, ONCE
- rows without a parseable timestamp return None (they never reach the core)
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from schoolcal.academic import parse_instant, time_zone
from schoolcal.model import KIND_SESSION, KIND_TEST


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _first(row: dict[str, Any], *keys: str) -> Any:
    """
    Return the first non-empty value among snake_case / camelCase variants.
    """
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _materials(value: Any) -> list[str]:
    # The backend stores a list of URLs; older rows may hold a single string
    if not value:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(x).strip() for x in value if str(x or "").strip()]
    return []


def _shape(row: dict[str, Any], kind: str, title: Any, tz: Optional[str]) -> Optional[dict[str, Any]]:
    raw_dt = _first(row, "date_time", "dateTime")
    if raw_dt is None:
        return None
    try:
        dt = parse_instant(raw_dt, tz=tz)
    except ValueError:
        return None

    item = dict(row)
    item.update(
        {
            "id": _safe_str(row.get("id")).strip(),
            "kind": kind,
            "date_time": dt,
            "title": _safe_str(title).strip(),
            "location": _safe_str(row.get("location")).strip(),
            "class_name": _safe_str(_first(row, "class_name", "className")).strip(),
            "materials": _materials(row.get("materials")),
            "teacher_id": _safe_str(_first(row, "teacher_id", "teacherId")).strip(),
        }
    )
    return item


def shape_session(row: dict[str, Any], tz: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Shape one class_sessions row. Returns None if the timestamp is unusable.
    """
    return _shape(row, KIND_SESSION, _first(row, "topic", "title"), tz)


def shape_test(row: dict[str, Any], tz: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Shape one test_schedules row. Returns None if the timestamp is unusable.
    """
    return _shape(row, KIND_TEST, _first(row, "title", "test_type"), tz)


def shape_rows(
    sessions: Iterable[dict[str, Any]],
    tests: Iterable[dict[str, Any]],
    tz: Optional[str] = None,
) -> tuple[list[dict[str, Any]], int]:
    """
    Shape both collections into one item list.

    Returns (items, skipped) where skipped counts rows dropped for bad data.
    An unknown `tz` raises ValueError before any row is shaped.
    """
    if tz:
        time_zone(tz)

    items: list[dict[str, Any]] = []
    skipped = 0

    for rows, fn in ((sessions, shape_session), (tests, shape_test)):
        for row in rows:
            if not isinstance(row, dict):
                skipped += 1
                continue
            item = fn(row, tz=tz)
            if item is None:
                skipped += 1
                continue
            items.append(item)

    return items, skipped
