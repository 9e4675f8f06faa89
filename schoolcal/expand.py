"""
Bulk schedule expansion.

Turns the compact multi-select input of the bulk schedule form

    dates:       2025-01-06, 2025-01-07
    classes:     5A 08:00-09:00, 5B 10:00-11:00
    payload:     {"title": "Quiz 1", "test_type": "QUIZ", ...}

into one concrete request per (date, class):

    2025-01-06 5A 08:00 | 2025-01-06 5B 10:00 | 2025-01-07 5A 08:00 | 2025-01-07 5B 10:00

Rules:
- input is validated completely before anything is produced (no partial output)
- dates are iterated ascending, classes in the order the caller gave them
- the payload is copied verbatim into every request
"""

from __future__ import annotations

import copy
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from schoolcal.academic import academic_year_of, semester_of
from schoolcal.model import CLASS_TYPE_BILINGUAL, CLASS_TYPE_REGULAR, ClassAssignment, ConcreteRequest


# Times a freshly added class row starts with in the form
DEFAULT_START = "08:00"
DEFAULT_END = "09:00"


class ExpansionError(ValueError):
    """
    Raised when bulk input cannot be expanded. Carries every problem found.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def _time_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    Raises ValueError for invalid formats.
    """
    parts = hhmm.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h = int(parts[0])
    m = int(parts[1])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def _parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def class_type_of(
    assignment: ClassAssignment,
    class_types: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Type tag of a class: explicit override, then class metadata, then the name.
    """
    if assignment.class_type:
        return assignment.class_type.strip().lower()

    known = (class_types or {}).get(assignment.class_id)
    if known:
        return str(known).strip().lower()

    if "bilingual" in assignment.class_id.lower():
        return CLASS_TYPE_BILINGUAL
    return CLASS_TYPE_REGULAR


def validate(dates: Iterable[Union[str, date]], assignments: Sequence[ClassAssignment]) -> list[str]:
    """
    Return every problem with the bulk input (empty list = valid).
    """
    errors: list[str] = []

    date_list = list(dates)
    if not date_list:
        errors.append("Select at least one date.")
    for d in date_list:
        try:
            _parse_date(d)
        except ValueError:
            errors.append(f"Invalid date: {d!r}")

    if not assignments:
        errors.append("Select at least one class.")

    seen: set[str] = set()
    for a in assignments:
        cid = (a.class_id or "").strip()
        if not cid:
            errors.append("Class without an identifier.")
            continue
        if cid in seen:
            errors.append(f"{cid}: class listed twice.")
        seen.add(cid)

        if not (a.start or "").strip() or not (a.end or "").strip():
            errors.append(f"{cid}: start and end time are required.")
            continue
        try:
            start = _time_to_minutes(a.start)
            end = _time_to_minutes(a.end)
        except ValueError as exc:
            errors.append(f"{cid}: {exc}")
            continue
        if end <= start:
            errors.append(f"{cid}: end time {a.end} must be after start time {a.start}.")

    return errors


def expand(
    dates: Iterable[Union[str, date]],
    assignments: Sequence[ClassAssignment],
    payload: Mapping[str, Any],
    class_types: Optional[Mapping[str, str]] = None,
) -> list[ConcreteRequest]:
    """
    Expand dates x classes into concrete requests.

    Raises ExpansionError (nothing is produced) if the input is invalid.
    """
    date_list = list(dates)
    errors = validate(date_list, assignments)
    if errors:
        raise ExpansionError(errors)

    days = sorted({_parse_date(d) for d in date_list})

    out: list[ConcreteRequest] = []
    for day in days:
        for a in assignments:
            start = a.start.strip()
            end = a.end.strip()
            start_min = _time_to_minutes(start)
            dt = datetime(day.year, day.month, day.day, start_min // 60, start_min % 60)
            out.append(
                ConcreteRequest(
                    date=day,
                    start=start,
                    end=end,
                    date_time=dt,
                    class_id=a.class_id.strip(),
                    class_type=class_type_of(a, class_types),
                    duration_minutes=_time_to_minutes(end) - start_min,
                    academic_year=academic_year_of(dt),
                    semester=semester_of(dt),
                    payload=copy.deepcopy(dict(payload)),
                )
            )
    return out


def copy_previous_times(assignments: Sequence[ClassAssignment], index: int) -> list[ClassAssignment]:
    """
    Return a new list where row `index` takes the time window of row `index - 1`.
    """
    if not (1 <= index < len(assignments)):
        raise IndexError(f"No previous row for index {index}")
    prev = assignments[index - 1]
    out = [copy.copy(a) for a in assignments]
    out[index].start = prev.start
    out[index].end = prev.end
    return out


def parse_class_spec(spec: str) -> ClassAssignment:
    """
    Parse the CLI form 'CLASS=HH:MM-HH:MM' or 'CLASS=HH:MM-HH:MM:type'.

    A bare 'CLASS' gets the form defaults (08:00-09:00).
    """
    text = (spec or "").strip()
    if not text:
        raise ValueError("Empty class entry")
    if "=" not in text:
        return ClassAssignment(class_id=text, start=DEFAULT_START, end=DEFAULT_END)

    class_id, window = [p.strip() for p in text.rsplit("=", 1)]
    if "-" not in window:
        raise ValueError(f"Invalid class entry: {spec!r}")
    start, rest = [p.strip() for p in window.split("-", 1)]

    class_type: Optional[str] = None
    # 'HH:MM:type' -> an explicit type override follows the end time
    bits = rest.split(":")
    if len(bits) == 3:
        end = f"{bits[0]}:{bits[1]}"
        class_type = bits[2].strip() or None
    else:
        end = rest

    return ClassAssignment(class_id=class_id, start=start, end=end, class_type=class_type)
