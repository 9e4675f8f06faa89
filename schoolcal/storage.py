"""
Local JSON storage for the exported backend collections.

This module reads, from one data directory:

    sessions.json   class_sessions rows
    tests.json      test_schedules rows
    teachers.json   [{"id": ..., "name": ...}, ...]
    classes.json    [{"name": ..., "class_type": "BILINGUAL" | "REGULAR"}, ...]

and writes expanded bulk requests as a JSON list of insert records.

A missing or corrupted file loads as an empty collection.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from schoolcal.model import ConcreteRequest
from schoolcal.shape import shape_rows


def default_data_dir() -> Path:
    """
    Return the default data directory inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data"


def _resolve(data_dir: str | Path | None) -> Path:
    return Path(data_dir) if data_dir is not None else default_data_dir()


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return []


def load_rows(name: str, data_dir: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Load one collection (e.g. 'sessions') as a list of dict rows.
    """
    raw = _load_json(_resolve(data_dir) / f"{name}.json")
    if not isinstance(raw, list):
        return []
    return [row for row in raw if isinstance(row, dict)]


def load_items(data_dir: str | Path | None = None, tz: Optional[str] = None) -> tuple[list[dict[str, Any]], int]:
    """
    Load sessions + tests as shaped schedule items.

    Returns (items, skipped): skipped counts rows dropped for bad timestamps.
    """
    return shape_rows(load_rows("sessions", data_dir), load_rows("tests", data_dir), tz=tz)


def load_teacher_names(data_dir: str | Path | None = None) -> dict[str, str]:
    names: dict[str, str] = {}
    for row in load_rows("teachers", data_dir):
        tid = str(row.get("id") or "").strip()
        if tid:
            names[tid] = str(row.get("name") or "").strip() or tid
    return names


def load_class_types(data_dir: str | Path | None = None) -> dict[str, str]:
    """
    Class name -> type tag ('bilingual' / 'regular') from classes.json.
    """
    types: dict[str, str] = {}
    for row in load_rows("classes", data_dir):
        name = str(row.get("name") or "").strip()
        ctype = str(row.get("class_type") or "").strip().lower()
        if name and ctype:
            types[name] = ctype
    return types


def save_requests(
    requests: Sequence[ConcreteRequest],
    path: str | Path,
    tz_offset: Optional[str] = None,
) -> int:
    """
    Write requests as a JSON list of insert records. Returns the number written.

    Creates parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    records = [r.to_record(tz_offset=tz_offset) for r in requests]
    out.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    return len(records)
