"""
Academic calendar partitioning.

Maps a point in time onto the school's coordinate system:

    academic year  "2024/2025"   (July .. June)
    semester       1 = Jul-Dec of the start year, 2 = Jan-Jun of start year + 1
    week           1-based, 7-day buckets counted from the first day of the semester

All semester arithmetic of the project lives here, so that every screen
computes the same week for the same timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# July (1-based month number) opens semester 1 and the academic year
SEMESTER_1_START_MONTH = 7

# The admin screens offer weeks 1..26 for every semester
WEEKS_PER_SEMESTER = 26


@dataclass(frozen=True)
class Coordinate:
    """
    Position of one instant in the academic calendar.
    """

    academic_year: str
    semester: int
    week: int


def _as_datetime(instant: Union[date, datetime]) -> datetime:
    if isinstance(instant, datetime):
        return instant
    return datetime(instant.year, instant.month, instant.day)


def parse_instant(value: Union[str, date, datetime], tz: Optional[str] = None) -> datetime:
    """
    Convert an ISO timestamp (or date/datetime) into a naive local datetime.

    Aware values are converted into `tz` when given, otherwise into the
    system's local zone; the wall-clock value is then used as-is, so grouping
    always happens in one civil calendar. Naive values are taken as local.
    Raises ValueError for strings that are not ISO dates/timestamps and for
    unknown zone names.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = _as_datetime(value)
    else:
        text = str(value or "").strip()
        if not text:
            raise ValueError("Empty timestamp")
        # Backends often send a trailing 'Z' for UTC
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc

    if dt.tzinfo is not None:
        dt = dt.astimezone(time_zone(tz)) if tz else dt.astimezone()
        dt = dt.replace(tzinfo=None)
    return dt


def time_zone(name: str) -> ZoneInfo:
    """
    Resolve an IANA zone name (e.g. 'Asia/Jakarta'). Raises ValueError if unknown.
    """
    try:
        return ZoneInfo(str(name).strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {name!r}") from exc


def parse_academic_year(label: str) -> int:
    """
    Return the start year of an academic year label like '2024/2025'.
    """
    parts = str(label or "").strip().split("/")
    if len(parts) != 2:
        raise ValueError(f"Invalid academic year: {label!r}")
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid academic year: {label!r}") from exc
    if end != start + 1:
        raise ValueError(f"Invalid academic year: {label!r}")
    return start


def academic_year_label(start_year: int) -> str:
    return f"{start_year}/{start_year + 1}"


def academic_year_of(instant: Union[date, datetime]) -> str:
    if instant.month >= SEMESTER_1_START_MONTH:
        return academic_year_label(instant.year)
    return academic_year_label(instant.year - 1)


def semester_of(instant: Union[date, datetime]) -> int:
    return 1 if instant.month >= SEMESTER_1_START_MONTH else 2


def _check_semester(semester: int) -> None:
    if semester not in (1, 2):
        raise ValueError(f"Invalid semester: {semester!r}")


def semester_start(academic_year: str, semester: int) -> date:
    """
    First civil day of a semester.

    Semester 2 starts on January 1st of start year + 1, not of the year the
    caller happens to be looking at.
    """
    _check_semester(semester)
    start_year = parse_academic_year(academic_year)
    if semester == 1:
        return date(start_year, SEMESTER_1_START_MONTH, 1)
    return date(start_year + 1, 1, 1)


def week_in_semester(instant: Union[date, datetime], academic_year: Optional[str] = None) -> int:
    """
    1-based week of `instant` within its semester.

    The semester start is derived from `academic_year` (defaults to the
    instant's own academic year). Raises ValueError if `instant` lies outside
    that academic year.
    """
    dt = _as_datetime(instant)
    own_year = academic_year_of(dt)
    year = academic_year if academic_year is not None else own_year
    if year != own_year:
        parse_academic_year(year)
        raise ValueError(f"{dt.date().isoformat()} is not in academic year {year}")
    start = _as_datetime(semester_start(year, semester_of(dt)))
    # timedelta.days floors, same as whole days elapsed
    days = (dt - start).days
    return days // 7 + 1


def week_date_range(academic_year: str, semester: int, week: int) -> tuple[date, date]:
    """
    Inverse of week_in_semester: (first day, last day) of a week.
    """
    if week < 1:
        raise ValueError(f"Invalid week: {week!r}")
    start = semester_start(academic_year, semester) + timedelta(days=(week - 1) * 7)
    return start, start + timedelta(days=6)


def locate(instant: Union[date, datetime]) -> Coordinate:
    year = academic_year_of(instant)
    return Coordinate(
        academic_year=year,
        semester=semester_of(instant),
        week=week_in_semester(instant, year),
    )


def current_coordinate(today: Optional[date] = None) -> Coordinate:
    """
    Default selection for screens that open on "this week".
    """
    return locate(today if today is not None else date.today())


def academic_year_options(today: Optional[date] = None) -> list[str]:
    """
    Academic years offered in pickers: current calendar year -2 .. +1.
    """
    year = (today if today is not None else date.today()).year
    return [academic_year_label(year + i) for i in range(-2, 2)]


def semester_weeks() -> list[int]:
    return list(range(1, WEEKS_PER_SEMESTER + 1))


def format_range(start: date, end: date) -> str:
    """
    Short display label, e.g. '08 Jul - 14 Jul 2024'.
    """
    if start.year == end.year:
        return f"{start.strftime('%d %b')} - {end.strftime('%d %b %Y')}"
    return f"{start.strftime('%d %b %Y')} - {end.strftime('%d %b %Y')}"
