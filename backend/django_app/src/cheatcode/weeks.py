"""ISO-8601 week helpers.

Tasks and comments are bucketed by a week id of the form ``YYYY-Www``.
Weeks start on Monday and belong to the year that contains their Thursday,
so late-December dates can land in week 1 of the next year and early-January
dates in week 52/53 of the previous one.
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Tuple

WEEK_ID_RE = re.compile(r'(\d{4})-W(\d{2})', re.ASCII)
DAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


class WeekError(ValueError):
    pass


class InvalidWeekFormat(WeekError):
    """Raised for week ids that are not a valid ``YYYY-Www`` string."""


class WeekOutOfRange(WeekError):
    """Raised when a shift leaves the supported calendar (years 1-9999)."""


class WeekRange(NamedTuple):
    start: date
    end: date


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def _shift(d: date, days: int) -> date:
    try:
        return d + timedelta(days=days)
    except OverflowError:
        raise WeekOutOfRange(f"{d.isoformat()} shifted by {days} days is out of range") from None


def weeks_in_year(year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year.
    return date(year, 12, 28).isocalendar()[1]


def format_week_id(year: int, week: int) -> str:
    return f"{year:04d}-W{week:02d}"


def parse_iso_week(week_id: str) -> Tuple[int, int]:
    if not isinstance(week_id, str):
        raise InvalidWeekFormat(f"week id must be a string, got {type(week_id).__name__}")
    m = WEEK_ID_RE.fullmatch(week_id)
    if not m:
        raise InvalidWeekFormat(f"invalid week id {week_id!r}, expected YYYY-Www")
    year, week = int(m.group(1)), int(m.group(2))
    if year < 1:
        raise InvalidWeekFormat(f"invalid year in week id {week_id!r}")
    if not 1 <= week <= weeks_in_year(year):
        raise InvalidWeekFormat(f"{year} has no ISO week {week}")
    return year, week


def day_index(value) -> int:
    """Monday=0 .. Sunday=6, the ``day`` column of a task."""
    return _as_date(value).weekday()


def get_iso_week(value) -> str:
    d = _as_date(value)
    thursday = _shift(d, 3 - d.weekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return format_week_id(thursday.year, week)


def get_date_from_iso_week(week_id: str) -> date:
    year, week = parse_iso_week(week_id)
    jan4 = date(year, 1, 4)
    week_one_monday = _shift(jan4, -jan4.weekday())
    return _shift(week_one_monday, (week - 1) * 7)


def get_week_date_range(week_id: str) -> WeekRange:
    monday = get_date_from_iso_week(week_id)
    return WeekRange(monday, _shift(monday, 6))


def format_date_range(week_id: str) -> str:
    start, end = get_week_date_range(week_id)
    # Output follows the process locale's month names.
    return f"{start:%B} {start.day} - {end:%B} {end.day}"


def get_relative_iso_week(week_id: str, offset: int) -> str:
    monday = get_date_from_iso_week(week_id)
    return get_iso_week(_shift(monday, int(offset) * 7))


def get_current_iso_week(today=None) -> str:
    return get_iso_week(today if today is not None else date.today())


def iso_weeks_of_year(year: int) -> List[str]:
    return [format_week_id(year, week) for week in range(1, weeks_in_year(year) + 1)]


def get_week_days(week_id: str) -> List[date]:
    monday = get_date_from_iso_week(week_id)
    return [_shift(monday, i) for i in range(7)]


def get_day_labels(week_id: str) -> List[str]:
    return [f"{name} ({d.day}/{d.month})" for name, d in zip(DAY_NAMES, get_week_days(week_id))]


def get_iso_week_for_month(year: int, month: int) -> str:
    """Week containing the 1st of the month; its Sunday is inside that month."""
    try:
        first = date(year, month, 1)
    except ValueError as e:
        raise WeekOutOfRange(str(e)) from None
    return get_iso_week(first)
