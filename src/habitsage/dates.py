"""Canonical day strings and month arithmetic used by the tracker and calendar."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Union

from .errors import InvalidDate

DayLike = Union[str, date]

_CANONICAL = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_MONTH = re.compile(r"[0-9]{4}-[0-9]{2}")

SUNDAY = calendar.SUNDAY
MONDAY = calendar.MONDAY

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def parse_day(value: DayLike) -> date:
    """Return ``value`` as a :class:`date`, rejecting anything non-canonical.

    Accepts a ``date`` (but not a ``datetime``, which would smuggle a time of
    day into day-granularity comparisons) or a zero-padded ``YYYY-MM-DD``
    string naming a real calendar day.
    """

    if isinstance(value, datetime):
        raise InvalidDate(value, "expected a date, got a datetime")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(value, "expected a YYYY-MM-DD string")
    if not _CANONICAL.fullmatch(value):
        raise InvalidDate(value, "expected the YYYY-MM-DD form")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDate(value, str(exc)) from exc


def format_day(value: date) -> str:
    """Render a date in the canonical ``YYYY-MM-DD`` form."""

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def canonical(value: DayLike) -> str:
    """Validate ``value`` and return its canonical string form."""

    return format_day(parse_day(value))


def previous_day(value: date) -> date:
    return value - timedelta(days=1)


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidDate(f"{year}-{month}", "month must be between 1 and 12")
    if not 1 <= year <= 9999:
        raise InvalidDate(f"{year}-{month}", "year out of range")


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""

    _check_month(year, month)
    return calendar.monthrange(year, month)[1]


def first_weekday_offset(year: int, month: int, week_start: int = SUNDAY) -> int:
    """Count of empty grid cells before the 1st when weeks begin on ``week_start``."""

    _check_month(year, month)
    return (date(year, month, 1).weekday() - week_start) % 7


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (or back) from ``year``/``month``."""

    _check_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_title(year: int, month: int) -> str:
    _check_month(year, month)
    return f"{MONTH_NAMES[month - 1]} {year}"


def weekday_headers(week_start: int = SUNDAY) -> list[str]:
    """Short weekday names in grid order, e.g. ``["Sun", "Mon", ...]``."""

    return [calendar.day_abbr[(week_start + i) % 7] for i in range(7)]


def parse_month(value: str) -> tuple[int, int]:
    """Parse a ``YYYY-MM`` month selector."""

    if not isinstance(value, str) or not _MONTH.fullmatch(value):
        raise InvalidDate(value, "expected the YYYY-MM form")
    year, month = (int(part) for part in value.split("-"))
    _check_month(year, month)
    return year, month


__all__ = [
    "DayLike",
    "MONDAY",
    "SUNDAY",
    "canonical",
    "days_in_month",
    "first_weekday_offset",
    "format_day",
    "month_title",
    "parse_day",
    "parse_month",
    "previous_day",
    "shift_month",
    "weekday_headers",
]
