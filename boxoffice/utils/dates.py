"""Datetime helpers."""

from __future__ import annotations

import os
from datetime import date

import pendulum

DEFAULT_TZ = "America/Los_Angeles"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_in_tz() -> pendulum.DateTime:
    tz = pendulum.timezone(timezone_name())
    return pendulum.now(tz)


def today_in_tz() -> date:
    return now_in_tz().date()


def parse_release_date(value: str | None) -> date | None:
    """Parse a catalog ``release_date``; blank or malformed values are unknown."""
    if not value:
        return None
    try:
        return pendulum.parse(value).date()
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def months_before(value: date, months: int) -> date:
    return pendulum.Date(value.year, value.month, value.day).subtract(months=months)


def months_after(value: date, months: int) -> date:
    return pendulum.Date(value.year, value.month, value.day).add(months=months)


def start_of_previous_year(value: date) -> date:
    return date(value.year - 1, 1, 1)


def year_priority(release_year: int | None, reference_year: int) -> int:
    """1 for the reference year, 2 for the year before, 3 for anything older or undated."""
    if release_year is None:
        return 3
    if release_year >= reference_year:
        return 1
    if release_year == reference_year - 1:
        return 2
    return 3
