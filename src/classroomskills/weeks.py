"""ISO-8601 week keys used to bucket earned stars."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

Clock = Callable[[], date]


def week_key(day: date | datetime) -> str:
    """Return the ISO week identifier for a calendar date, e.g. ``2024-W01``.

    Weeks start on Monday and week 1 contains the year's first Thursday, so
    dates near New Year can belong to the neighbouring ISO year.
    """
    if isinstance(day, datetime):
        day = day.date()
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def today() -> date:
    """Default clock: the local calendar date."""
    return date.today()
