from __future__ import annotations

from datetime import date, timedelta
from types import MappingProxyType

WEEKDAY_TO_NUMBER = MappingProxyType(
    {
        "monday": 1,
        "tuesday": 2,
        "wednesday": 3,
        "thursday": 4,
        "friday": 5,
        "saturday": 6,
        "sunday": 7,
    }
)


def weekday_number(name: str | None) -> int | None:
    if name is None:
        return None
    return WEEKDAY_TO_NUMBER.get(name.strip().lower())


def _week_one_monday(year: int) -> date:
    # ISO week 1 is the week containing January 4th.
    jan4 = date(year, 1, 4)
    return jan4 - timedelta(days=jan4.isoweekday() - 1)


def resolve_iso_week_date(
    year: int, iso_week: int, iso_weekday: int, day_offset: int = 0
) -> date:
    """Return the date of ``iso_weekday`` in ISO week ``iso_week`` of ``year``,
    shifted by ``day_offset`` days.

    No range checks are made: week 53 of a year with 52 ISO weeks lands in
    week 1 of the following year.
    """
    return _week_one_monday(year) + timedelta(
        weeks=iso_week - 1, days=iso_weekday - 1 + day_offset
    )
