from __future__ import annotations

import logging
from collections.abc import Sequence

from sopkalender.common.ics import CalendarEvent
from sopkalender.common.isoweek import resolve_iso_week_date, weekday_number
from sopkalender.common.normalize import escape_text, to_file_safe_slug
from sopkalender.common.schedule_model import ScheduleWeek, TypeMap

logger = logging.getLogger(__name__)


def event_uid(area: str, street: str, year: int, week_number: int, type_code: str) -> str:
    return f"area{area}_{to_file_safe_slug(street)}_{year}_week{week_number}_{type_code}"


def build_events(
    area: str,
    street: str,
    year: int,
    weeks: Sequence[ScheduleWeek],
    type_map: TypeMap,
    pickup_day_name: str | None,
) -> list[CalendarEvent]:
    """Turn one street's schedule weeks into calendar events.

    An unknown pickup day drops the whole street; an unknown type code drops
    only that week. Both are logged as warnings.
    """
    base_day = weekday_number(pickup_day_name)
    if base_day is None:
        logger.warning(
            "Unknown pickup day %r for street %r in area %s; skipping",
            pickup_day_name,
            street,
            area,
        )
        return []

    events: list[CalendarEvent] = []
    for week in weeks:
        meta = type_map.get(week.type)
        if meta is None:
            logger.warning(
                "Unknown type %r in week %s for area %s; skipping",
                week.type,
                week.week_number,
                area,
            )
            continue

        events.append(
            CalendarEvent(
                uid=event_uid(area, street, year, week.week_number, week.type),
                title=escape_text(f"{meta.icon} {meta.description}"),
                description=escape_text(week.description or ""),
                date=resolve_iso_week_date(
                    year, week.week_number, base_day, week.pickup_day_diff
                ),
            )
        )
    return events
