from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sopkalender.common.normalize import escape_text

DEFAULT_PRODID = "-//sopkalender//waste-collection//EN"
MAX_LINE_OCTETS = 75


@dataclass(frozen=True)
class CalendarEvent:
    uid: str
    title: str
    description: str
    date: date
    all_day: bool = True
    status: str = "CONFIRMED"


def _format_date(value: date) -> str:
    return value.strftime("%Y%m%d")


def format_dtstamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def fold_line(line: str) -> str:
    """Fold a content line so no physical line exceeds 75 octets.

    Continuation lines start with a single space, which counts towards
    their length. Multi-byte UTF-8 characters are never split.
    """
    if len(line.encode("utf-8")) <= MAX_LINE_OCTETS:
        return line
    parts: list[str] = []
    current = ""
    current_len = 0
    limit = MAX_LINE_OCTETS
    for char in line:
        size = len(char.encode("utf-8"))
        if current_len + size > limit:
            parts.append(current)
            current = ""
            current_len = 0
            limit = MAX_LINE_OCTETS - 1
        current += char
        current_len += size
    parts.append(current)
    return "\r\n ".join(parts)


def _event_lines(event: CalendarEvent, dtstamp: str) -> list[str]:
    day = _format_date(event.date)
    return [
        "BEGIN:VEVENT",
        f"UID:{event.uid}",
        f"SUMMARY:{event.title}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART;VALUE=DATE:{day}",
        f"DTEND;VALUE=DATE:{day}",
        f"STATUS:{event.status}",
        "TRANSP:TRANSPARENT",
        "X-MICROSOFT-CDO-BUSYSTATUS:FREE",
        "DURATION:P1DT",
        f"DESCRIPTION:{event.description}",
        "END:VEVENT",
    ]


def serialize_calendar(
    calendar_name: str,
    events: Sequence[CalendarEvent],
    timestamp: datetime,
    *,
    prodid: str = DEFAULT_PRODID,
) -> str:
    dtstamp = format_dtstamp(timestamp)
    lines: list[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        f"X-WR-CALNAME:{escape_text(calendar_name)}",
        f"PRODID:{prodid}",
        "METHOD:PUBLISH",
        "X-PUBLISHED-TTL:PT1H",
    ]

    # Events keep their input order.
    for event in events:
        lines.extend(_event_lines(event, dtstamp))

    lines.append("END:VCALENDAR")
    return "\r\n".join(fold_line(line) for line in lines) + "\r\n"
