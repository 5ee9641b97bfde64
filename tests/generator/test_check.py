from datetime import UTC, date, datetime
from pathlib import Path

from sopkalender.common.ics import CalendarEvent, serialize_calendar
from sopkalender.common.schedule_model import ScheduleWeek, TypeMetadata, build_type_map
from sopkalender.generator.__main__ import main as cli_main
from sopkalender.generator.check import check_calendar_text, check_calendars
from sopkalender.generator.events import build_events

STAMP = datetime(2025, 1, 1, tzinfo=UTC)


def _text() -> str:
    events = [
        CalendarEvent(uid="a", title="🟫 Matavfall", description="", date=date(2025, 1, 13)),
        CalendarEvent(uid="b", title="🟩 Restavfall", description="", date=date(2025, 1, 20)),
    ]
    return serialize_calendar("Cal", events, STAMP)


def test_generated_calendar_passes() -> None:
    assert check_calendar_text(_text()) == []
    assert check_calendar_text(serialize_calendar("Empty", [], STAMP)) == []


def test_bare_lf_flagged() -> None:
    problems = check_calendar_text(_text().replace("\r\n", "\n"))
    assert "bare LF line ending" in problems


def test_mixed_dtstamps_flagged() -> None:
    text = _text().replace("DTSTAMP:20250101T000000Z", "DTSTAMP:20250102T000000Z", 1)
    assert "2 different DTSTAMP values" in check_calendar_text(text)


def test_duplicate_uid_and_unbalanced_flagged() -> None:
    text = _text().replace("UID:b", "UID:a").replace("END:VEVENT\r\n", "", 1)
    problems = check_calendar_text(text)
    assert "duplicate UID" in problems
    assert "unbalanced VEVENT blocks (2 begin, 1 end)" in problems


def test_check_calendars_and_cli(tmp_path: Path) -> None:
    good = tmp_path / "area_1" / "good.ics"
    good.parent.mkdir()
    good.write_bytes(_text().encode("utf-8"))
    assert check_calendars(tmp_path) == {}
    assert cli_main(["check", "--calendars", str(tmp_path)]) == 0

    bad = tmp_path / "area_1" / "bad.ics"
    bad.write_bytes(_text().replace("\r\n", "\n").encode("utf-8"))
    failures = check_calendars(tmp_path)
    assert list(failures) == [bad]
    assert cli_main(["check", "--calendars", str(tmp_path)]) == 1


def test_folded_long_uids_are_not_duplicates() -> None:
    street = "Kungliga Tekniska Hogskolans Studentbostadsomrade Vag 12"
    events = build_events(
        "1",
        street,
        2025,
        [ScheduleWeek(weekNumber=3, type="M"), ScheduleWeek(weekNumber=4, type="M")],
        build_type_map([TypeMetadata(type="M", icon="🟫", description="Matavfall")]),
        "Monday",
    )
    text = serialize_calendar(f"Område 1 – {street}", events, STAMP)
    assert any(line.startswith(" ") for line in text.split("\r\n"))
    assert check_calendar_text(text) == []


def test_folded_duplicate_uid_still_flagged() -> None:
    long_uid = "u" * 90
    events = [
        CalendarEvent(uid=long_uid, title="t", description="", date=date(2025, 1, 13)),
        CalendarEvent(uid=long_uid, title="t", description="", date=date(2025, 1, 20)),
    ]
    assert "duplicate UID" in check_calendar_text(serialize_calendar("Cal", events, STAMP))
