from __future__ import annotations

import argparse
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from sopkalender.common.ics import serialize_calendar
from sopkalender.common.normalize import to_file_safe_slug
from sopkalender.common.schedule_model import (
    AreaSchedule,
    area_files,
    build_type_map,
    load_area_file,
)
from sopkalender.config.loader import load_from_env
from sopkalender.config.schema import IcsConfig
from sopkalender.generator.events import build_events

logger = logging.getLogger(__name__)

DTSTAMP_LINE = re.compile(r"^DTSTAMP:[^\r\n]*\r?\n", re.MULTILINE)


@dataclass
class BuildResult:
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    failed_areas: list[str] = field(default_factory=list)


def run_timestamp(value: str | None = None) -> datetime:
    """Pick the single DTSTAMP instant shared by every calendar of a run."""
    if value:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    if epoch := os.getenv("SOURCE_DATE_EPOCH"):
        try:
            return datetime.fromtimestamp(int(epoch), UTC)
        except ValueError as exc:
            raise ValueError(f"SOURCE_DATE_EPOCH must be an integer: {epoch}") from exc
    return datetime.now(UTC).replace(microsecond=0)


def street_file_path(calendars_dir: Path, area: str, street: str) -> Path:
    return calendars_dir / f"area_{area}" / f"area_{area}_{to_file_safe_slug(street)}.ics"


def calendar_name(ics_config: IcsConfig, area: AreaSchedule, street: str) -> str:
    return ics_config.calendar_name_template.format(
        calendar_title=area.calendar_title, street=street, area=area.area
    )


def _without_dtstamp(text: str) -> str:
    return DTSTAMP_LINE.sub("", text)


def write_calendar(path: Path, text: str) -> bool:
    """Write ``text`` to ``path`` unless the file differs from it only by DTSTAMP.

    Returns True when the file was written.
    """
    if path.exists():
        existing = path.read_bytes().decode("utf-8", errors="replace")
        if _without_dtstamp(existing) == _without_dtstamp(text):
            return False

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_bytes(text.encode("utf-8"))
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    return True


def generate_area_calendars(
    area: AreaSchedule,
    calendars_dir: Path,
    timestamp: datetime,
    ics_config: IcsConfig | None = None,
    result: BuildResult | None = None,
) -> BuildResult:
    ics_config = ics_config or IcsConfig()
    result = result if result is not None else BuildResult()
    type_map = build_type_map(area.types)
    failed = False

    for street in area.street_pickup:
        events = build_events(
            area.area, street.street, area.year, area.week, type_map, street.pickup_day
        )
        text = serialize_calendar(
            calendar_name(ics_config, area, street.street),
            events,
            timestamp,
            prodid=ics_config.prodid,
        )
        path = street_file_path(calendars_dir, area.area, street.street)
        try:
            written = write_calendar(path, text)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            failed = True
            continue
        if written:
            result.written.append(path)
            logger.info("Wrote calendar %r (%d events) to %s", street.street, len(events), path)
        else:
            result.unchanged.append(path)
            logger.debug("Calendar unchanged: %s", path)

    if failed:
        result.failed_areas.append(area.area)
    return result


def build_calendars(
    areas_dir: Path,
    calendars_dir: Path,
    timestamp: datetime,
    ics_config: IcsConfig | None = None,
) -> BuildResult:
    result = BuildResult()
    for path in area_files(areas_dir):
        try:
            area = load_area_file(path)
        except (OSError, ValueError) as exc:
            logger.error("Skipping area file %s: %s", path.name, exc)
            result.failed_areas.append(path.stem)
            continue
        logger.info(
            "Processing area %s (%s) with %d streets",
            area.area,
            path.name,
            len(area.street_pickup),
        )
        generate_area_calendars(area, calendars_dir, timestamp, ics_config, result)

    logger.info(
        "Done: %d written, %d unchanged, %d failed areas",
        len(result.written),
        len(result.unchanged),
        len(result.failed_areas),
    )
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate street calendars from area files")
    parser.add_argument("--config", help="Path to sopkalender.yaml")
    parser.add_argument("--areas", help="Directory with area JSON files")
    parser.add_argument("--out", help="Output calendars directory")
    parser.add_argument("--timestamp", help="DTSTAMP for every event (ISO 8601)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(message)s")

    config, base_dir = load_from_env(args.config)
    areas_dir = Path(args.areas) if args.areas else base_dir / config.areas_dir
    calendars_dir = Path(args.out) if args.out else base_dir / config.calendars_dir

    try:
        result = build_calendars(
            areas_dir,
            calendars_dir,
            run_timestamp(args.timestamp),
            config.ics,
        )
    except (OSError, ValueError) as exc:
        logger.error("Build failed: %s", exc)
        return 1
    return 1 if result.failed_areas else 0
