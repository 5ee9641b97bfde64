from __future__ import annotations

import argparse
import logging
from pathlib import Path

from sopkalender.config.loader import load_from_env
from sopkalender.generator.readme_links import find_ics_files

logger = logging.getLogger(__name__)


def check_calendar_text(text: str) -> list[str]:
    problems: list[str] = []
    if not text.endswith("\r\n"):
        problems.append("document does not end with CRLF")
    if "\n" in text.replace("\r\n", ""):
        problems.append("bare LF line ending")

    physical = text.split("\r\n")
    lines = text.replace("\r\n ", "").split("\r\n")
    if not lines or lines[0] != "BEGIN:VCALENDAR":
        problems.append("document does not start with BEGIN:VCALENDAR")
    if "END:VCALENDAR" not in lines:
        problems.append("missing END:VCALENDAR")

    begins = sum(1 for line in lines if line == "BEGIN:VEVENT")
    ends = sum(1 for line in lines if line == "END:VEVENT")
    if begins != ends:
        problems.append(f"unbalanced VEVENT blocks ({begins} begin, {ends} end)")

    stamps = {line for line in lines if line.startswith("DTSTAMP:")}
    if len(stamps) > 1:
        problems.append(f"{len(stamps)} different DTSTAMP values")

    uids = [line for line in lines if line.startswith("UID:")]
    if len(uids) != len(set(uids)):
        problems.append("duplicate UID")

    long_lines = [line for line in physical if len(line.encode("utf-8")) > 75]
    if long_lines:
        problems.append(f"{len(long_lines)} lines longer than 75 octets")
    return problems


def check_calendars(calendars_dir: Path) -> dict[Path, list[str]]:
    failures: dict[Path, list[str]] = {}
    for path in find_ics_files(calendars_dir):
        problems = check_calendar_text(path.read_bytes().decode("utf-8", errors="replace"))
        if problems:
            failures[path] = problems
            for problem in problems:
                logger.error("%s: %s", path, problem)
    return failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate generated calendars")
    parser.add_argument("--config", help="Path to sopkalender.yaml")
    parser.add_argument("--calendars", help="Calendars directory")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    config, base_dir = load_from_env(args.config)
    calendars_dir = Path(args.calendars) if args.calendars else base_dir / config.calendars_dir
    failures = check_calendars(calendars_dir)
    if failures:
        return 1
    logger.info("Calendars check OK")
    return 0
