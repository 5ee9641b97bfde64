from __future__ import annotations

import argparse
import logging
from pathlib import Path

from sopkalender.config.loader import load_from_env
from sopkalender.config.schema import DEFAULT_END_MARKER, DEFAULT_START_MARKER

logger = logging.getLogger(__name__)


def find_ics_files(calendars_dir: Path) -> list[Path]:
    if not calendars_dir.is_dir():
        raise FileNotFoundError(f"Calendars directory not found: {calendars_dir}")
    return sorted(
        (p for p in calendars_dir.rglob("*.ics") if p.is_file()),
        key=lambda p: p.relative_to(calendars_dir).as_posix(),
    )


def format_link(path: Path, calendars_dir: Path, base_url: str) -> str:
    rel = path.relative_to(calendars_dir).as_posix()
    url = f"{base_url.rstrip('/')}/{rel}" if base_url else rel
    return f"- 🗓️ [{path.name}]({url})"


def replace_between_markers(
    text: str,
    links: list[str],
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
) -> str:
    start = text.find(start_marker)
    end = text.find(end_marker)
    if start == -1 or end == -1:
        raise ValueError("README is missing calendar link markers")
    if end < start:
        raise ValueError("README end marker appears before start marker")
    before = text[: start + len(start_marker)]
    after = text[end:]
    return before + "\n\n" + "\n".join(links) + "\n\n" + after


def update_readme(
    readme_path: Path,
    calendars_dir: Path,
    base_url: str,
    *,
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
) -> bool:
    """Rewrite the link block in the README; returns True when the file changed."""
    links = [format_link(p, calendars_dir, base_url) for p in find_ics_files(calendars_dir)]
    current = readme_path.read_text(encoding="utf-8")
    updated = replace_between_markers(current, links, start_marker, end_marker)
    if updated == current:
        logger.info("README already up to date (%d links)", len(links))
        return False
    readme_path.write_text(updated, encoding="utf-8")
    logger.info("README updated with %d calendar links", len(links))
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Update README calendar links")
    parser.add_argument("--config", help="Path to sopkalender.yaml")
    parser.add_argument("--readme", help="README path")
    parser.add_argument("--calendars", help="Calendars directory")
    parser.add_argument("--base-url", help="Base URL the calendars are published under")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(message)s")

    config, base_dir = load_from_env(args.config)
    readme = Path(args.readme) if args.readme else base_dir / config.readme.path
    calendars_dir = Path(args.calendars) if args.calendars else base_dir / config.calendars_dir
    base_url = args.base_url if args.base_url is not None else config.readme.base_url

    try:
        update_readme(
            readme,
            calendars_dir,
            base_url,
            start_marker=config.readme.start_marker,
            end_marker=config.readme.end_marker,
        )
    except ValueError as exc:
        logger.error("%s: %s", readme, exc)
        return 1
    return 0
