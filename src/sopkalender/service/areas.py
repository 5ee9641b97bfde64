from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from sopkalender.common.schedule_model import AreaSchedule, area_files, load_area_file

logger = logging.getLogger(__name__)


def load_areas(areas_dir: Path) -> dict[str, AreaSchedule]:
    areas: dict[str, AreaSchedule] = {}
    for path in area_files(areas_dir):
        try:
            area = load_area_file(path)
        except (OSError, ValueError) as exc:
            logger.error("Skipping area file %s: %s", path.name, exc)
            continue
        if area.area in areas:
            logger.warning("Area %s declared again in %s; replacing", area.area, path.name)
        areas[area.area] = area
    return areas


def _snapshot(areas_dir: Path) -> dict[str, float]:
    return {p.name: p.stat().st_mtime for p in area_files(areas_dir)}


@dataclass
class AreaLoader:
    areas_dir: Path
    reload_interval_seconds: int
    _cached: dict[str, AreaSchedule] | None = None
    _cached_snapshot: dict[str, float] = field(default_factory=dict)
    _last_check: float = 0.0

    def get_areas(self) -> dict[str, AreaSchedule]:
        now = time.monotonic()
        if self._cached is None:
            self._reload()
            return self._cached  # type: ignore[return-value]

        if now - self._last_check >= self.reload_interval_seconds:
            self._last_check = now
            if _snapshot(self.areas_dir) != self._cached_snapshot:
                logger.info("Area files changed; reloading")
                self._reload()

        return self._cached  # type: ignore[return-value]

    def _reload(self) -> None:
        self._cached_snapshot = _snapshot(self.areas_dir)
        self._cached = load_areas(self.areas_dir)
        self._last_check = time.monotonic()
