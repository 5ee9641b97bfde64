from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from flask import Flask, current_app, jsonify, request

from sopkalender.common.ics import serialize_calendar
from sopkalender.common.schedule_model import AreaSchedule, build_type_map
from sopkalender.config.loader import load_from_env
from sopkalender.config.schema import GeneratorConfig
from sopkalender.generator.build_calendars import calendar_name, run_timestamp
from sopkalender.generator.events import build_events
from sopkalender.service.areas import AreaLoader
from sopkalender.service.resolver import resolve_street

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    config, base_dir = load_from_env()

    areas_dir = Path(os.getenv("AREAS_DIR") or base_dir / config.areas_dir).resolve()
    if not areas_dir.is_dir():
        raise FileNotFoundError(f"Areas directory missing: {areas_dir}")

    area_loader = AreaLoader(areas_dir, config.service.reload_interval_seconds)

    app = Flask(__name__)
    app.config["GENERATOR_CONFIG"] = config
    app.config["AREA_LOADER"] = area_loader
    # One DTSTAMP per process keeps repeated downloads identical.
    app.config["DTSTAMP"] = run_timestamp()

    @app.get("/healthz")
    def healthz() -> Any:
        return jsonify({"ok": True})

    @app.get("/areas")
    def areas() -> Any:
        loaded = area_loader.get_areas()
        return jsonify(
            [
                {
                    "area": area.area,
                    "year": area.year,
                    "calendar_title": area.calendar_title,
                    "streets": len(area.street_pickup),
                }
                for _, area in sorted(loaded.items())
            ]
        )

    @app.get("/areas/<area_id>/streets")
    def streets(area_id: str) -> Any:
        area = area_loader.get_areas().get(area_id)
        if area is None:
            return jsonify({"error": f"Unknown area: {area_id}"}), 404
        return jsonify(sorted({s.street for s in area.street_pickup}))

    @app.get("/areas/<area_id>/calendar.ics")
    def area_calendar(area_id: str) -> Any:
        area = area_loader.get_areas().get(area_id)
        if area is None:
            return jsonify({"error": f"Unknown area: {area_id}"}), 404

        street = request.args.get("street", "")
        if not street.strip():
            return jsonify({"error": "street is required"}), 400

        resolved = resolve_street(
            area,
            street,
            suggestion_limit=config.resolver.suggestion_limit,
            fuzzy_threshold=config.resolver.fuzzy_threshold,
        )
        if resolved.street is None:
            return jsonify({"error": resolved.error, "suggestions": resolved.suggestions}), 404

        ics_text = _street_ics(area, resolved.street.street, resolved.street.pickup_day)
        return app.response_class(ics_text, mimetype="text/calendar")

    return app


def _street_ics(area: AreaSchedule, street: str, pickup_day: str | None) -> str:
    config = _get_config()
    events = build_events(
        area.area,
        street,
        area.year,
        area.week,
        build_type_map(area.types),
        pickup_day,
    )
    return serialize_calendar(
        calendar_name(config.ics, area, street),
        events,
        current_app.config["DTSTAMP"],
        prodid=config.ics.prodid,
    )


def _get_config() -> GeneratorConfig:
    return current_app.config["GENERATOR_CONFIG"]
