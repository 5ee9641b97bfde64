from __future__ import annotations

from dataclasses import dataclass

from rapidfuzz import process

from sopkalender.common.normalize import to_file_safe_slug
from sopkalender.common.schedule_model import AreaSchedule, StreetSchedule


@dataclass
class StreetResolution:
    street: StreetSchedule | None
    suggestions: list[str]
    error: str | None = None


def _collect_suggestions(
    query: str, streets: list[str], limit: int, score_cutoff: int
) -> list[str]:
    if not query:
        return []
    results = process.extract(
        query,
        streets,
        score_cutoff=score_cutoff,
        limit=limit,
    )
    return [match[0] for match in results]


def resolve_street(
    area: AreaSchedule,
    street: str,
    *,
    suggestion_limit: int,
    fuzzy_threshold: int,
) -> StreetResolution:
    slug = to_file_safe_slug(street.strip())
    if not slug:
        return StreetResolution(street=None, suggestions=[], error="Invalid street")

    for candidate in area.street_pickup:
        if to_file_safe_slug(candidate.street) == slug:
            return StreetResolution(street=candidate, suggestions=[])

    streets = sorted({s.street for s in area.street_pickup})
    return StreetResolution(
        street=None,
        suggestions=_collect_suggestions(street, streets, suggestion_limit, fuzzy_threshold),
        error="Street not found",
    )
