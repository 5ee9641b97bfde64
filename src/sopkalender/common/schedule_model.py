from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


def _as_text(v: object) -> str | None:
    # None stays a lookup miss; other scalars are looked up by their text.
    if v is None or isinstance(v, str):
        return v
    return str(v)


class _AreaFileModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TypeMetadata(_AreaFileModel):
    type_code: str = Field(alias="type")
    icon: str = ""
    description: str = ""


class ScheduleWeek(_AreaFileModel):
    week_number: int = Field(alias="weekNumber", ge=1, le=53)
    type: str | None = None
    description: str | None = None
    pickup_day_diff: int = Field(default=0, alias="pickupDayDiff")

    @field_validator("pickup_day_diff", mode="before")
    @classmethod
    def _null_diff(cls, v: int | None) -> int:
        return 0 if v is None else v

    @field_validator("type", mode="before")
    @classmethod
    def _type_as_text(cls, v: object) -> str | None:
        return _as_text(v)


class StreetSchedule(_AreaFileModel):
    street: str
    pickup_day: str | None = Field(default=None, alias="pickupDay")

    @field_validator("street")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("street must be non-empty")
        return v

    @field_validator("pickup_day", mode="before")
    @classmethod
    def _pickup_day_as_text(cls, v: object) -> str | None:
        return _as_text(v)


class AreaSchedule(_AreaFileModel):
    area: str
    year: int
    week: list[ScheduleWeek] = Field(default_factory=list)
    types: list[TypeMetadata] = Field(default_factory=list)
    street_pickup: list[StreetSchedule] = Field(default_factory=list, alias="streetPickup")
    calendar_title: str = Field(alias="calendarTitle")

    @field_validator("area", mode="before")
    @classmethod
    def _area_as_str(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


TypeMap = Mapping[str, TypeMetadata]


def build_type_map(types: Iterable[TypeMetadata]) -> TypeMap:
    # Later declarations of the same code win.
    return MappingProxyType({t.type_code: t for t in types})


def load_area_file(path: Path) -> AreaSchedule:
    if not path.exists():
        raise FileNotFoundError(f"Area file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    try:
        return AreaSchedule.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid area file {path}: {exc}") from exc


def area_files(areas_dir: Path) -> list[Path]:
    if not areas_dir.is_dir():
        raise FileNotFoundError(f"Areas directory not found: {areas_dir}")
    return sorted(p for p in areas_dir.iterdir() if p.suffix == ".json" and p.is_file())
