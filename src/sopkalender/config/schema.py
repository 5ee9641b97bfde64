from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from sopkalender.common.ics import DEFAULT_PRODID

DEFAULT_START_MARKER = "<!-- auto-generated-calendar-links:start -->"
DEFAULT_END_MARKER = "<!-- auto-generated-calendar-links:end -->"


class IcsConfig(BaseModel):
    prodid: str = DEFAULT_PRODID
    calendar_name_template: str = "{calendar_title} – {street}"

    @field_validator("prodid")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prodid must be non-empty")
        return v


class ReadmeConfig(BaseModel):
    path: str = "README.md"
    base_url: str = ""
    start_marker: str = DEFAULT_START_MARKER
    end_marker: str = DEFAULT_END_MARKER

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def _distinct_markers(self) -> ReadmeConfig:
        if self.start_marker == self.end_marker:
            raise ValueError("start_marker and end_marker must differ")
        return self


class ResolverConfig(BaseModel):
    suggestion_limit: int = 10
    fuzzy_threshold: int = 75

    @field_validator("suggestion_limit")
    @classmethod
    def _suggestion_limit_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("suggestion_limit must be > 0")
        return v

    @field_validator("fuzzy_threshold")
    @classmethod
    def _fuzzy_threshold_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("fuzzy_threshold must be between 0 and 100")
        return v


class ServiceConfig(BaseModel):
    reload_interval_seconds: int = 10

    @field_validator("reload_interval_seconds")
    @classmethod
    def _reload_interval_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("reload_interval_seconds must be >= 1")
        return v


class GeneratorConfig(BaseModel):
    areas_dir: str = "areas"
    calendars_dir: str = "calendars"
    ics: IcsConfig = Field(default_factory=IcsConfig)
    readme: ReadmeConfig = Field(default_factory=ReadmeConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    @field_validator("areas_dir", "calendars_dir")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value must be non-empty")
        return v


def validate_config(data: dict[str, Any]) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config: {exc}") from exc
