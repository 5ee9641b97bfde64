from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from sopkalender.config.schema import GeneratorConfig, validate_config

DEFAULT_CONFIG_NAME = "sopkalender.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must be a mapping: {path}")
    return data


def resolve_config_path(config_path: str | None = None) -> Path | None:
    if config_path:
        return Path(config_path).expanduser().resolve()
    if env_path := os.getenv("SOPKALENDER_CONFIG_PATH"):
        return Path(env_path).expanduser().resolve()
    default = Path.cwd() / DEFAULT_CONFIG_NAME
    return default.resolve() if default.exists() else None


def load_config(config_path: Path | None) -> tuple[GeneratorConfig, Path]:
    """Load the config and return it with the directory relative paths resolve against."""
    if config_path is None:
        return GeneratorConfig(), Path.cwd().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    data = _load_yaml(config_path)
    return validate_config(data), config_path.parent.resolve()


def load_from_env(config_path: str | None = None) -> tuple[GeneratorConfig, Path]:
    return load_config(resolve_config_path(config_path))
