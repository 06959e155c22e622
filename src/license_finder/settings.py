from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .reporting import FORMATS, SUMMARY_MODES


@dataclass
class Settings:
    """Defaults for a scan; CLI options override whatever is set here."""

    summary_mode: str = "off"
    fmt: str = "standard"
    depth: Optional[int] = None
    production_only: bool = False

    def __post_init__(self) -> None:
        if self.summary_mode not in SUMMARY_MODES:
            raise ConfigError(
                f"Unknown summary mode '{self.summary_mode}' (expected one of {', '.join(SUMMARY_MODES)})"
            )
        if self.fmt not in FORMATS:
            raise ConfigError(f"Unknown report format '{self.fmt}' (expected one of {', '.join(FORMATS)})")
        if self.depth is not None and self.depth < 0:
            raise ConfigError("depth must be zero or a positive integer")

    def merge(self, **overrides) -> "Settings":
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    def as_dict(self) -> dict:
        return {
            "summary_mode": self.summary_mode,
            "fmt": self.fmt,
            "depth": self.depth,
            "production_only": self.production_only,
        }


def default_settings() -> Settings:
    return Settings(
        summary_mode=os.getenv("LICENSE_FINDER_SUMMARY", "off").lower(),
        fmt=os.getenv("LICENSE_FINDER_FORMAT", "standard").lower(),
    )


def load_settings(path: Path, base: Settings | None = None) -> Settings:
    """Overlay the ``summary``/``format``/``depth``/``production`` keys of a YAML file."""

    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid settings file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    depth = raw.get("depth")
    if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int)):
        raise ConfigError("depth must be an integer")

    summary = raw.get("summary")
    if summary is False:
        # YAML reads a bare ``off`` as false.
        summary = "off"
    fmt = raw.get("format")
    production = raw.get("production")
    return (base or default_settings()).merge(
        summary_mode=str(summary).lower() if summary is not None else None,
        fmt=str(fmt).lower() if fmt is not None else None,
        depth=depth,
        production_only=bool(production) if production is not None else None,
    )
