"""
config.py – run configuration (defaults → YAML/JSON file → environment)

Every knob has a default, so a bare `python -m elevprofile ...` needs no
config file at all. Precedence, lowest first:

    dataclass defaults  <  --config file  <  ELEVPROFILE_* env vars  <  CLI flags
"""
from __future__ import annotations

import json
import os
from logging import getLevelName
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from . import DEFAULT_ZOOM, SAMPLE_COUNT
from .errors import ConfigError

ENV_PREFIX = "ELEVPROFILE_"


@dataclass
class SamplingConfig:
    """Path sampling"""
    sample_count: int = SAMPLE_COUNT

    def __post_init__(self):
        if self.sample_count < 2:
            raise ConfigError("sample_count must be at least 2")


@dataclass
class ElevationConfig:
    """Elevation provider"""
    provider: str = "aws"
    zoom: int = DEFAULT_ZOOM
    timeout_s: float = 60.0
    tile_url: str = "https://s3.amazonaws.com/elevation-tiles-prod/terrarium/{z}/{x}/{y}.png"
    open_elevation_url: str = "https://api.open-elevation.com/api/v1/lookup"

    def __post_init__(self):
        if not 0 <= self.zoom <= 15:
            raise ConfigError(f"zoom must be within 0..15, got {self.zoom}")
        if self.timeout_s <= 0:
            raise ConfigError("timeout_s must be positive")


@dataclass
class GeocodeConfig:
    """Reverse geocoding (OSM / Nominatim)"""
    provider: str = "osm"
    user_agent: str = "elevprofile"
    timeout_s: float = 10.0
    fallback_label: str = "Elevation Profile"
    unnamed_label: str = "Unnamed Terrain"


@dataclass
class RenderConfig:
    """Image output"""
    width_in: float = 16.18
    height_in: float = 10.0
    dpi: int = 300
    background: str = "#1a1a1a"
    axis_color: str = "#39ff14"
    area_color: str = "black"
    reverse_x: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"

    def __post_init__(self):
        self.level = str(self.level).upper()
        if not isinstance(getLevelName(self.level), int):
            raise ConfigError(f"Unknown log level '{self.level}'")


@dataclass
class Settings:
    """Main configuration class containing all settings"""
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    elevation: ElevationConfig = field(default_factory=ElevationConfig)
    geocode: GeocodeConfig = field(default_factory=GeocodeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        sections = {f.name: f.default_factory for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown config sections: {sorted(unknown)}")

        kwargs = {}
        for name, factory in sections.items():
            section = data.get(name) or {}
            if not isinstance(section, Mapping):
                raise ConfigError(f"Config section '{name}' must be a mapping")
            try:
                kwargs[name] = factory(**section)
            except TypeError as exc:
                raise ConfigError(f"Bad keys in section '{name}': {exc}") from exc
        return cls(**kwargs)

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path]) -> "Settings":
        """Load configuration from a YAML or JSON file"""
        file_path = Path(file_path)
        if not file_path.is_file():
            raise ConfigError(f"Configuration file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                if file_path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read {file_path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"{file_path} must contain a mapping at top level")
        return cls.from_dict(data)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Return a copy with ELEVPROFILE_* environment overrides applied."""
        env = os.environ if environ is None else environ

        logging_cfg = self.logging
        elevation = self.elevation
        geocode = self.geocode

        if f"{ENV_PREFIX}LOG_LEVEL" in env:
            logging_cfg = replace(logging_cfg, level=env[f"{ENV_PREFIX}LOG_LEVEL"].upper())
        if f"{ENV_PREFIX}ELEVATION_PROVIDER" in env:
            elevation = replace(elevation, provider=env[f"{ENV_PREFIX}ELEVATION_PROVIDER"])
        if f"{ENV_PREFIX}TIMEOUT" in env:
            try:
                elevation = replace(elevation, timeout_s=float(env[f"{ENV_PREFIX}TIMEOUT"]))
            except ValueError as exc:
                raise ConfigError(f"{ENV_PREFIX}TIMEOUT must be a number") from exc
        if f"{ENV_PREFIX}USER_AGENT" in env:
            geocode = replace(geocode, user_agent=env[f"{ENV_PREFIX}USER_AGENT"])

        return replace(self, logging=logging_cfg, elevation=elevation, geocode=geocode)


def load_settings(config_path: Union[str, Path, None] = None,
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    settings = Settings.load_from_file(config_path) if config_path else Settings()
    return settings.with_env(environ)
