"""Core dataclasses: coordinates, sampled points, elevation samples, plot style."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    lon: float
    lat: float

    def __post_init__(self):
        if not (math.isfinite(self.lon) and math.isfinite(self.lat)):
            raise ValueError(f"coordinate must be finite, got ({self.lon}, {self.lat})")
        if not -180 <= self.lon <= 180:
            raise ValueError(f"longitude out of range: {self.lon}")
        if not -90 <= self.lat <= 90:
            raise ValueError(f"latitude out of range: {self.lat}")

    def as_tuple(self) -> tuple[float, float]:
        return self.lon, self.lat


@dataclass(frozen=True)
class SampledPoint:
    coord: Coordinate
    distance_m: float

    def __post_init__(self):
        if self.distance_m < 0:
            raise ValueError("distance_m must be non-negative")

    @property
    def lon(self) -> float:
        return self.coord.lon

    @property
    def lat(self) -> float:
        return self.coord.lat


@dataclass(frozen=True)
class ElevationSample:
    point: SampledPoint
    elevation_m: Optional[float]          # None → provider had no value

    @property
    def lon(self) -> float:
        return self.point.lon

    @property
    def lat(self) -> float:
        return self.point.lat

    @property
    def distance_m(self) -> float:
        return self.point.distance_m


@dataclass(frozen=True)
class PlotStyle:
    glow_color: str
    background: str = "#1a1a1a"
    axis_color: str = "#39ff14"
    area_color: str = "black"


@dataclass(frozen=True)
class ProfileSummary:
    """Headline figures for one profile (elevations in metres)."""
    points: int
    min_elevation_m: float
    max_elevation_m: float
    ascent_m: float
    descent_m: float
    peak_position: int
    peak: Coordinate
    missing: int = 0

    @property
    def relief_m(self) -> float:
        return self.max_elevation_m - self.min_elevation_m
