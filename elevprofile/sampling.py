"""
sampling.py – path geometry, regular sampling and geodesic distances

Public symbols
--------------
SampleShape              – the shapes a sampling primitive may hand back
classify_samples(...)    – decide which SampleShape a raw result is
normalize_samples(...)   – flatten any recognised shape into list[Point]
geodesic_distance(...)   – WGS-84 ellipsoidal distance (Karney, via pyproj)
sample_path(...)         – start/end → SampledPath with N SampledPoints
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Sequence

import geopandas as gpd
import numpy as np
import shapely
from pyproj import Geod
from shapely.geometry import GeometryCollection, LineString, MultiPoint, Point

from . import SAMPLE_COUNT
from .errors import InputError, SamplingShapeError
from .models import Coordinate, SampledPoint

log = logging.getLogger("elevprofile.sampling")
_GEOD = Geod(ellps="WGS84")

Sampler = Callable[[LineString, int], object]


# ────────────────────────────────────────────────────────────────────────────
# Shape normalisation
# ────────────────────────────────────────────────────────────────────────────
class SampleShape(Enum):
    SINGLE = "single multipoint"
    POINT_LIST = "point list"
    COLLECTION = "geometry collection"


def _describe(result: object) -> str:
    if isinstance(result, shapely.Geometry):
        return result.geom_type
    if isinstance(result, (list, tuple, np.ndarray, gpd.GeoSeries)):
        kinds = sorted({getattr(g, "geom_type", type(g).__name__) for g in result})
        return f"{type(result).__name__} of {len(result)} [{', '.join(kinds)}]"
    return type(result).__name__


def classify_samples(result: object) -> SampleShape:
    """
    Work out which of the recognised shapes `result` has.

    A one-row GeoSeries is unwrapped first, so a single aggregate feature is
    treated the same way as the bare geometry.
    """
    if isinstance(result, gpd.GeoSeries):
        result = result.iloc[0] if len(result) == 1 else list(result)

    if isinstance(result, (MultiPoint, Point)):
        return SampleShape.SINGLE
    if isinstance(result, GeometryCollection):
        return SampleShape.COLLECTION
    if isinstance(result, (list, tuple, np.ndarray)) and len(result) > 0:
        if all(isinstance(g, Point) for g in result):
            return SampleShape.POINT_LIST
    raise SamplingShapeError("MultiPoint, list of Points or GeometryCollection",
                             _describe(result))


def _collection_points(coll: GeometryCollection) -> List[Point]:
    out: List[Point] = []
    for g in coll.geoms:
        if g.is_empty:
            continue
        if isinstance(g, Point):
            out.append(g)
        elif isinstance(g, MultiPoint):
            out.extend(g.geoms)
        else:
            raise SamplingShapeError("only point members in GeometryCollection",
                                     f"member of type {g.geom_type}")
    return out


def normalize_samples(result: object, expected: int) -> List[Point]:
    """Return a flat, ordered list of exactly `expected` Points."""
    shape = classify_samples(result)
    if isinstance(result, gpd.GeoSeries):
        result = result.iloc[0] if len(result) == 1 else list(result)

    if shape is SampleShape.SINGLE:
        log.info("Detected single %s feature – casting to individual points", result.geom_type)
        points = list(result.geoms) if isinstance(result, MultiPoint) else [result]
    elif shape is SampleShape.POINT_LIST:
        points = list(result)
    else:
        log.info("Sample result is a GeometryCollection – extracting points")
        points = _collection_points(result)

    if len(points) != expected:
        raise SamplingShapeError(f"{expected} points",
                                 f"{len(points)} points ({shape.value})")
    log.debug("Normalised %s → %d points", shape.value, len(points))
    return points


# ────────────────────────────────────────────────────────────────────────────
# Geometry helpers
# ────────────────────────────────────────────────────────────────────────────
def geodesic_distance(start: Coordinate, end: Coordinate) -> float:
    _, _, dist = _GEOD.inv(start.lon, start.lat, end.lon, end.lat)
    return float(dist)


def distances_from(origin: Coordinate, points: Sequence[Point]) -> np.ndarray:
    """Geodesic distance (m) from `origin` to every point, vectorised."""
    lons = np.array([p.x for p in points], dtype=float)
    lats = np.array([p.y for p in points], dtype=float)
    _, _, dist = _GEOD.inv(np.full_like(lons, origin.lon), np.full_like(lats, origin.lat),
                           lons, lats)
    return np.abs(np.asarray(dist, dtype=float))


def path_length(points: Sequence[SampledPoint]) -> float:
    """Sum of the geodesic legs between consecutive sampled points."""
    return float(_GEOD.line_length([p.lon for p in points], [p.lat for p in points]))


def build_path(start: Coordinate, end: Coordinate) -> LineString:
    return LineString([start.as_tuple(), end.as_tuple()])


def sample_line(line: LineString, size: int) -> np.ndarray:
    """Regular sampling, endpoints included."""
    return shapely.line_interpolate_point(line, np.linspace(0.0, 1.0, size), normalized=True)


# ────────────────────────────────────────────────────────────────────────────
# Public API
# ────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SampledPath:
    start: Coordinate
    end: Coordinate
    points: List[SampledPoint]
    geodetic_distance_m: float
    shape: SampleShape

    @property
    def display_distance_m(self) -> float:
        return round(self.geodetic_distance_m, 2)

    def __len__(self) -> int:
        return len(self.points)


def sample_path(start: Coordinate,
                end: Coordinate,
                size: int = SAMPLE_COUNT,
                sampler: Sampler = sample_line) -> SampledPath:
    """
    Sample `size` evenly spaced points on the straight line start → end.

    Zero-length paths are rejected up front; they cannot produce a
    meaningful profile and would only cost an elevation request.
    """
    if size < 2:
        raise InputError(f"Need at least 2 samples, got {size}")
    if np.isclose(start.lon, end.lon, rtol=0, atol=1e-12) and \
            np.isclose(start.lat, end.lat, rtol=0, atol=1e-12):
        raise InputError("Start and end coordinates are identical – zero-length path")

    total = geodesic_distance(start, end)
    log.info("Calculated geodetic distance: %.2f m", total)

    raw = sampler(build_path(start, end), size)
    shape = classify_samples(raw)
    log.info("Sampler returned %s", _describe(raw))
    points = normalize_samples(raw, size)

    dists = distances_from(start, points)
    if dists.shape != (size,):
        raise SamplingShapeError(f"{size} x 1 distance vector", f"shape {dists.shape}")

    sampled = [
        SampledPoint(Coordinate(float(p.x), float(p.y)), float(d))
        for p, d in zip(points, dists)
    ]
    log.debug("First samples: %s", sampled[:3])
    return SampledPath(start, end, sampled, total, shape)


__all__ = [
    "SampleShape",
    "SampledPath",
    "classify_samples",
    "normalize_samples",
    "geodesic_distance",
    "distances_from",
    "path_length",
    "build_path",
    "sample_line",
    "sample_path",
]
