"""
profile.py – assemble the profile table and resolve the terrain label

The profile is a plain DataFrame, one row per sampled point in path order:

    position_index  x (lon)  y (lat)  distance_m  elevation_m
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import GeocodeConfig
from .errors import ElevationShapeError
from .geocode import GeocodeResult, ReverseGeocoder, reverse_geocode
from .models import Coordinate, ElevationSample, ProfileSummary

log = logging.getLogger("elevprofile.profile")

PROFILE_COLUMNS = ["position_index", "x", "y", "distance_m", "elevation_m"]


def build_profile(samples: Sequence[ElevationSample], expected: int) -> pd.DataFrame:
    if len(samples) != expected:
        raise ElevationShapeError(
            f"Profile has {len(samples)} rows, expected {expected}"
        )
    df = pd.DataFrame(
        {
            "x": [s.lon for s in samples],
            "y": [s.lat for s in samples],
            "distance_m": [s.distance_m for s in samples],
            "elevation_m": [np.nan if s.elevation_m is None else s.elevation_m
                            for s in samples],
        }
    )
    df.insert(0, "position_index", np.arange(1, len(df) + 1))
    if df["elevation_m"].isna().all():
        raise ElevationShapeError("Profile has no elevation values")
    log.debug("First rows of profile:\n%s", df.head())
    return df


def peak_row(profile: pd.DataFrame) -> pd.Series:
    """Highest sample; ties resolve to the earliest in path order, NaN ignored."""
    elev = profile["elevation_m"]
    if elev.isna().all():
        raise ElevationShapeError("Cannot locate peak: no elevation values")
    top = elev.max()
    first = int(np.flatnonzero((elev == top).to_numpy())[0])
    return profile.iloc[first]


def resolve_label(profile: pd.DataFrame,
                  manual_label: Optional[str],
                  geocoder: Optional[ReverseGeocoder],
                  cfg: GeocodeConfig) -> str:
    """User label wins; otherwise reverse-geocode the peak, falling back on failure."""
    if manual_label is not None:
        log.info("Manual terrain name provided: %s", manual_label)
        return manual_label

    log.info("Attempting to automatically determine terrain name from peak elevation…")
    peak = peak_row(profile)
    coord = Coordinate(float(peak["x"]), float(peak["y"]))
    if geocoder is None:
        result = GeocodeResult(label=cfg.unnamed_label)
    else:
        result = reverse_geocode(geocoder, coord, cfg.unnamed_label)

    if not result.ok:
        log.warning("Reverse geocoding failed. Using a default name. Error: %s", result.error)
    label = result.unwrap_or(cfg.fallback_label)
    log.info("Determined terrain name: %s", label)
    return label


def summarize(profile: pd.DataFrame) -> ProfileSummary:
    elev = profile["elevation_m"]
    steps = elev.dropna().diff().dropna()
    peak = peak_row(profile)
    return ProfileSummary(
        points=len(profile),
        min_elevation_m=float(elev.min()),
        max_elevation_m=float(elev.max()),
        ascent_m=float(steps[steps > 0].sum()),
        descent_m=float(-steps[steps < 0].sum()),
        peak_position=int(peak["position_index"]),
        peak=Coordinate(float(peak["x"]), float(peak["y"])),
        missing=int(elev.isna().sum()),
    )


__all__ = ["PROFILE_COLUMNS", "build_profile", "peak_row", "resolve_label", "summarize"]
