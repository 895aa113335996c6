"""
pipeline.py – one profile run, start to finish

    Sample → FetchElevation → AssembleProfile → Render

Strictly forward, no retries. Every stage failure propagates as an
ElevationProfileError except reverse geocoding, which degrades to the
fallback label inside `resolve_label`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .elevation import fetch_elevations
from .models import Coordinate, PlotStyle, ProfileSummary
from .profile import build_profile, resolve_label, summarize
from .render import choose_style, render_profile
from .runtime import Runtime
from .sampling import sample_path

log = logging.getLogger("elevprofile.pipeline")


@dataclass(frozen=True)
class ProfileRun:
    profile: pd.DataFrame
    label: str
    geodetic_distance_m: float
    style: PlotStyle
    output_path: Path
    summary: ProfileSummary


def run_profile(start: Coordinate,
                end: Coordinate,
                runtime: Runtime,
                output_path: Union[str, Path],
                terrain_name: Optional[str] = None) -> ProfileRun:
    settings = runtime.settings
    size = settings.sampling.sample_count

    # 1 ▸ sample the path ------------------------------------------------
    log.info("--- Step 1: Defining Path and Sampling Points ---")
    path = sample_path(start, end, size)

    # 2 ▸ elevations -----------------------------------------------------
    log.info("--- Step 2: Fetching Elevation Data ---")
    samples = fetch_elevations(path.points, runtime.provider, settings.elevation.zoom)
    profile = build_profile(samples, size)

    # 3 ▸ label + render -------------------------------------------------
    log.info("--- Step 3: Creating and Saving Plot ---")
    label = resolve_label(profile, terrain_name, runtime.geocoder, settings.geocode)
    style = choose_style(runtime.rng, settings.render)
    written = render_profile(profile, label, path.display_distance_m, style,
                             output_path, settings.render)

    summary = summarize(profile)
    log.info("%s ✓ %d samples | %.2f km | %.0f–%.0f m | +%.0f / −%.0f m",
                label,
                summary.points,
                path.geodetic_distance_m / 1_000,
                summary.min_elevation_m,
                summary.max_elevation_m,
                summary.ascent_m,
                summary.descent_m)

    return ProfileRun(profile, label, path.display_distance_m, style, written, summary)


__all__ = ["ProfileRun", "run_profile"]
