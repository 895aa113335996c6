"""
elevation.py – batch elevation lookup for the sampled path

Two providers are wired in:

  aws             Terrarium terrain tiles (AWS open data), decoded locally.
                  Every distinct tile touched by the batch is downloaded once.
  open-elevation  One POST to an Open-Elevation compatible /api/v1/lookup.

Both take the whole coordinate batch in a single call and return a
DataFrame with one row per input point, in input order. The fetcher then
checks the row count, finds the elevation column and zips the values back
onto the sampled points. Nothing here retries; a failed lookup ends the run.
"""
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Dict, List, Sequence, Tuple, Type

import geopandas as gpd
import numpy as np
import pandas as pd
import requests
from PIL import Image

from . import WGS84_CRS
from .config import ElevationConfig
from .errors import ConfigError, ElevationFetchError, ElevationShapeError
from .models import ElevationSample, SampledPoint

log = logging.getLogger("elevprofile.elevation")

TILE_SIZE = 256
ELEVATION_COL = "elevation"


# ────────────────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────────────────
def points_frame(points: Sequence[SampledPoint]) -> gpd.GeoDataFrame:
    """
    Point GeoDataFrame in EPSG:4326, one row per sampled point. Providers
    read coordinates from the geometry; x/y copies travel along as columns.
    """
    xs = [p.lon for p in points]
    ys = [p.lat for p in points]
    return gpd.GeoDataFrame(
        {"x": xs, "y": ys},
        geometry=gpd.points_from_xy(xs, ys),
        crs=WGS84_CRS,
    )


def lonlat_to_tile_pixel(lon: np.ndarray, lat: np.ndarray, zoom: int
                         ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Web-Mercator slippy-map tile indices and in-tile pixel offsets."""
    n = 2 ** zoom
    lat_rad = np.radians(np.clip(lat, -85.05112878, 85.05112878))
    fx = (np.asarray(lon, dtype=float) + 180.0) / 360.0 * n
    fy = (1.0 - np.arcsinh(np.tan(lat_rad)) / math.pi) / 2.0 * n

    tx = np.clip(np.floor(fx), 0, n - 1).astype(int)
    ty = np.clip(np.floor(fy), 0, n - 1).astype(int)
    px = np.clip(np.floor((fx - tx) * TILE_SIZE), 0, TILE_SIZE - 1).astype(int)
    py = np.clip(np.floor((fy - ty) * TILE_SIZE), 0, TILE_SIZE - 1).astype(int)
    return tx, ty, px, py


def decode_terrarium(rgb: np.ndarray) -> np.ndarray:
    """Terrarium encoding: (R·256 + G + B/256) − 32768 metres."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0] * 256.0 + rgb[..., 1] + rgb[..., 2] / 256.0 - 32768.0


def normalize_elevation_column(table: pd.DataFrame) -> pd.DataFrame:
    """
    Make sure the elevation values live in a column called `elevation`.

    If the provider used another name, exactly one column containing
    "elev" (case-insensitive) is adopted and renamed. Zero or several
    candidates is an error; we do not guess.
    """
    if ELEVATION_COL in table.columns:
        return table

    candidates = [c for c in table.columns if "elev" in str(c).lower()]
    if len(candidates) != 1:
        raise ElevationShapeError(
            f"'{ELEVATION_COL}' column not found in provider result and "
            f"{len(candidates)} candidate(s) match 'elev'. "
            f"Available columns: {', '.join(map(str, table.columns))}"
        )
    log.info("Note: '%s' column not found, using '%s' as elevation data",
             ELEVATION_COL, candidates[0])
    return table.rename(columns={candidates[0]: ELEVATION_COL})


# ────────────────────────────────────────────────────────────────────────────
# Providers
# ────────────────────────────────────────────────────────────────────────────
class ElevationProvider(ABC):
    name: str = ""

    def __init__(self, session: requests.Session, timeout: float):
        self.session = session
        self.timeout = timeout

    @abstractmethod
    def lookup(self, frame: gpd.GeoDataFrame, zoom: int) -> pd.DataFrame:
        """Return one row per row of `frame`, same order."""


class TerrariumTileProvider(ElevationProvider):
    name = "aws"

    def __init__(self, session: requests.Session, timeout: float, url_template: str):
        super().__init__(session, timeout)
        self.url_template = url_template

    def _tile(self, z: int, x: int, y: int) -> np.ndarray:
        url = self.url_template.format(z=z, x=x, y=y)
        log.debug("GET %s", url)
        r = self.session.get(url, timeout=self.timeout)
        r.raise_for_status()
        with Image.open(BytesIO(r.content)) as img:
            return decode_terrarium(np.asarray(img.convert("RGB")))

    def lookup(self, frame: gpd.GeoDataFrame, zoom: int) -> pd.DataFrame:
        lon = frame.geometry.x.to_numpy(dtype=float)
        lat = frame.geometry.y.to_numpy(dtype=float)
        tx, ty, px, py = lonlat_to_tile_pixel(lon, lat, zoom)

        elev = np.full(len(frame), np.nan)
        tiles = sorted(set(zip(tx.tolist(), ty.tolist())))
        log.info("Downloading %d terrain tile(s) at z=%d", len(tiles), zoom)
        for x, y in tiles:
            grid = self._tile(zoom, x, y)
            mask = (tx == x) & (ty == y)
            elev[mask] = grid[py[mask], px[mask]]

        return pd.DataFrame({"x": lon, "y": lat, ELEVATION_COL: elev, "elev_units": "meters"})


class OpenElevationProvider(ElevationProvider):
    name = "open-elevation"

    def __init__(self, session: requests.Session, timeout: float, url: str):
        super().__init__(session, timeout)
        self.url = url

    def lookup(self, frame: gpd.GeoDataFrame, zoom: int) -> pd.DataFrame:
        locations = [{"latitude": float(y), "longitude": float(x)}
                     for x, y in zip(frame.geometry.x, frame.geometry.y)]
        r = self.session.post(self.url, json={"locations": locations}, timeout=self.timeout)
        r.raise_for_status()
        results = r.json()["results"]
        table = pd.DataFrame(results)
        return table.rename(columns={"longitude": "x", "latitude": "y"})


PROVIDERS: Dict[str, Type[ElevationProvider]] = {
    TerrariumTileProvider.name: TerrariumTileProvider,
    OpenElevationProvider.name: OpenElevationProvider,
}


def build_provider(cfg: ElevationConfig, session: requests.Session) -> ElevationProvider:
    key = cfg.provider.lower().strip()
    if key == TerrariumTileProvider.name:
        return TerrariumTileProvider(session, cfg.timeout_s, cfg.tile_url)
    if key == OpenElevationProvider.name:
        return OpenElevationProvider(session, cfg.timeout_s, cfg.open_elevation_url)
    raise ConfigError(
        f"Unknown elevation provider '{cfg.provider}' (choose from {', '.join(PROVIDERS)})"
    )


# ────────────────────────────────────────────────────────────────────────────
# Public API
# ────────────────────────────────────────────────────────────────────────────
def fetch_elevations(points: Sequence[SampledPoint],
                     provider: ElevationProvider,
                     zoom: int) -> List[ElevationSample]:
    """
    One batched lookup for all `points`; values come back index-aligned
    with the input and are merged with each point's `distance_m`.
    """
    frame = points_frame(points)
    log.info("Fetching elevation data for %d points via '%s'. This may take a moment…",
             len(frame), provider.name)

    try:
        table = provider.lookup(frame, zoom)
    except ElevationFetchError:
        raise
    except (requests.RequestException, OSError, ValueError, KeyError) as exc:
        raise ElevationFetchError(f"Error fetching elevation data: {exc}") from exc

    if table is None or len(table) == 0:
        raise ElevationShapeError("Failed to retrieve elevation data or no data was returned")
    if len(table) != len(points):
        raise ElevationShapeError(
            f"Row mismatch between sampled points ({len(points)}) and elevation data "
            f"({len(table)}). Cannot reliably merge distance."
        )

    table = normalize_elevation_column(pd.DataFrame(table).reset_index(drop=True))
    values = pd.to_numeric(table[ELEVATION_COL], errors="coerce")
    if values.isna().all():
        raise ElevationShapeError("Provider returned no usable elevation values")
    if values.isna().any():
        log.warning("%d point(s) have no elevation value", int(values.isna().sum()))

    log.info("Elevation data fetched successfully.")
    log.debug("First elevation rows:\n%s", table.head())
    return [
        ElevationSample(p, None if pd.isna(v) else float(v))
        for p, v in zip(points, values)
    ]


__all__ = [
    "ELEVATION_COL",
    "ElevationProvider",
    "TerrariumTileProvider",
    "OpenElevationProvider",
    "PROVIDERS",
    "build_provider",
    "decode_terrarium",
    "lonlat_to_tile_pixel",
    "normalize_elevation_column",
    "points_frame",
    "fetch_elevations",
]
