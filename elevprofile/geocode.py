"""
geocode.py – name the highest point of the profile via OSM reverse geocoding

The lookup never raises. Success and failure both come back as a
GeocodeResult so the caller decides which label to show.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from geopy.geocoders import Nominatim

from .config import GeocodeConfig
from .errors import ConfigError, GeocodeError
from .models import Coordinate

log = logging.getLogger("elevprofile.geocode")

# natural feature > amenity > generic name
NAME_PRIORITY = ("natural", "amenity", "name")


class ReverseGeocoder(Protocol):
    def reverse(self, query: Any, *args: Any, **kwargs: Any) -> Any: ...


@dataclass(frozen=True)
class GeocodeResult:
    label: Optional[str] = None
    error: Optional[GeocodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.label is not None

    def unwrap_or(self, default: str) -> str:
        return self.label if self.ok else default


def build_geocoder(cfg: GeocodeConfig) -> ReverseGeocoder:
    if cfg.provider.lower() not in ("osm", "nominatim"):
        raise ConfigError(f"Unsupported geocoding provider '{cfg.provider}'")
    return Nominatim(user_agent=cfg.user_agent, timeout=cfg.timeout_s)


def pick_place_name(raw: Mapping[str, Any], unnamed: str = "Unnamed Terrain") -> str:
    """
    First non-empty of natural / amenity / name, looked up in the flattened
    address block first and then at the top level of the payload.
    """
    address = raw.get("address") or {}
    for key in NAME_PRIORITY:
        for source in (address, raw):
            value = source.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return unnamed


def reverse_geocode(geocoder: ReverseGeocoder,
                    coord: Coordinate,
                    unnamed: str = "Unnamed Terrain") -> GeocodeResult:
    try:
        location = geocoder.reverse((coord.lat, coord.lon),
                                    exactly_one=True,
                                    addressdetails=True)
        if location is None:
            return GeocodeResult(label=unnamed)
        raw = getattr(location, "raw", None)
        if not isinstance(raw, Mapping):
            raise GeocodeError(f"Malformed reverse-geocoding payload: {type(raw).__name__}")
        return GeocodeResult(label=pick_place_name(raw, unnamed))
    except GeocodeError as exc:
        return GeocodeResult(error=exc)
    except Exception as exc:  # noqa: BLE001
        err = GeocodeError(f"{type(exc).__name__}: {exc}")
        err.__cause__ = exc
        return GeocodeResult(error=err)


__all__ = [
    "GeocodeResult",
    "NAME_PRIORITY",
    "ReverseGeocoder",
    "build_geocoder",
    "pick_place_name",
    "reverse_geocode",
]
