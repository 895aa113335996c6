"""
errors.py – exception taxonomy for the profile pipeline.

Everything except :class:`GeocodeError` terminates a run. The geocoding
step wraps its failure in a :class:`~elevprofile.geocode.GeocodeResult`
instead of raising it.
"""

from __future__ import annotations


class ElevationProfileError(Exception):
    """Base error for the elevation-profile pipeline."""

    exit_code = 1


class InputError(ElevationProfileError):
    """Malformed command-line input; raised before any network call."""

    exit_code = 2


class ConfigError(ElevationProfileError):
    """Configuration file is missing, unreadable or malformed."""


class SamplingShapeError(ElevationProfileError):
    """The sampling primitive returned something we do not recognise.

    Attributes:
        expected: Description of the expected shape
        actual: Description of what was received
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Unexpected sample shape: expected {expected}, got {actual}")


class ElevationFetchError(ElevationProfileError):
    """Elevation provider could not be reached or returned an error."""


class ElevationShapeError(ElevationFetchError):
    """Provider answered, but the table cannot be aligned with the samples."""


class GeocodeError(ElevationProfileError):
    """Reverse geocoding failed (network, provider or malformed payload)."""


class RenderError(ElevationProfileError):
    """The profile image could not be written."""


__all__ = [
    "ElevationProfileError",
    "InputError",
    "ConfigError",
    "SamplingShapeError",
    "ElevationFetchError",
    "ElevationShapeError",
    "GeocodeError",
    "RenderError",
]
