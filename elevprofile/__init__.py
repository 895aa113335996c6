"""
elevprofile – glowing elevation profiles between two coordinates.
Top-level package. Exposes the shared constants and the package logger;
logging itself is configured by :func:`elevprofile.runtime.init_runtime`.
"""

from __future__ import annotations

import logging
from typing import Final

__all__ = [
    "logger",
    "__version__",
    "SAMPLE_COUNT",
    "DEFAULT_OUTPUT",
    "DEFAULT_ZOOM",
    "WGS84_CRS",
]

__version__ = "0.3.0"

# ---------- pipeline constants ----------
SAMPLE_COUNT: Final[int] = 1_000
DEFAULT_OUTPUT: Final[str] = "elevation_profile.png"
DEFAULT_ZOOM: Final[int] = 14
WGS84_CRS: Final[str] = "EPSG:4326"

logger = logging.getLogger("elevprofile")
