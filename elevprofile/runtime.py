"""
runtime.py – one explicit setup call for a run

`init_runtime()` is the only place that touches process-wide state
(logging handlers, the matplotlib backend). It hands back a Runtime with
every outside collaborator the pipeline needs, so tests can build their
own Runtime from fakes instead.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

import matplotlib
import requests

from . import __version__
from . import logging_config
from .config import Settings
from .elevation import ElevationProvider, build_provider
from .geocode import ReverseGeocoder, build_geocoder
from .render import ColorSource

log = logging.getLogger("elevprofile.runtime")


@dataclass
class Runtime:
    settings: Settings
    provider: ElevationProvider
    geocoder: Optional[ReverseGeocoder]
    rng: ColorSource = field(default_factory=random.Random)
    session: Optional[requests.Session] = None

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    def __enter__(self) -> "Runtime":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def init_runtime(settings: Settings, seed: Optional[int] = None) -> Runtime:
    logging_config.configure(settings.logging.level)
    matplotlib.use("Agg")

    session = requests.Session()
    session.headers["User-Agent"] = f"{settings.geocode.user_agent}/{__version__}"

    runtime = Runtime(
        settings=settings,
        provider=build_provider(settings.elevation, session),
        geocoder=build_geocoder(settings.geocode),
        rng=random.Random(seed),
        session=session,
    )
    log.debug("Runtime initialised (provider=%s, zoom=%d, seed=%s)",
              runtime.provider.name, settings.elevation.zoom, seed)
    return runtime


__all__ = ["Runtime", "init_runtime"]
