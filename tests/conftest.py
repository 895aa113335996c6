import random
from unittest import mock

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from elevprofile.config import RenderConfig, Settings
from elevprofile.elevation import ElevationProvider
from elevprofile.models import Coordinate
from elevprofile.runtime import Runtime

ANTISANA_START = Coordinate(-78.187286, -0.484717)
ANTISANA_END = Coordinate(-78.083248, -0.484717)


def ridge(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Single smooth summit in the middle of the path."""
    t = np.linspace(0.0, np.pi, len(x))
    return 4_000.0 + 1_500.0 * np.sin(t)


class FakeProvider(ElevationProvider):
    name = "fake"

    def __init__(self, elevation_fn=ridge, column="elevation", drop_rows=0):
        super().__init__(session=None, timeout=1.0)
        self.elevation_fn = elevation_fn
        self.column = column
        self.drop_rows = drop_rows
        self.calls = 0

    def lookup(self, frame, zoom):
        self.calls += 1
        x = frame["x"].to_numpy(dtype=float)
        y = frame["y"].to_numpy(dtype=float)
        table = pd.DataFrame({"x": x, "y": y, self.column: self.elevation_fn(x, y)})
        return table.iloc[: len(table) - self.drop_rows]


@pytest.fixture
def settings():
    return Settings(render=RenderConfig(width_in=4.0, height_in=2.5, dpi=20))


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def fake_geocoder():
    geocoder = mock.MagicMock()
    geocoder.reverse.return_value = mock.MagicMock(
        raw={"name": "Somewhere", "address": {"natural": "Antisana"}}
    )
    return geocoder


@pytest.fixture
def runtime(settings, fake_provider, fake_geocoder):
    return Runtime(settings=settings, provider=fake_provider,
                   geocoder=fake_geocoder, rng=random.Random(7))
