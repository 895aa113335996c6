import random
from unittest import mock

import pandas as pd
import pytest
import requests

from conftest import ANTISANA_END, ANTISANA_START, FakeProvider
from elevprofile.errors import ElevationFetchError, InputError
from elevprofile.models import Coordinate
from elevprofile.pipeline import run_profile
from elevprofile.runtime import Runtime


def test_antisana_run(tmp_path, runtime, fake_geocoder):
    out = tmp_path / "antizana.png"
    run = run_profile(ANTISANA_START, ANTISANA_END, runtime, out, "Antisana")

    assert run.label == "Antisana"
    fake_geocoder.reverse.assert_not_called()
    assert len(run.profile) == 1000
    assert run.profile["position_index"].iloc[-1] == 1000
    assert 11_400 < run.geodetic_distance_m < 11_800
    assert out.is_file()
    assert run.output_path == out
    assert run.summary.peak_position in (500, 501)


def test_label_from_geocoder_when_no_name(tmp_path, runtime, fake_geocoder):
    run = run_profile(ANTISANA_START, ANTISANA_END, runtime, tmp_path / "p.png")
    assert run.label == "Antisana"
    fake_geocoder.reverse.assert_called_once()


def test_geocoder_outage_does_not_abort(tmp_path, runtime, fake_geocoder):
    fake_geocoder.reverse.side_effect = requests.ConnectionError("no route to host")
    run = run_profile(ANTISANA_START, ANTISANA_END, runtime, tmp_path / "p.png")
    assert run.label == "Elevation Profile"
    assert (tmp_path / "p.png").is_file()


def test_repeat_runs_give_identical_profiles(tmp_path, settings, fake_geocoder):
    frames = []
    for i in range(2):
        rt = Runtime(settings=settings, provider=FakeProvider(), geocoder=fake_geocoder,
                     rng=random.Random(i))
        run = run_profile(ANTISANA_START, ANTISANA_END, rt, tmp_path / f"p{i}.png", "Antisana")
        frames.append(run.profile[["distance_m", "elevation_m"]])
    pd.testing.assert_frame_equal(frames[0], frames[1])


def test_zero_length_path_never_fetches(tmp_path, runtime, fake_provider):
    with pytest.raises(InputError):
        run_profile(ANTISANA_START, Coordinate(*ANTISANA_START.as_tuple()), runtime,
                    tmp_path / "p.png", "X")
    assert fake_provider.calls == 0
    assert not (tmp_path / "p.png").exists()


def test_elevation_failure_stops_before_render(tmp_path, runtime, fake_provider):
    fake_provider.lookup = mock.MagicMock(side_effect=requests.Timeout("read timed out"))
    with pytest.raises(ElevationFetchError):
        run_profile(ANTISANA_START, ANTISANA_END, runtime, tmp_path / "p.png", "X")
    assert not (tmp_path / "p.png").exists()
