from unittest import mock

import pytest
from geopy.exc import GeocoderTimedOut
from geopy.geocoders import Nominatim

from elevprofile.config import GeocodeConfig
from elevprofile.errors import ConfigError, GeocodeError
from elevprofile.geocode import GeocodeResult, build_geocoder, pick_place_name, reverse_geocode
from elevprofile.models import Coordinate

PEAK = Coordinate(-78.1486, -0.4811)


@pytest.mark.parametrize("raw, expected", [
    ({"name": "Generic", "address": {"natural": "Antisana", "amenity": "Refugio"}}, "Antisana"),
    ({"name": "Generic", "address": {"amenity": "Refugio"}}, "Refugio"),
    ({"name": "Generic", "address": {"road": "E20"}}, "Generic"),
    ({"natural": "Top level peak"}, "Top level peak"),
    ({"address": {"natural": "  "}}, "Unnamed Terrain"),
    ({}, "Unnamed Terrain"),
])
def test_name_priority(raw, expected):
    assert pick_place_name(raw) == expected


def test_reverse_geocode_success_passes_lat_lon():
    geocoder = mock.MagicMock()
    geocoder.reverse.return_value = mock.MagicMock(raw={"address": {"natural": "Antisana"}})

    result = reverse_geocode(geocoder, PEAK)

    assert result.ok
    assert result.label == "Antisana"
    args, kwargs = geocoder.reverse.call_args
    assert args[0] == (PEAK.lat, PEAK.lon)
    assert kwargs["addressdetails"] is True


def test_no_match_gives_unnamed_label():
    geocoder = mock.MagicMock()
    geocoder.reverse.return_value = None
    assert reverse_geocode(geocoder, PEAK, unnamed="Nameless").label == "Nameless"


@pytest.mark.parametrize("failure", [GeocoderTimedOut("slow"), ConnectionError("down"), KeyError("raw")])
def test_provider_failure_is_captured(failure):
    geocoder = mock.MagicMock()
    geocoder.reverse.side_effect = failure

    result = reverse_geocode(geocoder, PEAK)

    assert not result.ok
    assert isinstance(result.error, GeocodeError)
    assert result.error.__cause__ is failure
    assert result.unwrap_or("Elevation Profile") == "Elevation Profile"


def test_malformed_payload_is_captured():
    geocoder = mock.MagicMock()
    geocoder.reverse.return_value = mock.MagicMock(raw="<html>")
    result = reverse_geocode(geocoder, PEAK)
    assert isinstance(result.error, GeocodeError)


def test_result_unwrap():
    assert GeocodeResult(label="A").unwrap_or("B") == "A"
    assert GeocodeResult(error=GeocodeError("x")).unwrap_or("B") == "B"
    assert GeocodeResult().unwrap_or("B") == "B"


def test_build_geocoder():
    geocoder = build_geocoder(GeocodeConfig(user_agent="elevprofile-tests"))
    assert isinstance(geocoder, Nominatim)
    assert build_geocoder(GeocodeConfig(user_agent="elevprofile-tests", timeout_s=3)).timeout == 3
    with pytest.raises(ConfigError):
        build_geocoder(GeocodeConfig(provider="google"))
