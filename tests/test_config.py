import json

import pytest

from elevprofile.config import Settings, load_settings
from elevprofile.errors import ConfigError


def test_defaults():
    s = Settings()
    assert s.sampling.sample_count == 1000
    assert s.elevation.provider == "aws"
    assert s.elevation.zoom == 14
    assert s.render.dpi == 300
    assert (s.render.width_in, s.render.height_in) == (16.18, 10.0)
    assert s.geocode.fallback_label == "Elevation Profile"


def test_yaml_file(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("elevation:\n  provider: open-elevation\n  zoom: 12\nrender:\n  reverse_x: true\n")
    s = Settings.load_from_file(cfg)
    assert s.elevation.provider == "open-elevation"
    assert s.elevation.zoom == 12
    assert s.render.reverse_x is True
    assert s.sampling.sample_count == 1000


def test_json_file(tmp_path):
    cfg = tmp_path / "run.json"
    cfg.write_text(json.dumps({"sampling": {"sample_count": 250}}))
    assert Settings.load_from_file(cfg).sampling.sample_count == 250


@pytest.mark.parametrize("body", [
    "colour: red\n",
    "render:\n  glow: 3\n",
    "elevation:\n  zoom: 22\n",
    "- just\n- a list\n",
])
def test_bad_files(tmp_path, body):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text(body)
    with pytest.raises(ConfigError):
        Settings.load_from_file(cfg)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        Settings.load_from_file(tmp_path / "nope.yaml")


def test_env_overrides():
    env = {
        "ELEVPROFILE_LOG_LEVEL": "debug",
        "ELEVPROFILE_ELEVATION_PROVIDER": "open-elevation",
        "ELEVPROFILE_TIMEOUT": "12.5",
        "ELEVPROFILE_USER_AGENT": "me@example.org",
    }
    s = load_settings(None, environ=env)
    assert s.logging.level == "DEBUG"
    assert s.elevation.provider == "open-elevation"
    assert s.elevation.timeout_s == 12.5
    assert s.geocode.user_agent == "me@example.org"


def test_env_bad_timeout():
    with pytest.raises(ConfigError):
        load_settings(None, environ={"ELEVPROFILE_TIMEOUT": "soon"})


def test_round_trip_dict():
    s = Settings()
    assert Settings.from_dict(s.to_dict()) == s


def test_log_level_is_checked():
    assert Settings.from_dict({"logging": {"level": "warning"}}).logging.level == "WARNING"
    with pytest.raises(ConfigError, match="log level"):
        Settings.from_dict({"logging": {"level": "loud"}})
    with pytest.raises(ConfigError, match="log level"):
        load_settings(None, environ={"ELEVPROFILE_LOG_LEVEL": "verbose"})
