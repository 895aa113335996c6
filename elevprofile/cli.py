from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import DEFAULT_OUTPUT, __version__
from .config import Settings, load_settings
from .errors import ElevationProfileError, InputError
from .models import Coordinate
from .pipeline import run_profile
from .runtime import Runtime, init_runtime

log = logging.getLogger("elevprofile.cli")

USAGE = ("elevprofile <start_lon> <start_lat> <end_lon> <end_lat> "
         "[output_filename.png] [\"Terrain Name\"]")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="elevprofile",
        usage=USAGE,
        description="Render a glowing elevation profile between two coordinates.",
    )
    p.add_argument("start_lon")
    p.add_argument("start_lat")
    p.add_argument("end_lon")
    p.add_argument("end_lat")
    p.add_argument("output", nargs="?", default=DEFAULT_OUTPUT,
                   help=f"Output image path (default: {DEFAULT_OUTPUT}).")
    p.add_argument("terrain_name", nargs="?", default=None,
                   help="Label to print on the image; skips reverse geocoding.")
    p.add_argument("--config", help="YAML/JSON settings file.")
    p.add_argument("--provider", choices=["aws", "open-elevation"],
                   help="Elevation provider (default: aws terrain tiles).")
    p.add_argument("--zoom", type=int, help="Terrain tile zoom level (default: 14).")
    p.add_argument("--samples", type=int, help="Number of points along the path (default: 1000).")
    p.add_argument("--timeout", type=float, help="HTTP timeout in seconds.")
    p.add_argument("--seed", type=int, help="Seed for the glow colour pick.")
    p.add_argument("--reverse-x", action="store_true", default=None,
                   help="Draw the profile end → start.")
    p.add_argument("--log-level", help="DEBUG, INFO, WARNING, …")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_coordinate(lon: str, lat: str) -> Coordinate:
    try:
        x, y = float(lon), float(lat)
    except ValueError as exc:
        raise InputError("Coordinates must be numeric values.") from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InputError("Coordinates must be finite numbers.")
    try:
        return Coordinate(x, y)
    except ValueError as exc:
        raise InputError(str(exc)) from exc


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    overrides = {
        ("elevation", "provider"): args.provider,
        ("elevation", "zoom"): args.zoom,
        ("elevation", "timeout_s"): args.timeout,
        ("sampling", "sample_count"): args.samples,
        ("render", "reverse_x"): args.reverse_x,
        ("logging", "level"): args.log_level and args.log_level.upper(),
    }
    data = settings.to_dict()
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    return Settings.from_dict(data)


def main(argv: Optional[Sequence[str]] = None, runtime: Optional[Runtime] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        # coordinates first: bad input never reaches the network
        start = parse_coordinate(args.start_lon, args.start_lat)
        end = parse_coordinate(args.end_lon, args.end_lat)
        if runtime is None:
            runtime = init_runtime(_settings_from_args(args), seed=args.seed)
    except ElevationProfileError as exc:
        print(f"Error: {exc}\nUsage: {USAGE}", file=sys.stderr)
        return exc.exit_code

    log.info("Starting with start=(%s, %s) end=(%s, %s) output=%s",
             start.lon, start.lat, end.lon, end.lat, args.output)

    with runtime:
        try:
            run = run_profile(start, end, runtime, Path(args.output), args.terrain_name)
        except ElevationProfileError as exc:
            log.error("%s: %s", type(exc).__name__, exc)
            return exc.exit_code

    log.info("Script finished → %s", run.output_path)
    return 0
