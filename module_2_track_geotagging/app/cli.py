"""Convenience CLI for resolving track locations at timestamps or frame offsets."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from module_2_track_geotagging.adapters.gpx_ingestor import GpxTrackIngestor
from module_2_track_geotagging.app.settings import GeotagSettings, get_settings
from module_2_track_geotagging.core.errors import NoTrackDataError
from module_2_track_geotagging.core.interpolator import TrackInterpolator
from module_2_track_geotagging.core.models import as_utc
from module_2_track_geotagging.services.geotag_service import GeotagService


logger = logging.getLogger(__name__)


def _timestamp(value: str) -> datetime:
    try:
        return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO 8601 timestamp: {value!r}") from exc


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve GPS locations from a GPX track log.")
    parser.add_argument("--gpx", type=Path, default=None, help="GPX track file (defaults to GEOTAG_GPX_PATH).")
    parser.add_argument(
        "--at",
        type=_timestamp,
        action="append",
        default=[],
        help="ISO 8601 timestamp to resolve; may be repeated.",
    )
    parser.add_argument(
        "--offset",
        type=float,
        action="append",
        default=[],
        help="Seconds after the first fix to resolve; may be repeated.",
    )
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format.")
    return parser


def setup_logging(settings: GeotagSettings) -> None:
    if settings.log_format == "json":
        formatter = logging.Formatter('{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}')
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(level=logging.INFO, handlers=[handler])


def _dump(obj: object) -> str:
    return json.dumps(
        obj,
        indent=2,
        default=lambda value: value.isoformat() if hasattr(value, "isoformat") else value,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.gpx is not None:
        overrides["gpx_path"] = args.gpx
    if args.log_format:
        overrides["log_format"] = args.log_format
    settings = get_settings(**overrides)
    setup_logging(settings)

    if settings.gpx_path is None:
        logger.error("No GPX file given; pass --gpx or set GEOTAG_GPX_PATH")
        return 2

    try:
        points = GpxTrackIngestor().load(settings.gpx_path)
    except NoTrackDataError as exc:
        logger.error("Track %s has no usable data: %s", settings.gpx_path, exc)
        return 2

    service = GeotagService(TrackInterpolator(points))
    interpolator = service.interpolator
    output = {
        "track": {
            "source": str(settings.gpx_path),
            "points": len(points),
            "start_time": interpolator.start_time,
            "end_time": interpolator.end_time,
        },
        "timestamps": [
            {"at": target, "location": service.locate(target).model_dump()} for target in args.at
        ],
        "offsets": [
            {"offset": offset, "location": location.model_dump()}
            for offset, location in service.tag_offsets(args.offset)
        ],
    }
    print(_dump(output))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
