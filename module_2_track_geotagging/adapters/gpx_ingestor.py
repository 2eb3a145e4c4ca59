import logging
import math
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from module_2_track_geotagging.core.errors import TrackParseError
from module_2_track_geotagging.core.models import TrackPoint, as_utc


logger = logging.getLogger(__name__)


class GpxTrackIngestor:
    """Load time-stamped track points from GPX content."""

    def load(self, source_path: Path) -> List[TrackPoint]:
        try:
            content = source_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TrackParseError(f"Unable to read GPX file {source_path}: {exc}") from exc
        return self.parse(content)

    def parse(self, content: str) -> List[TrackPoint]:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise TrackParseError("Failed to parse GPX file. Please ensure it is a valid XML file.") from exc

        elements = [element for element in root.iter() if self._local_name(element.tag) == "trkpt"]
        if not elements:
            raise TrackParseError("No track points (<trkpt>) found in the GPX file.")

        points: List[TrackPoint] = []
        for position, element in enumerate(elements):
            point = self._coerce_point(element)
            if point is None:
                logger.warning("Skipping invalid track point #%d", position)
                continue
            points.append(point)

        if not points:
            raise TrackParseError("Could not parse any valid track points from the GPX file.")

        points.sort(key=lambda point: point.timestamp)
        logger.debug("Parsed %d of %d track points", len(points), len(elements))
        return points

    def _coerce_point(self, element: ET.Element) -> Optional[TrackPoint]:
        latitude = self._coerce_coordinate(element.get("lat"), 90.0)
        longitude = self._coerce_coordinate(element.get("lon"), 180.0)
        timestamp = self._parse_timestamp(self._child_text(element, "time"))
        if latitude is None or longitude is None or timestamp is None:
            return None
        return TrackPoint(latitude=latitude, longitude=longitude, timestamp=timestamp)

    def _child_text(self, element: ET.Element, name: str) -> Optional[str]:
        for child in element:
            if self._local_name(child.tag) == name:
                return child.text
        return None

    @staticmethod
    def _local_name(tag: object) -> str:
        if not isinstance(tag, str):
            return ""
        return tag.rsplit("}", 1)[-1]

    @staticmethod
    def _coerce_coordinate(value: Optional[str], limit: float) -> Optional[float]:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number) or abs(number) > limit:
            return None
        return number

    @staticmethod
    def _parse_timestamp(value: object) -> Optional[datetime]:
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None


def parse_gpx(content: str) -> List[TrackPoint]:
    return GpxTrackIngestor().parse(content)


def load_gpx(source_path: Path) -> List[TrackPoint]:
    return GpxTrackIngestor().load(source_path)
