import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from module_2_track_geotagging.adapters.gpx_ingestor import GpxTrackIngestor
from module_2_track_geotagging.core.errors import NoTrackDataError
from module_2_track_geotagging.core.interpolator import TrackInterpolator
from module_2_track_geotagging.core.models import ResolvedLocation, TrackPoint


logger = logging.getLogger(__name__)


class GeotagService:
    """Attach track locations to analysis timestamps.

    A missing or unusable track is not fatal here: lookups return ``None`` so
    callers can keep their detections and simply omit the location.
    """

    def __init__(self, interpolator: Optional[TrackInterpolator] = None) -> None:
        self.interpolator = interpolator

    @classmethod
    def from_points(cls, points: Iterable[TrackPoint]) -> "GeotagService":
        try:
            return cls(TrackInterpolator(points))
        except NoTrackDataError as exc:
            logger.warning("Geotagging disabled: %s", exc)
            return cls()

    @classmethod
    def from_gpx(cls, source_path: Path, ingestor: Optional[GpxTrackIngestor] = None) -> "GeotagService":
        ingestor = ingestor or GpxTrackIngestor()
        try:
            points = ingestor.load(source_path)
        except NoTrackDataError as exc:
            logger.warning("Geotagging disabled, track %s unusable: %s", source_path, exc)
            return cls()
        logger.info("Loaded %d track points from %s", len(points), source_path)
        return cls(TrackInterpolator(points))

    @property
    def has_track(self) -> bool:
        return self.interpolator is not None

    def locate(self, timestamp: datetime) -> Optional[ResolvedLocation]:
        if self.interpolator is None:
            logger.warning("No track loaded; location omitted for %s", timestamp)
            return None
        return self.interpolator.resolve(timestamp)

    def locate_offset(self, seconds: float) -> Optional[ResolvedLocation]:
        if self.interpolator is None:
            logger.warning("No track loaded; location omitted for offset %.2fs", seconds)
            return None
        return self.interpolator.resolve_offset(seconds)

    def tag_offsets(self, offsets: Iterable[float]) -> List[Tuple[float, Optional[ResolvedLocation]]]:
        return [(offset, self.locate_offset(offset)) for offset in offsets]
