from bisect import bisect_left
from datetime import datetime, timedelta
from typing import Iterable, List

from module_2_track_geotagging.core.errors import NoTrackDataError
from module_2_track_geotagging.core.models import ResolvedLocation, TrackPoint, as_utc


class TrackInterpolator:
    """Resolve coordinates for arbitrary times from a recorded track.

    Points are sorted by timestamp on construction (stable, so equal times
    keep their input order). Times inside the track are linearly
    interpolated in latitude and longitude independently; times outside it
    are clamped to the first or last fix.
    """

    def __init__(self, points: Iterable[TrackPoint]) -> None:
        self._points: List[TrackPoint] = sorted(points, key=lambda point: point.timestamp)
        if not self._points:
            raise NoTrackDataError("Track contains no points")
        self._times: List[datetime] = [point.timestamp for point in self._points]

    @property
    def points(self) -> List[TrackPoint]:
        return list(self._points)

    @property
    def start_time(self) -> datetime:
        return self._times[0]

    @property
    def end_time(self) -> datetime:
        return self._times[-1]

    def resolve(self, target: datetime) -> ResolvedLocation:
        target = as_utc(target)
        # first index whose time is >= target; the pair (index - 1, index) is
        # then the earliest pair bracketing the target
        index = bisect_left(self._times, target)

        if index == 0:
            first = self._points[0]
            if target < first.timestamp or len(self._points) == 1:
                method = "clamped_start" if target < first.timestamp else "exact"
                return ResolvedLocation(latitude=first.latitude, longitude=first.longitude, method=method)
            index = 1
        elif index == len(self._points):
            last = self._points[-1]
            return ResolvedLocation(latitude=last.latitude, longitude=last.longitude, method="clamped_end")

        p1 = self._points[index - 1]
        p2 = self._points[index]
        span = (p2.timestamp - p1.timestamp).total_seconds()
        if span == 0:
            return ResolvedLocation(latitude=p1.latitude, longitude=p1.longitude, method="exact")

        factor = (target - p1.timestamp).total_seconds() / span
        return ResolvedLocation(
            latitude=p1.latitude + (p2.latitude - p1.latitude) * factor,
            longitude=p1.longitude + (p2.longitude - p1.longitude) * factor,
        )

    def resolve_offset(self, seconds: float) -> ResolvedLocation:
        """Resolve a time given as seconds after the first fix (e.g. a video frame offset)."""
        return self.resolve(self.start_time + timedelta(seconds=seconds))


def resolve_location(points: Iterable[TrackPoint], target: datetime) -> ResolvedLocation:
    return TrackInterpolator(points).resolve(target)
