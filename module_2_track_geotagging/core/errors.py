class NoTrackDataError(ValueError):
    """Raised when a track holds no usable points."""


class TrackParseError(NoTrackDataError):
    """Raised when a track file cannot be read into points."""
