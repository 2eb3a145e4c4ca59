from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so track and target times compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TrackPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return as_utc(value)


class ResolvedLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    method: Literal["interpolated", "exact", "clamped_start", "clamped_end"] = "interpolated"
