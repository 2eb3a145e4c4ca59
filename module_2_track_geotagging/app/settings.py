from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeotagSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GEOTAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    gpx_path: Optional[Path] = None
    log_format: Literal["text", "json"] = "text"

    @field_validator("gpx_path", mode="before")
    @classmethod
    def _expand_path(cls, value: object) -> object:
        if value is None or value == "":
            return None
        return Path(str(value)).expanduser()


def get_settings(**overrides: object) -> GeotagSettings:
    return GeotagSettings(**overrides)
