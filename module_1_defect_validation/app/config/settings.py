"""Configuration utilities for Module 1 defect validation."""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidationSettings(BaseSettings):
    """Application configuration sourced from environment variables or defaults."""

    model_config = SettingsConfigDict(env_prefix="DEFECT_", case_sensitive=False)

    iou_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    category_rules_path: Optional[Path] = Field(
        default=None,
        description="YAML file overriding the detection family table.",
    )
    output_path: Optional[Path] = Field(default=None, description="Where to write the comparison JSON.")
    log_format: Literal["text", "json"] = Field(default="text")

    @field_validator("category_rules_path", "output_path", mode="before")
    @classmethod
    def _expand_path(cls, value: object) -> object:
        if value is None or value == "":
            return None
        return Path(str(value)).expanduser()


def load_settings(**overrides: object) -> ValidationSettings:
    """Return application settings, applying optional overrides."""

    return ValidationSettings(**overrides)
