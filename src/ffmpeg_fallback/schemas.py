"""Pydantic schemas for runtime validation of conversion inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ffmpeg_fallback.types import normalize_format

DEFAULT_TIMEOUT_SECONDS = 120


class BackendConfig(BaseModel):
    """External backend settings supplied by the configuration provider."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = False
    executable_path: str = ""
    timeout_seconds: int = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    quality_override: int | None = Field(default=None, ge=1, le=100)

    @field_validator("executable_path", mode="before")
    @classmethod
    def _normalize_executable(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()


class ConversionRequest(BaseModel):
    """Validated, immutable input for a single image conversion."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_path: Path
    source_format: str
    frame_count: int | None = Field(default=None, ge=0)
    destination: Path
    destination_format: str = ""
    local_destination: Path | None = None
    quality_hint: int | None = Field(default=None, ge=1, le=100)

    @field_validator("source_path")
    @classmethod
    def _validate_source(cls, value: Path) -> Path:
        if not value.is_file():
            raise ValueError(f"source image does not exist: {value}")
        return value

    @field_validator("source_format", "destination_format", mode="before")
    @classmethod
    def _normalize_formats(cls, value: object) -> str:
        return normalize_format(None if value is None else str(value))

    @model_validator(mode="before")
    @classmethod
    def _default_destination_format(cls, data: object) -> object:
        # Same format in and out when the caller gives none.
        if isinstance(data, dict) and not data.get("destination_format"):
            return {**data, "destination_format": data.get("source_format")}
        return data

    @model_validator(mode="after")
    def _require_source_format(self) -> ConversionRequest:
        if not self.source_format:
            raise ValueError("source_format cannot be empty.")
        return self
