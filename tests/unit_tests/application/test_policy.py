"""Unit tests for the animated PNG decision policy."""

from __future__ import annotations

from pathlib import Path

import pytest

from ffmpeg_fallback.application.policy import (
    is_animated_png,
    should_use_external_backend,
)
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

ENABLED = BackendConfig(enabled=True)
DISABLED = BackendConfig(enabled=False)


def _request(source: Path, fmt: str, frames: int | None) -> ConversionRequest:
    return ConversionRequest(
        source_path=source,
        source_format=fmt,
        frame_count=frames,
        destination=Path("out.png"),
    )


@pytest.mark.parametrize("fmt", ["GIF", "WEBP", "JPEG", "TIFF"])
@pytest.mark.parametrize("frames", [None, 0, 1, 2, 40])
@pytest.mark.parametrize("config", [ENABLED, DISABLED])
def test_non_png_sources_never_use_backend(
    still_png: Path, fmt: str, frames: int | None, config: BackendConfig
) -> None:
    """Reject every non-PNG source regardless of frames or settings."""
    assert should_use_external_backend(_request(still_png, fmt, frames), config) is False


@pytest.mark.parametrize("config", [ENABLED, DISABLED])
def test_unknown_frame_count_follows_enabled_flag(
    still_png: Path, config: BackendConfig
) -> None:
    """Treat an unknown frame count as possibly animated."""
    request = _request(still_png, "PNG", None)
    assert should_use_external_backend(request, config) is config.enabled


def test_single_frame_png_stays_on_default(still_png: Path) -> None:
    """Single-frame PNGs never need the backend."""
    assert should_use_external_backend(_request(still_png, "PNG", 1), ENABLED) is False


def test_multi_frame_png_uses_backend_when_enabled(still_png: Path) -> None:
    """Animated PNGs go to the backend only when it is enabled."""
    request = _request(still_png, "png", 5)
    assert should_use_external_backend(request, ENABLED) is True
    assert should_use_external_backend(request, DISABLED) is False


def test_is_animated_png_ignores_config(still_png: Path) -> None:
    """Frame-based detection is independent of settings."""
    assert is_animated_png(_request(still_png, "PNG", 2))
    assert is_animated_png(_request(still_png, "APNG", None))
    assert not is_animated_png(_request(still_png, "PNG", 0))
