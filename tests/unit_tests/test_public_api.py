"""Unit tests for the package-level conversion API."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

import ffmpeg_fallback
from ffmpeg_fallback import application
from ffmpeg_fallback.infrastructure import diagnostics
from ffmpeg_fallback.schemas import BackendConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ENABLED", "PATH", "TIMEOUT", "QUALITY"):
        monkeypatch.delenv(f"FFMPEG_FALLBACK_{name}", raising=False)


def test_convert_file_uses_environment_settings(
    monkeypatch: pytest.MonkeyPatch, animated_png: Path, tmp_path: Path
) -> None:
    """Read settings from the environment when no config is passed."""
    monkeypatch.setenv("FFMPEG_FALLBACK_ENABLED", "off")
    out = tmp_path / "first.jpg"

    result = ffmpeg_fallback.convert_file(animated_png, out, quality_hint=80)

    assert result.succeeded
    assert result.backend == "pillow"
    with Image.open(out) as image:
        assert image.format == "JPEG"
        assert image.getpixel((0, 0))[0] > 200


def test_convert_file_explicit_format(still_png: Path, tmp_path: Path) -> None:
    """Honor an explicit destination format over the extension."""
    out = tmp_path / "image.out"

    result = ffmpeg_fallback.convert_file(
        still_png, out, BackendConfig(), destination_format="webp"
    )

    assert result.succeeded
    with Image.open(out) as image:
        assert image.format == "WEBP"


def test_application_convert_image_wrapper(still_png: Path, tmp_path: Path) -> None:
    """Delegate to the use-case through the lazy wrapper."""
    out = tmp_path / "still.bmp"

    result = application.convert_image(
        source_path=still_png, destination=out, config=BackendConfig(enabled=True)
    )

    assert result.succeeded
    assert result.output_path == out


def test_requirement_status_disabled_and_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Return nothing while disabled and a record once enabled."""
    monkeypatch.setattr(diagnostics, "is_backend_available", lambda _hint=None: True)

    assert ffmpeg_fallback.requirement_status(BackendConfig()) is None
    status = ffmpeg_fallback.requirement_status(BackendConfig(enabled=True))
    assert status is not None
    assert status.value == "FFmpeg available"
