"""Integration test loading the example GIF backend module from disk."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from ffmpeg_fallback.adapters.ffmpeg import FfmpegBackend
from ffmpeg_fallback.application.use_cases import convert_image
from ffmpeg_fallback.plugins.registry import create_default_registry
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

EXAMPLE_MODULE = (
    Path(__file__).resolve().parents[2] / "examples" / "gif_palette_backend.py"
)


@pytest.fixture
def animated_gif(tmp_path: Path) -> Path:
    path = tmp_path / "anim.gif"
    frames = [Image.new("RGB", (6, 6), color) for color in ("red", "lime", "blue")]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=80, loop=0)
    return path


def test_example_module_registers_before_fallback() -> None:
    """Keep extra backends ahead of the Pillow fallback."""
    registry = create_default_registry(extra_modules=[str(EXAMPLE_MODULE)])

    assert registry.names() == ["ffmpeg", "ffmpeg_gif", "pillow"]


def test_example_backend_converts_animated_gif(
    make_stub, animated_gif: Path, tmp_path: Path
) -> None:
    """Send animated GIFs through the palette arguments."""
    stub = make_stub('printf "%s\\n" "$*" > "$out"')
    out = tmp_path / "out.gif"

    result = convert_image(
        source_path=animated_gif,
        destination=out,
        config=BackendConfig(enabled=True, executable_path=str(stub)),
        backend_modules=[str(EXAMPLE_MODULE)],
    )

    assert result.succeeded
    assert result.backend == "ffmpeg_gif"
    assert "palettegen" in result.diagnostics.command_line
    assert "-loop 0" in out.read_text()


def test_example_backend_skipped_when_disabled(animated_gif: Path, tmp_path: Path) -> None:
    """Fall through to Pillow while FFmpeg is disabled."""
    result = convert_image(
        source_path=animated_gif,
        destination=tmp_path / "out.gif",
        config=BackendConfig(enabled=False),
        backend_modules=[str(EXAMPLE_MODULE)],
    )

    assert result.succeeded
    assert result.backend == "pillow"


def test_loading_example_module_leaves_plain_registries_alone(
    still_png: Path, tmp_path: Path
) -> None:
    """Keep GIF palette arguments inside the example backend."""
    request = ConversionRequest(
        source_path=still_png,
        source_format="PNG",
        frame_count=2,
        destination=tmp_path / "out.gif",
    )
    config = BackendConfig(enabled=True)
    out = tmp_path / "out.gif"
    before = FfmpegBackend().build_command(request, config, out)

    extended = create_default_registry(extra_modules=[str(EXAMPLE_MODULE)])
    plain = create_default_registry()
    after = plain.get("ffmpeg").build_command(request, config, out)

    assert after == before
    assert after[4:8] == ["-f", "apng", "-plays", "0"]
    assert "-filter_complex" in extended.get("ffmpeg_gif").build_command(
        request, config, out
    )
    assert "-filter_complex" not in extended.get("ffmpeg").build_command(
        request, config, out
    )
