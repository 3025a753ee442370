"""Shared pytest configuration, marker assignment and image/stub fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

StubFactory = Callable[..., Path]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def _frames(count: int, size: tuple[int, int] = (8, 8)) -> list[Image.Image]:
    colors = [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255)]
    return [Image.new("RGBA", size, colors[i % len(colors)]) for i in range(count)]


@pytest.fixture
def animated_png(tmp_path: Path) -> Path:
    """Write a three-frame APNG."""
    path = tmp_path / "anim.png"
    first, *rest = _frames(3)
    first.save(path, format="PNG", save_all=True, append_images=rest, duration=100, loop=0)
    return path


@pytest.fixture
def still_png(tmp_path: Path) -> Path:
    """Write a single-frame PNG."""
    path = tmp_path / "still.png"
    _frames(1)[0].save(path, format="PNG")
    return path


@pytest.fixture
def make_stub(tmp_path: Path) -> StubFactory:
    """Create executable POSIX shell scripts standing in for FFmpeg.

    ``$out`` holds the last argument (the output path) inside ``body``.
    """
    if os.name != "posix":
        pytest.skip("stub executables need a POSIX shell")

    def _make(body: str, name: str = "ffmpeg-stub") -> Path:
        path = tmp_path / name
        path.write_text(
            "#!/bin/sh\nfor out; do :; done\n" + body + "\n", encoding="utf-8"
        )
        path.chmod(0o755)
        return path

    return _make
