#!/usr/bin/env python3
"""Example backend module: animated GIFs through FFmpeg with a palette pass.

Load it with::

    ffmpeg-fallback convert anim.gif out.gif --ffmpeg \
        --backend-module examples/gif_palette_backend.py
"""

from __future__ import annotations

from ffmpeg_fallback.adapters.ffmpeg import FfmpegBackend
from ffmpeg_fallback.plugins.registry import BackendRegistry
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

PALETTE_FILTER = (
    "fps=10,scale=-1:-1:flags=lanczos,split[a][b];"
    "[a]palettegen=stats_mode=diff[p];[b][p]paletteuse=dither=bayer:bayer_scale=3"
)


def _gif_block(request: ConversionRequest) -> list[str]:
    del request
    return ["-filter_complex", PALETTE_FILTER, "-loop", "0"]


class GifPaletteBackend(FfmpegBackend):
    """Send multi-frame GIF sources to FFmpeg."""

    name = "ffmpeg_gif"

    def __init__(self) -> None:
        super().__init__(format_blocks={"GIF": _gif_block})

    def can_handle(self, request: ConversionRequest, config: BackendConfig) -> bool:
        if not config.enabled or request.source_format != "GIF":
            return False
        return request.frame_count is None or request.frame_count > 1


def register_backends(registry: BackendRegistry) -> None:
    """Register the GIF palette backend."""
    registry.register(GifPaletteBackend())
