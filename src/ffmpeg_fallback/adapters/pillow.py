"""Pillow adapter: the default, in-process image converter."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ffmpeg_fallback.adapters.output import resolve_destination, resolve_quality
from ffmpeg_fallback.application.results import (
    ConversionResult,
    ConversionTarget,
    Diagnostics,
    FailureKind,
)
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest
from ffmpeg_fallback.types import ImageFormat

logger = logging.getLogger(__name__)

# Formats that cannot store an alpha channel.
_NO_ALPHA_FORMATS = {ImageFormat.JPEG.value, ImageFormat.BMP.value}
_QUALITY_FORMATS = {ImageFormat.JPEG.value, ImageFormat.WEBP.value}

TEMP_PREFIX = "pillow_"


def probe_image(path: Path) -> tuple[str | None, int | None]:
    """Read image format and frame count.

    Parameters
    ----------
    path : Path
        Image file to inspect.

    Returns
    -------
    tuple[str | None, int | None]
        Pillow format name and number of frames, or ``(None, None)`` when
        the file cannot be identified.
    """
    try:
        with Image.open(path) as image:
            return image.format, int(getattr(image, "n_frames", 1))
    except (OSError, UnidentifiedImageError, ValueError):
        logger.debug("could not identify image %s", path, exc_info=True)
        return None, None


def target_size(
    size: tuple[int, int], target: ConversionTarget | None
) -> tuple[int, int]:
    """Resolve the output size for a target.

    A zero side is derived from the other one, keeping the aspect ratio.
    Without a target, or with both sides zero, the source size is kept.
    """
    if target is None or (target.width <= 0 and target.height <= 0):
        return size
    width, height = size
    if target.width > 0 and target.height > 0:
        return target.width, target.height
    if target.width > 0:
        return target.width, max(1, round(height * target.width / width))
    return max(1, round(width * target.height / height)), target.height


class PillowBackend:
    """Convert images with Pillow, keeping only the first frame."""

    name = "pillow"

    def can_handle(self, request: ConversionRequest, config: BackendConfig) -> bool:
        """Handle everything; this is the catch-all converter."""
        del request, config
        return True

    def is_available(self, config: BackendConfig) -> bool:
        del config
        return True

    def convert(
        self,
        request: ConversionRequest,
        config: BackendConfig,
        target: ConversionTarget | None = None,
    ) -> ConversionResult:
        """Save the first frame of the source in the destination format."""
        destination = resolve_destination(request, TEMP_PREFIX)
        fmt = request.destination_format
        command_line = f"PIL.Image.save {request.source_path} -> {destination} ({fmt})"

        save_kwargs: dict[str, object] = {}
        quality = resolve_quality(request, config)
        if quality is not None and fmt in _QUALITY_FORMATS:
            save_kwargs["quality"] = quality

        try:
            with Image.open(request.source_path) as image:
                image.seek(0)
                frame = image.copy()
            size = target_size(frame.size, target)
            if size != frame.size:
                frame = frame.resize(size)
            if fmt in _NO_ALPHA_FORMATS and frame.mode not in {"RGB", "L"}:
                frame = frame.convert("RGB")
            frame.save(destination, format=fmt, **save_kwargs)
        except (OSError, UnidentifiedImageError, ValueError, KeyError) as exc:
            logger.error("Pillow conversion failed: %s: %s", command_line, exc)
            return ConversionResult.failure(
                Diagnostics(
                    command_line=command_line,
                    stderr_text=str(exc),
                    failure_kind=FailureKind.ERROR,
                ),
                backend=self.name,
            )

        diagnostics = Diagnostics(command_line=command_line, exit_code=0)
        if not destination.is_file() or destination.stat().st_size == 0:
            return ConversionResult.failure(
                Diagnostics(
                    command_line=command_line,
                    failure_kind=FailureKind.MISSING_OUTPUT,
                ),
                backend=self.name,
            )
        logger.info("Pillow conversion successful: %s", command_line)
        return ConversionResult.success(destination, diagnostics, backend=self.name)
