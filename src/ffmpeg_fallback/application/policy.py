"""Decide when the external backend handles a conversion."""

from __future__ import annotations

from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest
from ffmpeg_fallback.types import ImageFormat


def is_animated_png(request: ConversionRequest) -> bool:
    """Return ``True`` for PNG sources that have, or may have, several frames.

    An unknown frame count counts as animated so animation is never
    silently reduced to its first frame.
    """
    if request.source_format != ImageFormat.PNG.value:
        return False
    return request.frame_count is None or request.frame_count > 1


def should_use_external_backend(
    request: ConversionRequest, config: BackendConfig
) -> bool:
    """Check whether the request goes to the external backend.

    Parameters
    ----------
    request : ConversionRequest
        Conversion request with source metadata.
    config : BackendConfig
        Current backend configuration.

    Returns
    -------
    bool
        ``True`` when the backend is enabled and the source is an animated PNG.
    """
    if not config.enabled:
        return False
    return is_animated_png(request)
