"""Top-level API for image conversion with an FFmpeg animated PNG fallback."""

from __future__ import annotations

from pathlib import Path

from ffmpeg_fallback.application.results import ConversionResult, RequirementStatus
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

__version__ = "0.1.0"


def convert_file(
    source_path: Path,
    destination: Path,
    config: BackendConfig | None = None,
    *,
    destination_format: str | None = None,
    frame_count: int | None = None,
    quality_hint: int | None = None,
) -> ConversionResult:
    """Convert an image file, sending animated PNGs to FFmpeg when enabled.

    Parameters
    ----------
    source_path : Path
        Image to convert.
    destination : Path
        Output file. Its extension picks the format unless
        ``destination_format`` is given.
    config : BackendConfig | None, optional
        Backend settings. Defaults to settings from the environment.
    destination_format : str | None, optional
        Output format name.
    frame_count : int | None, optional
        Known number of frames; probed from the file when omitted.
    quality_hint : int | None, optional
        Quality (1-100) for lossy output formats.

    Returns
    -------
    ConversionResult
        Outcome with diagnostics. Failures are returned, not raised.
    """
    from .application.use_cases import convert_image as _impl
    from .settings import load_backend_config

    return _impl(
        source_path=source_path,
        destination=destination,
        config=config or load_backend_config(),
        destination_format=destination_format,
        frame_count=frame_count,
        quality_hint=quality_hint,
    )


def requirement_status(config: BackendConfig | None = None) -> RequirementStatus | None:
    """Report FFmpeg availability for the given (or environment) settings."""
    from .infrastructure.diagnostics import build_requirement_status
    from .settings import load_backend_config

    return build_requirement_status(config or load_backend_config())


__all__ = [
    "BackendConfig",
    "ConversionRequest",
    "ConversionResult",
    "RequirementStatus",
    "convert_file",
    "requirement_status",
]
