"""Application-layer use-cases, ports and result objects."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from ffmpeg_fallback.application.policy import (
    is_animated_png,
    should_use_external_backend,
)
from ffmpeg_fallback.application.ports import (
    ConfigProvider,
    ConversionBackend,
    PostSaveHook,
)
from ffmpeg_fallback.application.results import (
    ConversionResult,
    ConversionTarget,
    Diagnostics,
    FailureKind,
    RequirementStatus,
    Severity,
)
from ffmpeg_fallback.schemas import BackendConfig


def convert_image(
    *,
    source_path: Path,
    destination: Path,
    config: BackendConfig,
    source_format: str | None = None,
    destination_format: str | None = None,
    frame_count: int | None = None,
    quality_hint: int | None = None,
    width: int | None = None,
    height: int | None = None,
    backends: Sequence[ConversionBackend] | None = None,
    backend_modules: Iterable[str] | None = None,
    post_save: PostSaveHook | None = None,
) -> ConversionResult:
    """Convert one image file via lazy use-case import."""
    from ffmpeg_fallback.application.use_cases import convert_image as _impl

    return _impl(
        source_path=source_path,
        destination=destination,
        config=config,
        source_format=source_format,
        destination_format=destination_format,
        frame_count=frame_count,
        quality_hint=quality_hint,
        width=width,
        height=height,
        backends=backends,
        backend_modules=backend_modules,
        post_save=post_save,
    )


__all__ = [
    "ConfigProvider",
    "ConversionBackend",
    "ConversionResult",
    "ConversionTarget",
    "Diagnostics",
    "FailureKind",
    "PostSaveHook",
    "RequirementStatus",
    "Severity",
    "convert_image",
    "is_animated_png",
    "should_use_external_backend",
]
