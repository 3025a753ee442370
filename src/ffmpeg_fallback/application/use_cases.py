"""Application use-cases orchestrating image conversion."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import ValidationError

from ffmpeg_fallback.adapters.pillow import probe_image
from ffmpeg_fallback.application.policy import should_use_external_backend
from ffmpeg_fallback.application.ports import (
    ConfigProvider,
    ConversionBackend,
    PostSaveHook,
)
from ffmpeg_fallback.application.results import ConversionResult, ConversionTarget
from ffmpeg_fallback.errors import ConversionError
from ffmpeg_fallback.plugins.registry import create_default_registry
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest
from ffmpeg_fallback.types import format_from_path, normalize_format

logger = logging.getLogger(__name__)


class ImageConverter:
    """Dispatch conversion requests to the first backend that accepts them.

    Parameters
    ----------
    config_provider : ConfigProvider
        Returns the current configuration. Read at construction and again on
        every :meth:`reset`, so changes apply from the next reset on.
    backends : Sequence[ConversionBackend] | None, optional
        Backends in dispatch order. Defaults to FFmpeg then Pillow.
    post_save : PostSaveHook | None, optional
        Called once after each successful conversion.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        backends: Sequence[ConversionBackend] | None = None,
        post_save: PostSaveHook | None = None,
    ) -> None:
        self._config_provider = config_provider
        self._backends = list(backends) if backends is not None else (
            create_default_registry().ordered()
        )
        self._post_save = post_save
        self._config = config_provider()
        self._target: ConversionTarget | None = None

    @property
    def config(self) -> BackendConfig:
        """Configuration snapshot taken at the last reset."""
        return self._config

    @property
    def target(self) -> ConversionTarget | None:
        """Target set by the last reset, if any."""
        return self._target

    def reset(self, width: int, height: int, fmt: str) -> ImageConverter:
        """Start a new conversion for the given target size and format."""
        self._target = ConversionTarget(
            width=width, height=height, format=normalize_format(fmt)
        )
        self._config = self._config_provider()
        return self

    def select_backend(self, request: ConversionRequest) -> ConversionBackend | None:
        """Return the first backend accepting the request."""
        for backend in self._backends:
            if backend.can_handle(request, self._config):
                return backend
        return None

    def uses_external_backend(self, request: ConversionRequest) -> bool:
        """Evaluate the animated PNG policy under the current snapshot."""
        return should_use_external_backend(request, self._config)

    def convert(self, request: ConversionRequest) -> ConversionResult:
        """Convert one request.

        A failed backend is not retried with another one; falling back is
        left to the caller. The format given to :meth:`reset` replaces the
        request's destination format.

        Raises
        ------
        ConversionError
            If no backend accepts the request.
        """
        target_format = self._target.format if self._target is not None else ""
        if target_format and target_format != request.destination_format:
            request = request.model_copy(update={"destination_format": target_format})

        backend = self.select_backend(request)
        if backend is None:
            raise ConversionError(
                f"No backend can convert {request.source_path} "
                f"({request.source_format} -> {request.destination_format})."
            )

        logger.debug("converting %s with backend %s", request.source_path, backend.name)
        result = backend.convert(request, self._config, self._target)
        if result.succeeded and self._post_save is not None:
            self._post_save(request, result)
        return result


def build_request(
    *,
    source_path: Path,
    destination: Path,
    source_format: str | None = None,
    destination_format: str | None = None,
    frame_count: int | None = None,
    local_destination: Path | None = None,
    quality_hint: int | None = None,
) -> ConversionRequest:
    """Build a validated request, probing missing source metadata.

    Raises
    ------
    ConversionError
        If the parameters do not validate.
    """
    if source_format is None or frame_count is None:
        probed_format, probed_frames = probe_image(source_path)
        source_format = source_format or probed_format or format_from_path(source_path)
        if frame_count is None:
            frame_count = probed_frames

    try:
        return ConversionRequest(
            source_path=source_path,
            source_format=source_format,
            frame_count=frame_count,
            destination=destination,
            destination_format=destination_format or format_from_path(destination),
            local_destination=local_destination,
            quality_hint=quality_hint,
        )
    except ValidationError as exc:
        raise ConversionError(f"Invalid conversion parameters: {exc}") from exc


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
    """Use-case: convert one image file to ``destination``."""
    request = build_request(
        source_path=source_path,
        destination=destination,
        source_format=source_format,
        destination_format=destination_format,
        frame_count=frame_count,
        local_destination=destination,
        quality_hint=quality_hint,
    )
    if backends is None and backend_modules:
        backends = create_default_registry(extra_modules=backend_modules).ordered()

    converter = ImageConverter(lambda: config, backends=backends, post_save=post_save)
    if width is not None or height is not None:
        converter.reset(width or 0, height or 0, request.destination_format)
    return converter.convert(request)
