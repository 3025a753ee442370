"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ffmpeg_fallback.application.results import ConversionResult, ConversionTarget
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest


@runtime_checkable
class ConversionBackend(Protocol):
    """Convert an image request into an output file."""

    name: str

    def can_handle(self, request: ConversionRequest, config: BackendConfig) -> bool:
        """Check whether this backend should handle the request.

        Parameters
        ----------
        request : ConversionRequest
            Conversion request being dispatched.
        config : BackendConfig
            Configuration snapshot for the current conversion.

        Returns
        -------
        bool
            ``True`` if the backend should run for this request.
        """

    def convert(
        self,
        request: ConversionRequest,
        config: BackendConfig,
        target: ConversionTarget | None = None,
    ) -> ConversionResult:
        """Run the conversion and return its outcome as data."""

    def is_available(self, config: BackendConfig) -> bool:
        """Report whether the backend can run in this environment."""


class ConfigProvider(Protocol):
    """Return the current backend configuration."""

    def __call__(self) -> BackendConfig:
        """Read configuration."""


class PostSaveHook(Protocol):
    """Observe or alter a freshly written output file."""

    def __call__(self, request: ConversionRequest, result: ConversionResult) -> None:
        """Called once per successful conversion."""
