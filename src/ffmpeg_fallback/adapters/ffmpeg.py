"""FFmpeg adapter for animated PNG conversion."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from types import MappingProxyType

from ffmpeg_fallback.adapters.output import (
    clear_stale_output,
    resolve_destination,
    resolve_quality,
)
from ffmpeg_fallback.application.policy import should_use_external_backend
from ffmpeg_fallback.application.results import (
    ConversionResult,
    ConversionTarget,
    Diagnostics,
    FailureKind,
)
from ffmpeg_fallback.infrastructure.diagnostics import (
    is_backend_available,
    resolve_executable,
)
from ffmpeg_fallback.infrastructure.process import (
    ProcessOutcome,
    format_command_line,
    run_process,
)
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest
from ffmpeg_fallback.types import ImageFormat

logger = logging.getLogger(__name__)

TEMP_PREFIX = "ffmpeg_fallback_"

FormatBlock = Callable[[ConversionRequest], list[str]]


def _apng_block(request: ConversionRequest) -> list[str]:
    del request
    # Animated PNG container, loop forever.
    return ["-f", "apng", "-plays", "0"]


DEFAULT_FORMAT_BLOCKS: Mapping[str, FormatBlock] = MappingProxyType(
    {ImageFormat.PNG.value: _apng_block}
)


def format_arguments(
    request: ConversionRequest,
    format_blocks: Mapping[str, FormatBlock] = DEFAULT_FORMAT_BLOCKS,
) -> list[str]:
    """Return the output arguments selected by the destination format.

    Formats without a block get the animated PNG arguments.
    """
    block = format_blocks.get(request.destination_format.upper(), _apng_block)
    return block(request)


def build_command(
    request: ConversionRequest,
    config: BackendConfig,
    destination: Path,
    format_blocks: Mapping[str, FormatBlock] = DEFAULT_FORMAT_BLOCKS,
) -> list[str]:
    """Build the FFmpeg argument vector for a request.

    Parameters
    ----------
    request : ConversionRequest
        Source and destination description.
    config : BackendConfig
        Backend settings (executable, quality override).
    destination : Path
        Local output path, always the final argument.
    format_blocks : Mapping[str, FormatBlock], optional
        Output arguments keyed by upper-case destination format.

    Returns
    -------
    list[str]
        Executable followed by its arguments.
    """
    command = [
        resolve_executable(config.executable_path),
        "-i",
        str(request.source_path),
        "-y",
    ]
    command += format_arguments(request, format_blocks)

    quality = resolve_quality(request, config)
    # The APNG container is lossless, so PNG output ignores quality.
    if quality is not None and request.destination_format != ImageFormat.PNG.value:
        command += ["-q:v", str(quality)]

    command.append(str(destination))
    return command


class FfmpegBackend:
    """Convert animated PNGs by running FFmpeg as a child process."""

    name = "ffmpeg"

    def __init__(
        self,
        runner: Callable[[list[str], float], ProcessOutcome] | None = None,
        format_blocks: Mapping[str, FormatBlock] | None = None,
    ) -> None:
        self._runner = runner or run_process
        self._format_blocks: dict[str, FormatBlock] = dict(DEFAULT_FORMAT_BLOCKS)
        for fmt, block in (format_blocks or {}).items():
            self.register_format_block(fmt, block)

    @property
    def format_blocks(self) -> Mapping[str, FormatBlock]:
        """Read-only view of this backend's output argument table."""
        return MappingProxyType(self._format_blocks)

    def register_format_block(self, fmt: str, block: FormatBlock) -> None:
        """Register output arguments for a destination format on this backend.

        GIF palette and WEBP lossless blocks plug in here. Other backend
        instances keep their own tables.
        """
        self._format_blocks[fmt.strip().upper()] = block

    def build_command(
        self, request: ConversionRequest, config: BackendConfig, destination: Path
    ) -> list[str]:
        """Build the command line using this backend's format table."""
        return build_command(request, config, destination, self._format_blocks)

    def can_handle(self, request: ConversionRequest, config: BackendConfig) -> bool:
        """Delegate to the animated PNG policy."""
        return should_use_external_backend(request, config)

    def is_available(self, config: BackendConfig) -> bool:
        """Probe the configured executable."""
        return is_backend_available(config.executable_path)

    def convert(
        self,
        request: ConversionRequest,
        config: BackendConfig,
        target: ConversionTarget | None = None,
    ) -> ConversionResult:
        """Run FFmpeg for one request.

        The attempt succeeds iff FFmpeg exits with status 0 and the output
        file exists and is non-empty once the process has terminated. Every
        failure, including launch errors and timeouts, is returned as a
        failed result.

        Parameters
        ----------
        request : ConversionRequest
            Conversion request.
        config : BackendConfig
            Backend settings for this attempt.
        target : ConversionTarget | None, optional
            Orchestrator target state; FFmpeg keeps source dimensions.

        Returns
        -------
        ConversionResult
            Outcome with diagnostics.
        """
        del target
        destination = resolve_destination(request, TEMP_PREFIX)
        command = self.build_command(request, config, destination)

        # A file left by an earlier run must not pass the output check.
        stale_error = clear_stale_output(destination)
        if stale_error is not None:
            logger.error("FFmpeg conversion not started: %s", stale_error)
            return ConversionResult.failure(
                Diagnostics(
                    command_line=format_command_line(command),
                    stderr_text=stale_error,
                    failure_kind=FailureKind.ERROR,
                ),
                backend=self.name,
            )

        try:
            outcome = self._runner(command, config.timeout_seconds)
        except Exception as exc:
            logger.error("FFmpeg conversion exception: %s", exc)
            return ConversionResult.failure(
                Diagnostics(
                    command_line=format_command_line(command),
                    stderr_text=str(exc),
                    failure_kind=FailureKind.ERROR,
                ),
                backend=self.name,
            )

        diagnostics = _diagnostics_for(outcome, destination)
        if diagnostics.failure_kind is None:
            logger.info(
                "FFmpeg animated PNG conversion successful: %s", outcome.command_line
            )
            return ConversionResult.success(destination, diagnostics, backend=self.name)

        logger.error(
            "FFmpeg conversion failed. Command: %s, Error: %s",
            outcome.command_line,
            diagnostics.stderr_text,
        )
        return ConversionResult.failure(diagnostics, backend=self.name)


def _diagnostics_for(outcome: ProcessOutcome, destination: Path) -> Diagnostics:
    """Classify a finished process into diagnostics."""
    if outcome.launch_error is not None:
        return Diagnostics(
            command_line=outcome.command_line,
            stderr_text=outcome.launch_error,
            failure_kind=FailureKind.LAUNCH,
        )
    if outcome.timed_out:
        note = "process timed out and was killed"
        stderr = f"{outcome.stderr_text.rstrip()}\n{note}".lstrip()
        return Diagnostics(
            command_line=outcome.command_line,
            stderr_text=stderr,
            timed_out=True,
            failure_kind=FailureKind.TIMEOUT,
        )
    if outcome.exit_code != 0:
        return Diagnostics(
            command_line=outcome.command_line,
            exit_code=outcome.exit_code,
            stderr_text=outcome.stderr_text,
            failure_kind=FailureKind.EXIT_STATUS,
        )
    if not _has_output(destination):
        return Diagnostics(
            command_line=outcome.command_line,
            exit_code=outcome.exit_code,
            stderr_text=outcome.stderr_text,
            failure_kind=FailureKind.MISSING_OUTPUT,
        )
    return Diagnostics(
        command_line=outcome.command_line,
        exit_code=outcome.exit_code,
        stderr_text=outcome.stderr_text,
    )


def _has_output(path: Path) -> bool:
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False
