"""Availability probe and requirements report for the FFmpeg backend."""

from __future__ import annotations

import logging

from ffmpeg_fallback.application.results import RequirementStatus, Severity
from ffmpeg_fallback.errors import ConfigurationError
from ffmpeg_fallback.infrastructure.process import run_process
from ffmpeg_fallback.schemas import BackendConfig

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "ffmpeg"
PROBE_TIMEOUT_SECONDS = 10
REQUIREMENT_TITLE = "FFmpeg animated PNG support"


def resolve_executable(path_hint: str | None) -> str:
    """Return the configured executable, or the bare name for a PATH lookup."""
    hint = (path_hint or "").strip()
    return hint or DEFAULT_EXECUTABLE


def is_backend_available(path_hint: str | None = None) -> bool:
    """Probe the backend with ``-version``.

    Parameters
    ----------
    path_hint : str | None, optional
        Explicit executable path. Empty or ``None`` searches ``PATH``.

    Returns
    -------
    bool
        ``True`` iff the probe exits successfully. Never raises.
    """
    try:
        outcome = run_process(
            [resolve_executable(path_hint), "-version"],
            timeout=PROBE_TIMEOUT_SECONDS,
        )
    except Exception:
        logger.debug("backend probe crashed", exc_info=True)
        return False
    if not outcome.succeeded:
        logger.debug(
            "backend probe failed: %s (exit=%s, error=%s)",
            outcome.command_line,
            outcome.exit_code,
            outcome.launch_error,
        )
    return outcome.succeeded


def validate_backend_config(config: BackendConfig) -> None:
    """Reject an enabled backend whose executable cannot be run.

    Raises
    ------
    ConfigurationError
        If the backend is enabled and the probe fails.
    """
    if not config.enabled:
        return
    if not is_backend_available(config.executable_path):
        raise ConfigurationError(
            "FFmpeg executable not found at "
            f"'{resolve_executable(config.executable_path)}'. "
            "Check the path or disable FFmpeg support."
        )


def build_requirement_status(config: BackendConfig) -> RequirementStatus | None:
    """Describe backend availability for a status report.

    Returns ``None`` when the backend is disabled, since there is nothing to
    report. A configured but missing backend downgrades to a warning.
    """
    if not config.enabled:
        return None
    if is_backend_available(config.executable_path):
        return RequirementStatus(
            title=REQUIREMENT_TITLE,
            value="FFmpeg available",
            description="FFmpeg is available for animated PNG conversion.",
            severity=Severity.OK,
        )
    return RequirementStatus(
        title=REQUIREMENT_TITLE,
        value="FFmpeg not found",
        description=(
            "FFmpeg is enabled for animated PNG support but the executable was "
            "not found. Animated PNGs will fall back to the default converter "
            "(first frame only)."
        ),
        severity=Severity.WARNING,
    )
