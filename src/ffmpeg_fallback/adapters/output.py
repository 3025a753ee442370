"""Output path and quality resolution shared by the conversion backends."""

from __future__ import annotations

import logging
import tempfile
import uuid
from pathlib import Path

from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

logger = logging.getLogger(__name__)


def resolve_quality(request: ConversionRequest, config: BackendConfig) -> int | None:
    """Pick the configured quality override, else the request hint."""
    if config.quality_override is not None:
        return config.quality_override
    return request.quality_hint


def resolve_destination(request: ConversionRequest, prefix: str) -> Path:
    """Return the local output path, deriving a unique temp file if needed.

    Parameters
    ----------
    request : ConversionRequest
        Request whose ``local_destination`` is used when set.
    prefix : str
        File name prefix for generated temp files, naming the backend.

    Returns
    -------
    Path
        ``local_destination``, or ``<tempdir>/<prefix><uuid4 hex><suffix>``.
    """
    if request.local_destination is not None:
        return request.local_destination
    suffix = request.destination.suffix or f".{request.destination_format.lower()}"
    return Path(tempfile.gettempdir()) / f"{prefix}{uuid.uuid4().hex}{suffix}"


def clear_stale_output(path: Path) -> str | None:
    """Remove a file left at ``path`` by an earlier run.

    Returns
    -------
    str | None
        Error text when the file exists but cannot be removed.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        return f"cannot remove existing output {path}: {exc}"
    logger.debug("cleared output path %s", path)
    return None
