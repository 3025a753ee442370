"""Load backend configuration from a TOML file, the environment and overrides."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from ffmpeg_fallback.errors import ConfigurationError
from ffmpeg_fallback.schemas import BackendConfig

CONFIG_TABLE = "ffmpeg"
ENV_PREFIX = "FFMPEG_FALLBACK_"

_ENV_FIELDS = {
    "ENABLED": "enabled",
    "PATH": "executable_path",
    "TIMEOUT": "timeout_seconds",
    "QUALITY": "quality_override",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _read_toml(path: Path) -> dict[str, object]:
    """Read the ``[ffmpeg]`` table of a TOML settings file."""
    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Unable to read settings file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    table = document.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"'[{CONFIG_TABLE}]' in {path} must be a table.")
    return dict(table)


def _read_env(environ: Mapping[str, str]) -> dict[str, object]:
    """Collect ``FFMPEG_FALLBACK_*`` variables."""
    values: dict[str, object] = {}
    for suffix, field in _ENV_FIELDS.items():
        raw = environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is None:
            continue
        if field == "enabled":
            lowered = raw.strip().lower()
            if lowered not in _TRUE | _FALSE:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{suffix} must be a boolean, got '{raw}'."
                )
            values[field] = lowered in _TRUE
        elif field == "quality_override" and not raw.strip():
            values[field] = None
        else:
            values[field] = raw
    return values


def load_backend_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: object,
) -> BackendConfig:
    """Build a validated backend configuration.

    Later sources win: defaults, then the settings file, then environment
    variables, then explicit ``overrides`` whose value is not ``None``.

    Parameters
    ----------
    path : Path | None, optional
        TOML file with an ``[ffmpeg]`` table.
    environ : Mapping[str, str] | None, optional
        Environment to read; defaults to ``os.environ``.
    **overrides : object
        Field values, typically from CLI options.

    Returns
    -------
    BackendConfig
        Frozen configuration.

    Raises
    ------
    ConfigurationError
        If a source cannot be read or values do not validate.
    """
    values: dict[str, object] = {}
    if path is not None:
        values.update(_read_toml(path))
    values.update(_read_env(os.environ if environ is None else environ))
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return BackendConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid backend settings: {exc}") from exc
