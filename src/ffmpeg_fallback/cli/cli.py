#!/usr/bin/env python3
"""
ffmpeg_fallback.cli.cli

Typer-based CLI for converting images, handing animated PNGs to FFmpeg.

Settings come from an optional TOML file (``--config``), then
``FFMPEG_FALLBACK_*`` environment variables, then command-line options.

Examples
--------
Convert with FFmpeg support enabled:

    ffmpeg-fallback convert anim.png out.png --ffmpeg

Check that the configured FFmpeg can run:

    ffmpeg-fallback check --config settings.toml
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path

import typer

from ffmpeg_fallback.application.results import ConversionResult, Severity
from ffmpeg_fallback.errors import BackendError, ConfigurationError, FallbackError
from ffmpeg_fallback.schemas import BackendConfig

app = typer.Typer(
    name="ffmpeg-fallback",
    help="Convert images, using FFmpeg for animated PNGs when enabled.",
    no_args_is_help=True,
)

CONFIG_HELP = "TOML settings file with an [ffmpeg] table."
FFMPEG_PATH_HELP = "Path to the FFmpeg executable. Empty searches PATH."
FFMPEG_ON_HELP = "Use FFmpeg for animated PNG conversion."
FFMPEG_OFF_HELP = "Never use FFmpeg; convert everything with Pillow."
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# -----------------------------
# Utilities
# -----------------------------
def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised by a command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _print_failure(result: ConversionResult) -> None:
    """Print diagnostics of a failed conversion."""
    diagnostics = result.diagnostics
    kind = diagnostics.failure_kind.value if diagnostics.failure_kind else "unknown"
    typer.echo(f"✗ Conversion failed ({result.backend}: {kind})", err=True)
    typer.echo(f"  command: {diagnostics.command_line}", err=True)
    if diagnostics.exit_code is not None:
        typer.echo(f"  exit code: {diagnostics.exit_code}", err=True)
    if diagnostics.stderr_text.strip():
        typer.echo(f"  stderr: {diagnostics.stderr_text.strip()}", err=True)


def _enabled_override(ffmpeg: bool, no_ffmpeg: bool) -> bool | None:
    """Turn the --ffmpeg/--no-ffmpeg pair into an optional override."""
    if ffmpeg and no_ffmpeg:
        raise typer.BadParameter("--ffmpeg and --no-ffmpeg are mutually exclusive.")
    if ffmpeg:
        return True
    if no_ffmpeg:
        return False
    return None


def _load_config(
    config_path: Path | None,
    *,
    enabled: bool | None = None,
    executable_path: str | None = None,
    timeout_seconds: int | None = None,
    quality_override: int | None = None,
) -> BackendConfig:
    from ffmpeg_fallback.settings import load_backend_config

    return load_backend_config(
        config_path,
        enabled=enabled,
        executable_path=executable_path,
        timeout_seconds=timeout_seconds,
        quality_override=quality_override,
    )


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log backend activity."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    verbose : bool, default=False
        Whether to log at INFO (DEBUG with ``--debug``) to stderr.
    """
    if verbose or debug:
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format=LOG_FORMAT,
            stream=sys.stderr,
        )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    source_path: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        dir_okay=False,
        help="Image to convert.",
    ),
    destination: Path = typer.Argument(..., help="Where to write the converted image."),
    destination_format: str | None = typer.Option(
        None, "--format", help="Output format (defaults to the destination extension)."
    ),
    frames: int | None = typer.Option(
        None, "--frames", min=0, help="Known frame count; probed when omitted."
    ),
    quality: int | None = typer.Option(
        None, "--quality", min=1, max=100, help="Quality for lossy output formats."
    ),
    width: int | None = typer.Option(None, "--width", min=1, help="Target width."),
    height: int | None = typer.Option(None, "--height", min=1, help="Target height."),
    ffmpeg: bool = typer.Option(False, "--ffmpeg", help=FFMPEG_ON_HELP),
    no_ffmpeg: bool = typer.Option(False, "--no-ffmpeg", help=FFMPEG_OFF_HELP),
    ffmpeg_path: str | None = typer.Option(None, "--ffmpeg-path", help=FFMPEG_PATH_HELP),
    timeout: int | None = typer.Option(
        None, "--timeout", min=1, help="FFmpeg timeout in seconds."
    ),
    quality_override: int | None = typer.Option(
        None,
        "--quality-override",
        min=1,
        max=100,
        help="Quality forced on every FFmpeg conversion.",
    ),
    config_path: Path | None = typer.Option(
        None, "--config", exists=True, dir_okay=False, help=CONFIG_HELP
    ),
    backend_module: list[str] | None = typer.Option(
        None,
        "--backend-module",
        help="Backend module import path or file path (repeatable).",
    ),
) -> None:
    """Convert an image.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    source_path : Path
        Image to convert.
    destination : Path
        Output path.

    Notes
    -----
    - A failed FFmpeg conversion is reported, not retried with Pillow.
      Re-run with ``--no-ffmpeg`` to force the default converter.
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from ffmpeg_fallback.application.use_cases import convert_image

        config = _load_config(
            config_path,
            enabled=_enabled_override(ffmpeg, no_ffmpeg),
            executable_path=ffmpeg_path,
            timeout_seconds=timeout,
            quality_override=quality_override,
        )
        result = convert_image(
            source_path=source_path,
            destination=destination,
            config=config,
            destination_format=destination_format,
            frame_count=frames,
            quality_hint=quality,
            width=width,
            height=height,
            backend_modules=backend_module,
        )
    except FallbackError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_error(exc, debug))

    if not result.succeeded:
        _print_failure(result)
        raise typer.Exit(code=1)
    typer.echo(f"✓ Saved ({result.backend}): {result.output_path}")


@app.command("check")
def check_cmd(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None, "--config", exists=True, dir_okay=False, help=CONFIG_HELP
    ),
    ffmpeg: bool = typer.Option(False, "--ffmpeg", help=FFMPEG_ON_HELP),
    no_ffmpeg: bool = typer.Option(False, "--no-ffmpeg", help=FFMPEG_OFF_HELP),
    ffmpeg_path: str | None = typer.Option(None, "--ffmpeg-path", help=FFMPEG_PATH_HELP),
) -> None:
    """Validate settings; fail when FFmpeg is enabled but cannot run."""
    debug: bool = bool(ctx.obj.get("debug", False))

    from ffmpeg_fallback.infrastructure.diagnostics import validate_backend_config

    try:
        config = _load_config(
            config_path,
            enabled=_enabled_override(ffmpeg, no_ffmpeg),
            executable_path=ffmpeg_path,
        )
        validate_backend_config(config)
    except ConfigurationError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    state = "enabled" if config.enabled else "disabled"
    typer.echo(f"✓ Settings valid (FFmpeg {state})")


@app.command("doctor")
def doctor_cmd(
    config_path: Path | None = typer.Option(
        None, "--config", exists=True, dir_okay=False, help=CONFIG_HELP
    ),
    ffmpeg: bool = typer.Option(False, "--ffmpeg", help=FFMPEG_ON_HELP),
    no_ffmpeg: bool = typer.Option(False, "--no-ffmpeg", help=FFMPEG_OFF_HELP),
    ffmpeg_path: str | None = typer.Option(None, "--ffmpeg-path", help=FFMPEG_PATH_HELP),
) -> None:
    """Print toolchain versions, backends and FFmpeg requirement status."""
    import importlib.metadata as metadata

    from ffmpeg_fallback.infrastructure.diagnostics import build_requirement_status

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in ("pillow", "pydantic", "typer"):
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    try:
        from ffmpeg_fallback.plugins.registry import create_default_registry

        registry = create_default_registry()
        typer.echo(f"backends: {', '.join(registry.names())}")
    except BackendError:
        typer.echo("backends: <unavailable>")

    try:
        config = _load_config(
            config_path,
            enabled=_enabled_override(ffmpeg, no_ffmpeg),
            executable_path=ffmpeg_path,
        )
    except ConfigurationError as exc:
        typer.echo(f"settings: <invalid> {exc}")
        return

    status = build_requirement_status(config)
    if status is None:
        typer.echo("ffmpeg: disabled")
        return
    marker = "OK" if status.severity is Severity.OK else "WARNING"
    typer.echo(f"{status.title}: {status.value} [{marker}]")
    typer.echo(f"  {status.description}")


if __name__ == "__main__":
    app()
