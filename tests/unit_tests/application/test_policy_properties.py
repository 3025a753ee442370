"""Property tests for the decision policy, FFmpeg commands and outcomes."""

from __future__ import annotations

import os
from pathlib import Path

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ffmpeg_fallback.adapters.ffmpeg import FfmpegBackend, build_command
from ffmpeg_fallback.application.policy import should_use_external_backend
from ffmpeg_fallback.application.results import FailureKind
from ffmpeg_fallback.infrastructure.process import ProcessOutcome
from ffmpeg_fallback.schemas import BackendConfig, ConversionRequest

_HYPOTHESIS_MAX_EXAMPLES = int(os.getenv("HYPOTHESIS_MAX_EXAMPLES", "50"))
_SETTINGS = settings(
    max_examples=_HYPOTHESIS_MAX_EXAMPLES,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

formats = st.sampled_from(["png", "PNG", " Png ", "gif", "WEBP", "jpeg", "tiff", "bmp"])
frame_counts = st.none() | st.integers(min_value=0, max_value=500)
qualities = st.none() | st.integers(min_value=1, max_value=100)


@_SETTINGS
@given(fmt=formats, frames=frame_counts, enabled=st.booleans())
def test_policy_matches_animated_png_rule(
    still_png: Path, fmt: str, frames: int | None, enabled: bool
) -> None:
    """Route only enabled, possibly multi-frame PNG sources to FFmpeg."""
    request = ConversionRequest(
        source_path=still_png,
        source_format=fmt,
        frame_count=frames,
        destination=Path("out.png"),
    )
    expected = (
        enabled
        and fmt.strip().upper() == "PNG"
        and (frames is None or frames > 1)
    )

    assert should_use_external_backend(request, BackendConfig(enabled=enabled)) is expected


@_SETTINGS
@given(
    dest_format=formats,
    hint=qualities,
    override=qualities,
)
def test_command_layout_invariants(
    still_png: Path,
    tmp_path: Path,
    dest_format: str,
    hint: int | None,
    override: int | None,
) -> None:
    """Keep source first, destination last and quality off PNG output."""
    destination = tmp_path / "out.bin"
    request = ConversionRequest(
        source_path=still_png,
        source_format="PNG",
        frame_count=3,
        destination=Path("remote/out.bin"),
        destination_format=dest_format,
        quality_hint=hint,
    )
    config = BackendConfig(enabled=True, quality_override=override)

    command = build_command(request, config, destination)

    assert command[1:4] == ["-i", str(still_png), "-y"]
    assert command[-1] == str(destination)
    quality = override if override is not None else hint
    if quality is None or request.destination_format == "PNG":
        assert "-q:v" not in command
    else:
        assert command[command.index("-q:v") + 1] == str(quality)


@_SETTINGS
@given(
    exit_code=st.integers(min_value=-9, max_value=3),
    written=st.none() | st.binary(max_size=32),
    timed_out=st.booleans(),
)
def test_success_always_has_non_empty_output(
    still_png: Path,
    tmp_path: Path,
    exit_code: int,
    written: bytes | None,
    timed_out: bool,
) -> None:
    """Succeed only on a clean exit that left a non-empty file behind."""
    out = tmp_path / "out.png"

    def runner(argv: list[str], timeout: float) -> ProcessOutcome:
        del timeout
        if written is not None:
            Path(argv[-1]).write_bytes(written)
        return ProcessOutcome(
            command_line=" ".join(argv),
            exit_code=None if timed_out else exit_code,
            timed_out=timed_out,
        )

    request = ConversionRequest(
        source_path=still_png,
        source_format="PNG",
        frame_count=4,
        destination=Path("remote/out.png"),
        local_destination=out,
    )
    result = FfmpegBackend(runner=runner).convert(request, BackendConfig(enabled=True))

    expected = not timed_out and exit_code == 0 and bool(written)
    assert result.succeeded is expected
    if result.succeeded:
        assert result.output_path == out
        assert out.stat().st_size > 0
        assert result.diagnostics.failure_kind is None
    else:
        assert result.output_path is None
        assert isinstance(result.diagnostics.failure_kind, FailureKind)
