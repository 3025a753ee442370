"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FailureKind(str, Enum):
    """Why a conversion attempt failed."""

    LAUNCH = "launch"
    EXIT_STATUS = "exit_status"
    MISSING_OUTPUT = "missing_output"
    TIMEOUT = "timeout"
    ERROR = "error"


class Severity(str, Enum):
    """Severity of a requirement status record."""

    OK = "ok"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostics:
    """Best-effort details about one backend invocation."""

    command_line: str
    exit_code: int | None = None
    stderr_text: str = ""
    timed_out: bool = False
    failure_kind: FailureKind | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Structured conversion outcome.

    A successful result always points at an existing, non-empty file; a
    failed one never carries an output path. Use :meth:`success` and
    :meth:`failure` rather than the constructor.
    """

    succeeded: bool
    diagnostics: Diagnostics
    output_path: Path | None = None
    backend: str = ""

    def __post_init__(self) -> None:
        if self.succeeded:
            if self.output_path is None:
                raise ValueError("successful conversion requires an output path")
            if not _is_non_empty_file(self.output_path):
                raise ValueError(
                    f"successful conversion output is missing or empty: {self.output_path}"
                )
        elif self.output_path is not None:
            raise ValueError("failed conversion must not carry an output path")

    @classmethod
    def success(
        cls, output_path: Path, diagnostics: Diagnostics, backend: str = ""
    ) -> ConversionResult:
        """Build a successful result for an output file that was written."""
        return cls(
            succeeded=True,
            diagnostics=diagnostics,
            output_path=output_path,
            backend=backend,
        )

    @classmethod
    def failure(cls, diagnostics: Diagnostics, backend: str = "") -> ConversionResult:
        """Build a failed result."""
        return cls(succeeded=False, diagnostics=diagnostics, backend=backend)


@dataclass(frozen=True)
class ConversionTarget:
    """Transient target state set by an orchestrator reset.

    A zero ``width`` or ``height`` is derived from the source aspect ratio.
    A non-empty ``format`` replaces the destination format of converted
    requests.
    """

    width: int
    height: int
    format: str


@dataclass(frozen=True)
class RequirementStatus:
    """Status record for an external requirements report."""

    title: str
    value: str
    description: str
    severity: Severity


def _is_non_empty_file(path: Path) -> bool:
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False
