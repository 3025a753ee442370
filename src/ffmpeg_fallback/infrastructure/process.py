"""Child process execution with captured output and a wall-clock timeout."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"


@dataclass(frozen=True)
class ProcessOutcome:
    """Outcome of a finished (or never started) child process."""

    command_line: str
    exit_code: int | None = None
    stdout_text: str = ""
    stderr_text: str = ""
    timed_out: bool = False
    launch_error: str | None = None

    @property
    def succeeded(self) -> bool:
        """``True`` when the process ran to completion with status 0."""
        return self.launch_error is None and not self.timed_out and self.exit_code == 0


def format_command_line(argv: Sequence[str]) -> str:
    """Render an argument vector as a shell-quoted command line."""
    return shlex.join(str(arg) for arg in argv)


def run_process(argv: Sequence[str], timeout: float) -> ProcessOutcome:
    """Run a command, wait for it, and report what happened.

    Parameters
    ----------
    argv : Sequence[str]
        Executable followed by its arguments. The executable is looked up
        on ``PATH`` when it has no directory component.
    timeout : float
        Seconds to wait before the process (and on POSIX its whole process
        group) is killed.

    Returns
    -------
    ProcessOutcome
        Exit status and captured output. Launch failures are reported in
        ``launch_error`` instead of being raised.
    """
    args = [str(arg) for arg in argv]
    command_line = format_command_line(args)
    try:
        process = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=_POSIX,
        )
    except (OSError, ValueError) as exc:
        return ProcessOutcome(command_line=command_line, launch_error=str(exc))

    with process:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill(process)
            stdout, stderr = process.communicate()
            logger.warning("process timed out after %ss: %s", timeout, command_line)
            return ProcessOutcome(
                command_line=command_line,
                exit_code=None,
                stdout_text=_decode(stdout),
                stderr_text=_decode(stderr),
                timed_out=True,
            )

    return ProcessOutcome(
        command_line=command_line,
        exit_code=process.returncode,
        stdout_text=_decode(stdout),
        stderr_text=_decode(stderr),
    )


def _kill(process: subprocess.Popen[bytes]) -> None:
    """Kill the child and anything it spawned into its session."""
    if _POSIX:
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except OSError:
            pass
    process.kill()


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode(errors="replace")
