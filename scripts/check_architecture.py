#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/ffmpeg_fallback"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    # The decision policy stays pure: no process, filesystem or imaging code.
    _assert_no_imports(
        PACKAGE / "application/policy.py",
        ["import subprocess", "import os", "from PIL", "ffmpeg_fallback.adapters"],
    )

    for name in ("ports.py", "results.py", "policy.py"):
        _assert_no_imports(
            PACKAGE / "application" / name,
            ["import typer", "from typer", "from PIL", "import subprocess"],
        )

    _assert_no_imports(PACKAGE / "cli/cli.py", ["import subprocess", "from PIL"])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
