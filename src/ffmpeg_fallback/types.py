"""Image format names shared by the conversion backends."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ImageFormat(str, Enum):
    """Image formats known to the conversion backends."""

    PNG = "PNG"
    GIF = "GIF"
    WEBP = "WEBP"
    JPEG = "JPEG"
    BMP = "BMP"
    TIFF = "TIFF"

    @classmethod
    def parse(cls, value: str | None) -> ImageFormat | None:
        """Parse a format name case-insensitively.

        Parameters
        ----------
        value : str | None
            Format name or file extension, with or without a leading dot.

        Returns
        -------
        ImageFormat | None
            Matching format, or ``None`` when the name is unknown.
        """
        if not value:
            return None
        normalized = value.strip().lstrip(".").upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


_ALIASES = {"JPG": "JPEG", "TIF": "TIFF", "APNG": "PNG"}


def normalize_format(value: str | None) -> str:
    """Upper-case a format name, mapping known aliases to canonical names."""
    if not value:
        return ""
    parsed = ImageFormat.parse(value)
    if parsed is not None:
        return parsed.value
    return value.strip().lstrip(".").upper()


def format_from_path(path: Path) -> str:
    """Derive a format name from a file extension."""
    return normalize_format(path.suffix)
