"""Validation helpers for build settings."""

from __future__ import annotations

from pathlib import Path

from ..core.errors import InvalidImageError, ValidationError


IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tga", ".qoi"}
CONTAINER_EXTENSIONS = {".gif", ".apng", ".webp", ".tif", ".tiff"}
CONFIG_EXTENSIONS = {".json", ".ron", ".toml"}


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def validate_canvas_size(value: int) -> int:
    """Ensure the maximum canvas size is a positive power of two."""

    if not is_power_of_two(value):
        raise ValidationError(f"Maximum canvas size must be a power of two, got {value}")
    return value


def validate_image_path(path: Path) -> Path:
    """Ensure the image path exists and is a regular file."""

    if not path.exists():
        raise InvalidImageError(path, reason="File not found")
    if not path.is_file():
        raise InvalidImageError(path, reason="Not a file")
    return path


def validate_name(name: str) -> str:
    """Ensure an output name is usable as a file name."""

    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Output name must not be empty")
    if "/" in cleaned or "\\" in cleaned:
        raise ValidationError(f"Output name must not contain path separators: {name!r}")
    return cleaned


def parse_nine_patch(data: object) -> tuple[int, int, int, int] | None:
    """Return (x, y, w, h) from a decoded sidecar, or None when malformed."""

    if not isinstance(data, dict):
        return None
    values = []
    for key in ("x", "y", "w", "h"):
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
        values.append(value)
    return tuple(values)  # type: ignore
