"""Filesystem helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def iter_files(root: Path) -> Iterator[Path]:
    """Yield every file below root depth-first, entries in sorted name order."""

    if not root.is_dir():
        logger.debug("Skipping missing folder: %s", root)
        return
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            yield from iter_files(entry)
        elif entry.is_file():
            yield entry


def posix_path(path: Path | str) -> str:
    """Render a path with forward slashes regardless of host platform."""

    return str(path).replace("\\", "/")


def normalize_separators(text: str) -> str:
    """Turn escaped backslash separators in rendered text into forward slashes."""

    return text.replace("\\\\", "/")


def output_file(directory: Path, name: str, suffix: str) -> Path:
    """Return <directory>/<name><suffix> without treating dots in name as a suffix."""

    if suffix and not suffix.startswith("."):
        suffix = "." + suffix
    return directory / f"{name}{suffix}"
