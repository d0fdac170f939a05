"""Source discovery: walk the search folders and decode packable images."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Iterator, List, Optional

from PIL import Image, ImageSequence

from . import AssetEntry, MultiFrameMode, Rect
from .errors import InvalidImageError
from ..utils import file_tools, ron, validators

if TYPE_CHECKING:
    from ..config import BuildRequest

logger = logging.getLogger(__name__)

NINE_PATCH_SUFFIXES = (".json", ".ron")


@dataclass(frozen=True)
class SourceFile:
    """A recognized file and the folder it was found under."""

    path: Path
    root: Path
    is_container: bool


def iter_source_files(folder: Path) -> Iterator[Path]:
    """Yield candidate files under folder in a reproducible depth-first order."""

    yield from file_tools.iter_files(folder)


def logical_name(path: Path, root: Path, preserve_extension: bool) -> str:
    """Derive the descriptor key for a file relative to its search root."""

    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    name = file_tools.posix_path(relative)
    while name.startswith("./"):
        name = name[2:]
    if not preserve_extension:
        posix = PurePosixPath(name)
        if posix.suffix:
            name = str(posix.with_suffix(""))
    return name


def find_nine_patch(path: Path) -> Optional[Rect]:
    """Read the sidecar stretch region next to an image, if there is one."""

    for suffix in NINE_PATCH_SUFFIXES:
        sidecar = path.with_suffix(suffix)
        if not sidecar.is_file():
            continue
        try:
            text = sidecar.read_text(encoding="utf-8")
            data = json.loads(text) if suffix == ".json" else ron.loads(text)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ron.RonError) as exc:
            logger.warning("Ignoring unreadable nine-patch file %s: %s", sidecar, exc)
            continue
        values = validators.parse_nine_patch(data)
        if values is None:
            logger.warning("Ignoring malformed nine-patch file %s", sidecar)
            continue
        return Rect(*values)
    return None


def tile_frames(frames: List[Image.Image]) -> Image.Image:
    """Lay container frames out on a grid as one sheet."""

    count = len(frames)
    if count == 0:
        raise ValueError("No frames provided to tile.")
    frame_width, frame_height = frames[0].size
    columns = max(count // 2 if count < 4 else count // 4, 1)
    rows = -(-count // columns)

    sheet = Image.new("RGBA", (columns * frame_width, rows * frame_height), (0, 0, 0, 0))
    for idx, frame in enumerate(frames):
        x = (idx % columns) * frame_width
        y = (idx // columns) * frame_height
        sheet.paste(frame.crop((0, 0, frame_width, frame_height)), (x, y))
    return sheet


def discover_assets(request: "BuildRequest") -> List[AssetEntry]:
    """Collect every packable entry, in traversal order, from the search folders."""

    sources = list(_iter_sources(request))
    if request.workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=request.workers) as pool:
            batches = list(pool.map(lambda source: _load_source(source, request), sources))
    else:
        batches = [_load_source(source, request) for source in sources]

    entries = [entry for batch in batches for entry in batch]
    logger.info("Discovered %s packable image(s) from %s file(s)", len(entries), len(sources))
    return entries


def _iter_sources(request: "BuildRequest") -> Iterator[SourceFile]:
    for folder in request.source_folders:
        for path in iter_source_files(folder):
            suffix = path.suffix.lower()
            if suffix in validators.IMAGE_EXTENSIONS:
                is_container = False
            elif request.multi_frame_enabled and suffix in validators.CONTAINER_EXTENSIONS:
                is_container = True
            else:
                continue
            logger.info("Found image: %s", path)
            yield SourceFile(path=path, root=folder, is_container=is_container)


def _load_source(source: SourceFile, request: "BuildRequest") -> List[AssetEntry]:
    """Decode one file; decoding problems exclude the file instead of failing the build."""

    name = logical_name(source.path, source.root, request.preserve_extension_in_name)
    nine_patch = find_nine_patch(source.path) if request.nine_patch_enabled else None
    try:
        if source.is_container:
            frames = _read_frames(source.path)
        else:
            frames = [_read_image(source.path)]
    except InvalidImageError as exc:
        logger.warning("Skipping %s", exc)
        return []

    if len(frames) == 1:
        images = [(name, frames[0])]
    elif request.multi_frame_mode is MultiFrameMode.SINGLE_SHEET:
        images = [(name, tile_frames(frames))]
    else:
        images = [(f"{name}/{idx}", frame) for idx, frame in enumerate(frames)]

    return [AssetEntry(entry_name, pixels, _fit_nine_patch(nine_patch, pixels, source.path)) for entry_name, pixels in images]


def _fit_nine_patch(nine_patch: Optional[Rect], pixels: Image.Image, path: Path) -> Optional[Rect]:
    if nine_patch is None or nine_patch.fits_within(pixels.width, pixels.height):
        return nine_patch
    logger.warning("Ignoring nine-patch %s for %s: outside %sx%s", nine_patch, path, pixels.width, pixels.height)
    return None


def _read_image(path: Path) -> Image.Image:
    validators.validate_image_path(path)
    try:
        with Image.open(path) as image:
            return image.convert("RGBA")
    except Exception as exc:  # pragma: no cover - decoder dependent
        raise InvalidImageError(path, reason=str(exc)) from exc


def _read_frames(path: Path) -> List[Image.Image]:
    validators.validate_image_path(path)
    try:
        with Image.open(path) as image:
            width, height = image.size
            frames = []
            for frame in ImageSequence.Iterator(image):
                rgba = frame.convert("RGBA")
                if rgba.size != (width, height):
                    rgba = rgba.crop((0, 0, width, height))
                frames.append(rgba)
    except Exception as exc:  # pragma: no cover - decoder dependent
        raise InvalidImageError(path, reason=str(exc)) from exc
    if not frames:
        raise InvalidImageError(path, reason="Container holds no frames")
    return frames
