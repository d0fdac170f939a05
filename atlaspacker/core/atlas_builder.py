"""Atlas composition using Pillow and numpy."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

import numpy as np
from PIL import Image

from . import AssetEntry, ImageFormat, PlacedFrame
from .errors import CanvasWriteError
from .rect_packer import PackResult
from ..utils import file_tools

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def composite(result: PackResult, entries: Sequence[AssetEntry]) -> tuple[Image.Image, List[PlacedFrame]]:
    """Blit every entry into a transparent canvas at its packed offset.

    ``result.placements[i]`` must describe ``entries[i]``.
    """

    if len(result.placements) != len(entries):
        raise ValueError("Placement count does not match entry count.")

    canvas = np.zeros((result.height, result.width, 4), dtype=np.uint8)
    placed: list[PlacedFrame] = []
    for placement, entry in zip(result.placements, entries):
        pixels = np.asarray(entry.pixels.convert("RGBA"), dtype=np.uint8)
        if pixels.shape[:2] != (placement.height, placement.width):
            raise ValueError(f"Placement size does not match image {entry.logical_name!r}")
        canvas[placement.y : placement.y + placement.height, placement.x : placement.x + placement.width] = pixels
        placed.append(
            PlacedFrame(
                logical_name=entry.logical_name,
                x=placement.x,
                y=placement.y,
                width=placement.width,
                height=placement.height,
                nine_patch=entry.nine_patch,
            )
        )

    return Image.fromarray(canvas), placed


def save_canvas(canvas: Image.Image, output_directory: Path, name: str, image_format: ImageFormat) -> Path:
    """Persist the canvas as <name>.<ext> in the requested format."""

    output_path = file_tools.output_file(output_directory, name, image_format.suffix)
    try:
        file_tools.ensure_directory(output_path.parent)
        if image_format is ImageFormat.JPEG:
            # JPEG has no alpha channel.
            canvas.convert("RGB").save(output_path, format="JPEG", quality=95)
        elif image_format is ImageFormat.QOI:
            canvas.save(output_path, format="QOI")
        else:
            canvas.save(output_path, format="PNG")
    except (OSError, ValueError, KeyError) as exc:
        raise CanvasWriteError(f"Failed to write atlas image {output_path}: {exc}") from exc

    logger.info("Wrote atlas image %sx%s to %s", canvas.width, canvas.height, output_path)
    return output_path
