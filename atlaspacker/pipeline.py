"""End-to-end atlas build: discover, pack, composite, describe, encode."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import BuildRequest
from .core import AssetEntry, AtlasDescriptor
from .core import asset_discovery, atlas_builder, descriptor, descriptor_writer, rect_packer

logger = logging.getLogger(__name__)


@dataclass
class BuildOutcome:
    """Result paths produced by a build."""

    sheet_path: Path
    descriptor: AtlasDescriptor
    canvas_size: tuple[int, int]
    artifact_paths: List[Path] = field(default_factory=list)


def resolve_name_collisions(entries: List[AssetEntry]) -> List[AssetEntry]:
    """Keep only the last discovered entry for each logical name, in discovery order."""

    last_index = {entry.logical_name: idx for idx, entry in enumerate(entries)}
    kept = []
    for idx, entry in enumerate(entries):
        if last_index[entry.logical_name] != idx:
            logger.warning("Frame name %r is defined more than once; using the last one found", entry.logical_name)
            continue
        kept.append(entry)
    return kept


def build_atlas(request: BuildRequest) -> BuildOutcome:
    """Run the whole build for one request."""

    entries = resolve_name_collisions(asset_discovery.discover_assets(request))
    if not entries:
        logger.warning("No images found in %s", ", ".join(str(folder) for folder in request.source_folders))

    items = [rect_packer.PackItem(idx, entry.width, entry.height) for idx, entry in enumerate(entries)]
    result = rect_packer.pack(items, request.max_canvas_size)
    logger.info("Packed %s frame(s) into a %sx%s canvas", len(entries), result.width, result.height)

    canvas, placed = atlas_builder.composite(result, entries)
    sheet_path = atlas_builder.save_canvas(
        canvas, request.output_directory, request.name, request.output_image_format
    )

    atlas = descriptor.build_descriptor(placed, sheet_path)
    artifact_paths = descriptor_writer.write_outputs(atlas, request)
    return BuildOutcome(
        sheet_path=sheet_path,
        descriptor=atlas,
        canvas_size=(result.width, result.height),
        artifact_paths=artifact_paths,
    )
