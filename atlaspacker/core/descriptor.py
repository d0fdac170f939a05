"""Descriptor construction and its plain-data form."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from . import AtlasDescriptor, FrameRecord, PlacedFrame, Rect
from .errors import EncodingError
from ..utils import file_tools

logger = logging.getLogger(__name__)


def build_descriptor(placed_frames: Iterable[PlacedFrame], sheet_path: Path) -> AtlasDescriptor:
    """Map each logical name to its placement; later names overwrite earlier ones."""

    frames: dict[str, FrameRecord] = {}
    for frame in placed_frames:
        if frame.logical_name in frames:
            logger.warning("Duplicate frame name %r, keeping the later placement", frame.logical_name)
        frames[frame.logical_name] = FrameRecord(frame.x, frame.y, frame.width, frame.height, frame.nine_patch)
    return AtlasDescriptor(sheet_path=sheet_path, frames=frames)


def rect_payload(rect: Rect) -> dict[str, int]:
    return {"x": rect.x, "y": rect.y, "w": rect.w, "h": rect.h}


def frame_payload(record: FrameRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {"x": record.x, "y": record.y, "width": record.width, "height": record.height}
    if record.nine_patch is not None:
        payload["nine_patch"] = rect_payload(record.nine_patch)
    return payload


def to_payload(descriptor: AtlasDescriptor) -> dict[str, Any]:
    """Plain dict form shared by the text encoders and templates, frames sorted by name."""

    return {
        "sheet_path": file_tools.posix_path(descriptor.sheet_path),
        "frames": {
            file_tools.posix_path(name): frame_payload(descriptor.frames[name]) for name in sorted(descriptor.frames)
        },
    }


def from_payload(data: Mapping[str, Any]) -> AtlasDescriptor:
    """Rebuild a descriptor from decoded JSON, TOML or RON data."""

    try:
        frames = {}
        for name, frame in data["frames"].items():
            nine_patch = frame.get("nine_patch")
            frames[str(name)] = FrameRecord(
                x=int(frame["x"]),
                y=int(frame["y"]),
                width=int(frame["width"]),
                height=int(frame["height"]),
                nine_patch=Rect(**{key: int(nine_patch[key]) for key in ("x", "y", "w", "h")}) if nine_patch else None,
            )
        return AtlasDescriptor(sheet_path=Path(data["sheet_path"]), frames=frames)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise EncodingError(f"Malformed atlas descriptor: {exc}") from exc
