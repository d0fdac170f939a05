"""Core data types shared by the atlas build stages."""

__all__ = [
    "Rect",
    "AssetEntry",
    "PlacedFrame",
    "FrameRecord",
    "AtlasDescriptor",
    "MultiFrameMode",
    "ImageFormat",
    "OutputEncoding",
]

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from PIL import Image


class MultiFrameMode(str, Enum):
    """How containers holding more than one frame are packed."""

    SEPARATE_FRAMES = "separate_frames"
    SINGLE_SHEET = "single_sheet"


class ImageFormat(str, Enum):
    """Encoding of the written canvas image."""

    PNG = "png"
    QOI = "qoi"
    JPEG = "jpg"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


class OutputEncoding(str, Enum):
    """Descriptor encodings the writer knows how to produce."""

    JSON = "json"
    RON = "ron"
    TOML = "toml"
    BINARY = "binary"
    TEMPLATE = "template"


@dataclass(frozen=True)
class Rect:
    """Nine-patch stretch region, relative to the frame's own top-left."""

    x: int
    y: int
    w: int
    h: int

    def fits_within(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.x + self.w <= width and self.y + self.h <= height


@dataclass
class AssetEntry:
    """One packable image produced by discovery."""

    logical_name: str
    pixels: Image.Image
    nine_patch: Optional[Rect] = None

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height


@dataclass(frozen=True)
class PlacedFrame:
    """Canvas placement of a packed entry."""

    logical_name: str
    x: int
    y: int
    width: int
    height: int
    nine_patch: Optional[Rect] = None

    def overlaps(self, other: "PlacedFrame") -> bool:
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )


@dataclass(frozen=True)
class FrameRecord:
    """Descriptor entry for one logical name."""

    x: int
    y: int
    width: int
    height: int
    nine_patch: Optional[Rect] = None


@dataclass(frozen=True)
class AtlasDescriptor:
    """Final product of a build: the sheet path and every frame placement."""

    sheet_path: Path
    frames: dict[str, FrameRecord] = field(default_factory=dict)
