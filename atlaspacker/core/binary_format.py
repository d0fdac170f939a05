"""Little-endian binary atlas descriptor.

Layout::

    u8   sheet path length
    ...  sheet path (UTF-8, forward slashes)
    u32  frame count
    per frame:
        u8   name length
        ...  name (UTF-8)
        u32  x, y, width, height
        u8   has nine-patch            (only when nine-patch support is enabled)
        u32  x, y, w, h                (only when has nine-patch is 1)

Frames are written sorted by name.
"""

from __future__ import annotations

import struct
from pathlib import Path

from . import AtlasDescriptor, FrameRecord, Rect
from .errors import EncodingError
from ..utils import file_tools

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_RECT = struct.Struct("<IIII")
MAX_STRING_BYTES = 0xFF


def _pack_string(value: str) -> bytes:
    raw = file_tools.posix_path(value).encode("utf-8")
    if len(raw) > MAX_STRING_BYTES:
        raise EncodingError(f"String is {len(raw)} bytes, longer than {MAX_STRING_BYTES}: {value!r}")
    return _U8.pack(len(raw)) + raw


def _pack_rect(x: int, y: int, w: int, h: int) -> bytes:
    try:
        return _RECT.pack(x, y, w, h)
    except struct.error as exc:
        raise EncodingError(f"Value out of u32 range in ({x}, {y}, {w}, {h})") from exc


def encode_binary(descriptor: AtlasDescriptor, nine_patch: bool) -> bytes:
    chunks = [_pack_string(str(descriptor.sheet_path)), _U32.pack(len(descriptor.frames))]
    for name in sorted(descriptor.frames):
        record = descriptor.frames[name]
        chunks.append(_pack_string(name))
        chunks.append(_pack_rect(record.x, record.y, record.width, record.height))
        if nine_patch:
            rect = record.nine_patch
            chunks.append(_U8.pack(1 if rect is not None else 0))
            if rect is not None:
                chunks.append(_pack_rect(rect.x, rect.y, rect.w, rect.h))
    return b"".join(chunks)


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def take(self, layout: struct.Struct) -> tuple:
        try:
            values = layout.unpack_from(self.data, self.offset)
        except struct.error as exc:
            raise EncodingError(f"Truncated binary descriptor at byte {self.offset}") from exc
        self.offset += layout.size
        return values

    def string(self) -> str:
        (length,) = self.take(_U8)
        end = self.offset + length
        if end > len(self.data):
            raise EncodingError(f"Truncated string at byte {self.offset}")
        raw = self.data[self.offset : end]
        self.offset = end
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Invalid UTF-8 string at byte {self.offset - length}") from exc


def decode_binary(data: bytes, nine_patch: bool) -> AtlasDescriptor:
    """Parse bytes produced by encode_binary with the same nine-patch setting."""

    reader = _Reader(data)
    sheet_path = reader.string()
    (count,) = reader.take(_U32)
    frames: dict[str, FrameRecord] = {}
    for _ in range(count):
        name = reader.string()
        x, y, width, height = reader.take(_RECT)
        rect = None
        if nine_patch:
            (has_nine_patch,) = reader.take(_U8)
            if has_nine_patch:
                rect = Rect(*reader.take(_RECT))
        frames[name] = FrameRecord(x, y, width, height, rect)
    if reader.offset != len(data):
        raise EncodingError(f"{len(data) - reader.offset} unexpected trailing byte(s) in binary descriptor")
    return AtlasDescriptor(sheet_path=Path(sheet_path), frames=frames)
