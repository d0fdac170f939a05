"""Power-of-two rectangle packing using the maximal rectangles algorithm."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Hashable, List, Optional, Sequence, Tuple

from .errors import PackingFailed
from ..utils.validators import is_power_of_two

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackItem:
    key: Hashable
    width: int
    height: int


@dataclass(frozen=True)
class Placement:
    key: Hashable
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class PackResult:
    """Canvas size and one placement per input item, in input order."""

    width: int
    height: int
    placements: List[Placement]


@dataclass(frozen=True)
class _Free:
    x: int
    y: int
    width: int
    height: int

    def contains(self, other: "_Free") -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x + other.width <= self.x + self.width
            and other.y + other.height <= self.y + self.height
        )


def next_power_of_two(n: int) -> int:
    """Return the smallest power of two greater than or equal to n."""

    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


class MaxRectsBin:
    """A single fixed-size canvas tracked as a list of maximal free rectangles."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.free_rects: List[_Free] = [_Free(0, 0, width, height)]

    def insert(self, width: int, height: int) -> Optional[Tuple[int, int]]:
        """Place a rectangle using best-short-side-fit; return its offset or None."""

        best: Optional[Tuple[int, int, _Free]] = None
        for free in self.free_rects:
            if free.width < width or free.height < height:
                continue
            leftover_w = free.width - width
            leftover_h = free.height - height
            score = (min(leftover_w, leftover_h), max(leftover_w, leftover_h))
            if best is None or score < best[:2]:
                best = (*score, free)
        if best is None:
            return None

        target = best[2]
        self._split(_Free(target.x, target.y, width, height))
        self._prune()
        return target.x, target.y

    def _split(self, used: _Free) -> None:
        remaining: List[_Free] = []
        for free in self.free_rects:
            if (
                used.x >= free.x + free.width
                or used.x + used.width <= free.x
                or used.y >= free.y + free.height
                or used.y + used.height <= free.y
            ):
                remaining.append(free)
                continue
            if used.y > free.y:
                remaining.append(_Free(free.x, free.y, free.width, used.y - free.y))
            if used.y + used.height < free.y + free.height:
                bottom = used.y + used.height
                remaining.append(_Free(free.x, bottom, free.width, free.y + free.height - bottom))
            if used.x > free.x:
                remaining.append(_Free(free.x, free.y, used.x - free.x, free.height))
            if used.x + used.width < free.x + free.width:
                right = used.x + used.width
                remaining.append(_Free(right, free.y, free.x + free.width - right, free.height))
        self.free_rects = remaining

    def _prune(self) -> None:
        kept: List[_Free] = []
        for idx, free in enumerate(self.free_rects):
            redundant = False
            for other_idx, other in enumerate(self.free_rects):
                if idx == other_idx or not other.contains(free):
                    continue
                # Identical rectangles: keep only the first occurrence.
                if free != other or other_idx < idx:
                    redundant = True
                    break
            if not redundant:
                kept.append(free)
        self.free_rects = kept


def _initial_size(items: Sequence[PackItem]) -> int:
    widest = max(item.width for item in items)
    tallest = max(item.height for item in items)
    area = sum(item.width * item.height for item in items)
    side = max(widest, tallest, math.isqrt(area - 1) + 1)
    return next_power_of_two(side)


def _try_pack(items: Sequence[PackItem], order: Sequence[int], width: int, height: int) -> Optional[List[Placement]]:
    canvas = MaxRectsBin(width, height)
    placed: List[Optional[Placement]] = [None] * len(items)
    for idx in order:
        item = items[idx]
        position = canvas.insert(item.width, item.height)
        if position is None:
            return None
        placed[idx] = Placement(item.key, position[0], position[1], item.width, item.height)
    return placed  # type: ignore[return-value]


def pack(items: Sequence[PackItem], max_size: int) -> PackResult:
    """Pack every item into the smallest power-of-two canvas found within max_size.

    Sizes are tried starting at the smallest square that could hold the items;
    after each failed attempt the smaller dimension doubles (width on ties).
    Rectangles are never rotated.
    """

    if not is_power_of_two(max_size):
        raise ValueError(f"max_size must be a power of two, got {max_size}")
    for item in items:
        if item.width <= 0 or item.height <= 0:
            raise ValueError(f"Item {item.key!r} has an empty size {item.width}x{item.height}")
    if not items:
        return PackResult(1, 1, [])

    order = sorted(
        range(len(items)),
        key=lambda i: (-max(items[i].width, items[i].height), -items[i].width * items[i].height, i),
    )
    size = _initial_size(items)
    width = height = size
    while width <= max_size and height <= max_size:
        placements = _try_pack(items, order, width, height)
        if placements is not None:
            logger.debug("Packed %s rectangle(s) into %sx%s", len(items), width, height)
            return PackResult(width, height, placements)
        logger.debug("Canvas %sx%s too small for %s rectangle(s)", width, height, len(items))
        if width <= height and width * 2 <= max_size:
            width *= 2
        elif height * 2 <= max_size:
            height *= 2
        elif width * 2 <= max_size:
            width *= 2
        else:
            break

    raise PackingFailed(len(items), max_size)
