"""Small generated images shared by the test modules."""

from __future__ import annotations

from pathlib import Path

from PIL import Image


def write_png(path: Path, size: tuple[int, int], color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path)
    return path


def write_gradient_png(path: Path, size: tuple[int, int]) -> Path:
    """PNG whose every pixel differs, so misplaced copies are detectable."""

    width, height = size
    image = Image.new("RGBA", size)
    image.putdata([((x * 7) % 256, (y * 13) % 256, (x + y) % 256, 128 + (x * y) % 128) for y in range(height) for x in range(width)])
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path)
    return path


def write_gif(path: Path, colors: list[tuple[int, int, int]], size: tuple[int, int] = (8, 8)) -> Path:
    frames = [Image.new("RGB", size, color) for color in colors]
    path.parent.mkdir(parents=True, exist_ok=True)
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=100, loop=0)
    return path
