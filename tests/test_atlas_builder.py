import numpy as np
import pytest
from PIL import Image

from atlaspacker.core import AssetEntry, ImageFormat, Rect
from atlaspacker.core.atlas_builder import composite, save_canvas
from atlaspacker.core.errors import CanvasWriteError
from atlaspacker.core.rect_packer import PackItem, pack


def _gradient(width, height, seed):
    data = np.zeros((height, width, 4), dtype=np.uint8)
    ys, xs = np.mgrid[0:height, 0:width]
    data[..., 0] = (xs * 9 + seed) % 256
    data[..., 1] = (ys * 5 + seed) % 256
    data[..., 2] = seed
    data[..., 3] = (xs + ys) % 200 + 1
    return Image.fromarray(data)


def _entries():
    return [
        AssetEntry("a", _gradient(20, 10, 1)),
        AssetEntry("b", _gradient(7, 30, 2), nine_patch=Rect(1, 1, 2, 2)),
        AssetEntry("c", _gradient(16, 16, 3)),
    ]


def test_composite_copies_pixels_exactly_and_leaves_rest_transparent():
    entries = _entries()
    result = pack([PackItem(idx, e.width, e.height) for idx, e in enumerate(entries)], 256)

    canvas, placed = composite(result, entries)

    assert canvas.size == (result.width, result.height)
    assert canvas.mode == "RGBA"
    pixels = np.asarray(canvas)
    covered = np.zeros(pixels.shape[:2], dtype=bool)
    for frame, entry in zip(placed, entries):
        region = pixels[frame.y : frame.y + frame.height, frame.x : frame.x + frame.width]
        assert np.array_equal(region, np.asarray(entry.pixels))
        covered[frame.y : frame.y + frame.height, frame.x : frame.x + frame.width] = True
    assert not pixels[~covered].any()


def test_composite_carries_names_and_nine_patch():
    entries = _entries()
    result = pack([PackItem(idx, e.width, e.height) for idx, e in enumerate(entries)], 256)

    _, placed = composite(result, entries)

    assert [frame.logical_name for frame in placed] == ["a", "b", "c"]
    assert placed[1].nine_patch == Rect(1, 1, 2, 2)
    for i, first in enumerate(placed):
        for second in placed[i + 1 :]:
            assert not first.overlaps(second)


def test_composite_rejects_mismatched_inputs():
    entries = _entries()
    result = pack([PackItem(0, 20, 10)], 256)
    with pytest.raises(ValueError):
        composite(result, entries)


def test_save_canvas_png_is_lossless(tmp_path):
    canvas = _gradient(32, 16, 4)

    path = save_canvas(canvas, tmp_path / "out", "sheet", ImageFormat.PNG)

    assert path == tmp_path / "out" / "sheet.png"
    with Image.open(path) as saved:
        assert np.array_equal(np.asarray(saved.convert("RGBA")), np.asarray(canvas))


def test_save_canvas_jpeg_and_qoi_extensions(tmp_path):
    canvas = _gradient(8, 8, 5)

    jpeg = save_canvas(canvas, tmp_path, "sheet", ImageFormat.JPEG)
    qoi = save_canvas(canvas, tmp_path, "sheet", ImageFormat.QOI)

    assert jpeg.suffix == ".jpg" and jpeg.read_bytes()[:2] == b"\xff\xd8"
    assert qoi.suffix == ".qoi" and qoi.read_bytes()[:4] == b"qoif"


def test_save_canvas_failure_raises(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file, not a folder", encoding="utf-8")
    with pytest.raises(CanvasWriteError):
        save_canvas(_gradient(4, 4, 6), blocker, "sheet", ImageFormat.PNG)
