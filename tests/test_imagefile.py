import pytest

pytest.importorskip("PyQt5.QtGui")

from Engine.canvas import Canvas, CanvasError
from Engine.imagefile import (
    decode_png,
    encode_png,
    load_canvas_image,
    read_canvas_image,
    write_bytes_atomic,
    write_canvas_image,
)


RED = (255, 0, 0, 255)


def painted():
    c = Canvas(4, 3)
    c.setColor("Red")
    c.drawLine(1, 0, 2)
    c.setPixel(3, 2, (0, 0, 255, 128))
    return c


def test_png_signature():
    assert encode_png(painted()).startswith(b"\x89PNG\r\n\x1a\n")


def test_decode_restores_pixels():
    source = painted()
    target = Canvas(4, 3)
    load_canvas_image(target, encode_png(source))
    assert target.pixels == source.pixels


def test_decode_scales_to_canvas_size():
    data = decode_png(encode_png(Canvas(2, 2)), 6, 5)
    assert len(data) == 6 * 5 * 4
    assert data[:4] == b"\xff\xff\xff\xff"


def test_decode_rejects_garbage():
    with pytest.raises(CanvasError):
        decode_png(b"not an image", 2, 2)


def test_file_round_trip(tmp_path):
    path = tmp_path / "out" / "canvas.png"
    write_canvas_image(painted(), path)
    assert path.exists()
    target = Canvas(4, 3)
    read_canvas_image(target, path)
    assert target.getPixel(0, 0) == RED
    assert target.getPixel(2, 0) == (255, 255, 255, 255)


def test_write_bytes_atomic_replaces(tmp_path):
    path = tmp_path / "state.json"
    write_bytes_atomic(path, b"one")
    write_bytes_atomic(path, b"two")
    assert path.read_bytes() == b"two"
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]
