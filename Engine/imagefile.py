"""PNG encode/decode of canvas pixels through PyQt5's QImage, plus atomic file writes."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from .canvas import Canvas, CanvasError


logger = logging.getLogger(__name__)


def encode_png(canvas: Canvas) -> bytes:
    """Return the canvas as PNG bytes."""

    from PyQt5.QtCore import QBuffer, QByteArray, QIODevice
    from PyQt5.QtGui import QImage

    raw = canvas.toRGBA()
    image = QImage(raw, canvas.width, canvas.height, canvas.width * 4, QImage.Format_RGBA8888).copy()
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.WriteOnly)
    ok = image.save(buffer, "PNG")
    buffer.close()
    if not ok:
        raise CanvasError("Could not encode the canvas as PNG")
    return bytes(data)


def decode_png(data: bytes, width: int, height: int) -> bytes:
    """Decode image bytes to a raw RGBA buffer of exactly width x height.

    Images of another size are scaled to fit.
    """

    from PyQt5.QtCore import Qt
    from PyQt5.QtGui import QImage

    image = QImage()
    if not image.loadFromData(data):
        raise CanvasError("Could not decode the image data")
    image = image.convertToFormat(QImage.Format_RGBA8888)
    if image.width() != width or image.height() != height:
        logger.warning(
            "image is %dx%d, scaling to the %dx%d canvas",
            image.width(),
            image.height(),
            width,
            height,
        )
        image = image.scaled(width, height, Qt.IgnoreAspectRatio, Qt.SmoothTransformation)

    bits = image.constBits()
    bits.setsize(image.bytesPerLine() * height)
    buf = bytes(bits)
    stride = image.bytesPerLine()
    return b"".join(buf[y * stride:y * stride + width * 4] for y in range(height))


def load_canvas_image(canvas: Canvas, data: bytes) -> None:
    canvas.loadRGBA(decode_png(data, canvas.width, canvas.height))


def read_canvas_image(canvas: Canvas, file_path: str | Path) -> None:
    load_canvas_image(canvas, Path(file_path).read_bytes())


def write_canvas_image(canvas: Canvas, file_path: str | Path) -> None:
    write_bytes_atomic(Path(file_path), encode_png(canvas))


def write_bytes_atomic(path: str | Path, data: bytes) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp.{os.getpid()}.{time.time_ns()}")
    with tmp_path.open("wb") as handle:
        handle.write(data)
        handle.flush()
        try:
            os.fsync(handle.fileno())
        except OSError:
            logger.debug("fsync not supported for %s", tmp_path)
    os.replace(tmp_path, path)
