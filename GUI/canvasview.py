from __future__ import annotations

from PyQt5.QtCore import QRectF, Qt
from PyQt5.QtGui import QColor, QImage, QPainter, QPen
from PyQt5.QtWidgets import QWidget

from Engine.canvas import Canvas


CHECKER_LIGHT = QColor("#3A3F52")
CHECKER_DARK = QColor("#2A3142")
CURSOR_COLOR = QColor("#F59E0B")


class CanvasView(QWidget):
    """Paints a Canvas scaled to fit, with a checkerboard behind transparent pixels."""

    def __init__(self, canvas: Canvas, parent=None):
        super().__init__(parent)
        self._canvas = canvas
        self._image: QImage | None = None
        self._zoom = 1.0
        self.show_cursor = True
        self.setMinimumSize(320, 240)
        self.refresh()

    def set_canvas(self, canvas: Canvas) -> None:
        self._canvas = canvas
        self.refresh()

    def refresh(self) -> None:
        c = self._canvas
        raw = c.toRGBA()
        self._image = QImage(raw, c.width, c.height, c.width * 4, QImage.Format_RGBA8888).copy()
        self.update()

    def _target_rect(self) -> QRectF:
        c = self._canvas
        scale = min(self.width() / c.width, self.height() / c.height) * self._zoom
        w = c.width * scale
        h = c.height * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#0F111A"))
        if self._image is None:
            return
        target = self._target_rect()

        step = 8
        painter.save()
        painter.setClipRect(target)
        y = int(target.top())
        row = 0
        while y < target.bottom():
            x = int(target.left())
            col = row % 2
            while x < target.right():
                painter.fillRect(x, y, step, step, CHECKER_LIGHT if col % 2 else CHECKER_DARK)
                x += step
                col += 1
            y += step
            row += 1
        painter.restore()

        painter.setRenderHint(QPainter.SmoothPixmapTransform, False)
        painter.drawImage(target, self._image)

        if self.show_cursor:
            state = self._canvas.state
            if self._canvas.inside(state.cursor_x, state.cursor_y):
                cell = target.width() / self._canvas.width
                cx = target.left() + (state.cursor_x + 0.5) * cell
                cy = target.top() + (state.cursor_y + 0.5) * cell
                radius = max(3.0, cell)
                painter.setRenderHint(QPainter.Antialiasing, True)
                painter.setPen(QPen(CURSOR_COLOR, 2))
                painter.setBrush(Qt.NoBrush)
                painter.drawEllipse(QRectF(cx - radius, cy - radius, radius * 2, radius * 2))

    def wheelEvent(self, event):
        if event.modifiers() & Qt.ControlModifier:
            if event.angleDelta().y() > 0:
                self._zoom = min(8.0, self._zoom * 1.15)
            else:
                self._zoom = max(0.25, self._zoom / 1.15)
            self.update()
            event.accept()
            return
        super().wheelEvent(event)
