from __future__ import annotations

import logging
from pathlib import Path

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QSpinBox,
    QSplitter,
    QStyle,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from Engine.canvas import Canvas
from Engine.imagefile import write_canvas_image
from GUI.canvasview import CanvasView
from GUI.codeeditor import ACTIVE_TEXT, APP_BG, DIVIDER, INACTIVE_TEXT, CodeEditor
from Interpreter.errors import PixelWalleError
from Interpreter.interpreter import check_source, compile_source, execute
from Interpreter.state import ExecutionState


logger = logging.getLogger(__name__)

RUN_BG = "#2ECC71"
LIVE_BG = "#22D3EE"
STEP_BG = "#F59E0B"
BUTTON_TEXT = "#0F111A"
PLAIN_BG = "#2A3142"

# statements per timer tick when running at full speed
RUN_CHUNK = 5000


class PixelWalleMainWindow(QMainWindow):
    def __init__(self, width: int = 1080, height: int = 720, parent=None):
        super().__init__(parent)

        self.setWindowTitle("PixelWalle")
        self.setMinimumSize(1200, 720)
        self.resize(1600, 900)

        self.state = ExecutionState()
        self.canvas = Canvas(width, height, self.state)
        self._path: Path | None = None
        self._program = None
        self._next_line = 1
        self._mode: str | None = None

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)

        self.editor = CodeEditor()
        self.canvas_view = CanvasView(self.canvas)

        self.diagnostics = QListWidget()
        self.diagnostics.setObjectName("diagnostics")
        self.diagnostics.itemActivated.connect(self._on_diagnostic_activated)
        self.diagnostics.itemClicked.connect(self._on_diagnostic_activated)

        self.status = QLabel("Ready")
        self.status.setObjectName("statusLabel")

        central = QWidget()
        root = QVBoxLayout(central)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)
        root.addWidget(self._build_toolbar())

        left = QSplitter(Qt.Vertical)
        left.setChildrenCollapsible(False)
        left.addWidget(self.editor)
        left.addWidget(self.diagnostics)
        left.setSizes([700, 160])

        splitter = QSplitter(Qt.Horizontal)
        splitter.setChildrenCollapsible(False)
        splitter.setHandleWidth(1)
        splitter.addWidget(left)
        splitter.addWidget(self.canvas_view)
        splitter.setSizes([800, 800])

        root.addWidget(splitter, 1)
        root.addWidget(self.status)
        self.setCentralWidget(central)
        self._apply_styles()

    def _tool_button(self, name: str, text: str, icon, slot) -> QToolButton:
        btn = QToolButton()
        btn.setObjectName(name)
        btn.setToolButtonStyle(Qt.ToolButtonTextBesideIcon)
        btn.setIcon(self.style().standardIcon(icon))
        btn.setText(text)
        btn.clicked.connect(slot)
        return btn

    def _build_toolbar(self) -> QWidget:
        toolbar = QWidget()
        toolbar.setObjectName("toolbar")
        tb = QHBoxLayout(toolbar)
        tb.setContentsMargins(10, 8, 10, 8)
        tb.setSpacing(8)

        self.check_btn = self._tool_button("checkButton", "Check", QStyle.SP_DialogApplyButton, self.check)
        self.run_btn = self._tool_button("runButton", "Run", QStyle.SP_MediaPlay, self.run)
        self.step_btn = self._tool_button("stepButton", "Step", QStyle.SP_ArrowForward, self.step)
        self.live_btn = self._tool_button("liveButton", "Live Run", QStyle.SP_BrowserReload, self.live_run)
        self.stop_btn = self._tool_button("stopButton", "Stop", QStyle.SP_MediaStop, self.stop)

        self.live_speed = QSlider(Qt.Horizontal)
        self.live_speed.setObjectName("liveSpeed")
        self.live_speed.setRange(1, 100)
        self.live_speed.setValue(20)
        self.live_speed.setFixedWidth(140)
        self.live_speed.valueChanged.connect(self._update_live_speed_label)
        self.live_speed_label = QLabel("20 st/s")

        self.width_box = QSpinBox()
        self.width_box.setRange(1, 4096)
        self.width_box.setValue(self.canvas.width)
        self.height_box = QSpinBox()
        self.height_box.setRange(1, 4096)
        self.height_box.setValue(self.canvas.height)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.clicked.connect(self.reset)
        self.load_btn = QPushButton("Load")
        self.load_btn.setObjectName("loadButton")
        self.load_btn.clicked.connect(self.load)
        self.save_btn = QPushButton("Save")
        self.save_btn.clicked.connect(self.save)
        self.export_btn = QPushButton("Export PNG")
        self.export_btn.clicked.connect(self.export_png)

        for widget in (
            self.check_btn,
            self.run_btn,
            self.step_btn,
            self.live_btn,
            self.stop_btn,
            self.live_speed,
            self.live_speed_label,
        ):
            tb.addWidget(widget)
        tb.addStretch(1)
        tb.addWidget(QLabel("Canvas"))
        tb.addWidget(self.width_box)
        tb.addWidget(QLabel("x"))
        tb.addWidget(self.height_box)
        for widget in (self.reset_btn, self.load_btn, self.save_btn, self.export_btn):
            tb.addWidget(widget)
        return toolbar

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            f"""
            QMainWindow, QWidget {{
                background: {APP_BG};
                color: {ACTIVE_TEXT};
                font-family: Segoe UI, Arial;
            }}
            #toolbar {{ border-bottom: 1px solid {DIVIDER}; }}
            QToolButton, QPushButton {{
                background: {PLAIN_BG};
                color: {ACTIVE_TEXT};
                border: none;
                border-radius: 4px;
                padding: 6px 12px;
            }}
            #runButton {{ background: {RUN_BG}; color: {BUTTON_TEXT}; }}
            #liveButton {{ background: {LIVE_BG}; color: {BUTTON_TEXT}; }}
            #stepButton {{ background: {STEP_BG}; color: {BUTTON_TEXT}; }}
            #diagnostics {{ border: 1px solid {DIVIDER}; }}
            #statusLabel {{ color: {INACTIVE_TEXT}; padding: 4px 10px; }}
            """
        )

    def load_file(self, file_path: str | Path) -> None:
        path = Path(file_path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            text = path.read_text(encoding="latin-1")
        self.stop()
        self.editor.setPlainText(text)
        self.editor.document().setModified(False)
        self._path = path
        self.setWindowTitle(f"PixelWalle - {path.name}")

    def show_diagnostics(self, errors) -> None:
        self.diagnostics.clear()
        for err in errors:
            where = f"{err.line}:{err.column}" if err.line else "program"
            item = QListWidgetItem(f"[{err.kind}] {where}  {err.message}")
            item.setData(Qt.UserRole, err.line)
            self.diagnostics.addItem(item)
        self.editor.set_error_lines(err.line for err in errors)

    def _on_diagnostic_activated(self, item: QListWidgetItem) -> None:
        line = item.data(Qt.UserRole)
        if line:
            self.editor.goto_line(int(line))

    def check(self) -> bool:
        errors = check_source(self.editor.toPlainText())
        self.show_diagnostics(errors)
        self.status.setText(f"{len(errors)} problem(s)" if errors else "No problems found")
        return not errors

    def _start_session(self) -> bool:
        self.stop()
        if not self.check():
            return False
        self._program = compile_source(self.editor.toPlainText())
        self.reset_canvas()
        self._next_line = 1
        return True

    def run(self) -> None:
        if not self._start_session():
            return
        self._mode = "run"
        self._timer.start(0)

    def live_run(self) -> None:
        if not self._start_session():
            return
        self._mode = "live"
        self._timer.start(self._live_interval_ms())

    def step(self) -> None:
        if self._program is None and not self._start_session():
            return
        self._timer.stop()
        self._mode = "step"
        self._advance(1)

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
        self._mode = None
        self.editor.set_debug_line(None)

    def _tick(self) -> None:
        if self._mode == "run":
            self._advance(RUN_CHUNK)
        elif self._mode == "live":
            self._advance(1)

    def _advance(self, budget: int) -> None:
        try:
            result = execute(self._program, self.state, self.canvas, self._next_line, budget)
        except PixelWalleError as exc:
            logger.info("run stopped: %s", exc)
            self.show_diagnostics([exc])
            self.status.setText(f"Runtime error on line {exc.line}")
            self._finish()
            return

        self.canvas_view.refresh()
        self._next_line = result.next_line
        self.status.setText(
            f"Line {result.last_executed_line}  cursor ({result.cursor_x}, {result.cursor_y})"
        )
        if result.finished:
            self.status.setText(self.status.text() + "  finished")
            self._finish()
            return
        if self._mode != "run":
            self.editor.set_debug_line(result.next_line)
        if self._mode == "live" and result.next_line in self.editor.breakpoint_lines():
            self._timer.stop()
            self._mode = "step"

    def _finish(self) -> None:
        self.stop()
        self._program = None

    def reset_canvas(self) -> None:
        self.state.reset()
        width = self.width_box.value()
        height = self.height_box.value()
        if (width, height) != (self.canvas.width, self.canvas.height):
            self.canvas = Canvas(width, height, self.state)
            self.canvas_view.set_canvas(self.canvas)
        else:
            self.canvas.bind(self.state)
            self.canvas.clear()
            self.canvas_view.refresh()

    def reset(self) -> None:
        self._finish()
        self.reset_canvas()
        self.diagnostics.clear()
        self.editor.set_error_lines([])
        self.status.setText("Canvas reset")

    def _live_interval_ms(self) -> int:
        rate = max(1, int(self.live_speed.value()))
        return max(1, int(1000 / rate))

    def _update_live_speed_label(self) -> None:
        self.live_speed_label.setText(f"{int(self.live_speed.value())} st/s")
        if self._mode == "live" and self._timer.isActive():
            self._timer.setInterval(self._live_interval_ms())

    def load(self) -> None:
        file_name, _filter = QFileDialog.getOpenFileName(
            self,
            "Load Program",
            "",
            "PixelWalle program (*.pw *.gw *.txt);;All files (*.*)",
        )
        if file_name:
            self.load_file(file_name)

    def save(self) -> None:
        path = self._path
        if path is None:
            file_name, _filter = QFileDialog.getSaveFileName(
                self,
                "Save Program",
                "program.pw",
                "PixelWalle program (*.pw);;Text (*.txt);;All files (*.*)",
            )
            if not file_name:
                return
            path = Path(file_name)
            self._path = path

        path.write_text(self.editor.toPlainText(), encoding="utf-8")
        self.editor.document().setModified(False)
        self.setWindowTitle(f"PixelWalle - {path.name}")

    def export_png(self) -> None:
        file_name, _filter = QFileDialog.getSaveFileName(self, "Export PNG", "canvas.png", "PNG image (*.png)")
        if not file_name:
            return
        try:
            write_canvas_image(self.canvas, file_name)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Export Failed", str(exc))
            return
        self.status.setText(f"Exported {file_name}")
