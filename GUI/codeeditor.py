from __future__ import annotations

import re

from PyQt5.QtCore import QRect, QSize, Qt
from PyQt5.QtGui import QColor, QFont, QKeySequence, QPainter, QSyntaxHighlighter, QTextCharFormat, QTextFormat
from PyQt5.QtWidgets import QPlainTextEdit, QShortcut, QSizePolicy, QTextEdit, QWidget

from Interpreter.lexer import FUNCTIONS, INSTRUCTIONS


APP_BG = "#0F111A"
EDITOR_BG = "#1C1C1C"
DIVIDER = "#2A3142"
INACTIVE_TEXT = "#6B7394"
ACTIVE_TEXT = "#C8D3F5"

# Syntax colors
KEYWORD = "#7AA2F7"
FUNC_NAME = "#7DCFFF"
BOOL_OP = "#BB9AF7"
INT_LIT = "#FF9E64"
STRING_LIT = "#9ECE6A"
LITERAL = "#F7768E"
OPERATOR = "#89DDFF"
PUNCTUATION = "#6B7394"
LABEL = "#E0AF68"

BREAKPOINT = "#F7768E"
ERROR_LINE_BG = "#3B1F2B"
DEBUG_LINE_BG = "#2B2F45"
CURRENT_LINE_BG = "#202020"


class PixelWalleHighlighter(QSyntaxHighlighter):
    def __init__(self, document):
        super().__init__(document)

        self.instruction_set = set(INSTRUCTIONS)
        self.function_set = set(FUNCTIONS)

        self.fmt_keyword = self._make_format(KEYWORD, bold=True)
        self.fmt_func = self._make_format(FUNC_NAME)
        self.fmt_bool = self._make_format(BOOL_OP)
        self.fmt_int = self._make_format(INT_LIT)
        self.fmt_string = self._make_format(STRING_LIT)
        self.fmt_literal = self._make_format(LITERAL)
        self.fmt_op = self._make_format(OPERATOR)
        self.fmt_punct = self._make_format(PUNCTUATION)
        self.fmt_label = self._make_format(LABEL, italic=True)

        self._rules = [
            (re.compile(r"\d+"), self.fmt_int),
            (re.compile(r"\*\*|<-|<=|>=|==|&&|\|\||[-+*/%<>]"), self.fmt_op),
            (re.compile(r"[()\[\],]"), self.fmt_punct),
        ]
        self._re_word = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
        self._re_string = re.compile(r'"[^"]*"?')
        self._re_label_line = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*$")
        self._re_goto_target = re.compile(r"\[\s*([A-Za-z_][A-Za-z0-9_]*)\s*\]")

    def _make_format(self, color_hex: str, italic: bool = False, bold: bool = False) -> QTextCharFormat:
        fmt = QTextCharFormat()
        fmt.setForeground(QColor(color_hex))
        fmt.setFontItalic(italic)
        if bold:
            fmt.setFontWeight(QFont.Bold)
        return fmt

    def highlightBlock(self, text: str) -> None:
        for pattern, fmt in self._rules:
            for m in pattern.finditer(text):
                self.setFormat(m.start(), m.end() - m.start(), fmt)

        for m in self._re_word.finditer(text):
            word = m.group(0)
            if word in self.instruction_set:
                fmt = self.fmt_keyword
            elif word in self.function_set:
                fmt = self.fmt_func
            elif word in ("true", "false"):
                fmt = self.fmt_literal
            else:
                continue
            self.setFormat(m.start(), len(word), fmt)

        label = self._re_label_line.match(text)
        if label and label.group(1) not in self.instruction_set:
            self.setFormat(label.start(1), len(label.group(1)), self.fmt_label)
        for m in self._re_goto_target.finditer(text):
            self.setFormat(m.start(1), len(m.group(1)), self.fmt_label)

        # strings last so keywords inside quotes are not colored
        for m in self._re_string.finditer(text):
            self.setFormat(m.start(), m.end() - m.start(), self.fmt_string)


class LineNumberArea(QWidget):
    def __init__(self, editor: "CodeEditor"):
        super().__init__(editor)
        self._editor = editor
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)

    def sizeHint(self) -> QSize:
        return QSize(self._editor.line_number_area_width(), 0)

    def paintEvent(self, event):
        self._editor.paint_line_number_area(event)

    def mousePressEvent(self, event):
        self._editor.line_number_area_mouse_press(event)


class CodeEditor(QPlainTextEdit):
    """Program editor with line numbers, breakpoints and run/error line marks."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self._line_number_area = LineNumberArea(self)
        self._highlighter = PixelWalleHighlighter(self.document())
        self._breakpoints: set[int] = set()
        self._debug_line: int | None = None
        self._error_lines: set[int] = set()

        QShortcut(QKeySequence("Ctrl+="), self, activated=self._zoom_in)
        QShortcut(QKeySequence("Ctrl+-"), self, activated=self._zoom_out)

        self.blockCountChanged.connect(self._update_line_number_area_width)
        self.updateRequest.connect(self._update_line_number_area)
        self.cursorPositionChanged.connect(self._refresh_selections)

        font = QFont("Consolas")
        font.setStyleHint(QFont.Monospace)
        font.setPointSize(14)
        self.setFont(font)

        self.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.setTabStopDistance(4 * self.fontMetrics().horizontalAdvance(" "))

        self._update_line_number_area_width(0)
        self._refresh_selections()

        self.setStyleSheet(
            f"""
            QPlainTextEdit {{
                background: {EDITOR_BG};
                color: {ACTIVE_TEXT};
                border: 1px solid {DIVIDER};
            }}
            """
        )

    def _zoom_in(self) -> None:
        self.zoomIn(1)

    def _zoom_out(self) -> None:
        self.zoomOut(1)

    def line_number_area_width(self) -> int:
        digits = max(2, len(str(max(1, self.blockCount()))))
        return 16 + self.fontMetrics().horizontalAdvance("9") * digits

    def _update_line_number_area_width(self, _new_block_count: int) -> None:
        self.setViewportMargins(self.line_number_area_width(), 0, 0, 0)

    def _update_line_number_area(self, rect: QRect, dy: int) -> None:
        if dy:
            self._line_number_area.scroll(0, dy)
        else:
            self._line_number_area.update(0, rect.y(), self._line_number_area.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self._update_line_number_area_width(0)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self._line_number_area.setGeometry(QRect(cr.left(), cr.top(), self.line_number_area_width(), cr.height()))

    def paint_line_number_area(self, event) -> None:
        painter = QPainter(self._line_number_area)
        painter.fillRect(event.rect(), QColor(EDITOR_BG))

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())
        current_line = self.textCursor().blockNumber()

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                line = block_number + 1
                if line in self._error_lines:
                    painter.setPen(QColor(BREAKPOINT))
                elif block_number == current_line:
                    painter.setPen(QColor(ACTIVE_TEXT))
                else:
                    painter.setPen(QColor(INACTIVE_TEXT))

                painter.drawText(
                    0,
                    top,
                    self._line_number_area.width() - 6,
                    self.fontMetrics().height(),
                    Qt.AlignRight,
                    str(line),
                )

                if line in self._breakpoints:
                    radius = 4
                    center_y = top + (self.fontMetrics().height() // 2)
                    painter.setPen(QColor(BREAKPOINT))
                    painter.setBrush(QColor(BREAKPOINT))
                    painter.drawEllipse(6 - radius, center_y - radius, radius * 2, radius * 2)

            block = block.next()
            block_number += 1
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())

    def _line_selection(self, line: int, color: str):
        block = self.document().findBlockByNumber(line - 1)
        if not block.isValid():
            return None
        cursor = self.textCursor()
        cursor.setPosition(block.position())
        cursor.clearSelection()
        selection = QTextEdit.ExtraSelection()
        selection.format.setBackground(QColor(color))
        selection.format.setProperty(QTextFormat.FullWidthSelection, True)
        selection.cursor = cursor
        return selection

    def _refresh_selections(self) -> None:
        extra = []
        if not self.isReadOnly():
            current = self._line_selection(self.textCursor().blockNumber() + 1, CURRENT_LINE_BG)
            if current is not None:
                extra.append(current)
        for line in sorted(self._error_lines):
            selection = self._line_selection(line, ERROR_LINE_BG)
            if selection is not None:
                extra.append(selection)
        if self._debug_line is not None:
            selection = self._line_selection(self._debug_line, DEBUG_LINE_BG)
            if selection is not None:
                extra.append(selection)
        self.setExtraSelections(extra)

    def set_debug_line(self, line_number: int | None) -> None:
        self._debug_line = line_number
        self._refresh_selections()

    def set_error_lines(self, lines) -> None:
        # line 0 marks whole-program diagnostics and has no block
        self._error_lines = {line for line in lines if line > 0}
        self._refresh_selections()
        self._line_number_area.update()

    def error_lines(self) -> set[int]:
        return set(self._error_lines)

    def goto_line(self, line_number: int) -> None:
        block = self.document().findBlockByNumber(max(0, line_number - 1))
        if block.isValid():
            cursor = self.textCursor()
            cursor.setPosition(block.position())
            self.setTextCursor(cursor)
            self.centerCursor()
        self.setFocus()

    def line_number_area_mouse_press(self, event) -> None:
        if event.button() != Qt.LeftButton:
            return

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())
        target_y = event.pos().y()

        while block.isValid() and top <= target_y:
            if block.isVisible() and bottom >= target_y:
                self.toggle_breakpoint(block_number + 1)
                return
            block = block.next()
            block_number += 1
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())

    def toggle_breakpoint(self, line_number: int) -> None:
        if line_number in self._breakpoints:
            self._breakpoints.remove(line_number)
        else:
            self._breakpoints.add(line_number)
        self._line_number_area.update()

    def breakpoint_lines(self) -> set[int]:
        return set(self._breakpoints)
