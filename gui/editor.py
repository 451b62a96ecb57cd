"""
G-code editor widget with syntax highlighting, line numbers and line highlights.
Line N of the editor shows command N-1 of the document.
"""
from PySide6.QtWidgets import QPlainTextEdit, QWidget, QTextEdit
from PySide6.QtGui import (QColor, QTextFormat, QPainter, QFont, QSyntaxHighlighter,
                           QTextCharFormat, QPalette, QTextCursor)
from PySide6.QtCore import Qt, QRect, Signal, QSize
from core.lexer import COMMENT_MARKER, GCodeLexer

GUTTER_BACKGROUND = '#383838'
LINE_NUMBER = '#6c757d'
SELECTED_NUMBER = '#74c0fc'


def _format(color, bold=False, italic=False):
    fmt = QTextCharFormat()
    fmt.setForeground(QColor(color))
    if bold:
        fmt.setFontWeight(QFont.Weight.Bold)
    fmt.setFontItalic(italic)
    return fmt


class GCodeHighlighter(QSyntaxHighlighter):
    """Highlights instructions, parameter words and comments."""

    def __init__(self, document):
        super().__init__(document)

        self.instruction_formats = {
            'G0': _format('#ff6b6b', bold=True),   # rapid
            'G1': _format('#51cf66', bold=True),   # linear feed
            'G2': _format('#ffd43b', bold=True),   # arcs
            'G3': _format('#ffd43b', bold=True),
        }
        self.gcode_format = _format('#74c0fc', bold=True)
        self.mcode_format = _format('#ff8cc8', bold=True)
        self.tcode_format = _format('#20c997', bold=True)

        self.word_formats = {
            'X': _format('#ff9999'),
            'Y': _format('#99ff99'),
            'Z': _format('#9999ff'),
            'F': _format('#ffff99'),
            'S': _format('#ffff99'),
            'E': _format('#ffcc99'),
            'T': _format('#99ffcc'),
        }
        self.comment_format = _format('#6c757d', italic=True)

    def highlightBlock(self, text):
        """Apply syntax highlighting to a block of text."""
        comment_index = text.find(COMMENT_MARKER)
        if comment_index != -1:
            self.setFormat(comment_index, len(text) - comment_index, self.comment_format)
            code = text[:comment_index]
        else:
            code = text

        stripped = code.lstrip()
        offset = len(code) - len(stripped)
        match = GCodeLexer.INSTRUCTION_PATTERN.match(stripped)
        if not match:
            return

        mnemonic = match.group(1).upper()
        normalized = mnemonic[0] + str(int(mnemonic[1:]))
        if normalized in self.instruction_formats:
            fmt = self.instruction_formats[normalized]
        elif mnemonic.startswith('G'):
            fmt = self.gcode_format
        elif mnemonic.startswith('M'):
            fmt = self.mcode_format
        else:
            fmt = self.tcode_format
        self.setFormat(offset, match.end(), fmt)

        for word in GCodeLexer.WORD_PATTERN.finditer(stripped, match.end()):
            if word.group(2) is None:
                continue
            self.setFormat(offset + word.start(), word.end() - word.start(),
                           self.word_formats[word.group(1).upper()])


class LineNumberArea(QWidget):
    """Line number area widget for the editor."""

    def __init__(self, editor):
        super().__init__(editor)
        self.editor = editor

    def sizeHint(self):
        return QSize(self.editor.lineNumberAreaWidth(), 0)

    def paintEvent(self, event):
        self.editor.lineNumberAreaPaintEvent(event)


class Editor(QPlainTextEdit):
    """G-code editor with highlighting and dark mode."""

    selectionChangedSignal = Signal(list)   # editor line numbers (1-based)

    def __init__(self, parent=None):
        super().__init__(parent)

        self.setup_dark_mode()
        self.lineNumberArea = LineNumberArea(self)

        self.highlighted_lines = set()
        self.error_lines = set()
        self.search_lines = set()

        self.setup_editor()
        self.highlighter = GCodeHighlighter(self.document())

        # Connect signals
        self.blockCountChanged.connect(self.updateLineNumberAreaWidth)
        self.updateRequest.connect(self.updateLineNumberArea)
        self.cursorPositionChanged.connect(self.update_extra_selections)
        self.selectionChanged.connect(self.on_selection_changed)

    def setup_dark_mode(self):
        """Configure dark mode appearance."""
        palette = self.palette()
        palette.setColor(QPalette.Base, QColor('#2b2b2b'))
        palette.setColor(QPalette.Text, QColor('#f8f8f2'))
        palette.setColor(QPalette.Highlight, QColor('#44475a'))
        palette.setColor(QPalette.HighlightedText, QColor('#f8f8f2'))
        self.setPalette(palette)

    def setup_editor(self):
        """Configure the editor appearance and behavior."""
        self.setLineWrapMode(QPlainTextEdit.NoWrap)

        font = QFont("Consolas", 11)
        if not font.exactMatch():
            font = QFont("Courier New", 11)
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setFixedPitch(True)
        self.setFont(font)

        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(' ') * 4)
        self.updateLineNumberAreaWidth(0)

    def highlight_lines(self, lines):
        """Mark the lines of the selected commands."""
        self.highlighted_lines = set(lines or ())
        self.update_extra_selections()
        self.lineNumberArea.update()

    def highlight_error_lines(self, lines):
        """Mark lines that had a word skipped while parsing."""
        self.error_lines = set(lines or ())
        self.update_extra_selections()

    def highlight_search_results(self, lines):
        self.search_lines = set(lines or ())
        self.update_extra_selections()

    def _line_selection(self, line_num, color):
        block = self.document().findBlockByNumber(line_num - 1)
        if not block.isValid():
            return None
        selection = QTextEdit.ExtraSelection()
        selection.format.setBackground(QColor(color))
        selection.format.setProperty(QTextFormat.FullWidthSelection, True)
        selection.cursor = QTextCursor(block)
        return selection

    def update_extra_selections(self):
        """Current line, then diagnostics, search hits and selected commands."""
        selections = []

        cursor = self.textCursor()
        if not self.isReadOnly() and not cursor.hasSelection():
            selection = QTextEdit.ExtraSelection()
            selection.format.setBackground(QColor('#44475a'))
            selection.format.setProperty(QTextFormat.FullWidthSelection, True)
            selection.cursor = cursor
            selection.cursor.clearSelection()
            selections.append(selection)

        layers = [
            (self.error_lines, '#5c2b29'),        # dark red
            (self.search_lines, '#6f42c1'),       # purple
            (self.highlighted_lines, '#1e3a8a'),  # dark blue
        ]
        for lines, color in layers:
            for line_num in sorted(lines):
                selection = self._line_selection(line_num, color)
                if selection is not None:
                    selections.append(selection)

        self.setExtraSelections(selections)

    def on_selection_changed(self):
        """Emit the numbers of the lines covered by the text selection."""
        cursor = self.textCursor()
        if not cursor.hasSelection():
            return

        start_block = self.document().findBlock(cursor.selectionStart())
        end_pos = cursor.selectionEnd()
        end_block = self.document().findBlock(end_pos)

        # Selection that ends at the start of a line does not include that line
        if end_pos == end_block.position() and end_block.previous().isValid():
            end_block = end_block.previous()

        selected_lines = []
        block = start_block
        while block.isValid() and block.blockNumber() <= end_block.blockNumber():
            if block.text().strip():
                selected_lines.append(block.blockNumber() + 1)
            block = block.next()

        self.selectionChangedSignal.emit(selected_lines)

    # Line number area methods
    def lineNumberAreaWidth(self):
        digits = len(str(max(1, self.blockCount())))
        return 3 + self.fontMetrics().horizontalAdvance('9') * digits

    def updateLineNumberAreaWidth(self, _):
        self.setViewportMargins(self.lineNumberAreaWidth(), 0, 0, 0)

    def updateLineNumberArea(self, rect, dy):
        """Update the line number area when scrolling."""
        if dy:
            self.lineNumberArea.scroll(0, dy)
        else:
            self.lineNumberArea.update(0, rect.y(), self.lineNumberArea.width(), rect.height())

        if rect.contains(self.viewport().rect()):
            self.updateLineNumberAreaWidth(0)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self.lineNumberArea.setGeometry(QRect(cr.left(), cr.top(), self.lineNumberAreaWidth(), cr.height()))

    def lineNumberAreaPaintEvent(self, event):
        """Draw line numbers; selected command lines are drawn in the accent color."""
        painter = QPainter(self.lineNumberArea)
        painter.fillRect(event.rect(), QColor(GUTTER_BACKGROUND))
        width = self.lineNumberArea.width() - 3
        row_height = self.fontMetrics().height()

        block = self.firstVisibleBlock()
        offset = self.contentOffset()
        while block.isValid():
            geometry = self.blockBoundingGeometry(block).translated(offset)
            if geometry.top() > event.rect().bottom():
                break
            if block.isVisible() and geometry.bottom() >= event.rect().top():
                line = block.blockNumber() + 1
                color = SELECTED_NUMBER if line in self.highlighted_lines else LINE_NUMBER
                painter.setPen(QColor(color))
                painter.drawText(0, int(geometry.top()), width, row_height, Qt.AlignRight, str(line))
            block = block.next()

    def goto_line(self, line_number):
        """Jump to a specific line number."""
        if line_number > 0:
            block = self.document().findBlockByNumber(line_number - 1)
            if block.isValid():
                self.setTextCursor(QTextCursor(block))
                self.centerCursor()
