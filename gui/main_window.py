"""
The main window for the G-Code editor application.
"""
import logging
from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                               QPushButton, QFileDialog, QMessageBox, QTextEdit,
                               QSplitter, QLabel, QLineEdit, QCheckBox)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from .editor import Editor
from .transform_panel import TransformPanel
from .viewport import Viewport
from gcode_document import GCodeDocument
from config.editor_config import EditorConfig
from utils.units import Units, format_coordinate

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, config: EditorConfig = None):
        super().__init__()
        self.setWindowTitle("G-Code Editor")
        self.setGeometry(100, 100, 1600, 1000)

        self.document = GCodeDocument(config)
        self.current_path = None

        self.setup_ui()
        self.connect_signals()
        self.transform_panel.set_units(self.document.units)

        self.load_sample_gcode()

    def setup_ui(self):
        """Set up the user interface."""
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)

        # Top toolbar
        toolbar_layout = QHBoxLayout()
        self.load_button = QPushButton("Load G-Code File")
        self.save_button = QPushButton("Save G-Code")
        self.process_button = QPushButton("Process Text")
        self.search_field = QLineEdit()
        self.search_field.setPlaceholderText("Search...")
        self.status_label = QLabel("Ready")
        self.cursor_label = QLabel("")

        toolbar_layout.addWidget(self.load_button)
        toolbar_layout.addWidget(self.save_button)
        toolbar_layout.addWidget(self.process_button)
        toolbar_layout.addWidget(self.search_field)
        self.display_toggles = {}
        for option, label in (('rapid', "Rapids"), ('grid', "Grid"), ('axes', "Axes")):
            toggle = QCheckBox(label)
            toggle.setChecked(True)
            self.display_toggles[option] = toggle
            toolbar_layout.addWidget(toggle)
        toolbar_layout.addStretch()
        toolbar_layout.addWidget(self.cursor_label)
        toolbar_layout.addWidget(self.status_label)
        main_layout.addLayout(toolbar_layout)

        main_splitter = QSplitter(Qt.Vertical)
        main_layout.addWidget(main_splitter)

        workspace_splitter = QSplitter(Qt.Horizontal)
        self.editor = Editor()
        self.viewport = Viewport()
        self.viewport.set_document(self.document)
        self.transform_panel = TransformPanel()
        workspace_splitter.addWidget(self.editor)
        workspace_splitter.addWidget(self.viewport)
        workspace_splitter.addWidget(self.transform_panel)

        # Bottom pane with diagnostics and console
        console_splitter = QSplitter(Qt.Horizontal)
        error_pane, self.error_console = self._text_pane("Skipped Lines:")
        console_pane, self.console = self._text_pane("Console Output:")
        console_splitter.addWidget(error_pane)
        console_splitter.addWidget(console_pane)

        main_splitter.addWidget(workspace_splitter)
        main_splitter.addWidget(console_splitter)

        workspace_splitter.setSizes([500, 800, 300])
        console_splitter.setSizes([400, 400])
        main_splitter.setSizes([800, 200])

    def _text_pane(self, title):
        """A titled read-only text box for the bottom pane."""
        pane = QWidget()
        layout = QVBoxLayout(pane)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(QLabel(title))
        text = QTextEdit()
        text.setReadOnly(True)
        text.setMaximumHeight(150)
        layout.addWidget(text)
        return pane, text

    def connect_signals(self):
        """Connect all signal handlers."""
        self.load_button.clicked.connect(self.load_gcode_file)
        self.save_button.clicked.connect(self.save_gcode_file)
        self.process_button.clicked.connect(self.process_editor_text)
        self.search_field.textChanged.connect(self.on_search)
        for option, toggle in self.display_toggles.items():
            toggle.toggled.connect(lambda _, o=option: self.viewport.toggle_display_option(o))
        self.editor.selectionChangedSignal.connect(self.on_editor_selection_changed)
        self.viewport.selectionChanged.connect(self.on_viewport_selection_changed)
        self.viewport.cursorMoved.connect(self.on_cursor_moved)
        self.transform_panel.applyRequested.connect(self.apply_transform)
        self.transform_panel.applyAllRequested.connect(self.apply_transform_all)
        self.transform_panel.zVisibilityChanged.connect(self.on_z_visibility_changed)
        self.transform_panel.unitsChanged.connect(self.change_units)
        QShortcut(QKeySequence(Qt.Key_Escape), self, activated=self.clear_selection)

    def log(self, message):
        logger.info(message)
        self.console.append(message)

    def load_sample_gcode(self):
        """Load a sample G-code program for demonstration."""
        sample_gcode = """; Sample part
G21 ; Metric
G90 ; Absolute positioning
G0 X0 Y0 Z0.2
G1 X10 Y0 F1200
G1 X10 Y10
G2 X20 Y10 ; Arc drawn as chord
G1 X20 Y0
G0 Z0.4
G1 X0 Y0 F1200
G1 X0 Y20
M30 ; Program end"""
        self.load_text(sample_gcode)

    def load_text(self, text, units=None):
        self.document.load(text, units)
        self.show_document()
        stats = self.document.get_statistics()['document']
        self.log(f"Parsed {stats['commands']} commands from {stats['total_lines']} lines")

    def show_document(self):
        """Show the current command list in every view."""
        self.editor.blockSignals(True)
        self.editor.setPlainText(self.document.export_text())
        self.editor.blockSignals(False)
        self.transform_panel.set_z_heights(self.document.z_heights(),
                                           self.document.visible_z_heights,
                                           self.document.palette)
        self.update_error_display()
        self.update_selection_views()
        self.update_title()

    def load_gcode_file(self):
        """Load G-code from a file."""
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open G-Code File", "", self.document.config.file_filter()
        )
        if not file_path:
            return

        try:
            with open(file_path, 'r') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            QMessageBox.critical(self, "Failed to load file", str(e))
            return

        self.current_path = file_path
        self.load_text(content)
        self.log(f"Loaded: {file_path}")

    def save_gcode_file(self):
        """Save the current commands to a file."""
        file_path = self.current_path
        if file_path is None:
            file_path, _ = QFileDialog.getSaveFileName(
                self, "Save G-Code File", "", self.document.config.file_filter()
            )
        if not file_path:
            return

        try:
            with open(file_path, 'w') as f:
                f.write(self.document.export_text())
        except OSError as e:
            QMessageBox.critical(self, "Failed to save file", str(e))
            return

        self.current_path = file_path
        self.document.mark_saved()
        self.update_title()
        self.log(f"Saved: {file_path}")

    def process_editor_text(self):
        """Reparse whatever is in the editor."""
        self.load_text(self.editor.toPlainText())

    def change_units(self, units):
        if self.document.has_unsaved_changes:
            answer = QMessageBox.question(
                self, "Discard changes?",
                "Changing units reparses the file and discards unsaved transforms. Continue?")
            if answer != QMessageBox.Yes:
                self.transform_panel.set_units(self.document.units)
                return
        self.document.reparse(units)
        self.show_document()
        self.log(f"Units: {Units.coerce(units).label}")

    def apply_transform(self, params):
        count = self.document.apply_transform(params)
        if count == 0:
            QMessageBox.information(self, "No selection",
                                    "Select some G-Code lines to transform.")
            return
        self.show_document()
        self.log(f"Transformed {count} commands")

    def apply_transform_all(self, params):
        count = self.document.apply_transform_all(params)
        if count:
            self.show_document()
            self.log(f"Transformed all {count} commands")

    def clear_selection(self):
        self.document.clear_selection()
        self.update_selection_views()
        self.status_label.setText("Selection cleared")

    def update_error_display(self):
        errors = self.document.get_all_errors()
        if not errors:
            self.error_console.setText("No skipped lines.")
        else:
            self.error_console.setText("\n".join(str(error) for error in errors))
        # Editor line N shows command N-1
        self.editor.highlight_error_lines([i + 1 for i in self.document.diagnostic_indices()])

    def update_selection_views(self):
        selection = self.document.selection
        # Editor line N shows command N-1
        self.editor.highlight_lines([i + 1 for i in selection])
        self.transform_panel.set_selection_info(len(selection), self.document.selection_bounds())
        self.viewport.refresh()

    def update_title(self):
        name = self.current_path or "untitled"
        marker = " *" if self.document.has_unsaved_changes else ""
        self.setWindowTitle(f"G-Code Editor - {name}{marker}")

    def on_editor_selection_changed(self, lines):
        self.document.select([line - 1 for line in lines])
        self.update_selection_views()

    def on_viewport_selection_changed(self, indices):
        self.update_selection_views()
        self.status_label.setText(f"{len(indices)} commands selected")

    def on_z_visibility_changed(self, z, visible):
        self.document.set_z_visible(z, visible)
        self.viewport.refresh()

    def on_cursor_moved(self, x, y):
        units = self.transform_panel.units
        self.cursor_label.setText(
            f"X: {format_coordinate(x, units)} Y: {format_coordinate(y, units)} {units.label}")

    def on_search(self, term):
        matches = self.document.search(term)
        self.editor.highlight_search_results([i + 1 for i in matches])
        if matches:
            self.editor.goto_line(matches[0] + 1)
