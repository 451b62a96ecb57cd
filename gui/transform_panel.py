"""
Transformation panel: transform inputs, selection info and Z-height layers.
Values are shown in the display units and converted to millimeters on apply.
"""
from PySide6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox,
                               QDoubleSpinBox, QPushButton, QLabel, QListWidget,
                               QListWidgetItem, QComboBox)
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from core.geometry import TransformParams
from utils.units import Units, format_coordinate, to_mm


def _spin_box(minimum, maximum, value, decimals, step):
    box = QDoubleSpinBox()
    box.setRange(minimum, maximum)
    box.setDecimals(decimals)
    box.setSingleStep(step)
    box.setValue(value)
    return box


class TransformPanel(QWidget):
    """Inputs for rotate/scale/translate plus layer visibility."""

    applyRequested = Signal(object)              # TransformParams in mm
    applyAllRequested = Signal(object)
    zVisibilityChanged = Signal(float, bool)
    unitsChanged = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.units = Units.METRIC
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)

        # Units
        units_layout = QHBoxLayout()
        units_layout.addWidget(QLabel("Units:"))
        self.units_selector = QComboBox()
        self.units_selector.addItems([u.value for u in Units])
        self.units_selector.currentTextChanged.connect(self.on_units_changed)
        units_layout.addWidget(self.units_selector)
        layout.addLayout(units_layout)

        # Selection info
        self.selection_label = QLabel("No selection")
        self.selection_label.setWordWrap(True)
        layout.addWidget(self.selection_label)

        # Transform inputs
        transform_box = QGroupBox("Transformation")
        form = QFormLayout(transform_box)
        self.translate_x = _spin_box(-10000, 10000, 0, 3, 1)
        self.translate_y = _spin_box(-10000, 10000, 0, 3, 1)
        self.translate_z = _spin_box(-10000, 10000, 0, 3, 0.1)
        self.rotation = _spin_box(-360, 360, 0, 2, 15)
        self.scale_x = _spin_box(-100, 100, 1, 3, 0.1)
        self.scale_y = _spin_box(-100, 100, 1, 3, 0.1)
        self.translation_labels = []
        for name, box in (("Translate X", self.translate_x),
                          ("Translate Y", self.translate_y),
                          ("Translate Z", self.translate_z)):
            label = QLabel()
            self.translation_labels.append((name, label))
            form.addRow(label, box)
        form.addRow("Rotation (deg)", self.rotation)
        form.addRow("Scale X", self.scale_x)
        form.addRow("Scale Y", self.scale_y)
        self.update_unit_labels()

        buttons = QHBoxLayout()
        self.apply_button = QPushButton("Apply")
        self.apply_all_button = QPushButton("Apply to All")
        self.reset_button = QPushButton("Reset")
        self.apply_button.clicked.connect(self.on_apply)
        self.apply_all_button.clicked.connect(lambda: self.applyAllRequested.emit(self.params()))
        self.reset_button.clicked.connect(self.reset)
        buttons.addWidget(self.apply_button)
        buttons.addWidget(self.apply_all_button)
        buttons.addWidget(self.reset_button)
        form.addRow(buttons)
        layout.addWidget(transform_box)

        # Z-height layers
        layers_box = QGroupBox("Z Heights")
        layers_layout = QVBoxLayout(layers_box)
        self.z_list = QListWidget()
        self.z_list.itemChanged.connect(self.on_layer_toggled)
        layers_layout.addWidget(self.z_list)
        layout.addWidget(layers_box)

        layout.addStretch()

    def update_unit_labels(self):
        for name, label in self.translation_labels:
            label.setText(f"{name} ({self.units.label})")

    def params(self) -> TransformParams:
        """Current inputs as TransformParams in millimeters."""
        return TransformParams(
            translate_x=to_mm(self.translate_x.value(), self.units),
            translate_y=to_mm(self.translate_y.value(), self.units),
            translate_z=to_mm(self.translate_z.value(), self.units),
            rotation_degrees=self.rotation.value(),
            scale_x=self.scale_x.value(),
            scale_y=self.scale_y.value(),
        )

    def on_apply(self):
        self.applyRequested.emit(self.params())

    def reset(self):
        for box in (self.translate_x, self.translate_y, self.translate_z, self.rotation):
            box.setValue(0)
        self.scale_x.setValue(1)
        self.scale_y.setValue(1)

    def on_units_changed(self, text):
        self.units = Units.coerce(text)
        self.update_unit_labels()
        self.unitsChanged.emit(text)

    def set_units(self, units: Units):
        """Reflect units without emitting unitsChanged."""
        self.units_selector.blockSignals(True)
        self.units_selector.setCurrentText(units.value)
        self.units_selector.blockSignals(False)
        self.units = units
        self.update_unit_labels()

    def set_z_heights(self, heights, visible, palette):
        """Rebuild the layer list with one checkable row per height."""
        self.z_list.blockSignals(True)
        self.z_list.clear()
        for z in heights:
            item = QListWidgetItem(f"Z {format_coordinate(z, self.units)} {self.units.label}")
            item.setData(Qt.UserRole, z)
            item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
            item.setCheckState(Qt.Checked if z in visible else Qt.Unchecked)
            item.setForeground(QColor(palette.color_for(z)))
            self.z_list.addItem(item)
        self.z_list.blockSignals(False)

    def on_layer_toggled(self, item):
        self.zVisibilityChanged.emit(item.data(Qt.UserRole), item.checkState() == Qt.Checked)

    def set_selection_info(self, count, bounds):
        if not count:
            self.selection_label.setText("No selection")
            return
        text = f"{count} commands selected"
        if bounds is not None:
            fmt = lambda v: format_coordinate(v, self.units)
            unit = self.units.label
            text += (f"\nX: {fmt(bounds.min_x)} - {fmt(bounds.max_x)} {unit}"
                     f"\nY: {fmt(bounds.min_y)} - {fmt(bounds.max_y)} {unit}"
                     f"\nZ: {fmt(bounds.min_z)} - {fmt(bounds.max_z)} {unit}")
        self.selection_label.setText(text)
