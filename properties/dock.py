"""
properties/dock.py

Property panel for the element selected in the crosshair editor.

The panel reads from and writes to an EditorEngine. Numeric fields are
applied on editingFinished; text that does not parse is reported in an
inline message and the element is left unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from editor.engine import EditorEngine
from errors import ValidationError
from models import COLOR_PALETTE, CrosshairElement
from utils import format_number, parse_number

log = logging.getLogger(__name__)

MAX_THICKNESS = 20.0


class PropertyPanel(QWidget):
    """
    Property panel widget for the selected crosshair element.

    Rows shown depend on the element kind: lines get start and end
    points, circles and rectangles get a position, a size and the filled
    checkbox. Thickness and colour apply to every kind.
    """

    def __init__(self, engine: EditorEngine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._init_layout()
        self._connect_signals()
        self.refresh()
        engine.add_listener(self._on_engine_event)

    def _init_layout(self):
        compact_edit_style = "padding: 2px 4px; max-width: 70px;"

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        form = QFormLayout()
        layout.addLayout(form)

        self.kind_label = QLabel("-")
        form.addRow("Element:", self.kind_label)

        self.x_edit = QLineEdit()
        self.y_edit = QLineEdit()
        self.x2_edit = QLineEdit()
        self.y2_edit = QLineEdit()
        self.w_edit = QLineEdit()
        self.h_edit = QLineEdit()
        for edit in (self.x_edit, self.y_edit, self.x2_edit, self.y2_edit, self.w_edit, self.h_edit):
            edit.setStyleSheet(compact_edit_style)

        def pair_row(label_a, edit_a, label_b, edit_b) -> QWidget:
            row = QWidget()
            h = QHBoxLayout(row)
            h.setContentsMargins(0, 0, 0, 0)
            h.addWidget(QLabel(label_a))
            h.addWidget(edit_a)
            h.addWidget(QLabel(label_b))
            h.addWidget(edit_b)
            h.addStretch(1)
            return row

        self.position_row = pair_row("X:", self.x_edit, "Y:", self.y_edit)
        self.end_row = pair_row("X2:", self.x2_edit, "Y2:", self.y2_edit)
        self.size_row = pair_row("W:", self.w_edit, "H:", self.h_edit)
        layout.addWidget(self.position_row)
        layout.addWidget(self.end_row)
        layout.addWidget(self.size_row)

        style_form = QFormLayout()
        layout.addLayout(style_form)

        self.thickness_spin = QDoubleSpinBox()
        self.thickness_spin.setRange(0.0, MAX_THICKNESS)
        self.thickness_spin.setSingleStep(0.5)
        self.thickness_spin.setDecimals(1)
        style_form.addRow("Thickness:", self.thickness_spin)

        self.color_combo = QComboBox()
        self.color_combo.addItems(list(COLOR_PALETTE))
        style_form.addRow("Color:", self.color_combo)

        self.filled_check = QCheckBox("Filled")
        style_form.addRow("", self.filled_check)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #C42B1C;")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)
        layout.addStretch(1)

    def _connect_signals(self):
        """Connect all widget signals to handlers."""
        self.x_edit.editingFinished.connect(self.apply_position)
        self.y_edit.editingFinished.connect(self.apply_position)
        self.x2_edit.editingFinished.connect(self.apply_end_position)
        self.y2_edit.editingFinished.connect(self.apply_end_position)
        self.w_edit.editingFinished.connect(self.apply_size)
        self.h_edit.editingFinished.connect(self.apply_size)
        self.thickness_spin.valueChanged.connect(self._on_thickness_changed)
        self.color_combo.currentTextChanged.connect(self._on_color_changed)
        self.filled_check.toggled.connect(self._on_filled_toggled)

    # ---- display ----

    def _on_engine_event(self, event: str, eid: Optional[int]) -> None:
        if event == "selection":
            self.clear_error()
            self.refresh()
        elif event == "changed" and eid == self.engine.selection:
            self.refresh()

    def _set_enabled(self, enabled: bool):
        for w in (self.x_edit, self.y_edit, self.x2_edit, self.y2_edit, self.w_edit, self.h_edit,
                  self.thickness_spin, self.color_combo, self.filled_check):
            w.setEnabled(enabled)

    def _block_signals(self, block: bool):
        self.thickness_spin.blockSignals(block)
        self.color_combo.blockSignals(block)
        self.filled_check.blockSignals(block)

    def refresh(self):
        """Load the selected element's values into the widgets."""
        elem: Optional[CrosshairElement] = self.engine.selected_element
        self._block_signals(True)
        try:
            if elem is None:
                self.kind_label.setText("-")
                for edit in (self.x_edit, self.y_edit, self.x2_edit, self.y2_edit, self.w_edit, self.h_edit):
                    edit.setText("")
                self.end_row.setVisible(False)
                self.size_row.setVisible(False)
                self.filled_check.setVisible(False)
                self._set_enabled(False)
                return

            self._set_enabled(True)
            self.kind_label.setText(elem.kind)
            self.x_edit.setText(format_number(elem.x1))
            self.y_edit.setText(format_number(elem.y1))
            self.end_row.setVisible(elem.is_line)
            self.size_row.setVisible(not elem.is_line)
            self.filled_check.setVisible(not elem.is_line)
            if elem.is_line:
                self.x2_edit.setText(format_number(elem.x2))
                self.y2_edit.setText(format_number(elem.y2))
            else:
                self.w_edit.setText(format_number(elem.width))
                self.h_edit.setText(format_number(elem.height))
                self.filled_check.setChecked(elem.filled)
            self.thickness_spin.setValue(elem.thickness)
            self.color_combo.setCurrentText(elem.color)
        finally:
            self._block_signals(False)

    def show_error(self, message: str):
        self.error_label.setText(message)

    def clear_error(self):
        self.error_label.setText("")

    # ---- edits ----

    def apply_position(self) -> bool:
        """Apply the X/Y fields. Returns False if nothing was changed."""
        if self.engine.selection is None:
            return False
        try:
            x = parse_number(self.x_edit.text(), "X")
            y = parse_number(self.y_edit.text(), "Y")
            changed = self.engine.set_position(x, y)
        except ValidationError as e:
            self.show_error(str(e))
            return False
        self.clear_error()
        return changed

    def apply_end_position(self) -> bool:
        """Apply the X2/Y2 fields (lines only)."""
        elem = self.engine.selected_element
        if elem is None or not elem.is_line:
            return False
        try:
            x2 = parse_number(self.x2_edit.text(), "X2")
            y2 = parse_number(self.y2_edit.text(), "Y2")
            changed = self.engine.set_end_position(x2, y2)
        except ValidationError as e:
            self.show_error(str(e))
            return False
        self.clear_error()
        return changed

    def apply_size(self) -> bool:
        """Apply the W/H fields (circles and rectangles only)."""
        elem = self.engine.selected_element
        if elem is None or elem.is_line:
            return False
        try:
            w = parse_number(self.w_edit.text(), "Width")
            h = parse_number(self.h_edit.text(), "Height")
            changed = self.engine.set_size(w, h)
        except ValidationError as e:
            self.show_error(str(e))
            return False
        self.clear_error()
        return changed

    def _on_thickness_changed(self, value: float):
        try:
            self.engine.set_thickness(value)
        except ValidationError as e:
            self.show_error(str(e))

    def _on_color_changed(self, name: str):
        try:
            self.engine.set_color(name)
        except ValidationError as e:
            self.show_error(str(e))

    def _on_filled_toggled(self, checked: bool):
        self.engine.set_filled(checked)

    def detach(self):
        """Stop listening to the engine."""
        self.engine.remove_listener(self._on_engine_event)
