import re

from PySide6.QtCore import Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QWidget, QHBoxLayout, QPushButton, QLineEdit, QColorDialog

from core.config import DEFAULT_GRID_COLOR

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class ColorButton(QWidget):
    """Swatch that opens a colour dialog, plus a hex entry box."""
    color_changed = Signal(str)

    def __init__(self, color=DEFAULT_GRID_COLOR, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.swatch = QPushButton()
        self.swatch.setFixedSize(30, 30)
        self.swatch.clicked.connect(self.pick_color)
        layout.addWidget(self.swatch)

        self.hex_input = QLineEdit()
        self.hex_input.setMaxLength(7)
        self.hex_input.setFixedWidth(80)
        self.hex_input.setFixedHeight(30)
        self.hex_input.editingFinished.connect(lambda: self.set_color(self.hex_input.text()))
        layout.addWidget(self.hex_input)

        self._color = DEFAULT_GRID_COLOR
        self.set_color(color)

    def color(self) -> str:
        return self._color

    def set_color(self, value) -> bool:
        """Apply a #rrggbb value. Anything else is ignored and the old colour kept."""
        if not isinstance(value, str) or not HEX_COLOR.match(value.strip()):
            self.hex_input.setText(self._color)
            return False
        value = value.strip().lower()
        self.hex_input.setText(value)
        self.swatch.setStyleSheet(f"background-color: {value}; border: 1px solid #999;")
        if value != self._color:
            self._color = value
            self.color_changed.emit(value)
        return True

    def pick_color(self):
        color = QColorDialog.getColor(QColor(self._color), self, "Grid Color")
        if color.isValid():
            self.set_color(color.name())
