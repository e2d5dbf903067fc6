from PySide6.QtCore import Qt, QSize, Signal
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QListWidget, QListWidgetItem

from ui.canvas import pil_to_pixmap

CELL_ROLE = 100  # index into the results list


class CropResultsView(QListWidget):
    """Grid of cropped cells, laid out `cols` wide like the source grid."""
    save_requested = Signal(int)  # index into results

    THUMB_SIZE = 140

    def __init__(self):
        super().__init__()
        self.setViewMode(QListWidget.ViewMode.IconMode)
        self.setMovement(QListWidget.Movement.Static)
        self.setResizeMode(QListWidget.ResizeMode.Adjust)
        self.setWrapping(True)
        self.setIconSize(QSize(self.THUMB_SIZE, self.THUMB_SIZE))
        self.setSpacing(8)
        self.results = []
        self.itemDoubleClicked.connect(self._on_item_double_clicked)

    def set_results(self, results, cols):
        self.clear()
        self.results = list(results)
        cell = self.THUMB_SIZE + 40
        self.setGridSize(QSize(cell, cell))
        # Keep the source grid's column count when there is room for it
        self.setMinimumWidth(min(cols, 6) * cell + 20)

        for index, result in enumerate(self.results):
            w, h = result.width, result.height
            scale = min(1.0, self.THUMB_SIZE / max(1, w), self.THUMB_SIZE / max(1, h))
            item = QListWidgetItem(f"Cell {result.cell_number} ({w}x{h}px)")
            if w > 0 and h > 0:
                item.setIcon(QIcon(pil_to_pixmap(result.raster, w * scale, h * scale)))
            item.setData(CELL_ROLE, index)
            item.setTextAlignment(Qt.AlignmentFlag.AlignHCenter)
            self.addItem(item)

    def selected_index(self):
        item = self.currentItem()
        return None if item is None else item.data(CELL_ROLE)

    def _on_item_double_clicked(self, item):
        self.save_requested.emit(item.data(CELL_ROLE))
