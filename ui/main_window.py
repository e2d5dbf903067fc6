import logging
import os

from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
                               QFileDialog, QFrame, QLabel, QSpinBox, QMessageBox, QSplitter)
from PySide6.QtCore import Qt, QSettings, QThreadPool

from core.config import (MIN_GRID_SIZE, MAX_GRID_SIZE, IMAGE_FILTER, DEFAULT_GRID_COLOR,
                         SETTINGS_ORG, SETTINGS_APP, KEY_LAST_INPUT_DIR, KEY_OUTPUT_DIR,
                         KEY_GRID_COLOR)
from core.errors import GridCropError
from core.processor import export_zip, save_cell
from core.session import CropSession
from ui.canvas import GridCanvas
from ui.color_button import ColorButton
from ui.crop_results import CropResultsView
from ui.image_loader_worker import ImageLoaderWorker

logger = logging.getLogger("gridcrop.ui")

NOTIFY_MS = 5000


def _separator():
    line = QFrame()
    line.setFrameShape(QFrame.Shape.VLine)
    line.setFrameShadow(QFrame.Shadow.Sunken)
    return line


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("GridCrop")
        self.resize(1200, 900)

        self.settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
        self.output_dir = self.settings.value(KEY_OUTPUT_DIR, "")

        self.session = CropSession()
        self.current_path = None
        self.thread_pool = QThreadPool.globalInstance()
        self.active_workers = {}  # token -> worker, keeps PySide6 from collecting them

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(20, 20, 20, 10)
        self.main_layout.setSpacing(15)

        self.create_toolbar()

        splitter = QSplitter(Qt.Orientation.Vertical)
        self.main_layout.addWidget(splitter, stretch=1)

        self.canvas = GridCanvas(self.session)
        self.canvas.set_grid_color(self.color_button.color())
        splitter.addWidget(self.canvas)

        results_panel = QWidget()
        results_layout = QVBoxLayout(results_panel)
        results_layout.setContentsMargins(0, 0, 0, 0)
        results_bar = QHBoxLayout()
        self.results_label = QLabel("Crop Results")
        results_bar.addWidget(self.results_label)
        results_bar.addStretch()

        self.save_btn = QPushButton("Save Selected")
        self.save_btn.setFixedSize(110, 30)
        self.save_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.save_btn.clicked.connect(self.save_selected)
        results_bar.addWidget(self.save_btn)

        self.zip_btn = QPushButton("Download Zip")
        self.zip_btn.setFixedSize(110, 30)
        self.zip_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.zip_btn.clicked.connect(self.download_zip)
        results_bar.addWidget(self.zip_btn)
        results_layout.addLayout(results_bar)

        self.results_view = CropResultsView()
        self.results_view.save_requested.connect(self.save_cell_at)
        results_layout.addWidget(self.results_view)
        splitter.addWidget(results_panel)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)

        self.statusBar().showMessage("Load an image, set rows/columns, drag lines, then crop.")
        self._sync_controls()

    def create_toolbar(self):
        container = QWidget()
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)

        self.load_btn = QPushButton("Load Image")
        self.load_btn.setFixedSize(100, 30)
        self.load_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.load_btn.clicked.connect(self.load_image_dialog)
        layout.addWidget(self.load_btn)

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.setFixedSize(70, 30)
        self.clear_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.clear_btn.clicked.connect(self.clear_image)
        layout.addWidget(self.clear_btn)

        layout.addWidget(_separator())

        layout.addWidget(QLabel(" Columns: "))
        self.cols_spin = QSpinBox()
        self.cols_spin.setRange(MIN_GRID_SIZE, MAX_GRID_SIZE)
        self.cols_spin.setValue(self.session.cols)
        self.cols_spin.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.cols_spin.valueChanged.connect(self._on_grid_size_changed)
        layout.addWidget(self.cols_spin)

        layout.addWidget(QLabel(" Rows: "))
        self.rows_spin = QSpinBox()
        self.rows_spin.setRange(MIN_GRID_SIZE, MAX_GRID_SIZE)
        self.rows_spin.setValue(self.session.rows)
        self.rows_spin.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.rows_spin.valueChanged.connect(self._on_grid_size_changed)
        layout.addWidget(self.rows_spin)

        layout.addWidget(_separator())

        layout.addWidget(QLabel(" Grid Color: "))
        self.color_button = ColorButton(self.settings.value(KEY_GRID_COLOR, DEFAULT_GRID_COLOR))
        self.color_button.color_changed.connect(self._on_color_changed)
        layout.addWidget(self.color_button)

        layout.addWidget(_separator())

        self.crop_btn = QPushButton("Crop Image")
        self.crop_btn.setFixedSize(110, 30)
        self.crop_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.crop_btn.clicked.connect(self.crop_image)
        self.crop_btn.setStyleSheet("font-weight: bold; background-color: #28a745; color: white;")
        layout.addWidget(self.crop_btn)

        self.reset_btn = QPushButton("Reset Grid Position")
        self.reset_btn.setFixedSize(140, 30)
        self.reset_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.reset_btn.clicked.connect(self.reset_grid)
        layout.addWidget(self.reset_btn)

        layout.addStretch()
        self.main_layout.addWidget(container)

    # ---- Upload ----
    def load_image_dialog(self):
        last_dir = self.settings.value(KEY_LAST_INPUT_DIR, "")
        path, _ = QFileDialog.getOpenFileName(self, "Select Image", last_dir, IMAGE_FILTER)
        if path:
            self.settings.setValue(KEY_LAST_INPUT_DIR, os.path.dirname(path))
            self.load_image(path)

    def load_image(self, path):
        token = self.session.begin_upload()
        worker = ImageLoaderWorker(path, token)
        worker.signals.finished.connect(self._on_image_loaded)
        worker.signals.error.connect(self._on_image_error)
        self.active_workers[token] = worker
        self.statusBar().showMessage(f"Loading {os.path.basename(path)}...")
        self.thread_pool.start(worker)

    def _on_image_loaded(self, token, image):
        worker = self.active_workers.pop(token, None)
        if not self.session.finish_upload(token, image):
            return
        self.current_path = worker.path if worker else ""
        self.canvas.set_image(image)
        self.results_view.set_results([], self.session.cols)
        self._sync_controls()
        self.statusBar().showMessage(
            f"{os.path.basename(self.current_path)} ({image.width}x{image.height}px)")

    def _on_image_error(self, token, message):
        self.active_workers.pop(token, None)
        logger.error("Error loading image: %s", message)
        if not self.session.is_current_upload(token):
            return
        self.notify(f"Could not load image: {message}")

    def clear_image(self):
        self.session.clear_image()
        self.current_path = None
        self.canvas.clear()
        self.results_view.set_results([], self.session.cols)
        self._sync_controls()
        self.statusBar().showMessage("Image cleared", NOTIFY_MS)

    # ---- Grid ----
    def _on_grid_size_changed(self, _value):
        if self.session.update_grid_size(self.cols_spin.value(), self.rows_spin.value()):
            self.canvas.viewport().update()
        # Rejected changes (e.g. mid-drag) snap the selectors back
        self._sync_controls()

    def _on_color_changed(self, color):
        self.settings.setValue(KEY_GRID_COLOR, color)
        self.canvas.set_grid_color(color)

    def reset_grid(self):
        self.session.reset_grid()
        self.canvas.viewport().update()

    def _sync_controls(self):
        has_image = self.session.has_image
        for spin, value in ((self.cols_spin, self.session.cols), (self.rows_spin, self.session.rows)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)
            spin.setEnabled(has_image)
        for widget in (self.color_button, self.crop_btn, self.reset_btn, self.clear_btn):
            widget.setEnabled(has_image)
        has_results = bool(self.session.crop_results)
        self.zip_btn.setEnabled(has_results)
        self.save_btn.setEnabled(has_results)
        self.crop_btn.setText("Re-Crop Image" if has_results else "Crop Image")
        self.results_label.setText(
            f"Crop Results ({len(self.session.crop_results)})" if has_results else "Crop Results")

    # ---- Crop & export ----
    def crop_image(self):
        results = self.session.crop()
        self.results_view.set_results(results, self.session.cols)
        self._sync_controls()
        self.statusBar().showMessage(f"Cropped {len(results)} cells", NOTIFY_MS)

    def _choose_output_dir(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Output Folder", self.output_dir)
        if folder:
            self.output_dir = folder
            self.settings.setValue(KEY_OUTPUT_DIR, folder)
        return folder

    def save_selected(self):
        index = self.results_view.selected_index()
        if index is None:
            self.statusBar().showMessage("Select a cell to save", NOTIFY_MS)
            return
        self.save_cell_at(index)

    def save_cell_at(self, index):
        results = self.session.crop_results
        if not 0 <= index < len(results):
            return
        folder = self._choose_output_dir()
        if not folder:
            return
        try:
            path = save_cell(results[index], folder)
        except GridCropError as e:
            self.notify(str(e))
            return
        self.statusBar().showMessage(f"Saved {os.path.basename(path)}", NOTIFY_MS)

    def download_zip(self):
        results = self.session.crop_results
        if not results:
            return
        folder = self._choose_output_dir()
        if not folder:
            return
        try:
            path = export_zip(results, folder)
        except GridCropError:
            self.notify("Error creating zip file. Please try again.")
            return
        self.statusBar().showMessage(f"Saved {os.path.basename(path)}", NOTIFY_MS)

    def notify(self, message):
        """Non-fatal, user-visible error; session state is left as it was."""
        self.statusBar().showMessage(message, NOTIFY_MS)
        QMessageBox.warning(self, "GridCrop", message)
