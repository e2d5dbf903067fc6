import logging

from PySide6.QtCore import QRunnable, Signal, QObject

from core.errors import ImageLoadError
from core.processor import load_image

logger = logging.getLogger("gridcrop.loader")


class LoaderSignals(QObject):
    finished = Signal(int, object)  # token, PIL image
    error = Signal(int, str)        # token, message


class ImageLoaderWorker(QRunnable):
    """Decodes one upload off the UI thread; results are delivered by signal."""

    def __init__(self, path, token):
        super().__init__()
        self.path = path
        self.token = token
        self.signals = LoaderSignals()

    def run(self):
        try:
            image = load_image(self.path)
        except ImageLoadError as e:
            self.signals.error.emit(self.token, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error decoding %s", self.path)
            self.signals.error.emit(self.token, f"Cannot decode {self.path}: {e}")
            return
        self.signals.finished.emit(self.token, image)
