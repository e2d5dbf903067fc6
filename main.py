import logging
import os
import platform
import sys

from PySide6.QtWidgets import QApplication

from core.config import get_resource_path
from core.logging_config import setup_logging
from ui.main_window import MainWindow


def _load_platform_stylesheet() -> str:
    system = platform.system()
    if system == "Darwin":
        style_path = get_resource_path("styles/macos.qss")
    else:
        style_path = get_resource_path("styles/default.qss")

    if not os.path.exists(style_path):
        return ""

    with open(style_path, "r", encoding="utf-8") as f:
        return f.read()


def main():
    setup_logging(logging.DEBUG if "--debug" in sys.argv else logging.INFO)
    app = QApplication(sys.argv)
    stylesheet = _load_platform_stylesheet()
    if stylesheet:
        app.setStyleSheet(stylesheet)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
