import os
import sys

# Grid
MIN_GRID_SIZE = 1
MAX_GRID_SIZE = 10
DEFAULT_GRID_SIZE = 3
LINE_MARGIN = 0.05       # min normalized gap between neighbouring lines
DRAG_THRESHOLD_PX = 10   # canvas pixels

# Display canvas is capped, source resolution is untouched
DISPLAY_MAX_WIDTH = 800
DISPLAY_MAX_HEIGHT = 600

# Upload
MAX_UPLOAD_BYTES = 50 * 1024 * 1024
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp *.tif *.tiff)"

DEFAULT_GRID_COLOR = "#00ff04"

# QSettings (UI preferences only)
SETTINGS_ORG = "GridCrop"
SETTINGS_APP = "GridCrop"
KEY_LAST_INPUT_DIR = "last_input_dir"
KEY_OUTPUT_DIR = "output_dir"
KEY_GRID_COLOR = "grid_color"


def get_resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    base_path = getattr(sys, "_MEIPASS", None)
    if base_path is None:
        # In development, use the project root (one level up from core/)
        base_path = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

    return os.path.join(base_path, relative_path)
