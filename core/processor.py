import datetime
import io
import logging
import os
import zipfile
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image, ImageOps

from core.config import MAX_UPLOAD_BYTES
from core.coordinates import boundary_positions
from core.errors import ExportError, ImageLoadError

logger = logging.getLogger("gridcrop.processor")


@dataclass(frozen=True)
class CropResult:
    raster: Image.Image
    cell_number: int  # row-major, 1-based
    width: int
    height: int


@dataclass(frozen=True)
class Cropped:
    result: CropResult


@dataclass(frozen=True)
class Skipped:
    cell_number: int
    reason: str


CellOutcome = Union[Cropped, Skipped]


def load_image(path: str, max_bytes: int = MAX_UPLOAD_BYTES) -> Image.Image:
    """
    Decode an uploaded file into an upright raster.
    EXIF orientation is applied to the pixels so crops match what is shown.
    """
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise ImageLoadError(f"Cannot read {path}: {e}") from e

    if size > max_bytes:
        raise ImageLoadError(
            f"{os.path.basename(path)} is {size / (1024 * 1024):.1f} MB, "
            f"limit is {max_bytes // (1024 * 1024)} MB"
        )

    try:
        with Image.open(path) as image:
            image = ImageOps.exif_transpose(image)
            image.load()
    except Exception as e:
        # Pillow surfaces malformed files and EXIF blocks as many exception types
        raise ImageLoadError(f"Cannot decode {path}: {e}") from e

    logger.info("Loaded %s (%dx%d)", os.path.basename(path), image.width, image.height)
    return image


def _crop_cell(image, box, cell_number) -> CellOutcome:
    left, top, right, bottom = box
    try:
        raster = image.crop(box)
    except (OSError, ValueError, MemoryError) as e:
        return Skipped(cell_number, str(e))
    return Cropped(CropResult(raster, cell_number, right - left, bottom - top))


def crop_cells(image: Optional[Image.Image], vertical, horizontal, cols: int, rows: int) -> list:
    """
    Cut the image along the normalized grid lines.

    Boundaries are computed against the source size, not the display size.
    Each box edge is rounded once, so neighbouring cells share an edge and a
    row of cells covers the image width exactly. Pixels are copied 1:1.
    Returns one CellOutcome per cell in row-major order.

    The cell layout follows the lines, not cols/rows: staged dimensions that
    were never committed leave the old lines in place and those still win.
    """
    if image is None:
        return []

    img_w, img_h = image.size
    x_positions = [round(x) for x in boundary_positions(vertical, img_w)]
    y_positions = [round(y) for y in boundary_positions(horizontal, img_h)]

    line_cols, line_rows = len(x_positions) - 1, len(y_positions) - 1
    if (line_cols, line_rows) != (cols, rows):
        logger.debug("Grid is %dx%d but lines describe %dx%d; cropping along the lines",
                     cols, rows, line_cols, line_rows)
    cols, rows = line_cols, line_rows

    outcomes = []
    for row in range(rows):
        for col in range(cols):
            cell_number = row * cols + col + 1
            box = (x_positions[col], y_positions[row],
                   x_positions[col + 1], y_positions[row + 1])
            outcomes.append(_crop_cell(image, box, cell_number))
    return outcomes


def crop_image(image, vertical, horizontal, cols, rows) -> list:
    """Successful cells only. Skipped cells are dropped and logged."""
    results = []
    for outcome in crop_cells(image, vertical, horizontal, cols, rows):
        if isinstance(outcome, Skipped):
            logger.warning("Skipping cell %d: %s", outcome.cell_number, outcome.reason)
            continue
        results.append(outcome.result)
    return results


# ---- Export ----
def cell_filename(cell_number: int, index: int = 0) -> str:
    return f"crop_{cell_number or index + 1}.png"


def archive_name(today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return f"cropped_images_{today.isoformat()}.zip"


def _png_bytes(raster: Image.Image) -> bytes:
    buf = io.BytesIO()
    raster.save(buf, format="PNG")
    return buf.getvalue()


def save_cell(result: CropResult, directory: str) -> str:
    """Write a single cell as crop_<n>.png into directory."""
    out_path = os.path.join(directory, cell_filename(result.cell_number))
    try:
        os.makedirs(directory, exist_ok=True)
        result.raster.save(out_path, format="PNG")
    except (OSError, ValueError) as e:
        raise ExportError(f"Could not save {out_path}: {e}") from e
    logger.info("Saved %s", out_path)
    return out_path


def export_zip(results, directory: str, today: Optional[datetime.date] = None) -> str:
    """
    Bundle all cells into cropped_images_<date>.zip inside directory.
    A half-written archive is removed before ExportError is raised.
    """
    out_path = os.path.join(directory, archive_name(today))
    try:
        os.makedirs(directory, exist_ok=True)
        with zipfile.ZipFile(out_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for index, result in enumerate(results):
                zf.writestr(cell_filename(result.cell_number, index), _png_bytes(result.raster))
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        logger.error("Error creating zip file %s: %s", out_path, e)
        if os.path.exists(out_path):
            try:
                os.remove(out_path)
            except OSError:
                logger.warning("Could not remove partial archive %s", out_path)
        raise ExportError(f"Error creating zip file: {e}") from e

    logger.info("Exported %d cells to %s", len(results), out_path)
    return out_path
