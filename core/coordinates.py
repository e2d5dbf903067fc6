from typing import NamedTuple

from core.config import DISPLAY_MAX_WIDTH, DISPLAY_MAX_HEIGHT


class Box(NamedTuple):
    """On-screen rect of the canvas (display pixels)."""
    left: float
    top: float
    width: float
    height: float


def map_to_canvas(client_x: float, client_y: float, box: Box,
                  canvas_width: float, canvas_height: float) -> tuple:
    """
    Map a pointer position in display pixels to canvas backing pixels.
    Corrects for the canvas being drawn at a different size than its buffer.
    """
    if box.width <= 0 or box.height <= 0:
        return (0.0, 0.0)
    x = (client_x - box.left) * (canvas_width / box.width)
    y = (client_y - box.top) * (canvas_height / box.height)
    return (x, y)


def boundary_positions(positions, extent: float) -> list:
    """[0, p0*extent, ..., extent]; adjacent pairs are the cell spans."""
    return [0.0] + [p * extent for p in positions] + [float(extent)]


def display_size(width: float, height: float,
                 max_width: float = DISPLAY_MAX_WIDTH,
                 max_height: float = DISPLAY_MAX_HEIGHT) -> tuple:
    """
    Whole-pixel canvas size: aspect-preserving downscale into
    max_width x max_height, truncated like a canvas buffer. Never upscales.
    """
    if width > max_width or height > max_height:
        # The limiting side lands exactly on its cap
        if max_width / width <= max_height / height:
            width, height = max_width, height * max_width / width
        else:
            width, height = width * max_height / height, max_height
    return (max(1, int(width)), max(1, int(height)))


def cell_centers(xs, ys) -> list:
    """Centers of each cell in row-major order, from two boundary lists."""
    centers = []
    for row in range(len(ys) - 1):
        for col in range(len(xs) - 1):
            centers.append(((xs[col] + xs[col + 1]) / 2, (ys[row] + ys[row + 1]) / 2))
    return centers
