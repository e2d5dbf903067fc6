import logging
from dataclasses import dataclass
from enum import Enum

from core.config import MIN_GRID_SIZE, MAX_GRID_SIZE, DEFAULT_GRID_SIZE

logger = logging.getLogger("gridcrop.grid")


class Axis(Enum):
    NONE = "none"
    VERTICAL = "vertical"      # column dividers, position along x
    HORIZONTAL = "horizontal"  # row dividers, position along y


@dataclass(frozen=True)
class GridLine:
    position: float  # normalized 0-1 of the image's own span


def is_valid_size(value) -> bool:
    # bool is an int subclass but never a grid size
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_GRID_SIZE <= value <= MAX_GRID_SIZE


def even_lines(count: int) -> list:
    """Evenly spaced dividers for `count` cells (count - 1 lines)."""
    return [GridLine(i / count) for i in range(1, count)]


class GridModel:
    """
    Normalized divider positions for a cols x rows grid.

    Dimension changes are two-phase: set_dimensions() stages the new size,
    initialize()/commit() regenerates the lines. Until the commit the old
    lines stay in place.
    """

    def __init__(self, cols: int = DEFAULT_GRID_SIZE, rows: int = DEFAULT_GRID_SIZE):
        self.cols = cols
        self.rows = rows
        self.vertical_lines = []
        self.horizontal_lines = []
        self.initialize(cols, rows)

    def initialize(self, cols: int, rows: int):
        self.cols = cols
        self.rows = rows
        self.vertical_lines = even_lines(cols)
        self.horizontal_lines = even_lines(rows)
        logger.debug("Grid initialized to %dx%d", cols, rows)

    def commit(self):
        self.initialize(self.cols, self.rows)

    def reset(self):
        """Discard manual adjustments, keeping the current dimensions."""
        self.initialize(self.cols, self.rows)

    def set_dimensions(self, new_cols, new_rows) -> bool:
        """Stage new dimensions. Returns True if anything changed."""
        changed = False
        if is_valid_size(new_cols) and new_cols != self.cols:
            self.cols = new_cols
            changed = True
        elif new_cols != self.cols:
            logger.debug("Ignoring invalid column count %r", new_cols)

        if is_valid_size(new_rows) and new_rows != self.rows:
            self.rows = new_rows
            changed = True
        elif new_rows != self.rows:
            logger.debug("Ignoring invalid row count %r", new_rows)
        return changed

    # ---- Accessors ----
    def lines(self, axis: Axis) -> list:
        if axis == Axis.VERTICAL:
            return self.vertical_lines
        if axis == Axis.HORIZONTAL:
            return self.horizontal_lines
        raise ValueError(f"No lines for axis {axis}")

    def positions(self, axis: Axis) -> list:
        return [line.position for line in self.lines(axis)]

    def move_line(self, axis: Axis, index: int, position: float):
        """Replace a single line. The caller is responsible for clamping."""
        lines = list(self.lines(axis))
        lines[index] = GridLine(position)
        if axis == Axis.VERTICAL:
            self.vertical_lines = lines
        else:
            self.horizontal_lines = lines

    @property
    def cell_count(self) -> int:
        return self.cols * self.rows
