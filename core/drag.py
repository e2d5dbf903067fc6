import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.config import DRAG_THRESHOLD_PX, LINE_MARGIN
from core.grid_model import Axis, GridModel

logger = logging.getLogger("gridcrop.drag")


class CursorHint(Enum):
    DEFAULT = "crosshair"
    RESIZE_HORIZONTAL = "ew-resize"  # over a vertical line
    RESIZE_VERTICAL = "ns-resize"    # over a horizontal line


@dataclass(frozen=True)
class LineHit:
    axis: Axis
    index: int


@dataclass(frozen=True)
class DragState:
    active: bool = False
    axis: Axis = Axis.NONE
    line_index: int = -1


IDLE = DragState()


def cursor_for_axis(axis: Axis) -> CursorHint:
    if axis == Axis.VERTICAL:
        return CursorHint.RESIZE_HORIZONTAL
    if axis == Axis.HORIZONTAL:
        return CursorHint.RESIZE_VERTICAL
    return CursorHint.DEFAULT


def find_nearest_line(pos, vertical, horizontal, width: float, height: float,
                      threshold: float = DRAG_THRESHOLD_PX) -> Optional[LineHit]:
    """
    First line within `threshold` canvas pixels of pos.
    Vertical lines are scanned before horizontal ones, so a vertical line
    wins at a corner even if a horizontal one is closer.
    """
    x, y = pos
    for i, position in enumerate(vertical):
        if abs(x - position * width) < threshold:
            return LineHit(Axis.VERTICAL, i)

    for i, position in enumerate(horizontal):
        if abs(y - position * height) < threshold:
            return LineHit(Axis.HORIZONTAL, i)

    return None


def constrain_position(positions, index: int, candidate: float,
                       margin: float = LINE_MARGIN) -> float:
    """Clamp candidate to stay `margin` away from its neighbours (or the edges)."""
    prev_pos = positions[index - 1] if index > 0 else 0.0
    next_pos = positions[index + 1] if index < len(positions) - 1 else 1.0
    return max(prev_pos + margin, min(next_pos - margin, candidate))


class DragController:
    """
    Idle/Dragging state machine over a GridModel.

    press/move/release take positions in canvas pixels plus the canvas
    extent, and return the cursor the caller should show.
    """

    def __init__(self, model: GridModel, threshold: float = DRAG_THRESHOLD_PX,
                 margin: float = LINE_MARGIN):
        self.model = model
        self.threshold = threshold
        self.margin = margin
        self.state = IDLE

    @property
    def active(self) -> bool:
        return self.state.active

    def hit_test(self, pos, width, height) -> Optional[LineHit]:
        return find_nearest_line(pos,
                                 self.model.positions(Axis.VERTICAL),
                                 self.model.positions(Axis.HORIZONTAL),
                                 width, height, self.threshold)

    def press(self, pos, width, height) -> Optional[CursorHint]:
        hit = self.hit_test(pos, width, height)
        if hit is None:
            return None
        self.state = DragState(True, hit.axis, hit.index)
        logger.debug("Drag start: %s line %d", hit.axis.value, hit.index)
        return cursor_for_axis(hit.axis)

    def move(self, pos, width, height) -> CursorHint:
        if not self.state.active:
            # Hover only, never touches the model
            hit = self.hit_test(pos, width, height)
            return cursor_for_axis(hit.axis) if hit else CursorHint.DEFAULT

        axis, index = self.state.axis, self.state.line_index
        positions = self.model.positions(axis)
        if not 0 <= index < len(positions):
            # Lines were regenerated underneath us
            self.release()
            return CursorHint.DEFAULT

        if axis == Axis.VERTICAL:
            candidate = pos[0] / width if width else 0.0
        else:
            candidate = pos[1] / height if height else 0.0

        self.model.move_line(axis, index,
                             constrain_position(positions, index, candidate, self.margin))
        return cursor_for_axis(axis)

    def release(self) -> CursorHint:
        if self.state.active:
            logger.debug("Drag end: %s line %d", self.state.axis.value, self.state.line_index)
        self.state = IDLE
        return CursorHint.DEFAULT
