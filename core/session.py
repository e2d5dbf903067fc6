import logging
from typing import Optional

from PIL import Image

from core.config import DEFAULT_GRID_SIZE
from core.drag import CursorHint, DragController, DragState
from core.grid_model import Axis, GridModel
from core.processor import crop_image

logger = logging.getLogger("gridcrop.session")


class CropSession:
    """
    Single owner of the editing state: the source image, the grid, the
    drag state and the last crop results.

    Every handler is safe to call without an image; those calls do nothing.
    Handlers run on the UI thread only.
    """

    def __init__(self):
        self.image: Optional[Image.Image] = None
        self.grid = GridModel(DEFAULT_GRID_SIZE, DEFAULT_GRID_SIZE)
        self.drag = DragController(self.grid)
        self.crop_results = []
        self._upload_generation = 0

    # ---- State accessors ----
    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def drag_state(self) -> DragState:
        return self.drag.state

    @property
    def cols(self) -> int:
        return self.grid.cols

    @property
    def rows(self) -> int:
        return self.grid.rows

    # ---- Upload ----
    def begin_upload(self) -> int:
        """Token for a decode about to start. Only the newest token is honoured."""
        self._upload_generation += 1
        return self._upload_generation

    def is_current_upload(self, token: int) -> bool:
        return token == self._upload_generation

    def finish_upload(self, token: int, image: Image.Image) -> bool:
        if not self.is_current_upload(token):
            logger.debug("Dropping stale decode result (token %d, current %d)",
                         token, self._upload_generation)
            return False
        self.set_image(image)
        return True

    def set_image(self, image: Image.Image):
        self.image = image
        self.drag.release()
        self.crop_results = []
        self.grid.commit()

    def clear_image(self):
        self._upload_generation += 1  # in-flight decodes become stale
        self.image = None
        self.crop_results = []
        self.drag.release()
        self.grid.initialize(DEFAULT_GRID_SIZE, DEFAULT_GRID_SIZE)
        logger.info("Image cleared")

    # ---- Grid dimensions ----
    def stage_dimensions(self, cols, rows) -> bool:
        if self.drag.active:
            logger.debug("Ignoring dimension change during drag")
            return False
        return self.grid.set_dimensions(cols, rows)

    def commit_dimensions(self):
        if self.drag.active:
            return
        self.grid.commit()

    def update_grid_size(self, cols, rows) -> bool:
        changed = self.stage_dimensions(cols, rows)
        if changed:
            self.commit_dimensions()
        return changed

    def reset_grid(self):
        self.drag.release()
        self.grid.reset()

    # ---- Pointer input (canvas pixel space) ----
    def pointer_down(self, pos, width, height) -> Optional[CursorHint]:
        if not self.has_image:
            return None
        return self.drag.press(pos, width, height)

    def pointer_move(self, pos, width, height) -> Optional[CursorHint]:
        if not self.has_image:
            return None
        return self.drag.move(pos, width, height)

    def pointer_up(self) -> CursorHint:
        return self.drag.release()

    pointer_leave = pointer_up

    # ---- Crop ----
    def crop(self) -> list:
        if not self.has_image:
            return self.crop_results
        self.crop_results = crop_image(
            self.image,
            self.grid.positions(Axis.VERTICAL),
            self.grid.positions(Axis.HORIZONTAL),
            self.grid.cols,
            self.grid.rows,
        )
        logger.info("Cropped %d of %d cells", len(self.crop_results), self.grid.cell_count)
        return self.crop_results
