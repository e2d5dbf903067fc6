from PySide6.QtCore import Qt, QRectF, QPointF, QEvent
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QPixmap, QFont, QPainterPath, QFontMetricsF
from PySide6.QtWidgets import QGraphicsView, QGraphicsScene, QGraphicsPixmapItem, QFrame
from PIL import Image, ImageQt

from core.config import DEFAULT_GRID_COLOR
from core.coordinates import Box, map_to_canvas, boundary_positions, display_size, cell_centers
from core.drag import CursorHint
from core.grid_model import Axis

CURSORS = {
    CursorHint.DEFAULT: Qt.CursorShape.CrossCursor,
    CursorHint.RESIZE_HORIZONTAL: Qt.CursorShape.SizeHorCursor,
    CursorHint.RESIZE_VERTICAL: Qt.CursorShape.SizeVerCursor,
}


def pil_to_pixmap(image, width, height):
    """Downscaled display copy of a PIL image."""
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    size = (max(1, int(width)), max(1, int(height)))
    if image.size != size:
        image = image.resize(size, Image.Resampling.LANCZOS)
    return QPixmap.fromImage(ImageQt.ImageQt(image))


class GridCanvas(QGraphicsView):
    """
    Shows the image at its capped display size with the grid overlay and
    turns mouse/touch input into session drag calls.

    Scene coordinates are canvas backing pixels: (0, 0) to the display size.
    The view may draw the scene smaller than that to fit the window.
    """
    def __init__(self, session):
        super().__init__()
        self.session = session
        self.scene = QGraphicsScene(self)
        self.setScene(self.scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setBackgroundBrush(QBrush(QColor("#f3f4f6")))
        self.setMouseTracking(True)
        self.viewport().setMouseTracking(True)
        self.viewport().setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)

        self.pixmap_item = None
        self.canvas_width = 0.0
        self.canvas_height = 0.0
        self.grid_color = QColor(DEFAULT_GRID_COLOR)
        self.label_font = QFont("Arial")
        self.label_font.setPixelSize(14)

        self._set_cursor(CursorHint.DEFAULT)

    # ---- Loading ----
    def set_image(self, image):
        self.scene.clear()
        self.pixmap_item = None
        if image is None:
            self.canvas_width = self.canvas_height = 0.0
            self.viewport().update()
            return

        width, height = display_size(*image.size)
        self.canvas_width, self.canvas_height = float(width), float(height)
        pixmap = pil_to_pixmap(image, width, height)
        self.pixmap_item = QGraphicsPixmapItem(pixmap)
        self.scene.addItem(self.pixmap_item)
        self.setSceneRect(QRectF(0, 0, self.canvas_width, self.canvas_height))
        self.update_fitting()

    def clear(self):
        self.set_image(None)
        self._set_cursor(CursorHint.DEFAULT)

    def set_grid_color(self, color):
        self.grid_color = QColor(color)
        self.viewport().update()

    # ---- Fitting: never larger than the display size ----
    def update_fitting(self):
        if not self.pixmap_item:
            return
        self.resetTransform()
        vp = self.viewport().rect()
        if vp.width() <= 10 or vp.height() <= 10:
            return

        scale = min(1.0,
                    vp.width() * 0.95 / max(1.0, self.canvas_width),
                    vp.height() * 0.95 / max(1.0, self.canvas_height))
        self.scale(scale, scale)
        self.centerOn(QPointF(self.canvas_width / 2, self.canvas_height / 2))
        self.viewport().update()

    def image_box(self) -> Box:
        """The canvas rect in viewport pixels."""
        if not self.pixmap_item:
            return Box(0.0, 0.0, 0.0, 0.0)
        r = QRectF(self.mapFromScene(self.pixmap_item.sceneBoundingRect()).boundingRect())
        return Box(r.x(), r.y(), r.width(), r.height())

    def _canvas_pos(self, viewport_pos):
        return map_to_canvas(viewport_pos.x(), viewport_pos.y(), self.image_box(),
                             self.canvas_width, self.canvas_height)

    def _set_cursor(self, hint):
        if hint is not None:
            self.viewport().setCursor(CURSORS[hint])

    # ---- Drawing ----
    def drawForeground(self, painter, rect):
        if not self.pixmap_item:
            return
        grid = self.session.grid
        w, h = self.canvas_width, self.canvas_height
        xs = boundary_positions(grid.positions(Axis.VERTICAL), w)
        ys = boundary_positions(grid.positions(Axis.HORIZONTAL), h)

        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # Dashed divider lines
        pen = QPen(self.grid_color, 2)
        pen.setDashPattern([2.5, 2.5])  # 5px on / 5px off at width 2
        painter.setPen(pen)
        for x in xs[1:-1]:
            painter.drawLine(QPointF(x, 0), QPointF(x, h))
        for y in ys[1:-1]:
            painter.drawLine(QPointF(0, y), QPointF(w, y))

        # Handles
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self.grid_color)
        for x in xs[1:-1]:
            painter.drawEllipse(QPointF(x, h / 2), 6, 6)
        for y in ys[1:-1]:
            painter.drawEllipse(QPointF(w / 2, y), 6, 6)

        # Cell numbers
        metrics = QFontMetricsF(self.label_font)
        for number, (cx, cy) in enumerate(cell_centers(xs, ys), start=1):
            text = str(number)
            path = QPainterPath()
            path.addText(cx - metrics.horizontalAdvance(text) / 2,
                         cy + (metrics.ascent() - metrics.descent()) / 2,
                         self.label_font, text)
            painter.strokePath(path, QPen(QColor("#000"), 1))
            painter.fillPath(path, QColor(255, 255, 255, 230))

        painter.restore()

    # ---- Mouse interaction ----
    def wheelEvent(self, event):
        # No zooming allowed
        event.accept()

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        if self._press(event.position()):
            event.accept()

    def mouseMoveEvent(self, event):
        self._move(event.position())

    def mouseReleaseEvent(self, event):
        self._release()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        self._set_cursor(self.session.pointer_leave())
        super().leaveEvent(event)

    def _press(self, pos) -> bool:
        hint = self.session.pointer_down(self._canvas_pos(pos), self.canvas_width, self.canvas_height)
        self._set_cursor(hint)
        return hint is not None

    def _move(self, pos):
        dragging = self.session.drag_state.active
        hint = self.session.pointer_move(self._canvas_pos(pos), self.canvas_width, self.canvas_height)
        self._set_cursor(hint)
        if dragging:
            self.viewport().update()

    def _release(self):
        self._set_cursor(self.session.pointer_up())

    # ---- Touch interaction ----
    def viewportEvent(self, event):
        etype = event.type()
        if etype == QEvent.Type.TouchBegin:
            points = event.points()
            if points and self._press(points[0].position()):
                event.accept()
                return True
        elif etype == QEvent.Type.TouchUpdate:
            points = event.points()
            if points and self.session.drag_state.active:
                self._move(points[0].position())
                event.accept()
                return True
        elif etype in (QEvent.Type.TouchEnd, QEvent.Type.TouchCancel):
            self._release()
            event.accept()
            return True
        return super().viewportEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update_fitting()
