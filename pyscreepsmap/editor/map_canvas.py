"""Map canvas: a PyQt6 rendering surface for the terrain scene."""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, QTimer, pyqtSignal
from PyQt6.QtGui import (
    QPainter,
    QPen,
    QBrush,
    QColor,
    QFont,
    QWheelEvent,
    QMouseEvent,
    QResizeEvent,
)
from PyQt6.QtWidgets import (
    QWidget,
    QFrame,
    QVBoxLayout,
    QLabel,
    QPushButton,
)

from pyscreepsmap.engine.markers import Marker
from pyscreepsmap.engine.projection import Rect, ScreenPoint
from pyscreepsmap.engine.scene import Primitive, PrimitiveKind, Scene
from pyscreepsmap.engine.surface import RenderSurface, SurfaceFactory, SurfaceReady

logger = logging.getLogger(__name__)


def _qcolor(value: int, alpha: float = 1.0) -> QColor:
    color = QColor((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    color.setAlphaF(alpha)
    return color


class CanvasSurface(RenderSurface):
    """Surface backed by a :class:`MapCanvas` widget."""

    def __init__(self, canvas: "MapCanvas") -> None:
        super().__init__()
        self.canvas = canvas
        self.scene: Optional[Scene] = None

    def size(self) -> tuple[float, float]:
        return (float(self.canvas.width()), float(self.canvas.height()))

    def get_bounding_rect(self) -> Rect:
        geometry = self.canvas.geometry()
        return Rect(geometry.x(), geometry.y(), geometry.width(), geometry.height())

    def resize(self, size: tuple[float, float]) -> None:
        # The widget is sized by its layout; only repaint.
        self.canvas.update()

    def draw(self, scene: Scene) -> None:
        self.scene = scene
        self.canvas.update()

    def transform_changed(self) -> None:
        self.canvas.update()

    def destroy(self) -> None:
        super().destroy()
        self.scene = None
        self.canvas.release(self)


class QtSurfaceFactory(SurfaceFactory):
    """Builds canvas surfaces on the next turn of the Qt event loop."""

    def __init__(self, canvas: "MapCanvas") -> None:
        self.canvas = canvas

    def create(self, size: tuple[float, float], on_ready: SurfaceReady) -> None:
        QTimer.singleShot(0, lambda: on_ready(self._make_surface()))

    def _make_surface(self) -> Optional[CanvasSurface]:
        if not self.canvas.isVisible():
            logger.warning("Map canvas is not visible, cannot create surface")
            return None
        surface = CanvasSurface(self.canvas)
        self.canvas.install(surface)
        return surface


class MapCanvas(QWidget):
    """Canvas widget that paints the installed surface and forwards input."""

    # Signals
    resized = pyqtSignal(float, float)  # width, height

    # Pointer travel (px) below which a press and release count as a tap
    TAP_TOLERANCE = 4

    COLOR_BACKGROUND = QColor(26, 26, 26)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        self.surface: Optional[CanvasSurface] = None
        self._press_pos: Optional[QPointF] = None

    def install(self, surface: CanvasSurface) -> None:
        """Make ``surface`` the one that receives input and gets painted."""
        self.surface = surface
        self.update()

    def release(self, surface: CanvasSurface) -> None:
        """Forget a destroyed surface."""
        if self.surface is surface:
            self.surface = None
            self._press_pos = None
            self.setCursor(Qt.CursorShape.OpenHandCursor)
            self.update()

    # === Painting ===

    def paintEvent(self, event) -> None:
        """Paint the canvas."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        surface = self.surface
        scene = surface.scene if surface else None
        background = _qcolor(scene.background) if scene else self.COLOR_BACKGROUND
        painter.fillRect(self.rect(), background)
        if scene is None:
            return

        # World layer under the surface transform
        transform = surface.transform
        painter.save()
        painter.translate(transform.offset_x, transform.offset_y)
        painter.scale(transform.scale_ratio, transform.scale_ratio)
        for primitive in scene.world:
            self._draw_primitive(painter, primitive)
        painter.restore()

        # Overlay in screen pixels
        for primitive in scene.overlay:
            self._draw_primitive(painter, primitive)

    def _draw_primitive(self, painter: QPainter, primitive: Primitive) -> None:
        color = _qcolor(primitive.color, primitive.alpha)
        kind = primitive.kind

        if kind is PrimitiveKind.LINE:
            painter.setPen(QPen(color, primitive.line_width))
            painter.drawLine(
                QPointF(primitive.x, primitive.y), QPointF(primitive.x2, primitive.y2)
            )
            return

        if kind is PrimitiveKind.TEXT:
            font = QFont("Arial", primitive.font_size)
            font.setBold(primitive.bold)
            painter.setFont(font)
            painter.setPen(color)
            painter.drawText(QPointF(primitive.x, primitive.y + primitive.font_size), primitive.text)
            return

        if primitive.fill:
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(color))
        else:
            painter.setPen(QPen(color, primitive.line_width))
            painter.setBrush(Qt.BrushStyle.NoBrush)

        if kind is PrimitiveKind.CIRCLE:
            painter.drawEllipse(QPointF(primitive.x, primitive.y), primitive.radius, primitive.radius)
        elif kind is PrimitiveKind.ROUNDED_RECT:
            painter.drawRoundedRect(
                QRectF(primitive.x, primitive.y, primitive.width, primitive.height),
                primitive.radius,
                primitive.radius,
            )
        else:
            painter.drawRect(QRectF(primitive.x, primitive.y, primitive.width, primitive.height))

    # === Mouse Events ===

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Start a drag with the left button."""
        if event.button() != Qt.MouseButton.LeftButton or not self.surface:
            return
        pos = event.position()
        self._press_pos = pos
        self.setCursor(Qt.CursorShape.ClosedHandCursor)
        self.surface.emit_pointer_down(ScreenPoint(pos.x(), pos.y()))

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Forward pointer movement."""
        if self.surface:
            pos = event.position()
            self.surface.emit_pointer_move(ScreenPoint(pos.x(), pos.y()))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """End a drag; a release close to the press is also a tap."""
        if event.button() != Qt.MouseButton.LeftButton or not self.surface:
            return
        pos = event.position()
        surface = self.surface
        surface.emit_pointer_up()
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        press, self._press_pos = self._press_pos, None
        if press is not None and (pos - press).manhattanLength() <= self.TAP_TOLERANCE:
            surface.emit_tap(ScreenPoint(pos.x(), pos.y()))

    def leaveEvent(self, event) -> None:
        """Pointer leaving the canvas ends any drag."""
        if self.surface:
            self.surface.emit_pointer_leave()
        self._press_pos = None
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Zoom; positive delta (wheel towards the user) zooms out."""
        if self.surface:
            self.surface.emit_wheel(-event.angleDelta().y())
        event.accept()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.resized.emit(float(self.width()), float(self.height()))


class MarkerTooltip(QFrame):
    """Floating details card for the selected marker."""

    closed = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setStyleSheet(
            "MarkerTooltip { background: rgba(17, 24, 39, 240);"
            " border: 1px solid rgba(59, 130, 246, 128); border-radius: 6px; }"
            " QLabel { color: #e5e7eb; }"
        )
        self.setMinimumWidth(180)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 8, 10, 8)
        self.title = QLabel()
        font = self.title.font()
        font.setBold(True)
        self.title.setFont(font)
        layout.addWidget(self.title)
        self.details = QLabel()
        layout.addWidget(self.details)

        close_button = QPushButton("Close")
        close_button.setFlat(True)
        close_button.clicked.connect(self.closed.emit)
        layout.addWidget(close_button)
        self.hide()

    def show_marker(self, marker: Marker, anchor: ScreenPoint, offset: int) -> None:
        """Show the card next to ``anchor`` (host-local pixels)."""
        self.title.setText(marker.kind.label)
        lines = [f"Room: {marker.room_name}", f"Position: ({marker.x}, {marker.y})"]
        if marker.hp is not None:
            lines.append(f"Durability: {marker.hp}")
        self.details.setText("\n".join(lines))
        self.adjustSize()
        self.move(int(anchor.x + offset), int(anchor.y + offset))
        self.raise_()
        self.show()
