"""Rendering surface interface.

The engine never talks to a drawing backend directly. A backend provides a
:class:`RenderSurface` (draws a scene under a transform, emits pointer events)
and a :class:`SurfaceFactory` that builds surfaces, possibly asynchronously.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional

from pyscreepsmap.engine.projection import Rect, ScreenPoint, SurfaceTransform

if TYPE_CHECKING:
    from pyscreepsmap.engine.scene import Scene

logger = logging.getLogger(__name__)

PointHandler = Callable[[ScreenPoint], None]
WheelHandler = Callable[[float], None]
PlainHandler = Callable[[], None]


class CancellationToken:
    """Set by a teardown so that a setup still in flight discards its surface."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class RenderSurface(ABC):
    """A drawing surface with a transformable world layer.

    Subclasses draw and report size; this base keeps the pointer handlers and
    dispatches events to them through the ``emit_*`` methods.
    """

    def __init__(self) -> None:
        self._transform = SurfaceTransform()
        self._pointer_down: list[PointHandler] = []
        self._pointer_move: list[PointHandler] = []
        self._pointer_up: list[PlainHandler] = []
        self._pointer_leave: list[PlainHandler] = []
        self._wheel: list[WheelHandler] = []
        self._tap: list[PointHandler] = []
        self.destroyed = False

    # === Capability interface ===

    def on_pointer_down(self, handler: PointHandler) -> None:
        self._pointer_down.append(handler)

    def on_pointer_move(self, handler: PointHandler) -> None:
        self._pointer_move.append(handler)

    def on_pointer_up(self, handler: PlainHandler) -> None:
        self._pointer_up.append(handler)

    def on_pointer_leave(self, handler: PlainHandler) -> None:
        self._pointer_leave.append(handler)

    def on_wheel(self, handler: WheelHandler) -> None:
        self._wheel.append(handler)

    def on_tap(self, handler: PointHandler) -> None:
        self._tap.append(handler)

    def clear_handlers(self) -> None:
        """Drop every registered pointer handler."""
        self._pointer_down.clear()
        self._pointer_move.clear()
        self._pointer_up.clear()
        self._pointer_leave.clear()
        self._wheel.clear()
        self._tap.clear()

    @property
    def has_handlers(self) -> bool:
        return any(
            (
                self._pointer_down,
                self._pointer_move,
                self._pointer_up,
                self._pointer_leave,
                self._wheel,
                self._tap,
            )
        )

    # === Event dispatch (called by the backend) ===

    def emit_pointer_down(self, pos: ScreenPoint) -> None:
        for handler in list(self._pointer_down):
            handler(pos)

    def emit_pointer_move(self, pos: ScreenPoint) -> None:
        for handler in list(self._pointer_move):
            handler(pos)

    def emit_pointer_up(self) -> None:
        for handler in list(self._pointer_up):
            handler()

    def emit_pointer_leave(self) -> None:
        for handler in list(self._pointer_leave):
            handler()

    def emit_wheel(self, delta: float) -> None:
        for handler in list(self._wheel):
            handler(delta)

    def emit_tap(self, pos: ScreenPoint) -> None:
        for handler in list(self._tap):
            handler(pos)

    # === Transform ===

    @property
    def transform(self) -> SurfaceTransform:
        return self._transform

    def set_transform(self, transform: SurfaceTransform) -> None:
        self._transform = transform
        self.transform_changed()

    def transform_changed(self) -> None:
        """Hook for backends that need to repaint after a pan or zoom."""

    # === Backend ===

    @abstractmethod
    def size(self) -> tuple[float, float]:
        """Current (width, height) in screen pixels."""

    @abstractmethod
    def get_bounding_rect(self) -> Rect:
        """Surface rectangle in the host's coordinate frame."""

    @abstractmethod
    def resize(self, size: tuple[float, float]) -> None:
        """Resize the drawing area."""

    @abstractmethod
    def draw(self, scene: "Scene") -> None:
        """Replace whatever is drawn with ``scene``."""

    def destroy(self) -> None:
        """Release drawing resources; the surface is unusable afterwards."""
        self.clear_handlers()
        self.destroyed = True


SurfaceReady = Callable[[Optional[RenderSurface]], None]


class SurfaceFactory(ABC):
    """Creates surfaces for a scene.

    ``create`` may finish synchronously or later on the event loop; either
    way it calls ``on_ready`` exactly once, with ``None`` when the surface
    could not be initialized.
    """

    @abstractmethod
    def create(self, size: tuple[float, float], on_ready: SurfaceReady) -> None:
        """Start building a surface of the given size."""
