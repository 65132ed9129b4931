"""Viewport interaction: turn drags and wheel steps into view changes."""

import logging
from enum import Enum, auto
from typing import Callable, Optional

from pyscreepsmap.engine.layout import MapBounds
from pyscreepsmap.engine.lod import LevelOfDetailSelector, RenderMode
from pyscreepsmap.engine.markers import MarkerIndex, MarkerSelection, tooltip_anchor
from pyscreepsmap.engine.projection import ProjectionEngine, Rect, ScreenPoint
from pyscreepsmap.engine.surface import RenderSurface
from pyscreepsmap.engine.view import ViewState

logger = logging.getLogger(__name__)


class InteractionMode(Enum):
    """Pointer interaction state."""

    IDLE = auto()
    DRAGGING = auto()


class ViewportController:
    """Pan and zoom a surface and report the resulting view.

    Example usage:
        controller = ViewportController(engine, surface, bounds,
                                        on_view_changed=store_view)
        controller.attach()
        controller.apply_view(ViewState(20.5, 20.5, 150))
    """

    def __init__(
        self,
        engine: ProjectionEngine,
        surface: RenderSurface,
        bounds: MapBounds,
        markers: Optional[MarkerIndex] = None,
        on_view_changed: Optional[Callable[[ViewState], None]] = None,
        on_selection_changed: Optional[Callable[[Optional[MarkerSelection]], None]] = None,
        host_rect: Optional[Callable[[], Rect]] = None,
    ) -> None:
        self.engine = engine
        self.config = engine.config
        self.surface = surface
        self.bounds = bounds
        self.markers = markers or MarkerIndex(engine.layout)
        self.lod = LevelOfDetailSelector(engine.config)
        self._on_view_changed = on_view_changed
        self._on_selection_changed = on_selection_changed
        self._host_rect = host_rect

        self.mode = InteractionMode.IDLE
        self._drag_anchor = ScreenPoint(0, 0)
        self._selection: Optional[MarkerSelection] = None
        self._attached = False

    # === Wiring ===

    def attach(self) -> None:
        """Register pointer handlers on the surface."""
        if self._attached:
            return
        self.surface.on_pointer_down(self.on_pointer_down)
        self.surface.on_pointer_move(self.on_pointer_move)
        self.surface.on_pointer_up(self.on_pointer_up)
        self.surface.on_pointer_leave(self.on_pointer_leave)
        self.surface.on_wheel(self.on_wheel)
        self.surface.on_tap(self.on_tap)
        self._attached = True

    def detach(self) -> None:
        """Unregister handlers and drop back to idle."""
        self.surface.clear_handlers()
        self._attached = False
        self.mode = InteractionMode.IDLE

    @property
    def attached(self) -> bool:
        return self._attached

    # === State ===

    @property
    def dragging(self) -> bool:
        return self.mode is InteractionMode.DRAGGING

    @property
    def selection(self) -> Optional[MarkerSelection]:
        return self._selection

    @property
    def render_mode(self) -> RenderMode:
        return self.lod.mode(self.surface.transform.scale_ratio * 100)

    def current_view(self) -> ViewState:
        """Canonical view of what the surface shows right now."""
        return self.engine.view_from_transform(
            self.surface.transform, self.surface.size(), self.bounds
        )

    # === Pointer events ===

    def on_pointer_down(self, pos: ScreenPoint) -> None:
        transform = self.surface.transform
        self.mode = InteractionMode.DRAGGING
        self._drag_anchor = ScreenPoint(pos.x - transform.offset_x, pos.y - transform.offset_y)
        self.clear_selection()

    def on_pointer_move(self, pos: ScreenPoint) -> None:
        if not self.dragging:
            return
        transform = self.surface.transform.moved_to(
            pos.x - self._drag_anchor.x, pos.y - self._drag_anchor.y
        )
        self.surface.set_transform(transform)
        self._report()

    def on_pointer_up(self) -> None:
        self.mode = InteractionMode.IDLE

    def on_pointer_leave(self) -> None:
        self.mode = InteractionMode.IDLE

    def on_wheel(self, delta: float, current_scale_ratio: Optional[float] = None) -> bool:
        """Zoom one step; returns False when the step would leave the limits.

        A rejected step changes nothing: the scale is not clamped to the limit.
        """
        if current_scale_ratio is None:
            current_scale_ratio = self.surface.transform.scale_ratio
        factor = self.config.zoom_out_factor if delta > 0 else self.config.zoom_in_factor
        new_ratio = current_scale_ratio * factor

        if not (self.config.min_scale <= new_ratio * 100 <= self.config.max_scale):
            logger.debug(f"Ignoring zoom step to {new_ratio * 100:.2f}%")
            return False

        self.surface.set_transform(self.surface.transform.scaled_to(new_ratio))
        self.clear_selection()
        self._report()
        return True

    def on_tap(self, pos: ScreenPoint) -> None:
        """Select the marker under a tap, or clear the selection."""
        marker = self.markers.resolve_hit(pos, self.surface.transform, self.render_mode)
        if marker is None:
            self.clear_selection()
            return

        surface_rect = self.surface.get_bounding_rect()
        host_rect = self._host_rect() if self._host_rect else surface_rect
        self._set_selection(MarkerSelection(marker, tooltip_anchor(pos, surface_rect, host_rect)))

    # === Host-driven changes ===

    def apply_view(self, view: ViewState) -> None:
        """Re-project a view set by the host; nothing is reported back."""
        view = view.normalized(self.config)
        self.surface.set_transform(
            self.engine.transform_for(view, self.surface.size(), self.bounds)
        )

    def clear_selection(self) -> None:
        if self._selection is not None:
            self._set_selection(None)

    def _set_selection(self, selection: Optional[MarkerSelection]) -> None:
        self._selection = selection
        if self._on_selection_changed:
            self._on_selection_changed(selection)

    def _report(self) -> None:
        if self._on_view_changed:
            self._on_view_changed(self.current_view())
