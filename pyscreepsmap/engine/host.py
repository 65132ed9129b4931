"""Scene hosting: surface lifecycle around the viewport controller.

:class:`MapScene` is what an application talks to. Every change of the loaded
rooms, the markers or the render mode tears the surface down and builds a new
one. Surface setup may complete later on the event loop; until it does,
resize and view requests are held and replayed once the surface is installed.
"""

import logging
from typing import Callable, Optional, Sequence

from pyscreepsmap.config import ColorScheme, MapConfig
from pyscreepsmap.engine.layout import MapBounds
from pyscreepsmap.engine.lod import LevelOfDetailSelector, RenderMode
from pyscreepsmap.engine.markers import Marker, MarkerIndex, MarkerSelection
from pyscreepsmap.engine.projection import ProjectionEngine, Rect
from pyscreepsmap.engine.scene import Scene, SceneBuilder
from pyscreepsmap.engine.surface import CancellationToken, RenderSurface, SurfaceFactory
from pyscreepsmap.engine.terrain import RoomTerrain
from pyscreepsmap.engine.view import ViewState
from pyscreepsmap.engine.viewport import ViewportController

logger = logging.getLogger(__name__)


class MapScene:
    """Owns the current surface, scene and viewport controller."""

    def __init__(
        self,
        config: MapConfig,
        colors: ColorScheme,
        factory: SurfaceFactory,
        on_view_changed: Optional[Callable[[ViewState], None]] = None,
        on_selection_changed: Optional[Callable[[Optional[MarkerSelection]], None]] = None,
        host_rect: Optional[Callable[[], Rect]] = None,
    ) -> None:
        self.config = config
        self.engine = ProjectionEngine(config)
        self.builder = SceneBuilder(config, colors)
        self.lod = LevelOfDetailSelector(config)
        self.factory = factory
        self._on_view_changed = on_view_changed
        self._on_selection_changed = on_selection_changed
        self._host_rect = host_rect

        # Inputs of the current scene
        self._rooms: list[RoomTerrain] = []
        self._markers: list[Marker] = []
        self._view = ViewState().normalized(config)
        self._size: tuple[float, float] = (0.0, 0.0)

        # Installed state
        self.surface: Optional[RenderSurface] = None
        self.controller: Optional[ViewportController] = None
        self.scene: Optional[Scene] = None
        self.mode: Optional[RenderMode] = None
        self._token: Optional[CancellationToken] = None

        # Requests made while setup is pending
        self._pending_size: Optional[tuple[float, float]] = None

    # === Queries ===

    @property
    def ready(self) -> bool:
        """True once a surface is installed and interactive."""
        return self.surface is not None and self.controller is not None

    @property
    def pending(self) -> bool:
        """True while a surface setup is in flight."""
        return self._token is not None and not self._token.cancelled and not self.ready

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def bounds(self) -> MapBounds:
        return self.engine.layout.bounds_of(room.room_name for room in self._rooms)

    @property
    def selection(self) -> Optional[MarkerSelection]:
        return self.controller.selection if self.controller else None

    # === Host API ===

    def render_scene(
        self,
        rooms: Sequence[RoomTerrain],
        markers: Sequence[Marker],
        view: ViewState,
        surface_size: tuple[float, float],
    ) -> None:
        """Draw rooms and markers under a view, replacing the current scene."""
        self._rooms = list(rooms)
        self._markers = list(markers)
        self._view = view.normalized(self.config)
        self._size = surface_size
        self._rebuild()

    def set_view(self, view: ViewState) -> None:
        """Apply a view coming from the host (typed into a form, say)."""
        view = view.normalized(self.config)
        self._view = view
        if self.mode is not None and self.lod.mode(view.scale) is not self.mode:
            self._rebuild()
            return
        if self.ready:
            self.controller.apply_view(view)

    def resize(self, surface_size: tuple[float, float]) -> None:
        """Re-apply the current view against a new surface size."""
        self._size = surface_size
        if not self.ready:
            self._pending_size = surface_size
            return
        self._apply_size(surface_size)
        self._notify_view(self.controller.current_view())

    def clear_selection(self) -> None:
        if self.controller is not None:
            self.controller.clear_selection()

    def teardown(self) -> None:
        """Release the surface; any setup still in flight is cancelled."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self.controller is not None:
            self.controller.clear_selection()
            self.controller.detach()
            self.controller = None
        if self.surface is not None:
            self.surface.destroy()
            self.surface = None
        self.scene = None
        self.mode = None
        self._pending_size = None

    # === Lifecycle ===

    def _rebuild(self) -> None:
        self.teardown()
        if not self._rooms:
            logger.debug("No rooms loaded, nothing to draw")
            return

        token = CancellationToken()
        self._token = token
        self.mode = self.lod.mode(self._view.scale)
        try:
            self.factory.create(self._size, lambda surface: self._install(token, surface))
        except Exception as e:
            logger.error(f"Surface setup failed: {e}")
            if self._token is token:
                self._token = None
                self.mode = None

    def _install(self, token: CancellationToken, surface: Optional[RenderSurface]) -> None:
        if token.cancelled:
            if surface is not None:
                logger.debug("Discarding surface from a cancelled setup")
                surface.destroy()
            return
        if surface is None:
            logger.warning("Rendering surface unavailable, scene not drawn")
            self._token = None
            self.mode = None
            return

        bounds = self.bounds
        markers = MarkerIndex(self.engine.layout)
        if self.mode is RenderMode.DETAIL:
            markers.rebuild(self._markers, (room.room_name for room in self._rooms), bounds)

        self.surface = surface
        self.scene = self.builder.build(self._rooms, markers, self.mode, surface.size())
        surface.draw(self.scene)

        self.controller = ViewportController(
            self.engine,
            surface,
            bounds,
            markers=markers,
            on_view_changed=self._on_controller_view,
            on_selection_changed=self._on_selection_changed,
            host_rect=self._host_rect,
        )
        self.controller.attach()
        self.controller.apply_view(self._view)

        if self._pending_size is not None:
            size = self._pending_size
            self._pending_size = None
            self._apply_size(size)
            self._notify_view(self.controller.current_view())
        logger.debug(f"Installed {self.mode.value} scene with {len(self.scene)} primitives")

    def _apply_size(self, surface_size: tuple[float, float]) -> None:
        self.surface.resize(surface_size)
        self.controller.apply_view(self._view)

    def _on_controller_view(self, view: ViewState) -> None:
        self._view = view
        self._notify_view(view)
        if self.mode is not None and self.lod.mode(view.scale) is not self.mode:
            self._rebuild()

    def _notify_view(self, view: ViewState) -> None:
        if not self._on_view_changed:
            return
        try:
            self._on_view_changed(view)
        except Exception as e:
            logger.error(f"View change callback error: {e}")
