"""Map projection and viewport engine for PyScreepsMap."""

from pyscreepsmap.engine.rooms import (
    GridCoordinate,
    room_name_to_xy,
    xy_to_room_name,
    normalize_room_name,
    create_room_grid,
)
from pyscreepsmap.engine.layout import GridPosition, MapBounds, RoomLayout, WorldPoint
from pyscreepsmap.engine.view import ViewState, clamp_scale, round_to_precision
from pyscreepsmap.engine.projection import ProjectionEngine, ScreenPoint, SurfaceTransform
from pyscreepsmap.engine.lod import LevelOfDetailSelector, RenderMode
from pyscreepsmap.engine.markers import Marker, MarkerIndex, MarkerKind, create_marker
from pyscreepsmap.engine.viewport import InteractionMode, ViewportController
from pyscreepsmap.engine.host import MapScene

__all__ = [
    # Coordinates
    "GridCoordinate",
    "GridPosition",
    "WorldPoint",
    "ScreenPoint",
    "room_name_to_xy",
    "xy_to_room_name",
    "normalize_room_name",
    "create_room_grid",
    # Layout and projection
    "MapBounds",
    "RoomLayout",
    "ViewState",
    "clamp_scale",
    "round_to_precision",
    "ProjectionEngine",
    "SurfaceTransform",
    "LevelOfDetailSelector",
    "RenderMode",
    # Markers
    "Marker",
    "MarkerIndex",
    "MarkerKind",
    "create_marker",
    # Interaction
    "InteractionMode",
    "ViewportController",
    "MapScene",
]
