"""Building markers: placement, hit-testing and tooltip anchoring."""

import logging
import math
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pyscreepsmap.engine.layout import MapBounds, RoomLayout, WorldPoint
from pyscreepsmap.engine.lod import RenderMode
from pyscreepsmap.engine.projection import Rect, ScreenPoint, SurfaceTransform
from pyscreepsmap.engine.rooms import is_valid_room_name, normalize_room_name, room_name_to_xy
from pyscreepsmap.engine.view import coerce_number

logger = logging.getLogger(__name__)


class MarkerKind(Enum):
    """Kinds of building a marker can stand for."""

    SPAWN = "spawn"
    TOWER = "tower"
    EXTENSION = "extension"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ShapeKind(Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    ROUNDED_SQUARE = "rounded_square"


@dataclass(frozen=True)
class MarkerShape:
    """Rendered outline of a marker, centered on its tile, in world pixels."""

    kind: ShapeKind
    half_size: float  # radius for circles
    corner_radius: float = 0.0

    def contains(self, dx: float, dy: float) -> bool:
        """Check whether an offset from the marker center lies inside."""
        if self.kind is ShapeKind.CIRCLE:
            return dx * dx + dy * dy <= self.half_size * self.half_size

        ax, ay = abs(dx), abs(dy)
        if ax > self.half_size or ay > self.half_size:
            return False
        if self.kind is ShapeKind.SQUARE or self.corner_radius <= 0:
            return True

        # Rounded corners: outside the inner square, test the corner arc
        inner = self.half_size - self.corner_radius
        if ax <= inner or ay <= inner:
            return True
        return math.hypot(ax - inner, ay - inner) <= self.corner_radius


MARKER_SHAPES = {
    MarkerKind.SPAWN: MarkerShape(ShapeKind.CIRCLE, 5),
    MarkerKind.EXTENSION: MarkerShape(ShapeKind.SQUARE, 4),
    MarkerKind.TOWER: MarkerShape(ShapeKind.ROUNDED_SQUARE, 5, corner_radius=2),
}


@dataclass(frozen=True)
class Marker:
    """A building placed on a tile of a room."""

    id: str
    kind: MarkerKind
    room_name: str
    x: int
    y: int
    hp: Optional[int] = None

    @property
    def shape(self) -> MarkerShape:
        return MARKER_SHAPES[self.kind]


@dataclass(frozen=True)
class MarkerPlacement:
    """A marker resolved to its world-pixel center."""

    marker: Marker
    center: WorldPoint

    def contains(self, point: WorldPoint) -> bool:
        return self.marker.shape.contains(point.x - self.center.x, point.y - self.center.y)


@dataclass(frozen=True)
class MarkerSelection:
    """The selected marker and where its tooltip goes in the host frame."""

    marker: Marker
    anchor: ScreenPoint


def clamp_local_coordinate(value: object, room_size: int = 50) -> int:
    """Clamp a tile coordinate into a room; non-numeric input becomes 0."""
    number = coerce_number(value, 0.0)
    return int(min(room_size - 1, max(0, number)))


def create_marker(
    kind: MarkerKind | str,
    room_name: str,
    x: object,
    y: object,
    hp: Optional[int] = None,
    room_size: int = 50,
) -> Marker:
    """Create a new marker with clamped local coordinates."""
    kind = MarkerKind(kind)
    return Marker(
        id=f"{kind.value}-{uuid.uuid4().hex[:8]}",
        kind=kind,
        room_name=room_name,
        x=clamp_local_coordinate(x, room_size),
        y=clamp_local_coordinate(y, room_size),
        hp=hp,
    )


def tooltip_anchor(pointer: ScreenPoint, surface_rect: Rect, host_rect: Rect) -> ScreenPoint:
    """Translate a pointer position on the surface into the host's frame."""
    return ScreenPoint(
        pointer.x + surface_rect.left - host_rect.left,
        pointer.y + surface_rect.top - host_rect.top,
    )


class MarkerIndex:
    """Placed markers of the current scene, in draw order."""

    def __init__(self, layout: RoomLayout) -> None:
        self.layout = layout
        self._placements: list[MarkerPlacement] = []

    @property
    def placements(self) -> list[MarkerPlacement]:
        return list(self._placements)

    def __len__(self) -> int:
        return len(self._placements)

    def rebuild(
        self,
        markers: Iterable[Marker],
        rooms: Iterable[str],
        bounds: MapBounds,
    ) -> list[MarkerPlacement]:
        """Place markers on the loaded rooms.

        Markers pointing at a room that is not loaded, or at a malformed room
        name, are skipped.
        """
        loaded = {normalize_room_name(name) for name in rooms if is_valid_room_name(name)}
        placements = []
        skipped = 0
        for marker in markers:
            if not is_valid_room_name(marker.room_name):
                skipped += 1
                continue
            room_name = normalize_room_name(marker.room_name)
            if room_name not in loaded:
                skipped += 1
                continue
            center = self.layout.tile_center_pixels(
                room_name_to_xy(room_name), marker.x, marker.y, bounds
            )
            placements.append(MarkerPlacement(marker, center))

        if skipped:
            logger.debug(f"Skipped {skipped} marker(s) in rooms that are not loaded")
        self._placements = placements
        return self.placements

    def clear(self) -> None:
        self._placements = []

    def resolve_hit(
        self,
        screen_pos: ScreenPoint,
        transform: SurfaceTransform,
        mode: RenderMode,
    ) -> Optional[Marker]:
        """Marker under a surface position, topmost first.

        Markers are not drawn in overview mode, so nothing can be hit there.
        """
        if mode is not RenderMode.DETAIL:
            return None
        world = transform.invert(screen_pos)
        for placement in reversed(self._placements):
            if placement.contains(world):
                return placement.marker
        return None
