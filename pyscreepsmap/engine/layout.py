"""Room layout in world-pixel space.

World pixels lay rooms out at 1:1 tile size, independent of the current view.
The room with the smallest grid coordinate sits at ``(margin, margin)``.
"""

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

from pyscreepsmap.config import MapConfig
from pyscreepsmap.engine.rooms import GridCoordinate, room_name_to_xy


class WorldPoint(NamedTuple):
    """Unscaled pixel position in the assembled map."""

    x: float
    y: float


class GridPosition(NamedTuple):
    """Fractional room-grid position (20.5 is the middle of room 20)."""

    x: float
    y: float


@dataclass(frozen=True)
class MapBounds:
    """Bounding box of the loaded rooms, in grid coordinates."""

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    @property
    def columns(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def rows(self) -> int:
        return self.max_y - self.min_y + 1


class RoomLayout:
    """Fixed room geometry and world-pixel placement of rooms."""

    def __init__(self, config: MapConfig) -> None:
        self.config = config
        self.room_size = config.room_size
        self.tile_size = config.tile_size
        self.room_px = config.room_px
        self.margin = config.margin

    def bounds_of(self, rooms: Iterable[str]) -> MapBounds:
        """Compute the bounds of a set of room names.

        An empty set yields the zero bounds.
        """
        coords = [room_name_to_xy(name) for name in rooms]
        if not coords:
            return MapBounds()
        xs = [c.x for c in coords]
        ys = [c.y for c in coords]
        return MapBounds(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))

    def _margin(self, margin: Optional[float]) -> float:
        return self.margin if margin is None else margin

    def room_origin_pixels(
        self,
        coord: GridCoordinate,
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> WorldPoint:
        """World-pixel position of a room's top-left tile."""
        return self.world_pixels(GridPosition(coord.x, coord.y), bounds, margin)

    def world_pixels(
        self,
        position: GridPosition,
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> WorldPoint:
        """World-pixel position of a (possibly fractional) grid position."""
        margin = self._margin(margin)
        return WorldPoint(
            (position.x - bounds.min_x) * self.room_px + margin,
            (position.y - bounds.min_y) * self.room_px + margin,
        )

    def room_position(
        self,
        point: WorldPoint,
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> GridPosition:
        """Inverse of :meth:`world_pixels`."""
        margin = self._margin(margin)
        return GridPosition(
            (point.x - margin) / self.room_px + bounds.min_x,
            (point.y - margin) / self.room_px + bounds.min_y,
        )

    def room_center_pixels(self, coord: GridCoordinate, bounds: MapBounds) -> WorldPoint:
        origin = self.room_origin_pixels(coord, bounds)
        return WorldPoint(origin.x + self.room_px / 2, origin.y + self.room_px / 2)

    def tile_center_pixels(
        self, coord: GridCoordinate, local_x: int, local_y: int, bounds: MapBounds
    ) -> WorldPoint:
        """World-pixel center of one tile inside a room."""
        origin = self.room_origin_pixels(coord, bounds)
        return WorldPoint(
            origin.x + local_x * self.tile_size + self.tile_size / 2,
            origin.y + local_y * self.tile_size + self.tile_size / 2,
        )

    def world_size(self, bounds: MapBounds) -> tuple[float, float]:
        """Size of the assembled map including margins on both sides."""
        return (
            bounds.columns * self.room_px + 2 * self.margin,
            bounds.rows * self.room_px + 2 * self.margin,
        )
