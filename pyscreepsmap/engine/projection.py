"""Projection between room-grid, world-pixel and screen-pixel space.

A drawing surface holds a :class:`SurfaceTransform` (translation + uniform
scale) that maps world pixels to screen pixels. :meth:`ProjectionEngine.project`
derives that transform from a :class:`ViewState`; :meth:`unproject` recovers
the grid position from a transform, so a view pushed through one and back
through the other comes out unchanged up to rounding.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from pyscreepsmap.config import MapConfig
from pyscreepsmap.engine.layout import GridPosition, MapBounds, RoomLayout, WorldPoint
from pyscreepsmap.engine.view import ViewState, clamp_scale, round_to_precision


class ScreenPoint(NamedTuple):
    """Pixel position on the drawing surface."""

    x: float
    y: float


@dataclass(frozen=True)
class SurfaceTransform:
    """Translation and scale ratio applied to the world layer of a surface."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale_ratio: float = 1.0

    @property
    def offset(self) -> ScreenPoint:
        return ScreenPoint(self.offset_x, self.offset_y)

    def apply(self, point: WorldPoint) -> ScreenPoint:
        """World pixels -> screen pixels."""
        return ScreenPoint(
            point.x * self.scale_ratio + self.offset_x,
            point.y * self.scale_ratio + self.offset_y,
        )

    def invert(self, point: ScreenPoint) -> WorldPoint:
        """Screen pixels -> world pixels."""
        return WorldPoint(
            (point.x - self.offset_x) / self.scale_ratio,
            (point.y - self.offset_y) / self.scale_ratio,
        )

    def moved_to(self, offset_x: float, offset_y: float) -> "SurfaceTransform":
        return SurfaceTransform(offset_x, offset_y, self.scale_ratio)

    def scaled_to(self, scale_ratio: float) -> "SurfaceTransform":
        return SurfaceTransform(self.offset_x, self.offset_y, scale_ratio)


class ProjectionEngine:
    """Convert between the three coordinate frames of the map."""

    def __init__(self, config: MapConfig) -> None:
        self.config = config
        self.layout = RoomLayout(config)

    def clamp_scale(self, scale: float) -> float:
        return clamp_scale(scale, self.config)

    def scale_ratio(self, scale: float) -> float:
        """Clamped scale percentage as a multiplier."""
        return self.clamp_scale(scale) / 100

    def world_pixels(
        self,
        position: GridPosition,
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> WorldPoint:
        return self.layout.world_pixels(position, bounds, margin)

    def transform_for(
        self,
        view: ViewState,
        surface_size: tuple[float, float],
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> SurfaceTransform:
        """Transform that puts ``view.position`` at the surface center."""
        ratio = self.scale_ratio(view.scale)
        target = self.world_pixels(view.position, bounds, margin)
        width, height = surface_size
        return SurfaceTransform(
            offset_x=width / 2 - target.x * ratio,
            offset_y=height / 2 - target.y * ratio,
            scale_ratio=ratio,
        )

    def project(
        self,
        position: GridPosition,
        view: ViewState,
        surface_size: tuple[float, float],
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> ScreenPoint:
        """Screen position of a grid position under the given view."""
        transform = self.transform_for(view, surface_size, bounds, margin)
        return transform.apply(self.world_pixels(position, bounds, margin))

    def unproject(
        self,
        screen_pos: ScreenPoint,
        container_offset: ScreenPoint,
        scale_ratio: float,
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> GridPosition:
        """Grid position under ``screen_pos``, rounded to the view precision.

        Args:
            screen_pos: Point on the surface, usually its center.
            container_offset: Current translation of the world layer.
            scale_ratio: Current scale of the world layer.
            bounds: Bounds the world layer was laid out with.
            margin: Margin override, defaults to the configured margin.
        """
        transform = SurfaceTransform(container_offset.x, container_offset.y, scale_ratio)
        world = transform.invert(screen_pos)
        position = self.layout.room_position(world, bounds, margin)
        precision = self.config.precision
        return GridPosition(
            round_to_precision(position.x, precision),
            round_to_precision(position.y, precision),
        )

    def view_from_transform(
        self,
        transform: SurfaceTransform,
        surface_size: tuple[float, float],
        bounds: MapBounds,
        margin: Optional[float] = None,
    ) -> ViewState:
        """Canonical view for a surface: its center position and scale."""
        width, height = surface_size
        center = ScreenPoint(width / 2, height / 2)
        position = self.unproject(center, transform.offset, transform.scale_ratio, bounds, margin)
        scale = round_to_precision(transform.scale_ratio * 100, self.config.precision)
        return ViewState(x=position.x, y=position.y, scale=scale)


class Rect(NamedTuple):
    """Axis-aligned rectangle in some pixel frame."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, point: ScreenPoint) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom
