"""Scene building: rooms and markers as backend-neutral draw primitives.

A :class:`Scene` has a world layer, drawn under the surface transform, and an
overlay layer drawn in screen pixels (the legend).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

from pyscreepsmap.config import ColorScheme, MapConfig
from pyscreepsmap.engine.layout import MapBounds, RoomLayout
from pyscreepsmap.engine.lod import RenderMode
from pyscreepsmap.engine.markers import Marker, MarkerIndex, ShapeKind
from pyscreepsmap.engine.terrain import RoomTerrain, terrain_color

LEGEND_BOTTOM_OFFSET = 30
LEGEND_SPACING = 80
LEGEND_BOX = 15


class PrimitiveKind(Enum):
    RECT = "rect"
    ROUNDED_RECT = "rounded_rect"
    CIRCLE = "circle"
    LINE = "line"
    TEXT = "text"


@dataclass(frozen=True)
class Primitive:
    """One shape or text.

    Rects use (x, y, width, height); circles use (x, y) as center and
    ``radius``; lines go from (x, y) to (x2, y2).
    """

    kind: PrimitiveKind
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    color: int = 0
    fill: bool = True
    radius: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    line_width: float = 1.0
    alpha: float = 1.0
    text: str = ""
    font_size: int = 12
    bold: bool = False


@dataclass
class Scene:
    """Everything a surface needs to draw one frame."""

    mode: RenderMode
    bounds: MapBounds
    background: int
    world: list[Primitive] = field(default_factory=list)
    overlay: list[Primitive] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.world) + len(self.overlay)


class SceneBuilder:
    """Build the primitives for a set of rooms in a given render mode."""

    def __init__(self, config: MapConfig, colors: ColorScheme) -> None:
        self.config = config
        self.colors = colors
        self.layout = RoomLayout(config)

    def build(
        self,
        rooms: Sequence[RoomTerrain],
        markers: MarkerIndex,
        mode: RenderMode,
        surface_size: tuple[float, float],
    ) -> Scene:
        bounds = self.layout.bounds_of(room.room_name for room in rooms)
        scene = Scene(mode=mode, bounds=bounds, background=self.colors.background)

        if mode is RenderMode.OVERVIEW:
            scene.world.extend(self._overview(rooms, bounds))
            return scene

        scene.world.extend(self._terrain(rooms, bounds))
        scene.world.extend(self._grid(rooms, bounds))
        scene.world.extend(self._borders(rooms, bounds))
        scene.world.extend(self._markers(markers))
        scene.overlay.extend(self._legend(surface_size))
        return scene

    def _overview(self, rooms: Iterable[RoomTerrain], bounds: MapBounds) -> list[Primitive]:
        return [
            Primitive(
                PrimitiveKind.CIRCLE,
                *self.layout.room_center_pixels(room.coords, bounds),
                radius=self.config.overview_room_radius,
                color=self.colors.overview_room,
            )
            for room in rooms
        ]

    def _terrain(self, rooms: Iterable[RoomTerrain], bounds: MapBounds) -> list[Primitive]:
        """Tiles as horizontal runs of equal color."""
        tile = self.layout.tile_size
        primitives = []
        for room in rooms:
            origin = self.layout.room_origin_pixels(room.coords, bounds)
            for y, row in enumerate(room.tiles(self.config.room_size)):
                start = 0
                color = terrain_color(row[0], self.colors)
                for x in range(1, len(row) + 1):
                    next_color = terrain_color(row[x], self.colors) if x < len(row) else None
                    if next_color == color:
                        continue
                    primitives.append(
                        Primitive(
                            PrimitiveKind.RECT,
                            origin.x + start * tile,
                            origin.y + y * tile,
                            width=(x - start) * tile,
                            height=tile,
                            color=color,
                        )
                    )
                    start = x
                    if next_color is not None:
                        color = next_color
        return primitives

    def _grid(self, rooms: Iterable[RoomTerrain], bounds: MapBounds) -> list[Primitive]:
        tile = self.layout.tile_size
        room_px = self.layout.room_px
        primitives = []
        for room in rooms:
            origin = self.layout.room_origin_pixels(room.coords, bounds)
            for i in range(self.config.room_size + 1):
                offset = i * tile
                primitives.append(
                    Primitive(
                        PrimitiveKind.LINE,
                        origin.x,
                        origin.y + offset,
                        x2=origin.x + room_px,
                        y2=origin.y + offset,
                        color=self.colors.grid,
                        line_width=0.5,
                        alpha=0.3,
                    )
                )
                primitives.append(
                    Primitive(
                        PrimitiveKind.LINE,
                        origin.x + offset,
                        origin.y,
                        x2=origin.x + offset,
                        y2=origin.y + room_px,
                        color=self.colors.grid,
                        line_width=0.5,
                        alpha=0.3,
                    )
                )
        return primitives

    def _borders(self, rooms: Iterable[RoomTerrain], bounds: MapBounds) -> list[Primitive]:
        room_px = self.layout.room_px
        primitives = []
        for room in rooms:
            origin = self.layout.room_origin_pixels(room.coords, bounds)
            primitives.append(
                Primitive(
                    PrimitiveKind.RECT,
                    origin.x,
                    origin.y,
                    width=room_px,
                    height=room_px,
                    color=self.colors.room_border,
                    fill=False,
                    line_width=2,
                    alpha=0.9,
                )
            )
            primitives.append(
                Primitive(
                    PrimitiveKind.TEXT,
                    origin.x + 6,
                    origin.y + 6,
                    color=self.colors.room_label,
                    text=room.room_name,
                    font_size=14,
                    bold=True,
                )
            )
        return primitives

    def _markers(self, markers: MarkerIndex) -> list[Primitive]:
        primitives = []
        for placement in markers.placements:
            marker: Marker = placement.marker
            shape = marker.shape
            color = self.colors.marker_color(marker.kind.value)
            cx, cy = placement.center
            if shape.kind is ShapeKind.CIRCLE:
                primitives.append(
                    Primitive(PrimitiveKind.CIRCLE, cx, cy, radius=shape.half_size, color=color)
                )
                continue
            kind = PrimitiveKind.ROUNDED_RECT if shape.corner_radius else PrimitiveKind.RECT
            size = shape.half_size * 2
            primitives.append(
                Primitive(
                    kind,
                    cx - shape.half_size,
                    cy - shape.half_size,
                    width=size,
                    height=size,
                    radius=shape.corner_radius,
                    color=color,
                )
            )
        return primitives

    def _legend(self, surface_size: tuple[float, float]) -> list[Primitive]:
        """Terrain legend pinned to the bottom-left corner of the surface."""
        top = max(10, surface_size[1] - LEGEND_BOTTOM_OFFSET)
        items = [
            (self.colors.plain, "Plain"),
            (self.colors.wall, "Wall"),
            (self.colors.swamp, "Swamp"),
        ]
        primitives = []
        for index, (color, label) in enumerate(items):
            left = 10 + index * LEGEND_SPACING
            primitives.append(
                Primitive(
                    PrimitiveKind.RECT, left, top, width=LEGEND_BOX, height=LEGEND_BOX, color=color
                )
            )
            primitives.append(
                Primitive(
                    PrimitiveKind.TEXT,
                    left + LEGEND_BOX + 5,
                    top,
                    color=self.colors.room_label,
                    text=label,
                    font_size=12,
                )
            )
        return primitives
