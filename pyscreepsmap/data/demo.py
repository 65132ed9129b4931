"""Demo map: a generated neighbourhood with a couple of buildings."""

import random
from dataclasses import dataclass, field
from typing import Optional

from pyscreepsmap.config import MapConfig
from pyscreepsmap.engine.markers import Marker, MarkerKind
from pyscreepsmap.engine.rooms import create_room_grid, room_name_to_xy
from pyscreepsmap.engine.terrain import RoomTerrain, generate_demo_terrain
from pyscreepsmap.engine.view import ViewState

DEMO_CENTER_ROOM = "W0N0"
DEMO_RADIUS = 2


@dataclass
class DemoMap:
    """Everything needed to show the demo."""

    center_room: str
    rooms: list[RoomTerrain] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)
    view: ViewState = field(default_factory=ViewState)


def centered_view(room_name: str, scale: float) -> ViewState:
    """View centered in the middle of a room."""
    center = room_name_to_xy(room_name)
    return ViewState(x=center.x + 0.5, y=center.y + 0.5, scale=scale)


def build_demo(
    config: MapConfig,
    scale: float = 78.26,
    seed: Optional[int] = None,
    center_room: str = DEMO_CENTER_ROOM,
) -> DemoMap:
    """Generate the demo rooms around ``center_room``."""
    rng = random.Random(seed)
    center = room_name_to_xy(center_room)
    rooms = [
        RoomTerrain(name, generate_demo_terrain(rng, config.room_size))
        for name in create_room_grid(center.x, center.y, DEMO_RADIUS)
    ]
    markers = [
        Marker("demo-spawn", MarkerKind.SPAWN, center_room, 24, 24, hp=5000),
        Marker("demo-tower", MarkerKind.TOWER, center_room, 20, 30, hp=3000),
    ]
    return DemoMap(
        center_room=center_room,
        rooms=rooms,
        markers=markers,
        view=centered_view(center_room, scale),
    )
