"""Room name <-> grid coordinate codec.

Room names look like ``W3N4``: a horizontal half (``W``/``E``) and a vertical
half (``N``/``S``). West and north count away from the origin starting at -1,
so ``W0N0`` is (-1, -1) and ``E0S0`` is (0, 0).
"""

import re
from typing import NamedTuple

ROOM_NAME_PATTERN = re.compile(r"([WE])([0-9]+)([NS])([0-9]+)", re.IGNORECASE)


class GridCoordinate(NamedTuple):
    """Integer position of a room in the room lattice."""

    x: int
    y: int


ORIGIN = GridCoordinate(0, 0)


def room_name_to_xy(name: object) -> GridCoordinate:
    """Decode a room name into its grid coordinate.

    Anything that is not a valid room name decodes to the origin instead of
    raising, so projection stays total over user input.
    """
    if not name or not isinstance(name, str):
        return ORIGIN

    match = ROOM_NAME_PATTERN.fullmatch(name)
    if not match:
        return ORIGIN

    h_dir, h_pos, v_dir, v_pos = match.groups()
    x = int(h_pos)
    y = int(v_pos)
    if h_dir.upper() == "W":
        x = -x - 1
    if v_dir.upper() == "N":
        y = -y - 1
    return GridCoordinate(x, y)


def xy_to_room_name(x: int, y: int) -> str:
    """Encode a grid coordinate back into a room name."""
    h_dir = "E" if x >= 0 else "W"
    h_pos = x if x >= 0 else -x - 1
    v_dir = "S" if y >= 0 else "N"
    v_pos = y if y >= 0 else -y - 1
    return f"{h_dir}{h_pos}{v_dir}{v_pos}"


def is_valid_room_name(name: object) -> bool:
    """Check whether ``name`` is a well-formed room name."""
    return isinstance(name, str) and ROOM_NAME_PATTERN.fullmatch(name) is not None


def normalize_room_name(name: object) -> str:
    """Canonical uppercase form of a room name (``w07n1`` -> ``W7N1``)."""
    coord = room_name_to_xy(name)
    return xy_to_room_name(coord.x, coord.y)


def create_room_grid(center_x: int, center_y: int, radius: int) -> list[str]:
    """Names of the square neighbourhood around a room, column by column."""
    rooms = []
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            rooms.append(xy_to_room_name(center_x + dx, center_y + dy))
    return rooms
