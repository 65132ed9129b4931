"""Room terrain: parsing, sources and the SQLite cache."""

import logging
import random
import sqlite3
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Optional

from pyscreepsmap.config import SHARDS, ColorScheme
from pyscreepsmap.engine.rooms import (
    GridCoordinate,
    create_room_grid,
    is_valid_room_name,
    normalize_room_name,
    room_name_to_xy,
)

logger = logging.getLogger(__name__)

TERRAIN_MASK_WALL = 1
TERRAIN_MASK_SWAMP = 2


class TerrainError(Exception):
    """Raised when terrain for a room cannot be obtained."""

    pass


class TerrainType(IntEnum):
    """Tile terrain codes."""

    PLAIN = 0
    WALL = 1
    SWAMP = 2


def terrain_color(code: int, colors: ColorScheme) -> int:
    """Fill color for a tile code; walls win over swamps."""
    if code & TERRAIN_MASK_WALL:
        return colors.wall
    if code & TERRAIN_MASK_SWAMP:
        return colors.swamp
    return colors.plain


def parse_terrain(terrain: str, room_size: int = 50) -> list[list[int]]:
    """Split a row-major digit string into rows of tile codes.

    Characters that are missing or not digits read as plain.
    """
    rows = []
    for y in range(room_size):
        row = []
        for x in range(room_size):
            index = y * room_size + x
            char = terrain[index] if index < len(terrain) else ""
            row.append(int(char) if char and char in "0123456789" else TerrainType.PLAIN)
        rows.append(row)
    return rows


@dataclass(frozen=True)
class RoomTerrain:
    """Terrain of one loaded room."""

    room_name: str
    terrain: str

    @property
    def coords(self) -> GridCoordinate:
        return room_name_to_xy(self.room_name)

    def tiles(self, room_size: int = 50) -> list[list[int]]:
        return parse_terrain(self.terrain, room_size)


def generate_demo_terrain(rng: Optional[random.Random] = None, room_size: int = 50) -> str:
    """Random terrain with a solid wall border."""
    rng = rng or random.Random()
    last = room_size - 1
    chars = []
    for y in range(room_size):
        for x in range(room_size):
            if x in (0, last) or y in (0, last):
                chars.append("1")
                continue
            roll = rng.random()
            if roll < 0.1:
                chars.append("1")
            elif roll < 0.25:
                chars.append("2")
            else:
                chars.append("0")
    return "".join(chars)


class TerrainSource(ABC):
    """Somewhere terrain strings come from."""

    @abstractmethod
    def fetch(self, room_name: str, shard: str) -> str:
        """Return the terrain string for a room, or raise TerrainError."""


class TerrainCache:
    """SQLite key-value store of terrain strings keyed by shard and room."""

    def __init__(self, db_path: Path) -> None:
        """Initialize database connection."""
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: Optional[sqlite3.Connection] = None
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(str(self.db_path))
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS terrain (
                shard TEXT NOT NULL,
                room_name TEXT NOT NULL,
                terrain TEXT NOT NULL,
                updated_at INTEGER NOT NULL,
                PRIMARY KEY (shard, room_name)
            )
        """)
        conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def get_terrain(self, shard: str, room_name: str) -> Optional[str]:
        """Cached terrain for a room, or None."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT terrain FROM terrain WHERE shard = ? AND room_name = ?",
            (shard, normalize_room_name(room_name)),
        )
        row = cursor.fetchone()
        return row["terrain"] if row else None

    def save_terrain(self, shard: str, room_name: str, terrain: str) -> None:
        """Store or replace the terrain of a room."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT OR REPLACE INTO terrain (shard, room_name, terrain, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (shard, normalize_room_name(room_name), terrain, int(time.time() * 1000)),
        )
        conn.commit()

    def list_rooms(self, shard: str) -> list[str]:
        """Room names cached for a shard."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT room_name FROM terrain WHERE shard = ? ORDER BY room_name", (shard,)
        )
        return [row["room_name"] for row in cursor.fetchall()]


class CachedTerrainSource(TerrainSource):
    """Serve terrain from the cache, asking an upstream source on a miss."""

    def __init__(self, cache: TerrainCache, upstream: Optional[TerrainSource] = None) -> None:
        self.cache = cache
        self.upstream = upstream

    def fetch(self, room_name: str, shard: str) -> str:
        cached = self.cache.get_terrain(shard, room_name)
        if cached:
            return cached
        if self.upstream is None:
            raise TerrainError(f"No cached terrain for {room_name} on {shard}")

        terrain = self.upstream.fetch(room_name, shard)
        self.cache.save_terrain(shard, room_name, terrain)
        return terrain


class DemoTerrainSource(TerrainSource):
    """Generated terrain, stable per shard and room."""

    def __init__(self, seed: int = 0, room_size: int = 50) -> None:
        self.seed = seed
        self.room_size = room_size

    def fetch(self, room_name: str, shard: str) -> str:
        rng = random.Random(f"{self.seed}:{shard}:{normalize_room_name(room_name)}")
        return generate_demo_terrain(rng, self.room_size)


def load_rooms(
    center_room: str,
    radius: int,
    shard: str,
    source: TerrainSource,
) -> tuple[list[RoomTerrain], list[str]]:
    """Load the neighbourhood around a room.

    Returns the rooms that loaded and one error line per room that did not.
    """
    if shard not in SHARDS:
        raise TerrainError(f"Unknown shard {shard!r}")
    if not is_valid_room_name(center_room):
        logger.warning(f"Invalid room name {center_room!r}, using the origin room")

    center = room_name_to_xy(center_room)
    rooms: list[RoomTerrain] = []
    errors: list[str] = []
    for name in create_room_grid(center.x, center.y, radius):
        try:
            rooms.append(RoomTerrain(name, source.fetch(name, shard)))
        except TerrainError as e:
            errors.append(f"{name}: {e}")

    logger.info(f"Loaded {len(rooms)} room(s) around {center_room} on {shard}")
    if errors:
        logger.warning(f"{len(errors)} room(s) failed to load")
    return rooms, errors
