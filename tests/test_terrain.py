"""Tests for terrain parsing, sources and the terrain cache."""

import random

import pytest

from pyscreepsmap.engine.terrain import (
    CachedTerrainSource,
    DemoTerrainSource,
    RoomTerrain,
    TerrainCache,
    TerrainError,
    TerrainSource,
    TerrainType,
    generate_demo_terrain,
    load_rooms,
    parse_terrain,
    terrain_color,
)


class FlakySource(TerrainSource):
    """Source that fails for some rooms and counts requests."""

    def __init__(self, missing=()):
        self.missing = set(missing)
        self.requests = []

    def fetch(self, room_name, shard):
        self.requests.append((room_name, shard))
        if room_name in self.missing:
            raise TerrainError("not found")
        return "0" * 2500


@pytest.fixture
def cache(tmp_path):
    """Terrain cache in a temporary directory."""
    cache = TerrainCache(tmp_path / "cache" / "terrain.db")
    yield cache
    cache.close()


class TestParseTerrain:
    """Tests for terrain strings."""

    def test_row_major(self):
        """Test that the string is read row by row."""
        terrain = "0" * 50 + "1" + "2" * 49 + "0" * 2400
        rows = parse_terrain(terrain)
        assert len(rows) == 50
        assert all(len(row) == 50 for row in rows)
        assert rows[0] == [0] * 50
        assert rows[1][0] == TerrainType.WALL
        assert rows[1][1:] == [2] * 49

    def test_short_and_bad_input(self):
        """Test that missing and non-digit characters read as plain."""
        rows = parse_terrain("1x?")
        assert rows[0][:4] == [1, 0, 0, 0]
        assert rows[49][49] == 0

    def test_unicode_digits_are_plain(self):
        """Test that only ASCII digits are tile codes."""
        assert parse_terrain("٣")[0][0] == 0

    def test_colors(self, colors):
        """Test tile colors; walls take precedence."""
        assert terrain_color(0, colors) == colors.plain
        assert terrain_color(1, colors) == colors.wall
        assert terrain_color(2, colors) == colors.swamp
        assert terrain_color(3, colors) == colors.wall

    def test_room_terrain(self):
        """Test the loaded-room value."""
        room = RoomTerrain("W1N0", "2" * 2500)
        assert room.coords == (-2, -1)
        assert room.tiles()[10][10] == TerrainType.SWAMP


class TestDemoTerrain:
    """Tests for generated terrain."""

    def test_border_is_wall(self):
        """Test the solid wall border."""
        rows = parse_terrain(generate_demo_terrain(random.Random(1)))
        assert rows[0] == [1] * 50
        assert rows[49] == [1] * 50
        assert all(row[0] == 1 and row[49] == 1 for row in rows)

    def test_length_and_alphabet(self):
        """Test that the string has one digit per tile."""
        terrain = generate_demo_terrain(random.Random(2))
        assert len(terrain) == 2500
        assert set(terrain) <= {"0", "1", "2"}

    def test_source_is_deterministic(self):
        """Test that the demo source is stable per room and shard."""
        source = DemoTerrainSource(seed=7)
        assert source.fetch("W0N0", "shard0") == source.fetch("w0n0", "shard0")
        assert source.fetch("W0N0", "shard0") != source.fetch("W1N0", "shard0")
        assert DemoTerrainSource(seed=7).fetch("E3S3", "shard1") == source.fetch("E3S3", "shard1")


class TestTerrainCache:
    """Tests for the SQLite terrain cache."""

    def test_miss(self, cache):
        """Test that an unknown room is None."""
        assert cache.get_terrain("shard0", "W0N0") is None

    def test_save_and_get(self, cache):
        """Test storing terrain under a normalized room name."""
        cache.save_terrain("shard0", "w0n0", "1" * 2500)
        assert cache.get_terrain("shard0", "W0N0") == "1" * 2500
        assert cache.get_terrain("shard1", "W0N0") is None

    def test_replace(self, cache):
        """Test that saving again replaces the terrain."""
        cache.save_terrain("shard0", "W0N0", "1" * 2500)
        cache.save_terrain("shard0", "W0N0", "2" * 2500)
        assert cache.get_terrain("shard0", "W0N0") == "2" * 2500
        assert cache.list_rooms("shard0") == ["W0N0"]

    def test_persists(self, tmp_path):
        """Test that terrain survives reopening the database."""
        path = tmp_path / "terrain.db"
        first = TerrainCache(path)
        first.save_terrain("shard3", "E1S1", "0" * 2500)
        first.close()
        second = TerrainCache(path)
        assert second.list_rooms("shard3") == ["E1S1"]
        second.close()


class TestCachedSource:
    """Tests for the cache-backed source."""

    def test_miss_without_upstream(self, cache):
        """Test that a miss with nothing upstream is an error."""
        with pytest.raises(TerrainError):
            CachedTerrainSource(cache).fetch("W0N0", "shard0")

    def test_upstream_fills_cache(self, cache):
        """Test that upstream terrain is cached and reused."""
        upstream = FlakySource()
        source = CachedTerrainSource(cache, upstream)
        assert source.fetch("W0N0", "shard0") == "0" * 2500
        assert source.fetch("W0N0", "shard0") == "0" * 2500
        assert len(upstream.requests) == 1
        assert cache.get_terrain("shard0", "W0N0") == "0" * 2500

    def test_upstream_error_propagates(self, cache):
        """Test that upstream failures are not cached."""
        source = CachedTerrainSource(cache, FlakySource(missing={"W0N0"}))
        with pytest.raises(TerrainError):
            source.fetch("W0N0", "shard0")
        assert cache.get_terrain("shard0", "W0N0") is None


class TestLoadRooms:
    """Tests for loading a neighbourhood."""

    def test_loads_grid(self):
        """Test that radius 1 loads nine rooms."""
        source = FlakySource()
        rooms, errors = load_rooms("W0N0", 1, "shard3", source)
        assert len(rooms) == 9
        assert errors == []
        assert all(shard == "shard3" for _, shard in source.requests)

    def test_partial_failure(self):
        """Test that failed rooms are reported and the rest still load."""
        rooms, errors = load_rooms("W0N0", 1, "shard0", FlakySource(missing={"W1N1", "E0S0"}))
        assert len(rooms) == 7
        assert sorted(errors) == ["E0S0: not found", "W1N1: not found"]
        assert "W1N1" not in [room.room_name for room in rooms]

    def test_unknown_shard(self):
        """Test that an unknown shard is rejected."""
        with pytest.raises(TerrainError):
            load_rooms("W0N0", 1, "shard9", FlakySource())

    def test_invalid_room_uses_origin(self):
        """Test that a malformed center room falls back to E0S0."""
        rooms, _ = load_rooms("nowhere", 0, "shard0", FlakySource())
        assert [room.room_name for room in rooms] == ["E0S0"]
