"""Tests for building markers."""

import pytest

from pyscreepsmap.engine.layout import MapBounds, RoomLayout, WorldPoint
from pyscreepsmap.engine.lod import RenderMode
from pyscreepsmap.engine.markers import (
    MARKER_SHAPES,
    Marker,
    MarkerIndex,
    MarkerKind,
    ShapeKind,
    clamp_local_coordinate,
    create_marker,
    tooltip_anchor,
)
from pyscreepsmap.engine.projection import Rect, ScreenPoint, SurfaceTransform

IDENTITY = SurfaceTransform(0, 0, 1.0)


@pytest.fixture
def index(map_config):
    """Index with a spawn, an extension and a tower in E0S0."""
    index = MarkerIndex(RoomLayout(map_config))
    index.rebuild(
        [
            Marker("s", MarkerKind.SPAWN, "E0S0", 10, 10),
            Marker("e", MarkerKind.EXTENSION, "E0S0", 20, 10),
            Marker("t", MarkerKind.TOWER, "E0S0", 30, 10),
        ],
        ["E0S0"],
        MapBounds(),
    )
    return index


class TestCreateMarker:
    """Tests for marker creation."""

    @pytest.mark.parametrize(
        "value, expected",
        [(-5, 0), (60, 49), ("abc", 0), (None, 0), ("12", 12), (24.7, 24), (49, 49)],
    )
    def test_clamp_local_coordinate(self, value, expected):
        """Test clamping of tile coordinates into the room."""
        assert clamp_local_coordinate(value) == expected

    def test_create_clamps(self):
        """Test that created markers have clamped coordinates."""
        marker = create_marker("spawn", "W0N0", -5, 60)
        assert marker.kind is MarkerKind.SPAWN
        assert (marker.x, marker.y) == (0, 49)
        assert marker.id.startswith("spawn-")

    def test_ids_are_unique(self):
        """Test that two markers in the same place get different ids."""
        a = create_marker(MarkerKind.TOWER, "W0N0", 1, 1)
        b = create_marker(MarkerKind.TOWER, "W0N0", 1, 1)
        assert a.id != b.id

    def test_unknown_kind(self):
        """Test that an unknown kind is rejected."""
        with pytest.raises(ValueError):
            create_marker("rampart", "W0N0", 1, 1)

    def test_label(self):
        """Test display labels."""
        assert MarkerKind.EXTENSION.label == "Extension"


class TestShapes:
    """Tests for marker hit shapes."""

    def test_shape_table(self):
        """Test the shape of each kind."""
        assert MARKER_SHAPES[MarkerKind.SPAWN].kind is ShapeKind.CIRCLE
        assert MARKER_SHAPES[MarkerKind.EXTENSION].kind is ShapeKind.SQUARE
        assert MARKER_SHAPES[MarkerKind.TOWER].corner_radius == 2

    def test_circle(self):
        """Test the spawn circle of radius 5."""
        shape = MARKER_SHAPES[MarkerKind.SPAWN]
        assert shape.contains(0, 0)
        assert shape.contains(3, 4)
        assert not shape.contains(4, 4)

    def test_rounded_corner(self):
        """Test that the tower's corners are cut off."""
        shape = MARKER_SHAPES[MarkerKind.TOWER]
        assert shape.contains(5, 0)
        assert shape.contains(4, 4)
        assert not shape.contains(4.9, 4.9)
        assert not shape.contains(5.1, 0)


class TestResolveHit:
    """Tests for hit-testing."""

    def test_spawn(self, index):
        """Test hits on the spawn circle."""
        assert index.resolve_hit(ScreenPoint(145, 145), IDENTITY, RenderMode.DETAIL).id == "s"
        assert index.resolve_hit(ScreenPoint(149, 145), IDENTITY, RenderMode.DETAIL).id == "s"
        assert index.resolve_hit(ScreenPoint(151, 145), IDENTITY, RenderMode.DETAIL) is None

    def test_extension(self, index):
        """Test hits on the extension square."""
        assert index.resolve_hit(ScreenPoint(249, 149), IDENTITY, RenderMode.DETAIL).id == "e"
        assert index.resolve_hit(ScreenPoint(250, 145), IDENTITY, RenderMode.DETAIL) is None

    def test_tower(self, index):
        """Test hits on the tower's rounded square."""
        assert index.resolve_hit(ScreenPoint(350, 145), IDENTITY, RenderMode.DETAIL).id == "t"
        assert index.resolve_hit(ScreenPoint(349, 149), IDENTITY, RenderMode.DETAIL).id == "t"
        assert index.resolve_hit(ScreenPoint(349.9, 149.9), IDENTITY, RenderMode.DETAIL) is None

    def test_under_transform(self, index):
        """Test that the surface transform is inverted before testing."""
        transform = SurfaceTransform(100, 50, 2.0)
        assert index.resolve_hit(ScreenPoint(390, 340), transform, RenderMode.DETAIL).id == "s"
        assert index.resolve_hit(ScreenPoint(145, 145), transform, RenderMode.DETAIL) is None

    def test_overview_never_hits(self, index):
        """Test that nothing is hit in overview mode."""
        assert index.resolve_hit(ScreenPoint(145, 145), IDENTITY, RenderMode.OVERVIEW) is None

    def test_topmost_wins(self, map_config):
        """Test that the last drawn marker wins on overlap."""
        index = MarkerIndex(RoomLayout(map_config))
        index.rebuild(
            [
                Marker("below", MarkerKind.SPAWN, "E0S0", 10, 10),
                Marker("above", MarkerKind.EXTENSION, "E0S0", 10, 10),
            ],
            ["E0S0"],
            MapBounds(),
        )
        assert index.resolve_hit(ScreenPoint(145, 145), IDENTITY, RenderMode.DETAIL).id == "above"


class TestRebuild:
    """Tests for placing markers on the loaded rooms."""

    def test_skips_unloaded_rooms(self, map_config, three_rooms, three_room_bounds):
        """Test that markers in rooms that are not loaded are dropped."""
        index = MarkerIndex(RoomLayout(map_config))
        placements = index.rebuild(
            [
                Marker("a", MarkerKind.SPAWN, "E5S5", 1, 1),
                Marker("b", MarkerKind.TOWER, "E5S5", 2, 2),
            ],
            three_rooms,
            three_room_bounds,
        )
        assert placements == []
        assert len(index) == 0

    def test_skips_malformed_room_names(self, map_config):
        """Test that a bad room name is not mistaken for the origin room."""
        index = MarkerIndex(RoomLayout(map_config))
        placements = index.rebuild(
            [
                Marker("a", MarkerKind.SPAWN, "bogus", 1, 1),
                Marker("b", MarkerKind.TOWER, "", 2, 2),
                Marker("c", MarkerKind.EXTENSION, "E0S0", 3, 3),
            ],
            ["E0S0", "not-a-room"],
            MapBounds(),
        )
        assert [placement.marker.id for placement in placements] == ["c"]

    def test_room_names_are_normalized(self, map_config, three_room_bounds):
        """Test that lowercase marker rooms match loaded rooms."""
        index = MarkerIndex(RoomLayout(map_config))
        index.rebuild([Marker("a", MarkerKind.SPAWN, "w0n0", 0, 0)], ["W0N0"], three_room_bounds)
        assert len(index) == 1
        # W0N0 is one room right of the bounds minimum
        assert index.placements[0].center == WorldPoint(545, 45)

    def test_clear(self, index):
        """Test clearing the index."""
        index.clear()
        assert len(index) == 0


class TestTooltipAnchor:
    """Tests for tooltip placement."""

    def test_translates_into_host_frame(self):
        """Test pointer + surface origin - host origin."""
        anchor = tooltip_anchor(
            ScreenPoint(100, 50), Rect(310, 120, 800, 600), Rect(300, 100, 1000, 700)
        )
        assert anchor == ScreenPoint(110, 70)

    def test_same_rect(self):
        """Test that identical rects leave the pointer unchanged."""
        rect = Rect(10, 20, 800, 600)
        assert tooltip_anchor(ScreenPoint(5, 6), rect, rect) == ScreenPoint(5, 6)
