"""Tests for layout, view normalization, projection and level of detail."""

import math

import pytest

from pyscreepsmap.config import MapConfig
from pyscreepsmap.engine.layout import GridPosition, MapBounds, RoomLayout, WorldPoint
from pyscreepsmap.engine.lod import LevelOfDetailSelector, RenderMode
from pyscreepsmap.engine.projection import ScreenPoint, SurfaceTransform
from pyscreepsmap.engine.rooms import GridCoordinate
from pyscreepsmap.engine.view import (
    ViewState,
    clamp_scale,
    coerce_number,
    round_to_precision,
)


class TestLayout:
    """Tests for world-pixel room layout."""

    def test_bounds(self, map_config, three_rooms, three_room_bounds):
        """Test bounds of a set of rooms."""
        layout = RoomLayout(map_config)
        assert layout.bounds_of(three_rooms) == three_room_bounds

    def test_empty_bounds(self, map_config):
        """Test that no rooms give the zero bounds."""
        assert RoomLayout(map_config).bounds_of([]) == MapBounds(0, 0, 0, 0)

    def test_min_room_at_margin(self, map_config, three_room_bounds):
        """Test that the smallest room's origin sits at the margin."""
        layout = RoomLayout(map_config)
        origin = layout.room_origin_pixels(GridCoordinate(-2, -1), three_room_bounds)
        assert origin == WorldPoint(40, 40)
        origin = layout.room_origin_pixels(GridCoordinate(0, -1), three_room_bounds)
        assert origin == WorldPoint(1040, 40)

    def test_tile_center(self, map_config):
        """Test the world-pixel center of a tile."""
        layout = RoomLayout(map_config)
        center = layout.tile_center_pixels(GridCoordinate(0, 0), 10, 10, MapBounds())
        assert center == WorldPoint(145, 145)

    def test_room_position_inverts_world_pixels(self, map_config, three_room_bounds):
        """Test that room_position undoes world_pixels."""
        layout = RoomLayout(map_config)
        position = GridPosition(-1.25, -0.75)
        back = layout.room_position(layout.world_pixels(position, three_room_bounds), three_room_bounds)
        assert back.x == pytest.approx(position.x)
        assert back.y == pytest.approx(position.y)

    def test_world_size(self, map_config, three_room_bounds):
        """Test assembled map size with margins."""
        assert RoomLayout(map_config).world_size(three_room_bounds) == (1580, 580)


class TestViewNormalization:
    """Tests for view coercion and clamping."""

    @pytest.mark.parametrize(
        "scale, expected",
        [(10, 30), (30, 30), (78.26, 78.26), (300, 300), (1000, 300), (-5, 30)],
    )
    def test_clamp_scale(self, map_config, scale, expected):
        """Test that scale is clamped into [30, 300]."""
        assert clamp_scale(scale, map_config) == expected

    def test_non_numeric_fields(self, map_config):
        """Test that non-numeric input becomes zero before clamping."""
        view = ViewState(x="abc", y=None, scale="big").normalized(map_config)
        assert view == ViewState(0.0, 0.0, 30.0)

    def test_numeric_strings_are_accepted(self, map_config):
        """Test that numeric form text is parsed."""
        view = ViewState(x="20.5", y="-3", scale="150").normalized(map_config)
        assert view == ViewState(20.5, -3.0, 150.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), True, object()])
    def test_coerce_rejects(self, value):
        """Test values that are not usable numbers."""
        assert coerce_number(value, 7.0) == 7.0

    def test_round_half_up(self):
        """Test rounding to two decimals."""
        assert round_to_precision(1.234) == 1.23
        assert round_to_precision(0.125) == 0.13
        assert round_to_precision(-0.125) == -0.12
        assert round_to_precision(52.391, 1) == 52.4


class TestProjection:
    """Tests for project and unproject."""

    def test_scale_ratio_clamps(self, engine):
        """Test that the ratio comes from the clamped scale."""
        assert engine.scale_ratio(10) == pytest.approx(0.3)
        assert engine.scale_ratio(1000) == pytest.approx(3.0)
        assert engine.scale_ratio(150) == pytest.approx(1.5)

    def test_view_position_at_surface_center(self, engine, three_room_bounds):
        """Test that the view position projects onto the surface center."""
        view = ViewState(-0.5, -0.5, 150)
        screen = engine.project(view.position, view, (800, 600), three_room_bounds)
        assert screen.x == pytest.approx(400)
        assert screen.y == pytest.approx(300)

    def test_projection_scales_distances(self, engine, three_room_bounds):
        """Test that one room step is room_px * ratio screen pixels."""
        view = ViewState(-1.5, -0.5, 150)
        a = engine.project(GridPosition(-1.5, -0.5), view, (800, 600), three_room_bounds)
        b = engine.project(GridPosition(-0.5, -0.5), view, (800, 600), three_room_bounds)
        assert b.x - a.x == pytest.approx(750)
        assert b.y == pytest.approx(a.y)

    @pytest.mark.parametrize(
        "view",
        [ViewState(-0.5, -0.5, 150), ViewState(-1.9, -0.2, 30), ViewState(0.33, -0.91, 300)],
    )
    def test_round_trip(self, engine, three_room_bounds, view):
        """Test that unproject(project(p)) recovers p within the precision."""
        size = (800, 600)
        transform = engine.transform_for(view, size, three_room_bounds)
        for position in [GridPosition(-1.25, -0.75), GridPosition(-0.5, -0.5), GridPosition(0.9, 0.1)]:
            screen = engine.project(position, view, size, three_room_bounds)
            back = engine.unproject(screen, transform.offset, transform.scale_ratio, three_room_bounds)
            assert abs(back.x - position.x) <= 0.01
            assert abs(back.y - position.y) <= 0.01

    def test_unproject_is_rounded(self, engine):
        """Test that unproject rounds to two decimals."""
        transform = SurfaceTransform(0, 0, 1.0)
        # 40 margin + 0.123456 rooms * 500 px
        screen = ScreenPoint(40 + 0.123456 * 500, 40 + 0.987654 * 500)
        position = engine.unproject(screen, transform.offset, 1.0, MapBounds())
        assert position == GridPosition(0.12, 0.99)

    def test_margin_override(self, engine):
        """Test that a margin override shifts the layout."""
        view = ViewState(0, 0, 100)
        default = engine.project(GridPosition(1, 1), view, (800, 600), MapBounds())
        no_margin = engine.project(GridPosition(1, 1), view, (800, 600), MapBounds(), margin=0)
        # The view position moves with the margin, so the relative offset holds
        assert default == pytest.approx(no_margin)
        world = engine.world_pixels(GridPosition(0, 0), MapBounds())
        assert world == WorldPoint(40, 40)

    def test_view_from_transform(self, engine, three_room_bounds):
        """Test that a view survives transform_for and view_from_transform."""
        view = ViewState(-0.58, -0.54, 150)
        transform = engine.transform_for(view, (800, 600), three_room_bounds)
        assert engine.view_from_transform(transform, (800, 600), three_room_bounds) == view

    def test_transform_helpers(self):
        """Test apply/invert and the copy helpers."""
        transform = SurfaceTransform(10, 20, 2.0)
        assert transform.apply(WorldPoint(5, 5)) == ScreenPoint(20, 30)
        assert transform.invert(ScreenPoint(20, 30)) == WorldPoint(5, 5)
        assert transform.moved_to(1, 2) == SurfaceTransform(1, 2, 2.0)
        assert transform.scaled_to(0.5) == SurfaceTransform(10, 20, 0.5)


class TestLevelOfDetail:
    """Tests for render mode selection."""

    @pytest.mark.parametrize(
        "scale, mode",
        [
            (30, RenderMode.OVERVIEW),
            (78.26, RenderMode.OVERVIEW),
            (100, RenderMode.OVERVIEW),
            (100.01, RenderMode.DETAIL),
            (300, RenderMode.DETAIL),
        ],
    )
    def test_threshold(self, map_config, scale, mode):
        """Test that detail starts strictly above 100%."""
        assert LevelOfDetailSelector(map_config).mode(scale) is mode

    def test_fetch_radius(self, map_config):
        """Test neighbourhood size per mode."""
        selector = LevelOfDetailSelector(map_config)
        assert selector.fetch_radius(150) == 1
        assert selector.fetch_radius(50) == 2

    def test_custom_threshold(self):
        """Test a configured threshold."""
        selector = LevelOfDetailSelector(MapConfig(detail_threshold=200))
        assert not selector.is_detail(150)
        assert selector.is_detail(math.nextafter(200, 300))
