"""Shared fixtures: a fake rendering surface and surface factory."""

import pytest

from pyscreepsmap.config import ColorScheme, MapConfig
from pyscreepsmap.engine.layout import MapBounds
from pyscreepsmap.engine.projection import ProjectionEngine, Rect
from pyscreepsmap.engine.surface import RenderSurface, SurfaceFactory
from pyscreepsmap.engine.terrain import RoomTerrain


class FakeSurface(RenderSurface):
    """In-memory surface that records what it was asked to draw."""

    def __init__(self, size=(800.0, 600.0), rect=None):
        super().__init__()
        self._size = size
        self.rect = rect or Rect(0, 0, size[0], size[1])
        self.drawn = []
        self.transform_updates = 0

    def size(self):
        return self._size

    def get_bounding_rect(self):
        return self.rect

    def resize(self, size):
        self._size = size

    def draw(self, scene):
        self.drawn.append(scene)

    def transform_changed(self):
        self.transform_updates += 1


class FakeSurfaceFactory(SurfaceFactory):
    """Factory that completes at once, or later when ``deferred`` is set."""

    def __init__(self, deferred=False, fail=False, raise_error=False):
        self.deferred = deferred
        self.fail = fail
        self.raise_error = raise_error
        self.pending = []
        self.created = []
        self.requests = 0

    def create(self, size, on_ready):
        self.requests += 1
        if self.raise_error:
            raise RuntimeError("renderer could not start")
        if self.deferred:
            self.pending.append((size, on_ready))
            return
        self._finish(size, on_ready)

    def complete(self, index=0):
        """Finish a deferred setup."""
        size, on_ready = self.pending.pop(index)
        self._finish(size, on_ready)

    def _finish(self, size, on_ready):
        if self.fail:
            on_ready(None)
            return
        surface = FakeSurface(size)
        self.created.append(surface)
        on_ready(surface)


@pytest.fixture
def map_config():
    """Default map configuration."""
    return MapConfig()


@pytest.fixture
def colors():
    """Default color scheme."""
    return ColorScheme()


@pytest.fixture
def engine(map_config):
    """Projection engine with default geometry."""
    return ProjectionEngine(map_config)


@pytest.fixture
def three_rooms():
    """W1N0, W0N0 and E0N0: one row of three rooms."""
    return ["W0N0", "W1N0", "E0N0"]


@pytest.fixture
def three_room_bounds():
    """Bounds of the three_rooms fixture."""
    return MapBounds(min_x=-2, min_y=-1, max_x=0, max_y=-1)


@pytest.fixture
def plain_rooms(three_rooms):
    """The three rooms with all-plain terrain."""
    return [RoomTerrain(name, "0" * 2500) for name in three_rooms]


@pytest.fixture
def surface():
    """Fake 800x600 surface."""
    return FakeSurface()


@pytest.fixture
def factory():
    """Synchronous fake surface factory."""
    return FakeSurfaceFactory()


@pytest.fixture
def deferred_factory():
    """Fake surface factory that completes only when told to."""
    return FakeSurfaceFactory(deferred=True)


@pytest.fixture
def make_surface():
    """Build extra fake surfaces inside a test."""
    return FakeSurface


@pytest.fixture
def failing_factory():
    """Factory whose surfaces never initialize."""
    return FakeSurfaceFactory(fail=True)


@pytest.fixture
def raising_factory():
    """Factory that raises when asked for a surface."""
    return FakeSurfaceFactory(raise_error=True)
