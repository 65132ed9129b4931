"""Level-of-detail selection."""

from enum import Enum

from pyscreepsmap.config import MapConfig


class RenderMode(Enum):
    """How much of the map is drawn."""

    OVERVIEW = "overview"  # one dot per room
    DETAIL = "detail"  # tiles, grid, borders, markers


class LevelOfDetailSelector:
    """Pick a render mode from the current scale.

    There is no hysteresis: a scale exactly at the threshold is always
    overview.
    """

    def __init__(self, config: MapConfig) -> None:
        self.threshold = config.detail_threshold

    def mode(self, scale: float) -> RenderMode:
        if scale > self.threshold:
            return RenderMode.DETAIL
        return RenderMode.OVERVIEW

    def is_detail(self, scale: float) -> bool:
        return self.mode(scale) is RenderMode.DETAIL

    def fetch_radius(self, scale: float) -> int:
        """Neighbourhood radius worth loading at this scale."""
        return 1 if self.is_detail(scale) else 2
