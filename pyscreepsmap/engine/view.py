"""View state: what the operator currently sees."""

import math
from dataclasses import dataclass

from pyscreepsmap.config import MapConfig
from pyscreepsmap.engine.layout import GridPosition


def round_to_precision(value: float, precision: int = 2) -> float:
    """Round half up to a fixed number of decimals (1.235 -> 1.24)."""
    factor = 10**precision
    return math.floor(value * factor + 0.5) / factor


def coerce_number(value: object, default: float = 0.0) -> float:
    """Turn form input into a finite float, falling back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def clamp_scale(scale: float, config: MapConfig) -> float:
    """Clamp a scale percentage into ``[min_scale, max_scale]``."""
    return min(config.max_scale, max(config.min_scale, scale))


@dataclass(frozen=True)
class ViewState:
    """Center position in room-grid units and a scale percentage."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 100.0

    @property
    def position(self) -> GridPosition:
        return GridPosition(self.x, self.y)

    @property
    def scale_ratio(self) -> float:
        return self.scale / 100

    def normalized(self, config: MapConfig) -> "ViewState":
        """Coerce non-numeric fields to zero and clamp the scale."""
        return ViewState(
            x=coerce_number(self.x),
            y=coerce_number(self.y),
            scale=clamp_scale(coerce_number(self.scale), config),
        )

    def rounded(self, precision: int = 2) -> "ViewState":
        return ViewState(
            x=round_to_precision(self.x, precision),
            y=round_to_precision(self.y, precision),
            scale=round_to_precision(self.scale, precision),
        )

    def with_position(self, x: float, y: float) -> "ViewState":
        return ViewState(x=x, y=y, scale=self.scale)

    def with_scale(self, scale: float) -> "ViewState":
        return ViewState(x=self.x, y=self.y, scale=scale)
