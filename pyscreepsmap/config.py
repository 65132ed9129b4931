"""Configuration management for PyScreepsMap.

Configuration is loaded from (in order of precedence):
1. Environment variables (PYSCREEPSMAP_*)
2. User config file (~/.pyscreepsmap/config.json)
3. Default values

Environment variables:
    PYSCREEPSMAP_MIN_SCALE - Smallest allowed view scale (percent)
    PYSCREEPSMAP_MAX_SCALE - Largest allowed view scale (percent)
    PYSCREEPSMAP_DETAIL_THRESHOLD - Scale above which rooms render in detail
    PYSCREEPSMAP_ROOM_SIZE - Tiles per room edge
    PYSCREEPSMAP_TILE_SIZE - Pixels per tile at 100% scale
    PYSCREEPSMAP_MARGIN - World-pixel margin around the map
    PYSCREEPSMAP_SHARD - Default shard name
    PYSCREEPSMAP_CACHE_PATH - SQLite terrain cache location
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Default config directory
CONFIG_DIR = Path.home() / ".pyscreepsmap"
CONFIG_FILE = CONFIG_DIR / "config.json"

SHARDS = ("shard0", "shard1", "shard2", "shard3")


@dataclass(frozen=True)
class MapConfig:
    """Geometry and view limits shared by the projection engine."""

    room_size: int = 50  # tiles per room edge
    tile_size: int = 10  # pixels per tile at 100%
    margin: float = 40.0  # world pixels around the loaded rooms
    min_scale: float = 30.0
    max_scale: float = 300.0
    detail_threshold: float = 100.0
    overview_room_radius: float = 6.0
    precision: int = 2
    zoom_in_factor: float = 1.1
    zoom_out_factor: float = 0.9

    @property
    def room_px(self) -> int:
        """Pixel edge of one room at 100% scale."""
        return self.room_size * self.tile_size

    @property
    def max_local(self) -> int:
        """Largest tile index inside a room."""
        return self.room_size - 1


@dataclass(frozen=True)
class ColorScheme:
    """Colors used when building a scene, as 0xRRGGBB integers."""

    plain: int = 0x2B2B2B
    wall: int = 0x111111
    swamp: int = 0x1A3A1A
    grid: int = 0x404040
    background: int = 0x1A1A1A
    room_border: int = 0x2F2F2F
    room_label: int = 0xFFFFFF
    overview_room: int = 0x3DDC84
    spawn: int = 0xF4D35E
    tower: int = 0x70D6FF
    extension: int = 0xF4978E

    def marker_color(self, kind: str) -> int:
        """Look up the fill color for a marker kind."""
        return getattr(self, kind, self.spawn)


@dataclass
class TerrainConfig:
    """Terrain source configuration."""

    shard: str = "shard3"
    cache_path: str = ""

    def resolved_cache_path(self) -> Path:
        """Cache path, defaulting to the config directory."""
        if self.cache_path:
            return Path(self.cache_path).expanduser()
        return CONFIG_DIR / "terrain.db"


@dataclass
class ViewerConfig:
    """Initial state of the editor window."""

    default_room: str = "W0N0"
    initial_x: float = 20.924
    initial_y: float = 52.391
    initial_scale: float = 78.26
    tooltip_offset: int = 12
    width: int = 1200
    height: int = 800


@dataclass
class Config:
    """Main configuration container."""

    map: MapConfig = field(default_factory=MapConfig)
    colors: ColorScheme = field(default_factory=ColorScheme)
    terrain: TerrainConfig = field(default_factory=TerrainConfig)
    viewer: ViewerConfig = field(default_factory=ViewerConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary for saving."""
        return {
            "map": asdict(self.map),
            "colors": asdict(self.colors),
            "terrain": asdict(self.terrain),
            "viewer": asdict(self.viewer),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create from dictionary, ignoring unknown keys."""
        config = cls()
        if "map" in data:
            config.map = MapConfig(**_known_fields(MapConfig, data["map"]))
        if "colors" in data:
            config.colors = ColorScheme(**_known_fields(ColorScheme, data["colors"]))
        if "terrain" in data:
            config.terrain = TerrainConfig(**_known_fields(TerrainConfig, data["terrain"]))
        if "viewer" in data:
            config.viewer = ViewerConfig(**_known_fields(ViewerConfig, data["viewer"]))
        return config


def _known_fields(cls: type, data: Any) -> dict:
    """Keep only the keys that ``cls`` declares."""
    if not isinstance(data, dict):
        return {}
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def _get_env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key, "")
    try:
        return float(value)
    except ValueError:
        return default


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from environment and/or file.

    Environment variables take precedence over file config.
    """
    config = Config()
    config_file = config_file or CONFIG_FILE

    # Try to load from file first
    if config_file.exists():
        try:
            with open(config_file) as f:
                data = json.load(f)
                config = Config.from_dict(data)
        except (json.JSONDecodeError, OSError, TypeError) as e:
            logger.warning(f"Ignoring unreadable config file {config_file}: {e}")

    # Override with environment variables
    map_config = config.map
    if "PYSCREEPSMAP_MIN_SCALE" in os.environ:
        map_config = replace(
            map_config,
            min_scale=_get_env_float("PYSCREEPSMAP_MIN_SCALE", map_config.min_scale),
        )
    if "PYSCREEPSMAP_MAX_SCALE" in os.environ:
        map_config = replace(
            map_config,
            max_scale=_get_env_float("PYSCREEPSMAP_MAX_SCALE", map_config.max_scale),
        )
    if "PYSCREEPSMAP_DETAIL_THRESHOLD" in os.environ:
        map_config = replace(
            map_config,
            detail_threshold=_get_env_float(
                "PYSCREEPSMAP_DETAIL_THRESHOLD", map_config.detail_threshold
            ),
        )
    if "PYSCREEPSMAP_ROOM_SIZE" in os.environ:
        map_config = replace(
            map_config,
            room_size=_get_env_int("PYSCREEPSMAP_ROOM_SIZE", map_config.room_size),
        )
    if "PYSCREEPSMAP_TILE_SIZE" in os.environ:
        map_config = replace(
            map_config,
            tile_size=_get_env_int("PYSCREEPSMAP_TILE_SIZE", map_config.tile_size),
        )
    if "PYSCREEPSMAP_MARGIN" in os.environ:
        map_config = replace(
            map_config,
            margin=_get_env_float("PYSCREEPSMAP_MARGIN", map_config.margin),
        )
    config.map = map_config

    if "PYSCREEPSMAP_SHARD" in os.environ:
        shard = os.environ["PYSCREEPSMAP_SHARD"].lower()
        if shard in SHARDS:
            config.terrain.shard = shard
        else:
            logger.warning(f"Unknown shard {shard!r}, keeping {config.terrain.shard}")
    if "PYSCREEPSMAP_CACHE_PATH" in os.environ:
        config.terrain.cache_path = os.environ["PYSCREEPSMAP_CACHE_PATH"]

    return config


def save_config(config: Config, config_file: Path | None = None) -> None:
    """Save configuration to file."""
    config_file = config_file or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from sources."""
    global _config
    _config = load_config()
    return _config
