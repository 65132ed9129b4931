"""Command-line interface for PyScreepsMap."""

import json
import logging
import sys

from pyscreepsmap import __version__
from pyscreepsmap.config import SHARDS, get_config
from pyscreepsmap.engine.rooms import (
    create_room_grid,
    is_valid_room_name,
    normalize_room_name,
    room_name_to_xy,
)


def setup_logging(verbose: bool) -> None:
    """Configure root logging for the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_coords(names: list[str]) -> int:
    """Print the grid coordinate of each room name."""
    for name in names:
        coord = room_name_to_xy(name)
        suffix = "" if is_valid_room_name(name) else "  (invalid, using origin)"
        print(f"{normalize_room_name(name):>10}  x={coord.x:<6} y={coord.y}{suffix}")
    return 0


def cmd_grid(room: str, radius: int) -> int:
    """Print the neighbourhood of a room as a table."""
    center = room_name_to_xy(room)
    names = create_room_grid(center.x, center.y, radius)
    size = 2 * radius + 1
    width = max(len(name) for name in names)
    # create_room_grid goes column by column; print row by row
    for row in range(size):
        print(" ".join(names[col * size + row].ljust(width) for col in range(size)))
    return 0


def cmd_config() -> int:
    """Print the effective configuration."""
    print(json.dumps(get_config().to_dict(), indent=2))
    return 0


def main() -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="PyScreepsMap - assemble, pan and zoom Screeps room terrain",
        prog="screepsmap",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"PyScreepsMap {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    view_parser = subparsers.add_parser("view", help="Open the map viewer")
    view_parser.add_argument(
        "--demo",
        action="store_true",
        help="Start with the generated demo map",
    )
    view_parser.add_argument(
        "--room",
        type=str,
        help="Room to prefill in the terrain form (e.g. W0N0)",
    )
    view_parser.add_argument(
        "--shard",
        choices=SHARDS,
        help="Shard to select in the terrain form",
    )

    coords_parser = subparsers.add_parser("coords", help="Show grid coordinates of rooms")
    coords_parser.add_argument("rooms", nargs="+", help="Room names")

    grid_parser = subparsers.add_parser("grid", help="Show the rooms around a room")
    grid_parser.add_argument("room", help="Center room name")
    grid_parser.add_argument(
        "--radius",
        type=int,
        default=1,
        help="Rooms on each side of the center (default: 1)",
    )

    subparsers.add_parser("config", help="Print the effective configuration")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command == "coords":
        return cmd_coords(args.rooms)
    if args.command == "grid":
        if args.radius < 0:
            parser.error("--radius must not be negative")
        return cmd_grid(args.room, args.radius)
    if args.command == "config":
        return cmd_config()

    from pyscreepsmap.editor.main import main as viewer_main

    if args.command == "view":
        return viewer_main(demo=args.demo, room=args.room, shard=args.shard)
    return viewer_main()


if __name__ == "__main__":
    sys.exit(main())
