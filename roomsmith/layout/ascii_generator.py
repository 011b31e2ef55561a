"""ASCII visualization of a planned room and its perimeter.

Generates a text grid of the room's bounding box plus its edge ring, used in
build logs and when debugging door selection.
"""

import logging

from dataclasses import dataclass

from roomsmith.layout.grid_geometry import TileCoord, bounding_box
from roomsmith.layout.perimeter import Perimeter
from roomsmith.layout.room import RoomInstance

console_logger = logging.getLogger(__name__)


# Character constants for ASCII drawing.
WALL = "#"
DOOR = "D"
FURNITURE = "F"
ENTRANCE = "E"
FLOOR = "."
SPACE = " "


@dataclass
class AsciiLayout:
    """Result of ASCII layout generation."""

    ascii_art: str
    """The ASCII representation of the room."""

    origin: TileCoord | None
    """World tile drawn in the top-left character, None for an empty room."""

    legend: str
    """Legend explaining the characters."""


def _legend() -> str:
    return "\n".join(
        [
            f"{WALL} wall",
            f"{DOOR} door",
            f"{FURNITURE} furniture",
            f"{ENTRANCE} entrance hint",
            f"{FLOOR} free floor",
        ]
    )


def render_layout(instance: RoomInstance, perimeter: Perimeter) -> AsciiLayout:
    """Draw a room and its perimeter as ASCII art.

    Args:
        instance: Planned room.
        perimeter: Resolved perimeter of the room.

    Returns:
        AsciiLayout with one text row per tile row, top row first.
    """
    tiles = set(instance.room_tiles) | set(perimeter.edge_tiles)
    if not tiles:
        return AsciiLayout(ascii_art="(Empty room)", origin=None, legend=_legend())

    min_x, min_y, max_x, max_y = bounding_box(tiles)
    grid = [[SPACE for _ in range(max_x - min_x + 1)] for _ in range(max_y - min_y + 1)]

    def put(tile: TileCoord, char: str) -> None:
        grid[tile.y - min_y][tile.x - min_x] = char

    for tile in perimeter.edge_tiles:
        put(tile, WALL)
    if perimeter.door_tile is not None:
        put(perimeter.door_tile, DOOR)
    for tile in instance.room_tiles:
        put(tile, FLOOR)
    for tile in instance.occupied_tiles:
        put(tile, FURNITURE)
    # Entrance hints are drawn last so they stay visible on furniture.
    for tile in instance.entrance_tiles:
        put(tile, ENTRANCE)

    ascii_art = "\n".join("".join(row).rstrip() for row in grid)
    return AsciiLayout(
        ascii_art=ascii_art, origin=TileCoord(min_x, min_y), legend=_legend()
    )
