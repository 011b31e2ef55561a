"""Perimeter and door resolution for planned rooms.

Given the tiles of a room, derive the ring of edge tiles that must be walled
and select exactly one of them as the door opening.

Door selection
--------------
1. **Candidates**: edge tiles with an orthogonal neighbour that is an entrance
   hint. Diagonal contact does not count because a door must share a full edge
   with the interior it opens into.
2. **Refinement**: candidates with an orthogonal neighbour on free (not
   furnished) room floor are preferred. If none qualifies, all candidates stay.
3. **Selection**: the first remaining candidate in scan order (ascending y,
   then x). Without candidates there is no door, and the caller decides what
   to do.

Entrance hints are preferences, usually one per furniture item. However many
hints a room has, at most one opening is produced.
"""

import logging
import math

from enum import Enum
from typing import Iterable, NamedTuple

from roomsmith.layout.grid_geometry import (
    TileCoord,
    bounding_box,
    neighbors4,
    neighbors8,
    scan_order,
    sorted_tiles,
)

console_logger = logging.getLogger(__name__)


class Side(Enum):
    """Side of a room's bounding box."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class Perimeter(NamedTuple):
    """Resolved perimeter of a room: edge tiles and the optional door tile."""

    edge_tiles: frozenset[TileCoord]
    """Tiles outside the room that are 8-adjacent to it."""

    door_tile: TileCoord | None
    """The single opening, or None if no door could be placed."""

    @property
    def wall_tiles(self) -> list[TileCoord]:
        """Edge tiles that get walls, in scan order."""
        return sorted_tiles(t for t in self.edge_tiles if t != self.door_tile)

    @property
    def opening_tiles(self) -> list[TileCoord]:
        """Edge tiles that get openings: the door tile or nothing."""
        return [self.door_tile] if self.door_tile is not None else []

    def to_dict(self) -> dict:
        """Serialize perimeter to dictionary."""
        return {
            "edge_tiles": [list(t) for t in sorted_tiles(self.edge_tiles)],
            "door_tile": list(self.door_tile) if self.door_tile is not None else None,
            "wall_count": len(self.wall_tiles),
        }


def edge_tiles(room_tiles: Iterable[TileCoord]) -> frozenset[TileCoord]:
    """Tiles outside `room_tiles` that touch a room tile in any of 8 directions."""
    room = frozenset(room_tiles)
    return frozenset(
        neighbor
        for tile in room
        for neighbor in neighbors8(tile)
        if neighbor not in room
    )


def door_candidates(
    edges: Iterable[TileCoord],
    room_tiles: Iterable[TileCoord],
    entrance_tiles: Iterable[TileCoord],
    occupied_tiles: Iterable[TileCoord],
) -> list[TileCoord]:
    """Edge tiles eligible as the door, best-first in scan order.

    Args:
        edges: Edge tiles of the room.
        room_tiles: Tiles of the room.
        entrance_tiles: Entrance hints.
        occupied_tiles: Room tiles covered by furniture.

    Returns:
        Candidates opening onto free floor if any exist, otherwise all edge
        tiles orthogonally adjacent to an entrance hint. Empty if there are no
        entrance hints or none touches the edge.
    """
    entrances = frozenset(entrance_tiles)
    if not entrances:
        return []

    candidates = sorted_tiles(
        edge
        for edge in edges
        if any(n in entrances for n in neighbors4(edge))
    )
    if not candidates:
        return []

    free_floor = frozenset(room_tiles) - frozenset(occupied_tiles)
    opening_onto_free = [
        edge for edge in candidates if any(n in free_floor for n in neighbors4(edge))
    ]
    return opening_onto_free or candidates


def resolve_perimeter(
    room_tiles: Iterable[TileCoord],
    entrance_tiles: Iterable[TileCoord],
    occupied_tiles: Iterable[TileCoord],
) -> Perimeter:
    """Compute edge tiles and select at most one door.

    Args:
        room_tiles: Tiles of the room.
        entrance_tiles: Entrance hints (subset of the room).
        occupied_tiles: Furnished tiles (subset of the room).

    Returns:
        Perimeter with every edge tile and the selected door, or
        `door_tile=None` when no candidate exists. Deterministic: identical
        inputs give identical results.
    """
    room = frozenset(room_tiles)
    edges = edge_tiles(room)
    candidates = door_candidates(
        edges=edges,
        room_tiles=room,
        entrance_tiles=entrance_tiles,
        occupied_tiles=occupied_tiles,
    )
    door = candidates[0] if candidates else None

    if door is None:
        console_logger.debug(
            f"No door candidate among {len(edges)} edge tiles of a "
            f"{len(room)}-tile room"
        )
    else:
        console_logger.debug(
            f"Selected door {door} from {len(candidates)} candidates, "
            f"{len(edges) - 1} wall tiles"
        )
    return Perimeter(edge_tiles=edges, door_tile=door)


def find_fallback_door(
    room_tiles: Iterable[TileCoord],
    occupied_tiles: Iterable[TileCoord],
    preferred_side: Side = Side.TOP,
) -> TileCoord | None:
    """Pick a door for a room without usable entrance hints.

    Caller-level policy, never applied by `resolve_perimeter`. Considers edge
    tiles orthogonally adjacent to free room floor and ranks them: tiles on
    the preferred side first, then by distance to the middle of that side,
    then scan order.

    Args:
        room_tiles: Tiles of the room.
        occupied_tiles: Furnished tiles.
        preferred_side: Side of the bounding box the door should face.

    Returns:
        The chosen edge tile, or None if no edge tile touches free floor.
    """
    room = frozenset(room_tiles)
    if not room:
        return None
    free_floor = room - frozenset(occupied_tiles)
    valid = [
        edge
        for edge in edge_tiles(room)
        if any(n in free_floor for n in neighbors4(edge))
    ]
    if not valid:
        return None

    min_x, min_y, max_x, max_y = bounding_box(room)
    width = max_x - min_x + 1
    height = max_y - min_y + 1
    if preferred_side == Side.TOP:
        target = TileCoord(min_x + width // 2, min_y - 1)
    elif preferred_side == Side.BOTTOM:
        target = TileCoord(min_x + width // 2, max_y + 1)
    elif preferred_side == Side.LEFT:
        target = TileCoord(min_x - 1, min_y + height // 2)
    else:  # RIGHT
        target = TileCoord(max_x + 1, min_y + height // 2)

    def on_side(tile: TileCoord) -> bool:
        if preferred_side in (Side.TOP, Side.BOTTOM):
            return tile.y == target.y
        return tile.x == target.x

    def rank(tile: TileCoord) -> tuple:
        distance = math.hypot(tile.x - target.x, tile.y - target.y)
        return (0 if on_side(tile) else 1, distance, scan_order(tile))

    return min(valid, key=rank)
