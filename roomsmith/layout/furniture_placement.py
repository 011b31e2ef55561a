"""Furniture placement planning for room templates.

Turns a read-only `RoomTemplate` and a world anchor into a `RoomInstance`:
the room's world tiles, the tiles covered by furniture, the entrance hints and
one `PlacedFurniture` per contiguous furniture item.

Rotation is never applied here. Rotation variants are distinct templates built
up front by the blueprint registry, so planning is a pure translation of the
template grid to world space.
"""

import logging

from collections import deque
from typing import Sequence

import numpy as np

from roomsmith.layout.grid_geometry import (
    ORTHOGONAL_OFFSETS,
    TileCoord,
    anchor_from_center,
    rect_tiles,
    scan_order,
    sorted_tiles,
)
from roomsmith.layout.room import (
    VALID_ROTATIONS,
    PlacedFurniture,
    RoomInstance,
    RoomTemplate,
)

console_logger = logging.getLogger(__name__)


def plan_placement(
    template: RoomTemplate, anchor: TileCoord, rotation: int | None = None
) -> RoomInstance:
    """Compute world tiles for every occupied template cell.

    Args:
        template: Room template; its rotation is already baked into its cells.
        anchor: World tile of the template's top-left cell.
        rotation: Expected rotation of `template`. When given it must be in
            {0, 1, 2, 3} and match `template.rotation`.

    Returns:
        Room instance whose room tiles are the occupied cells. Every occupied
        cell is covered by its furniture, so `occupied_tiles == room_tiles`.

    Raises:
        ValueError: If `rotation` is invalid or does not match the template.
    """
    if rotation is not None:
        if rotation not in VALID_ROTATIONS:
            raise ValueError(
                f"Rotation must be one of {VALID_ROTATIONS}, got {rotation}"
            )
        if rotation != template.rotation:
            raise ValueError(
                f"Template {template.room_type} has rotation {template.rotation}, "
                f"expected {rotation}. Look up the matching rotation variant."
            )

    room_tiles = set()
    entrance_tiles = set()
    # argwhere yields (row, col) pairs in row-major order, i.e. scan order.
    for y, x in np.argwhere(template.occupancy_mask):
        x, y = int(x), int(y)
        tile = anchor.offset(x, y)
        room_tiles.add(tile)
        if template.cell(x, y).entrance:
            entrance_tiles.add(tile)

    furniture = _group_furniture(template=template, anchor=anchor)

    console_logger.debug(
        f"Planned {template.room_type} at {anchor}: {len(room_tiles)} tiles, "
        f"{len(entrance_tiles)} entrance hints, {len(furniture)} furniture items"
    )
    return RoomInstance(
        room_tiles=frozenset(room_tiles),
        entrance_tiles=frozenset(entrance_tiles),
        occupied_tiles=frozenset(room_tiles),
        furniture=tuple(furniture),
    )


def _group_furniture(template: RoomTemplate, anchor: TileCoord) -> list[PlacedFurniture]:
    """Split occupied cells into contiguous groups sharing one furniture reference.

    Each 4-connected group of cells with an equal `FurnitureRef` is one item,
    anchored at the world tile of its bounding box's top-left corner.
    """
    visited = np.zeros((template.height, template.width), dtype=bool)
    placements = []

    for y, x in np.argwhere(template.occupancy_mask):
        y, x = int(y), int(x)
        if visited[y, x]:
            continue
        ref = template.cell(x, y).furniture

        group = []
        queue = deque([(x, y)])
        visited[y, x] = True
        while queue:
            cx, cy = queue.popleft()
            group.append((cx, cy))
            for dx, dy in ORTHOGONAL_OFFSETS:
                nx, ny = cx + dx, cy + dy
                if not (0 <= nx < template.width and 0 <= ny < template.height):
                    continue
                if visited[ny, nx]:
                    continue
                neighbor = template.cell(nx, ny)
                if neighbor is None or neighbor.furniture != ref:
                    continue
                visited[ny, nx] = True
                queue.append((nx, ny))

        min_x = min(gx for gx, _ in group)
        min_y = min(gy for _, gy in group)
        placements.append(
            PlacedFurniture(
                furniture=ref,
                anchor=anchor.offset(min_x, min_y),
                tiles=frozenset(anchor.offset(gx, gy) for gx, gy in group),
            )
        )

    placements.sort(key=lambda p: scan_order(p.anchor))
    return placements


def plan_furnished_room(
    origin: TileCoord,
    width: int,
    height: int,
    placements: Sequence[tuple[RoomTemplate, TileCoord]],
) -> RoomInstance:
    """Plan a rectangular room furnished with several templates.

    The room floor is the full rectangle. Furniture tiles and entrance hints
    are the union of the planned templates, so the room can have free floor
    that a door may open onto.

    Args:
        origin: Top-left tile of the room.
        width: Room width in tiles.
        height: Room height in tiles.
        placements: (template, world anchor) pairs for the furniture.

    Returns:
        Room instance for the furnished rectangle.

    Raises:
        ValueError: If the room is empty, furniture leaves the rectangle, or
            two furniture templates overlap.
    """
    room_tiles = rect_tiles(origin, width, height)
    if not room_tiles:
        raise ValueError(f"Room must have positive size, got {width}x{height}")

    occupied = set()
    entrances = set()
    furniture = []
    for template, anchor in placements:
        planned = plan_placement(template=template, anchor=anchor)

        outside = planned.room_tiles - room_tiles
        if outside:
            raise ValueError(
                f"Furniture {template.room_type} at {anchor} leaves the room at "
                f"{sorted_tiles(outside)}"
            )
        overlap = planned.occupied_tiles & occupied
        if overlap:
            raise ValueError(
                f"Furniture {template.room_type} at {anchor} overlaps other "
                f"furniture at {sorted_tiles(overlap)}"
            )

        occupied |= planned.occupied_tiles
        entrances |= planned.entrance_tiles
        furniture.extend(planned.furniture)

    furniture.sort(key=lambda p: scan_order(p.anchor))
    console_logger.debug(
        f"Planned furnished room at {origin} ({width}x{height}): "
        f"{len(occupied)} occupied, {len(room_tiles) - len(occupied)} free"
    )
    return RoomInstance(
        room_tiles=room_tiles,
        entrance_tiles=frozenset(entrances),
        occupied_tiles=frozenset(occupied),
        furniture=tuple(furniture),
    )


def furniture_grid_positions(
    origin: TileCoord, width: int, height: int, item_width: int, item_height: int
) -> list[TileCoord]:
    """Top-left anchors for repeating an item across a room in a grid.

    Items keep at least a one-tile gap: the step along each axis is
    max(2, item size + 1). Only anchors whose item fits inside the room are
    returned, in scan order.
    """
    if item_width <= 0 or item_height <= 0:
        raise ValueError(
            f"Item size must be positive, got {item_width}x{item_height}"
        )
    step_x = max(2, item_width + 1)
    step_y = max(2, item_height + 1)
    end_x = origin.x + width
    end_y = origin.y + height

    positions = []
    for y in range(origin.y, end_y, step_y):
        for x in range(origin.x, end_x, step_x):
            if x + item_width <= end_x and y + item_height <= end_y:
                positions.append(TileCoord(x, y))
    return positions


def furniture_anchor_for_center(center: TileCoord, template: RoomTemplate) -> TileCoord:
    """Anchor that centres `template` on `center` (floor division bias)."""
    return anchor_from_center(center, template.width, template.height)
