"""Pure room layout: grid geometry, templates, furniture placement and perimeters."""

from roomsmith.layout.furniture_placement import plan_furnished_room, plan_placement
from roomsmith.layout.grid_geometry import TileCoord
from roomsmith.layout.perimeter import Perimeter, Side, resolve_perimeter
from roomsmith.layout.room import (
    FurnitureRef,
    OccupiedCell,
    PlacedFurniture,
    RoomInstance,
    RoomTemplate,
)

__all__ = [
    "FurnitureRef",
    "OccupiedCell",
    "Perimeter",
    "PlacedFurniture",
    "RoomInstance",
    "RoomTemplate",
    "Side",
    "TileCoord",
    "plan_furnished_room",
    "plan_placement",
    "resolve_perimeter",
]
