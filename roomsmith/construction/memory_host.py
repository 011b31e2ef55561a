"""Dictionary-backed host used for tests and offline layout experiments."""

import logging

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable

from roomsmith.construction.errors import HostError, NameInUseError, TileInUseError
from roomsmith.layout.grid_geometry import TileCoord, sorted_tiles
from roomsmith.layout.room import FurnitureRef

console_logger = logging.getLogger(__name__)


@dataclass
class TmpArea:
    """A named temporary tile reservation inside the host."""

    name: str
    """Unique name among live areas."""

    tiles: set[TileCoord] = field(default_factory=set)
    """Tiles reserved by this area."""

    furniture: list[tuple[TileCoord, FurnitureRef]] = field(default_factory=list)
    """Furniture placed into the area's room, in placement order."""

    released: bool = False
    """Whether the area has been cleared."""


@dataclass
class ConstructionSite:
    """A finalized room construction."""

    name: str
    """Name of the workspace the site was created from."""

    tiles: frozenset[TileCoord]
    """Tiles of the room."""

    spec: Any
    """Construction spec the site was finalized with."""

    furniture: list[tuple[TileCoord, FurnitureRef]]
    """Furniture snapshot taken at finalization."""


class InMemoryHost:
    """Host implementation over plain dictionaries.

    Tiles in `blocked_tiles` model pre-existing structures: neither walls nor
    openings can be built there. Every host call is appended to `events` as a
    (method, argument) tuple so tests can check ordering.
    """

    def __init__(self, blocked_tiles: Iterable[TileCoord] = ()) -> None:
        self.workspaces: dict[str, TmpArea] = {}
        self.reservations: dict[TileCoord, str] = {}
        self.furniture: dict[TileCoord, FurnitureRef] = {}
        self.walls: dict[TileCoord, Any] = {}
        self.openings: dict[TileCoord, Any] = {}
        self.entities: dict[TileCoord, list[Any]] = defaultdict(list)
        self.constructions: dict[TileCoord, ConstructionSite] = {}
        self.sites: list[ConstructionSite] = []
        self.blocked_tiles: set[TileCoord] = set(blocked_tiles)
        self.release_counts: dict[str, int] = defaultdict(int)
        self.events: list[tuple[str, Any]] = []

    # Test setup helpers.

    def add_entity(self, tile: TileCoord, entity: Any) -> None:
        """Put an entity (person, animal, ...) on a tile."""
        self.entities[tile].append(entity)

    def block(self, tiles: Iterable[TileCoord]) -> None:
        """Mark tiles as holding structures that refuse walls and openings."""
        self.blocked_tiles.update(tiles)

    # Workspaces.

    def workspace_create(self, name: str) -> TmpArea:
        self.events.append(("workspace_create", name))
        if name in self.workspaces:
            raise NameInUseError(name)
        area = TmpArea(name=name)
        self.workspaces[name] = area
        return area

    def workspace_reserve(self, workspace: TmpArea, tiles: Iterable[TileCoord]) -> None:
        tiles = sorted_tiles(set(tiles))
        self.events.append(("workspace_reserve", workspace.name))
        self._require_live(workspace)

        # Check every tile before reserving any of them.
        for tile in tiles:
            owner = self.reservations.get(tile)
            if owner is not None and owner != workspace.name:
                raise TileInUseError(tile, owner=owner)
            site = self.constructions.get(tile)
            if site is not None:
                raise TileInUseError(tile, owner=f"construction {site.name}")

        for tile in tiles:
            self.reservations[tile] = workspace.name
            workspace.tiles.add(tile)

    def workspace_release(self, workspace: TmpArea) -> None:
        self.events.append(("workspace_release", workspace.name))
        self.release_counts[workspace.name] += 1
        for tile in workspace.tiles:
            if self.reservations.get(tile) == workspace.name:
                del self.reservations[tile]
        workspace.tiles.clear()
        workspace.released = True
        if self.workspaces.get(workspace.name) is workspace:
            del self.workspaces[workspace.name]

    # Furniture, walls and openings.

    def furniture_place(
        self, tile: TileCoord, furniture: FurnitureRef, room_handle: TmpArea
    ) -> None:
        self.events.append(("furniture_place", tile))
        self._require_live(room_handle)
        if tile not in room_handle.tiles:
            raise HostError(
                f"Cannot place {furniture.key} at {tile}: tile is not reserved by "
                f"{room_handle.name}"
            )
        self.furniture[tile] = furniture
        room_handle.furniture.append((tile, furniture))

    def wall_placeable(self, tile: TileCoord) -> bool:
        return (
            tile not in self.blocked_tiles
            and tile not in self.walls
            and tile not in self.openings
            and tile not in self.reservations
            and tile not in self.constructions
        )

    def wall_place(self, tile: TileCoord, material: Any) -> None:
        self.events.append(("wall_place", tile))
        if not self.wall_placeable(tile):
            raise HostError(f"Cannot build wall at {tile}")
        self.walls[tile] = material

    def opening_placeable(self, tile: TileCoord) -> bool:
        return (
            tile not in self.blocked_tiles
            and tile not in self.reservations
            and tile not in self.constructions
        )

    def opening_place(self, tile: TileCoord, material: Any) -> None:
        self.events.append(("opening_place", tile))
        if not self.opening_placeable(tile):
            raise HostError(f"Cannot build door opening at {tile}")
        self.walls.pop(tile, None)
        self.openings[tile] = material

    # Construction.

    def construction_finalize(self, workspace: TmpArea, spec: Any) -> None:
        self.events.append(("construction_finalize", workspace.name))
        self._require_live(workspace)
        if not workspace.tiles:
            raise HostError(f"Workspace {workspace.name} has no marked tiles")
        site = ConstructionSite(
            name=workspace.name,
            tiles=frozenset(workspace.tiles),
            spec=spec,
            furniture=list(workspace.furniture),
        )
        self.sites.append(site)
        for tile in site.tiles:
            self.constructions[tile] = site
        console_logger.info(
            f"Created construction site {site.name} with {len(site.tiles)} tiles"
        )

    # Area queries.

    def entities_in_area(self, area: Iterable[TileCoord]) -> list[Any]:
        return [
            entity
            for tile in sorted_tiles(set(area))
            for entity in self.entities.get(tile, [])
        ]

    def furniture_in_area(self, area: Iterable[TileCoord]) -> list[tuple[TileCoord, Any]]:
        return [
            (tile, self.furniture[tile])
            for tile in sorted_tiles(set(area))
            if tile in self.furniture
        ]

    def constructions_in_area(
        self, area: Iterable[TileCoord]
    ) -> list[tuple[TileCoord, Any]]:
        return [
            (tile, self.constructions[tile])
            for tile in sorted_tiles(set(area))
            if tile in self.constructions
        ]

    def _require_live(self, workspace: TmpArea) -> None:
        if workspace.released or self.workspaces.get(workspace.name) is not workspace:
            raise HostError(f"Workspace {workspace.name} is not live")
