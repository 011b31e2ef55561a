"""Interface of the host simulation consumed by room construction.

The host owns all live state: entities, furniture, terrain, constructions and
temporary tile reservations. Construction code only talks to it through this
narrow protocol, so any object implementing these methods can be used, such
as a game bridge or the `InMemoryHost` test double.

Error contract: `workspace_create` raises `NameInUseError`,
`workspace_reserve` raises `TileInUseError` without reserving anything, and
any other host failure raises `HostError` (or an arbitrary exception, which
the committer wraps into `HostError`).
"""

from typing import Any, Iterable, Protocol, runtime_checkable

from roomsmith.layout.grid_geometry import TileCoord
from roomsmith.layout.room import FurnitureRef


@runtime_checkable
class ConstructionHost(Protocol):
    """Host collaborator operations used by validation and commit."""

    def workspace_create(self, name: str) -> Any:
        """Create a named temporary area and return its handle."""

    def workspace_reserve(self, workspace: Any, tiles: Iterable[TileCoord]) -> None:
        """Mark tiles as in use by the workspace, all or nothing."""

    def workspace_release(self, workspace: Any) -> None:
        """Clear the workspace and free its tiles."""

    def furniture_place(
        self, tile: TileCoord, furniture: FurnitureRef, room_handle: Any
    ) -> None:
        """Place a furniture item with its top-left cell at `tile`."""

    def wall_placeable(self, tile: TileCoord) -> bool:
        """Whether a wall can be built on the tile."""

    def wall_place(self, tile: TileCoord, material: Any) -> None:
        """Build a wall on the tile."""

    def opening_placeable(self, tile: TileCoord) -> bool:
        """Whether a door opening can be built on the tile."""

    def opening_place(self, tile: TileCoord, material: Any) -> None:
        """Build a door opening on the tile."""

    def construction_finalize(self, workspace: Any, spec: Any) -> None:
        """Turn the workspace's reserved tiles into a construction site."""

    def entities_in_area(self, area: Iterable[TileCoord]) -> list[Any]:
        """Entities standing on any tile of the area."""

    def furniture_in_area(self, area: Iterable[TileCoord]) -> list[tuple[TileCoord, Any]]:
        """(tile, furniture) pairs for furnished tiles of the area."""

    def constructions_in_area(
        self, area: Iterable[TileCoord]
    ) -> list[tuple[TileCoord, Any]]:
        """(tile, construction) pairs for construction tiles of the area."""
