"""Applies a planned room to the host as one construction transaction.

The commit sequence is:

1. Reserve all room tiles in the workspace.
2. Place every furniture item.
3. Build walls on every placeable non-door edge tile.
4. Build the door opening.
5. Finalize the construction site.
6. Release the workspace.

Step 6 always runs. A failure at steps 1-5 propagates as a
`ConstructionError` tagged with the failing `CommitStep`. Walls already
built when a later step fails stay in place.
"""

import logging

from dataclasses import dataclass, field
from typing import Any

from roomsmith.construction.errors import (
    CommitStep,
    ConstructionError,
    DoorPlacementFailedError,
    HostError,
)
from roomsmith.construction.host import ConstructionHost
from roomsmith.construction.workspace import Workspace
from roomsmith.layout.grid_geometry import TileCoord
from roomsmith.layout.perimeter import Perimeter
from roomsmith.layout.room import RoomInstance

console_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstructionSpec:
    """Parameters handed to the host when finalizing a construction."""

    upgrade: int
    """Upgrade level of the room."""

    constructor: Any
    """Room blueprint/constructor reference."""

    material: Any
    """Building material for walls and the door opening."""

    degrade: int = 0
    """Initial degradation level."""

    state: Any = None
    """Opaque host state passed through on finalization."""

    def __post_init__(self) -> None:
        if self.upgrade < 0:
            raise ValueError(f"Upgrade level must be >= 0, got {self.upgrade}")
        if self.degrade < 0:
            raise ValueError(f"Degrade level must be >= 0, got {self.degrade}")

    def to_dict(self) -> dict:
        return {
            "upgrade": self.upgrade,
            "constructor": str(self.constructor),
            "material": None if self.material is None else str(self.material),
            "degrade": self.degrade,
        }


@dataclass
class CommitReport:
    """Outcome of a successful commit."""

    workspace_name: str
    """Name of the workspace the room was committed from."""

    walls_placed: list[TileCoord] = field(default_factory=list)
    """Edge tiles that received a wall, in scan order."""

    walls_skipped: list[TileCoord] = field(default_factory=list)
    """Edge tiles left alone because the host refused a wall there."""

    door_tile: TileCoord | None = None
    """Tile of the door opening, if any."""

    furniture_count: int = 0
    """Number of furniture items placed."""

    def to_dict(self) -> dict:
        return {
            "workspace_name": self.workspace_name,
            "walls_placed": [list(tile) for tile in self.walls_placed],
            "walls_skipped": [list(tile) for tile in self.walls_skipped],
            "door_tile": None if self.door_tile is None else list(self.door_tile),
            "furniture_count": self.furniture_count,
        }


def commit(
    room_instance: RoomInstance,
    perimeter: Perimeter,
    spec: ConstructionSpec,
    workspace: Workspace,
    host: ConstructionHost,
) -> CommitReport:
    """Commit a planned room to the host.

    Args:
        room_instance: Planned room tiles and furniture.
        perimeter: Edge tiles and door tile of the room.
        spec: Construction parameters for finalization.
        workspace: Live workspace guarding the operation. Always released on
            return.
        host: Host receiving the construction.

    Returns:
        CommitReport describing what was built.

    Raises:
        ConstructionError: Tagged with the failing step. Arbitrary host
            exceptions are wrapped in `HostError`.
    """
    if workspace.is_released:
        raise ConstructionError(
            f"Workspace {workspace.name} was already released",
            step=CommitStep.RESERVE,
        )

    report = CommitReport(workspace_name=workspace.name)
    step = CommitStep.RESERVE
    try:
        workspace.reserve(room_instance.room_tiles)

        step = CommitStep.FURNITURE
        for placed in room_instance.furniture:
            host.furniture_place(placed.anchor, placed.furniture, workspace.handle)
            report.furniture_count += 1

        step = CommitStep.WALLS
        for tile in perimeter.wall_tiles:
            if host.wall_placeable(tile):
                host.wall_place(tile, spec.material)
                report.walls_placed.append(tile)
            else:
                report.walls_skipped.append(tile)
        if report.walls_skipped:
            console_logger.warning(
                f"Skipped {len(report.walls_skipped)} non-placeable wall tiles "
                f"for {workspace.name}"
            )

        step = CommitStep.DOOR
        door = perimeter.door_tile
        if door is not None:
            if not host.opening_placeable(door):
                raise DoorPlacementFailedError(door)
            host.opening_place(door, spec.material)
            report.door_tile = door

        step = CommitStep.FINALIZE
        host.construction_finalize(workspace.handle, spec)
        workspace.mark_committed()
    except ConstructionError as e:
        if e.step is None:
            e.step = step
        workspace.mark_aborted()
        console_logger.error(f"Commit of {workspace.name} failed: {e}")
        raise
    except Exception as e:
        workspace.mark_aborted()
        console_logger.error(f"Commit of {workspace.name} failed at {step.value}: {e}")
        raise HostError(f"Host failure: {e}", step=step) from e
    finally:
        workspace.release()

    console_logger.info(
        f"Committed {workspace.name}: {len(room_instance.room_tiles)} room tiles, "
        f"{report.furniture_count} furniture, {len(report.walls_placed)} walls, "
        f"door at {report.door_tile}"
    )
    return report
