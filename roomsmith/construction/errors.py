"""Errors raised while validating, reserving and committing room construction.

Every error aborts the current operation. The workspace guarding the
operation is released before the error reaches the caller, and nothing is
retried automatically.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from roomsmith.construction.validation import ObstructionReport
    from roomsmith.layout.grid_geometry import TileCoord


class CommitStep(Enum):
    """Steps of the construction commit sequence."""

    RESERVE = "reserve"
    FURNITURE = "furniture"
    WALLS = "walls"
    DOOR = "door"
    FINALIZE = "finalize"


class ConstructionError(Exception):
    """Base class for construction failures.

    `step` names the commit step that failed, or is None for failures before
    the commit sequence started.
    """

    def __init__(self, message: str, step: CommitStep | None = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step is None:
            return self.message
        return f"[{self.step.value}] {self.message}"


class ValidationFailedError(ConstructionError):
    """Raised when the target area is obstructed before any reservation."""

    def __init__(self, message: str, report: "ObstructionReport"):
        super().__init__(message)
        self.report = report


class NameInUseError(ConstructionError):
    """Raised by the host when a workspace name is already live."""

    def __init__(self, name: str, step: CommitStep | None = None):
        super().__init__(f"Workspace name {name!r} is in use", step=step)
        self.name = name


class TileInUseError(ConstructionError):
    """Raised by the host when a tile is reserved by another owner."""

    def __init__(
        self, tile: "TileCoord", owner: Any = None, step: CommitStep | None = None
    ):
        owner_text = f" by {owner}" if owner is not None else ""
        super().__init__(f"Tile {tile} is in use{owner_text}", step=step)
        self.tile = tile
        self.owner = owner


class NoDoorCandidateError(ConstructionError):
    """Raised when no door tile can be chosen for a room.

    Usually means the template's entrance hints do not touch its perimeter.
    """


class DoorPlacementFailedError(ConstructionError):
    """Raised when the host refuses the door opening.

    Walls placed before the failure are not rolled back.
    """

    def __init__(self, tile: "TileCoord", step: CommitStep | None = CommitStep.DOOR):
        super().__init__(f"Cannot build door opening at {tile}", step=step)
        self.tile = tile


class HostError(ConstructionError):
    """Opaque failure reported by a host collaborator."""


class BlueprintNotFoundError(ConstructionError, KeyError):
    """Raised when the blueprint registry has no template for a key."""

    def __init__(self, key: Any):
        super().__init__(f"No room blueprint for key {key!r}")
        self.key = key
