"""Scoped tile reservations guarding a single room construction.

A workspace wraps one named temporary area of the host. It moves through
CREATED -> MARKED -> (COMMITTED | ABORTED) -> RELEASED and is released
exactly once, either explicitly or by leaving its `with` block.
"""

import logging
import time
import uuid

from enum import Enum
from typing import Any, Iterable

from roomsmith.construction.host import ConstructionHost
from roomsmith.layout.grid_geometry import TileCoord

console_logger = logging.getLogger(__name__)


class WorkspaceState(Enum):
    """Lifecycle state of a workspace."""

    CREATED = "created"
    MARKED = "marked"
    COMMITTED = "committed"
    ABORTED = "aborted"
    RELEASED = "released"


class WorkspaceReleasedError(RuntimeError):
    """Raised when a released workspace is used again."""


def generate_workspace_name(prefix: str = "tmp") -> str:
    """Unique workspace name based on a random UUID."""
    return f"{prefix}-{uuid.uuid4().hex}"


def generate_timestamp_name(prefix: str = "tmp") -> str:
    """Workspace name based on the current time in milliseconds.

    Two calls within the same millisecond return the same name, so callers
    must handle `NameInUseError`.
    """
    return f"{prefix}-{int(time.time() * 1000)}"


class Workspace:
    """Exclusive, uniquely named claim on a set of tiles.

    Use `Workspace.create` rather than the constructor so the host area exists
    before the object is handed out.
    """

    def __init__(self, host: ConstructionHost, name: str, handle: Any) -> None:
        self.host = host
        self.name = name
        self.handle = handle
        """Host handle of the temporary area."""
        self.state = WorkspaceState.CREATED
        self.tiles: frozenset[TileCoord] = frozenset()
        self._outcome: WorkspaceState | None = None

    @classmethod
    def create(
        cls, host: ConstructionHost, name: str | None = None, prefix: str = "tmp"
    ) -> "Workspace":
        """Create a workspace backed by a new host temporary area.

        Args:
            host: Host owning the temporary areas.
            name: Workspace name. Generated from `prefix` when omitted.
            prefix: Prefix for generated names.

        Returns:
            Workspace in the CREATED state.

        Raises:
            NameInUseError: If the name is already used by a live workspace.
        """
        if name is None:
            name = generate_workspace_name(prefix)
        handle = host.workspace_create(name)
        console_logger.debug(f"Created workspace {name}")
        return cls(host=host, name=name, handle=handle)

    @property
    def outcome(self) -> WorkspaceState | None:
        """COMMITTED or ABORTED once known, kept after release."""
        return self._outcome

    @property
    def is_released(self) -> bool:
        return self.state is WorkspaceState.RELEASED

    def reserve(self, tiles: Iterable[TileCoord]) -> None:
        """Mark tiles as in use by this workspace.

        Raises:
            TileInUseError: If any tile is reserved elsewhere. Nothing is
                reserved in that case.
            WorkspaceReleasedError: If the workspace was released.
        """
        self._require_live()
        tiles = frozenset(tiles)
        self.host.workspace_reserve(self.handle, tiles)
        self.tiles = self.tiles | tiles
        self.state = WorkspaceState.MARKED
        console_logger.debug(f"Workspace {self.name} reserved {len(tiles)} tiles")

    def mark_committed(self) -> None:
        self._require_live()
        self.state = WorkspaceState.COMMITTED
        self._outcome = WorkspaceState.COMMITTED

    def mark_aborted(self) -> None:
        self._require_live()
        self.state = WorkspaceState.ABORTED
        self._outcome = WorkspaceState.ABORTED

    def release(self) -> None:
        """Clear the host area. Further calls are no-ops."""
        if self.is_released:
            return
        # Flip the state first so a failing host release is never retried.
        self.state = WorkspaceState.RELEASED
        self.host.workspace_release(self.handle)
        console_logger.debug(f"Released workspace {self.name}")

    def _require_live(self) -> None:
        if self.is_released:
            raise WorkspaceReleasedError(f"Workspace {self.name} was already released")

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None and not self.is_released:
            self.mark_aborted()
        self.release()

    def __repr__(self) -> str:
        return f"Workspace(name={self.name!r}, state={self.state.value})"
