"""Room template and room instance data structures."""

import dataclasses

from dataclasses import dataclass, field
from typing import Mapping

import numpy as np

from roomsmith.layout.grid_geometry import TileCoord, sorted_tiles

EMPTY_CELL_CHARS = frozenset({".", " "})
"""Characters treated as empty cells by `RoomTemplate.from_rows`."""

VALID_ROTATIONS = (0, 1, 2, 3)
"""Quarter-turn rotations supported for templates."""


@dataclass(frozen=True)
class FurnitureRef:
    """Reference to a furniture item known to the host's furniture registry."""

    key: str
    """Furniture item key (e.g., "well", "workbench")."""

    group: int = 0
    """Index of the furniture group within the room's furnisher."""

    variation: int = 0
    """Size variation of the item within its group."""

    rotation: int = 0
    """Quarter-turn rotation of the item."""

    def to_dict(self) -> dict:
        """Serialize reference to dictionary."""
        return {
            "key": self.key,
            "group": self.group,
            "variation": self.variation,
            "rotation": self.rotation,
        }


@dataclass(frozen=True)
class OccupiedCell:
    """Template cell covered by a furniture item."""

    furniture: FurnitureRef
    """Furniture item occupying the cell."""

    entrance: bool = False
    """Whether a door is preferred next to this cell (a hint, not a door)."""


Cell = OccupiedCell | None
"""A template cell: `None` when empty, otherwise an `OccupiedCell`."""


@dataclass(frozen=True, eq=False)
class RoomTemplate:
    """Fixed grid of cells describing a room's furniture and entrance layout.

    Templates are built once per room type, variation and rotation by the
    blueprint registry and are read-only afterwards. The cell grid is indexed
    `cells[y, x]`.
    """

    room_type: str
    """Room blueprint key (e.g., "WELL", "JANITOR")."""

    cells: np.ndarray
    """Object array of shape (height, width) holding `Cell` values."""

    variation: int = 0
    """Size variation index within the room type."""

    rotation: int = 0
    """Quarter-turn rotation baked into the cell grid."""

    def __post_init__(self) -> None:
        cells = np.array(self.cells, dtype=object)
        if cells.ndim != 2:
            raise ValueError(
                f"Template {self.room_type} cells must be 2D, got shape {cells.shape}"
            )
        height, width = cells.shape
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Template {self.room_type} must have positive size, got "
                f"{width}x{height}"
            )
        if self.rotation not in VALID_ROTATIONS:
            raise ValueError(
                f"Template rotation must be one of {VALID_ROTATIONS}, got "
                f"{self.rotation}"
            )
        for cell in cells.flat:
            if cell is not None and not isinstance(cell, OccupiedCell):
                raise TypeError(f"Invalid template cell: {cell!r}")
        cells.flags.writeable = False
        object.__setattr__(self, "cells", cells)

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    def cell(self, x: int, y: int) -> Cell:
        """Cell at template column `x`, row `y`."""
        return self.cells[y, x]

    @property
    def occupancy_mask(self) -> np.ndarray:
        """Boolean (height, width) mask of occupied cells."""
        return np.vectorize(lambda c: c is not None, otypes=[bool])(self.cells)

    @property
    def entrance_mask(self) -> np.ndarray:
        """Boolean (height, width) mask of entrance-hint cells."""
        return np.vectorize(lambda c: c is not None and c.entrance, otypes=[bool])(
            self.cells
        )

    def rotated(self, quarter_turns: int) -> "RoomTemplate":
        """Return a copy rotated clockwise by `quarter_turns` * 90 degrees.

        Furniture references are rotated with the grid so the host places the
        matching item orientation.
        """
        k = quarter_turns % 4
        if k == 0:
            return self
        rotated_cells = np.rot90(self.cells, k=-k).copy()
        for index, cell in np.ndenumerate(rotated_cells):
            if cell is not None:
                ref = cell.furniture
                rotated_cells[index] = dataclasses.replace(
                    cell,
                    furniture=dataclasses.replace(
                        ref, rotation=(ref.rotation + k) % 4
                    ),
                )
        return RoomTemplate(
            room_type=self.room_type,
            cells=rotated_cells,
            variation=self.variation,
            rotation=(self.rotation + k) % 4,
        )

    @classmethod
    def from_rows(
        cls,
        room_type: str,
        rows: list[str],
        legend: Mapping[str, OccupiedCell],
        variation: int = 0,
        rotation: int = 0,
    ) -> "RoomTemplate":
        """Build a template from text rows.

        Args:
            room_type: Room blueprint key.
            rows: One string per template row. "." and " " are empty cells.
            legend: Map of every other character to the cell it stands for.
            variation: Size variation index.
            rotation: Rotation already baked into `rows`.

        Returns:
            The template.

        Raises:
            ValueError: If rows are empty, ragged, or use unknown characters.
        """
        if not rows:
            raise ValueError(f"Template {room_type} has no rows")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError(f"Template {room_type} rows must all be {width} wide")

        cells = np.empty((len(rows), width), dtype=object)
        for y, row in enumerate(rows):
            for x, char in enumerate(row):
                if char in EMPTY_CELL_CHARS:
                    cells[y, x] = None
                elif char in legend:
                    cells[y, x] = legend[char]
                else:
                    raise ValueError(
                        f"Template {room_type} uses unknown cell character {char!r}"
                    )
        return cls(room_type=room_type, cells=cells, variation=variation, rotation=rotation)

    def to_rows(self) -> list[str]:
        """Render occupancy as text rows ("#" furniture, "E" entrance, "." empty)."""
        rows = []
        for y in range(self.height):
            chars = []
            for x in range(self.width):
                cell = self.cell(x, y)
                if cell is None:
                    chars.append(".")
                else:
                    chars.append("E" if cell.entrance else "#")
            rows.append("".join(chars))
        return rows


@dataclass(frozen=True)
class PlacedFurniture:
    """A furniture item anchored in world space for one construction."""

    furniture: FurnitureRef
    """Furniture item to place."""

    anchor: TileCoord
    """World tile of the item's top-left cell."""

    tiles: frozenset[TileCoord] = field(default_factory=frozenset)
    """World tiles covered by the item."""

    def to_dict(self) -> dict:
        """Serialize placement to dictionary."""
        return {
            "furniture": self.furniture.to_dict(),
            "anchor": list(self.anchor),
            "tiles": [list(t) for t in sorted_tiles(self.tiles)],
        }


@dataclass(frozen=True)
class RoomInstance:
    """Tiles of one planned room in world space.

    Derived and transient: produced by the placement planner, consumed by the
    perimeter resolver and the committer.
    """

    room_tiles: frozenset[TileCoord]
    """Tiles belonging to the room."""

    entrance_tiles: frozenset[TileCoord] = field(default_factory=frozenset)
    """Room tiles flagged as door-adjacent-preferred."""

    occupied_tiles: frozenset[TileCoord] = field(default_factory=frozenset)
    """Room tiles covered by furniture."""

    furniture: tuple[PlacedFurniture, ...] = ()
    """Furniture placements in anchor scan order."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "room_tiles", frozenset(self.room_tiles))
        object.__setattr__(self, "entrance_tiles", frozenset(self.entrance_tiles))
        object.__setattr__(self, "occupied_tiles", frozenset(self.occupied_tiles))
        object.__setattr__(self, "furniture", tuple(self.furniture))

        stray_occupied = self.occupied_tiles - self.room_tiles
        if stray_occupied:
            raise ValueError(
                f"Occupied tiles outside the room: {sorted_tiles(stray_occupied)}"
            )
        stray_entrances = self.entrance_tiles - self.room_tiles
        if stray_entrances:
            raise ValueError(
                f"Entrance tiles outside the room: {sorted_tiles(stray_entrances)}"
            )

    @property
    def free_tiles(self) -> frozenset[TileCoord]:
        """Room tiles not covered by furniture."""
        return self.room_tiles - self.occupied_tiles

    def to_dict(self) -> dict:
        """Serialize room instance to dictionary."""
        return {
            "room_tiles": [list(t) for t in sorted_tiles(self.room_tiles)],
            "entrance_tiles": [list(t) for t in sorted_tiles(self.entrance_tiles)],
            "occupied_tiles": [list(t) for t in sorted_tiles(self.occupied_tiles)],
            "furniture": [f.to_dict() for f in self.furniture],
        }
