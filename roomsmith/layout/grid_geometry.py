"""Pure tile-grid utilities for room layout.

All functions are stateless and total over integer inputs. Tiles are
`TileCoord` named tuples, so they hash by value and can be used as set members
and dictionary keys everywhere in the package.

Y grows downwards (row index), so "north" means y - 1.
"""

from typing import Iterable, NamedTuple


class TileCoord(NamedTuple):
    """Integer tile coordinate on the world grid."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "TileCoord":
        """Return the tile shifted by (dx, dy)."""
        return TileCoord(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


ORTHOGONAL_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, -1),  # N
    (0, 1),  # S
    (1, 0),  # E
    (-1, 0),  # W
)

DIAGONAL_OFFSETS: tuple[tuple[int, int], ...] = (
    (1, -1),  # NE
    (-1, -1),  # NW
    (1, 1),  # SE
    (-1, 1),  # SW
)

ALL_OFFSETS = ORTHOGONAL_OFFSETS + DIAGONAL_OFFSETS


def neighbors4(tile: TileCoord) -> list[TileCoord]:
    """Orthogonal neighbours of a tile (N, S, E, W)."""
    return [tile.offset(dx, dy) for dx, dy in ORTHOGONAL_OFFSETS]


def neighbors8(tile: TileCoord) -> list[TileCoord]:
    """Orthogonal and diagonal neighbours of a tile (N, S, E, W, NE, NW, SE, SW)."""
    return [tile.offset(dx, dy) for dx, dy in ALL_OFFSETS]


def scan_order(tile: TileCoord) -> tuple[int, int]:
    """Sort key for the canonical scan order: ascending y, then x."""
    return (tile.y, tile.x)


def sorted_tiles(tiles: Iterable[TileCoord]) -> list[TileCoord]:
    """Return tiles as a list in scan order."""
    return sorted(tiles, key=scan_order)


def rect_tiles(origin: TileCoord, width: int, height: int) -> frozenset[TileCoord]:
    """All tiles of an axis-aligned rectangle with top-left corner `origin`.

    Non-positive width or height yields an empty set.
    """
    if width <= 0 or height <= 0:
        return frozenset()
    return frozenset(
        TileCoord(origin.x + dx, origin.y + dy)
        for dy in range(height)
        for dx in range(width)
    )


def rect_edge_tiles(origin: TileCoord, width: int, height: int) -> frozenset[TileCoord]:
    """Ring of tiles surrounding a rectangle, corners included.

    Closed form of `edge_tiles(rect_tiles(origin, width, height))` for a
    rectangular room. The ring has 2 * width + 2 * height + 4 tiles.
    """
    if width <= 0 or height <= 0:
        return frozenset()
    left = origin.x - 1
    right = origin.x + width
    top = origin.y - 1
    bottom = origin.y + height

    ring = set()
    for x in range(left, right + 1):
        ring.add(TileCoord(x, top))
        ring.add(TileCoord(x, bottom))
    for y in range(origin.y, bottom):
        ring.add(TileCoord(left, y))
        ring.add(TileCoord(right, y))
    return frozenset(ring)


def anchor_from_center(center: TileCoord, width: int, height: int) -> TileCoord:
    """Top-left tile of a width x height rectangle centred on `center`.

    Uses floor division, so even sizes are biased towards the bottom-right:
    a 4-wide rectangle centred on x=10 spans x=8..11.
    """
    return TileCoord(center.x - width // 2, center.y - height // 2)


def bounding_box(tiles: Iterable[TileCoord]) -> tuple[int, int, int, int]:
    """Inclusive bounding box (min_x, min_y, max_x, max_y) of a tile set.

    Raises:
        ValueError: If `tiles` is empty.
    """
    tiles = list(tiles)
    if not tiles:
        raise ValueError("Cannot compute bounding box of an empty tile set")
    xs = [t.x for t in tiles]
    ys = [t.y for t in tiles]
    return min(xs), min(ys), max(xs), max(ys)
