import unittest

from roomsmith.construction.errors import HostError, NameInUseError, TileInUseError
from roomsmith.construction.host import ConstructionHost
from roomsmith.construction.memory_host import InMemoryHost
from roomsmith.layout.grid_geometry import TileCoord, rect_tiles
from roomsmith.layout.room import FurnitureRef


class TestInMemoryHost(unittest.TestCase):
    """Test the dictionary-backed host."""

    def setUp(self):
        self.host = InMemoryHost()
        self.tiles = rect_tiles(TileCoord(0, 0), 2, 2)

    def test_implements_protocol(self):
        self.assertIsInstance(self.host, ConstructionHost)

    def test_duplicate_workspace_name(self):
        self.host.workspace_create("tmp-a")
        with self.assertRaises(NameInUseError):
            self.host.workspace_create("tmp-a")

    def test_name_reusable_after_release(self):
        area = self.host.workspace_create("tmp-a")
        self.host.workspace_release(area)
        self.host.workspace_create("tmp-a")

    def test_reserve_conflict_mutates_nothing(self):
        first = self.host.workspace_create("first")
        second = self.host.workspace_create("second")
        self.host.workspace_reserve(first, {TileCoord(1, 1)})

        with self.assertRaises(TileInUseError) as context:
            self.host.workspace_reserve(second, self.tiles)

        self.assertEqual(context.exception.tile, TileCoord(1, 1))
        self.assertEqual(context.exception.owner, "first")
        self.assertEqual(second.tiles, set())
        self.assertEqual(self.host.reservations, {TileCoord(1, 1): "first"})

    def test_release_frees_tiles(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_reserve(area, self.tiles)
        self.host.workspace_release(area)

        self.assertEqual(self.host.reservations, {})
        self.assertTrue(area.released)
        self.assertEqual(self.host.release_counts["tmp"], 1)

    def test_finalized_tiles_stay_in_use(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_reserve(area, self.tiles)
        self.host.construction_finalize(area, spec="spec")
        self.host.workspace_release(area)

        other = self.host.workspace_create("other")
        with self.assertRaises(TileInUseError):
            self.host.workspace_reserve(other, {TileCoord(0, 0)})
        self.assertEqual(len(self.host.constructions_in_area(self.tiles)), 4)
        self.assertEqual(self.host.sites[0].spec, "spec")

    def test_finalize_without_tiles_fails(self):
        area = self.host.workspace_create("tmp")
        with self.assertRaises(HostError):
            self.host.construction_finalize(area, spec=None)

    def test_furniture_requires_reserved_tile(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_reserve(area, self.tiles)
        ref = FurnitureRef(key="bed")

        self.host.furniture_place(TileCoord(0, 0), ref, area)
        with self.assertRaises(HostError):
            self.host.furniture_place(TileCoord(5, 5), ref, area)
        self.assertEqual(self.host.furniture_in_area(self.tiles), [(TileCoord(0, 0), ref)])

    def test_released_workspace_rejected(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_release(area)
        with self.assertRaises(HostError):
            self.host.workspace_reserve(area, self.tiles)

    def test_walls_and_openings(self):
        blocked = TileCoord(-1, -1)
        self.host.block({blocked})

        self.assertFalse(self.host.wall_placeable(blocked))
        self.assertFalse(self.host.opening_placeable(blocked))
        with self.assertRaises(HostError):
            self.host.wall_place(blocked, "WOOD")

        self.host.wall_place(TileCoord(2, 0), "WOOD")
        self.assertFalse(self.host.wall_placeable(TileCoord(2, 0)))

        # An opening replaces an existing wall.
        self.assertTrue(self.host.opening_placeable(TileCoord(2, 0)))
        self.host.opening_place(TileCoord(2, 0), "WOOD")
        self.assertNotIn(TileCoord(2, 0), self.host.walls)
        self.assertEqual(self.host.openings[TileCoord(2, 0)], "WOOD")

    def test_reserved_tiles_refuse_walls(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_reserve(area, self.tiles)
        self.assertFalse(self.host.wall_placeable(TileCoord(0, 0)))
        self.assertFalse(self.host.opening_placeable(TileCoord(0, 0)))

    def test_entities_in_area(self):
        self.host.add_entity(TileCoord(1, 0), "settler")
        self.host.add_entity(TileCoord(0, 1), "dog")
        self.host.add_entity(TileCoord(9, 9), "cat")
        self.assertEqual(self.host.entities_in_area(self.tiles), ["settler", "dog"])

    def test_events_recorded_in_order(self):
        area = self.host.workspace_create("tmp")
        self.host.workspace_reserve(area, self.tiles)
        self.host.workspace_release(area)
        self.assertEqual(
            [name for name, _ in self.host.events],
            ["workspace_create", "workspace_reserve", "workspace_release"],
        )


if __name__ == "__main__":
    unittest.main()
