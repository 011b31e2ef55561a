import unittest

from omegaconf import OmegaConf

from roomsmith.construction.errors import BlueprintNotFoundError
from roomsmith.layout.blueprints import BlueprintKey, BlueprintRegistry, RoomBlueprint
from roomsmith.layout.room import FurnitureRef
from roomsmith.utils.config import load_config
from tests.unit.mock_utils import make_template


class TestBlueprintRegistry(unittest.TestCase):
    """Test template registration and lookup."""

    def setUp(self):
        self.registry = BlueprintRegistry()
        self.well = make_template(["#E#", "###", "###"], room_type="WELL")
        self.registry.register(self.well, include_rotations=True)

    def test_lookup_by_room_type_returns_unrotated(self):
        self.assertIs(self.registry.lookup("WELL"), self.well)

    def test_lookup_rotation_variant(self):
        rotated = self.registry.lookup(BlueprintKey("WELL", 0, 3))
        self.assertEqual(rotated.rotation, 3)
        # Three clockwise turns move the top entrance to the left edge.
        self.assertEqual(rotated.to_rows(), ["###", "E##", "###"])
        self.assertEqual(len(self.registry), 4)

    def test_lookup_accepts_plain_tuple(self):
        self.assertEqual(self.registry.lookup(("WELL", 0, 2)).rotation, 2)

    def test_missing_key_raises(self):
        with self.assertRaises(BlueprintNotFoundError):
            self.registry.lookup("HOME")
        with self.assertRaises(BlueprintNotFoundError):
            self.registry.lookup(("WELL", 1, 0))
        with self.assertRaises(BlueprintNotFoundError):
            self.registry.lookup(("WELL", 0, 4))

    def test_missing_key_is_a_key_error(self):
        with self.assertRaises(KeyError) as context:
            self.registry.lookup("HOME")
        self.assertIn("HOME", str(context.exception))

    def test_contains(self):
        self.assertIn("WELL", self.registry)
        self.assertIn(BlueprintKey("WELL", 0, 1), self.registry)
        self.assertNotIn("HOME", self.registry)

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):
            self.registry.register(self.well)

    def test_blueprint_defaults_to_room_type_constructor(self):
        blueprint = self.registry.blueprint("WELL")
        self.assertEqual(blueprint.constructor, "WELL")
        self.assertIsNone(blueprint.material)

        self.registry.register_blueprint(
            RoomBlueprint(room_type="WELL", constructor="WELL_V2", material="STONE")
        )
        self.assertEqual(self.registry.blueprint("WELL").constructor, "WELL_V2")

        with self.assertRaises(BlueprintNotFoundError):
            self.registry.blueprint("HOME")

    def test_room_types_and_variations(self):
        self.registry.register(make_template(["#E", "##"], room_type="HEARTH"))
        self.assertEqual(self.registry.room_types(), ["HEARTH", "WELL"])
        self.assertEqual(self.registry.variations("WELL"), [0])
        self.assertEqual(self.registry.variations("HOME"), [])


class TestBlueprintRegistryFromConfig(unittest.TestCase):
    """Test loading templates from OmegaConf trees."""

    def test_from_inline_config(self):
        cfg = OmegaConf.create(
            {
                "WORKSHOP": {
                    "material": "WOOD",
                    "legend": {
                        "B": {"furniture": "bench", "group": 2},
                        "E": {"furniture": "bench", "group": 2, "entrance": True},
                    },
                    "variations": [{"rows": ["BE"]}, {"rows": ["BBE", "BBB"]}],
                }
            }
        )
        registry = BlueprintRegistry.from_config(cfg)

        self.assertEqual(len(registry), 8)
        self.assertEqual(registry.variations("WORKSHOP"), [0, 1])
        large = registry.lookup(BlueprintKey("WORKSHOP", 1, 0))
        self.assertEqual(
            large.cell(0, 0).furniture,
            FurnitureRef(key="bench", group=2, variation=1),
        )
        self.assertTrue(large.cell(2, 0).entrance)
        self.assertEqual(registry.blueprint("WORKSHOP").constructor, "WORKSHOP")
        self.assertEqual(registry.blueprint("WORKSHOP").material, "WOOD")

    def test_variation_legend_override(self):
        cfg = OmegaConf.create(
            {
                "SHED": {
                    "legend": {"S": {"furniture": "shelf"}},
                    "variations": [
                        {"rows": ["S"]},
                        {"rows": ["X"], "legend": {"X": {"furniture": "crate"}}},
                    ],
                }
            }
        )
        registry = BlueprintRegistry.from_config(cfg)
        self.assertEqual(
            registry.lookup(("SHED", 1, 0)).cell(0, 0).furniture.key, "crate"
        )

    def test_shipped_blueprints(self):
        cfg = load_config()
        registry = BlueprintRegistry.from_config(cfg.blueprints)

        self.assertEqual(registry.room_types(), ["HEARTH", "JANITOR", "WELL"])
        well = registry.lookup("WELL")
        self.assertEqual(well.to_rows(), ["#E#", "###", "###"])
        self.assertEqual(registry.blueprint("WELL").material, "STONE")

    def test_select_variation(self):
        registry = BlueprintRegistry.from_config(load_config().blueprints)

        self.assertEqual(registry.select_variation("HEARTH", 3, 3), 1)
        self.assertEqual(registry.select_variation("HEARTH", 10, 10), 2)
        self.assertEqual(registry.select_variation("HEARTH", 2, 5), 0)
        # Nothing fits: fall back to the smallest variation.
        self.assertEqual(registry.select_variation("HEARTH", 1, 1), 0)
        with self.assertRaises(BlueprintNotFoundError):
            registry.select_variation("HOME", 5, 5)


if __name__ == "__main__":
    unittest.main()
