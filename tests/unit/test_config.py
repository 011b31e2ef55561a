import shutil
import tempfile
import unittest

from pathlib import Path

from omegaconf import OmegaConf

from roomsmith.construction.config import BuildConfig, DoorPolicy
from roomsmith.layout.perimeter import Side
from roomsmith.utils.config import CONFIG_DIR, load_config


class TestLoadConfig(unittest.TestCase):
    """Test loading the shipped and custom configuration files."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_shipped_config(self):
        cfg = load_config()
        self.assertEqual(CONFIG_DIR.name, "configurations")
        self.assertIn("builder", cfg)
        self.assertIn("WELL", cfg.blueprints)

    def test_config_file_path(self):
        cfg = load_config(CONFIG_DIR / "config.yaml")
        self.assertIn("blueprints", cfg)

    def test_custom_directory_without_blueprints(self):
        OmegaConf.save(
            OmegaConf.create({"builder": {"door_policy": "free_tile_fallback"}}),
            self.temp_dir / "config.yaml",
        )
        cfg = load_config(self.temp_dir)
        self.assertEqual(cfg.builder.door_policy, "free_tile_fallback")
        self.assertNotIn("blueprints", cfg)

    def test_missing_config(self):
        with self.assertRaises(FileNotFoundError):
            load_config(self.temp_dir)


class TestBuildConfig(unittest.TestCase):
    """Test builder settings."""

    def test_from_shipped_config(self):
        config = BuildConfig.from_config(load_config().builder)
        self.assertEqual(config.workspace_prefix, "tmp")
        self.assertTrue(config.validate_area)
        self.assertEqual(config.door_policy, DoorPolicy.REQUIRE_ENTRANCE)
        self.assertEqual(config.preferred_side, Side.TOP)
        self.assertEqual(config.default_material, "WOOD")
        self.assertEqual(config.obstruction_sample_size, 5)

    def test_string_enums_are_converted(self):
        config = BuildConfig(door_policy="free_tile_fallback", preferred_side="left")
        self.assertEqual(config.door_policy, DoorPolicy.FREE_TILE_FALLBACK)
        self.assertEqual(config.preferred_side, Side.LEFT)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            BuildConfig(door_policy="guess")
        with self.assertRaises(ValueError):
            BuildConfig(default_upgrade=-1)
        with self.assertRaises(ValueError):
            BuildConfig(obstruction_sample_size=-5)


if __name__ == "__main__":
    unittest.main()
