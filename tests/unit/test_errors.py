import unittest

from roomsmith.construction.errors import (
    BlueprintNotFoundError,
    CommitStep,
    ConstructionError,
    DoorPlacementFailedError,
    HostError,
    NameInUseError,
    NoDoorCandidateError,
    TileInUseError,
    ValidationFailedError,
)
from roomsmith.construction.validation import ObstructionReport
from roomsmith.layout.grid_geometry import TileCoord


class TestErrors(unittest.TestCase):
    """Test the construction error taxonomy."""

    def test_hierarchy(self):
        for error_type in (
            ValidationFailedError,
            NameInUseError,
            TileInUseError,
            NoDoorCandidateError,
            DoorPlacementFailedError,
            HostError,
            BlueprintNotFoundError,
        ):
            with self.subTest(error_type=error_type.__name__):
                self.assertTrue(issubclass(error_type, ConstructionError))

    def test_step_prefix(self):
        error = HostError("host rejected furniture", step=CommitStep.FURNITURE)
        self.assertEqual(str(error), "[furniture] host rejected furniture")
        self.assertEqual(str(HostError("plain")), "plain")

    def test_tile_in_use_message(self):
        error = TileInUseError(TileCoord(3, 4), owner="tmp-a")
        self.assertEqual(str(error), "Tile (3,4) is in use by tmp-a")
        self.assertEqual(str(TileInUseError(TileCoord(3, 4))), "Tile (3,4) is in use")

    def test_door_placement_failed_defaults_to_door_step(self):
        error = DoorPlacementFailedError(TileCoord(101, 99))
        self.assertEqual(error.step, CommitStep.DOOR)
        self.assertIn("(101,99)", str(error))

    def test_validation_failed_carries_report(self):
        report = ObstructionReport(entity_count=1, entity_sample=["settler"])
        error = ValidationFailedError("Cannot build well", report=report)
        self.assertIs(error.report, report)

    def test_blueprint_not_found_is_key_error(self):
        error = BlueprintNotFoundError("HOME")
        self.assertIsInstance(error, KeyError)
        self.assertEqual(str(error), "No room blueprint for key 'HOME'")


if __name__ == "__main__":
    unittest.main()
