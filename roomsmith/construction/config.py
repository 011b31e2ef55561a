"""Configuration for the room builder."""

import logging

from dataclasses import dataclass
from enum import Enum

from omegaconf import DictConfig

from roomsmith.layout.perimeter import Side

console_logger = logging.getLogger(__name__)


class DoorPolicy(Enum):
    """What the builder does when the entrance hints yield no door."""

    REQUIRE_ENTRANCE = "require_entrance"
    """Fail with `NoDoorCandidateError`."""

    FREE_TILE_FALLBACK = "free_tile_fallback"
    """Pick an edge tile next to free floor, preferring the configured side.

    Only rooms with free floor can use it, which means `build_furnished` rooms.
    Template rooms from `RoomBuilder.build` occupy every tile, so they still
    fail with `NoDoorCandidateError`.
    """


@dataclass
class BuildConfig:
    """Settings for `RoomBuilder`."""

    workspace_prefix: str = "tmp"
    """Prefix of generated workspace names."""

    validate_area: bool = True
    """Whether to check the footprint for obstructions before reserving it."""

    door_policy: DoorPolicy = DoorPolicy.REQUIRE_ENTRANCE
    """Behaviour when no door candidate is found."""

    preferred_side: Side = Side.TOP
    """Side used by the free-tile door fallback."""

    default_material: str = "WOOD"
    """Material used when neither the construction spec nor the blueprint sets one."""

    default_upgrade: int = 0
    """Upgrade level of rooms built without an explicit spec."""

    obstruction_sample_size: int = 5
    """Maximum number of obstruction samples kept per category."""

    def __post_init__(self) -> None:
        self.door_policy = DoorPolicy(self.door_policy)
        self.preferred_side = Side(self.preferred_side)
        if self.default_upgrade < 0:
            raise ValueError(
                f"default_upgrade must be >= 0, got {self.default_upgrade}"
            )
        if self.obstruction_sample_size < 0:
            raise ValueError(
                "obstruction_sample_size must be >= 0, got "
                f"{self.obstruction_sample_size}"
            )

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "BuildConfig":
        """Create config from an OmegaConf structure.

        Args:
            cfg: Builder config subtree (cfg.builder).

        Returns:
            BuildConfig instance.
        """
        config = cls(
            workspace_prefix=str(cfg.workspace_prefix),
            validate_area=bool(cfg.validate_area),
            door_policy=DoorPolicy(cfg.door_policy),
            preferred_side=Side(cfg.preferred_side),
            default_material=str(cfg.default_material),
            default_upgrade=int(cfg.default_upgrade),
            obstruction_sample_size=int(cfg.obstruction_sample_size),
        )
        console_logger.debug(
            f"Builder config: door_policy={config.door_policy.value}, "
            f"preferred_side={config.preferred_side.value}, "
            f"validate_area={config.validate_area}"
        )
        return config
