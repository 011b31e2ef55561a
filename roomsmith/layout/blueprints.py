"""Blueprint registry serving room templates by room type, variation and rotation."""

import logging

from dataclasses import dataclass
from typing import Any, NamedTuple

from omegaconf import DictConfig

from roomsmith.construction.errors import BlueprintNotFoundError
from roomsmith.layout.room import VALID_ROTATIONS, FurnitureRef, OccupiedCell, RoomTemplate

console_logger = logging.getLogger(__name__)


class BlueprintKey(NamedTuple):
    """Registry key of one template."""

    room_type: str
    variation: int = 0
    rotation: int = 0


@dataclass(frozen=True)
class RoomBlueprint:
    """Per room type construction defaults."""

    room_type: str
    """Room blueprint key (e.g., "WELL")."""

    constructor: Any
    """Constructor/furnisher reference handed to the host on finalization."""

    material: str | None = None
    """Default building material, or None to use the builder's default."""


class BlueprintRegistry:
    """In-memory registry of read-only room templates."""

    def __init__(self) -> None:
        self._templates: dict[BlueprintKey, RoomTemplate] = {}
        self._blueprints: dict[str, RoomBlueprint] = {}

    def register(self, template: RoomTemplate, include_rotations: bool = False) -> None:
        """Register a template under its (room type, variation, rotation) key.

        Args:
            template: Template to register.
            include_rotations: Also register the three other rotation variants.

        Raises:
            ValueError: If a template is already registered under the key.
        """
        variants = [template]
        if include_rotations:
            variants.extend(template.rotated(k) for k in (1, 2, 3))

        for variant in variants:
            key = BlueprintKey(variant.room_type, variant.variation, variant.rotation)
            if key in self._templates:
                raise ValueError(f"Template {key} already registered")
            self._templates[key] = variant
        console_logger.debug(
            f"Registered {len(variants)} template(s) for {template.room_type} "
            f"variation {template.variation}"
        )

    def register_blueprint(self, blueprint: RoomBlueprint) -> None:
        """Register construction defaults for a room type."""
        self._blueprints[blueprint.room_type] = blueprint

    def lookup(self, key: str | BlueprintKey | tuple) -> RoomTemplate:
        """Get the template for a key.

        Args:
            key: Room type string (variation 0, rotation 0) or a
                `BlueprintKey`/tuple of (room_type, variation, rotation).

        Returns:
            The registered template.

        Raises:
            BlueprintNotFoundError: If nothing is registered under the key.
        """
        normalized = BlueprintKey(key) if isinstance(key, str) else BlueprintKey(*key)
        if normalized.rotation not in VALID_ROTATIONS:
            raise BlueprintNotFoundError(key)
        template = self._templates.get(normalized)
        if template is None:
            raise BlueprintNotFoundError(key)
        return template

    def blueprint(self, room_type: str) -> RoomBlueprint:
        """Construction defaults for a room type.

        Room types registered without explicit defaults use their own name as
        the constructor reference.
        """
        if room_type in self._blueprints:
            return self._blueprints[room_type]
        if not self.variations(room_type):
            raise BlueprintNotFoundError(room_type)
        return RoomBlueprint(room_type=room_type, constructor=room_type)

    def room_types(self) -> list[str]:
        """All registered room types, sorted."""
        return sorted({key.room_type for key in self._templates})

    def variations(self, room_type: str) -> list[int]:
        """Registered variation indices of a room type, sorted."""
        return sorted(
            {key.variation for key in self._templates if key.room_type == room_type}
        )

    def select_variation(self, room_type: str, max_width: int, max_height: int) -> int:
        """Largest variation whose unrotated template fits the given area.

        Variations are ranked by footprint area. Falls back to the smallest
        variation when none fits.

        Raises:
            BlueprintNotFoundError: If the room type is unknown.
        """
        variations = self.variations(room_type)
        if not variations:
            raise BlueprintNotFoundError(room_type)

        def area(variation: int) -> int:
            template = self.lookup(BlueprintKey(room_type, variation, 0))
            return template.width * template.height

        fitting = [
            v
            for v in variations
            if (t := self.lookup(BlueprintKey(room_type, v, 0))).width <= max_width
            and t.height <= max_height
        ]
        if not fitting:
            smallest = min(variations, key=area)
            console_logger.warning(
                f"No {room_type} variation fits {max_width}x{max_height}, "
                f"using smallest variation {smallest}"
            )
            return smallest
        return max(fitting, key=area)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, key: object) -> bool:
        try:
            self.lookup(key)  # type: ignore[arg-type]
        except (BlueprintNotFoundError, TypeError):
            return False
        return True

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "BlueprintRegistry":
        """Create a registry from an OmegaConf `blueprints` tree.

        Expected structure per room type::

            WELL:
              constructor: WELL        # optional, defaults to the room type
              material: STONE          # optional
              legend:
                W: {furniture: well}
                E: {furniture: well, entrance: true}
              variations:
                - rows: ["WEW", "WWW", "WWW"]

        Legend entries may also set `group`. A variation may override the
        legend. Every variation is registered in all four rotations.

        Args:
            cfg: The `blueprints` config subtree.

        Returns:
            Populated registry.
        """
        registry = cls()
        for room_type, room_cfg in cfg.items():
            room_type = str(room_type)
            registry.register_blueprint(
                RoomBlueprint(
                    room_type=room_type,
                    constructor=room_cfg.get("constructor", room_type),
                    material=room_cfg.get("material", None),
                )
            )
            for variation, variation_cfg in enumerate(room_cfg.variations):
                legend_cfg = variation_cfg.get("legend", None) or room_cfg.legend
                legend = {
                    str(char): OccupiedCell(
                        furniture=FurnitureRef(
                            key=str(entry.furniture),
                            group=int(entry.get("group", 0)),
                            variation=variation,
                        ),
                        entrance=bool(entry.get("entrance", False)),
                    )
                    for char, entry in legend_cfg.items()
                }
                template = RoomTemplate.from_rows(
                    room_type=room_type,
                    rows=[str(row) for row in variation_cfg.rows],
                    legend=legend,
                    variation=variation,
                )
                registry.register(template, include_rotations=True)

        console_logger.info(
            f"Loaded {len(registry.room_types())} room types "
            f"({len(registry)} templates) into blueprint registry"
        )
        return registry
