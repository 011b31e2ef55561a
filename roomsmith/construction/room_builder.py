"""End-to-end room construction: validate, reserve, plan, resolve and commit."""

import contextlib
import dataclasses
import logging

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from roomsmith.construction.committer import CommitReport, ConstructionSpec, commit
from roomsmith.construction.config import BuildConfig, DoorPolicy
from roomsmith.construction.errors import NoDoorCandidateError
from roomsmith.construction.host import ConstructionHost
from roomsmith.construction.validation import validate_building_location
from roomsmith.construction.workspace import Workspace
from roomsmith.layout.ascii_generator import AsciiLayout, render_layout
from roomsmith.layout.blueprints import BlueprintKey, BlueprintRegistry
from roomsmith.layout.furniture_placement import (
    furniture_anchor_for_center,
    plan_furnished_room,
    plan_placement,
)
from roomsmith.layout.grid_geometry import TileCoord, rect_tiles
from roomsmith.layout.perimeter import Perimeter, find_fallback_door, resolve_perimeter
from roomsmith.layout.room import RoomInstance, RoomTemplate
from roomsmith.utils.logging import BaseLogger, FileLoggingContext

console_logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Everything produced by one successful room build."""

    name: str
    """Room name used in logs (room type or caller-supplied name)."""

    instance: RoomInstance
    """Planned room tiles and furniture."""

    perimeter: Perimeter
    """Edge tiles and the door actually built."""

    spec: ConstructionSpec
    """Spec the construction was finalized with."""

    report: CommitReport
    """What the committer placed."""

    layout: AsciiLayout
    """ASCII rendering of the room."""

    door_from_fallback: bool = False
    """Whether the door came from the free-tile fallback policy."""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "instance": self.instance.to_dict(),
            "perimeter": self.perimeter.to_dict(),
            "spec": self.spec.to_dict(),
            "report": self.report.to_dict(),
            "door_from_fallback": self.door_from_fallback,
        }


class RoomBuilder:
    """Builds rooms from registered blueprints onto a host.

    Example:
        builder = RoomBuilder(host, registry, BuildConfig())
        result = builder.build("WELL", center=TileCoord(100, 100))
    """

    def __init__(
        self,
        host: ConstructionHost,
        registry: BlueprintRegistry,
        config: BuildConfig,
        logger: BaseLogger | None = None,
    ):
        self.host = host
        self.registry = registry
        self.config = config
        self.logger = logger

    def build(
        self,
        blueprint_key: str | BlueprintKey | tuple,
        center: TileCoord | None = None,
        anchor: TileCoord | None = None,
        spec: ConstructionSpec | None = None,
    ) -> BuildResult:
        """Build a room from a blueprint template.

        Args:
            blueprint_key: Room type or (room_type, variation, rotation).
            center: Tile the template is centred on. Mutually exclusive with
                `anchor`.
            anchor: Top-left tile of the template.
            spec: Construction spec. Defaults to the blueprint's constructor
                and material with the configured upgrade level.

        Returns:
            BuildResult of the committed room.

        Raises:
            ValueError: If not exactly one of `center` and `anchor` is given.
            BlueprintNotFoundError: If the key is not registered.
            ValidationFailedError: If the footprint is obstructed.
            NoDoorCandidateError: If no door can be chosen under the policy.
            ConstructionError: If the commit fails.
        """
        if (center is None) == (anchor is None):
            raise ValueError("Exactly one of center and anchor must be given")

        template = self.registry.lookup(blueprint_key)
        if anchor is None:
            anchor = furniture_anchor_for_center(center, template)
        spec = self._resolve_spec(template.room_type, spec)

        return self._build(
            name=template.room_type,
            footprint=rect_tiles(anchor, template.width, template.height),
            plan=lambda: plan_placement(template=template, anchor=anchor),
            spec=spec,
        )

    def build_furnished(
        self,
        origin: TileCoord,
        width: int,
        height: int,
        placements: Sequence[tuple[str | BlueprintKey | RoomTemplate, TileCoord]],
        spec: ConstructionSpec,
        name: str = "room",
    ) -> BuildResult:
        """Build a rectangular room furnished with several templates.

        Args:
            origin: Top-left tile of the room.
            width: Room width in tiles.
            height: Room height in tiles.
            placements: (template or blueprint key, anchor) pairs.
            spec: Construction spec of the room.
            name: Room name used in logs and workspace names.

        Returns:
            BuildResult of the committed room.
        """
        resolved = [
            (
                item if isinstance(item, RoomTemplate) else self.registry.lookup(item),
                item_anchor,
            )
            for item, item_anchor in placements
        ]
        if spec.material is None:
            spec = dataclasses.replace(spec, material=self.config.default_material)

        return self._build(
            name=name,
            footprint=rect_tiles(origin, width, height),
            plan=lambda: plan_furnished_room(
                origin=origin, width=width, height=height, placements=resolved
            ),
            spec=spec,
        )

    def _build(
        self,
        name: str,
        footprint: frozenset[TileCoord],
        plan: Callable[[], RoomInstance],
        spec: ConstructionSpec,
    ) -> BuildResult:
        if self.config.validate_area:
            validate_building_location(
                host=self.host,
                area=footprint,
                building_name=name,
                sample_size=self.config.obstruction_sample_size,
            )

        with Workspace.create(
            self.host, prefix=f"{self.config.workspace_prefix}-{name.lower()}"
        ) as workspace, self._build_log(workspace.name):
            instance = plan()
            perimeter = resolve_perimeter(
                room_tiles=instance.room_tiles,
                entrance_tiles=instance.entrance_tiles,
                occupied_tiles=instance.occupied_tiles,
            )
            perimeter, from_fallback = self._apply_door_policy(name, instance, perimeter)
            report = commit(
                room_instance=instance,
                perimeter=perimeter,
                spec=spec,
                workspace=workspace,
                host=self.host,
            )

            result = BuildResult(
                name=name,
                instance=instance,
                perimeter=perimeter,
                spec=spec,
                report=report,
                layout=render_layout(instance, perimeter),
                door_from_fallback=from_fallback,
            )
            console_logger.info(
                f"Built {name} ({len(instance.room_tiles)} tiles) with door at "
                f"{perimeter.door_tile}:\n{result.layout.ascii_art}"
            )
            if self.logger is not None:
                self.logger.log_build(result=result, name=report.workspace_name)
        return result

    def _build_log(self, workspace_name: str):
        """Capture roomsmith logs of one build in `builds/<workspace>/build.log`."""
        if self.logger is None:
            return contextlib.nullcontext()
        return FileLoggingContext(
            Path(self.logger.output_dir) / "builds" / workspace_name / "build.log",
            level=logging.INFO,
        )

    def _apply_door_policy(
        self, name: str, instance: RoomInstance, perimeter: Perimeter
    ) -> tuple[Perimeter, bool]:
        if perimeter.door_tile is not None:
            return perimeter, False

        if self.config.door_policy == DoorPolicy.FREE_TILE_FALLBACK:
            door = find_fallback_door(
                room_tiles=instance.room_tiles,
                occupied_tiles=instance.occupied_tiles,
                preferred_side=self.config.preferred_side,
            )
            if door is not None:
                console_logger.warning(
                    f"No entrance door for {name}, using fallback door at {door}"
                )
                return Perimeter(edge_tiles=perimeter.edge_tiles, door_tile=door), True

        raise NoDoorCandidateError(
            f"No door candidate for {name}: entrance hints do not touch the "
            f"perimeter (policy {self.config.door_policy.value})"
        )

    def _resolve_spec(
        self, room_type: str, spec: ConstructionSpec | None
    ) -> ConstructionSpec:
        blueprint = self.registry.blueprint(room_type)
        material = blueprint.material or self.config.default_material
        if spec is None:
            return ConstructionSpec(
                upgrade=self.config.default_upgrade,
                constructor=blueprint.constructor,
                material=material,
            )
        if spec.material is None:
            return dataclasses.replace(spec, material=material)
        return spec
