"""Building location checks against the host's live state.

All checks are advisory and point-in-time. Nothing is locked between a check
and the following workspace reservation, so a clear report does not
guarantee that the reservation succeeds.
"""

import logging

from dataclasses import dataclass, field
from typing import Any, Iterable

from roomsmith.construction.errors import ValidationFailedError
from roomsmith.construction.host import ConstructionHost
from roomsmith.layout.grid_geometry import (
    TileCoord,
    anchor_from_center,
    bounding_box,
    rect_tiles,
)

console_logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 5
"""Maximum number of sample items kept per obstruction category."""


@dataclass
class ObstructionReport:
    """What blocks an area, with counts and bounded samples per category."""

    entity_count: int = 0
    furniture_count: int = 0
    construction_count: int = 0
    entity_sample: list[Any] = field(default_factory=list)
    furniture_sample: list[Any] = field(default_factory=list)
    construction_sample: list[Any] = field(default_factory=list)

    @property
    def is_clear(self) -> bool:
        return (
            self.entity_count == 0
            and self.furniture_count == 0
            and self.construction_count == 0
        )

    def issues(self) -> list[str]:
        """Human-readable description of each non-empty category."""
        issues = []
        if self.entity_count > 0:
            issues.append(f"{self.entity_count} entities present")
        if self.furniture_count > 0:
            issues.append(f"{self.furniture_count} furniture items present")
        if self.construction_count > 0:
            issues.append(f"{self.construction_count} construction sites present")
        return issues

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_count": self.entity_count,
            "furniture_count": self.furniture_count,
            "construction_count": self.construction_count,
            "entity_sample": [str(item) for item in self.entity_sample],
            "furniture_sample": [str(item) for item in self.furniture_sample],
            "construction_sample": [str(item) for item in self.construction_sample],
            "is_clear": self.is_clear,
        }


@dataclass
class ClearAreaSearch:
    """Result of searching a region for a clear rectangle."""

    found: bool
    """Whether a clear rectangle was found."""

    center: TileCoord | None
    """Center of the found rectangle."""

    anchor: TileCoord | None
    """Top-left tile of the found rectangle."""

    checked: int
    """Number of candidate rectangles checked."""


def check_area_clear(
    host: ConstructionHost,
    area: Iterable[TileCoord],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ObstructionReport:
    """Query entities, furniture and constructions over an area.

    Args:
        host: Host to query.
        area: Tiles to check.
        sample_size: Maximum number of samples kept per category.

    Returns:
        ObstructionReport for the area.
    """
    area = frozenset(area)
    entities = list(host.entities_in_area(area))
    furniture = list(host.furniture_in_area(area))
    constructions = list(host.constructions_in_area(area))
    return ObstructionReport(
        entity_count=len(entities),
        furniture_count=len(furniture),
        construction_count=len(constructions),
        entity_sample=entities[:sample_size],
        furniture_sample=furniture[:sample_size],
        construction_sample=constructions[:sample_size],
    )


def validate_building_location(
    host: ConstructionHost,
    area: Iterable[TileCoord],
    building_name: str,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ObstructionReport:
    """Check an area and fail if anything obstructs it.

    Call this before creating a workspace for the building.

    Args:
        host: Host to query.
        area: Footprint of the building.
        building_name: Name used in the error message (e.g., "well").
        sample_size: Maximum number of samples kept per category.

    Returns:
        The clear ObstructionReport.

    Raises:
        ValidationFailedError: If the area is obstructed.
    """
    area = frozenset(area)
    report = check_area_clear(host=host, area=area, sample_size=sample_size)
    if report.is_clear:
        return report

    if area:
        min_x, min_y, _, _ = bounding_box(area)
        location = f" at {TileCoord(min_x, min_y)}"
    else:
        location = ""
    message = f"Cannot build {building_name}{location}: {', '.join(report.issues())}"
    console_logger.warning(message)
    raise ValidationFailedError(message, report=report)


def find_clear_area(
    host: ConstructionHost,
    region_origin: TileCoord,
    region_width: int,
    region_height: int,
    width: int,
    height: int,
    spacing: int = 5,
) -> ClearAreaSearch:
    """Search a region for a clear `width` x `height` rectangle.

    Candidate top-left tiles are visited row by row on a grid with the given
    spacing, starting at the region origin. Only rectangles fully inside the
    region are checked.

    Args:
        host: Host to query.
        region_origin: Top-left tile of the region.
        region_width: Width of the region in tiles.
        region_height: Height of the region in tiles.
        width: Required rectangle width.
        height: Required rectangle height.
        spacing: Step between candidate anchors along both axes.

    Returns:
        ClearAreaSearch with the first clear rectangle, if any.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Rectangle size must be positive, got {width}x{height}")
    if spacing <= 0:
        raise ValueError(f"Spacing must be positive, got {spacing}")

    checked = 0
    for dy in range(0, region_height - height + 1, spacing):
        for dx in range(0, region_width - width + 1, spacing):
            anchor = region_origin.offset(dx, dy)
            checked += 1
            report = check_area_clear(host=host, area=rect_tiles(anchor, width, height))
            if report.is_clear:
                center = anchor.offset(width // 2, height // 2)
                console_logger.debug(
                    f"Found clear {width}x{height} area at {anchor} after "
                    f"{checked} checks"
                )
                return ClearAreaSearch(
                    found=True, center=center, anchor=anchor, checked=checked
                )

    console_logger.info(
        f"No clear {width}x{height} area in {region_width}x{region_height} region "
        f"at {region_origin} ({checked} checked)"
    )
    return ClearAreaSearch(found=False, center=None, anchor=None, checked=checked)


def format_area_status(
    report: ObstructionReport, center: TileCoord, width: int, height: int
) -> str:
    """Human-readable clearance status of a centered area.

    Args:
        report: Obstruction report of the area.
        center: Center tile of the area.
        width: Area width in tiles.
        height: Area height in tiles.

    Returns:
        Multi-line status text.
    """
    anchor = anchor_from_center(center, width, height)
    lines = [
        "=== Area Clearance Status ===",
        f"Center: {center}",
        f"Area: {width}x{height} tiles",
        f"Coordinates: x {anchor.x}-{anchor.x + width}, y {anchor.y}-{anchor.y + height}",
        "",
    ]
    if report.is_clear:
        lines.append("Status: CLEAR - Ready for building")
        return "\n".join(lines)

    lines.append("Status: NOT CLEAR - Cannot build here")
    categories = [
        ("Entities", report.entity_count, report.entity_sample),
        ("Furniture", report.furniture_count, report.furniture_sample),
        ("Constructions", report.construction_count, report.construction_sample),
    ]
    for label, count, sample in categories:
        if count > 0:
            lines.append(f"{label}: {count}")
            lines.append(f"  Sample: {', '.join(str(item) for item in sample)}")
    return "\n".join(lines)
