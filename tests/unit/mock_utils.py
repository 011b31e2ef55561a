"""Mock utilities for unit tests."""

from pathlib import Path
from unittest.mock import Mock

from roomsmith.construction.memory_host import InMemoryHost
from roomsmith.layout.room import FurnitureRef, OccupiedCell, RoomTemplate
from roomsmith.utils.logging import BaseLogger


def create_mock_logger(output_dir: Path) -> Mock:
    """
    Create a properly configured mock logger for unit tests.

    Args:
        output_dir: The output directory for the logger.

    Returns:
        Mock logger with spec=BaseLogger and output_dir set.
    """
    mock_logger = Mock(spec=BaseLogger)
    mock_logger.output_dir = output_dir
    return mock_logger


def create_spy_host(**kwargs) -> Mock:
    """
    Wrap an `InMemoryHost` in a mock that records every call.

    The returned mock delegates to a real in-memory host, so behaviour is
    unchanged while call counts and `side_effect` fault injection work per
    method. The wrapped host is available as `spy.wrapped`.
    """
    host = InMemoryHost(**kwargs)
    spy = Mock(wraps=host)
    spy.wrapped = host
    return spy


def make_template(
    rows: list[str], room_type: str = "TEST", entrance_char: str = "E"
) -> RoomTemplate:
    """
    Build a single-item template from rows.

    Every non-empty character is the same furniture item; `entrance_char`
    cells additionally carry an entrance hint.
    """
    ref = FurnitureRef(key=room_type.lower())
    legend = {
        "#": OccupiedCell(furniture=ref),
        entrance_char: OccupiedCell(furniture=ref, entrance=True),
    }
    return RoomTemplate.from_rows(room_type=room_type, rows=rows, legend=legend)
