import json
import logging
import time

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from roomsmith.construction.room_builder import BuildResult

console_logger = logging.getLogger(__name__)


class BaseLogger(ABC):
    """Abstract base class defining the logger API for build tracking."""

    def __init__(self, output_dir: Path | str):
        self.output_dir = Path(output_dir)

    @abstractmethod
    def log(self, data: dict[str, Any]) -> None:
        """Log metrics and data."""

    @abstractmethod
    def log_config(self, data: dict[str, Any]) -> None:
        """Log the configuration a build session runs with."""

    @abstractmethod
    def log_build(self, result: "BuildResult", name: str | None = None) -> Path:
        """
        Log a finished room build.

        Args:
            result: The build result to log.
            name: Name of the build snapshot. Creates a subdirectory in builds/.
                Defaults to the result's room name.

        Returns:
            Path to the directory containing the build files.
        """


class ConsoleLogger(BaseLogger):
    """Logger implementation that logs to console and saves files locally."""

    def __init__(self, output_dir: Path | str):
        super().__init__(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._step_counter = 0
        """Counter for the number of steps logged."""

    def log(self, data: dict[str, Any]) -> None:
        """Log metrics to console."""
        console_logger.info(f"Step {self._step_counter}: {data}")
        self._step_counter += 1

    def log_config(self, data: dict[str, Any]) -> None:
        """Log configuration to console."""
        console_logger.info(f"Configuration: {data}")

    def log_build(self, result: "BuildResult", name: str | None = None) -> Path:
        """
        Save a build result as `build_result.json` and `layout.txt`.

        Args:
            result: The build result to log.
            name: Name of the build snapshot. Creates a subdirectory in builds/.
                Defaults to the result's room name.

        Returns:
            Path to the directory containing the build files.
        """
        build_dir = self.output_dir / "builds" / (name or result.name)
        build_dir.mkdir(parents=True, exist_ok=True)

        build_data = result.to_dict()
        build_data["timestamp"] = time.time()
        with open(build_dir / "build_result.json", "w") as f:
            json.dump(build_data, f, indent=2)

        with open(build_dir / "layout.txt", "w") as f:
            f.write(result.layout.ascii_art)
            f.write("\n\n")
            f.write(result.layout.legend)
            f.write("\n")

        self.log(
            {
                "room": result.name,
                "walls_placed": len(result.report.walls_placed),
                "walls_skipped": len(result.report.walls_skipped),
                "door": str(result.perimeter.door_tile),
            }
        )
        console_logger.info(f"Saved build result: {build_dir}")
        return build_dir


class FileLoggingContext:
    """Context manager that copies roomsmith log records into a file.

    Only records of `logger_name` and its children are captured. `RoomBuilder`
    uses it to keep a `build.log` next to each saved build result.
    """

    def __init__(
        self,
        log_file_path: Path,
        logger_name: str = "roomsmith",
        level: int | None = None,
        suppress_stdout: bool = False,
    ):
        """
        Args:
            log_file_path: Log file to append to. Parent directories are
                created on entry.
            logger_name: Logger whose records are captured.
            level: Lowest level to capture. The logger level is lowered to it
                for the duration of the context when needed.
            suppress_stdout: If True, records stop propagating to the root
                logger's handlers while the context is active.
        """
        self.log_file_path = Path(log_file_path)
        self.logger_name = logger_name
        self.level = level
        self.suppress_stdout = suppress_stdout
        self.file_handler: logging.FileHandler | None = None
        self._saved_level = logging.NOTSET
        self._saved_propagate = True

    def __enter__(self) -> "FileLoggingContext":
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_handler = logging.FileHandler(self.log_file_path)
        self.file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

        logger = logging.getLogger(self.logger_name)
        self._saved_level = logger.level
        self._saved_propagate = logger.propagate
        if self.level is not None and logger.getEffectiveLevel() > self.level:
            logger.setLevel(self.level)
        if self.suppress_stdout:
            logger.propagate = False
        logger.addHandler(self.file_handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        logger = logging.getLogger(self.logger_name)
        logger.removeHandler(self.file_handler)
        logger.setLevel(self._saved_level)
        logger.propagate = self._saved_propagate
        self.file_handler.close()
