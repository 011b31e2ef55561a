"""Loading of the YAML configuration shipped in `configurations/`."""

import logging

from pathlib import Path

from omegaconf import DictConfig, OmegaConf

console_logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configurations"
"""Default configuration directory at the repository root."""


def load_config(path: Path | str | None = None) -> DictConfig:
    """Load builder settings and room blueprints.

    Reads `config.yaml` and merges `blueprints.yaml` from the same directory
    into it, so the result has `builder` and `blueprints` subtrees.

    Args:
        path: Configuration directory, or a path to a `config.yaml` file.
            Defaults to the repository's `configurations/` directory.

    Returns:
        Merged configuration.

    Raises:
        FileNotFoundError: If `config.yaml` does not exist.
    """
    path = CONFIG_DIR if path is None else Path(path)
    config_file = path if path.is_file() else path / "config.yaml"
    if not config_file.exists():
        raise FileNotFoundError(f"Config file does not exist: {config_file}")

    cfg = OmegaConf.load(config_file)
    blueprints_file = config_file.parent / "blueprints.yaml"
    if blueprints_file.exists():
        cfg = OmegaConf.merge(cfg, OmegaConf.load(blueprints_file))
    else:
        console_logger.warning(f"No blueprints file next to {config_file}")

    console_logger.info(f"Loaded config from {config_file.parent}")
    return cfg
