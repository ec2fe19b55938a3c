"""Configuration loading for layoutsmith.

Defaults live in ``configurations/default.yaml`` next to this module. A user
YAML file and dotlist overrides (e.g. ``["room.wall_height=3.0"]``) are merged
on top with OmegaConf.
"""

import logging

from pathlib import Path

from omegaconf import DictConfig, OmegaConf

console_logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "configurations" / "default.yaml"


def load_config(
    path: Path | str | None = None, overrides: list[str] | None = None
) -> DictConfig:
    """Load the layoutsmith configuration.

    Args:
        path: Optional YAML file whose values override the defaults.
        overrides: Optional dotlist overrides applied last.

    Returns:
        Merged configuration.

    Raises:
        FileNotFoundError: If path is given but does not exist.
    """
    cfg = OmegaConf.load(DEFAULT_CONFIG_PATH)

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
        console_logger.debug(f"Merged config from {path}")

    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))

    return cfg
