import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger for layoutsmith applications.

    Args:
        level: Log level name (e.g. "DEBUG"). If None, the LOGLEVEL environment
            variable is used, falling back to INFO.
    """
    level_name = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
