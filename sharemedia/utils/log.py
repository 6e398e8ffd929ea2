"""Loguru sink configuration shared by the CLI and extension entry points."""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Replace the default sink with the project format on stderr."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())
