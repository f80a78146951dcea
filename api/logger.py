"""Logging configuration for the application."""

import logging
import sys

# Configure logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as "DEBUG" or "INFO"
    """
    logging.basicConfig(
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger().setLevel(getattr(logging, str(level).upper(), logging.INFO))
