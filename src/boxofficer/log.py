"""Logging setup for the BoxOfficer services."""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: str | int = "INFO", stream: TextIO | None = None
) -> logging.Logger:
    """Attach a single stream handler to the ``boxofficer`` logger.

    Defaults to stdout; the MCP server passes stderr because stdout carries
    the protocol.
    """
    logger = logging.getLogger("boxofficer")
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
