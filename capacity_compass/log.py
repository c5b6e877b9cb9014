"""
Logging setup for Sprint Capacity Compass.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a logger writing to stdout.

    Level comes from LOG_LEVEL (default INFO) unless given. Calling this
    twice for the same name does not add a second handler.
    """
    if level is None:
        level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
        level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if getattr(logger, "_compass_configured", False):
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    logger._compass_configured = True

    return logger
