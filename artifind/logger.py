"""
Logging configuration for Artifind.

Every module logs through ``logging.getLogger(__name__)``; since all of
them live under the ``artifind`` package, configuring that one logger
here is enough.
"""

import logging
import sys
from typing import Optional

from .config import settings

logger = logging.getLogger("artifind")
logger.setLevel(settings.log_level)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

# Avoid duplicate lines when uvicorn configures the root logger
logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child of it when ``name`` is given."""
    if name:
        return logging.getLogger(f"artifind.{name}")
    return logger
