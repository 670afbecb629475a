"""
Logging setup for the compliance engine.

Modules log through ``logging.getLogger(__name__)``; the application entry point
calls :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO", log_to_console: bool = True) -> None:
    """Configure the ``compliance_engine`` logger namespace."""
    level_value = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("compliance_engine")
    logger.setLevel(level_value)
    # Avoid duplicate handlers when reloading
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level_value)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console)
