"""
Logging configuration for scripts and notebooks using the engine.

Usage:
    from astroport_math import logging_config
    logging_config.setup()

The engine itself only logs through module loggers under ``astroport_math``;
nothing is configured on import.
"""

import logging
import sys
from typing import Union

from .config import EngineConfig

PACKAGE_LOGGER = "astroport_math"


def setup(level: Union[str, int] = logging.INFO):
    """
    Configure console logging with a short format.

    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Hides the per-iteration solver traces of ``astroport_math.curves``
      (see setup_debug)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    root.setLevel(level)

    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    # Minimal format: time + level + message
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    # Per-iteration curve traces only show under setup_debug()
    logging.getLogger(f"{PACKAGE_LOGGER}.curves").setLevel(max(level, logging.INFO))


def setup_from_config(config: EngineConfig):
    """Configure logging at the level named by ``config.log_level``."""
    setup(level=config.log_level)


def setup_minimal():
    """
    Even more minimal logging - only warnings and errors.
    Good for batch pricing when you only care about problems.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows every Newton iteration count and facade call.
    """
    setup(level=logging.DEBUG)
    logging.getLogger(f"{PACKAGE_LOGGER}.curves").setLevel(logging.DEBUG)
