"""
Verbosity levels and logging configuration.

Verbosity is an integer 0-7; higher values print more:
    0  only critical errors about illegal parameters
    1  errors that might crash the simulation
    2  all errors, recoverable or not
    3  start and end of high-level driver functions
    4  high-level program flow
    5  low-level flow, e.g. per time step values
    6  details of nonlinear searches
    7  start and end of every cell function
"""

from __future__ import annotations

import logging
import sys

VERBOSE_CRIT = 0
VERBOSE_ERROR = 1
VERBOSE_ALL_ERRORS = 2
VERBOSE_DRIVER_FUNCTIONS = 3
VERBOSE_DRIVER_FLOW = 4
VERBOSE_STEP_FLOW = 5
VERBOSE_SEARCH = 6
VERBOSE_CELL_FUNCTIONS = 7

_LEVELS = {
    VERBOSE_CRIT: logging.CRITICAL,
    VERBOSE_ERROR: logging.ERROR,
    VERBOSE_ALL_ERRORS: logging.WARNING,
    VERBOSE_DRIVER_FUNCTIONS: logging.INFO,
    VERBOSE_DRIVER_FLOW: logging.INFO,
}


def verbosity_to_level(verbose: int) -> int:
    """Map a verbosity (0-7) onto a logging level."""
    if not 0 <= verbose <= VERBOSE_CELL_FUNCTIONS:
        raise ValueError(f"verbose must be within 0-{VERBOSE_CELL_FUNCTIONS}, got {verbose}")
    return _LEVELS.get(verbose, logging.DEBUG)


def configure_logging(verbose: int = VERBOSE_ERROR) -> logging.Logger:
    """
    Configure the package logger for a verbosity level.

    Args:
        verbose: Verbosity (0-7)

    Returns:
        The ``cell_simulator`` logger
    """
    level = verbosity_to_level(verbose)
    logger = logging.getLogger("cell_simulator")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
