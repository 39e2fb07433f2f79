"""Utility modules for the cell simulator."""

from cell_simulator.utils.logging_setup import configure_logging, verbosity_to_level
from cell_simulator.utils.validators import (
    CellError,
    CurveLengthError,
    DiscretizationMismatchError,
    InvalidStateError,
    ValidationResult,
)

__all__ = [
    "configure_logging",
    "verbosity_to_level",
    "CellError",
    "CurveLengthError",
    "DiscretizationMismatchError",
    "InvalidStateError",
    "ValidationResult",
]
