"""
Lithium-ion Cell Simulator

Electrochemical, thermal and degradation model of a single lithium-ion
cell, with selectable SEI growth, cracking, loss-of-active-material and
lithium plating models.
"""

from cell_simulator.core.cell_model import CellModel
from cell_simulator.core.degradation import DegradationSelector
from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.chemistry import Chemistry
from cell_simulator.utils.validators import (
    CellError,
    CurveLengthError,
    DiscretizationMismatchError,
    InvalidStateError,
)

__version__ = "1.0.0"
__all__ = [
    "CellModel",
    "DegradationSelector",
    "DiffusionModel",
    "Chemistry",
    "CellError",
    "CurveLengthError",
    "DiscretizationMismatchError",
    "InvalidStateError",
]
