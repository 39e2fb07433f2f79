"""Core cell model modules."""

from cell_simulator.core.cell_model import CellModel, Electrochemistry, StepResult
from cell_simulator.core.degradation import (
    CrackModel,
    DegradationModel,
    DegradationSelector,
    LAMModel,
    PlatingModel,
    SEIModel,
)
from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.core.state import PhysicalState, StateBounds
from cell_simulator.core.stress import StressModel, StressParameters
from cell_simulator.core.thermal_model import ThermalModel, ThermalParameters

__all__ = [
    "CellModel",
    "Electrochemistry",
    "StepResult",
    "CrackModel",
    "DegradationModel",
    "DegradationSelector",
    "LAMModel",
    "PlatingModel",
    "SEIModel",
    "DiffusionModel",
    "PhysicalState",
    "StateBounds",
    "StressModel",
    "StressParameters",
    "ThermalModel",
    "ThermalParameters",
]
