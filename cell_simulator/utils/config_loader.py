"""Configuration loading and validation utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cell_simulator.core.constants import KELVIN
from cell_simulator.core.degradation import (
    CrackModel,
    DegradationSelector,
    LAMModel,
    MAX_MODELS,
    PlatingModel,
    SEIModel,
)


def _check_ids(values: List[int], enum_cls, name: str) -> List[int]:
    if not values:
        raise ValueError(f"{name} needs at least one model id (0 for none)")
    if len(values) > MAX_MODELS:
        raise ValueError(f"{name} allows at most {MAX_MODELS} models")
    valid = [int(m) for m in enum_cls]
    for v in values:
        if v not in valid:
            raise ValueError(f"Invalid {name} model id {v}. Must be one of: {valid}")
    return values


class CellConfigModel(BaseModel):
    """Cell configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    chemistry: str = "KokamNMC"
    nodes: int | None = Field(default=None, ge=1)
    ambient_temperature: float = Field(default=KELVIN + 25.0, gt=0)


class DegradationConfigModel(BaseModel):
    """Degradation model selection."""

    model_config = ConfigDict(validate_assignment=True)

    sei: List[int] = Field(default_factory=lambda: [0])
    crack: List[int] = Field(default_factory=lambda: [0])
    lam: List[int] = Field(default_factory=lambda: [0])
    plating: int = 0
    sei_porosity: bool = False
    crack_diffusion: bool = False

    @field_validator("sei")
    @classmethod
    def validate_sei(cls, v: List[int]) -> List[int]:
        return _check_ids(v, SEIModel, "sei")

    @field_validator("crack")
    @classmethod
    def validate_crack(cls, v: List[int]) -> List[int]:
        return _check_ids(v, CrackModel, "crack")

    @field_validator("lam")
    @classmethod
    def validate_lam(cls, v: List[int]) -> List[int]:
        return _check_ids(v, LAMModel, "lam")

    @field_validator("plating")
    @classmethod
    def validate_plating(cls, v: int) -> int:
        _check_ids([v], PlatingModel, "plating")
        return v

    def to_selector(self) -> DegradationSelector:
        """Build the degradation selector."""
        return DegradationSelector(
            sei=tuple(self.sei),
            crack=tuple(self.crack),
            lam=tuple(self.lam),
            plating=self.plating,
            sei_porosity=self.sei_porosity,
            crack_diffusion=self.crack_diffusion,
        )


class RunConfigModel(BaseModel):
    """Constant-current run configuration."""

    model_config = ConfigDict(validate_assignment=True)

    current: float = 0.0  # A, positive charges the cell
    dt: float = Field(default=1.0, gt=0)
    steps: int = Field(default=3600, gt=0)
    record_every: int = Field(default=60, gt=0)


class SimulationConfigModel(BaseModel):
    """Complete simulation configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = "Cell Simulation"
    verbose: int = Field(default=1, ge=0, le=7)

    cell: CellConfigModel = Field(default_factory=CellConfigModel)
    degradation: DegradationConfigModel = Field(default_factory=DegradationConfigModel)
    run: RunConfigModel = Field(default_factory=RunConfigModel)


def load_config(config_path: str | Path) -> SimulationConfigModel:
    """
    Load simulation configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated configuration model

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    config_dict = _map_yaml_to_model(raw_config)
    return SimulationConfigModel(**config_dict)


def _map_yaml_to_model(raw: dict[str, Any]) -> dict[str, Any]:
    """Map YAML configuration to model structure."""
    result = {}

    if "simulation" in raw:
        sim = raw["simulation"]
        result["name"] = sim.get("name", "Cell Simulation")
        result["verbose"] = sim.get("verbose", 1)

    if "cell" in raw:
        result["cell"] = raw["cell"]

    if "degradation" in raw:
        deg = dict(raw["degradation"])
        # Allow a single id instead of a list
        for key in ("sei", "crack", "lam"):
            if key in deg and isinstance(deg[key], int):
                deg[key] = [deg[key]]
        result["degradation"] = deg

    if "run" in raw:
        result["run"] = raw["run"]

    return result


def save_config(config: SimulationConfigModel, output_path: str | Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration model
        output_path: Path to save YAML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump()
    raw = {
        "simulation": {"name": config_dict.pop("name"), "verbose": config_dict.pop("verbose")},
        **config_dict,
    }

    with open(output_path, "w") as f:
        yaml.dump(raw, f, default_flow_style=False, sort_keys=False)
