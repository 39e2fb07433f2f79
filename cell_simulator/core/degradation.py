"""
Degradation-model selection and dispatch.

Four mechanisms age the cell, each with several competing formulations
identified by small integer IDs:

SEI growth (on the anode and on crack faces):
    1 kinetic:             i = nF k(T) exp(-αnF η_sei / RT)
    2 kinetic + diffusion: i = nF c_sol / (1/(k(T) exp(-αnF η_sei / RT)) + δ/D(T))
    3 diffusion only:      i = nF c_sol D(T) / δ
    with η_sei = φ_n - U_sei, and dδ/dt = i V_sei / nF

Surface cracking (anode crack surface CS):
    1 Laresgoiti:  dCS = α |Δσ_L|
    2 Dai:         dCS = α |Δσ_h|^m
    3 gradient:    dCS/dt = α ((c̄ - c_surf) / c_max)²
    4 Barai:       dCS/dt = α |I| (CS_max - CS)
    5 Ekström:     dCS/dt = k(T) |I|

Loss of active material (volume fractions):
    1 Dai:         de/dt = -β |σ_h|
    2 Delacourt:   de/dt = -β |I|
    3 Kindermann:  de_p/dt = -k(T) exp(nF (φ_p - U_nmc) / RT)
    4 Narayanrao:  de/dt = -k(T) e

Lithium plating:
    1 Yang:        i = nF k(T) exp(-αnF (φ_n - U_pl) / RT)

SEI, cracking and LAM accept several simultaneous models whose
contributions are summed; at most one plating model is active. ID 0 is the
no-op model of every category and runs through the same code path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Optional

import numpy as np

from cell_simulator.core.constants import FARADAY, R_GAS, arrhenius

if TYPE_CHECKING:
    from cell_simulator.chemistry.parameters import CellParameters
    from cell_simulator.core.state import PhysicalState
    from cell_simulator.core.stress import StressResult

# Maximum number of simultaneous models per category
MAX_MODELS = 10


class SEIModel(IntEnum):
    """SEI growth model identifiers."""

    NONE = 0
    KINETIC = 1
    KINETIC_DIFFUSION = 2
    DIFFUSION = 3


class CrackModel(IntEnum):
    """Surface cracking model identifiers."""

    NONE = 0
    LARESGOITI = 1
    DAI = 2
    CONCENTRATION_GRADIENT = 3
    BARAI = 4
    EKSTROM = 5


class LAMModel(IntEnum):
    """Loss-of-active-material model identifiers."""

    NONE = 0
    DAI = 1
    DELACOURT = 2
    KINDERMANN = 3
    NARAYANRAO = 4


class PlatingModel(IntEnum):
    """Lithium plating model identifiers."""

    NONE = 0
    YANG = 1


def _as_models(enum_cls, name: str, values) -> tuple:
    if isinstance(values, (int, np.integer)):
        values = (values,)
    values = tuple(values)
    if not values:
        raise ValueError(f"{name} needs at least one model (use {enum_cls.__name__}.NONE)")
    if len(values) > MAX_MODELS:
        raise ValueError(f"{name} allows at most {MAX_MODELS} models, got {len(values)}")
    try:
        return tuple(enum_cls(int(v)) for v in values)
    except ValueError:
        valid = [int(m) for m in enum_cls]
        raise ValueError(f"Invalid {name} model id in {list(values)}. Must be one of: {valid}")


@dataclass(frozen=True)
class DegradationSelector:
    """
    Which degradation models are active.

    The coupling flags are independent of the model lists: the same SEI or
    cracking model exists with and without the coupling, so the caller sets
    them explicitly.
    """

    sei: tuple = (SEIModel.NONE,)
    crack: tuple = (CrackModel.NONE,)
    lam: tuple = (LAMModel.NONE,)
    plating: PlatingModel = PlatingModel.NONE
    sei_porosity: bool = False  # SEI growth consumes anode volume fraction
    crack_diffusion: bool = False  # Cracks reduce the anode diffusion constant

    def __post_init__(self):
        object.__setattr__(self, "sei", _as_models(SEIModel, "sei", self.sei))
        object.__setattr__(self, "crack", _as_models(CrackModel, "crack", self.crack))
        object.__setattr__(self, "lam", _as_models(LAMModel, "lam", self.lam))
        try:
            plating = PlatingModel(int(self.plating))
        except ValueError:
            valid = [int(m) for m in PlatingModel]
            raise ValueError(f"Invalid plating model id {self.plating}. Must be one of: {valid}")
        object.__setattr__(self, "plating", plating)
        object.__setattr__(self, "sei_porosity", bool(self.sei_porosity))
        object.__setattr__(self, "crack_diffusion", bool(self.crack_diffusion))

    @property
    def needs_dai_stress(self) -> bool:
        """True if a crack or LAM model consumes Dai stress."""
        return CrackModel.DAI in self.crack or LAMModel.DAI in self.lam

    @property
    def needs_laresgoiti_stress(self) -> bool:
        """True if a crack model consumes Laresgoiti stress."""
        return CrackModel.LARESGOITI in self.crack

    @property
    def is_active(self) -> bool:
        """False for the all-default selector."""
        return (
            any(self.sei)
            or any(self.crack)
            or any(self.lam)
            or self.plating != PlatingModel.NONE
        )

    def to_dict(self) -> dict:
        """Get the selector as plain integers."""
        return {
            "sei": [int(m) for m in self.sei],
            "crack": [int(m) for m in self.crack],
            "lam": [int(m) for m in self.lam],
            "plating": int(self.plating),
            "sei_porosity": self.sei_porosity,
            "crack_diffusion": self.crack_diffusion,
        }


@dataclass
class DegradationRates:
    """
    Degradation over one time step.

    All members are non-negative amounts for the step (not per second);
    volume fraction members are losses.
    """

    sei_current: float = 0.0  # SEI side-reaction current density (A/m²)
    plating_current: float = 0.0  # Plating current density (A/m²)
    sei_thickness: float = 0.0  # m
    plated_thickness: float = 0.0  # m
    crack_surface: float = 0.0  # m²
    vol_frac_loss_pos: float = 0.0
    vol_frac_loss_neg: float = 0.0
    lost_lithium: float = 0.0  # C
    resistance: float = 0.0  # Ohm·m²


@dataclass
class DegradationInputs:
    """Operating point the degradation formulas are evaluated at."""

    current: float  # A, positive charges the cell
    phi_pos: float  # Cathode potential vs Li (V)
    phi_neg: float  # Anode potential vs Li (V)
    c_avg_pos: float  # Volume-averaged concentrations (mol/m³)
    c_avg_neg: float
    c_surf_neg: float  # Anode surface concentration (mol/m³)
    initial_anode_surface: float  # Anode real surface of the fresh cell (m²)


class DegradationModel:
    """
    Evaluates the selected degradation models for one cell.

    Holds only fitting parameters; the state and selector are passed in so
    the same instance serves any selector.
    """

    def __init__(self, params: CellParameters):
        self.params = params
        self.t_ref = params.t_ref

    def rates(
        self,
        selector: DegradationSelector,
        state: PhysicalState,
        inputs: DegradationInputs,
        stress: StressResult,
        previous_stress: Optional[StressResult],
        dt: float,
    ) -> DegradationRates:
        """
        Sum the contributions of every selected model over ``dt`` seconds.

        Args:
            selector: Active models
            state: Cell state at the start of the step
            inputs: Electrochemical operating point
            stress: Stress for this step
            previous_stress: Stress of the previous step, None on the first step
            dt: Time step (s)

        Returns:
            Degradation amounts for the step
        """
        out = DegradationRates()
        if dt <= 0:
            return out

        geo = self.params.geometry
        anode_surface = state.area_neg * state.thickness_neg * geo.elec_surf

        # SEI
        for model in selector.sei:
            out.sei_current += self.sei_current(model, state, inputs)
        sei = self.params.sei
        out.sei_thickness = out.sei_current * sei.molar_volume / (sei.n * FARADAY) * dt
        out.resistance += sei.resistivity * out.sei_thickness
        out.lost_lithium += out.sei_current * (anode_surface + state.crack_surface) * dt
        if selector.sei_porosity:
            out.vol_frac_loss_neg += state.area_neg * out.sei_thickness

        # Surface cracks
        for model in selector.crack:
            out.crack_surface += self.crack_growth(model, state, inputs, stress, previous_stress, dt)

        # Loss of active material
        for model in selector.lam:
            loss_pos, loss_neg = self.lam_loss(model, state, inputs, stress, dt)
            out.vol_frac_loss_pos += loss_pos
            out.vol_frac_loss_neg += loss_neg

        # Lithium stored in the lost active material is lost with it
        out.lost_lithium += (
            out.vol_frac_loss_pos * state.thickness_pos * inputs.c_avg_pos
            + out.vol_frac_loss_neg * state.thickness_neg * inputs.c_avg_neg
        ) * geo.elec_surf * FARADAY

        # Plating
        pl = self.params.plating
        out.plating_current = self.plating_current(selector.plating, state, inputs)
        out.plated_thickness = out.plating_current * pl.molar_volume / (pl.n * FARADAY) * dt
        out.resistance += pl.resistivity * out.plated_thickness
        out.lost_lithium += out.plating_current * anode_surface * dt

        return out

    def sei_current(self, model: SEIModel, state: PhysicalState, inputs: DegradationInputs) -> float:
        """SEI side-reaction current density (A/m²) of one model."""
        if model == SEIModel.NONE:
            return 0.0

        p = self.params.sei
        T = state.temperature
        eta = inputs.phi_neg - p.ocv_sei
        tafel = np.exp(-p.alpha * p.n * FARADAY * eta / (R_GAS * T))

        if model == SEIModel.KINETIC:
            k = arrhenius(p.k_kinetic, p.k_kinetic_ea, T, self.t_ref)
            return float(p.n * FARADAY * k * tafel)

        if model == SEIModel.KINETIC_DIFFUSION:
            k = arrhenius(p.k_mixed, p.k_mixed_ea, T, self.t_ref)
            d = arrhenius(p.d_mixed, p.d_mixed_ea, T, self.t_ref)
            resistance = 1.0 / (k * tafel) + state.sei_thickness / d
            return float(p.n * FARADAY * p.c_solvent / resistance)

        if model == SEIModel.DIFFUSION:
            d = arrhenius(p.d_diffusion, p.d_diffusion_ea, T, self.t_ref)
            return float(p.n * FARADAY * p.c_solvent * d / state.sei_thickness)

        raise ValueError(f"Unknown SEI model: {model}")

    def crack_growth(
        self,
        model: CrackModel,
        state: PhysicalState,
        inputs: DegradationInputs,
        stress: StressResult,
        previous_stress: Optional[StressResult],
        dt: float,
    ) -> float:
        """Crack surface growth (m²) of one model over ``dt``."""
        if model == CrackModel.NONE:
            return 0.0

        p = self.params.crack

        if model == CrackModel.LARESGOITI:
            if stress.laresgoiti is None:
                raise RuntimeError("Laresgoiti crack model selected but stress was not computed")
            if previous_stress is None or previous_stress.laresgoiti is None:
                return 0.0
            return p.alpha_laresgoiti * abs(stress.laresgoiti - previous_stress.laresgoiti)

        if model == CrackModel.DAI:
            if stress.dai is None:
                raise RuntimeError("Dai crack model selected but stress was not computed")
            if previous_stress is None or previous_stress.dai is None:
                return 0.0
            delta = abs(stress.dai.hydrostatic_neg - previous_stress.dai.hydrostatic_neg)
            return p.alpha_dai * delta**p.dai_exponent

        if model == CrackModel.CONCENTRATION_GRADIENT:
            gradient = (inputs.c_avg_neg - inputs.c_surf_neg) / self.params.c_max_neg
            return p.alpha_gradient * gradient**2 * dt

        if model == CrackModel.BARAI:
            cs_max = p.max_surface_factor * inputs.initial_anode_surface
            return p.alpha_barai * abs(inputs.current) * max(0.0, cs_max - state.crack_surface) * dt

        if model == CrackModel.EKSTROM:
            k = arrhenius(p.k_ekstrom, p.k_ekstrom_ea, state.temperature, self.t_ref)
            return k * abs(inputs.current) * dt

        raise ValueError(f"Unknown crack model: {model}")

    def lam_loss(
        self,
        model: LAMModel,
        state: PhysicalState,
        inputs: DegradationInputs,
        stress: StressResult,
        dt: float,
    ) -> tuple[float, float]:
        """Volume fraction lost (cathode, anode) by one model over ``dt``."""
        if model == LAMModel.NONE:
            return 0.0, 0.0

        p = self.params.lam
        T = state.temperature

        if model == LAMModel.DAI:
            if stress.dai is None:
                raise RuntimeError("Dai LAM model selected but stress was not computed")
            return (
                p.beta_dai_pos * abs(stress.dai.hydrostatic_pos) * dt,
                p.beta_dai_neg * abs(stress.dai.hydrostatic_neg) * dt,
            )

        if model == LAMModel.DELACOURT:
            return (
                p.beta_delacourt_pos * abs(inputs.current) * dt,
                p.beta_delacourt_neg * abs(inputs.current) * dt,
            )

        if model == LAMModel.KINDERMANN:
            k = arrhenius(p.k_kindermann, p.k_kindermann_ea, T, self.t_ref)
            overpotential = inputs.phi_pos - p.ocv_nmc
            loss = k * np.exp(FARADAY * overpotential / (R_GAS * T)) * dt
            return float(loss), 0.0

        if model == LAMModel.NARAYANRAO:
            k_pos = arrhenius(p.k_narayanrao_pos, p.k_narayanrao_ea, T, self.t_ref)
            k_neg = arrhenius(p.k_narayanrao_neg, p.k_narayanrao_ea, T, self.t_ref)
            return k_pos * state.vol_frac_pos * dt, k_neg * state.vol_frac_neg * dt

        raise ValueError(f"Unknown LAM model: {model}")

    def plating_current(
        self, model: PlatingModel, state: PhysicalState, inputs: DegradationInputs
    ) -> float:
        """Plating current density (A/m²)."""
        if model == PlatingModel.NONE:
            return 0.0

        if model == PlatingModel.YANG:
            p = self.params.plating
            T = state.temperature
            k = arrhenius(p.k_plating, p.k_plating_ea, T, self.t_ref)
            eta = inputs.phi_neg - p.ocv_plating
            return float(p.n * FARADAY * k * np.exp(-p.alpha * p.n * FARADAY * eta / (R_GAS * T)))

        raise ValueError(f"Unknown plating model: {model}")
