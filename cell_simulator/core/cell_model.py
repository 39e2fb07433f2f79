"""
Single-particle electrochemical, thermal and degradation model of one cell.

Each electrode is represented by one spherical particle whose radial
lithium concentration is advanced by a shared DiffusionModel. A time step:

1. surface concentrations, OCV and Butler-Volmer overpotentials
2. particle stress, only for the theories the active models consume
3. degradation amounts from the selected SEI, crack, LAM and plating models
4. concentration profiles advanced under the main and side-reaction fluxes
5. lumped thermal update
6. long-term state updated and the whole state validated
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
from scipy.interpolate import interp1d

from cell_simulator.core.constants import FARADAY, R_GAS, arrhenius
from cell_simulator.core.degradation import (
    DegradationInputs,
    DegradationModel,
    DegradationRates,
    DegradationSelector,
)
from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.core.state import PhysicalState, StateBounds
from cell_simulator.core.stress import StressModel, StressResult
from cell_simulator.core.thermal_model import ThermalModel
from cell_simulator.utils.logging_setup import (
    VERBOSE_CELL_FUNCTIONS,
    VERBOSE_ERROR,
    verbosity_to_level,
)
from cell_simulator.utils.validators import (
    CurveLengthError,
    DiscretizationMismatchError,
    InvalidStateError,
    validate_curve,
)

if TYPE_CHECKING:
    from cell_simulator.chemistry.parameters import CellParameters

logger = logging.getLogger(__name__)


@dataclass
class Electrochemistry:
    """Electrochemical operating point of the cell for one current."""

    current: float  # A, positive charges the cell
    c_surf_pos: float  # mol/m³
    c_surf_neg: float
    ocv_pos: float  # V vs Li
    ocv_neg: float
    eta_pos: float  # Overpotential (V)
    eta_neg: float
    entropic_coefficient: float  # dOCV/dT of the cell (V/K)
    voltage: float  # Terminal voltage (V)

    @property
    def phi_pos(self) -> float:
        """Cathode potential vs Li (V)."""
        return self.ocv_pos + self.eta_pos

    @property
    def phi_neg(self) -> float:
        """Anode potential vs Li (V)."""
        return self.ocv_neg + self.eta_neg

    @property
    def ocv(self) -> float:
        """Open circuit voltage of the cell (V)."""
        return self.ocv_pos - self.ocv_neg


@dataclass
class StepResult:
    """Outcome of one time step."""

    time: float  # Simulated time at the end of the step (s)
    electrochemistry: Electrochemistry
    stress: StressResult
    degradation: DegradationRates
    temperature: float  # K, at the end of the step

    @property
    def voltage(self) -> float:
        return self.electrochemistry.voltage


class CellModel:
    """
    One lithium-ion cell: physical state, parameters and degradation models.

    The DiffusionModel is referenced, never modified, so one instance can be
    shared by many cells. Construction either returns a fully initialised,
    validated cell or raises a CellError.
    """

    def __init__(
        self,
        params: CellParameters,
        diffusion: DiffusionModel,
        selector: DegradationSelector | None = None,
        verbose: int = VERBOSE_ERROR,
    ):
        """
        Initialize the cell.

        Args:
            params: Cell parameter set
            diffusion: Solid diffusion discretisation matching the geometry
            selector: Active degradation models (no degradation if None)
            verbose: Verbosity (0-7)

        Raises:
            DiscretizationMismatchError: If the discretisation does not match the geometry
            CurveLengthError: If an OCV or entropic table is too long
            InvalidStateError: If the derived initial state is unphysical
            ValueError: If the parameter set is otherwise invalid
        """
        verbosity_to_level(verbose)
        self.verbose = verbose
        self.params = params
        self.diffusion = diffusion

        self.check_model_param()

        errors = params.validate()
        if errors:
            logger.error("Illegal parameters for cell '%s': %s", params.name, errors)
            raise ValueError(f"Invalid parameters for cell '{params.name}': {'; '.join(errors)}")

        # Lookup tables
        self._ocv_pos = self._create_interpolator(params.ocv_pos)
        self._ocv_neg = self._create_interpolator(params.ocv_neg)
        self._entropic_pos = self._create_interpolator(params.entropic_pos)
        self._entropic_neg = self._create_interpolator(params.entropic_neg)

        geo = params.geometry
        self.stress = StressModel(params.stress)
        self.degradation = DegradationModel(params)
        self.thermal = ThermalModel(
            dataclasses.replace(params.thermal),
            volume=geo.cell_thickness * geo.elec_surf,
            surface_to_volume=geo.surface_to_volume,
        )

        # Initial state
        area_pos = 3 * geo.vol_frac_pos / geo.radius_pos
        area_neg = 3 * geo.vol_frac_neg / geo.radius_neg
        anode_surface = area_neg * geo.thickness_neg * geo.elec_surf
        resistance = params.rdc * (
            (geo.thickness_pos * area_pos * geo.elec_surf + geo.thickness_neg * area_neg * geo.elec_surf)
            / 2
        )
        bounds = StateBounds(
            n_nodes=diffusion.n_nodes,
            c_max_pos=params.c_max_pos,
            c_max_neg=params.c_max_neg,
        )

        try:
            self.state = PhysicalState.initialize(
                c_pos=np.zeros(diffusion.n_nodes),
                c_neg=np.zeros(diffusion.n_nodes),
                temperature=params.initial_temperature,
                sei_thickness=params.sei.initial_thickness,
                lost_lithium=0.0,
                thickness_pos=geo.thickness_pos,
                thickness_neg=geo.thickness_neg,
                vol_frac_pos=geo.vol_frac_pos,
                vol_frac_neg=geo.vol_frac_neg,
                area_pos=area_pos,
                area_neg=area_neg,
                crack_surface=params.crack.initial_fraction * anode_surface,
                diff_pos=params.kinetics.diff_pos,
                diff_neg=params.kinetics.diff_neg,
                resistance=resistance,
                plated_thickness=0.0,
                bounds=bounds,
            )
            self.state.set_concentrations_from_fraction(params.frac_pos, params.frac_neg)
            self.state.validate()
        except InvalidStateError as e:
            logger.error("Illegal initial state for cell '%s': %s", params.name, e)
            raise

        self.initial_state = self.state.copy()
        self.time = 0.0
        self._previous_stress: Optional[StressResult] = None

        self.selector = selector or DegradationSelector()

        logger.info(
            "Created cell '%s' with %d radial nodes, degradation %s",
            params.name,
            diffusion.n_nodes,
            self._selector.to_dict(),
        )

    @classmethod
    def from_name(
        cls,
        name: str,
        selector: DegradationSelector | None = None,
        diffusion: DiffusionModel | None = None,
        verbose: int = VERBOSE_ERROR,
    ) -> CellModel:
        """
        Create a cell from a registered parameter set.

        Args:
            name: Registered cell name (e.g., 'KokamNMC')
            selector: Active degradation models
            diffusion: Discretisation to share; built for the cell if None
            verbose: Verbosity (0-7)
        """
        from cell_simulator.chemistry import Chemistry

        params = Chemistry.from_name(name)
        if diffusion is None:
            geo = params.geometry
            diffusion = DiffusionModel.spherical(geo.n_nodes, geo.radius_pos, geo.radius_neg)
        return cls(params, diffusion, selector=selector, verbose=verbose)

    @property
    def selector(self) -> DegradationSelector:
        """Active degradation models."""
        return self._selector

    @selector.setter
    def selector(self, selector: DegradationSelector) -> None:
        # The stress flags are derived from the selector and must follow it
        self._selector = selector
        self.stress.configure(selector)

    def check_model_param(self) -> None:
        """
        Check the discretisation and lookup tables against the parameters.

        Raises:
            DiscretizationMismatchError: Node count or particle radii differ
            CurveLengthError: A lookup table exceeds ``max_curve_length``
        """
        geo = self.params.geometry
        d = self.diffusion

        if d.n_nodes != geo.n_nodes:
            logger.error("Discretisation has %d nodes, cell expects %d", d.n_nodes, geo.n_nodes)
            raise DiscretizationMismatchError(
                f"Discretisation has {d.n_nodes} radial nodes, "
                f"cell '{self.params.name}' expects {geo.n_nodes}"
            )

        for electrode, built, expected in (
            ("cathode", d.radius_pos, geo.radius_pos),
            ("anode", d.radius_neg, geo.radius_neg),
        ):
            if not np.isclose(built, expected, rtol=1e-9, atol=0.0):
                logger.error("Discretisation %s radius %g differs from %g", electrode, built, expected)
                raise DiscretizationMismatchError(
                    f"Discretisation was built for a {electrode} particle radius of {built} m, "
                    f"cell '{self.params.name}' has {expected} m"
                )

        for name, table in self.params.curves().items():
            try:
                validate_curve(name, table, self.params.max_curve_length)
            except CurveLengthError as e:
                logger.error("%s", e)
                raise

    def validate(self) -> None:
        """
        Check the physical state.

        Raises:
            InvalidStateError: If any state variable is out of bounds
        """
        self.state.validate()

    @staticmethod
    def _create_interpolator(table: list[list[float]]) -> Optional[interp1d]:
        """Create interpolation function for a [fraction, value] table."""
        if not table:
            return None
        x = np.array([p[0] for p in table])
        y = np.array([p[1] for p in table])
        return interp1d(x, y, kind="linear", bounds_error=False, fill_value="extrapolate")

    @staticmethod
    def _lookup(interp: Optional[interp1d], x: float) -> float:
        if interp is None:
            return 0.0
        return float(interp(x))

    def diffusion_constants(self) -> tuple[float, float]:
        """Temperature-corrected diffusion constants (cathode, anode) in m²/s."""
        s = self.state
        kin = self.params.kinetics
        t_ref = self.params.t_ref
        return (
            arrhenius(s.diff_pos, kin.diff_pos_ea, s.temperature, t_ref),
            arrhenius(s.diff_neg, kin.diff_neg_ea, s.temperature, t_ref),
        )

    def electrode_surfaces(self) -> tuple[float, float]:
        """Real active surface (cathode, anode) in m²."""
        s = self.state
        elec_surf = self.params.geometry.elec_surf
        return (
            s.area_pos * s.thickness_pos * elec_surf,
            s.area_neg * s.thickness_neg * elec_surf,
        )

    def main_fluxes(self, current: float) -> tuple[float, float]:
        """
        Molar fluxes out of the particles (cathode, anode) from the main reaction.

        On charge lithium leaves the cathode and enters the anode.
        """
        surface_pos, surface_neg = self.electrode_surfaces()
        return current / (FARADAY * surface_pos), -current / (FARADAY * surface_neg)

    def _overpotential(
        self, flux: float, c_surf: float, c_max: float, k_ref: float, k_ea: float
    ) -> float:
        """Butler-Volmer overpotential (V) with symmetric charge transfer."""
        T = self.state.temperature
        k = arrhenius(k_ref, k_ea, T, self.params.t_ref)
        i0 = k * FARADAY * np.sqrt(self.params.kinetics.c_elec * c_surf * (c_max - c_surf))
        i = flux * FARADAY
        return float(2 * R_GAS * T / FARADAY * np.arcsinh(i / (2 * i0)))

    def electrochemistry(self, current: float) -> Electrochemistry:
        """
        Electrochemical operating point for ``current`` at the present state.

        Args:
            current: Cell current (A), positive on charge

        Returns:
            Surface concentrations, potentials and terminal voltage

        Raises:
            InvalidStateError: If a surface lithium fraction leaves (0, 1)
        """
        s = self.state
        p = self.params
        geo = p.geometry
        kin = p.kinetics
        T = s.temperature

        diff_pos, diff_neg = self.diffusion_constants()
        flux_pos, flux_neg = self.main_fluxes(current)

        c_surf_pos = self.diffusion.surface_concentration(s.c_pos, flux_pos, diff_pos, geo.radius_pos)
        c_surf_neg = self.diffusion.surface_concentration(s.c_neg, flux_neg, diff_neg, geo.radius_neg)
        x_pos = c_surf_pos / p.c_max_pos
        x_neg = c_surf_neg / p.c_max_neg
        for field, x in (("c_pos", x_pos), ("c_neg", x_neg)):
            if not 0.0 < x < 1.0:
                raise InvalidStateError(field, "surface lithium fraction outside (0, 1)", x)

        d_pos = self._lookup(self._entropic_pos, x_pos)
        d_neg = self._lookup(self._entropic_neg, x_neg)
        ocv_pos = self._lookup(self._ocv_pos, x_pos) + d_pos * (T - p.t_ref)
        ocv_neg = self._lookup(self._ocv_neg, x_neg) + d_neg * (T - p.t_ref)

        eta_pos = self._overpotential(flux_pos, c_surf_pos, p.c_max_pos, kin.k_pos, kin.k_pos_ea)
        eta_neg = self._overpotential(flux_neg, c_surf_neg, p.c_max_neg, kin.k_neg, kin.k_neg_ea)

        surface_pos, surface_neg = self.electrode_surfaces()
        mean_surface = (surface_pos + surface_neg) / 2
        voltage = (ocv_pos + eta_pos) - (ocv_neg + eta_neg) + current * s.resistance / mean_surface

        return Electrochemistry(
            current=current,
            c_surf_pos=c_surf_pos,
            c_surf_neg=c_surf_neg,
            ocv_pos=ocv_pos,
            ocv_neg=ocv_neg,
            eta_pos=eta_pos,
            eta_neg=eta_neg,
            entropic_coefficient=d_pos - d_neg,
            voltage=float(voltage),
        )

    def voltage(self, current: float = 0.0) -> float:
        """Terminal voltage (V) for ``current`` at the present state."""
        return self.electrochemistry(current).voltage

    def ocv(self) -> float:
        """Open circuit voltage (V) from the present surface concentrations."""
        return self.electrochemistry(0.0).ocv

    def soc_fractions(self) -> tuple[float, float]:
        """Volume-averaged lithium fraction (cathode, anode)."""
        return (
            self.diffusion.average_concentration(self.state.c_pos) / self.params.c_max_pos,
            self.diffusion.average_concentration(self.state.c_neg) / self.params.c_max_neg,
        )

    @property
    def capacity_lost_ah(self) -> float:
        """Lost lithium expressed as charge (Ah). Diagnostic only."""
        return self.state.lost_lithium / 3600.0

    def step(self, current: float, dt: float) -> StepResult:
        """
        Advance the cell by one time step at constant current.

        Args:
            current: Cell current (A), positive on charge
            dt: Time step (s)

        Returns:
            Step result

        Raises:
            InvalidStateError: If the state leaves its physical bounds
        """
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")

        s = self.state
        p = self.params
        geo = p.geometry

        electro = self.electrochemistry(current)

        stress = self.stress.compute(
            self.diffusion,
            s.c_pos,
            s.c_neg,
            electro.c_surf_pos,
            electro.c_surf_neg,
            p.c_max_neg,
        )

        inputs = DegradationInputs(
            current=current,
            phi_pos=electro.phi_pos,
            phi_neg=electro.phi_neg,
            c_avg_pos=self.diffusion.average_concentration(s.c_pos),
            c_avg_neg=self.diffusion.average_concentration(s.c_neg),
            c_surf_neg=electro.c_surf_neg,
            initial_anode_surface=self.initial_anode_surface,
        )
        rates = self.degradation.rates(
            self._selector, s, inputs, stress, self._previous_stress, dt
        )

        # Side reactions draw lithium from the anode particles
        _, surface_neg = self.electrode_surfaces()
        flux_pos, flux_neg = self.main_fluxes(current)
        side_current = (
            rates.sei_current * (surface_neg + s.crack_surface)
            + rates.plating_current * surface_neg
        )
        flux_neg += side_current / (FARADAY * surface_neg)

        diff_pos, diff_neg = self.diffusion_constants()
        s.c_pos = self.diffusion.advance(s.c_pos, flux_pos, diff_pos, geo.radius_pos, dt)
        s.c_neg = self.diffusion.advance(s.c_neg, flux_neg, diff_neg, geo.radius_neg, dt)

        heat = self.thermal.heat_generation(
            current,
            electro.voltage,
            electro.ocv,
            s.temperature,
            electro.entropic_coefficient,
        )
        s.temperature = self.thermal.update(s.temperature, heat, dt)

        self._previous_stress = stress
        self.time += dt
        self.apply_degradation(rates)

        if self.verbose >= VERBOSE_CELL_FUNCTIONS:
            logger.debug(
                "t=%.1fs I=%.3fA V=%.4fV T=%.2fK delta=%.3e CS=%.3e LLI=%.3e",
                self.time,
                current,
                electro.voltage,
                s.temperature,
                s.sei_thickness,
                s.crack_surface,
                s.lost_lithium,
            )

        return StepResult(
            time=self.time,
            electrochemistry=electro,
            stress=stress,
            degradation=rates,
            temperature=s.temperature,
        )

    def apply_degradation(self, rates: DegradationRates) -> None:
        """
        Apply one step of degradation to the long-term state variables.

        The whole state is validated afterwards.

        Effective surfaces follow the volume fractions; with the crack
        diffusion coupling the anode diffusion constant falls as
        D = D_0 * (CS_0 / CS)^m.

        Raises:
            InvalidStateError: If the updated state is out of bounds
        """
        s = self.state
        geo = self.params.geometry

        s.sei_thickness += rates.sei_thickness
        s.plated_thickness += rates.plated_thickness
        s.crack_surface += rates.crack_surface
        s.lost_lithium += rates.lost_lithium
        s.resistance += rates.resistance

        if rates.vol_frac_loss_pos > 0:
            s.vol_frac_pos -= rates.vol_frac_loss_pos
            s.area_pos = 3 * s.vol_frac_pos / geo.radius_pos
        if rates.vol_frac_loss_neg > 0:
            s.vol_frac_neg -= rates.vol_frac_loss_neg
            s.area_neg = 3 * s.vol_frac_neg / geo.radius_neg

        if self._selector.crack_diffusion and s.crack_surface > 0:
            initial = self.initial_state
            ratio = initial.crack_surface / s.crack_surface
            s.diff_neg = initial.diff_neg * ratio ** self.params.crack.diffusion_exponent

        try:
            self.validate()
        except InvalidStateError as e:
            logger.error(
                "Cell '%s' reached an illegal state at t=%.1fs: %s", self.params.name, self.time, e
            )
            raise

    @property
    def initial_anode_surface(self) -> float:
        """Real anode surface of the fresh cell (m²)."""
        s = self.initial_state
        return s.area_neg * s.thickness_neg * self.params.geometry.elec_surf

    def get_state_dict(self) -> dict:
        """Get current state and derived quantities as a dictionary."""
        frac_pos, frac_neg = self.soc_fractions()
        surface_pos, surface_neg = self.electrode_surfaces()
        state = self.state.to_dict()
        state.update(
            {
                "time": self.time,
                "frac_pos": frac_pos,
                "frac_neg": frac_neg,
                "surface_pos": surface_pos,
                "surface_neg": surface_neg,
                "capacity_lost_ah": self.capacity_lost_ah,
            }
        )
        return state

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"name='{self.params.name}', "
            f"nodes={self.diffusion.n_nodes}, "
            f"T={self.state.temperature:.2f}K)"
        )


__all__ = ["CellModel", "Electrochemistry", "StepResult"]
