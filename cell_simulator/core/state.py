"""Physical state of a single lithium-ion cell."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

import numpy as np

from cell_simulator.core.constants import KELVIN
from cell_simulator.utils.validators import (
    InvalidStateError,
    check_non_negative,
    check_positive,
    check_profile,
)


@dataclass(frozen=True)
class StateBounds:
    """Limits a PhysicalState is checked against."""

    n_nodes: int  # Radial nodes per particle, fixed by the diffusion model
    c_max_pos: float  # Maximum Li concentration in the cathode (mol/m³)
    c_max_neg: float  # Maximum Li concentration in the anode (mol/m³)
    t_max: float = KELVIN + 100.0  # Material failure ceiling (K)


@dataclass
class PhysicalState:
    """
    Instantaneous physical state of one cell.

    Mutated in place by its CellModel every time step. The long-term
    variables (SEI thickness, crack surface, lost lithium, plated lithium)
    only ever grow; electrode volume fractions and diffusion constants only
    ever shrink.
    """

    c_pos: np.ndarray  # Cathode concentration at each radial node (mol/m³)
    c_neg: np.ndarray  # Anode concentration at each radial node (mol/m³)
    temperature: float  # K
    sei_thickness: float  # m, never zero
    lost_lithium: float  # C, diagnostic only
    thickness_pos: float  # m
    thickness_neg: float  # m
    vol_frac_pos: float  # Active volume fraction of the cathode (-)
    vol_frac_neg: float  # Active volume fraction of the anode (-)
    area_pos: float  # Effective surface area 3e/R (1/m)
    area_neg: float  # 1/m
    crack_surface: float  # m²
    diff_pos: float  # Diffusion constant at reference temperature (m²/s)
    diff_neg: float  # m²/s
    resistance: float  # Specific resistance of both electrodes (Ohm·m²)
    plated_thickness: float  # m
    bounds: StateBounds = field(repr=False, default=None)

    @classmethod
    def initialize(
        cls,
        c_pos,
        c_neg,
        temperature: float,
        sei_thickness: float,
        lost_lithium: float,
        thickness_pos: float,
        thickness_neg: float,
        vol_frac_pos: float,
        vol_frac_neg: float,
        area_pos: float,
        area_neg: float,
        crack_surface: float,
        diff_pos: float,
        diff_neg: float,
        resistance: float,
        plated_thickness: float,
        bounds: StateBounds,
    ) -> PhysicalState:
        """
        Create a state with every field set and check it.

        Raises:
            InvalidStateError: If any value is outside its physical bound
        """
        state = cls(
            c_pos=np.array(c_pos, dtype=float),
            c_neg=np.array(c_neg, dtype=float),
            temperature=float(temperature),
            sei_thickness=float(sei_thickness),
            lost_lithium=float(lost_lithium),
            thickness_pos=float(thickness_pos),
            thickness_neg=float(thickness_neg),
            vol_frac_pos=float(vol_frac_pos),
            vol_frac_neg=float(vol_frac_neg),
            area_pos=float(area_pos),
            area_neg=float(area_neg),
            crack_surface=float(crack_surface),
            diff_pos=float(diff_pos),
            diff_neg=float(diff_neg),
            resistance=float(resistance),
            plated_thickness=float(plated_thickness),
            bounds=bounds,
        )
        state.validate()
        return state

    def set_concentrations_from_fraction(self, frac_pos: float, frac_neg: float) -> None:
        """
        Fill both profiles uniformly from lithium fractions.

        Only meant for initialisation: a uniform profile discards any
        concentration gradient built up by previous time steps.

        Args:
            frac_pos: Lithium fraction of the cathode (0-1)
            frac_neg: Lithium fraction of the anode (0-1)
        """
        for name, frac in (("frac_pos", frac_pos), ("frac_neg", frac_neg)):
            if not 0.0 <= frac <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {frac}")

        n = self.bounds.n_nodes
        self.c_pos = np.full(n, frac_pos * self.bounds.c_max_pos)
        self.c_neg = np.full(n, frac_neg * self.bounds.c_max_neg)

    def validate(self) -> None:
        """
        Check every invariant.

        Raises:
            InvalidStateError: Naming the first field found out of bounds
        """
        b = self.bounds
        if b is None:
            raise InvalidStateError("bounds", "state has no bounds to validate against")

        check_profile("c_pos", np.asarray(self.c_pos), b.n_nodes, b.c_max_pos)
        check_profile("c_neg", np.asarray(self.c_neg), b.n_nodes, b.c_max_neg)

        check_positive("temperature", self.temperature)
        if self.temperature >= b.t_max:
            raise InvalidStateError(
                "temperature", f"must be below {b.t_max} K", self.temperature
            )

        # Several rate expressions divide by the SEI thickness
        check_positive("sei_thickness", self.sei_thickness)

        check_non_negative("lost_lithium", self.lost_lithium)
        check_positive("thickness_pos", self.thickness_pos)
        check_positive("thickness_neg", self.thickness_neg)

        for name in ("vol_frac_pos", "vol_frac_neg"):
            value = getattr(self, name)
            check_positive(name, value)
            if value > 1.0:
                raise InvalidStateError(name, "must be <= 1", value)

        check_positive("area_pos", self.area_pos)
        check_positive("area_neg", self.area_neg)
        check_non_negative("crack_surface", self.crack_surface)
        check_positive("diff_pos", self.diff_pos)
        check_positive("diff_neg", self.diff_neg)
        check_positive("resistance", self.resistance)
        check_non_negative("plated_thickness", self.plated_thickness)

    def copy(self) -> PhysicalState:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Get the state as a dictionary of plain Python values."""
        return {
            "c_pos": [float(c) for c in self.c_pos],
            "c_neg": [float(c) for c in self.c_neg],
            "temperature": self.temperature,
            "sei_thickness": self.sei_thickness,
            "lost_lithium": self.lost_lithium,
            "thickness_pos": self.thickness_pos,
            "thickness_neg": self.thickness_neg,
            "vol_frac_pos": self.vol_frac_pos,
            "vol_frac_neg": self.vol_frac_neg,
            "area_pos": self.area_pos,
            "area_neg": self.area_neg,
            "crack_surface": self.crack_surface,
            "diff_pos": self.diff_pos,
            "diff_neg": self.diff_neg,
            "resistance": self.resistance,
            "plated_thickness": self.plated_thickness,
        }
