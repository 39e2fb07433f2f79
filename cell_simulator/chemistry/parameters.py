"""Parameter sets describing one commercial cell."""

from __future__ import annotations

from dataclasses import dataclass, field

from cell_simulator.core.constants import KELVIN
from cell_simulator.core.stress import StressParameters
from cell_simulator.core.thermal_model import ThermalParameters
from cell_simulator.utils.validators import validate_curve


@dataclass
class Geometry:
    """
    Cell and electrode geometry.

    The particle radii and node count must match the diffusion
    discretisation the cell is built with.
    """

    cell_thickness: float = 1.6850e-4  # Thickness used for the cell volume (m)
    elec_surf: float = 0.0982  # Electrode surface (m²)
    surface_to_volume: float = 252.9915  # Cooled surface per volume (1/m)
    radius_pos: float = 8.5e-6  # Cathode particle radius (m)
    radius_neg: float = 1.25e-5  # Anode particle radius (m)
    thickness_pos: float = 70e-6  # m
    thickness_neg: float = 73.5e-6  # m
    vol_frac_pos: float = 0.5  # Active volume fraction (-)
    vol_frac_neg: float = 0.5
    n_nodes: int = 5  # Radial nodes per particle


@dataclass
class KineticParameters:
    """Main-reaction kinetics and solid diffusion."""

    k_pos: float = 5e-11  # Rate constant at T_ref
    k_pos_ea: float = 58000.0  # Activation energy (J/mol)
    k_neg: float = 1.7640e-11
    k_neg_ea: float = 20000.0
    diff_pos: float = 8e-14  # Diffusion constant at T_ref (m²/s)
    diff_neg: float = 7e-14
    diff_pos_ea: float = 29000.0
    diff_neg_ea: float = 35000.0
    c_elec: float = 1000.0  # Electrolyte concentration (mol/m³)


@dataclass
class SEIParameters:
    """SEI growth fitting parameters."""

    n: int = 1  # Electrons per SEI reaction
    alpha: float = 1.0  # Charge transfer coefficient
    ocv_sei: float = 0.4  # Equilibrium potential of the SEI reaction (V)
    resistivity: float = 2037.4  # Ohm·m
    molar_volume: float = 64.39e-6  # m³/mol
    c_solvent: float = 4541.0  # Solvent concentration (mol/m³)
    initial_thickness: float = 1e-9  # After formation; never zero (m)

    k_kinetic: float = 1e-15  # Model 1 rate constant (mol/m²/s)
    k_kinetic_ea: float = 60000.0
    k_mixed: float = 2e-19  # Model 2 rate constant (m/s)
    k_mixed_ea: float = 60000.0
    d_mixed: float = 1.2e-21  # Model 2 solvent diffusivity in the SEI (m²/s)
    d_mixed_ea: float = 20000.0
    d_diffusion: float = 2.3e-22  # Model 3 solvent diffusivity (m²/s)
    d_diffusion_ea: float = 60000.0


@dataclass
class CrackParameters:
    """Surface cracking fitting parameters."""

    initial_fraction: float = 0.01  # Initial crack surface / anode surface
    alpha_laresgoiti: float = 4.25e-7  # m²/MPa
    alpha_dai: float = 6.3e-7  # m²/MPa^m
    dai_exponent: float = 1.0
    alpha_gradient: float = 5e-4  # m²/s
    alpha_barai: float = 3e-6  # 1/(A·s)
    max_surface_factor: float = 5.0  # Maximum crack surface / initial anode surface
    k_ekstrom: float = 1e-7  # m²/(A·s)
    k_ekstrom_ea: float = -127040.0
    diffusion_exponent: float = 2.0  # Exponent of the crack diffusion coupling


@dataclass
class LAMParameters:
    """Loss-of-active-material fitting parameters."""

    beta_dai_pos: float = 2e-10  # 1/(MPa·s)
    beta_dai_neg: float = 1.4e-9
    beta_delacourt_pos: float = 5e-9  # 1/(A·s)
    beta_delacourt_neg: float = 5e-9
    ocv_nmc: float = 4.1  # Onset potential of cathode dissolution (V)
    k_kindermann: float = 2e-11  # 1/s
    k_kindermann_ea: float = 20000.0
    k_narayanrao_pos: float = 3e-10  # 1/s
    k_narayanrao_neg: float = 3e-10
    k_narayanrao_ea: float = 20000.0


@dataclass
class PlatingParameters:
    """Lithium plating fitting parameters."""

    n: int = 1
    alpha: float = 1.0
    ocv_plating: float = 0.0  # V
    k_plating: float = 4.5e-10  # mol/m²/s
    k_plating_ea: float = -2.014008e5
    molar_volume: float = 1.3e-5  # Molar volume of lithium metal (m³/mol)
    resistivity: float = 100.0  # Ohm·m


@dataclass
class CellParameters:
    """
    Complete description of one cell type.

    A commercial cell is a value of this class, not a subclass; the
    registry in ``cell_simulator.chemistry`` maps names to factories.
    """

    name: str = "Generic"

    # Chemistry
    c_max_pos: float = 51385.0  # mol/m³
    c_max_neg: float = 30555.0  # mol/m³
    nominal_capacity: float = 2.7  # Ah
    voltage_max: float = 4.2  # V
    voltage_min: float = 2.7  # V

    # Initial condition at 50% SOC
    frac_pos: float = 0.5
    frac_neg: float = 0.5
    rdc: float = 0.0102  # DC resistance of the cell (Ohm)
    t_ref: float = KELVIN + 25.0  # K
    initial_temperature: float = KELVIN + 25.0  # K

    geometry: Geometry = field(default_factory=Geometry)
    kinetics: KineticParameters = field(default_factory=KineticParameters)
    thermal: ThermalParameters = field(default_factory=ThermalParameters)
    stress: StressParameters = field(default_factory=StressParameters)
    sei: SEIParameters = field(default_factory=SEIParameters)
    crack: CrackParameters = field(default_factory=CrackParameters)
    lam: LAMParameters = field(default_factory=LAMParameters)
    plating: PlatingParameters = field(default_factory=PlatingParameters)

    # Lookup tables: [lithium fraction, value]
    ocv_pos: list[list[float]] = field(default_factory=list)  # V
    ocv_neg: list[list[float]] = field(default_factory=list)  # V
    entropic_pos: list[list[float]] = field(default_factory=list)  # V/K
    entropic_neg: list[list[float]] = field(default_factory=list)  # V/K
    max_curve_length: int = 100

    def curves(self) -> dict[str, list[list[float]]]:
        """All lookup tables by name."""
        return {
            "ocv_pos": self.ocv_pos,
            "ocv_neg": self.ocv_neg,
            "entropic_pos": self.entropic_pos,
            "entropic_neg": self.entropic_neg,
        }

    def validate(self) -> list[str]:
        """
        Validate the parameter set.

        Returns:
            List of validation error messages (empty if valid)

        Raises:
            CurveLengthError: If a lookup table is longer than max_curve_length
        """
        errors = []

        if self.voltage_min >= self.voltage_max:
            errors.append(f"voltage_min ({self.voltage_min}) must be < voltage_max ({self.voltage_max})")

        for name in ("c_max_pos", "c_max_neg", "nominal_capacity", "rdc", "t_ref"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} ({getattr(self, name)}) must be > 0")

        for name in ("frac_pos", "frac_neg"):
            if not 0 <= getattr(self, name) <= 1:
                errors.append(f"{name} ({getattr(self, name)}) must be in [0, 1]")

        if self.geometry.n_nodes < 1:
            errors.append(f"geometry.n_nodes ({self.geometry.n_nodes}) must be >= 1")

        if self.sei.initial_thickness <= 0:
            errors.append(f"sei.initial_thickness ({self.sei.initial_thickness}) must be > 0")

        for name, table in self.curves().items():
            for result in validate_curve(name, table, self.max_curve_length):
                if not result.passed:
                    errors.append(result.message)

        return errors

    def to_dict(self) -> dict:
        """Convert the scalar cell constants to a dictionary."""
        return {
            "name": self.name,
            "c_max_pos": self.c_max_pos,
            "c_max_neg": self.c_max_neg,
            "nominal_capacity": self.nominal_capacity,
            "voltage_max": self.voltage_max,
            "voltage_min": self.voltage_min,
            "frac_pos": self.frac_pos,
            "frac_neg": self.frac_neg,
            "rdc": self.rdc,
            "t_ref": self.t_ref,
            "n_nodes": self.geometry.n_nodes,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"name='{self.name}', "
            f"capacity={self.nominal_capacity}Ah, "
            f"voltage={self.voltage_min}-{self.voltage_max}V)"
        )
