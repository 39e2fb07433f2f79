"""Kokam high-power NMC / Graphite 18650 parameter set."""

from cell_simulator.chemistry.parameters import (
    CellParameters,
    CrackParameters,
    Geometry,
    KineticParameters,
    LAMParameters,
    PlatingParameters,
    SEIParameters,
)
from cell_simulator.core.constants import KELVIN
from cell_simulator.core.stress import StressParameters
from cell_simulator.core.thermal_model import ThermalParameters


def kokam_nmc() -> CellParameters:
    """
    Kokam NMC / Graphite high-power 18650 cell (2.7 Ah).

    Characteristics:
    - 2.7-4.2 V window
    - Low DC resistance (10.2 mOhm)
    - Strong forced cooling (90 W/m²K), as with a fan pointed at the cell

    Geometry, kinetics, diffusion and thermal values are the published
    Kokam fit. The degradation fitting constants are not: they are set for
    the rate expressions and SI units of ``core/degradation.py`` (e.g. SEI
    resistivity in Ohm·m multiplying a thickness, crack rates in m² per
    unit driver) and exaggerated so that each mechanism visibly affects
    the cell life when selected on its own.
    """
    return CellParameters(
        name="KokamNMC",
        c_max_pos=51385.0,
        c_max_neg=30555.0,
        nominal_capacity=2.7,
        voltage_max=4.2,
        voltage_min=2.7,
        # Lithium fractions at 50% SOC
        frac_pos=0.689332,
        frac_neg=0.479283,
        rdc=0.0102,
        t_ref=KELVIN + 25.0,
        initial_temperature=KELVIN + 25.0,
        geometry=Geometry(
            cell_thickness=1.6850e-4,
            elec_surf=0.0982,
            surface_to_volume=252.9915,
            radius_pos=8.5e-6,
            radius_neg=1.25e-5,
            thickness_pos=70e-6,
            thickness_neg=73.5e-6,
            vol_frac_pos=0.5,
            vol_frac_neg=0.5,
            n_nodes=5,
        ),
        kinetics=KineticParameters(
            k_pos=5e-11,
            k_pos_ea=58000.0,
            k_neg=1.7640e-11,
            k_neg_ea=20000.0,
            diff_pos=8e-14,
            diff_neg=7e-14,
            diff_pos_ea=29000.0,
            diff_neg_ea=35000.0,
            c_elec=1000.0,
        ),
        thermal=ThermalParameters(
            cooling_coefficient=90.0,
            density=1626.0,
            specific_heat=750.0,
            ambient_temperature=KELVIN + 25.0,
        ),
        stress=StressParameters(),
        sei=SEIParameters(),
        crack=CrackParameters(),
        lam=LAMParameters(),
        plating=PlatingParameters(),
        ocv_pos=[
            [0.00, 4.60],
            [0.10, 4.52],
            [0.20, 4.45],
            [0.30, 4.30],
            [0.35, 4.22],
            [0.40, 4.16],
            [0.45, 4.10],
            [0.50, 4.03],
            [0.55, 3.96],
            [0.60, 3.89],
            [0.65, 3.83],
            [0.70, 3.77],
            [0.75, 3.72],
            [0.80, 3.67],
            [0.85, 3.62],
            [0.90, 3.55],
            [0.95, 3.40],
            [1.00, 3.00],
        ],
        ocv_neg=[
            [0.00, 0.900],
            [0.01, 0.600],
            [0.03, 0.350],
            [0.05, 0.250],
            [0.10, 0.200],
            [0.15, 0.170],
            [0.20, 0.140],
            [0.30, 0.125],
            [0.40, 0.120],
            [0.50, 0.105],
            [0.55, 0.090],
            [0.60, 0.088],
            [0.70, 0.087],
            [0.80, 0.085],
            [0.90, 0.083],
            [0.95, 0.080],
            [1.00, 0.050],
        ],
        entropic_pos=[
            [0.00, -1.0e-4],
            [0.30, -0.6e-4],
            [0.50, -0.2e-4],
            [0.70, 0.1e-4],
            [0.90, 0.3e-4],
            [1.00, 0.4e-4],
        ],
        entropic_neg=[
            [0.00, 1.5e-4],
            [0.20, 0.5e-4],
            [0.40, -0.2e-4],
            [0.60, -0.3e-4],
            [0.80, -0.4e-4],
            [1.00, -0.4e-4],
        ],
        max_curve_length=100,
    )
