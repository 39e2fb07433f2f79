"""Physical constants shared by the cell model."""

from __future__ import annotations

import numpy as np

# Gas constant (J/mol·K)
R_GAS = 8.314

# Faraday constant (C/mol)
FARADAY = 96487.0

# 0°C in Kelvin
KELVIN = 273.15


def arrhenius(rate: float, activation_energy: float, temperature: float, t_ref: float) -> float:
    """
    Scale a rate constant from the reference temperature.

    k(T) = k_ref * exp(E_a/R * (1/T_ref - 1/T))

    Args:
        rate: Rate at the reference temperature
        activation_energy: Activation energy (J/mol), may be negative
        temperature: Temperature (K)
        t_ref: Reference temperature (K)

    Returns:
        Rate at ``temperature``
    """
    return float(rate * np.exp(activation_energy / R_GAS * (1.0 / t_ref - 1.0 / temperature)))
