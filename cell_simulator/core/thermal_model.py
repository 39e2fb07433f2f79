"""Lumped thermal model of a cell."""

from __future__ import annotations

from dataclasses import dataclass

from cell_simulator.core.constants import KELVIN


@dataclass
class ThermalParameters:
    """Thermal model parameters."""

    cooling_coefficient: float = 90.0  # Convective heat transfer to ambient (W/m²·K)
    density: float = 1626.0  # Cell density (kg/m³)
    specific_heat: float = 750.0  # Specific heat capacity (J/kg·K)
    ambient_temperature: float = KELVIN + 25.0  # K


class ThermalModel:
    """
    Lumped thermal model, per unit cell volume.

    rho * Cp * dT/dt = Q_gen / V - h * SAV * (T - T_amb)

    Where:
    - Q_gen = I * (V - OCV) (irreversible) + I * T * dOCV/dT (reversible)
    - V is the cell volume and SAV its surface-to-volume ratio
    """

    def __init__(self, params: ThermalParameters | None, volume: float, surface_to_volume: float):
        """
        Initialize thermal model.

        Args:
            params: Thermal parameters (uses defaults if None)
            volume: Cell volume (m³)
            surface_to_volume: Cooled surface per unit volume (1/m)
        """
        self.params = params or ThermalParameters()
        self.volume = volume
        self.surface_to_volume = surface_to_volume

    def heat_generation(
        self,
        current: float,
        voltage: float,
        ocv: float,
        temperature: float,
        entropic_coefficient: float = 0.0,
    ) -> float:
        """
        Heat generated in the cell (W).

        Args:
            current: Cell current (A), positive on charge
            voltage: Terminal voltage (V)
            ocv: Open circuit voltage (V)
            temperature: Cell temperature (K)
            entropic_coefficient: dOCV/dT of the cell (V/K)
        """
        q_irreversible = current * (voltage - ocv)
        q_reversible = current * temperature * entropic_coefficient
        return q_irreversible + q_reversible

    def temperature_rate(self, heat: float, temperature: float) -> float:
        """dT/dt (K/s) for ``heat`` watts generated at ``temperature``."""
        p = self.params
        q_loss = p.cooling_coefficient * self.surface_to_volume * (temperature - p.ambient_temperature)
        return (heat / self.volume - q_loss) / (p.density * p.specific_heat)

    def update(self, temperature: float, heat: float, dt: float) -> float:
        """
        Temperature after one time step.

        Args:
            temperature: Current temperature (K)
            heat: Heat generated (W)
            dt: Time step (s)

        Returns:
            New temperature (K)
        """
        return temperature + self.temperature_rate(heat, temperature) * dt

    def set_ambient_temperature(self, temperature: float) -> None:
        """Set ambient temperature (K)."""
        self.params.ambient_temperature = temperature
