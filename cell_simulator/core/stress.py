"""
Mechanical stress in electrode particles.

Two theories are supported:

Dai (diffusion-induced stress in an elastic sphere):
    σ_r(r) = 2ΩE / (9(1-ν)) * (c̄_R - c̄_r)
    σ_t(r) =  ΩE / (9(1-ν)) * (2c̄_R + c̄_r - 3c(r))
    σ_h    = (σ_r + 2σ_t) / 3
    where c̄_r is the mean concentration inside radius r.

Laresgoiti (empirical):
    σ = f(x̄_n), a lookup of anode stress against the average anode
    lithium fraction.

Stress is only computed for the theories some selected degradation model
consumes; the other member of the result stays ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from cell_simulator.core.degradation import DegradationSelector
    from cell_simulator.core.diffusion import DiffusionModel


@dataclass
class StressParameters:
    """Fitting coefficients of both stress theories."""

    # Dai: partial molar volume (m³/mol), Young's modulus (Pa), Poisson ratio
    omega_pos: float = 2.1e-6
    omega_neg: float = 3.17e-6
    young_pos: float = 138.73e9
    young_neg: float = 15e9
    poisson_pos: float = 0.3
    poisson_neg: float = 0.3

    # Laresgoiti: [anode lithium fraction, stress (MPa)]
    laresgoiti_table: list[list[float]] = field(
        default_factory=lambda: [
            [0.00, 0.0],
            [0.10, 8.0],
            [0.20, 14.5],
            [0.30, 13.0],
            [0.40, 10.0],
            [0.50, 11.5],
            [0.60, 14.0],
            [0.70, 12.0],
            [0.80, 9.0],
            [0.90, 6.5],
            [1.00, 5.0],
        ]
    )


@dataclass
class DaiStress:
    """Dai stress summary per electrode (MPa)."""

    hydrostatic_pos: float  # Largest |σ_h| over the cathode particle
    hydrostatic_neg: float
    surface_tangential_pos: float
    surface_tangential_neg: float


@dataclass
class StressResult:
    """Stress for one time step; a theory that was not needed is None."""

    dai: Optional[DaiStress] = None
    laresgoiti: Optional[float] = None  # Anode stress (MPa)


class StressModel:
    """
    Stress calculator gated by the active degradation models.

    ``needs_dai`` and ``needs_laresgoiti`` are derived from a
    DegradationSelector by :meth:`configure` and cannot be set directly.
    """

    def __init__(self, params: StressParameters | None = None):
        self.params = params or StressParameters()
        self._needs_dai = False
        self._needs_laresgoiti = False

        table = np.array(self.params.laresgoiti_table, dtype=float)
        self._lares_x = table[:, 0]
        self._lares_sigma = table[:, 1]

    @property
    def needs_dai(self) -> bool:
        """Whether a selected crack or LAM model consumes Dai stress."""
        return self._needs_dai

    @property
    def needs_laresgoiti(self) -> bool:
        """Whether a selected crack model consumes Laresgoiti stress."""
        return self._needs_laresgoiti

    def configure(self, selector: DegradationSelector) -> None:
        """Recompute the activation flags for ``selector``."""
        self._needs_dai = selector.needs_dai_stress
        self._needs_laresgoiti = selector.needs_laresgoiti_stress

    def compute(
        self,
        diffusion: DiffusionModel,
        c_pos: np.ndarray,
        c_neg: np.ndarray,
        c_surf_pos: float,
        c_surf_neg: float,
        c_max_neg: float,
    ) -> StressResult:
        """
        Compute the stresses the active models need.

        Args:
            diffusion: Discretisation the profiles live on
            c_pos: Cathode concentration profile (mol/m³)
            c_neg: Anode concentration profile (mol/m³)
            c_surf_pos: Cathode surface concentration (mol/m³)
            c_surf_neg: Anode surface concentration (mol/m³)
            c_max_neg: Maximum anode concentration (mol/m³)

        Returns:
            Stress result with unused theories left as None
        """
        result = StressResult()
        if self._needs_dai:
            p = self.params
            hyd_p, tan_p = self.dai_stress(
                diffusion, c_pos, c_surf_pos, p.omega_pos, p.young_pos, p.poisson_pos
            )
            hyd_n, tan_n = self.dai_stress(
                diffusion, c_neg, c_surf_neg, p.omega_neg, p.young_neg, p.poisson_neg
            )
            result.dai = DaiStress(
                hydrostatic_pos=hyd_p,
                hydrostatic_neg=hyd_n,
                surface_tangential_pos=tan_p,
                surface_tangential_neg=tan_n,
            )
        if self._needs_laresgoiti:
            x_avg = diffusion.average_concentration(c_neg) / c_max_neg
            result.laresgoiti = self.laresgoiti_stress(x_avg)
        return result

    @staticmethod
    def dai_stress(
        diffusion: DiffusionModel,
        c: np.ndarray,
        c_surf: float,
        omega: float,
        young: float,
        poisson: float,
    ) -> tuple[float, float]:
        """
        Dai stress in one particle.

        Evaluated at the centre and at every shell boundary; the
        concentration at an inner boundary is the mean of the two adjacent
        nodes and at the outer boundary the surface concentration.

        Returns:
            Tuple of (max |hydrostatic stress|, surface tangential stress) in MPa
        """
        c = np.asarray(c, dtype=float)
        scale = omega * young / (9.0 * (1.0 - poisson)) / 1e6

        c_bar_r = diffusion.cumulative_average(c)
        c_bar_total = c_bar_r[-1]
        c_edge = np.append(0.5 * (c[:-1] + c[1:]), c_surf)

        sigma_r = 2.0 * scale * (c_bar_total - c_bar_r)
        sigma_t = scale * (2.0 * c_bar_total + c_bar_r - 3.0 * c_edge)
        sigma_h = (sigma_r + 2.0 * sigma_t) / 3.0

        # At the centre both components equal 2ΩE/(9(1-ν)) (c̄ - c(0))
        sigma_centre = 2.0 * scale * (c_bar_total - c[0])

        hydrostatic = max(float(np.max(np.abs(sigma_h))), abs(sigma_centre))
        return hydrostatic, float(sigma_t[-1])

    def laresgoiti_stress(self, x_avg: float) -> float:
        """Anode stress (MPa) at average lithium fraction ``x_avg``."""
        return float(np.interp(x_avg, self._lares_x, self._lares_sigma))
