"""
Spatial discretisation of solid diffusion inside spherical particles.

Fick's law in a sphere of radius R is reduced to a linear ODE system over
the concentrations of ``n`` concentric shells of equal thickness:

    dc/dt = (D / R²) * A @ c + (1 / R) * b * j

where ``j`` is the molar flux leaving the particle surface (mol/m²/s).
``A`` and ``b`` are nondimensional (unit radius, unit diffusivity) and are
computed once; the same operators serve the cathode and the anode because
only the radius and diffusivity differ between them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from cell_simulator.utils.validators import DiscretizationMismatchError

# Fraction of the explicit Euler stability limit used per sub-step
STABILITY_MARGIN = 0.9


@dataclass(frozen=True, eq=False)
class DiffusionModel:
    """
    Precomputed finite-volume operators for spherical solid diffusion.

    Instances are read-only and can be shared by any number of cells whose
    particle radii match ``radius_pos`` and ``radius_neg``.
    """

    edges: np.ndarray  # Shell boundaries on the unit sphere, length n + 1
    a_matrix: np.ndarray  # n x n
    b_vector: np.ndarray  # n
    radius_pos: float  # Cathode particle radius the model was built for (m)
    radius_neg: float  # Anode particle radius (m)
    weights: np.ndarray = field(init=False)
    spectral_radius: float = field(init=False)

    def __post_init__(self):
        edges = np.array(self.edges, dtype=float)
        a_matrix = np.array(self.a_matrix, dtype=float)
        b_vector = np.array(self.b_vector, dtype=float)
        n = edges.shape[0] - 1

        if n < 1 or a_matrix.shape != (n, n) or b_vector.shape != (n,):
            raise DiscretizationMismatchError(
                f"Inconsistent discretisation: {n + 1} edges, "
                f"A {a_matrix.shape}, b {b_vector.shape}"
            )

        weights = edges[1:] ** 3 - edges[:-1] ** 3
        spectral_radius = float(np.max(np.abs(np.linalg.eigvals(a_matrix))))

        for name, value in (
            ("edges", edges),
            ("a_matrix", a_matrix),
            ("b_vector", b_vector),
            ("weights", weights),
        ):
            value.flags.writeable = False
            object.__setattr__(self, name, value)
        object.__setattr__(self, "spectral_radius", spectral_radius)

    @property
    def n_nodes(self) -> int:
        """Discretisation order (number of radial nodes)."""
        return self.b_vector.shape[0]

    @classmethod
    def spherical(cls, n_nodes: int, radius_pos: float, radius_neg: float) -> DiffusionModel:
        """
        Build the operators for ``n_nodes`` equal-thickness shells.

        Args:
            n_nodes: Number of radial nodes
            radius_pos: Cathode particle radius (m)
            radius_neg: Anode particle radius (m)

        Returns:
            Diffusion model
        """
        if n_nodes < 1:
            raise ValueError(f"n_nodes must be >= 1, got {n_nodes}")

        h = 1.0 / n_nodes
        edges = np.linspace(0.0, 1.0, n_nodes + 1)
        volumes = edges[1:] ** 3 - edges[:-1] ** 3

        a_matrix = np.zeros((n_nodes, n_nodes))
        for i in range(n_nodes):
            if i + 1 < n_nodes:
                g = 3.0 * edges[i + 1] ** 2 / (h * volumes[i])
                a_matrix[i, i + 1] += g
                a_matrix[i, i] -= g
            if i > 0:
                g = 3.0 * edges[i] ** 2 / (h * volumes[i])
                a_matrix[i, i - 1] += g
                a_matrix[i, i] -= g

        b_vector = np.zeros(n_nodes)
        b_vector[-1] = -3.0 / volumes[-1]

        return cls(
            edges=edges,
            a_matrix=a_matrix,
            b_vector=b_vector,
            radius_pos=float(radius_pos),
            radius_neg=float(radius_neg),
        )

    @classmethod
    def load(cls, path: str | Path) -> DiffusionModel:
        """Load a model saved with :meth:`save`."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Discretisation file not found: {path}")

        with np.load(path, allow_pickle=False) as data:
            return cls(
                edges=data["edges"],
                a_matrix=data["a_matrix"],
                b_vector=data["b_vector"],
                radius_pos=float(data["radius_pos"]),
                radius_neg=float(data["radius_neg"]),
            )

    def save(self, path: str | Path) -> None:
        """Save the operators as a numpy ``.npz`` archive."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez(
            path,
            edges=self.edges,
            a_matrix=self.a_matrix,
            b_vector=self.b_vector,
            radius_pos=self.radius_pos,
            radius_neg=self.radius_neg,
        )

    def stable_time_step(self, diffusivity: float, radius: float) -> float:
        """Largest explicit Euler step (s) used when advancing a profile."""
        rate = self.spectral_radius * diffusivity / radius**2
        if rate == 0:
            return math.inf
        return STABILITY_MARGIN * 2.0 / rate

    def derivative(
        self, c: np.ndarray, flux: float, diffusivity: float, radius: float
    ) -> np.ndarray:
        """Time derivative of the profile (mol/m³/s)."""
        return diffusivity / radius**2 * (self.a_matrix @ c) + self.b_vector * (flux / radius)

    def advance(
        self,
        c: np.ndarray,
        flux: float,
        diffusivity: float,
        radius: float,
        dt: float,
    ) -> np.ndarray:
        """
        Advance a concentration profile by ``dt`` under a constant surface flux.

        The step is split into equal explicit Euler sub-steps below the
        stability limit. No clamping is applied: the caller validates the
        result.

        Args:
            c: Concentration at each node (mol/m³)
            flux: Molar flux out of the particle surface (mol/m²/s)
            diffusivity: Diffusion constant (m²/s)
            radius: Particle radius (m)
            dt: Time step (s)

        Returns:
            New concentration profile
        """
        c = np.asarray(c, dtype=float)
        if c.shape != (self.n_nodes,):
            raise DiscretizationMismatchError(
                f"Profile has shape {c.shape}, model expects ({self.n_nodes},)"
            )
        if dt <= 0:
            return c.copy()

        n_sub = max(1, math.ceil(dt / self.stable_time_step(diffusivity, radius)))
        h = dt / n_sub
        for _ in range(n_sub):
            c = c + h * self.derivative(c, flux, diffusivity, radius)
        return c

    def surface_concentration(
        self, c: np.ndarray, flux: float, diffusivity: float, radius: float
    ) -> float:
        """
        Concentration at the particle surface.

        Extrapolates from the outer node over half a shell using the
        boundary gradient dc/dr = -j / D.
        """
        half_shell = 0.5 * (self.edges[-1] - self.edges[-2]) * radius
        return float(c[-1] - flux * half_shell / diffusivity)

    def average_concentration(self, c: np.ndarray) -> float:
        """Volume-averaged concentration (mol/m³)."""
        return float(self.weights @ c)

    def cumulative_average(self, c: np.ndarray) -> np.ndarray:
        """
        Mean concentration inside each shell's outer radius.

        Element ``i`` averages the sphere enclosed by ``edges[i + 1]``.
        """
        enclosed = np.cumsum(self.weights * c)
        return enclosed / self.edges[1:] ** 3
