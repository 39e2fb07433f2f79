"""Error kinds and bound checks for cell states and parameter sets."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class CellError(Exception):
    """Base class for fatal cell errors."""

    pass


class InvalidStateError(CellError):
    """Raised when a state variable is outside its physical bound."""

    def __init__(self, field: str, reason: str, value=None):
        self.field = field
        self.reason = reason
        self.value = value
        if value is None:
            message = f"Invalid state '{field}': {reason}"
        else:
            message = f"Invalid state '{field}' ({value!r}): {reason}"
        super().__init__(message)


class DiscretizationMismatchError(CellError):
    """
    Raised when a diffusion discretisation does not match the cell geometry.

    The discretisation is computed offline for one particle geometry and
    node count; rebuild it for the cell's radii instead of editing the cell.
    """

    pass


class CurveLengthError(CellError):
    """Raised when an OCV or entropic table exceeds its configured length."""

    pass


@dataclass
class ValidationResult:
    """Result of a validation check."""

    passed: bool
    message: str
    details: dict | None = None


def check_positive(field: str, value: float) -> None:
    """Raise InvalidStateError unless ``value`` is finite and > 0."""
    if not np.isfinite(value):
        raise InvalidStateError(field, "must be finite", value)
    if value <= 0:
        raise InvalidStateError(field, "must be > 0", value)


def check_non_negative(field: str, value: float) -> None:
    """Raise InvalidStateError unless ``value`` is finite and >= 0."""
    if not np.isfinite(value):
        raise InvalidStateError(field, "must be finite", value)
    if value < 0:
        raise InvalidStateError(field, "must be >= 0", value)


def check_profile(field: str, profile: np.ndarray, n_nodes: int, c_max: float) -> None:
    """
    Check a concentration profile against node count and concentration limits.

    Args:
        field: Name reported in the error
        profile: Concentration at each radial node (mol/m³)
        n_nodes: Expected number of nodes
        c_max: Maximum lithium concentration of the electrode (mol/m³)

    Raises:
        InvalidStateError: If the length, finiteness or range is wrong
    """
    if profile.ndim != 1 or profile.shape[0] != n_nodes:
        raise InvalidStateError(
            field, f"expected {n_nodes} radial nodes, got shape {profile.shape}"
        )
    if not np.all(np.isfinite(profile)):
        raise InvalidStateError(field, "contains non-finite concentrations")
    if np.any(profile < 0):
        raise InvalidStateError(field, "negative concentration", float(profile.min()))
    if np.any(profile > c_max):
        raise InvalidStateError(
            field, f"concentration above maximum {c_max}", float(profile.max())
        )


def validate_curve(name: str, table: list[list[float]], max_length: int) -> list[ValidationResult]:
    """
    Validate an [x, value] lookup table.

    Args:
        name: Table name used in messages
        table: List of [x, value] pairs
        max_length: Maximum number of points allowed

    Returns:
        List of validation results

    Raises:
        CurveLengthError: If the table is longer than ``max_length``
    """
    if len(table) > max_length:
        raise CurveLengthError(
            f"Curve '{name}' has {len(table)} points, maximum is {max_length}"
        )

    results = []
    if len(table) < 2:
        results.append(
            ValidationResult(passed=False, message=f"{name} must have at least 2 points")
        )
        return results

    x = np.array([p[0] for p in table])
    if np.any(np.diff(x) <= 0):
        results.append(
            ValidationResult(
                passed=False,
                message=f"{name} x-values must be strictly increasing",
            )
        )
    else:
        results.append(ValidationResult(passed=True, message=f"{name} valid"))

    return results
