"""Cell parameter sets."""

from typing import Callable, Dict, Iterable, List

from cell_simulator.chemistry.parameters import (
    CellParameters,
    CrackParameters,
    Geometry,
    KineticParameters,
    LAMParameters,
    PlatingParameters,
    SEIParameters,
)
from cell_simulator.chemistry.kokam_nmc import kokam_nmc


def _normalize(name: str) -> str:
    """Registry key for a cell name: case, spaces and underscores are ignored."""
    return name.upper().replace(" ", "-").replace("_", "-")


class Chemistry:
    """Factory for creating cell parameter sets."""

    KOKAM_NMC = "KokamNMC"

    _registry: Dict[str, Callable[[], CellParameters]] = {}
    _names: Dict[str, str] = {}  # Registry key -> name as registered

    @classmethod
    def from_name(cls, name: str) -> CellParameters:
        """
        Create a cell parameter set from its name.

        Args:
            name: Cell name (e.g., 'KokamNMC')

        Returns:
            A fresh parameter set

        Raises:
            ValueError: If the cell name is not recognized
        """
        key = _normalize(name)
        if key not in cls._registry:
            raise ValueError(f"Unknown cell '{name}'. Available: {cls.list_available()}")
        return cls._registry[key]()

    @classmethod
    def list_available(cls) -> List[str]:
        """List available cell names, each accepted by :meth:`from_name`."""
        return sorted(cls._names.values())

    @classmethod
    def register(
        cls,
        name: str,
        factory: Callable[[], CellParameters],
        aliases: Iterable[str] = (),
    ) -> None:
        """
        Register a custom parameter set factory.

        Args:
            name: Name listed by :meth:`list_available`
            factory: Callable returning a fresh CellParameters
            aliases: Further names accepted by :meth:`from_name`
        """
        cls._names[_normalize(name)] = name
        for alias in (name, *aliases):
            cls._registry[_normalize(alias)] = factory


Chemistry.register(Chemistry.KOKAM_NMC, kokam_nmc, aliases=("Kokam-NMC",))


__all__ = [
    "Chemistry",
    "CellParameters",
    "CrackParameters",
    "Geometry",
    "KineticParameters",
    "LAMParameters",
    "PlatingParameters",
    "SEIParameters",
    "kokam_nmc",
]
