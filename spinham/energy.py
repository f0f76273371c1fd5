"""
Registry of the energy terms a Hamiltonian currently contributes.

A term is active when the Hamiltonian holds at least one entry for it. The
engine only evaluates active terms, so the registry is refreshed after every
parameter change.
"""
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Predicate = Callable[[object], bool]

# Ordered as the engine reports them
DEFAULT_TERMS: List[Tuple[str, Predicate]] = [
    ("Zeeman", lambda ham: len(ham.external_field) > 0),
    ("Anisotropy", lambda ham: len(ham.anisotropy) > 0),
    ("Exchange", lambda ham: ham.n_exchange_terms > 0),
    ("DMI", lambda ham: ham.n_dmi_terms > 0),
]


class EnergyContributionRegistry:
    """
    Knows which energy terms exist and decides which of them are active.

    Attributes:
        active (Tuple[str, ...]): Names of the terms found active by the last refresh.
    """

    def __init__(self, terms: Optional[List[Tuple[str, Predicate]]] = None):
        self._terms = list(DEFAULT_TERMS if terms is None else terms)
        self.active: Tuple[str, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._terms)

    def register(self, name: str, predicate: Predicate):
        """Add a term; it is considered from the next refresh on."""
        if name in self.names:
            raise ValueError(f"Energy term '{name}' is already registered.")
        self._terms.append((name, predicate))

    def refresh(self, hamiltonian) -> Tuple[str, ...]:
        """Recompute the active terms of `hamiltonian` and return their names."""
        self.active = tuple(name for name, is_active in self._terms if is_active(hamiltonian))
        logger.debug(f"Active energy contributions: {list(self.active)}")
        return self.active
