#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hamiltonian parameter containers.

Two interaction models are available and an image uses exactly one of them
for its whole lifetime:

1.  `HamiltonianNeighbours`: one exchange and one DMI coefficient per
    neighbour shell, applied implicitly to every bond of the shell.
2.  `HamiltonianPairs`: every bond stored explicitly with its own magnitude
    (and DMI vector), generated from shell coefficients by `converter`.

Both share the on-site terms (moments, external field, anisotropy), which live
in the `Hamiltonian` base class. Operations a model does not implement raise
`UnsupportedOperationError`.

These classes do no locking; `ParameterStore` serializes access to them.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .constants import MU_B, NORM_TOL
from .converter import Bond, dmi_pairs_from_shells, exchange_pairs_from_shells
from .energy import EnergyContributionRegistry
from .exceptions import UnsupportedOperationError
from .geometry import Geometry
from .neighbours import CHIRALITY_BLOCH, VALID_CHIRALITIES

logger = logging.getLogger(__name__)

DEFAULT_NORMAL = (0.0, 0.0, 1.0)


def normalized(vector: Sequence[float]) -> npt.NDArray[np.float64]:
    """Return `vector` scaled to unit length."""
    vector = np.asarray(vector, dtype=float).ravel()
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {vector.shape}.")
    norm = np.linalg.norm(vector)
    if norm < NORM_TOL:
        raise ValueError("Cannot normalize a zero-length vector.")
    return vector / norm


@dataclass
class IndexedField:
    """
    A per-site term given on a subset of sites.

    `indices`, `magnitudes` and `normals` always have the same length and every
    normal has unit length. Instances are replaced as a whole, never resized.
    """
    indices: npt.NDArray[np.int64] = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    magnitudes: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))
    normals: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros((0, 3)))

    def __len__(self) -> int:
        return len(self.indices)

    @classmethod
    def uniform(cls, magnitudes: Sequence[float], normal: Sequence[float]) -> "IndexedField":
        """One entry per site `0..len(magnitudes)-1`, all sharing `normal`."""
        magnitudes = np.array(magnitudes, dtype=float)
        n = len(magnitudes)
        return cls(
            indices=np.arange(n, dtype=np.int64),
            magnitudes=magnitudes,
            normals=np.tile(normalized(normal), (n, 1)),
        )

    def first(self) -> Tuple[float, npt.NDArray[np.float64]]:
        """Magnitude and normal of the first entry, or ``(0, z)`` when empty."""
        if len(self) == 0:
            return 0.0, np.array(DEFAULT_NORMAL)
        return float(self.magnitudes[0]), self.normals[0].copy()


class Hamiltonian:
    """
    Common on-site parameters of a Heisenberg-type Hamiltonian.

    Attributes:
        geometry (Geometry): Lattice of the owning image.
        mu_s (np.ndarray): Magnetic moment of every site, length ``geometry.nos``.
        external_field (IndexedField): Zeeman term in energy units.
        anisotropy (IndexedField): Uniaxial anisotropy in energy units.
        energy_contributions (EnergyContributionRegistry): Active term bookkeeping.
    """

    name = "Hamiltonian"

    def __init__(self, geometry: Geometry, mu_s: float = 1.0):
        self.geometry = geometry
        self.mu_s = np.full(geometry.nos, float(mu_s))
        self.external_field = IndexedField()
        self.anisotropy = IndexedField()
        self.energy_contributions = EnergyContributionRegistry()
        self.update_energy_contributions()

    def __repr__(self):
        return f"<{type(self).__name__} '{self.name}' nos={self.geometry.nos}>"

    # --- Energy bookkeeping ---

    @property
    def n_exchange_terms(self) -> int:
        return 0

    @property
    def n_dmi_terms(self) -> int:
        return 0

    def update_energy_contributions(self) -> Tuple[str, ...]:
        return self.energy_contributions.refresh(self)

    # --- On-site terms ---

    def set_mu_s(self, mu_s: float):
        self.mu_s = np.full(self.geometry.nos, float(mu_s))

    def set_field(self, magnitude: float, normal: Sequence[float]):
        """Apply a homogeneous field of `magnitude` (Tesla) along `normal` to all sites."""
        self.external_field = IndexedField.uniform(float(magnitude) * self.mu_s * MU_B, normal)

    def get_field(self) -> Tuple[float, npt.NDArray[np.float64]]:
        """Field magnitude (Tesla) and direction of the first entry."""
        magnitude, normal = self.external_field.first()
        if len(self.external_field) == 0:
            return magnitude, normal
        mu_s = self.mu_s[self.external_field.indices[0]]
        if mu_s == 0.0:
            return 0.0, normal
        return magnitude / mu_s / MU_B, normal

    def set_anisotropy(self, magnitude: float, normal: Sequence[float]):
        self.anisotropy = IndexedField.uniform(np.full(self.geometry.nos, float(magnitude)), normal)

    def get_anisotropy(self) -> Tuple[float, npt.NDArray[np.float64]]:
        return self.anisotropy.first()

    # --- Pair terms ---

    def set_exchange(self, n_shells: int, jij: Sequence[float]):
        raise UnsupportedOperationError("set_exchange", self.name)

    def get_exchange(self) -> Tuple[int, npt.NDArray[np.float64]]:
        raise UnsupportedOperationError("get_exchange", self.name)

    def set_dmi(self, n_shells: int, dij: Sequence[float]):
        raise UnsupportedOperationError("set_dmi", self.name)

    def get_dmi(self) -> Tuple[int, npt.NDArray[np.float64]]:
        raise UnsupportedOperationError("get_dmi", self.name)

    def set_ddi(self, radius: float):
        # Dipolar interactions are not implemented by any model
        raise UnsupportedOperationError("set_ddi", self.name)

    def get_ddi(self) -> float:
        raise UnsupportedOperationError("get_ddi", self.name)


def _copy_into_shells(target: np.ndarray, n_shells: int, values: Sequence[float]) -> np.ndarray:
    if n_shells < 0:
        raise ValueError(f"n_shells must be non-negative, got {n_shells}.")
    values = np.asarray(values, dtype=float).ravel()
    if len(values) < n_shells:
        raise ValueError(f"Expected at least {n_shells} shell coefficient(s), got {len(values)}.")
    if n_shells > len(target):
        target = np.concatenate([target, np.zeros(n_shells - len(target))])
    target[:n_shells] = values[:n_shells]
    return target


class HamiltonianNeighbours(Hamiltonian):
    """
    Shell-averaged Heisenberg Hamiltonian.

    Attributes:
        exchange_magnitudes (np.ndarray): Exchange coefficient per shell.
        dmi_magnitudes (np.ndarray): DMI coefficient per shell.
    """

    name = "Heisenberg (Neighbours)"

    def __init__(self, geometry: Geometry, mu_s: float = 1.0):
        self.exchange_magnitudes = np.zeros(0)
        self.dmi_magnitudes = np.zeros(0)
        super().__init__(geometry, mu_s)

    @property
    def n_exchange_terms(self) -> int:
        return len(self.exchange_magnitudes)

    @property
    def n_dmi_terms(self) -> int:
        return len(self.dmi_magnitudes)

    def set_exchange(self, n_shells: int, jij: Sequence[float]):
        """Overwrite the first `n_shells` exchange coefficients; further shells are kept."""
        self.exchange_magnitudes = _copy_into_shells(self.exchange_magnitudes, n_shells, jij)

    def get_exchange(self) -> Tuple[int, npt.NDArray[np.float64]]:
        return len(self.exchange_magnitudes), self.exchange_magnitudes.copy()

    def set_dmi(self, n_shells: int, dij: Sequence[float]):
        self.dmi_magnitudes = _copy_into_shells(self.dmi_magnitudes, n_shells, dij)

    def get_dmi(self) -> Tuple[int, npt.NDArray[np.float64]]:
        return len(self.dmi_magnitudes), self.dmi_magnitudes.copy()


class HamiltonianPairs(Hamiltonian):
    """
    Heisenberg Hamiltonian with explicit bonds.

    Setting exchange or DMI regenerates the whole bond list from the given
    shell coefficients, so fewer shells shrink the list.

    Attributes:
        exchange_pairs (List[Bond]): Exchange bonds.
        dmi_pairs (List[Bond]): DMI bonds, each with its unit DMI vector.
        dmi_chirality (int): Convention used to derive DMI vectors.
    """

    name = "Heisenberg (Pairs)"

    def __init__(self, geometry: Geometry, mu_s: float = 1.0, dmi_chirality: int = CHIRALITY_BLOCH):
        if dmi_chirality not in VALID_CHIRALITIES:
            raise ValueError(
                f"Unknown DMI chirality {dmi_chirality}, expected one of {list(VALID_CHIRALITIES)}."
            )
        self.dmi_chirality = dmi_chirality
        self.exchange_pairs: List[Bond] = []
        self.dmi_pairs: List[Bond] = []
        super().__init__(geometry, mu_s)

    @property
    def n_exchange_terms(self) -> int:
        return len(self.exchange_pairs)

    @property
    def n_dmi_terms(self) -> int:
        return len(self.dmi_pairs)

    def set_exchange(self, n_shells: int, jij: Sequence[float]):
        self.exchange_pairs = exchange_pairs_from_shells(self.geometry, n_shells, jij)

    def set_dmi(self, n_shells: int, dij: Sequence[float]):
        self.dmi_pairs = dmi_pairs_from_shells(self.geometry, n_shells, dij, self.dmi_chirality)


HAMILTONIAN_MODELS = {
    "neighbours": HamiltonianNeighbours,
    "pairs": HamiltonianPairs,
}


def make_hamiltonian(model: str, geometry: Geometry, mu_s: float = 1.0, dmi_chirality: int = CHIRALITY_BLOCH) -> Hamiltonian:
    """Create the Hamiltonian selected by `model` ('neighbours' or 'pairs')."""
    if model == "neighbours":
        return HamiltonianNeighbours(geometry, mu_s)
    if model == "pairs":
        return HamiltonianPairs(geometry, mu_s, dmi_chirality)
    raise ValueError(f"Unknown Hamiltonian model '{model}', expected one of {list(HAMILTONIAN_MODELS)}.")
