"""
Conversion of shell-indexed coefficients into explicit bond lists.

Used only by the pair Hamiltonian. The neighbour finder reports every bond from
both ends, so each generated bond carries half of its shell coefficient.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Geometry
from .neighbours import CHIRALITY_BLOCH, dmi_normal_from_pair, get_neighbours_in_shells

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bond:
    """
    One explicit directed bond of the pair Hamiltonian.

    Attributes:
        i (int): Basis index of the source atom.
        j (int): Basis index of the target atom.
        translations (Tuple[int, int, int]): Cell offset of the target atom.
        idx_shell (int): Shell the bond was generated from.
        magnitude (float): Coupling strength of this bond.
        normal (Optional[Tuple[float, float, float]]): Unit DMI vector, None for exchange bonds.
    """
    i: int
    j: int
    translations: Tuple[int, int, int]
    idx_shell: int
    magnitude: float
    normal: Optional[Tuple[float, float, float]] = None


def _checked_coefficients(n_shells: int, coefficients: Sequence[float]) -> np.ndarray:
    if n_shells < 0:
        raise ValueError(f"n_shells must be non-negative, got {n_shells}.")
    coefficients = np.asarray(coefficients, dtype=float).ravel()
    if len(coefficients) < n_shells:
        raise ValueError(
            f"Expected at least {n_shells} shell coefficient(s), got {len(coefficients)}."
        )
    return coefficients


def exchange_pairs_from_shells(
    geometry: Geometry, n_shells: int, jij: Sequence[float]
) -> List[Bond]:
    """Build the exchange bond list for the first `n_shells` shells."""
    jij = _checked_coefficients(n_shells, jij)
    bonds = [
        Bond(n.i, n.j, n.translations, n.idx_shell, 0.5 * float(jij[n.idx_shell]))
        for n in get_neighbours_in_shells(geometry, n_shells)
    ]
    logger.debug(f"Generated {len(bonds)} exchange bond(s) from {n_shells} shell(s)")
    return bonds


def dmi_pairs_from_shells(
    geometry: Geometry,
    n_shells: int,
    dij: Sequence[float],
    chirality: int = CHIRALITY_BLOCH,
) -> List[Bond]:
    """Build the DMI bond list for the first `n_shells` shells, with normals of the given chirality."""
    dij = _checked_coefficients(n_shells, dij)
    bonds = []
    for n in get_neighbours_in_shells(geometry, n_shells):
        normal = dmi_normal_from_pair(geometry, (n.i, n.j, n.translations), chirality)
        bonds.append(
            Bond(
                n.i,
                n.j,
                n.translations,
                n.idx_shell,
                0.5 * float(dij[n.idx_shell]),
                tuple(float(x) for x in normal),
            )
        )
    logger.debug(f"Generated {len(bonds)} DMI bond(s) from {n_shells} shell(s), chirality {chirality}")
    return bonds
