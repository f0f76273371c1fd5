#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Neighbour search on a `Geometry`.

Shells are ranked by distance separately for every basis atom: the first
shell of atom `i` is the set of sites at the smallest nonzero distance from it,
the second shell the next distance, and so on. Every bond is reported from
both of its ends, so a symmetric lattice bond appears twice.
"""
import logging
from dataclasses import dataclass
from itertools import product
from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .constants import DIST_TOL, NORM_TOL
from .geometry import Geometry

logger = logging.getLogger(__name__)

# Chirality conventions for DMI normals
CHIRALITY_BLOCH = 1
CHIRALITY_BLOCH_INVERSE = -1
CHIRALITY_NEEL = 2
CHIRALITY_NEEL_INVERSE = -2
VALID_CHIRALITIES = (
    CHIRALITY_BLOCH,
    CHIRALITY_BLOCH_INVERSE,
    CHIRALITY_NEEL,
    CHIRALITY_NEEL_INVERSE,
)


@dataclass(frozen=True)
class Neighbour:
    """
    One directed neighbour relation.

    Attributes:
        i (int): Basis index of the source atom.
        j (int): Basis index of the target atom.
        translations (Tuple[int, int, int]): Cell offset of the target atom.
        idx_shell (int): Zero-based shell rank of the bond as seen from `i`.
    """
    i: int
    j: int
    translations: Tuple[int, int, int]
    idx_shell: int


def _candidate_translations(geometry: Geometry, n_shells: int) -> npt.NDArray[np.int64]:
    # Only directions with more than one cell carry neighbours
    reach = max(2, 2 * n_shells)
    ranges = [
        range(-reach, reach + 1) if extended else range(0, 1)
        for extended in geometry.extended_directions
    ]
    return np.array(list(product(*ranges)), dtype=np.int64)


def shell_radii(geometry: Geometry, i: int, n_shells: int) -> List[float]:
    """
    Radii of the first `n_shells` shells around basis atom `i`.

    Fewer radii are returned when the finite lattice has fewer distinct
    distances within the search range.
    """
    if n_shells <= 0:
        return []
    translations = _candidate_translations(geometry, n_shells)
    offsets = translations @ geometry.bravais_vectors

    distances = []
    for j in range(geometry.n_cell_atoms):
        d = np.linalg.norm(geometry.cell_atoms[j] + offsets - geometry.cell_atoms[i], axis=1)
        distances.append(d[d > DIST_TOL])
    distances = np.sort(np.concatenate(distances))

    radii: List[float] = []
    for d in distances:
        if not radii or d - radii[-1] > DIST_TOL:
            radii.append(float(d))
            if len(radii) == n_shells:
                break
    return radii


def get_neighbours_in_shells(geometry: Geometry, n_shells: int) -> List[Neighbour]:
    """
    Enumerate every directed bond of every basis atom up to the `n_shells`-th shell.

    The result is ordered by source atom, then shell, then target atom and
    translation, so repeated calls on the same geometry return the same list.

    Args:
        geometry (Geometry): The lattice to search.
        n_shells (int): Number of shells to include. Zero yields no bonds.

    Returns:
        List[Neighbour]: All bonds found.

    Raises:
        ValueError: If `n_shells` is negative.
    """
    if n_shells < 0:
        raise ValueError(f"n_shells must be non-negative, got {n_shells}.")

    neighbours: List[Neighbour] = []
    if n_shells == 0:
        return neighbours

    translations = _candidate_translations(geometry, n_shells)
    offsets = translations @ geometry.bravais_vectors

    for i in range(geometry.n_cell_atoms):
        radii = shell_radii(geometry, i, n_shells)
        found = []
        for j in range(geometry.n_cell_atoms):
            distances = np.linalg.norm(
                geometry.cell_atoms[j] + offsets - geometry.cell_atoms[i], axis=1
            )
            for idx_shell, radius in enumerate(radii):
                for k in np.flatnonzero(np.abs(distances - radius) < DIST_TOL):
                    found.append(
                        Neighbour(i, j, tuple(int(t) for t in translations[k]), idx_shell)
                    )
        found.sort(key=lambda n: (n.idx_shell, n.j, n.translations))
        neighbours.extend(found)

    logger.debug(f"Found {len(neighbours)} neighbours in {n_shells} shell(s)")
    return neighbours


def dmi_normal_from_pair(
    geometry: Geometry,
    pair: Tuple[int, int, Sequence[int]],
    chirality: int = CHIRALITY_BLOCH,
) -> npt.NDArray[np.float64]:
    """
    Unit DMI vector of a bond for a given chirality convention.

    Bloch chirality (+1) points the vector along the bond from `i` to `j`,
    Néel chirality (+2) points it along ``z x r_ij``. Negative values invert
    the sign.

    Args:
        geometry (Geometry): The lattice the bond lives on.
        pair (Tuple[int, int, Sequence[int]]): ``(i, j, translations)``.
        chirality (int): One of ``VALID_CHIRALITIES``.

    Returns:
        np.ndarray: The normalized DMI vector.

    Raises:
        ValueError: For an unknown chirality or a bond whose normal vanishes
            (a Néel normal of a bond along z).
    """
    i, j, translations = pair
    r_ij = geometry.bond_vector(i, j, translations)

    if chirality == CHIRALITY_BLOCH:
        normal = r_ij
    elif chirality == CHIRALITY_BLOCH_INVERSE:
        normal = -r_ij
    elif chirality == CHIRALITY_NEEL:
        normal = np.cross([0.0, 0.0, 1.0], r_ij)
    elif chirality == CHIRALITY_NEEL_INVERSE:
        normal = -np.cross([0.0, 0.0, 1.0], r_ij)
    else:
        raise ValueError(
            f"Unknown DMI chirality {chirality}, expected one of {list(VALID_CHIRALITIES)}."
        )

    norm = np.linalg.norm(normal)
    if norm < NORM_TOL:
        raise ValueError(f"DMI normal of bond {i}->{j} {list(translations)} vanishes for chirality {chirality}.")
    return normal / norm
