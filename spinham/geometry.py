#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Lattice geometry of one image.

A `Geometry` is built from three Bravais vectors, a basis of atoms given in
fractional coordinates and the number of cells along each direction. It knows
the Cartesian position of every spin and how many spins make up the basic
domain, which is all the parameter core needs from it.
"""
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


def lattice_parameters_to_vectors(
    a: float,
    b: float,
    c: float,
    alpha: float = 90.0,
    beta: float = 90.0,
    gamma: float = 90.0,
) -> npt.NDArray[np.float64]:
    """Convert lattice parameters (angles in degrees) to Cartesian vectors (a || x)."""
    alpha, beta, gamma = np.radians([alpha, beta, gamma])

    va = np.array([a, 0.0, 0.0])
    vb = np.array([b * np.cos(gamma), b * np.sin(gamma), 0.0])

    cx = c * np.cos(beta)
    cy = (c * b * np.cos(alpha) - vb[0] * cx) / vb[1]
    cz = np.sqrt(c**2 - cx**2 - cy**2)

    vc = np.array([cx, cy, cz])
    return np.array([va, vb, vc])


class Geometry:
    """
    Finite lattice made of `n_cells` repetitions of a basis cell.

    Spins are indexed cell by cell, the basis atom running fastest:
    ``idx = iatom + n_cell_atoms * (na + n_cells[0] * (nb + n_cells[1] * nc))``.

    Attributes:
        bravais_vectors (np.ndarray): 3x3 array, one Cartesian vector per row.
        basis (np.ndarray): Fractional positions of the basis atoms, shape (n_cell_atoms, 3).
        n_cells (Tuple[int, int, int]): Number of cells along each Bravais vector.
        cell_atoms (np.ndarray): Cartesian positions of the basis atoms.
        positions (np.ndarray): Cartesian positions of all spins, shape (nos, 3).
    """

    def __init__(
        self,
        bravais_vectors: Sequence[Sequence[float]],
        basis: Optional[Sequence[Sequence[float]]] = None,
        n_cells: Sequence[int] = (1, 1, 1),
        lattice_constant: float = 1.0,
    ):
        bravais = np.array(bravais_vectors, dtype=float)
        if bravais.shape != (3, 3):
            raise ValueError("bravais_vectors must be a 3x3 matrix.")
        if abs(np.linalg.det(bravais)) < 1e-12:
            raise ValueError("bravais_vectors must be linearly independent.")
        self.bravais_vectors = bravais * float(lattice_constant)

        if basis is None:
            basis = [[0.0, 0.0, 0.0]]
        self.basis = np.array(basis, dtype=float).reshape(-1, 3)
        if len(self.basis) == 0:
            raise ValueError("basis must contain at least one atom.")

        if len(n_cells) != 3 or any(int(n) < 1 for n in n_cells):
            raise ValueError(f"n_cells must be three positive integers, got {list(n_cells)}.")
        self.n_cells: Tuple[int, int, int] = tuple(int(n) for n in n_cells)

        self.cell_atoms = self.basis @ self.bravais_vectors
        self.positions = self._generate_positions()
        logger.debug(
            f"Geometry: {self.n_cell_atoms} basis atom(s), cells {list(self.n_cells)}, {self.nos} spins"
        )

    @classmethod
    def from_config(cls, geometry_config) -> "Geometry":
        """Build a geometry from a validated `GeometryConfig`."""
        if geometry_config.lattice_parameters is not None:
            lp = geometry_config.lattice_parameters
            bravais = lattice_parameters_to_vectors(
                lp.a, lp.b, lp.c, lp.alpha, lp.beta, lp.gamma
            )
        else:
            bravais = geometry_config.bravais_vectors
        return cls(
            bravais,
            basis=geometry_config.basis,
            n_cells=geometry_config.n_cells,
            lattice_constant=geometry_config.lattice_constant,
        )

    @property
    def n_cell_atoms(self) -> int:
        return len(self.basis)

    @property
    def nos(self) -> int:
        """Total number of spins."""
        return self.n_cell_atoms * int(np.prod(self.n_cells))

    @property
    def n_spins_basic_domain(self) -> int:
        """Number of spins in the minimal repeating unit."""
        return self.n_cell_atoms

    @property
    def extended_directions(self) -> List[bool]:
        """Directions along which the lattice is repeated (more than one cell)."""
        return [n > 1 for n in self.n_cells]

    def translation_vector(self, translations: Sequence[int]) -> npt.NDArray[np.float64]:
        """Cartesian vector of an integer lattice translation."""
        return np.asarray(translations, dtype=float) @ self.bravais_vectors

    def bond_vector(self, i: int, j: int, translations: Sequence[int]) -> npt.NDArray[np.float64]:
        """Cartesian vector from basis atom `i` to basis atom `j` shifted by `translations`."""
        return self.cell_atoms[j] + self.translation_vector(translations) - self.cell_atoms[i]

    def _generate_positions(self) -> npt.NDArray[np.float64]:
        na, nb, nc = self.n_cells
        # Cell index varies as (nc, nb, na) so that na runs fastest after the basis atom
        grid = np.array(
            [[a, b, c] for c in range(nc) for b in range(nb) for a in range(na)],
            dtype=float,
        )
        cell_origins = grid @ self.bravais_vectors
        return (cell_origins[:, None, :] + self.cell_atoms[None, :, :]).reshape(-1, 3)
