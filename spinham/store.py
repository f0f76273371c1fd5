#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Per-image parameter store.

`ParameterStore` owns the boundary conditions and the Hamiltonian of one image
together with the lock that guards them. Every setter runs entirely under the
exclusive side of the lock: the mutation, the refresh of the active energy
terms and the log record. Getters take the shared side, so they never observe
a half-written field.

A simulation engine evaluating the Hamiltonian of the same image is expected
to do so inside ``with store.locked():``.
"""
import logging
from contextlib import contextmanager
from typing import Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .geometry import Geometry
from .hamiltonian import Hamiltonian, make_hamiltonian
from .locking import ReadWriteLock
from .log import ImageLoggerAdapter
from .neighbours import CHIRALITY_BLOCH

logger = logging.getLogger(__name__)


def _fmt_vector(v: Sequence[float]) -> str:
    return "(" + ",".join(f"{float(x):g}" for x in v) + ")"


class ParameterStore:
    """
    Lock-protected owner of one image's Hamiltonian parameters.

    Attributes:
        geometry (Geometry): Lattice of the image.
        boundary_conditions (Tuple[bool, bool, bool]): Periodicity along a, b, c.
        hamiltonian (Hamiltonian): The interaction model, fixed for the store's lifetime.
    """

    def __init__(
        self,
        geometry: Geometry,
        model: str = "neighbours",
        boundary_conditions: Sequence[bool] = (False, False, False),
        mu_s: float = 1.0,
        dmi_chirality: int = CHIRALITY_BLOCH,
    ):
        self.geometry = geometry
        self.boundary_conditions = self._checked_boundary_conditions(boundary_conditions)
        self.hamiltonian: Hamiltonian = make_hamiltonian(model, geometry, mu_s, dmi_chirality)
        self._lock = ReadWriteLock()
        self.log = ImageLoggerAdapter(logger)

    def __repr__(self):
        return f"<ParameterStore {self.hamiltonian.name} bc={list(self.boundary_conditions)}>"

    @staticmethod
    def _checked_boundary_conditions(periodical: Sequence[bool]) -> Tuple[bool, bool, bool]:
        periodical = tuple(periodical)
        if len(periodical) != 3:
            raise ValueError(f"Expected three boundary flags, got {len(periodical)}.")
        return tuple(bool(p) for p in periodical)

    @contextmanager
    def locked(self):
        """Hold the exclusive lock, e.g. while the engine evaluates the Hamiltonian."""
        with self._lock.write():
            yield self.hamiltonian

    # --- Setters ---

    def set_boundary_conditions(self, periodical: Sequence[bool], log: Optional[logging.LoggerAdapter] = None):
        periodical = self._checked_boundary_conditions(periodical)
        with self._lock.write():
            self.boundary_conditions = periodical
            (log or self.log).info(
                f"Set boundary conditions to {' '.join(str(int(p)) for p in periodical)}"
            )

    def set_mu_s(self, mu_s: float, log: Optional[logging.LoggerAdapter] = None):
        """Broadcast `mu_s` to every site; per-site variation is lost."""
        with self._lock.write():
            self.hamiltonian.set_mu_s(mu_s)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(f"Set mu_s to {float(mu_s):g}")

    def set_field(self, magnitude: float, normal: Sequence[float], log: Optional[logging.LoggerAdapter] = None):
        with self._lock.write():
            self.hamiltonian.set_field(magnitude, normal)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(
                f"Set external field to {float(magnitude):g}, direction {_fmt_vector(normal)}"
            )

    def set_anisotropy(self, magnitude: float, normal: Sequence[float], log: Optional[logging.LoggerAdapter] = None):
        with self._lock.write():
            self.hamiltonian.set_anisotropy(magnitude, normal)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(
                f"Set anisotropy to {float(magnitude):g}, direction {_fmt_vector(normal)}"
            )

    def set_exchange(self, n_shells: int, jij: Sequence[float], log: Optional[logging.LoggerAdapter] = None):
        with self._lock.write():
            self.hamiltonian.set_exchange(n_shells, jij)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(
                f"Set exchange to {n_shells} shell(s): {_fmt_vector(list(jij)[:n_shells])}"
            )

    def set_dmi(self, n_shells: int, dij: Sequence[float], log: Optional[logging.LoggerAdapter] = None):
        with self._lock.write():
            self.hamiltonian.set_dmi(n_shells, dij)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(
                f"Set DMI to {n_shells} shell(s): {_fmt_vector(list(dij)[:n_shells])}"
            )

    def set_ddi(self, radius: float, log: Optional[logging.LoggerAdapter] = None):
        with self._lock.write():
            self.hamiltonian.set_ddi(radius)
            self.hamiltonian.update_energy_contributions()
            (log or self.log).info(f"Set dipolar cutoff radius to {float(radius):g}")

    # --- Getters ---

    @property
    def name(self) -> str:
        return self.hamiltonian.name

    @property
    def energy_contributions(self) -> Tuple[str, ...]:
        with self._lock.read():
            return self.hamiltonian.energy_contributions.active

    def get_boundary_conditions(self) -> Tuple[bool, bool, bool]:
        with self._lock.read():
            return self.boundary_conditions

    def get_mu_s(self) -> npt.NDArray[np.float64]:
        """Moments of the sites in the basic domain."""
        with self._lock.read():
            return self.hamiltonian.mu_s[: self.geometry.n_spins_basic_domain].copy()

    def get_field(self) -> Tuple[float, npt.NDArray[np.float64]]:
        with self._lock.read():
            return self.hamiltonian.get_field()

    def get_anisotropy(self) -> Tuple[float, npt.NDArray[np.float64]]:
        with self._lock.read():
            return self.hamiltonian.get_anisotropy()

    def get_exchange(self) -> Tuple[int, npt.NDArray[np.float64]]:
        with self._lock.read():
            return self.hamiltonian.get_exchange()

    def get_dmi(self) -> Tuple[int, npt.NDArray[np.float64]]:
        with self._lock.read():
            return self.hamiltonian.get_dmi()

    def get_ddi(self) -> float:
        with self._lock.read():
            return self.hamiltonian.get_ddi()
