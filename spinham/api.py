"""
Accessor functions for the Hamiltonian parameters of an image.

Every function takes the `State` and an ``(idx_image, idx_chain)`` pair
(negative values address the active image/chain), resolves the image and
forwards to its `ParameterStore`.

Operations the active Hamiltonian does not implement raise
`UnsupportedOperationError`. With a non-strict state they are logged as a
warning and return None instead.
"""
import logging
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .exceptions import UnsupportedOperationError
from .state import State, from_indices, resolve_indices
from .store import ParameterStore


def _resolve(state: State, idx_image: int, idx_chain: int) -> Tuple[ParameterStore, logging.LoggerAdapter]:
    idx_image, idx_chain = resolve_indices(state, idx_image, idx_chain)
    image, _ = from_indices(state, idx_image, idx_chain)
    return image.store, state.image_logger(idx_image, idx_chain)


def _call_supported(state: State, api_log: logging.LoggerAdapter, func: Callable, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except UnsupportedOperationError as e:
        if state.strict:
            raise
        api_log.warning(f"{e}; ignored")
        return None


# --- Set Parameters ---

def hamiltonian_set_boundary_conditions(state: State, periodical: Sequence[bool], idx_image: int = -1, idx_chain: int = -1):
    store, log = _resolve(state, idx_image, idx_chain)
    store.set_boundary_conditions(periodical, log=log)


def hamiltonian_set_mu_s(state: State, mu_s: float, idx_image: int = -1, idx_chain: int = -1):
    store, log = _resolve(state, idx_image, idx_chain)
    store.set_mu_s(mu_s, log=log)


def hamiltonian_set_field(state: State, magnitude: float, normal: Sequence[float], idx_image: int = -1, idx_chain: int = -1):
    """Homogeneous external field in Tesla; `normal` does not need to be normalized."""
    store, log = _resolve(state, idx_image, idx_chain)
    store.set_field(magnitude, normal, log=log)


def hamiltonian_set_anisotropy(state: State, magnitude: float, normal: Sequence[float], idx_image: int = -1, idx_chain: int = -1):
    """Homogeneous uniaxial anisotropy in energy units."""
    store, log = _resolve(state, idx_image, idx_chain)
    store.set_anisotropy(magnitude, normal, log=log)


def hamiltonian_set_exchange(state: State, n_shells: int, jij: Sequence[float], idx_image: int = -1, idx_chain: int = -1):
    store, log = _resolve(state, idx_image, idx_chain)
    _call_supported(state, log, store.set_exchange, n_shells, jij, log=log)


def hamiltonian_set_dmi(state: State, n_shells: int, dij: Sequence[float], idx_image: int = -1, idx_chain: int = -1):
    store, log = _resolve(state, idx_image, idx_chain)
    _call_supported(state, log, store.set_dmi, n_shells, dij, log=log)


def hamiltonian_set_ddi(state: State, radius: float, idx_image: int = -1, idx_chain: int = -1):
    """Dipolar cutoff radius. No Hamiltonian implements it; the state is never changed."""
    store, log = _resolve(state, idx_image, idx_chain)
    _call_supported(state, log, store.set_ddi, radius, log=log)


# --- Get Parameters ---

def _read(state: State, idx_image: int, idx_chain: int, what: str, getter: Callable[[ParameterStore], object]):
    store, log = _resolve(state, idx_image, idx_chain)
    value = _call_supported(state, log, getter, store)
    log.debug(f"Read {what}")
    return value


def hamiltonian_get_name(state: State, idx_image: int = -1, idx_chain: int = -1) -> str:
    return _read(state, idx_image, idx_chain, "Hamiltonian name", lambda store: store.name)


def hamiltonian_get_boundary_conditions(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[bool, bool, bool]:
    return _read(state, idx_image, idx_chain, "boundary conditions", ParameterStore.get_boundary_conditions)


def hamiltonian_get_mu_s(state: State, idx_image: int = -1, idx_chain: int = -1) -> npt.NDArray[np.float64]:
    """Moments of the `n_spins_basic_domain` sites of the basic domain."""
    return _read(state, idx_image, idx_chain, "mu_s", ParameterStore.get_mu_s)


def hamiltonian_get_field(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[float, npt.NDArray[np.float64]]:
    """Field magnitude (Tesla) and direction of the first site; ``(0, z)`` when no field is set."""
    return _read(state, idx_image, idx_chain, "external field", ParameterStore.get_field)


def hamiltonian_get_anisotropy(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[float, npt.NDArray[np.float64]]:
    return _read(state, idx_image, idx_chain, "anisotropy", ParameterStore.get_anisotropy)


def hamiltonian_get_exchange(state: State, idx_image: int = -1, idx_chain: int = -1) -> Optional[Tuple[int, npt.NDArray[np.float64]]]:
    """``(n_shells, jij)``; shell coefficients exist only for the neighbours Hamiltonian."""
    return _read(state, idx_image, idx_chain, "exchange", ParameterStore.get_exchange)


def hamiltonian_get_dmi(state: State, idx_image: int = -1, idx_chain: int = -1) -> Optional[Tuple[int, npt.NDArray[np.float64]]]:
    return _read(state, idx_image, idx_chain, "DMI", ParameterStore.get_dmi)


def hamiltonian_get_ddi(state: State, idx_image: int = -1, idx_chain: int = -1) -> Optional[float]:
    return _read(state, idx_image, idx_chain, "dipolar cutoff", ParameterStore.get_ddi)


def hamiltonian_get_energy_contributions(state: State, idx_image: int = -1, idx_chain: int = -1) -> Tuple[str, ...]:
    """Names of the energy terms currently active for the image."""
    return _read(state, idx_image, idx_chain, "energy contributions", lambda store: store.energy_contributions)
