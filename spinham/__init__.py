"""
spinham: Hamiltonian parameter core of an atomistic spin simulator.

Reads and mutates boundary conditions, moments, external field, anisotropy,
exchange and DMI of the images of a simulation state, guarding every image
with its own read/write lock.
"""
from .api import (
    hamiltonian_get_anisotropy,
    hamiltonian_get_boundary_conditions,
    hamiltonian_get_ddi,
    hamiltonian_get_dmi,
    hamiltonian_get_energy_contributions,
    hamiltonian_get_exchange,
    hamiltonian_get_field,
    hamiltonian_get_mu_s,
    hamiltonian_get_name,
    hamiltonian_set_anisotropy,
    hamiltonian_set_boundary_conditions,
    hamiltonian_set_ddi,
    hamiltonian_set_dmi,
    hamiltonian_set_exchange,
    hamiltonian_set_field,
    hamiltonian_set_mu_s,
)
from .config_loader import load_state_config
from .constants import MU_B
from .converter import Bond
from .exceptions import ConfigurationError, SpinHamError, UnsupportedOperationError
from .geometry import Geometry
from .hamiltonian import HamiltonianNeighbours, HamiltonianPairs
from .log import configure_logging
from .state import SpinSystem, SpinSystemChain, State, from_indices
from .store import ParameterStore

__version__ = "0.1.0"
