import logging

import numpy as np
import pytest

from spinham.geometry import Geometry
from spinham.state import SpinSystem, SpinSystemChain, State

SQUARE = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
TRIANGULAR = [[1.0, 0.0, 0.0], [0.5, np.sqrt(3) / 2, 0.0], [0.0, 0.0, 1.0]]


@pytest.fixture
def square_geometry():
    """2D square lattice, one atom per cell."""
    return Geometry(SQUARE, n_cells=(10, 10, 1))


@pytest.fixture
def cubic_geometry():
    return Geometry(SQUARE, n_cells=(5, 5, 5))


@pytest.fixture
def honeycomb_geometry():
    return Geometry(TRIANGULAR, basis=[[0, 0, 0], [1 / 3, 1 / 3, 0]], n_cells=(6, 6, 1))


@pytest.fixture
def make_state():
    """Factory for states built directly from images; closed after the test."""
    created = []

    def _make(model="neighbours", geometry=None, n_images=1, n_chains=1, strict=True, dmi_chirality=1, log_level=logging.INFO):
        if geometry is None:
            geometry = Geometry(SQUARE, n_cells=(4, 4, 1))
        chains = [
            SpinSystemChain([SpinSystem(geometry, model, dmi_chirality=dmi_chirality) for _ in range(n_images)])
            for _ in range(n_chains)
        ]
        state = State(chains, strict=strict, log_level=log_level)
        created.append(state)
        return state

    yield _make
    for state in created:
        state.close()


@pytest.fixture(params=["neighbours", "pairs"])
def model(request):
    return request.param
