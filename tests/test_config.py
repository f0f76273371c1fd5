import logging

import numpy as np
import pytest
import yaml
from numpy.testing import assert_allclose

from spinham import api
from spinham.config_loader import load_state_config, validate_config
from spinham.exceptions import ConfigurationError
from spinham.schema import StateConfig
from spinham.state import State

PAIRS_CONFIG = {
    "geometry": {
        "bravais_vectors": [[1, 0, 0], [0, 1, 0], [0, 0, 1]],
        "n_cells": [8, 8, 1],
    },
    "hamiltonian": {
        "model": "pairs",
        "boundary_conditions": [True, True, False],
        "mu_s": 2.0,
        "external_field": {"magnitude": 5.0, "normal": [0, 0, 1]},
        "exchange": [10.0, 1.0],
        "dmi": [6.0],
        "dmi_chirality": 2,
    },
    "chain": {"n_images": 2},
}


def _write(tmp_path, data, name="config.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return str(path)


@pytest.fixture
def state_from():
    states = []

    def _build(data):
        state = State.from_config(StateConfig.model_validate(data))
        states.append(state)
        return state

    yield _build
    for state in states:
        state.close()


# --- Schema ---
def test_defaults():
    config = StateConfig()
    assert config.hamiltonian.model == "neighbours"
    assert config.hamiltonian.boundary_conditions == (False, False, False)
    assert config.geometry.bravais_vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    assert config.strict is True


@pytest.mark.parametrize(
    "data",
    [
        {"hamiltonian": {"model": "gaussian"}},
        {"hamiltonian": {"dmi_chirality": 3}},
        {"hamiltonian": {"external_field": {"magnitude": 1.0, "normal": [0, 0, 0]}}},
        {"hamiltonian": {"boundary_conditions": [True, False]}},
        {"geometry": {"n_cells": [0, 1, 1]}},
        {"geometry": {"bravais_vectors": [[1, 0, 0]]}},
        {"geometry": {"lattice_parameters": {"a": 1, "b": 1, "c": 1}, "bravais_vectors": [[1, 0, 0], [0, 1, 0], [0, 0, 1]]}},
        {"chain": {"n_images": 0}},
        {"hamiltonian": {"exchnge": [1.0]}},
        {"geometry": {"n_cells": [4, 4, 4]}, "hamiltonian": {"model": "pairs", "dmi": [1.0], "dmi_chirality": 2}},
        {"geometry": {"n_cells": [4, 4, 2]}, "hamiltonian": {"model": "pairs", "dmi": [1.0], "dmi_chirality": -2}},
    ],
)
def test_invalid_configs(data):
    with pytest.raises(ConfigurationError):
        validate_config(data)


@pytest.mark.parametrize(
    "hamiltonian",
    [
        {"model": "neighbours", "dmi": [1.0], "dmi_chirality": 2},
        {"model": "pairs", "dmi": [], "dmi_chirality": 2},
        {"model": "pairs", "dmi": [1.0], "dmi_chirality": 1},
    ],
)
def test_chirality_accepted_on_3d_lattice(hamiltonian):
    config = validate_config({"geometry": {"n_cells": [4, 4, 4]}, "hamiltonian": hamiltonian})
    assert config.hamiltonian.dmi_chirality == hamiltonian["dmi_chirality"]


# --- Loader ---
def test_load_state_config(tmp_path):
    config = load_state_config(_write(tmp_path, PAIRS_CONFIG))
    assert config.hamiltonian.model == "pairs"
    assert config.hamiltonian.exchange == [10.0, 1.0]
    assert config.chain.n_images == 2


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_state_config(str(tmp_path / "missing.yaml"))


def test_load_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("hamiltonian: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_state_config(str(path))


def test_load_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        load_state_config(str(path))


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_state_config(str(path)) == StateConfig()


# --- State construction ---
def test_state_from_pairs_config(state_from):
    state = state_from(PAIRS_CONFIG)
    assert len(state.chains) == 1
    assert state.chains[0].noi == 2
    for idx_image in range(2):
        assert api.hamiltonian_get_name(state, idx_image) == "Heisenberg (Pairs)"
        assert api.hamiltonian_get_boundary_conditions(state, idx_image) == (True, True, False)
        magnitude, normal = api.hamiltonian_get_field(state, idx_image)
        assert magnitude == pytest.approx(5.0)
        ham = state.chains[0].images[idx_image].hamiltonian
        assert len(ham.exchange_pairs) == 8
        assert len(ham.dmi_pairs) == 4
        for b in ham.dmi_pairs:
            # Néel vectors lie in the plane, perpendicular to the bond
            assert b.normal[2] == pytest.approx(0.0)
            assert np.dot(b.normal, b.translations) == pytest.approx(0.0)
    assert api.hamiltonian_get_energy_contributions(state) == ("Zeeman", "Exchange", "DMI")


def test_state_from_neighbours_config(state_from):
    data = {
        "geometry": {"lattice_parameters": {"a": 2.0, "b": 2.0, "c": 2.0}, "n_cells": [4, 4, 4]},
        "hamiltonian": {"mu_s": 3.0, "anisotropy": {"magnitude": 0.2, "normal": [1, 0, 0]}, "exchange": [1.0, 0.1]},
    }
    state = state_from(data)
    assert_allclose(state.active_image.geometry.bravais_vectors, 2.0 * np.eye(3), atol=1e-12)
    assert_allclose(api.hamiltonian_get_mu_s(state), [3.0])
    assert api.hamiltonian_get_anisotropy(state)[0] == pytest.approx(0.2)
    n_shells, jij = api.hamiltonian_get_exchange(state)
    assert n_shells == 2
    assert_allclose(jij, [1.0, 0.1])
    assert api.hamiltonian_get_dmi(state)[0] == 0
    assert api.hamiltonian_get_energy_contributions(state) == ("Anisotropy", "Exchange")


def test_construction_is_logged(state_from):
    state = state_from(PAIRS_CONFIG)
    entries = state.log.entries(min_level=logging.INFO)
    assert {e.sender for e in entries} == {"IO"}
    assert {e.idx_image for e in entries} == {0, 1}
    assert any(e.message.startswith("Set exchange to 2 shell(s)") for e in entries)


def test_states_keep_separate_logs(state_from):
    first = state_from(PAIRS_CONFIG)
    second = state_from({})
    n_first = len(first.log)
    api.hamiltonian_set_mu_s(second, 1.5)
    assert len(first.log) == n_first
    assert second.log.entries()[-1].message == "Set mu_s to 1.5"


STACKED_NEEL_CONFIG = {
    "geometry": {"basis": [[0, 0, 0], [0, 0, 0.5]], "n_cells": [4, 4, 1]},
    "hamiltonian": {"model": "pairs", "dmi": [1.0], "dmi_chirality": 2},
}


def test_failed_construction_detaches_log():
    package_logger = logging.getLogger("spinham")
    n_handlers = len(package_logger.handlers)
    with pytest.raises(ValueError, match="vanishes"):
        State.from_config(validate_config(STACKED_NEEL_CONFIG))
    assert len(package_logger.handlers) == n_handlers
