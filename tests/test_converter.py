import numpy as np
import pytest
from numpy.testing import assert_allclose

from spinham.converter import Bond, dmi_pairs_from_shells, exchange_pairs_from_shells
from spinham.neighbours import get_neighbours_in_shells


def test_exchange_bonds_carry_half_the_shell_coefficient(square_geometry):
    jij = [10.0, 4.0, -1.0]
    bonds = exchange_pairs_from_shells(square_geometry, 3, jij)
    assert len(bonds) == 12
    for s, j in enumerate(jij):
        shell = [b for b in bonds if b.idx_shell == s]
        assert sum(b.magnitude for b in shell) == pytest.approx(0.5 * j * len(shell))
        assert all(b.normal is None for b in shell)


def test_bonds_follow_the_neighbour_list(honeycomb_geometry):
    neighbours = get_neighbours_in_shells(honeycomb_geometry, 2)
    bonds = exchange_pairs_from_shells(honeycomb_geometry, 2, [1.0, 2.0])
    assert [(b.i, b.j, b.translations, b.idx_shell) for b in bonds] == [
        (n.i, n.j, n.translations, n.idx_shell) for n in neighbours
    ]


def test_extra_coefficients_are_ignored(square_geometry):
    assert exchange_pairs_from_shells(square_geometry, 1, [1.0, 99.0]) == exchange_pairs_from_shells(
        square_geometry, 1, [1.0]
    )


def test_too_few_coefficients(square_geometry):
    with pytest.raises(ValueError):
        exchange_pairs_from_shells(square_geometry, 2, [1.0])
    with pytest.raises(ValueError):
        dmi_pairs_from_shells(square_geometry, -1, [])


def test_dmi_bonds_bloch(square_geometry):
    bonds = dmi_pairs_from_shells(square_geometry, 1, [6.0])
    assert len(bonds) == 4
    for b in bonds:
        assert b.magnitude == pytest.approx(3.0)
        assert_allclose(b.normal, np.asarray(b.translations, dtype=float))


def test_dmi_bonds_neel(square_geometry):
    bonds = dmi_pairs_from_shells(square_geometry, 1, [6.0], chirality=2)
    for b in bonds:
        t = np.asarray(b.translations, dtype=float)
        assert_allclose(b.normal, np.cross([0, 0, 1], t))
        assert np.dot(b.normal, t) == pytest.approx(0.0)


def test_bond_is_hashable_value():
    a = Bond(0, 1, (1, 0, 0), 0, 0.5)
    b = Bond(0, 1, (1, 0, 0), 0, 0.5)
    assert a == b
    assert len({a, b}) == 1
