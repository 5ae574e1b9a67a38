"""Tests for the MD2 normal lookup table."""

import numpy as np
import pytest

from mesh_formats import md2_normals


def test_table_shape_and_immutability():
    assert md2_normals.NORMALS.shape == (162, 3)
    assert md2_normals.NORMALS.dtype == np.float32
    with pytest.raises(ValueError):
        md2_normals.NORMALS[0, 0] = 1.0


def test_every_entry_is_unit_length():
    lengths = np.linalg.norm(md2_normals.NORMALS.astype(np.float64), axis=1)
    np.testing.assert_allclose(lengths, 1.0, atol=1e-5)


def test_known_entries():
    assert md2_normals.lookup(0) == pytest.approx((-0.525731, 0.0, 0.850651))
    assert md2_normals.lookup(5) == pytest.approx((0.0, 0.0, 1.0))
    assert md2_normals.lookup(32) == pytest.approx((0.0, 1.0, 0.0))
    assert md2_normals.lookup(52) == pytest.approx((1.0, 0.0, 0.0))
    assert md2_normals.lookup(161) == pytest.approx((-0.688191, -0.587785, -0.425325))


@pytest.mark.parametrize("index", [-5, -1, 162, 999, 2 ** 31 - 1])
def test_out_of_range_index_clamps_to_last_entry(index):
    assert md2_normals.lookup(index) == md2_normals.lookup(161)


def test_lookup_is_idempotent():
    assert md2_normals.lookup(77) == md2_normals.lookup(77)


def test_lookup_many_matches_scalar_lookup():
    indices = [0, 5, 161, -5, 999]
    table = md2_normals.lookup_many(indices)
    assert table.shape == (5, 3)
    for row, index in zip(table, indices):
        assert tuple(float(v) for v in row) == md2_normals.lookup(index)


def test_swap_yz():
    assert md2_normals.swap_yz(np.array([1.0, 2.0, 3.0])).tolist() == [1.0, 3.0, 2.0]
    block = md2_normals.swap_yz(np.array([[1, 2, 3], [4, 5, 6]]))
    assert block.tolist() == [[1, 3, 2], [4, 6, 5]]
