import numpy as np
import pytest

from backpropnets.core import linalg
from backpropnets.core.errors import ShapeError


def test_matrix_vec_multiply_add_accumulates_into_result():
    a = np.array([[3.2, 1.2], [5.3, -0.2], [0.0, -1.1]], dtype=np.float32)
    x = np.array([1.3, -0.5], dtype=np.float32)
    c = np.array([1.3, -2.3, -0.1], dtype=np.float32)
    out = linalg.matrix_vec_multiply_add(a, x, c)
    assert out is c
    assert np.allclose(c, [4.86, 4.69, 0.45], atol=1e-5)


def test_transpose_matrix_multiply_vec():
    a = np.array([[3.2, -6.0], [5.7, -0.3], [1.2, 9.5]], dtype=np.float32)
    v = np.array([-0.5, 5.5, 1.3], dtype=np.float32)
    res = linalg.transpose_matrix_multiply_vec(a, v)
    assert res.shape == (2,)
    assert np.allclose(res, [31.31, 13.7], atol=1e-4)


def test_outer_product_add():
    a = np.array([1.0, 2.0, 3.0], dtype=np.float32)
    b = np.array([4.0, 5.0], dtype=np.float32)
    c = np.array([[0.2, 4.3], [-1.0, 5.0], [-0.5, 0.7]], dtype=np.float32)
    linalg.outer_product_add(a, b, c)
    assert np.allclose(c, [[4.2, 9.3], [7.0, 15.0], [11.5, 15.7]], atol=1e-5)


def test_plus_equals_and_scale():
    base = np.array([3.2, -0.2, 1.2, 4.5], dtype=np.float32)
    other = np.array([4.0, 1.2, -6.0, -5.0], dtype=np.float32)
    linalg.plus_equals_matrix_multiplied(base, -0.5, other)
    assert np.allclose(base, [1.2, -0.8, 4.2, 7.0], atol=1e-6)
    linalg.scale_elements(base, 2.0)
    assert np.allclose(base, [2.4, -1.6, 8.4, 14.0], atol=1e-5)
    assert base.dtype == np.float32


def test_kernels_reject_mismatched_shapes():
    with pytest.raises(ShapeError):
        linalg.matrix_vec_multiply_add(np.zeros((2, 3)), np.zeros(2), np.zeros(2))
    with pytest.raises(ShapeError):
        linalg.transpose_matrix_multiply_vec(np.zeros((2, 3)), np.zeros(3))
    with pytest.raises(ShapeError):
        linalg.outer_product_add(np.zeros(2), np.zeros(3), np.zeros((3, 2)))
    with pytest.raises(ShapeError):
        linalg.hadamard_product(np.zeros(2), np.zeros(3))


def test_max_index_unique_and_ties():
    assert linalg.max_index(np.array([0.1, 0.2, 0.7, 0.3])) == 2
    assert linalg.max_index(np.array([0.1, 0.9, 0.9, 0.2])) == 1
    assert linalg.max_index(np.array([0.5, 0.5])) == 0


def test_max_index_skips_nan():
    assert linalg.max_index(np.array([np.nan, 0.5])) == 1
    assert linalg.max_index(np.array([0.2, np.nan, 0.1])) == 0
    assert linalg.max_index(np.array([np.nan, np.nan])) == 0
