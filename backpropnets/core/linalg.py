"""Dense matrix/vector kernels backing the layers.

Matrices are 2-D arrays laid out as ``(rows, cols)``; vectors are 1-D.
Functions ending in ``_add`` or starting with ``plus_equals``/``scale``
mutate their destination argument in place and return it for convenience.
"""

from __future__ import annotations

import numpy as np

from .errors import ShapeError
from .types import Array


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise ShapeError(message)


def matrix_vec_multiply_add(a: Array, x: Array, c: Array) -> Array:
    """Perform ``c += a @ x``."""

    _check(a.ndim == 2, f"expected a matrix, got shape {a.shape}")
    _check(x.shape == (a.shape[1],), f"vector of shape {x.shape} does not match matrix {a.shape}")
    _check(c.shape == (a.shape[0],), f"result of shape {c.shape} does not match matrix {a.shape}")
    c += a @ x
    return c


def transpose_matrix_multiply_vec(a: Array, v: Array) -> Array:
    """Return ``a.T @ v``."""

    _check(a.ndim == 2, f"expected a matrix, got shape {a.shape}")
    _check(v.shape == (a.shape[0],), f"vector of shape {v.shape} does not match matrix {a.shape}")
    return a.T @ v


def outer_product_add(a: Array, b: Array, c: Array) -> Array:
    """Perform ``c += outer(a, b)``."""

    _check(
        c.shape == (a.shape[0], b.shape[0]),
        f"outer product of {a.shape} and {b.shape} does not fit {c.shape}",
    )
    c += np.outer(a, b)
    return c


def plus_equals_matrix_multiplied(base: Array, multiplier: float, matrix: Array) -> Array:
    """Perform ``base += multiplier * matrix``."""

    _check(base.shape == matrix.shape, f"cannot add {matrix.shape} into {base.shape}")
    base += base.dtype.type(multiplier) * matrix
    return base


def scale_elements(a: Array, multiplier: float) -> Array:
    """Perform ``a *= multiplier``."""

    a *= a.dtype.type(multiplier)
    return a


def hadamard_product(a: Array, b: Array) -> Array:
    """Return the elementwise product of two equal-length vectors."""

    _check(a.shape == b.shape, f"hadamard product of {a.shape} and {b.shape}")
    return a * b


def max_index(values: Array) -> int:
    """Return the index of the largest value, preferring the lowest index on ties.

    NaN entries never win; an all-NaN vector yields 0.
    """

    values = np.asarray(values)
    _check(values.ndim == 1 and values.size > 0, f"expected a non-empty vector, got {values.shape}")
    if np.issubdtype(values.dtype, np.floating):
        values = np.where(np.isnan(values), -np.inf, values)
    return int(np.argmax(values))


__all__ = [
    "matrix_vec_multiply_add",
    "transpose_matrix_multiply_vec",
    "outer_product_add",
    "plus_equals_matrix_multiplied",
    "scale_elements",
    "hadamard_product",
    "max_index",
]
