# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.dense import DenseMatrix, Vector
from fastsolver.errors import InvalidArgument, OutOfRange


def test_vector_basics():
    v = Vector(3)
    assert v.size == 3 and len(v) == 3
    v[0], v[2] = 3.0, 4.0
    assert v.l2norm() == 5.0
    assert list(v) == [3.0, 0.0, 4.0]


def test_vector_arithmetic_returns_new_objects():
    u = Vector([1.0, 2.0, 3.0])
    w = Vector([4.0, 5.0, 6.0])
    s = u + w
    np.testing.assert_array_equal(np.asarray(s), [5.0, 7.0, 9.0])
    np.testing.assert_array_equal(np.asarray(w - u), [3.0, 3.0, 3.0])
    np.testing.assert_array_equal(np.asarray(2.0 * u), [2.0, 4.0, 6.0])
    np.testing.assert_array_equal(np.asarray(-u), [-1.0, -2.0, -3.0])
    np.testing.assert_array_equal(np.asarray(u), [1.0, 2.0, 3.0])
    assert u.dot(w) == 32.0
    assert u @ w == 32.0


def test_vector_normalize():
    v = Vector([0.0, 3.0, 4.0]).normalize()
    np.testing.assert_allclose(np.asarray(v), [0.0, 0.6, 0.8])
    z = Vector(4).normalize()
    np.testing.assert_array_equal(np.asarray(z), np.zeros(4))


def test_vector_errors():
    v = Vector(2)
    with pytest.raises(OutOfRange):
        v[2]
    with pytest.raises(OutOfRange):
        v[-1] = 1.0
    with pytest.raises(InvalidArgument):
        v + Vector(3)
    with pytest.raises(InvalidArgument):
        v * Vector(2)


def test_dense_matrix_indexing():
    A = DenseMatrix(2, 3)
    A[1, 2] = 7.0
    assert A[1, 2] == 7.0
    assert A.n_rows == 2 and A.n_cols == 3
    with pytest.raises(OutOfRange):
        A[2, 0]
    with pytest.raises(OutOfRange):
        A[0, 3] = 1.0


def test_dense_matrix_from_columns_and_get_column():
    A = DenseMatrix.from_columns([Vector([1.0, 2.0]), [3.0, 4.0]])
    np.testing.assert_array_equal(np.asarray(A), [[1.0, 3.0], [2.0, 4.0]])
    col = A.get_column(1)
    assert isinstance(col, Vector)
    np.testing.assert_array_equal(np.asarray(col), [3.0, 4.0])
    # extracted column is a copy
    col[0] = 99.0
    assert A[0, 1] == 3.0


def test_dense_matrix_swap_rows_and_zero():
    A = DenseMatrix.from_array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    A.swap_rows(0, 2)
    np.testing.assert_array_equal(np.asarray(A), [[5.0, 6.0], [3.0, 4.0], [1.0, 2.0]])
    A.zero()
    assert not np.asarray(A).any()


def test_dense_matrix_products():
    rng = np.random.default_rng(0)
    a = rng.standard_normal((4, 3))
    b = rng.standard_normal((3, 5))
    x = rng.standard_normal(3)
    A, B = DenseMatrix.from_array(a), DenseMatrix.from_array(b)

    C = A @ B
    assert isinstance(C, DenseMatrix)
    np.testing.assert_allclose(np.asarray(C), a @ b)

    y = A @ Vector(x)
    assert isinstance(y, Vector)
    np.testing.assert_allclose(np.asarray(y), a @ x)
    np.testing.assert_allclose(A @ x, a @ x)
    np.testing.assert_allclose(np.asarray(3.0 * A), 3.0 * a)

    with pytest.raises(InvalidArgument):
        A @ A
    with pytest.raises(InvalidArgument):
        A * B


def test_dense_matrix_transpose_involution():
    a = np.arange(6.0).reshape(2, 3)
    A = DenseMatrix.from_array(a)
    np.testing.assert_array_equal(np.asarray(A.T), a.T)
    np.testing.assert_array_equal(np.asarray(A.T.T), a)


def test_dense_matrix_add_sub_shape_check():
    A = DenseMatrix.identity(2)
    np.testing.assert_array_equal(np.asarray(A + A), 2 * np.eye(2))
    np.testing.assert_array_equal(np.asarray(A - A), np.zeros((2, 2)))
    with pytest.raises(InvalidArgument):
        A + DenseMatrix(3, 3)
