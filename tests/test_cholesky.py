# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.cholesky import cholesky, cholesky_solve
from fastsolver.dense import DenseMatrix
from fastsolver.errors import InvalidArgument, NumericalError
from fastsolver.sparse import SparseMatrix
from fastsolver.utils import poisson_1d, random_spd


@pytest.mark.parametrize("n", [1, 3, 10, 40])
def test_cholesky_reconstructs(n):
    A = random_spd(n, seed=n)
    L = cholesky(A)
    assert np.all(np.triu(L, 1) == 0)
    assert np.all(np.diag(L) > 0)
    np.testing.assert_allclose(L @ L.T, A, rtol=1e-10, atol=1e-10)
    np.testing.assert_allclose(L, np.linalg.cholesky(A), atol=1e-8)


def test_cholesky_known_factor():
    A = np.array([[4.0, 2.0], [2.0, 5.0]])
    np.testing.assert_allclose(cholesky(A), [[2.0, 0.0], [1.0, 2.0]])


def test_cholesky_writes_dense_target():
    A = random_spd(5, seed=3)
    out = DenseMatrix(5, 5)
    L = cholesky(A, out=out)
    np.testing.assert_allclose(np.asarray(out), L)


def test_cholesky_writes_sparse_target():
    A = poisson_1d(6)
    out = SparseMatrix(6, 6)
    L = cholesky(A, out=out)
    assert out.is_finalized
    # tridiagonal A gives a bidiagonal factor
    assert out.nnz == 11
    np.testing.assert_allclose(out.toarray(), L)


def test_cholesky_not_positive_definite_raises():
    A = np.array([[1.0, 2.0], [2.0, 1.0]])
    with pytest.raises(NumericalError):
        cholesky(A)


def test_cholesky_non_square_raises():
    with pytest.raises(InvalidArgument):
        cholesky(np.ones((3, 2)))


def test_cholesky_out_shape_mismatch_raises():
    with pytest.raises(InvalidArgument):
        cholesky(np.eye(3), out=np.zeros((2, 2)))


def test_cholesky_solve():
    rng = np.random.default_rng(9)
    A = random_spd(12, seed=rng)
    b = rng.standard_normal(12)
    x = cholesky_solve(cholesky(A), b)
    np.testing.assert_allclose(A @ x, b, atol=1e-10)
