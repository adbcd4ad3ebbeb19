# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.errors import Indefinite, InvalidArgument, NotConverged
from fastsolver.iterative import GradientDescent, residual_threshold
from fastsolver.sparse import SparseMatrix

A = np.array([[5.0, 0.0, 1.0], [0.0, 2.0, 0.0], [1.0, 0.0, 3.0]])
B = np.array([6.0, 2.0, 4.0])


def test_gradient_descent_converges():
    result = GradientDescent(A, B, max_iter=1000, tol=1e-10).solve()
    assert result.converged
    np.testing.assert_allclose(result.x, np.ones(3), atol=1e-9)
    assert np.linalg.norm(B - A @ result.x) <= 1e-10
    assert result.residual_history[-1] == result.residual_norm


def test_gradient_descent_sparse():
    result = GradientDescent(SparseMatrix.from_dense(A), B, tol=1e-10).solve()
    np.testing.assert_allclose(result.x, np.ones(3), atol=1e-9)


def test_gradient_descent_zero_rhs():
    result = GradientDescent(A, np.zeros(3)).solve()
    np.testing.assert_array_equal(result.x, np.zeros(3))
    assert result.iterations == 0


def test_gradient_descent_budget():
    solver = GradientDescent(A, B, max_iter=2, tol=1e-12)
    result = solver.call_update()
    assert not result.converged
    assert result.iterations == 2
    assert np.all(np.isfinite(solver.x))
    with pytest.raises(NotConverged) as info:
        GradientDescent(A, B, max_iter=2, tol=1e-12).solve()
    assert info.value.residual > 1e-12
    np.testing.assert_array_equal(info.value.x, result.x)


def test_gradient_descent_indefinite():
    with pytest.raises(Indefinite):
        GradientDescent(np.diag([1.0, -1.0]), [0.0, 1.0]).solve()


@pytest.mark.parametrize("max_iter,tol", [(-1, 1e-8), (10, 0.0), (10, -1.0)])
def test_invalid_budget(max_iter, tol):
    with pytest.raises(InvalidArgument):
        GradientDescent(A, B, max_iter=max_iter, tol=tol)


def test_non_square_raises():
    with pytest.raises(InvalidArgument):
        GradientDescent(np.ones((2, 3)), np.ones(2))


def test_residual_threshold_scales_below_unit_rhs():
    assert residual_threshold(1e-8, np.array([3.0, 4.0])) == 1e-8
    assert residual_threshold(1e-8, np.array([3e-4, 4e-4])) == pytest.approx(5e-12)
    assert residual_threshold(1e-8, np.zeros(3)) == 0.0


def test_gd_small_rhs_meets_relative_residual():
    b = 1e-6 * B
    result = GradientDescent(A, b, max_iter=5000, tol=1e-8).solve()
    assert np.linalg.norm(b - A @ result.x) <= 1e-8 * np.linalg.norm(b)
