# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.dense import DenseMatrix
from fastsolver.eigen import dominant_eigenpair, power_iteration, rayleigh_quotient
from fastsolver.errors import InvalidArgument, NumericalError
from fastsolver.sparse import SparseMatrix


def test_power_iteration_diagonal():
    A = np.diag([5.0, 2.0, -1.0])
    v = power_iteration(A, np.ones(3), 200)
    # eigenvector should align with e1 (up to sign)
    np.testing.assert_allclose(np.abs(v), [1.0, 0.0, 0.0], atol=1e-8)
    assert np.isclose(rayleigh_quotient(A, v), 5.0, atol=1e-10)


def test_power_iteration_sym_psd():
    rng = np.random.default_rng(1)
    M = rng.normal(size=(30, 30))
    A = M.T @ M  # symmetric PSD
    lam, v = dominant_eigenpair(A, max_iter=5000)
    lam_true = np.linalg.eigvalsh(A)[-1]
    assert np.isclose(lam, lam_true, rtol=1e-8)
    assert np.linalg.norm(A @ v - lam * v) < 1e-4 * lam


def test_power_iteration_returns_unit_vector():
    rng = np.random.default_rng(7)
    A = rng.normal(size=(10, 10))
    v = power_iteration(A, rng.normal(size=10), 25)
    assert np.isclose(np.linalg.norm(v), 1.0)


def test_power_iteration_zero_steps_returns_start():
    b = np.array([3.0, 4.0])
    v = power_iteration(np.eye(2), b, 0)
    np.testing.assert_array_equal(v, b)
    assert v is not b


def test_power_iteration_does_not_modify_start():
    b = np.array([1.0, 2.0, 3.0])
    power_iteration(np.diag([1.0, 2.0, 3.0]), b, 10)
    np.testing.assert_array_equal(b, [1.0, 2.0, 3.0])


def test_power_iteration_sparse_matches_dense():
    A = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]])
    b = np.array([1.0, 0.5, 0.25])
    v_dense = power_iteration(A, b, 50)
    v_sparse = power_iteration(SparseMatrix.from_dense(A), b, 50)
    v_wrapped = power_iteration(DenseMatrix.from_array(A), b, 50)
    np.testing.assert_allclose(v_sparse, v_dense, atol=1e-14)
    np.testing.assert_allclose(v_wrapped, v_dense, atol=1e-14)


def test_power_iteration_nilpotent_hits_zero():
    A = np.array([[0.0, 1.0], [0.0, 0.0]])
    v = power_iteration(A, np.array([1.0, 0.0]), 5)
    np.testing.assert_array_equal(v, [0.0, 0.0])


def test_power_iteration_negative_steps_raises():
    with pytest.raises(InvalidArgument):
        power_iteration(np.eye(2), np.ones(2), -1)


def test_power_iteration_non_square_raises():
    A = np.random.randn(3, 4)
    with pytest.raises(ValueError):
        power_iteration(A, np.ones(4), 10)


def test_rayleigh_quotient_eigenvector():
    A = np.array([[2.0, 1.0], [1.0, 2.0]])
    assert np.isclose(rayleigh_quotient(A, [1.0, 1.0]), 3.0)
    assert np.isclose(rayleigh_quotient(A, [1.0, -1.0]), 1.0)


def test_rayleigh_quotient_scale_invariant():
    rng = np.random.default_rng(3)
    A = rng.normal(size=(6, 6))
    b = rng.normal(size=6)
    assert np.isclose(rayleigh_quotient(A, b), rayleigh_quotient(A, 17.5 * b))


def test_rayleigh_quotient_zero_vector_raises():
    with pytest.raises(NumericalError):
        rayleigh_quotient(np.eye(3), np.zeros(3))


def test_rayleigh_quotient_length_mismatch_raises():
    with pytest.raises(InvalidArgument):
        rayleigh_quotient(np.eye(3), np.ones(2))
