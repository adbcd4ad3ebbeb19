# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np
import pytest

from fastsolver.qr import householder_qr, least_squares_householder_qr, random_nonsingular_qr

TEST_ITERATIONS = 20
logger = logging.getLogger(__name__)


def test_least_squares_householder_qr():
    rng = np.random.default_rng(0)
    for i in range(TEST_ITERATIONS):
        logger.debug("==============================")
        A = random_nonsingular_qr(15, seed=i)

        # Generate a random vector x (the true solution)
        x_true = rng.random(15)
        b = A @ x_true

        x_np, *_ = np.linalg.lstsq(A, b, rcond=None)
        x_householder = least_squares_householder_qr(A, b)

        res_np = np.linalg.norm(A @ x_np - b, ord=np.inf)
        res_householder = np.linalg.norm(A @ x_householder - b, ord=np.inf)
        assert res_householder <= max(res_np * 100, 1e-12)
        np.testing.assert_allclose(x_householder, x_true, atol=1e-10)


def test_least_squares_tall_matches_numpy():
    rng = np.random.default_rng(5)
    A = rng.standard_normal((60, 6))
    b = rng.standard_normal(60)
    x_np, *_ = np.linalg.lstsq(A, b, rcond=None)
    np.testing.assert_allclose(least_squares_householder_qr(A, b), x_np, atol=1e-10)


@pytest.mark.parametrize("m,n", [(100, 10), (10, 10), (6, 9)])
def test_orthogonality_householder_qr(m, n):
    V = np.random.default_rng(m + n).standard_normal((m, n))
    Q, R = householder_qr(V)
    assert Q.shape == (m, m)
    assert R.shape == (m, n)
    np.testing.assert_allclose(Q.T @ Q, np.eye(m), atol=1e-10)
    np.testing.assert_allclose(Q @ R, V, atol=1e-10)
    assert np.all(np.tril(R, -1) == 0.0)


def test_householder_qr_economic_shapes():
    V = np.random.default_rng(2).standard_normal((12, 4))
    Q, R = householder_qr(V, economic=True)
    assert Q.shape == (12, 4)
    assert R.shape == (4, 4)
    np.testing.assert_allclose(Q @ R, V, atol=1e-10)


def test_householder_qr_zero_column():
    A = np.array([[0.0, 1.0], [0.0, 2.0], [0.0, 3.0]])
    Q, R = householder_qr(A)
    np.testing.assert_allclose(Q @ R, A, atol=1e-12)
    np.testing.assert_allclose(Q.T @ Q, np.eye(3), atol=1e-12)


def test_random_nonsingular_qr_is_reproducible():
    A1 = random_nonsingular_qr(8, seed=11)
    A2 = random_nonsingular_qr(8, seed=11)
    np.testing.assert_array_equal(A1, A2)
    assert abs(np.linalg.det(A1)) > 0
