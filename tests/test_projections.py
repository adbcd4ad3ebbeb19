# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.projections import gram_schmidt, project_onto_colspace, subtract_projection


def test_projections():
    A = np.array(
        [
            [1, 0],
            [1, 1],
            [1, 2],
        ]
    )
    b = np.array(
        [
            [6],
            [0],
            [0],
        ]
    )

    p = project_onto_colspace(A, b)
    np.testing.assert_allclose(
        p,
        np.array(
            [
                [5],
                [2],
                [-1],
            ]
        ),
        atol=1e-12,
    )

    # Check residuals
    res = np.linalg.norm(A @ np.linalg.lstsq(A, b, rcond=None)[0] - b, np.inf)
    res_proj = np.linalg.norm(p - b, np.inf)
    assert abs(res - res_proj) < 1e-12


def test_subtract_projection_orthogonal():
    u = np.array([3.0, 1.0, 2.0])
    v = np.array([1.0, 1.0, 0.0])
    w = subtract_projection(u, v)
    assert abs(w @ v) < 1e-14
    np.testing.assert_allclose(w, [1.0, -1.0, 2.0])


def test_subtract_projection_zero_direction():
    u = np.array([1.0, 2.0])
    np.testing.assert_array_equal(subtract_projection(u, np.zeros(2)), u)


@pytest.mark.parametrize("m,n", [(5, 3), (10, 10), (40, 8)])
def test_gram_schmidt_orthonormal(m, n):
    rng = np.random.default_rng(m * n)
    A = rng.normal(size=(m, n))
    Q = gram_schmidt(A)
    assert Q.shape == (m, n)
    np.testing.assert_allclose(Q.T @ Q, np.eye(n), atol=1e-8)
    # same span as A: projecting A onto span(Q) changes nothing
    np.testing.assert_allclose(Q @ (Q.T @ A), A, atol=1e-8)


def test_gram_schmidt_dependent_column_is_zero():
    A = np.array([[1.0, 2.0, 0.0], [0.0, 0.0, 1.0], [0.0, 0.0, 0.0]])
    Q = gram_schmidt(A)
    np.testing.assert_allclose(Q[:, 1], 0.0, atol=1e-14)
    np.testing.assert_allclose(Q[:, 0], [1.0, 0.0, 0.0])
    np.testing.assert_allclose(Q[:, 2], [0.0, 1.0, 0.0])
