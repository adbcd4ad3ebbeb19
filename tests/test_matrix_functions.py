# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import math

import numpy as np
import pytest

from fastsolver.errors import InvalidArgument
from fastsolver.matrix_functions import adj, det


def test_determinants():
    A = np.random.default_rng(0).standard_normal((30, 30))
    our_det = det(A)
    numpy_det = np.linalg.det(A)
    assert math.isclose(our_det, numpy_det, rel_tol=1e-8)


def test_determinant_sign_from_pivoting():
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    assert det(A) == -1.0


def test_determinant_singular_is_zero():
    A = np.array([[1.0, 2.0], [2.0, 4.0]])
    assert det(A) == 0.0


def test_determinant_non_square_raises():
    with pytest.raises(InvalidArgument):
        det(np.ones((2, 3)))


def test_adjugate():
    A = np.random.default_rng(1).standard_normal((10, 10))

    our_adj = adj(A)
    numpy_adj = np.linalg.det(A) * np.linalg.inv(A)
    assert np.allclose(our_adj, numpy_adj, atol=1e-8)


def test_adjugate_singular():
    A = np.array([[1.0, 2.0], [2.0, 4.0]])
    # adj([[a, b], [c, d]]) = [[d, -b], [-c, a]]
    np.testing.assert_allclose(adj(A), [[4.0, -2.0], [-2.0, 1.0]])
    np.testing.assert_allclose(A @ adj(A), np.zeros((2, 2)), atol=1e-12)
