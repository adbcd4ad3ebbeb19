# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .elimination import lu_inverse, pivot_lu
from .errors import NumericalError
from .utils import permutation_sign, require_square

logger = logging.getLogger(__name__)


def det(A) -> float:
    """
    Calculate the determinant of n-by-n matrix A from its pivoted LU
    factors: sign(P) · Π U(i, i).

    A matrix whose elimination meets a pivot below 1e-12 is singular to
    working precision and gets determinant 0.
    """
    A = np.asarray(A, dtype=float)
    require_square(A, "determinant")
    try:
        LU, perm = pivot_lu(A)
    except NumericalError as e:
        logger.debug(f"det(): {e}; reporting 0")
        return 0.0
    return permutation_sign(perm) * float(np.prod(np.diag(LU)))


def adj(A) -> np.ndarray:
    """
    Adjugate (classical adjoint) of a square matrix A.

    Fast path (det ≠ 0): adj(A) = det(A) · A^{-1}
    Slow path (det = 0): cofactor expansion (still O(n³) each det call)
    """
    A = np.array(A, dtype=float)
    n = require_square(A, "adjugate")

    d = det(A)
    if d == 0:
        logger.warning("adj(): falling back to cofactor expansion – O(n^5)")
        C = np.empty_like(A)
        for i in range(n):
            for j in range(n):
                minor = A[np.arange(n) != i][:, np.arange(n) != j]
                C[i, j] = ((-1) ** (i + j)) * det(minor)
        return C.T

    return d * lu_inverse(A)
