# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import List, Tuple

import numpy as np

from .errors import InvalidArgument, NumericalError
from .utils import EPS, permutation_matrix, require_square

logger = logging.getLogger(__name__)


def substitute(T, b, forward: bool) -> np.ndarray:
    """
    Solve T x = b for triangular T.

    Parameters
    ----------
    T : (n, n) matrix-like
        Lower-triangular when forward=True, upper-triangular otherwise.
        Entries on the other side of the diagonal are never read.
    b : (n,) or (n, k) array-like
    forward : bool
        Sweep rows top-down (forward substitution) or bottom-up (back
        substitution).

    Returns
    -------
    x : ndarray, same shape as b

    Raises
    ------
    NumericalError : on an exactly zero diagonal entry.
    """
    T = np.asarray(T, dtype=float)
    n = require_square(T, "substitution")
    b = np.asarray(b, dtype=float)
    if b.shape[0] != n:
        raise InvalidArgument(f"right-hand side has {b.shape[0]} rows, expected {n}")

    x = np.zeros_like(b)
    order = range(n) if forward else reversed(range(n))
    for i in order:
        if forward:
            s = T[i, :i] @ x[:i]
        else:
            s = T[i, i + 1 :] @ x[i + 1 :]
        if T[i, i] == 0:
            raise NumericalError("Division by zero during substitution.")
        x[i] = (b[i] - s) / T[i, i]
    return x


def forward_substitute(L, b) -> np.ndarray:
    return substitute(L, b, forward=True)


def back_substitute(U, c) -> np.ndarray:
    """
    Parameters
    ----------
    U : (n, n) ndarray
        Upper-triangular matrix.
    c : (n,) or (n,k) ndarray
        Right-hand side.
    Returns
    -------
    x : (n,) or (n,k) ndarray
        Solution(s) of Ux = c.
    """
    return substitute(U, c, forward=False)


def pivot_lu(A, overwrite_a: bool = False) -> Tuple[np.ndarray, List[int]]:
    """
    LU decomposition with partial pivoting, P A = L U.

    For every column j the row with the largest |A(i, j)|, i >= j, is
    swapped into place (first such row on ties), the multipliers are
    stored below the diagonal and the trailing block is updated.

    Parameters
    ----------
    A : (n, n) matrix-like
    overwrite_a : bool
        Factor A's own float64 buffer in place (ndarray or DenseMatrix)
        instead of a copy.

    Returns
    -------
    LU : (n, n) ndarray
        L strictly below the diagonal (unit diagonal implied), U on and
        above it.
    perm : list[int]
        Row i of LU comes from original row perm[i].

    Raises
    ------
    InvalidArgument : A is not square.
    NumericalError : a pivot smaller than 1e-12 in magnitude.
    """
    LU = np.asarray(A, dtype=float) if overwrite_a else np.array(A, dtype=float)
    n = require_square(LU, "LU decomposition")
    perm = list(range(n))  # Identity Permutation
    swaps = 0

    for j in range(n):
        # Pick the largest magnitude in the column for stability
        p = j + int(np.argmax(np.abs(LU[j:, j])))
        if p != j:
            LU[[j, p]] = LU[[p, j]]
            perm[j], perm[p] = perm[p], perm[j]
            swaps += 1

        if abs(LU[j, j]) < EPS:
            raise NumericalError(
                "Matrix is singular or nearly singular and cannot be decomposed."
            )

        factors = LU[j + 1 :, j] / LU[j, j]
        LU[j + 1 :, j] = factors
        LU[j + 1 :, j + 1 :] -= np.outer(factors, LU[j, j + 1 :])

    logger.debug(f"pivot_lu: n={n}, row swaps={swaps}")
    return LU, perm


def unpack_lu(LU: np.ndarray, perm: List[int]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split packed pivot_lu output into P, L, U with P A = L U."""
    LU = np.asarray(LU, dtype=float)
    n = LU.shape[0]
    L = np.tril(LU, -1) + np.eye(n)
    U = np.triu(LU)
    return permutation_matrix(perm), L, U


def lu_solve(LU: np.ndarray, perm: List[int], b) -> np.ndarray:
    """Solve A x = b from the packed factors of pivot_lu(A)."""
    LU = np.asarray(LU, dtype=float)
    b = np.asarray(b, dtype=float)
    if b.shape[0] != LU.shape[0]:
        raise InvalidArgument(
            f"right-hand side has {b.shape[0]} rows, expected {LU.shape[0]}"
        )
    L = np.tril(LU, -1) + np.eye(LU.shape[0])
    y = forward_substitute(L, b[perm])
    return back_substitute(np.triu(LU), y)


def lu_inverse(A) -> np.ndarray:
    LU, perm = pivot_lu(A)
    return lu_solve(LU, perm, np.eye(LU.shape[0]))
