# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np

from .elimination import back_substitute, forward_substitute
from .errors import InvalidArgument, NumericalError
from .sparse import set_matrix_value
from .utils import machine_eps, require_square


def cholesky(A, out=None) -> np.ndarray:
    """
    Lower-triangular L with A = L Lᵀ, column by column.

    L(j, j) = sqrt(A(j, j) − Σ_k L(j, k)²)
    L(i, j) = (A(i, j) − Σ_k L(i, k) L(j, k)) / L(j, j),   i > j

    Only the lower triangle of A is read; symmetry is the caller's
    promise.

    Parameters
    ----------
    A : (n, n) matrix-like
    out : DenseMatrix | SparseMatrix | ndarray, optional
        n-by-n target that receives the non-zero entries of L as they
        are computed (sparse targets are finalized after each write).

    Returns
    -------
    L : (n, n) ndarray

    Raises
    ------
    InvalidArgument : A is not square, or out has the wrong shape.
    NumericalError : a non-positive pivot (A is not SPD) or a vanishing
        diagonal entry.
    """
    A = np.asarray(A, dtype=float)
    n = require_square(A, "Cholesky decomposition")
    if out is not None and tuple(out.shape) != (n, n):
        raise InvalidArgument(f"output matrix has shape {out.shape}, expected {(n, n)}")

    eps = machine_eps()
    L = np.zeros((n, n))
    for j in range(n):
        pivot = A[j, j] - L[j, :j] @ L[j, :j]
        if pivot <= 0:
            raise NumericalError(
                f"Matrix is not positive definite (pivot {pivot:.3e} at column {j})"
            )
        L[j, j] = np.sqrt(pivot)

        if j + 1 < n:
            if abs(L[j, j]) < eps:
                raise NumericalError("Division by zero in Cholesky decomposition")
            L[j + 1 :, j] = (A[j + 1 :, j] - L[j + 1 :, :j] @ L[j, :j]) / L[j, j]

        if out is not None:
            for i in range(j, n):
                if L[i, j] != 0:
                    set_matrix_value(out, i, j, L[i, j])
    return L


def cholesky_solve(L, b) -> np.ndarray:
    """Solve A x = b given the Cholesky factor L of A."""
    L = np.asarray(L, dtype=float)
    y = forward_substitute(L, b)
    return back_substitute(L.T, y)
