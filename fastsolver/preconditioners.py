# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Preconditioners for the Krylov solvers. Each one is returned as a
LinearOperator that applies an approximation of A⁻¹.
"""

import logging

import numpy as np

from .errors import NumericalError
from .operators import LinearOperator
from .sparse import SparseMatrix, as_sparse
from .utils import require_square

logger = logging.getLogger(__name__)


def _diagonal(A) -> np.ndarray:
    if isinstance(A, SparseMatrix):
        return A.diagonal()
    return np.diag(np.asarray(A, dtype=float)).copy()


def jacobi_preconditioner(A) -> LinearOperator:
    """
    Diagonal scaling z = r / diag(A).

    Raises
    ------
    NumericalError : a zero on the diagonal.
    """
    n = require_square(A, "Jacobi preconditioner")
    d = _diagonal(A)
    if np.any(d == 0):
        raise NumericalError("Jacobi preconditioner needs a zero-free diagonal")
    inv_d = 1.0 / d
    return LinearOperator(lambda r: inv_d * np.asarray(r, dtype=float), shape=(n, n))


def ilu0(A) -> LinearOperator:
    """
    Incomplete LU with zero fill-in: L and U keep the sparsity pattern of
    A, every update that would land outside it is dropped.

    The factorization runs row by row (IKJ order) over the stored entries
    only, so the cost follows nnz rather than n². The returned operator
    solves L U z = r with one sparse forward and one sparse back
    substitution; L has a unit diagonal that is not stored.

    Raises
    ------
    NumericalError : a missing or zero diagonal entry.
    """
    S = as_sparse(A)
    n = require_square(S, "ILU(0)")
    # columns of Sᵀ are the rows of S, with sorted column indices
    R = S.T

    cols = []
    vals = []
    diag = np.zeros(n)
    diag_pos = np.zeros(n, dtype=np.int64)
    for i in range(n):
        c, v = R.column_entries(i)
        c = np.asarray(c, dtype=np.int64)
        v = np.array(v, dtype=float)
        where = {int(j): p for p, j in enumerate(c)}
        if i not in where:
            raise NumericalError(f"ILU(0): no diagonal entry in row {i}")

        for p, k in enumerate(c):
            if k >= i:
                break
            v[p] /= diag[k]
            row_k_cols, row_k_vals = cols[k], vals[k]
            for q in range(diag_pos[k] + 1, row_k_cols.size):
                target = where.get(int(row_k_cols[q]))
                if target is not None:
                    v[target] -= v[p] * row_k_vals[q]

        diag_pos[i] = where[i]
        diag[i] = v[diag_pos[i]]
        if diag[i] == 0:
            raise NumericalError(f"ILU(0): zero pivot in row {i}")
        cols.append(c)
        vals.append(v)

    lower = [(cols[i][: diag_pos[i]], vals[i][: diag_pos[i]]) for i in range(n)]
    upper = [(cols[i][diag_pos[i] + 1 :], vals[i][diag_pos[i] + 1 :]) for i in range(n)]
    logger.debug(f"ilu0: n={n}, nnz={S.nnz}")

    def apply(r):
        z = np.array(r, dtype=float)
        for i in range(n):
            c, v = lower[i]
            if c.size:
                z[i] -= v @ z[c]
        for i in range(n - 1, -1, -1):
            c, v = upper[i]
            if c.size:
                z[i] -= v @ z[c]
            z[i] /= diag[i]
        return z

    return LinearOperator(apply, shape=(n, n))
