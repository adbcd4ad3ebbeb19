# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Classical (Ruge-Stüben style) algebraic multigrid.

Setup on one level:
    1. strength     j strongly influences i when |a_ij| >= θ · max_k≠i |a_ik|
    2. splitting    greedy C/F choice, largest influence count first
    3. interpolation direct: w_ij = −α_i a_ij / a_ii over the strong C
                    neighbours of i, α_i = Σ_k≠i a_ik / Σ_j∈C_i a_ij
    4. coarse grid  Galerkin product A_c = Pᵀ A P

The smoother is weighted Jacobi with ω = 2/3 and the coarsest level is
solved directly with pivoted LU.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .elimination import lu_solve, pivot_lu
from .errors import InvalidArgument, NumericalError
from .operators import LinearOperator, as_vector
from .sparse import SparseMatrix, as_sparse
from .utils import require_square

logger = logging.getLogger(__name__)

JACOBI_WEIGHT = 2.0 / 3.0


def strong_connections(A: SparseMatrix, theta: float) -> List[np.ndarray]:
    """For every row i, the columns j ≠ i that strongly influence i."""
    n = A.shape[0]
    rows_of_A = A.T  # column i of Aᵀ is row i of A
    strong = []
    for i in range(n):
        cols, vals = rows_of_A.column_entries(i)
        off = cols != i
        cols, mags = cols[off], np.abs(vals[off])
        if mags.size == 0:
            strong.append(cols)
            continue
        strong.append(cols[mags >= theta * mags.max()])
    return strong


def split_coarse_fine(strong: List[np.ndarray]) -> np.ndarray:
    """
    Greedy C/F splitting. Returns a boolean mask, True for coarse points.

    The undecided point that strongly influences the most others becomes
    coarse (lowest index on ties); every undecided point depending on it
    becomes fine, and the points those fine points depend on gain weight.
    """
    n = len(strong)
    influences: List[List[int]] = [[] for _ in range(n)]
    for i, cols in enumerate(strong):
        for j in cols:
            influences[j].append(i)

    measure = np.array([len(v) for v in influences], dtype=float)
    UNDECIDED, COARSE, FINE = 0, 1, 2
    state = np.zeros(n, dtype=np.int8)

    while np.any(state == UNDECIDED):
        candidates = np.nonzero(state == UNDECIDED)[0]
        c = int(candidates[np.argmax(measure[candidates])])
        state[c] = COARSE
        for i in influences[c]:
            if state[i] != UNDECIDED:
                continue
            state[i] = FINE
            for k in strong[i]:
                if state[k] == UNDECIDED:
                    measure[k] += 1
    return state == COARSE


def direct_interpolation(A: SparseMatrix, strong: List[np.ndarray], coarse: np.ndarray) -> SparseMatrix:
    """Prolongation P (n × n_coarse) by direct interpolation."""
    n = A.shape[0]
    coarse_index = np.cumsum(coarse) - 1
    rows_of_A = A.T
    diag = A.diagonal()

    P = SparseMatrix(n, int(coarse.sum()))
    for i in range(n):
        if coarse[i]:
            P.add_value(i, int(coarse_index[i]), 1.0)
            continue
        cols, vals = rows_of_A.column_entries(i)
        off = cols != i
        row_sum = vals[off].sum()
        C_i = [j for j in strong[i] if coarse[j]]
        if not C_i:
            continue
        a_ij = np.array([A[i, j] for j in C_i])
        denom = a_ij.sum()
        if denom == 0 or diag[i] == 0:
            continue
        alpha = row_sum / denom
        for j, a in zip(C_i, a_ij):
            P.add_value(i, int(coarse_index[j]), -alpha * a / diag[i])
    return P.finalize()


class AlgebraicMultiGrid:
    """V-cycles over a hierarchy that is rebuilt from A on every call."""

    def _smooth(self, A: SparseMatrix, inv_diag: np.ndarray, b: np.ndarray, x: np.ndarray, steps: int) -> None:
        for _ in range(steps):
            x += JACOBI_WEIGHT * inv_diag * (b - A.matvec(x))

    def _coarsen(self, A: SparseMatrix, theta: float) -> Tuple[Optional[SparseMatrix], Optional[SparseMatrix]]:
        strong = strong_connections(A, theta)
        coarse = split_coarse_fine(strong)
        nc = int(coarse.sum())
        if nc == 0 or nc == A.shape[0]:
            return None, None
        P = direct_interpolation(A, strong, coarse)
        A_c = P.T @ A @ P
        logger.debug(f"amg: {A.shape[0]} -> {nc} points, coarse nnz={A_c.nnz}")
        return P, A_c

    def _cycle(self, A: SparseMatrix, b: np.ndarray, x: np.ndarray, levels: int, steps: int, theta: float) -> np.ndarray:
        n = A.shape[0]
        P = A_c = None
        if levels > 1 and n > 2:
            P, A_c = self._coarsen(A, theta)
        if P is None:
            LU, perm = pivot_lu(A.toarray())
            return lu_solve(LU, perm, b)

        diag = A.diagonal()
        if np.any(diag == 0):
            raise NumericalError("Jacobi smoothing needs a zero-free diagonal")
        inv_diag = 1.0 / diag

        self._smooth(A, inv_diag, b, x, steps)
        r_c = P.T.matvec(b - A.matvec(x))
        e_c = self._cycle(A_c, r_c, np.zeros(A_c.shape[0]), levels - 1, steps, theta)
        x += P.matvec(e_c)
        self._smooth(A, inv_diag, b, x, steps)
        return x

    def amg_v_cycle(
        self,
        A,
        b,
        x,
        levels: int = 2,
        smoothing_steps: int = 2,
        theta: float = 0.25,
    ) -> np.ndarray:
        """
        One V-cycle for A x = b starting from x.

        Parameters
        ----------
        A : (n, n) matrix-like
            Should have a zero-free, positive diagonal (M-matrix like).
        b, x : (n,) vector-like
            Right-hand side and current iterate; x is not modified.
        levels : int
            Number of grid levels including the finest, >= 1. One level
            means a direct solve.
        smoothing_steps : int
            Jacobi sweeps before and after the coarse-grid correction.
        theta : float
            Strong-coupling threshold in [0, 1].

        Returns
        -------
        x : (n,) ndarray
            The improved iterate.
        """
        if levels < 1:
            raise InvalidArgument("AMG needs at least one level")
        if smoothing_steps < 0:
            raise InvalidArgument("smoothing steps must be non-negative")
        if not 0 <= theta <= 1:
            raise InvalidArgument(f"strength threshold must lie in [0, 1], got {theta}")
        S = as_sparse(A)
        n = require_square(S, "AMG")
        b = as_vector(b, n)
        x = as_vector(x, n, "x")
        return self._cycle(S, b, x, levels, smoothing_steps, theta)

    def preconditioner(self, A, levels: int = 2, smoothing_steps: int = 2, theta: float = 0.25) -> LinearOperator:
        """One V-cycle from a zero guess, usable as `preconditioner=` for the Krylov solvers."""
        S = as_sparse(A)
        n = require_square(S, "AMG")
        return LinearOperator(
            lambda r: self.amg_v_cycle(S, r, np.zeros(n), levels, smoothing_steps, theta),
            shape=(n, n),
        )
