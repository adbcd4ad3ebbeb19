# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Krylov-subspace methods: Arnoldi, Conjugate Gradient and restarted GMRES.

All of them touch the matrix only through ``A.matvec``, so dense and
sparse operands are interchangeable.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .elimination import back_substitute
from .errors import Indefinite, InvalidArgument, NotConverged, NumericalError
from .iterative import IterativeSolver, SolveResult, check_budget, residual_threshold
from .operators import LinearOperator, as_operator, as_vector, identity_operator
from .utils import machine_eps, require_square

logger = logging.getLogger(__name__)


def arnoldi_step(A: LinearOperator, Q: np.ndarray, H: np.ndarray, j: int, tol: float) -> bool:
    """
    Extend the Arnoldi basis by one vector.

    w = A q_j is orthogonalized against q_0..q_j with modified
    Gram-Schmidt, the coefficients go to H[:j+1, j] and ‖w‖ to H[j+1, j].
    When ‖w‖ < tol the Krylov space is invariant (lucky breakdown): the
    function returns True and leaves Q[:, j+1] untouched. Otherwise
    q_{j+1} = w / ‖w‖ is stored and False is returned.
    """
    w = A.matvec(Q[:, j])
    for i in range(j + 1):
        H[i, j] = Q[:, i] @ w
        w -= H[i, j] * Q[:, i]
    h = np.linalg.norm(w)
    H[j + 1, j] = h
    if h < tol:
        return True
    Q[:, j + 1] = w / h
    return False


def arnoldi(A, Q, H, tol: float = 1e-12) -> int:
    """
    Arnoldi process: orthonormal basis Q of the Krylov space
    span{q0, A q0, A² q0, ...} and upper-Hessenberg H with A Q_k = Q_{k+1} H.

    Parameters
    ----------
    A : (n, n) matrix-like
    Q : (n, >= k+1) float ndarray or DenseMatrix, filled in place
        Column 0 holds the start vector; it is normalized in place.
    H : (k+1, k) float ndarray or DenseMatrix, filled in place
    tol : float
        Breakdown threshold on the norm of the new direction.

    Returns
    -------
    steps : int
        Number of columns of H that were filled: k, or fewer after a
        breakdown.
    """
    op = as_operator(A)
    n = require_square(op, "Arnoldi")
    Q = np.asarray(Q)
    H = np.asarray(H)
    if Q.dtype != np.float64 or H.dtype != np.float64:
        raise InvalidArgument("Q and H must be float64 arrays to be filled in place")
    k = H.shape[1]
    if H.shape != (k + 1, k):
        raise InvalidArgument(f"H must have shape (k+1, k), got {H.shape}")
    if Q.shape[0] != n or Q.shape[1] < k + 1:
        raise InvalidArgument(f"Q must have shape ({n}, >= {k + 1}), got {Q.shape}")

    norm = np.linalg.norm(Q[:, 0])
    if norm < machine_eps():
        raise NumericalError("Arnoldi start vector is zero")
    Q[:, 0] /= norm

    for j in range(k):
        if arnoldi_step(op, Q, H, j, tol):
            logger.debug(f"arnoldi: breakdown at step {j}")
            return j + 1
    return k


def givens_rotation(a: float, b: float) -> Tuple[float, float]:
    """(c, s) with [c s; -s c] [a; b] = [r; 0]."""
    if b == 0:
        return 1.0, 0.0
    r = np.hypot(a, b)
    return a / r, b / r


class ConjugateGradient(IterativeSolver):
    """
    Preconditioned Conjugate Gradient for symmetric positive definite A.

    Search directions are kept A-orthogonal through
    p ← z + β p with z = P r and β = (r·z)_new / (r·z)_old. The loop ends
    when ‖r‖₂ <= tol·min(1, ‖b‖₂) or after max_iter iterations; a non-positive pᵀAp
    raises Indefinite. The solver's `x` always holds the last iterate.

    Parameters
    ----------
    A : (n, n) matrix-like, SPD
    b : (n,) vector-like
    max_iter : int
    tol : float
        Residual tolerance; see `residual_threshold`.
    preconditioner : matrix-like or callable, optional
        Applied as z = P r; identity when omitted. Should approximate A⁻¹
        and be SPD itself.
    x0 : (n,) vector-like, optional
        Initial guess, zero by default.
    """

    name = "conjugate gradient"

    def __init__(
        self,
        A,
        b,
        max_iter: int = 1000,
        tol: float = 1e-10,
        preconditioner=None,
        x0: Optional[np.ndarray] = None,
    ):
        super().__init__(A, b, max_iter, tol, x0)
        n = self.b.shape[0]
        if preconditioner is None:
            self.P = identity_operator(n)
        else:
            self.P = as_operator(preconditioner, shape=(n, n))
            if self.P.shape != (n, n):
                raise InvalidArgument(
                    f"preconditioner has shape {self.P.shape}, expected {(n, n)}"
                )

    def _iterate(self) -> SolveResult:
        A, P, x = self.A, self.P, self._x
        r = self.b - A.matvec(x)
        res = float(np.linalg.norm(r))
        history = [res]
        if res <= self.threshold:
            return SolveResult(x.copy(), 0, res, True, history)

        z = P.matvec(r)
        p = z.copy()
        rz = float(r @ z)
        k = 0
        while k < self.max_iter:
            Ap = A.matvec(p)
            pAp = float(p @ Ap)
            if pAp <= 0:
                raise Indefinite(
                    f"pᵀAp = {pAp:.3e} <= 0 at iteration {k}: matrix is not positive definite",
                    curvature=pAp,
                    iterations=k,
                )
            alpha = rz / pAp
            x += alpha * p
            r -= alpha * Ap
            k += 1

            res = float(np.linalg.norm(r))
            history.append(res)
            if res <= self.threshold:
                break

            z = P.matvec(r)
            rz_new = float(r @ z)
            if rz_new <= 0:
                raise Indefinite(
                    f"rᵀPr = {rz_new:.3e} <= 0: preconditioner is not positive definite",
                    curvature=rz_new,
                    iterations=k,
                )
            p = z + (rz_new / rz) * p
            rz = rz_new

        return SolveResult(x.copy(), k, res, res <= self.threshold, history)


class GMRES:
    """
    Restarted GMRES(k) for general square systems.

    Each cycle builds k Arnoldi vectors of the (right-preconditioned)
    operator, reduces the Hessenberg matrix to triangular form with
    Givens rotations as it grows and reads the residual norm off the
    rotated right-hand side. A cycle stops early when that estimate drops
    below tol or Arnoldi breaks down; the update is then formed and, if
    the true residual is still too large, the method restarts.
    """

    def __init__(self, preconditioner=None):
        self.preconditioner = preconditioner

    def solve(
        self,
        A,
        b,
        x0: Optional[np.ndarray] = None,
        max_iter: int = 50,
        krylov_dim: int = 30,
        tol: float = 1e-10,
        breakdown_tol: Optional[float] = None,
    ) -> SolveResult:
        """
        Parameters
        ----------
        A : (n, n) matrix-like
        b : (n,) vector-like
        x0 : (n,) vector-like, optional
            Initial guess, zero by default.
        max_iter : int
            Number of restart cycles.
        krylov_dim : int
            Restart length k, >= 1.
        tol : float
            Stop once ‖b − A x‖₂ <= tol·min(1, ‖b‖₂).
        breakdown_tol : float, optional
            Arnoldi breakdown threshold; defaults to ε·‖r₀‖ per cycle.

        Returns
        -------
        SolveResult

        Raises
        ------
        NotConverged : tolerance not met after max_iter cycles; the
            exception carries the last iterate.
        """
        check_budget(max_iter, tol)
        if krylov_dim < 1:
            raise InvalidArgument("Krylov dimension must be at least 1")
        op = as_operator(A)
        n = require_square(op, "GMRES")
        b = as_vector(b, n)
        x = np.zeros(n) if x0 is None else as_vector(x0, n, "x0")
        if self.preconditioner is None:
            M = identity_operator(n)
        else:
            M = as_operator(self.preconditioner, shape=(n, n))
        AM = LinearOperator(lambda v: op.matvec(M.matvec(v)), shape=(n, n))

        threshold = residual_threshold(tol, b)
        r = b - op.matvec(x)
        beta = float(np.linalg.norm(r))
        history = [beta]
        inner = 0
        cycles = 0
        while beta > threshold and cycles < max_iter:
            k = min(krylov_dim, n)
            tau = breakdown_tol if breakdown_tol is not None else machine_eps() * beta
            Q = np.zeros((n, k + 1))
            H = np.zeros((k + 1, k))
            g = np.zeros(k + 1)
            cs = np.zeros(k)
            sn = np.zeros(k)
            Q[:, 0] = r / beta
            g[0] = beta

            steps = 0
            for j in range(k):
                breakdown = arnoldi_step(AM, Q, H, j, tau)
                steps = j + 1
                inner += 1
                # earlier rotations first, then the one that kills H[j+1, j]
                for i in range(j):
                    H[i, j], H[i + 1, j] = (
                        cs[i] * H[i, j] + sn[i] * H[i + 1, j],
                        -sn[i] * H[i, j] + cs[i] * H[i + 1, j],
                    )
                cs[j], sn[j] = givens_rotation(H[j, j], H[j + 1, j])
                H[j, j] = cs[j] * H[j, j] + sn[j] * H[j + 1, j]
                H[j + 1, j] = 0.0
                g[j + 1] = -sn[j] * g[j]
                g[j] = cs[j] * g[j]
                if abs(g[j + 1]) <= threshold or breakdown:
                    break

            y = back_substitute(H[:steps, :steps], g[:steps])
            x += M.matvec(Q[:, :steps] @ y)

            r = b - op.matvec(x)
            beta = float(np.linalg.norm(r))
            history.append(beta)
            cycles += 1
            logger.debug(f"gmres: cycle {cycles}, {steps} steps, residual={beta:.3e}")

        converged = beta <= threshold
        if not converged:
            raise NotConverged(
                f"GMRES did not reach tol={tol:.1e} in {cycles} restarts",
                residual=beta,
                iterations=inner,
                x=x,
            )
        return SolveResult(x, inner, beta, converged, history)
