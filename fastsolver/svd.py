# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import Tuple

import numpy as np

from .eigen import power_iteration, rayleigh_quotient
from .errors import InvalidArgument
from .projections import subtract_projection
from .utils import SVD_CLAMP_FACTOR, SVD_POWER_STEPS, machine_eps, unit_vector

logger = logging.getLogger(__name__)

# Below this norm an orthogonalized candidate is treated as lying in the
# span of the vectors already found.
_DEPENDENT_TOL = 1e-8


def _orthogonalize(v: np.ndarray, basis: np.ndarray, count: int) -> np.ndarray:
    # two classical passes keep the result orthogonal to working precision
    for _ in range(2):
        for j in range(count):
            v = subtract_projection(v, basis[:, j])
    return v


def _deflated_eigenvectors(M: np.ndarray, count: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Eigenpairs of a symmetric PSD matrix by repeated power iteration and
    deflation M ← M − λ v vᵀ, largest first.
    """
    n = M.shape[0]
    M = M.copy()
    vectors = np.zeros((n, count))
    eigenvalues = np.zeros(count)

    for i in range(count):
        v = power_iteration(M, unit_vector(i, n), SVD_POWER_STEPS)
        v = _orthogonalize(v, vectors, i)
        norm = np.linalg.norm(v)
        if norm < _DEPENDENT_TOL:
            # power iteration collapsed onto the known subspace; complete
            # the basis with the first unit vector that still adds a direction
            for k in range(n):
                v = _orthogonalize(unit_vector((i + k) % n, n), vectors, i)
                norm = np.linalg.norm(v)
                if norm > 0.5:
                    break
        v /= norm

        lam = rayleigh_quotient(M, v)
        vectors[:, i] = v
        eigenvalues[i] = lam
        if i < count - 1:
            M -= lam * np.outer(v, v)

    return eigenvalues, vectors


def svd(A) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Full Singular Value Decomposition A = U S Vᵀ built from power
    iteration, Gram-Schmidt and deflation.

    For an m-by-n real matrix this routine returns:
        U : m-by-m orthogonal matrix, left singular vectors in columns
        S : m-by-n matrix with the singular values on its diagonal,
            in descending order
        V : n-by-n orthogonal matrix, right singular vectors in columns

    Algorithm outline
    -----------------
    1.  Form AᵀA and AAᵀ.
    2.  For each of the n (resp. m) directions: seed a unit vector, run a
        fixed number of power-iteration steps, orthogonalize against the
        vectors already found, take the Rayleigh quotient λ and deflate
        the matrix by λ v vᵀ. σ = sqrt(|λ|) comes from the AᵀA sweep.
    3.  Flip every left singular vector so that u[0] >= 0, then orient
        each right singular vector so that uᵢᵀ A vᵢ >= 0. With distinct
        singular values this gives U S Vᵀ = A up to the power-iteration
        error. Repeated singular values leave the two sweeps free to pick
        different bases of the shared subspace, and the reconstruction
        can then fail.
    4.  Singular values below 100·ε are reported as exactly zero.

    The zero matrix returns U = I, V = I, S = 0.

    This converges slowly when singular values cluster; it is meant to be
    readable, not competitive with bidiagonalization.
    """
    A = np.asarray(A, dtype=float)
    if A.ndim != 2:
        raise InvalidArgument(f"expected a 2-D matrix, got ndim={A.ndim}")
    m, n = A.shape
    if m == 0 or n == 0:
        raise InvalidArgument("Matrix dimensions must be positive")

    S = np.zeros((m, n))
    eps = machine_eps()
    if np.all(np.abs(A) <= eps):
        return np.eye(m), S, np.eye(n)

    lam_v, V = _deflated_eigenvectors(A.T @ A, n)
    _lam_u, U = _deflated_eigenvectors(A @ A.T, m)

    # sign convention on the left vectors
    flip = U[0, :] < 0
    U[:, flip] *= -1.0

    k = min(m, n)
    sigma = np.sqrt(np.abs(lam_v[:k]))
    sigma[sigma <= SVD_CLAMP_FACTOR * eps] = 0.0

    # pair each right vector with its left vector
    for i in range(k):
        if sigma[i] > 0 and U[:, i] @ (A @ V[:, i]) < 0:
            V[:, i] *= -1.0

    S[np.arange(k), np.arange(k)] = sigma
    logger.debug(f"svd: {m}x{n}, sigma={sigma}")
    return U, S, V
