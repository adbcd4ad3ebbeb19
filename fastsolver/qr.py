# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import Tuple

import numpy as np

from .elimination import back_substitute
from .utils import sign


def householder_qr(A, economic: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the QR decomposition of an m-by-n matrix A using
    Householder transformations.

    A = QR
    H = I - 2 w transpose(w),  w = (x + sign(x0) ‖x‖ e₁) / ‖·‖

    For every column j < min(m, n) the reflector is built from the
    sub-column R[j:, j] of the running R, applied to R from the left and
    accumulated into Q from the right (Q ← Q Hᵀ). sign(0) is taken as +1
    so the update never cancels.

    Parameters
    ----------
    A : (m, n) matrix-like
    economic : bool
        Return Q (m, k) and R (k, n) with k = min(m, n) instead of the
        full square Q.

    Returns
    -------
    Q : (m, m) ndarray | orthogonal
    R : (m, n) ndarray | upper-triangular
    """
    A = np.array(A, dtype=float)
    m, n = A.shape
    Q = np.eye(m)
    R = A.copy()

    for j in range(min(m, n)):
        # ---- build the reflector for column j --------------------------------
        x = R[j:, j]
        norm_x = np.linalg.norm(x)
        if norm_x == 0:  # nothing to annihilate, H = I
            continue
        w = x.copy()
        w[0] += sign(x[0]) * norm_x
        w /= np.linalg.norm(w)  # ‖w‖ = 1
        w = w.reshape(-1, 1)  # column

        # ---- apply H = I – 2 w wᵀ  to R (from the left) ----------------------
        R[j:, :] -= 2.0 * w @ (w.T @ R[j:, :])
        # ---- accumulate Q = Q Hᵀ (Hᵀ = H)  -----------------------------------
        Q[:, j:] -= 2.0 * (Q[:, j:] @ w) @ w.T

    # force exact upper-triangular shape / zero tiny noise
    R[np.tril_indices(m, -1, n)] = 0.0

    if economic:
        k = min(m, n)
        return Q[:, :k], R[:k, :]
    return Q, R


def least_squares_householder_qr(A, b) -> np.ndarray:
    """
    Solve min ‖Ax – b‖₂ using (economic) Householder QR
    decomposition (A = QR). Works for tall or square
    full-rank A.

    Returns:
    x : (n, ) ndarray
        The least squares solution to Ax = b
    """
    Q, R = householder_qr(A, economic=True)
    y = Q.T @ np.asarray(b, dtype=float)
    return back_substitute(R, y)


def random_nonsingular_qr(n, seed=None) -> np.ndarray:
    """
    QR trick (random orthogonal × random non-zero scale)

    Returns
    -------
    Matrix with float64 dtype
    """
    rng = np.random.default_rng(seed)
    Q, _R = householder_qr(rng.standard_normal((n, n)))  # Q is orthogonal
    scales = rng.uniform(0.5, 10.0, size=n)  # strictly non-zero
    return np.asarray(Q * scales)  # broadcast scales into columns
