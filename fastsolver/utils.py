# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np

from .errors import InvalidArgument

# Absolute pivot threshold for LU.
EPS: float = 1e-12

# Power-iteration steps per singular pair in svd().
SVD_POWER_STEPS: int = 300

# Singular values below SVD_CLAMP_FACTOR * machine epsilon are reported as 0.
SVD_CLAMP_FACTOR: float = 100.0


def machine_eps(dtype=np.float64) -> float:
    """Machine epsilon of a floating dtype."""
    return float(np.finfo(dtype).eps)


def sign(x: float) -> float:
    """+1 for x >= 0, -1 otherwise (never 0, unlike np.sign)."""
    return 1.0 if x >= 0 else -1.0


def unit_vector(i: int, n: int, dtype=np.float64) -> np.ndarray:
    e = np.zeros(n, dtype=dtype)
    e[i] = 1
    return e


def require_square(A, what: str) -> int:
    """Raise InvalidArgument unless A is square; return its order."""
    m, n = A.shape
    if m != n:
        raise InvalidArgument(f"{what} requires a square matrix, got {m}x{n}")
    return n


def permutation_sign(perm: list[int]) -> float:
    """Return +1 or –1 depending on permutation parity."""
    visited = [False] * len(perm)
    cycles = 0
    for i in range(len(perm)):
        if not visited[i]:
            cycles += 1
            j = i
            while not visited[j]:
                visited[j] = True
                j = perm[j]
    swaps = len(perm) - cycles  # n − #cycles
    return -1.0 if swaps & 1 else 1.0


def permutation_matrix(perm: list[int]) -> np.ndarray:
    """P with (P @ A)[i] == A[perm[i]]."""
    n = len(perm)
    P = np.zeros((n, n))
    P[np.arange(n), perm] = 1.0
    return P


def random_spd(n: int, seed=None, shift: float = 1.0) -> np.ndarray:
    """
    Build a random symmetric positive definite matrix M Mᵀ + shift·I.

    Returns
    -------
    Matrix with float64 dtype
    """
    rng = np.random.default_rng(seed)
    M = rng.standard_normal((n, n))
    return M @ M.T + shift * np.eye(n)


def poisson_1d(n: int) -> np.ndarray:
    """Tridiagonal (-1, 2, -1) second-difference matrix of order n."""
    A = 2.0 * np.eye(n)
    idx = np.arange(n - 1)
    A[idx, idx + 1] = -1.0
    A[idx + 1, idx] = -1.0
    return A
