# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import Optional, Tuple

import numpy as np

from .errors import InvalidArgument, NumericalError
from .operators import as_operator, as_vector
from .utils import machine_eps, require_square


def power_iteration(A, b, max_iter: int) -> np.ndarray:
    """
    Push b towards the dominant eigenvector of A.

    Each step normalizes b and replaces it with A·b; the result is
    normalized once more at the end. A step that meets a zero vector
    returns it as is.

    Parameters
    ----------
    A : (n,n) matrix-like
        ndarray, DenseMatrix, SparseMatrix or LinearOperator.
    b : (n,) vector-like
        Starting vector. Not modified.
    max_iter : int
        Number of steps, >= 0. Zero returns b untouched.

    Returns
    -------
    v : (n,) ndarray
        Unit-norm estimate of the dominant eigenvector.
    """
    if max_iter < 0:
        raise InvalidArgument("Maximum iterations must be non-negative")
    op = as_operator(A)
    n = require_square(op, "power iteration")
    v = as_vector(b, n)
    if max_iter == 0:
        return v

    for _ in range(max_iter):
        norm = np.linalg.norm(v)
        if norm == 0:
            return v
        v /= norm
        v = op.matvec(v)

    norm = np.linalg.norm(v)
    if norm != 0:
        v /= norm
    return v


def rayleigh_quotient(A, b) -> float:
    """
    (bᵀ A b) / (bᵀ b), the eigenvalue estimate attached to direction b.

    Raises NumericalError when ‖b‖ is below machine epsilon.
    """
    op = as_operator(A)
    n = require_square(op, "Rayleigh quotient")
    v = as_vector(b, n)
    if np.linalg.norm(v) < machine_eps(v.dtype):
        raise NumericalError("Vector norm is too close to zero")
    return float(v @ op.matvec(v)) / float(v @ v)


def dominant_eigenpair(
    A, max_iter: int = 1000, v0: Optional[np.ndarray] = None
) -> Tuple[float, np.ndarray]:
    """
    Estimate the dominant eigenvalue (by magnitude) and its eigenvector.

    Returns
    -------
    lam : float
    v : (n,) ndarray, unit norm
    """
    op = as_operator(A)
    n = require_square(op, "power iteration")
    if v0 is None:
        v0 = np.ones(n)
    v = power_iteration(op, v0, max_iter)
    return rayleigh_quotient(op, v), v
