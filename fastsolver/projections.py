#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Projection operations
"""

import numpy as np

from .qr import householder_qr


def subtract_projection(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Return u − (u·v / v·v) v, the part of u orthogonal to v.

    A zero v projects nothing away and u comes back unchanged.
    """
    u = np.asarray(u, dtype=float)
    v = np.asarray(v, dtype=float)
    if np.linalg.norm(v) == 0:
        return u.copy()
    return u - ((u @ v) / (v @ v)) * v


def gram_schmidt(A) -> np.ndarray:
    """
    Classical Gram-Schmidt over the columns of A.

    Parameters
    ----------
    A : (m, n) matrix-like

    Returns
    -------
    Q : (m, n) ndarray
        Column i is column i of A with its projections onto columns
        0..i-1 of Q removed, then normalized. A column that is linearly
        dependent on its predecessors comes out as the zero vector, so Q
        is only orthonormal for full column rank A.
    """
    A = np.asarray(A, dtype=float)
    m, n = A.shape
    Q = np.zeros((m, n))
    for i in range(n):
        v = A[:, i].copy()
        for j in range(i):
            v = subtract_projection(v, Q[:, j])
        norm = np.linalg.norm(v)
        if norm != 0:
            v /= norm
        Q[:, i] = v
    return Q


def project_onto_colspace(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Find p = A x, the orthogonal projection of b onto
    the column-space of A (full column rank).
    Returns
    -------
    p : ndarray, same shape as b
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)
    n = A.shape[1]
    Q, _R = householder_qr(A)
    Q = Q[:, :n]
    return Q @ (Q.T @ b)
