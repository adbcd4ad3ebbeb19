# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Matrix Market coordinate files.

    %%MatrixMarket matrix coordinate real general
    % any number of comment lines
    M N L
    row col value      (L lines, 1-based indices)

A ``symmetric`` banner stores only the lower triangle; the reader mirrors
the off-diagonal entries.
"""

import logging
from os import PathLike
from typing import Union

import numpy as np

from .errors import InvalidArgument, OutOfRange
from .sparse import SparseMatrix, set_matrix_value

logger = logging.getLogger(__name__)

PathType = Union[str, PathLike]


def read_matrix_market(path: PathType, matrix=None):
    """
    Load a coordinate Matrix Market file.

    Parameters
    ----------
    path : str or path-like
    matrix : SparseMatrix | DenseMatrix | ndarray, optional
        Target of shape (M, N). Each entry is written through
        `set_matrix_value`. A new SparseMatrix is created when omitted.

    Returns
    -------
    The filled matrix (finalized when sparse).
    """
    symmetric = False
    with open(path) as fh:
        lines = iter(fh)
        for line in lines:
            stripped = line.strip()
            if stripped.startswith("%"):
                if stripped.lower().startswith("%%matrixmarket") and "symmetric" in stripped.lower():
                    symmetric = True
                continue
            if stripped:
                break
        else:
            raise InvalidArgument(f"{path}: missing size line")

        try:
            m, n, nnz = (int(tok) for tok in stripped.split()[:3])
        except ValueError as e:
            raise InvalidArgument(f"{path}: bad size line {stripped!r}") from e

        if matrix is None:
            target = SparseMatrix(m, n)
            staged = True
        else:
            if tuple(matrix.shape) != (m, n):
                raise InvalidArgument(
                    f"{path}: file holds a {m}x{n} matrix, target has shape {matrix.shape}"
                )
            target = matrix
            staged = False

        def put(i, j, v):
            if staged:
                target.add_value(i, j, v)
            else:
                set_matrix_value(target, i, j, v)

        count = 0
        for line in lines:
            parts = line.split()
            if not parts or parts[0].startswith("%"):
                continue
            if len(parts) < 3:
                raise InvalidArgument(f"{path}: bad entry line {line.strip()!r}")
            i, j, v = int(parts[0]) - 1, int(parts[1]) - 1, float(parts[2])
            if not (0 <= i < m and 0 <= j < n):
                raise OutOfRange(f"{path}: entry ({i + 1}, {j + 1}) outside {m}x{n}")
            put(i, j, v)
            if symmetric and i != j:
                put(j, i, v)
            count += 1

    if count != nnz:
        raise InvalidArgument(f"{path}: expected {nnz} entries, found {count}")
    if staged:
        target.finalize()
    logger.debug(f"read_matrix_market: {path} -> {m}x{n}, {nnz} entries")
    return target


def write_matrix_market(path: PathType, A, comment: str = "") -> None:
    """Write A (dense or sparse) as a general real coordinate file."""
    if isinstance(A, SparseMatrix):
        rows, cols, vals = A.triplets()
    else:
        arr = np.asarray(A, dtype=float)
        if arr.ndim != 2:
            raise InvalidArgument(f"expected a 2-D matrix, got ndim={arr.ndim}")
        rows, cols = np.nonzero(arr)
        vals = arr[rows, cols]
    m, n = A.shape

    with open(path, "w") as fh:
        fh.write("%%MatrixMarket matrix coordinate real general\n")
        for line in comment.splitlines():
            fh.write(f"% {line}\n")
        fh.write(f"{m} {n} {len(vals)}\n")
        for i, j, v in zip(rows, cols, vals):
            fh.write(f"{i + 1} {j + 1} {float(v)!r}\n")
