# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
The capability set the iterative methods are written against.

Solvers never look at how a matrix is stored: they ask for its shape and
for ``A·x``. Sparse operands keep their compressed-column matvec, dense
ones go through numpy.
"""

from typing import Optional, Tuple

import numpy as np

from .dense import DenseMatrix, Vector
from .errors import InvalidArgument
from .sparse import SparseMatrix


class LinearOperator:
    """
    Wraps a dense array, a DenseMatrix, a SparseMatrix or a bare callable
    and exposes ``shape`` plus ``matvec(x)``.
    """

    __slots__ = ("shape", "_matvec")

    def __init__(
        self,
        A,
        shape: Optional[Tuple[int, int]] = None,
    ):
        if isinstance(A, LinearOperator):
            self.shape = A.shape
            self._matvec = A._matvec
        elif isinstance(A, SparseMatrix):
            self.shape = A.shape
            self._matvec = A.matvec
        elif isinstance(A, (np.ndarray, DenseMatrix)):
            arr = np.asarray(A, dtype=float)
            if arr.ndim != 2:
                raise InvalidArgument(f"expected a 2-D matrix, got ndim={arr.ndim}")
            self.shape = arr.shape
            self._matvec = arr.__matmul__
        elif callable(A):
            if shape is None:
                raise InvalidArgument("a callable operator needs an explicit shape")
            self.shape = tuple(shape)
            self._matvec = A
        else:
            raise InvalidArgument(f"cannot use {type(A).__name__} as a linear operator")

    def matvec(self, x: np.ndarray) -> np.ndarray:
        return np.asarray(self._matvec(x), dtype=float)

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.matvec(x)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(shape={self.shape})"


def as_operator(A, shape: Optional[Tuple[int, int]] = None) -> LinearOperator:
    return A if isinstance(A, LinearOperator) else LinearOperator(A, shape)


def identity_operator(n: int) -> LinearOperator:
    return LinearOperator(np.array, shape=(n, n))


def as_vector(b, n: Optional[int] = None, name: str = "b") -> np.ndarray:
    """Return a fresh float copy of b, checking its length against n."""
    if isinstance(b, Vector):
        v = b.data.astype(float, copy=True)
    else:
        v = np.array(b, dtype=float, copy=True)
    if v.ndim != 1:
        raise InvalidArgument(f"{name} must be one-dimensional, got shape {v.shape}")
    if n is not None and v.shape[0] != n:
        raise InvalidArgument(f"{name} has length {v.shape[0]}, expected {n}")
    return v
