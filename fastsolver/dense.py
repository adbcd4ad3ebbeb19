# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Dense vector and matrix containers.

Both own a contiguous numpy buffer and expose it through ``__array__`` so
every routine in the package (and numpy itself) can consume them without
copying. Binary operators always return new objects.
"""

from typing import Iterable, Sequence, Union

import numpy as np

from .errors import InvalidArgument, OutOfRange


def _check_index(i: int, n: int, what: str) -> int:
    if not 0 <= i < n:
        raise OutOfRange(f"{what} index {i} out of range [0, {n})")
    return i


class Vector:
    """Fixed-length vector of real scalars."""

    def __init__(self, n: Union[int, Iterable[float]], dtype=np.float64):
        if isinstance(n, (int, np.integer)):
            if n < 0:
                raise InvalidArgument("vector length must be non-negative")
            self.data = np.zeros(int(n), dtype=dtype)
        else:
            self.data = np.array(list(n) if not isinstance(n, np.ndarray) else n, dtype=dtype)
            if self.data.ndim != 1:
                raise InvalidArgument("Vector expects a one-dimensional sequence")

    @property
    def size(self) -> int:
        return self.data.shape[0]

    @property
    def dtype(self):
        return self.data.dtype

    def __len__(self) -> int:
        return self.size

    def __iter__(self):
        return iter(self.data)

    def __getitem__(self, i: int) -> float:
        return self.data[_check_index(i, self.size, "vector")]

    def __setitem__(self, i: int, value: float) -> None:
        self.data[_check_index(i, self.size, "vector")] = value

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self.data, dtype=dtype, copy=True)
        return self.data if dtype is None else self.data.astype(dtype, copy=False)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.data.tolist()})"

    def copy(self) -> "Vector":
        return Vector(self.data.copy())

    def _other(self, other) -> np.ndarray:
        arr = np.asarray(other)
        if arr.shape != self.data.shape:
            raise InvalidArgument(
                f"vector length mismatch: {self.size} vs {arr.shape[0] if arr.ndim else arr.shape}"
            )
        return arr

    def __add__(self, other) -> "Vector":
        return Vector(self.data + self._other(other))

    def __sub__(self, other) -> "Vector":
        return Vector(self.data - self._other(other))

    def __neg__(self) -> "Vector":
        return Vector(-self.data)

    def __mul__(self, scalar: float) -> "Vector":
        if not np.isscalar(scalar):
            raise InvalidArgument("use v.dot(u) or v @ u for vector products")
        return Vector(self.data * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector":
        return Vector(self.data / scalar)

    def dot(self, other) -> float:
        return float(self.data @ self._other(other))

    def __matmul__(self, other) -> float:
        return self.dot(other)

    def l2norm(self) -> float:
        return float(np.linalg.norm(self.data))

    def normalize(self) -> "Vector":
        """Scale to unit L2 norm in place. A zero vector is left untouched."""
        norm = self.l2norm()
        if norm != 0:
            self.data /= norm
        return self


class DenseMatrix:
    """Row-by-column grid with shape fixed at construction."""

    def __init__(self, rows: int, cols: int, dtype=np.float64):
        if rows < 0 or cols < 0:
            raise InvalidArgument("matrix dimensions must be non-negative")
        self.data = np.zeros((rows, cols), dtype=dtype)

    @classmethod
    def from_array(cls, A) -> "DenseMatrix":
        arr = np.array(A, dtype=float)
        if arr.ndim != 2:
            raise InvalidArgument(f"expected a 2-D array, got ndim={arr.ndim}")
        M = cls(*arr.shape)
        M.data[...] = arr
        return M

    @classmethod
    def from_columns(cls, columns: Sequence) -> "DenseMatrix":
        """Stack column vectors side by side."""
        if not columns:
            raise InvalidArgument("need at least one column")
        cols = [np.asarray(c, dtype=float) for c in columns]
        n = cols[0].shape[0]
        if any(c.shape != (n,) for c in cols):
            raise InvalidArgument("all columns must have the same length")
        return cls.from_array(np.column_stack(cols))

    @classmethod
    def identity(cls, n: int) -> "DenseMatrix":
        M = cls(n, n)
        np.fill_diagonal(M.data, 1.0)
        return M

    @property
    def n_rows(self) -> int:
        return self.data.shape[0]

    @property
    def n_cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self):
        return self.data.shape

    def _index(self, idx):
        if not isinstance(idx, tuple) or len(idx) != 2:
            raise InvalidArgument("index a DenseMatrix with A[i, j]")
        i, j = idx
        return (
            _check_index(i, self.n_rows, "row"),
            _check_index(j, self.n_cols, "column"),
        )

    def __getitem__(self, idx) -> float:
        return self.data[self._index(idx)]

    def __setitem__(self, idx, value: float) -> None:
        self.data[self._index(idx)] = value

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self.data, dtype=dtype, copy=True)
        return self.data if dtype is None else self.data.astype(dtype, copy=False)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.data.tolist()})"

    def copy(self) -> "DenseMatrix":
        return DenseMatrix.from_array(self.data)

    def get_column(self, j: int) -> Vector:
        return Vector(self.data[:, _check_index(j, self.n_cols, "column")].copy())

    def get_row(self, i: int) -> Vector:
        return Vector(self.data[_check_index(i, self.n_rows, "row")].copy())

    def swap_rows(self, i: int, j: int) -> None:
        _check_index(i, self.n_rows, "row")
        _check_index(j, self.n_rows, "row")
        if i != j:
            self.data[[i, j]] = self.data[[j, i]]

    def zero(self) -> None:
        self.data[...] = 0

    def transpose(self) -> "DenseMatrix":
        return DenseMatrix.from_array(self.data.T)

    @property
    def T(self) -> "DenseMatrix":
        return self.transpose()

    def _same_shape(self, other) -> np.ndarray:
        arr = np.asarray(other)
        if arr.shape != self.shape:
            raise InvalidArgument(f"shape mismatch: {self.shape} vs {arr.shape}")
        return arr

    def __add__(self, other) -> "DenseMatrix":
        return DenseMatrix.from_array(self.data + self._same_shape(other))

    def __sub__(self, other) -> "DenseMatrix":
        return DenseMatrix.from_array(self.data - self._same_shape(other))

    def __mul__(self, scalar: float) -> "DenseMatrix":
        if not np.isscalar(scalar):
            raise InvalidArgument("use A @ B for matrix products")
        return DenseMatrix.from_array(self.data * scalar)

    __rmul__ = __mul__

    def __matmul__(self, other):
        if isinstance(other, Vector):
            if other.size != self.n_cols:
                raise InvalidArgument(
                    f"matrix has {self.n_cols} columns, vector has length {other.size}"
                )
            return Vector(self.data @ other.data)
        arr = np.asarray(other)
        if arr.shape[0] != self.n_cols:
            raise InvalidArgument(
                f"inner dimensions differ: {self.shape} @ {arr.shape}"
            )
        if isinstance(other, DenseMatrix):
            return DenseMatrix.from_array(self.data @ arr)
        return self.data @ arr
