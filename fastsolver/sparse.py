# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Sparse matrices in compressed-column (CSC) form.

Storage after `finalize()`:

    values[k]       k-th stored non-zero
    row_indices[k]  row of values[k]
    col_ptr[j]      first slot of column j, col_ptr[n] == nnz

Inside every column the row indices are strictly increasing and no stored
value is zero. A fresh matrix is *staged*: `add_value` only records
(row, col, value) triplets and `finalize` sorts them into the arrays
above. Arithmetic always hands back finalized matrices.
"""

import logging
from typing import List, Tuple

import numpy as np

from .dense import DenseMatrix, Vector
from .errors import InvalidArgument, NotFinalized, OutOfRange

logger = logging.getLogger(__name__)


class SparseMatrix:
    def __init__(self, rows: int, cols: int, dtype=np.float64):
        if rows < 0 or cols < 0:
            raise InvalidArgument("matrix dimensions must be non-negative")
        self._shape = (int(rows), int(cols))
        self.dtype = np.dtype(dtype)
        self._set_structure(
            np.zeros(0, dtype=self.dtype),
            np.zeros(0, dtype=np.int64),
            np.zeros(cols + 1, dtype=np.int64),
        )
        self._staged_rows: List[int] = []
        self._staged_cols: List[int] = []
        self._staged_vals: List[float] = []

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    def _set_structure(self, values, row_indices, col_ptr) -> None:
        self.values = values
        self.row_indices = row_indices
        self.col_ptr = col_ptr
        # column of every stored entry, i.e. the CSC walk flattened
        self._entry_cols = np.repeat(
            np.arange(self._shape[1], dtype=np.int64), np.diff(col_ptr)
        )

    @classmethod
    def _from_csc(cls, shape, values, row_indices, col_ptr, dtype=np.float64):
        """Build a finalized matrix from CSC arrays, dropping stored zeros."""
        out = cls(*shape, dtype=dtype)
        values = np.asarray(values, dtype=out.dtype)
        row_indices = np.asarray(row_indices, dtype=np.int64)
        col_ptr = np.asarray(col_ptr, dtype=np.int64)
        keep = values != 0
        if not keep.all():
            cols = np.repeat(np.arange(shape[1], dtype=np.int64), np.diff(col_ptr))[keep]
            values, row_indices = values[keep], row_indices[keep]
            col_ptr = np.concatenate(
                ([0], np.cumsum(np.bincount(cols, minlength=shape[1])))
            ).astype(np.int64)
        out._set_structure(values, row_indices, col_ptr)
        return out

    @classmethod
    def from_triplets(cls, shape, rows, cols, vals, dtype=np.float64) -> "SparseMatrix":
        out = cls(*shape, dtype=dtype)
        for i, j, v in zip(rows, cols, vals):
            out.add_value(int(i), int(j), v)
        return out.finalize()

    @classmethod
    def from_dense(cls, A) -> "SparseMatrix":
        arr = np.asarray(A, dtype=float)
        if arr.ndim != 2:
            raise InvalidArgument(f"expected a 2-D array, got ndim={arr.ndim}")
        # nonzero() on the transpose walks column-major: already CSC order
        cols, rows = np.nonzero(arr.T)
        counts = np.bincount(cols, minlength=arr.shape[1])
        col_ptr = np.concatenate(([0], np.cumsum(counts)))
        return cls._from_csc(arr.shape, arr[rows, cols], rows, col_ptr)

    @classmethod
    def identity(cls, n: int) -> "SparseMatrix":
        return cls._from_csc((n, n), np.ones(n), np.arange(n), np.arange(n + 1))

    def add_value(self, row: int, col: int, value: float) -> None:
        """
        Stage A(row, col) = value. Zeros are ignored.

        The entry is not visible until the next `finalize()`.
        """
        m, n = self._shape
        if not (0 <= row < m and 0 <= col < n):
            raise OutOfRange(f"({row}, {col}) outside a {m}x{n} matrix")
        if value == 0:
            return
        self._staged_rows.append(row)
        self._staged_cols.append(col)
        self._staged_vals.append(value)

    def discard(self, row: int, col: int) -> None:
        """Remove a stored entry, if any, so that A(row, col) reads as 0."""
        m, n = self._shape
        if not (0 <= row < m and 0 <= col < n):
            raise OutOfRange(f"({row}, {col}) outside a {m}x{n} matrix")
        self._require_finalized()
        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        k = start + int(np.searchsorted(self.row_indices[start:end], row))
        if k < end and self.row_indices[k] == row:
            col_ptr = self.col_ptr.copy()
            col_ptr[col + 1 :] -= 1
            self._set_structure(
                np.delete(self.values, k), np.delete(self.row_indices, k), col_ptr
            )

    def finalize(self) -> "SparseMatrix":
        """
        Merge staged triplets into the CSC arrays.

        Triplets are ordered by (column, row); when the same position was
        written more than once the most recent value wins.
        """
        if not self._staged_vals:
            return self

        rows = np.concatenate(
            (self.row_indices, np.asarray(self._staged_rows, dtype=np.int64))
        )
        cols = np.concatenate(
            (self._entry_cols, np.asarray(self._staged_cols, dtype=np.int64))
        )
        vals = np.concatenate(
            (self.values, np.asarray(self._staged_vals, dtype=self.dtype))
        )

        # lexsort: last key is primary -> (col, row, insertion order)
        order = np.lexsort((np.arange(rows.size), rows, cols))
        rows, cols, vals = rows[order], cols[order], vals[order]

        last = np.ones(rows.size, dtype=bool)
        last[:-1] = (rows[1:] != rows[:-1]) | (cols[1:] != cols[:-1])
        rows, cols, vals = rows[last], cols[last], vals[last]

        counts = np.bincount(cols, minlength=self._shape[1])
        col_ptr = np.concatenate(([0], np.cumsum(counts))).astype(np.int64)
        self._set_structure(vals, rows, col_ptr)

        logger.debug(
            f"finalized {len(self._staged_vals)} staged entries, nnz={rows.size}"
        )
        self._staged_rows.clear()
        self._staged_cols.clear()
        self._staged_vals.clear()
        return self

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Tuple[int, int]:
        return self._shape

    @property
    def n_rows(self) -> int:
        return self._shape[0]

    @property
    def n_cols(self) -> int:
        return self._shape[1]

    @property
    def nnz(self) -> int:
        return int(self.values.size)

    @property
    def is_finalized(self) -> bool:
        return not self._staged_vals

    def _require_finalized(self) -> None:
        if self._staged_vals:
            raise NotFinalized(
                f"{len(self._staged_vals)} staged entries; call finalize() first"
            )

    def __repr__(self) -> str:
        state = "" if self.is_finalized else f", staged={len(self._staged_vals)}"
        return f"{self.__class__.__name__}(shape={self._shape}, nnz={self.nnz}{state})"

    def __getitem__(self, idx) -> float:
        if not isinstance(idx, tuple) or len(idx) != 2:
            raise InvalidArgument("index a SparseMatrix with A[i, j]")
        row, col = idx
        m, n = self._shape
        if not (0 <= row < m and 0 <= col < n):
            raise OutOfRange(f"({row}, {col}) outside a {m}x{n} matrix")
        self._require_finalized()

        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        k = start + int(np.searchsorted(self.row_indices[start:end], row))
        if k < end and self.row_indices[k] == row:
            return self.values[k]
        return self.dtype.type(0)

    def column_entries(self, col: int) -> Tuple[np.ndarray, np.ndarray]:
        """(row indices, values) stored in column col."""
        if not 0 <= col < self._shape[1]:
            raise OutOfRange(f"column index {col} out of range [0, {self._shape[1]})")
        self._require_finalized()
        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        return self.row_indices[start:end], self.values[start:end]

    def get_column(self, col: int) -> Vector:
        rows, vals = self.column_entries(col)
        out = Vector(self._shape[0], dtype=self.dtype)
        out.data[rows] = vals
        return out

    def diagonal(self) -> np.ndarray:
        self._require_finalized()
        d = np.zeros(min(self._shape), dtype=self.dtype)
        on_diag = self.row_indices == self._entry_cols
        d[self.row_indices[on_diag]] = self.values[on_diag]
        return d

    def triplets(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(rows, cols, values) of every stored entry in CSC order."""
        self._require_finalized()
        return self.row_indices.copy(), self._entry_cols.copy(), self.values.copy()

    def toarray(self) -> np.ndarray:
        self._require_finalized()
        out = np.zeros(self._shape, dtype=self.dtype)
        out[self.row_indices, self._entry_cols] = self.values
        return out

    def __array__(self, dtype=None, copy=None):
        arr = self.toarray()
        return arr if dtype is None else arr.astype(dtype, copy=False)

    def copy(self) -> "SparseMatrix":
        self._require_finalized()
        return SparseMatrix._from_csc(
            self._shape,
            self.values.copy(),
            self.row_indices.copy(),
            self.col_ptr.copy(),
            dtype=self.dtype,
        )

    # ------------------------------------------------------------------
    # arithmetic
    # ------------------------------------------------------------------
    def _combine(self, other: "SparseMatrix", op) -> "SparseMatrix":
        if not isinstance(other, SparseMatrix):
            raise InvalidArgument(
                f"elementwise operation needs two sparse matrices, got {type(other).__name__}"
            )
        if self._shape != other._shape:
            raise InvalidArgument(f"shape mismatch: {self._shape} vs {other._shape}")
        self._require_finalized()
        other._require_finalized()

        dtype = np.result_type(self.dtype, other.dtype)
        out_rows, out_vals = [], []
        counts = np.zeros(self._shape[1], dtype=np.int64)
        for col in range(self._shape[1]):
            a_rows, a_vals = self.column_entries(col)
            b_rows, b_vals = other.column_entries(col)
            rows = np.union1d(a_rows, b_rows)
            merged = np.zeros(rows.size, dtype=dtype)
            merged[np.searchsorted(rows, a_rows)] = a_vals
            b_pos = np.searchsorted(rows, b_rows)
            merged[b_pos] = op(merged[b_pos], b_vals)

            keep = merged != 0
            out_rows.append(rows[keep])
            out_vals.append(merged[keep])
            counts[col] = int(keep.sum())

        col_ptr = np.concatenate(([0], np.cumsum(counts)))
        return SparseMatrix._from_csc(
            self._shape,
            np.concatenate(out_vals) if out_vals else np.zeros(0),
            np.concatenate(out_rows) if out_rows else np.zeros(0, dtype=np.int64),
            col_ptr,
            dtype=dtype,
        )

    def __add__(self, other: "SparseMatrix") -> "SparseMatrix":
        return self._combine(other, np.add)

    def __sub__(self, other: "SparseMatrix") -> "SparseMatrix":
        return self._combine(other, np.subtract)

    def __mul__(self, scalar: float) -> "SparseMatrix":
        if not np.isscalar(scalar):
            raise InvalidArgument("use A @ x for matrix products; * is scalar scaling")
        self._require_finalized()
        return SparseMatrix._from_csc(
            self._shape,
            self.values * scalar,
            self.row_indices.copy(),
            self.col_ptr.copy(),
            dtype=self.dtype,
        )

    __rmul__ = __mul__

    def __imul__(self, scalar: float) -> "SparseMatrix":
        scaled = self * scalar
        self._set_structure(scaled.values, scaled.row_indices, scaled.col_ptr)
        return self

    def __neg__(self) -> "SparseMatrix":
        return self * -1.0

    def matvec(self, v) -> np.ndarray:
        """
        y = A·v by walking the stored columns:
        y[row_indices[k]] += values[k] * v[col] for k in column col.
        """
        self._require_finalized()
        x = np.asarray(v)
        if x.shape != (self._shape[1],):
            raise InvalidArgument(
                f"vector of shape {x.shape} does not match {self._shape[1]} columns"
            )
        contrib = self.values * x[self._entry_cols]
        return np.bincount(
            self.row_indices, weights=contrib, minlength=self._shape[0]
        ).astype(np.result_type(self.dtype, x.dtype), copy=False)

    def matmat(self, other: "SparseMatrix") -> "SparseMatrix":
        """
        C = A·B. For each stored B(row_b, col), the column A[:, row_b]
        scaled by B(row_b, col) is accumulated into C[:, col].
        """
        if self._shape[1] != other._shape[0]:
            raise InvalidArgument(
                f"inner dimensions differ: {self._shape} @ {other._shape}"
            )
        self._require_finalized()
        other._require_finalized()

        m, n = self._shape[0], other._shape[1]
        dtype = np.result_type(self.dtype, other.dtype)
        out_rows, out_vals = [], []
        counts = np.zeros(n, dtype=np.int64)
        for col in range(n):
            b_rows, b_vals = other.column_entries(col)
            if b_rows.size == 0:
                continue
            starts = self.col_ptr[b_rows]
            ends = self.col_ptr[b_rows + 1]
            slots = np.concatenate([np.arange(s, e) for s, e in zip(starts, ends)])
            if slots.size == 0:
                continue
            weights = self.values[slots] * np.repeat(b_vals, ends - starts)
            rows, inverse = np.unique(self.row_indices[slots], return_inverse=True)
            sums = np.bincount(inverse.ravel(), weights=weights, minlength=rows.size)

            keep = sums != 0
            out_rows.append(rows[keep])
            out_vals.append(sums[keep])
            counts[col] = int(keep.sum())

        col_ptr = np.concatenate(([0], np.cumsum(counts)))
        return SparseMatrix._from_csc(
            (m, n),
            np.concatenate(out_vals) if out_vals else np.zeros(0),
            np.concatenate(out_rows) if out_rows else np.zeros(0, dtype=np.int64),
            col_ptr,
            dtype=dtype,
        )

    def __matmul__(self, other):
        if isinstance(other, SparseMatrix):
            return self.matmat(other)
        if isinstance(other, Vector):
            return Vector(self.matvec(other.data))
        arr = np.asarray(other)
        if arr.ndim == 1:
            return self.matvec(arr)
        if arr.ndim == 2:
            if arr.shape[0] != self._shape[1]:
                raise InvalidArgument(
                    f"inner dimensions differ: {self._shape} @ {arr.shape}"
                )
            out = np.zeros((self._shape[0], arr.shape[1]))
            for j in range(arr.shape[1]):
                out[:, j] = self.matvec(arr[:, j])
            return DenseMatrix.from_array(out) if isinstance(other, DenseMatrix) else out
        raise InvalidArgument(f"cannot multiply a sparse matrix by ndim={arr.ndim}")

    def transpose(self) -> "SparseMatrix":
        """
        Counting sort on the row index. Entries are scattered in column
        order into per-row slots, so every new column keeps its row
        indices sorted.
        """
        self._require_finalized()
        m, n = self._shape
        counts = np.bincount(self.row_indices, minlength=m)
        col_ptr = np.concatenate(([0], np.cumsum(counts))).astype(np.int64)

        next_slot = col_ptr[:-1].copy()
        values = np.empty_like(self.values)
        rows = np.empty_like(self._entry_cols)
        for k, r in enumerate(self.row_indices):
            dest = next_slot[r]
            next_slot[r] += 1
            values[dest] = self.values[k]
            rows[dest] = self._entry_cols[k]

        out = SparseMatrix(n, m, dtype=self.dtype)
        out._set_structure(values, rows, col_ptr)
        return out

    @property
    def T(self) -> "SparseMatrix":
        return self.transpose()


def set_matrix_value(matrix, row: int, col: int, value: float) -> None:
    """
    Write one entry into a dense or sparse target.

    Sparse targets stage the value and finalize immediately; everything
    else is written in place.
    """
    if isinstance(matrix, SparseMatrix):
        matrix.add_value(row, col, value)
        matrix.finalize()
        if value == 0:
            matrix.discard(row, col)
    else:
        matrix[row, col] = value


def as_sparse(A) -> SparseMatrix:
    if isinstance(A, SparseMatrix):
        A._require_finalized()
        return A
    return SparseMatrix.from_dense(A)
