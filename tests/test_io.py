# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from fastsolver.dense import DenseMatrix
from fastsolver.errors import InvalidArgument, OutOfRange
from fastsolver.io import read_matrix_market, write_matrix_market
from fastsolver.sparse import SparseMatrix

GENERAL = """%%MatrixMarket matrix coordinate real general
% a 3x3 example
%
3 3 4
1 1 2.0
2 2 3.0
3 1 1.0
3 3 4.0
"""


def test_read_into_new_sparse(tmp_path):
    path = tmp_path / "a.mtx"
    path.write_text(GENERAL)
    A = read_matrix_market(path)
    assert isinstance(A, SparseMatrix)
    assert A.is_finalized and A.nnz == 4
    np.testing.assert_array_equal(A @ np.ones(3), [2.0, 3.0, 5.0])


def test_read_into_dense_target(tmp_path):
    path = tmp_path / "a.mtx"
    path.write_text(GENERAL)
    D = DenseMatrix(3, 3)
    out = read_matrix_market(str(path), D)
    assert out is D
    assert D[2, 0] == 1.0 and D[1, 1] == 3.0 and D[0, 2] == 0.0


def test_read_into_existing_sparse_target(tmp_path):
    path = tmp_path / "a.mtx"
    path.write_text(GENERAL)
    S = SparseMatrix(3, 3)
    read_matrix_market(path, S)
    assert S.is_finalized
    assert S[2, 2] == 4.0


def test_read_symmetric_mirrors_lower_triangle(tmp_path):
    path = tmp_path / "s.mtx"
    path.write_text(
        "%%MatrixMarket matrix coordinate real symmetric\n2 2 2\n1 1 4.0\n2 1 -1.0\n"
    )
    A = read_matrix_market(path)
    np.testing.assert_array_equal(A.toarray(), [[4.0, -1.0], [-1.0, 4.0]])


def test_write_then_read(tmp_path):
    rng = np.random.default_rng(0)
    a = rng.standard_normal((4, 5))
    a[a < 0.3] = 0.0
    path = tmp_path / "w.mtx"
    write_matrix_market(path, SparseMatrix.from_dense(a), comment="random test matrix")
    np.testing.assert_array_equal(read_matrix_market(path).toarray(), a)
    # same content from a dense source
    write_matrix_market(path, a)
    np.testing.assert_array_equal(read_matrix_market(path).toarray(), a)


def test_entry_count_mismatch_raises(tmp_path):
    path = tmp_path / "bad.mtx"
    path.write_text("2 2 3\n1 1 1.0\n2 2 1.0\n")
    with pytest.raises(InvalidArgument):
        read_matrix_market(path)


def test_entry_out_of_range_raises(tmp_path):
    path = tmp_path / "bad.mtx"
    path.write_text("2 2 1\n3 1 1.0\n")
    with pytest.raises(OutOfRange):
        read_matrix_market(path)


def test_target_shape_mismatch_raises(tmp_path):
    path = tmp_path / "a.mtx"
    path.write_text(GENERAL)
    with pytest.raises(InvalidArgument):
        read_matrix_market(path, np.zeros((2, 2)))


def test_missing_size_line_raises(tmp_path):
    path = tmp_path / "empty.mtx"
    path.write_text("% only comments\n")
    with pytest.raises(InvalidArgument):
        read_matrix_market(path)
