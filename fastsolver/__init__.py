# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
fastsolver
==========

Dense and sparse linear systems, Krylov solvers and a Runge-Kutta
integrator on top of numpy.

Public API
~~~~~~~~~~
- Containers
    - `Vector`, `DenseMatrix`, `SparseMatrix`, `LinearOperator`
- Decompositions
    - `pivot_lu`, `cholesky`, `householder_qr`, `svd`
- Linear systems
    - `forward_substitute`, `back_substitute`, `lu_solve`,
      `cholesky_solve`, `least_squares_householder_qr`
- Iterative methods
    - `ConjugateGradient`, `GMRES`, `GradientDescent`,
      `AlgebraicMultiGrid`, `power_iteration`, `rayleigh_quotient`,
      `arnoldi`
- Preconditioners
    - `jacobi_preconditioner`, `ilu0`
- ODEs
    - `RungeKutta`
- I/O
    - `read_matrix_market`, `write_matrix_market`, `set_matrix_value`

Everything else lives in sub-modules and is **not** considered part of the
stable interface.

Example
-------
>>> import numpy as np, fastsolver as fs
>>> A = np.array([[5.0, 0, 1], [0, 2, 0], [1, 0, 3]])
>>> result = fs.ConjugateGradient(A, [6.0, 2, 4], tol=1e-12).solve()
>>> np.allclose(result.x, 1.0)
True
"""

from importlib.metadata import version as _pkg_version

from .cholesky import cholesky, cholesky_solve
from .dense import DenseMatrix, Vector
from .eigen import dominant_eigenpair, power_iteration, rayleigh_quotient
from .elimination import (
    back_substitute,
    forward_substitute,
    lu_inverse,
    lu_solve,
    pivot_lu,
    substitute,
    unpack_lu,
)
from .errors import (
    FastSolverError,
    Indefinite,
    InvalidArgument,
    NotConverged,
    NotFinalized,
    NumericalError,
    OutOfRange,
)
from .io import read_matrix_market, write_matrix_market
from .iterative import GradientDescent, SolveResult
from .krylov import GMRES, ConjugateGradient, arnoldi, givens_rotation
from .matrix_functions import adj, det
from .multigrid import AlgebraicMultiGrid
from .ode import AdaptiveResult, RungeKutta
from .operators import LinearOperator, as_operator
from .preconditioners import ilu0, jacobi_preconditioner
from .projections import gram_schmidt, project_onto_colspace, subtract_projection
from .quadrature import GaussQuadrature
from .qr import householder_qr, least_squares_householder_qr, random_nonsingular_qr
from .sparse import SparseMatrix, set_matrix_value
from .svd import svd
from .utils import permutation_sign, poisson_1d, random_spd

__all__ = [
    "Vector",
    "DenseMatrix",
    "SparseMatrix",
    "LinearOperator",
    "as_operator",
    "set_matrix_value",
    "power_iteration",
    "rayleigh_quotient",
    "dominant_eigenpair",
    "subtract_projection",
    "gram_schmidt",
    "project_onto_colspace",
    "householder_qr",
    "least_squares_householder_qr",
    "random_nonsingular_qr",
    "substitute",
    "forward_substitute",
    "back_substitute",
    "pivot_lu",
    "unpack_lu",
    "lu_solve",
    "lu_inverse",
    "cholesky",
    "cholesky_solve",
    "svd",
    "det",
    "adj",
    "arnoldi",
    "givens_rotation",
    "SolveResult",
    "ConjugateGradient",
    "GMRES",
    "GradientDescent",
    "AlgebraicMultiGrid",
    "jacobi_preconditioner",
    "ilu0",
    "RungeKutta",
    "AdaptiveResult",
    "GaussQuadrature",
    "read_matrix_market",
    "write_matrix_market",
    "FastSolverError",
    "InvalidArgument",
    "OutOfRange",
    "NumericalError",
    "NotFinalized",
    "NotConverged",
    "Indefinite",
    "permutation_sign",
    "random_spd",
    "poisson_1d",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show fastsolver”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
