# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Exception hierarchy.

Every error the toolkit raises derives from `FastSolverError` and from the
builtin it most resembles, so ``except ValueError`` keeps working for
callers that never heard of this package.
"""

from typing import Optional

import numpy as np


class FastSolverError(Exception):
    """Base class for all fastsolver errors."""


class InvalidArgument(FastSolverError, ValueError):
    """Shape mismatch, non-square operand, or an out-of-domain parameter."""


class OutOfRange(FastSolverError, IndexError):
    """Index outside the declared matrix or vector bounds."""


class NumericalError(FastSolverError, RuntimeError):
    """Numerical breakdown: zero pivot, non-positive pivot, vanishing norm."""


class NotFinalized(FastSolverError, RuntimeError):
    """A sparse matrix was used while insertions were still staged."""


class NotConverged(NumericalError):
    """
    An iterative method ran out of budget before meeting its tolerance.

    The last iterate travels with the exception so the caller can decide
    to accept it anyway.
    """

    def __init__(
        self,
        message: str,
        residual: float,
        iterations: int,
        x: Optional[np.ndarray] = None,
    ):
        super().__init__(message)
        self.residual = residual
        self.iterations = iterations
        self.x = x


class Indefinite(NumericalError):
    """Non-positive curvature pᵀAp met by a method that needs SPD input."""

    def __init__(self, message: str, curvature: float, iterations: int):
        super().__init__(message)
        self.curvature = curvature
        self.iterations = iterations
