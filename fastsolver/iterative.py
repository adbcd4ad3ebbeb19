# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Shared machinery for stationary and Krylov iterations on A x = b.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .errors import Indefinite, InvalidArgument, NotConverged
from .operators import as_operator, as_vector
from .utils import require_square

logger = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Outcome of one solve: the iterate and how it was reached."""

    x: np.ndarray
    iterations: int
    residual_norm: float
    converged: bool
    residual_history: List[float] = field(default_factory=list)


def check_budget(max_iter: int, tol: float) -> None:
    if max_iter < 0:
        raise InvalidArgument("Maximum iterations must be non-negative")
    if not tol > 0:
        raise InvalidArgument("Tolerance must be positive")


def residual_threshold(tol: float, b: np.ndarray) -> float:
    """
    Stopping bound tol·min(1, ‖b‖₂) on ‖b − A x‖₂.

    Absolute for large right-hand sides, relative to ‖b‖ once it drops
    below one, so ‖r‖ <= tol·‖b‖ holds whenever the bound is met.
    """
    return tol * min(1.0, float(np.linalg.norm(b)))


class IterativeSolver(ABC):
    """
    Base class for solvers bound to one system A x = b.

    Subclasses implement `_iterate`, which advances ``self._x`` in place,
    so the last iterate is kept even when the loop stops on an error.
    """

    name = "iterative solver"

    def __init__(
        self,
        A,
        b,
        max_iter: int = 1000,
        tol: float = 1e-10,
        x0: Optional[np.ndarray] = None,
    ):
        check_budget(max_iter, tol)
        self.A = as_operator(A)
        n = require_square(self.A, self.name)
        self.b = as_vector(b, n)
        self.max_iter = int(max_iter)
        self.tol = float(tol)
        self.threshold = residual_threshold(self.tol, self.b)
        self._x = np.zeros(n) if x0 is None else as_vector(x0, n, "x0")

    @property
    def x(self) -> np.ndarray:
        """Current iterate (a copy)."""
        return self._x.copy()

    @abstractmethod
    def _iterate(self) -> SolveResult:
        raise NotImplementedError

    def call_update(self) -> SolveResult:
        """
        Run the iteration from the current iterate and report the outcome
        without raising when the budget runs out.
        """
        result = self._iterate()
        if result.converged:
            logger.debug(
                f"{self.name}: converged in {result.iterations} iterations, "
                f"residual={result.residual_norm:.3e}"
            )
        else:
            logger.warning(
                f"{self.name}: no convergence after {result.iterations} iterations, "
                f"residual={result.residual_norm:.3e} > {self.threshold:.1e}"
            )
        return result

    def solve(self) -> SolveResult:
        """Like `call_update`, but a missed tolerance raises NotConverged."""
        result = self.call_update()
        if not result.converged:
            raise NotConverged(
                f"{self.name} did not reach tol={self.tol:.1e} "
                f"in {result.iterations} iterations",
                residual=result.residual_norm,
                iterations=result.iterations,
                x=result.x,
            )
        return result


class GradientDescent(IterativeSolver):
    """
    Steepest descent on the quadratic ½ xᵀAx − bᵀx (A symmetric positive
    definite). Every step recomputes r = b − A x and moves along r with
    the exact line-search length α = rᵀr / rᵀAr.
    """

    name = "gradient descent"

    def _iterate(self) -> SolveResult:
        A, b, x = self.A, self.b, self._x
        history = []
        k = 0
        while True:
            r = b - A.matvec(x)
            res = float(np.linalg.norm(r))
            history.append(res)
            if res <= self.threshold or k >= self.max_iter:
                break
            Ar = A.matvec(r)
            curvature = float(r @ Ar)
            if curvature <= 0:
                raise Indefinite(
                    f"rᵀAr = {curvature:.3e} <= 0: matrix is not positive definite",
                    curvature=curvature,
                    iterations=k,
                )
            x += (float(r @ r) / curvature) * r
            k += 1
        return SolveResult(x.copy(), k, res, res <= self.threshold, history)
