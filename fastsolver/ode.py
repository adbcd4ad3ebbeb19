# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Classical fourth-order Runge-Kutta for autonomous systems y' = f(y).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .errors import InvalidArgument, NotConverged

logger = logging.getLogger(__name__)

RHS = Callable[[np.ndarray], np.ndarray]


@dataclass
class AdaptiveResult:
    y: np.ndarray
    t: float
    accepted_steps: int
    rejected_steps: int
    h: float  # step size proposed for the next step


class RungeKutta:
    """
    RK4 with weights (1, 2, 2, 1)/6:

        k1 = f(y)
        k2 = f(y + h/2 k1)
        k3 = f(y + h/2 k2)
        k4 = f(y + h k3)
        y ← y + h/6 (k1 + 2 k2 + 2 k3 + k4)
    """

    @staticmethod
    def _validate(y, h: float) -> np.ndarray:
        y = np.array(y, dtype=float, copy=True)
        if y.ndim != 1 or y.size == 0:
            raise InvalidArgument("state vector must be a non-empty 1-D array")
        if not h > 0:
            raise InvalidArgument("step size must be positive")
        return y

    @staticmethod
    def step(y: np.ndarray, f: RHS, h: float) -> np.ndarray:
        """One RK4 step from y; y itself is left alone."""
        k1 = np.asarray(f(y), dtype=float)
        k2 = np.asarray(f(y + 0.5 * h * k1), dtype=float)
        k3 = np.asarray(f(y + 0.5 * h * k2), dtype=float)
        k4 = np.asarray(f(y + h * k3), dtype=float)
        return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    def solve(
        self,
        y,
        f: RHS,
        h: float,
        n: int,
        callback: Optional[Callable[[int, np.ndarray], None]] = None,
    ) -> np.ndarray:
        """
        Advance y by n fixed steps of size h.

        Parameters
        ----------
        y : (d,) array-like
            Initial state, not modified.
        f : callable
            Right-hand side, f(y) -> dy/dt with the shape of y.
        h : float
            Step size, > 0.
        n : int
            Number of steps, > 0.
        callback : callable, optional
            Called as callback(step, y) after every step with the 0-based
            step index and a copy of the new state.

        Returns
        -------
        y : (d,) ndarray
            State after n steps.
        """
        y = self._validate(y, h)
        if n <= 0:
            raise InvalidArgument("number of steps must be positive")
        for i in range(n):
            y = self.step(y, f, h)
            if callback is not None:
                callback(i, y.copy())
        return y

    def solve_adaptive(
        self,
        y,
        f: RHS,
        h: float,
        tol: float,
        max_steps: int,
        safety: float = 0.9,
        min_scale: float = 0.1,
        max_scale: float = 2.0,
        t_end: Optional[float] = None,
    ) -> AdaptiveResult:
        """
        Step-doubling RK4: every attempt takes one step of size h and two
        of size h/2, and measures

            err = ‖y_half − y_full‖ / max(‖y_half‖, 1).

        err <= tol accepts y_half. Either way h is rescaled by
        safety·(tol/err)^p clipped to [min_scale, max_scale], with p = 0.2
        after an acceptance and 0.25 after a rejection.

        max_steps bounds the number of attempts (accepted plus rejected).
        With t_end the integration runs from t = 0 until t_end, the last
        step shortened to land on it, and NotConverged is raised if the
        attempts run out first. Without t_end all max_steps attempts are
        made and NotConverged is raised only if none was accepted.
        """
        y = self._validate(y, h)
        if not tol > 0:
            raise InvalidArgument("Tolerance must be positive")
        if max_steps <= 0:
            raise InvalidArgument("maximum number of steps must be positive")
        if not 0 < min_scale <= max_scale:
            raise InvalidArgument("step scale bounds must satisfy 0 < min_scale <= max_scale")
        if t_end is not None and not t_end > 0:
            raise InvalidArgument("integration horizon must be positive")

        t = 0.0
        accepted = rejected = 0
        err = np.inf
        for _ in range(max_steps):
            if t_end is not None:
                remaining = t_end - t
                if remaining <= 1e-12 * t_end:
                    break
                h_try = min(h, remaining)
            else:
                h_try = h

            y_full = self.step(y, f, h_try)
            y_half = self.step(self.step(y, f, 0.5 * h_try), f, 0.5 * h_try)
            err = float(np.linalg.norm(y_half - y_full)) / max(float(np.linalg.norm(y_half)), 1.0)

            if err <= tol:
                y = y_half
                t += h_try
                accepted += 1
                p = 0.2
            else:
                rejected += 1
                p = 0.25

            scale = max_scale if err == 0 else float(
                np.clip(safety * (tol / err) ** p, min_scale, max_scale)
            )
            h = h_try * scale

        logger.debug(
            f"rk4 adaptive: t={t:.6g}, accepted={accepted}, rejected={rejected}, h={h:.3e}"
        )
        reached = t_end is None or t_end - t <= 1e-12 * t_end
        if accepted == 0 or not reached:
            raise NotConverged(
                f"adaptive RK4 stopped at t={t:.6g} after {max_steps} attempts "
                f"({accepted} accepted)",
                residual=err,
                iterations=accepted + rejected,
                x=y,
            )
        return AdaptiveResult(y, t, accepted, rejected, h)
