# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Gauss-Legendre quadrature on arbitrary intervals.
"""

import logging
from typing import Callable

import numpy as np

from .errors import InvalidArgument

logger = logging.getLogger(__name__)


class GaussQuadrature:
    """
    n-point Gauss-Legendre rule, exact for polynomials of degree <= 2n - 1.

    Nodes and weights live on [-1, 1] and are mapped affinely onto [a, b]
    by `integrate`.
    """

    def __init__(self, n: int):
        if n <= 0:
            raise InvalidArgument("number of quadrature points must be positive")
        self.n = int(n)
        self.points, self.weights = np.polynomial.legendre.leggauss(self.n)
        logger.debug(f"gauss quadrature: {self.n} points")

    def get_points(self) -> np.ndarray:
        return self.points.copy()

    def get_weights(self) -> np.ndarray:
        return self.weights.copy()

    def integrate(self, f: Callable[[float], float], a: float, b: float) -> float:
        """
        Approximate the integral of f over [a, b].

        f is called once per node with a float. Reversed limits give the
        negated integral.
        """
        half = 0.5 * (b - a)
        mid = 0.5 * (a + b)
        x = half * self.points + mid
        values = np.array([f(float(t)) for t in x], dtype=float)
        return float(half * (self.weights @ values))
