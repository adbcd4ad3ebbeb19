#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import time
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .elimination import lu_solve, pivot_lu
from .krylov import GMRES, ConjugateGradient
from .utils import random_spd

REPEATS = 5  # best of 5 runs
SIZES = (50, 200, 500)


def wall(f, *args, **kwargs):
    t0 = time.perf_counter()
    f(*args, **kwargs)
    return time.perf_counter() - t0


def _lu(A, b):
    LU, perm = pivot_lu(A)
    return lu_solve(LU, perm, b)


def run_benchmark(
    sizes: Iterable[int] = SIZES,
    repeats: int = REPEATS,
    seed: Optional[int] = 0,
) -> pd.DataFrame:
    """
    Time CG, GMRES and pivoted LU against numpy.linalg.solve on random
    SPD systems.

    Returns
    -------
    DataFrame with columns kernel, n, sec, sec/NumPy, residual.
    """
    rng = np.random.default_rng(seed)
    records = []
    for n in sizes:
        A = random_spd(n, seed=rng, shift=float(n))
        b = rng.standard_normal(n)
        tol = 1e-8 * np.linalg.norm(b)

        t_np = min(wall(np.linalg.solve, A, b) for _ in range(repeats))

        kernels = {
            "CG": lambda: ConjugateGradient(A, b, max_iter=10 * n, tol=tol).solve().x,
            "GMRES": lambda: GMRES().solve(A, b, max_iter=10 * n, krylov_dim=min(n, 50), tol=tol).x,
            "LU": lambda: _lu(A, b),
        }
        for name, run in kernels.items():
            t = min(wall(run) for _ in range(repeats))
            x = run()
            res = np.linalg.norm(A @ x - b)
            records.append((name, n, t, t / t_np, res))

    return pd.DataFrame(records, columns=["kernel", "n", "sec", "sec/NumPy", "residual"])


if __name__ == "__main__":
    print(run_benchmark().to_string(index=False))
