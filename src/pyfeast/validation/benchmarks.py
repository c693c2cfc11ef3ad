"""
Serial versus parallel timing and agreement checks.
"""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Dict, Iterable

import numpy as np

from pyfeast.config.parameters import SLOT_PRINT_LEVEL, feastinit
from pyfeast.solver.driver import feast
from pyfeast.solver.result import FeastResult


@dataclass
class BenchmarkRun:
    label: str
    workers: int
    seconds: float
    M: int
    info: int
    max_deviation: float


def _max_deviation(reference: FeastResult, other: FeastResult) -> float:
    if reference.M != other.M:
        return float("inf")
    if reference.M == 0:
        return 0.0
    return float(np.max(np.abs(np.sort_complex(reference.eigenvalues.astype(complex))
                               - np.sort_complex(other.eigenvalues.astype(complex)))))


def pfeast_benchmark(A, B, interval, M0: int, *, worker_counts: Iterable[int] = (2, 4),
                     use_threads: bool = True, fpm=None, tol: float = 1e-8,
                     verbose: bool = True) -> Dict[str, BenchmarkRun]:
    """Time one serial and several parallel solves of the same problem.

    Each parallel run is compared with the serial one: eigenvalue counts must
    match and eigenvalues agree within ``tol``. Results are printed as
    ``[PASS]``/``[WARN]`` lines and returned keyed by run label.
    """
    if fpm is None:
        fpm = feastinit()
        fpm[SLOT_PRINT_LEVEL] = 0

    runs: Dict[str, BenchmarkRun] = {}

    t0 = time.perf_counter()
    reference = feast(A, interval, B, M0=M0, fpm=fpm, parallel=False)
    runs["serial"] = BenchmarkRun("serial", 1, time.perf_counter() - t0,
                                  reference.M, reference.info, 0.0)

    kind = "threads" if use_threads else "processes"
    for count in worker_counts:
        label = f"{kind}x{count}"
        t0 = time.perf_counter()
        result = feast(A, interval, B, M0=M0, fpm=fpm, parallel=True,
                       use_threads=use_threads, workers=count)
        runs[label] = BenchmarkRun(label, count, time.perf_counter() - t0,
                                   result.M, result.info, _max_deviation(reference, result))

    if verbose:
        serial_time = runs["serial"].seconds
        for run in runs.values():
            status = "PASS" if run.max_deviation <= tol else "WARN"
            speedup = serial_time / run.seconds if run.seconds > 0 else float("nan")
            print(f"[{status}] {run.label:>14s}: {run.seconds:8.3f} s, "
                  f"speedup={speedup:5.2f}, M={run.M}, info={run.info}, "
                  f"max|dE|={run.max_deviation:.2e}")
    return runs
