"""The FEAST refinement loop.

Each loop filters the search subspace through the discretised contour
integral, projects the problem onto the filtered subspace and decides
whether to stop. States run ``INIT -> ITERATING`` and end in ``CONVERGED``,
``MAX_ITER_REACHED`` (reported through ``info``) or ``FAILED`` (raised).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Any, Optional

import numpy as np

from pyfeast.config.parameters import CRITERION_TRACE, FeastConfig
from pyfeast.matrices.storage import apply_matrix
from pyfeast.numerics.contour import Contour, Region
from pyfeast.parallel.distribution import distribute_contour_points
from pyfeast.parallel.executors import ContourExecutor
from pyfeast.parallel.state import ParallelFeastState
from pyfeast.solver.projection import RitzPairs, SubspaceProjector, compute_residuals
from pyfeast.solver.result import FeastResult
from pyfeast.status import FeastRuntimeError, FeastStatus, LinearSolveError
from pyfeast.validation.convergence import ConvergenceTracker


class ControllerState(Enum):
    INIT = "init"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITER_REACHED = "max_iter_reached"
    FAILED = "failed"


@dataclass
class _LoopTimings:
    solve: float = 0.0
    reduce: float = 0.0
    project: float = 0.0
    perturbed_nodes: int = 0


@dataclass
class ConvergenceController:
    """Drives the refinement loop for one solve call."""

    A: Any
    B: Any
    region: Region
    config: FeastConfig
    m0: int
    executor: ContourExecutor
    hermitian: bool = True
    real_arithmetic: bool = False
    seed: Optional[int] = 0
    state: ControllerState = field(init=False, default=ControllerState.INIT)
    tracker: ConvergenceTracker = field(init=False, default_factory=ConvergenceTracker)

    def __post_init__(self) -> None:
        self._n = int(self.A.shape[0])
        self._rng = np.random.default_rng(self.seed)
        self._projector = SubspaceProjector(self.A, self.B, hermitian=self.hermitian)

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(message)

    def _fail(self, message: str, status: FeastStatus, cause: Exception | None = None):
        self.state = ControllerState.FAILED
        self._log(f"FEAST failed: {message}")
        raise FeastRuntimeError(message, status) from cause

    def run(self, initial_subspace: np.ndarray) -> FeastResult:
        contour = self.region.contour(self.config)
        chunks = distribute_contour_points(len(contour), self.executor.workers)
        # conjugate Ritz pairs of a real non-Hermitian problem share one real part
        real = self.real_arithmetic and self.hermitian and contour.is_conjugate_symmetric
        moments = ParallelFeastState(
            total_points=len(contour),
            m0=self.m0,
            use_parallel=self.executor.use_parallel,
            use_threads=self.executor.use_threads,
            dtype=complex,
        )
        timings = _LoopTimings()
        time_start = time.perf_counter()

        self._log(
            f"FEAST: N={self._n}, M0={self.m0}, nodes={len(contour)}, "
            f"chunks={len(chunks)}, tol={self.config.tolerance:.1e}, "
            f"{'hermitian' if self.hermitian else 'non-hermitian'}"
        )

        Y = initial_subspace
        ritz: Optional[RitzPairs] = None
        values = np.zeros(0)
        vectors = np.zeros((self._n, 0))
        residuals = np.zeros(0)
        self.state = ControllerState.ITERATING

        for loop in range(1, self.config.max_loops + 1):
            Q = self._filter(Y, contour, chunks, moments, real, timings)

            t_project = time.perf_counter()
            ritz = self._projector.project(Q, self.region, contour)
            if ritz.rank == 0:
                self._fail("the filtered subspace has no numerical rank left.",
                           FeastStatus.SUBSPACE_COLLAPSED)
            values, vectors = ritz.retained()
            residuals = compute_residuals(self.A, self.B, values, vectors)
            timings.project += time.perf_counter() - t_project

            self.tracker.record(ritz.M, values, residuals)
            self._log(
                f"  loop {loop:3d}  M={ritz.M:4d}  rank={ritz.rank:4d}  "
                f"trace={_format_trace(self.tracker.traces[-1], self.hermitian)}  "
                f"max residual={self.tracker.latest_residual():.3e}"
            )

            if ritz.M == 0 and loop == 1:
                self.state = ControllerState.CONVERGED
                break
            if self._converged():
                self.state = ControllerState.CONVERGED
                break
            Y = self._next_subspace(ritz, real)
        else:
            self.state = ControllerState.MAX_ITER_REACHED

        info = self._final_status(ritz)
        elapsed = time.perf_counter() - time_start
        self._report(info, elapsed, timings)
        return FeastResult(
            eigenvalues=values,
            eigenvectors=vectors,
            M=values.size,
            residuals=residuals,
            info=info,
            epsout=self.tracker.latest_residual() if values.size else 0.0,
            loops=self.tracker.loops,
        )

    def _filter(self, Y, contour: Contour, chunks, moments: ParallelFeastState, real: bool,
                timings: _LoopTimings) -> np.ndarray:
        rhs = apply_matrix(self.B, Y)
        t_solve = time.perf_counter()
        try:
            results = self.executor.run(chunks, contour, rhs)
        except LinearSolveError as exc:
            moments.reset()
            self._fail(str(exc), FeastStatus.LINEAR_SOLVE_FAILED, exc)
        timings.solve += time.perf_counter() - t_solve

        t_reduce = time.perf_counter()
        for chunk_result in results:
            moments.store(chunk_result.contributions)
            timings.perturbed_nodes += chunk_result.perturbed_nodes
        Q = moments.reduce()
        if real:
            Q = np.ascontiguousarray(Q.real)
        timings.reduce += time.perf_counter() - t_reduce

        if not np.all(np.isfinite(Q)):
            self._fail("non-finite entries in the moment matrix.",
                       FeastStatus.SUBSPACE_COLLAPSED)
        return Q

    def _converged(self) -> bool:
        if not self.tracker.count_stable:
            return False
        if self.config.convergence_criterion == CRITERION_TRACE:
            change = self.tracker.trace_change()
            return change is not None and change < self.config.tolerance
        return self.tracker.latest_residual() < self.config.tolerance

    def _next_subspace(self, ritz: RitzPairs, real: bool) -> np.ndarray:
        """Region members first, then the other Ritz vectors, refilled to width M0."""
        basis = ritz.ordered_basis()
        if real:
            basis = basis.real
        missing = self.m0 - basis.shape[1]
        if missing > 0:
            filler = self._rng.standard_normal((self._n, missing))
            basis = np.concatenate([basis, filler.astype(basis.dtype)], axis=1)
        return basis[:, :self.m0]

    def _final_status(self, ritz: Optional[RitzPairs]) -> FeastStatus:
        M = 0 if ritz is None else ritz.M
        if M == 0:
            return FeastStatus.NO_EIGENVALUES
        if self.state is ControllerState.MAX_ITER_REACHED:
            return FeastStatus.NOT_CONVERGED
        if M >= self.m0 and self.m0 < self._n:
            return FeastStatus.SUBSPACE_TOO_SMALL
        return FeastStatus.SUCCESS

    def _report(self, info: FeastStatus, elapsed: float, timings: _LoopTimings) -> None:
        if not self.config.verbose:
            return
        print(f"FEAST finished: {info.describe()} (info={int(info)}), "
              f"{self.tracker.loops} loop(s)")
        if timings.perturbed_nodes:
            print(f"  perturbed contour nodes : {timings.perturbed_nodes}")
        if elapsed > 0.0:
            print("--- FEAST timing (seconds) ---")
            print(f"  Shifted solves    : {timings.solve:10.3f} ({timings.solve / elapsed:6.2%})")
            print(f"  Reduction         : {timings.reduce:10.3f} ({timings.reduce / elapsed:6.2%})")
            print(f"  Projection        : {timings.project:10.3f} ({timings.project / elapsed:6.2%})")
            print(f"  Total elapsed     : {elapsed:10.3f} (100.00%)")


def _format_trace(trace: complex, hermitian: bool) -> str:
    if hermitian:
        return f"{trace.real:.12e}"
    return f"{trace.real:.6e}{trace.imag:+.6e}j"
