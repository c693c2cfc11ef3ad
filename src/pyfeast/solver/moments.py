"""Moment accumulation: the per-node kernel of the contour integral."""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Dict

import numpy as np

from pyfeast.numerics.contour import Contour
from pyfeast.parallel.distribution import ContourChunk
from pyfeast.solver.linear import ShiftedSystemSolver
from pyfeast.status import LinearSolveError, SingularShiftError


@dataclass
class ChunkMoments:
    """Output of one chunk: weighted solutions keyed by node index."""

    chunk_id: int
    contributions: Dict[int, np.ndarray]
    perturbed_nodes: int
    time_solve: float


@dataclass
class MomentAccumulator:
    """Owns the shifted solves for the nodes of a single chunk."""

    chunk: ContourChunk
    solver: ShiftedSystemSolver
    perturbation: float = 0.25

    def accumulate(self, contour: Contour, rhs: np.ndarray) -> ChunkMoments:
        """Solve ``(z_k B - A) X_k = rhs`` and return ``w_k X_k`` for every owned node.

        A singular shift is retried once with the node moved along the
        contour; a second failure raises :class:`LinearSolveError`.
        """
        contributions: Dict[int, np.ndarray] = {}
        perturbed = 0
        t_start = time.perf_counter()
        for index in self.chunk.indices:
            shift = complex(contour.nodes[index])
            weight = complex(contour.weights[index])
            try:
                solution = self.solver.solve(shift, rhs)
            except SingularShiftError:
                shift, weight = contour.perturbed(index, self.perturbation)
                try:
                    solution = self.solver.solve(shift, rhs)
                except SingularShiftError as exc:
                    raise LinearSolveError(
                        f"contour node {index} is singular even after perturbation: {exc}",
                        node_index=index,
                    ) from exc
                perturbed += 1
            contributions[index] = weight * solution
        return ChunkMoments(
            chunk_id=self.chunk.chunk_id,
            contributions=contributions,
            perturbed_nodes=perturbed,
            time_solve=time.perf_counter() - t_start,
        )


@dataclass
class AccumulatorPayload:
    """Everything an execution unit needs to build its own accumulators."""

    A: Any
    B: Any
    variant: int
    iterative_tolerance: float
    reuse_factorization: bool
    perturbation: float = 0.25

    def make_accumulator(self, chunk: ContourChunk) -> MomentAccumulator:
        solver = ShiftedSystemSolver(
            self.A,
            self.B,
            variant=self.variant,
            iterative_tolerance=self.iterative_tolerance,
            reuse_factorization=self.reuse_factorization,
        )
        return MomentAccumulator(chunk=chunk, solver=solver, perturbation=self.perturbation)
