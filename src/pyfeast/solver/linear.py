"""Shifted linear solves ``(z B - A) X = R`` at contour nodes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import warnings

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve
from scipy.sparse import identity as sparse_identity
from scipy.sparse import issparse
from scipy.sparse.linalg import LinearOperator, gmres, splu

from pyfeast.config.parameters import SOLVER_DIRECT, SOLVER_GMRES
from pyfeast.status import LinearSolveError, SingularShiftError


@dataclass
class ShiftedSystemSolver:
    """Solve shifted systems for a fixed matrix pair.

    Direct factorizations are cached per shift when ``reuse_factorization``
    is set, so later refinement loops only pay for the triangular solves.
    One instance must not be shared between concurrently running units.
    """

    A: Any
    B: Any = None
    variant: int = SOLVER_DIRECT
    iterative_tolerance: float = 1e-6
    reuse_factorization: bool = True
    pivot_tolerance: Optional[float] = None
    iterative_max_restarts: Optional[int] = None
    _factors: Dict[complex, Any] = field(init=False, default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.variant not in (SOLVER_DIRECT, SOLVER_GMRES):
            raise ValueError(f"unknown solver variant {self.variant}.")
        self._sparse = issparse(self.A) or issparse(self.B)
        self._n = int(self.A.shape[0])

    def solve(self, shift: complex, rhs: np.ndarray) -> np.ndarray:
        rhs = np.asarray(rhs, dtype=complex)
        if self.variant == SOLVER_GMRES:
            solution = self._solve_iterative(shift, rhs)
        else:
            solution = self._solve_direct(shift, rhs)
        if not np.all(np.isfinite(solution)):
            raise SingularShiftError(f"non-finite solution at shift {shift:.6g}.")
        return solution

    def clear(self) -> None:
        self._factors.clear()

    def _shifted_matrix(self, shift: complex):
        if self._sparse:
            if self.B is None:
                B = sparse_identity(self._n, dtype=complex, format="csc")
            else:
                B = self.B
            return (shift * B - self.A).tocsc().astype(complex)
        A = np.asarray(self.A)
        if self.B is None:
            shifted = -A.astype(complex)
            shifted[np.diag_indices(self._n)] += shift
            return shifted
        return shift * np.asarray(self.B, dtype=complex) - A

    def _factorize(self, shift: complex):
        shifted = self._shifted_matrix(shift)
        if self._sparse:
            try:
                return splu(shifted)
            except RuntimeError as exc:
                raise SingularShiftError(
                    f"sparse factorization failed at shift {shift:.6g}: {exc}") from exc

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(shifted, check_finite=True)
        pivots = np.abs(np.diag(lu))
        largest = float(np.max(pivots)) if pivots.size else 0.0
        tolerance = self.pivot_tolerance
        if tolerance is None:
            tolerance = np.finfo(float).eps * self._n
        if largest == 0.0 or float(np.min(pivots)) <= tolerance * largest:
            raise SingularShiftError(f"singular shifted matrix at shift {shift:.6g}.")
        return lu, piv

    def _solve_direct(self, shift: complex, rhs: np.ndarray) -> np.ndarray:
        factor = self._factors.get(shift) if self.reuse_factorization else None
        if factor is None:
            factor = self._factorize(shift)
            if self.reuse_factorization:
                self._factors[shift] = factor
        if self._sparse:
            return factor.solve(rhs)
        return lu_solve(factor, rhs, check_finite=False)

    def _solve_iterative(self, shift: complex, rhs: np.ndarray) -> np.ndarray:
        A = self.A
        B = self.B

        def matvec(x):
            bx = x if B is None else B @ x
            return shift * bx - A @ x

        operator = LinearOperator((self._n, self._n), matvec=matvec, dtype=complex)
        block = rhs.reshape(self._n, -1)
        solution = np.empty_like(block)
        for column in range(block.shape[1]):
            x, info = gmres(operator, block[:, column], rtol=self.iterative_tolerance,
                            atol=0.0, maxiter=self.iterative_max_restarts)
            if info < 0:
                raise LinearSolveError(
                    f"GMRES breakdown at shift {shift:.6g} (info={info}).")
            if info > 0:
                raise SingularShiftError(
                    f"GMRES did not reach rtol={self.iterative_tolerance:.1e} "
                    f"at shift {shift:.6g} (info={info}).")
            solution[:, column] = x
        return solution.reshape(rhs.shape)
