"""Status codes and exception types shared across the solver."""
from __future__ import annotations

from enum import IntEnum


class FeastStatus(IntEnum):
    """Closed set of ``info`` codes reported by :func:`pyfeast.feast`."""

    SUCCESS = 0
    ERROR_N = 1
    ERROR_M0 = 2
    ERROR_INTERVAL = 3
    ERROR_FPM = 4
    ERROR_MATRIX = 5
    NO_EIGENVALUES = 6
    NOT_CONVERGED = 7
    SUBSPACE_TOO_SMALL = 8
    LINEAR_SOLVE_FAILED = 9
    SUBSPACE_COLLAPSED = 10

    @property
    def is_error(self) -> bool:
        return self in _FATAL

    @property
    def is_warning(self) -> bool:
        return self in _WARNINGS

    def describe(self) -> str:
        return _DESCRIPTIONS[self]


_WARNINGS = frozenset({
    FeastStatus.NO_EIGENVALUES,
    FeastStatus.NOT_CONVERGED,
    FeastStatus.SUBSPACE_TOO_SMALL,
})

_FATAL = frozenset({
    FeastStatus.ERROR_N,
    FeastStatus.ERROR_M0,
    FeastStatus.ERROR_INTERVAL,
    FeastStatus.ERROR_FPM,
    FeastStatus.ERROR_MATRIX,
    FeastStatus.LINEAR_SOLVE_FAILED,
    FeastStatus.SUBSPACE_COLLAPSED,
})

_DESCRIPTIONS = {
    FeastStatus.SUCCESS: "successful exit",
    FeastStatus.ERROR_N: "problem size N must be positive",
    FeastStatus.ERROR_M0: "subspace size M0 must satisfy 0 < M0 <= N",
    FeastStatus.ERROR_INTERVAL: "search region is empty or malformed",
    FeastStatus.ERROR_FPM: "parameter array is malformed",
    FeastStatus.ERROR_MATRIX: "matrix shapes are inconsistent",
    FeastStatus.NO_EIGENVALUES: "no eigenvalue found in the search region",
    FeastStatus.NOT_CONVERGED: "maximum number of refinement loops reached",
    FeastStatus.SUBSPACE_TOO_SMALL: "every Ritz value lies inside the region; M0 may be too small",
    FeastStatus.LINEAR_SOLVE_FAILED: "shifted linear system is singular at a contour node",
    FeastStatus.SUBSPACE_COLLAPSED: "search subspace lost all numerical rank",
}


FEAST_SUCCESS = FeastStatus.SUCCESS
FEAST_ERROR_N = FeastStatus.ERROR_N
FEAST_ERROR_M0 = FeastStatus.ERROR_M0
FEAST_ERROR_INTERVAL = FeastStatus.ERROR_INTERVAL
FEAST_ERROR_FPM = FeastStatus.ERROR_FPM


class FeastError(Exception):
    """Base class for errors raised by the solver."""

    def __init__(self, message: str, status: FeastStatus) -> None:
        super().__init__(message)
        self.status = FeastStatus(status)

    def __reduce__(self):
        # keeps the status when errors cross a process boundary
        return type(self), (str(self), self.status)


class FeastInputError(FeastError, ValueError):
    """Precondition violation detected before any numerical work."""


class FeastRuntimeError(FeastError, RuntimeError):
    """Fatal numerical failure inside the refinement loop."""


class LinearSolveError(FeastError, RuntimeError):
    """A shifted system could not be solved at a contour node."""

    def __init__(self, message: str, node_index: int | None = None) -> None:
        super().__init__(message, FeastStatus.LINEAR_SOLVE_FAILED)
        self.node_index = node_index

    def __reduce__(self):
        return type(self), (str(self), self.node_index)


class SingularShiftError(LinearSolveError):
    """``z B - A`` is numerically singular at the requested shift."""
