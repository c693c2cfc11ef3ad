"""The 64-slot FEAST parameter array and its immutable view.

The array form (``fpm``) is kept for compatibility with the classic
interface; inside the solver every value is read from :class:`FeastConfig`.
Slots are 0-based.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Dict, Optional, Tuple

import numpy as np

from pyfeast.status import FeastInputError, FeastStatus

FPM_LENGTH = 64

SLOT_PRINT_LEVEL = 0
SLOT_NODE_COUNT = 1
SLOT_TOLERANCE_EXPONENT = 2
SLOT_MAX_LOOPS = 3
SLOT_INITIAL_GUESS = 4
SLOT_CONVERGENCE_CRITERION = 5
SLOT_SOLVER_VARIANT = 9
SLOT_ITERATIVE_TOLERANCE_EXPONENT = 10
SLOT_REUSE_FACTORIZATION = 11
SLOT_QUADRATURE = 15
SLOT_CONTOUR_SHAPE = 16
SLOT_ELLIPSE_RATIO = 17
SLOT_WORKERS = 40
SLOT_EXECUTION = 41

QUADRATURE_GAUSS = 0
QUADRATURE_TRAPEZOIDAL = 1

SHAPE_FROM_REGION = 0
SHAPE_ELLIPSE = 1
SHAPE_CIRCLE = 2

CRITERION_TRACE = 0
CRITERION_RESIDUAL = 1

SOLVER_DIRECT = 0
SOLVER_GMRES = 1

EXECUTION_SERIAL = 0
EXECUTION_THREADS = 1
EXECUTION_PROCESSES = 2

# slot -> (default, lowest valid, highest valid or None)
_SLOT_RULES: Dict[int, Tuple[int, int, Optional[int]]] = {
    SLOT_PRINT_LEVEL: (1, 0, 1),
    SLOT_NODE_COUNT: (8, 1, None),
    SLOT_TOLERANCE_EXPONENT: (12, 1, 16),
    SLOT_MAX_LOOPS: (20, 1, None),
    SLOT_INITIAL_GUESS: (0, 0, 1),
    SLOT_CONVERGENCE_CRITERION: (CRITERION_RESIDUAL, 0, 1),
    SLOT_SOLVER_VARIANT: (SOLVER_DIRECT, 0, 1),
    SLOT_ITERATIVE_TOLERANCE_EXPONENT: (6, 1, 16),
    SLOT_REUSE_FACTORIZATION: (1, 0, 1),
    SLOT_QUADRATURE: (QUADRATURE_TRAPEZOIDAL, 0, 1),
    SLOT_CONTOUR_SHAPE: (SHAPE_FROM_REGION, 0, 2),
    SLOT_ELLIPSE_RATIO: (100, 1, 1000),
    SLOT_WORKERS: (0, 0, None),
    SLOT_EXECUTION: (EXECUTION_SERIAL, 0, 2),
}


def _check_length(fpm: np.ndarray) -> None:
    if len(fpm) != FPM_LENGTH:
        raise FeastInputError(
            f"fpm must have exactly {FPM_LENGTH} entries, got {len(fpm)}.",
            FeastStatus.ERROR_FPM,
        )


def feastinit(fpm: Optional[np.ndarray] = None) -> np.ndarray:
    """Return the parameter array filled with defaults.

    When ``fpm`` is given it is overwritten in place and returned.
    """
    if fpm is None:
        fpm = np.zeros(FPM_LENGTH, dtype=np.int64)
    _check_length(fpm)
    fpm[:] = 0
    for slot, (default, _, _) in _SLOT_RULES.items():
        fpm[slot] = default
    return fpm


def feastdefault(fpm: np.ndarray) -> np.ndarray:
    """Reset every documented slot holding an out-of-range value to its default."""
    _check_length(fpm)
    for slot, (default, lowest, highest) in _SLOT_RULES.items():
        value = int(fpm[slot])
        if value < lowest or (highest is not None and value > highest):
            fpm[slot] = default
    return fpm


@dataclass(frozen=True)
class FeastConfig:
    """Named, validated view of the parameter array for one solve call."""

    print_level: int = 1
    node_count: int = 8
    tolerance_exponent: int = 12
    max_loops: int = 20
    use_initial_guess: bool = False
    convergence_criterion: int = CRITERION_RESIDUAL
    solver_variant: int = SOLVER_DIRECT
    iterative_tolerance_exponent: int = 6
    reuse_factorization: bool = True
    quadrature: int = QUADRATURE_TRAPEZOIDAL
    contour_shape: int = SHAPE_FROM_REGION
    ellipse_ratio_percent: int = 100
    workers: int = 0
    execution: int = EXECUTION_SERIAL

    @property
    def verbose(self) -> bool:
        return self.print_level > 0

    @property
    def tolerance(self) -> float:
        return 10.0 ** (-self.tolerance_exponent)

    @property
    def iterative_tolerance(self) -> float:
        return 10.0 ** (-self.iterative_tolerance_exponent)

    @property
    def ellipse_ratio(self) -> float:
        return self.ellipse_ratio_percent / 100.0

    @property
    def parallel(self) -> bool:
        return self.execution != EXECUTION_SERIAL

    @classmethod
    def from_fpm(cls, fpm: Optional[np.ndarray] = None) -> "FeastConfig":
        """Build the config from a parameter array; invalid slots fall back to defaults."""
        if fpm is None:
            source = feastinit()
        else:
            source = np.array(fpm, dtype=np.int64, copy=True)
            _check_length(source)
            # an all-zero array means "never initialised"
            if not source.any():
                feastinit(source)
            feastdefault(source)
        return cls(
            print_level=int(source[SLOT_PRINT_LEVEL]),
            node_count=int(source[SLOT_NODE_COUNT]),
            tolerance_exponent=int(source[SLOT_TOLERANCE_EXPONENT]),
            max_loops=int(source[SLOT_MAX_LOOPS]),
            use_initial_guess=bool(source[SLOT_INITIAL_GUESS]),
            convergence_criterion=int(source[SLOT_CONVERGENCE_CRITERION]),
            solver_variant=int(source[SLOT_SOLVER_VARIANT]),
            iterative_tolerance_exponent=int(
                source[SLOT_ITERATIVE_TOLERANCE_EXPONENT]),
            reuse_factorization=bool(source[SLOT_REUSE_FACTORIZATION]),
            quadrature=int(source[SLOT_QUADRATURE]),
            contour_shape=int(source[SLOT_CONTOUR_SHAPE]),
            ellipse_ratio_percent=int(source[SLOT_ELLIPSE_RATIO]),
            workers=int(source[SLOT_WORKERS]),
            execution=int(source[SLOT_EXECUTION]),
        )

    def to_fpm(self) -> np.ndarray:
        fpm = feastinit()
        fpm[SLOT_PRINT_LEVEL] = self.print_level
        fpm[SLOT_NODE_COUNT] = self.node_count
        fpm[SLOT_TOLERANCE_EXPONENT] = self.tolerance_exponent
        fpm[SLOT_MAX_LOOPS] = self.max_loops
        fpm[SLOT_INITIAL_GUESS] = int(self.use_initial_guess)
        fpm[SLOT_CONVERGENCE_CRITERION] = self.convergence_criterion
        fpm[SLOT_SOLVER_VARIANT] = self.solver_variant
        fpm[SLOT_ITERATIVE_TOLERANCE_EXPONENT] = self.iterative_tolerance_exponent
        fpm[SLOT_REUSE_FACTORIZATION] = int(self.reuse_factorization)
        fpm[SLOT_QUADRATURE] = self.quadrature
        fpm[SLOT_CONTOUR_SHAPE] = self.contour_shape
        fpm[SLOT_ELLIPSE_RATIO] = self.ellipse_ratio_percent
        fpm[SLOT_WORKERS] = self.workers
        fpm[SLOT_EXECUTION] = self.execution
        return fpm

    def resolve_worker_count(self) -> int:
        """Worker count from the config, then ``PYFEAST_WORKERS``, then the CPU count."""
        if self.workers > 0:
            return self.workers
        env_value = os.getenv("PYFEAST_WORKERS")
        if env_value:
            try:
                value = int(env_value)
                if value >= 1:
                    return value
            except ValueError:
                pass
        return max(1, os.cpu_count() or 1)
