"""Contour-integral eigensolver."""

from .driver import feast
from .linear import ShiftedSystemSolver
from .moments import AccumulatorPayload, ChunkMoments, MomentAccumulator
from .projection import SubspaceProjector, compute_residuals
from .conditioning import OverlapConditioner
from .controller import ControllerState, ConvergenceController
from .result import FeastResult

__all__ = [
    "feast",
    "ShiftedSystemSolver",
    "AccumulatorPayload",
    "ChunkMoments",
    "MomentAccumulator",
    "SubspaceProjector",
    "compute_residuals",
    "OverlapConditioner",
    "ControllerState",
    "ConvergenceController",
    "FeastResult",
]
