"""Distribution of contour work across execution units."""

from .distribution import ContourChunk, distribute_contour_points
from .state import ParallelFeastState

__all__ = [
    "ContourChunk",
    "distribute_contour_points",
    "ParallelFeastState",
]
