"""Input checks, convergence tracking and benchmarks."""

from .convergence import ConvergenceTracker, relative_change
from .inputs import (
    check_feast_gcontour_input,
    check_feast_input,
    check_feast_srci_input,
    feast_validate_interval,
)

__all__ = [
    "ConvergenceTracker",
    "relative_change",
    "check_feast_gcontour_input",
    "check_feast_input",
    "check_feast_srci_input",
    "feast_validate_interval",
]
