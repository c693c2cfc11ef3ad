"""Contour-integration (FEAST) eigensolver for dense and sparse matrices."""

from pyfeast.config import FeastConfig, feastdefault, feastinit
from pyfeast.matrices import (
    banded_to_full,
    feast_banded_info,
    feast_sparse_info,
    full_to_banded,
)
from pyfeast.numerics import (
    Contour,
    Disk,
    Interval,
    feast_contour,
    feast_gcontour,
    feast_inside_contour,
    feast_inside_gcontour,
)
from pyfeast.parallel import ContourChunk, ParallelFeastState, distribute_contour_points
from pyfeast.reporting import feast_memory_estimate, feast_name, feast_summary
from pyfeast.solver import FeastResult, feast
from pyfeast.status import (
    FEAST_ERROR_FPM,
    FEAST_ERROR_INTERVAL,
    FEAST_ERROR_M0,
    FEAST_ERROR_N,
    FEAST_SUCCESS,
    FeastError,
    FeastInputError,
    FeastRuntimeError,
    FeastStatus,
)
from pyfeast.validation import (
    check_feast_gcontour_input,
    check_feast_input,
    check_feast_srci_input,
    feast_validate_interval,
)
from pyfeast.validation.benchmarks import pfeast_benchmark

__version__ = "0.1.0"

__all__ = [
    "FeastConfig",
    "feastdefault",
    "feastinit",
    "banded_to_full",
    "feast_banded_info",
    "feast_sparse_info",
    "full_to_banded",
    "Contour",
    "Disk",
    "Interval",
    "feast_contour",
    "feast_gcontour",
    "feast_inside_contour",
    "feast_inside_gcontour",
    "ContourChunk",
    "ParallelFeastState",
    "distribute_contour_points",
    "feast_memory_estimate",
    "feast_name",
    "feast_summary",
    "FeastResult",
    "feast",
    "FEAST_ERROR_FPM",
    "FEAST_ERROR_INTERVAL",
    "FEAST_ERROR_M0",
    "FEAST_ERROR_N",
    "FEAST_SUCCESS",
    "FeastError",
    "FeastInputError",
    "FeastRuntimeError",
    "FeastStatus",
    "check_feast_gcontour_input",
    "check_feast_input",
    "check_feast_srci_input",
    "feast_validate_interval",
    "pfeast_benchmark",
]
