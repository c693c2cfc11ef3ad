"""Matrix storage adapters."""

from .storage import (
    banded_to_full,
    feast_banded_info,
    feast_sparse_info,
    full_to_banded,
    gershgorin_bounds,
    is_hermitian,
)

__all__ = [
    "banded_to_full",
    "feast_banded_info",
    "feast_sparse_info",
    "full_to_banded",
    "gershgorin_bounds",
    "is_hermitian",
]
