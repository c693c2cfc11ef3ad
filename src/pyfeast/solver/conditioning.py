"""Canonical orthonormalization of the reduced overlap matrix."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class OverlapConditionResult:
    """Conditioning metadata for logging or inspection."""

    retained_dimension: int
    discarded_dimension: int
    min_kept_eigenvalue: float
    max_kept_eigenvalue: float


@dataclass
class OverlapConditioner:
    """Build ``T`` with ``T^H S T = I`` over the numerically non-null part of ``S``.

    Directions whose overlap eigenvalue falls below ``tolerance`` times the
    largest one are discarded, which removes the rank deficiency the
    contour filter leaves in an oversized search subspace.
    """

    tolerance: float = 1e-12

    def transform(self, overlap: np.ndarray) -> tuple[np.ndarray, OverlapConditionResult]:
        size = overlap.shape[0]
        hermitian = 0.5 * (overlap + overlap.conj().T)
        eigvals, eigvecs = np.linalg.eigh(hermitian)
        largest = float(eigvals[-1]) if size else 0.0
        if not np.isfinite(largest) or largest <= 0.0:
            return np.zeros((size, 0), dtype=overlap.dtype), OverlapConditionResult(
                retained_dimension=0,
                discarded_dimension=size,
                min_kept_eigenvalue=float("nan"),
                max_kept_eigenvalue=float("nan"),
            )

        mask = eigvals > self.tolerance * largest
        kept_eigvals = eigvals[mask]
        # largest overlap directions first
        kept_eigvecs = eigvecs[:, mask][:, ::-1]
        kept_eigvals = kept_eigvals[::-1]
        transform = kept_eigvecs / np.sqrt(kept_eigvals)

        retained = int(kept_eigvals.size)
        return transform, OverlapConditionResult(
            retained_dimension=retained,
            discarded_dimension=size - retained,
            min_kept_eigenvalue=float(np.min(kept_eigvals)),
            max_kept_eigenvalue=float(np.max(kept_eigvals)),
        )
