"""Rayleigh-Ritz projection of the eigenproblem onto the filtered subspace."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

import numpy as np
import scipy.linalg as la

from pyfeast.matrices.storage import apply_matrix
from pyfeast.numerics.contour import Contour, Region
from pyfeast.solver.conditioning import OverlapConditioner, OverlapConditionResult


@dataclass
class RitzPairs:
    """Ritz values/vectors of one projection; ``inside`` marks the region members."""

    values: np.ndarray
    vectors: np.ndarray
    inside: np.ndarray
    conditioning: OverlapConditionResult

    @property
    def M(self) -> int:
        return int(np.count_nonzero(self.inside))

    @property
    def rank(self) -> int:
        return int(self.values.size)

    def retained(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.values[self.inside], self.vectors[:, self.inside]

    def ordered_basis(self) -> np.ndarray:
        """Ritz vectors with the region members leading."""
        return np.concatenate(
            [self.vectors[:, self.inside], self.vectors[:, ~self.inside]], axis=1)


def _hermitize(matrix: np.ndarray) -> np.ndarray:
    return 0.5 * (matrix + matrix.conj().T)


@dataclass
class SubspaceProjector:
    """Reduces ``A x = lambda B x`` to the span of a moment matrix ``Q``."""

    A: Any
    B: Any = None
    hermitian: bool = True
    conditioner: OverlapConditioner = field(default_factory=OverlapConditioner)

    def reduced_matrices(self, Q: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(Q^H A Q, Q^H B Q)``."""
        Qh = Q.conj().T
        Aq = Qh @ (self.A @ Q)
        Bq = Qh @ apply_matrix(self.B, Q)
        if self.hermitian:
            return _hermitize(Aq), _hermitize(Bq)
        return Aq, Bq

    def project(self, Q: np.ndarray, region: Region, contour: Contour) -> RitzPairs:
        if self.hermitian:
            values, vectors, info = self._project_hermitian(Q)
        else:
            values, vectors, info = self._project_general(Q)
        inside = np.asarray(region.contains(values, contour), dtype=bool).reshape(-1)
        inside &= np.isfinite(values)
        return RitzPairs(values=values, vectors=vectors, inside=inside, conditioning=info)

    def _project_hermitian(self, Q):
        Aq, Bq = self.reduced_matrices(Q)
        T, info = self.conditioner.transform(Bq)
        if info.retained_dimension == 0:
            return np.zeros(0), Q[:, :0], info
        reduced = _hermitize(T.conj().T @ Aq @ T)
        values, reduced_vectors = la.eigh(reduced)
        # B-orthonormal in the full space
        vectors = Q @ (T @ reduced_vectors)
        return values, vectors, info

    def _project_general(self, Q):
        gram = Q.conj().T @ Q
        T, info = self.conditioner.transform(gram)
        if info.retained_dimension == 0:
            return np.zeros(0, dtype=complex), Q[:, :0].astype(complex), info
        basis = Q @ T
        Ah = basis.conj().T @ (self.A @ basis)
        if self.B is None:
            values, reduced_vectors = la.eig(Ah)
        else:
            Bh = basis.conj().T @ (self.B @ basis)
            values, reduced_vectors = la.eig(Ah, Bh)
        values = values.astype(complex)
        vectors = basis @ reduced_vectors
        norms = np.linalg.norm(vectors, axis=0)
        vectors = vectors / np.where(norms > 0.0, norms, 1.0)
        order = np.lexsort((values.imag, values.real))
        return values[order], vectors[:, order], info


def compute_residuals(A, B, values: np.ndarray, vectors: np.ndarray) -> np.ndarray:
    """Relative residuals ``||A x - lambda B x|| / ||A x||`` per column.

    When ``A x`` vanishes the denominator falls back to ``|lambda| ||B x||``
    and finally to 1.
    """
    if values.size == 0:
        return np.zeros(0)
    AX = A @ vectors
    BX = apply_matrix(B, vectors)
    numerator = np.linalg.norm(AX - BX * values[np.newaxis, :], axis=0)
    denominator = np.linalg.norm(AX, axis=0)
    fallback = np.abs(values) * np.linalg.norm(BX, axis=0)
    denominator = np.where(denominator > 0.0, denominator, fallback)
    denominator = np.where(denominator > 0.0, denominator, 1.0)
    return numerator / denominator
