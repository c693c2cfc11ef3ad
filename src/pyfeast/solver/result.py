"""Immutable result of one solve call."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pyfeast.status import FeastStatus


def _frozen_copy(array) -> np.ndarray:
    copy = np.array(array, copy=True)
    copy.setflags(write=False)
    return copy


@dataclass(frozen=True)
class FeastResult:
    """Eigenpairs found inside the search region.

    ``eigenvectors`` holds one column per eigenvalue; ``residuals`` are the
    relative residuals of those pairs, ``epsout`` their maximum and
    ``loops`` the number of refinement loops performed.
    """

    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    M: int
    residuals: np.ndarray
    info: int
    epsout: float
    loops: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "eigenvalues", _frozen_copy(self.eigenvalues))
        object.__setattr__(self, "eigenvectors", _frozen_copy(self.eigenvectors))
        object.__setattr__(self, "residuals", _frozen_copy(self.residuals))
        object.__setattr__(self, "M", int(self.M))
        object.__setattr__(self, "info", int(self.info))
        object.__setattr__(self, "epsout", float(self.epsout))
        object.__setattr__(self, "loops", int(self.loops))
        if self.eigenvalues.shape != (self.M,):
            raise ValueError(
                f"expected {self.M} eigenvalues, got shape {self.eigenvalues.shape}.")
        if self.residuals.shape != (self.M,):
            raise ValueError(
                f"expected {self.M} residuals, got shape {self.residuals.shape}.")
        if self.eigenvectors.ndim != 2 or self.eigenvectors.shape[1] != self.M:
            raise ValueError(
                f"expected an N x {self.M} eigenvector block, got {self.eigenvectors.shape}.")

    @property
    def status(self) -> FeastStatus:
        return FeastStatus(self.info)

    @property
    def converged(self) -> bool:
        return self.info == FeastStatus.SUCCESS

    # classic FEAST output names
    @property
    def E(self) -> np.ndarray:
        return self.eigenvalues

    @property
    def X(self) -> np.ndarray:
        return self.eigenvectors
