"""Matrix storage helpers: dense/sparse/banded metadata and conversions."""
from __future__ import annotations

from typing import Any, Tuple

import numpy as np
from scipy.sparse import issparse

from pyfeast.status import FeastInputError, FeastStatus


def as_dense(matrix) -> np.ndarray:
    if issparse(matrix):
        return matrix.toarray()
    return np.asarray(matrix)


def as_operand(matrix) -> Any:
    """Sparse matrices become CSR, everything else a numpy array."""
    if issparse(matrix):
        return matrix.tocsr()
    return np.asarray(matrix)


def is_hermitian(matrix, tol: float = 1e-12) -> bool:
    """Check ``A == A^H`` up to ``tol`` relative to the largest entry."""
    if issparse(matrix):
        diff = (matrix - matrix.conj().T).tocoo()
        if diff.nnz == 0:
            return True
        scale = max(float(np.max(np.abs(matrix.tocoo().data), initial=0.0)), 1.0)
        return bool(np.all(np.abs(diff.data) <= tol * scale))
    dense = np.asarray(matrix)
    scale = max(float(np.max(np.abs(dense), initial=0.0)), 1.0)
    return bool(np.allclose(dense, dense.conj().T, rtol=0.0, atol=tol * scale))


def apply_matrix(matrix, block: np.ndarray) -> np.ndarray:
    """``matrix @ block`` where ``matrix=None`` stands for the identity."""
    if matrix is None:
        return block
    return matrix @ block


def check_square_pair(A, B=None) -> int:
    """Return ``N`` after checking that ``A`` (and ``B``) are square and matching."""
    shape = getattr(A, "shape", None)
    if shape is None or len(shape) != 2 or shape[0] != shape[1]:
        raise FeastInputError(
            f"A must be a square matrix, got shape {shape}.", FeastStatus.ERROR_MATRIX)
    if B is not None and getattr(B, "shape", None) != shape:
        raise FeastInputError(
            f"B must have the same shape as A {shape}, got {getattr(B, 'shape', None)}.",
            FeastStatus.ERROR_MATRIX,
        )
    return int(shape[0])


def feast_sparse_info(matrix) -> Tuple[int, int, float]:
    """Return ``(n, nnz, density)`` of a square sparse or dense matrix."""
    n = check_square_pair(matrix)
    if issparse(matrix):
        coo = matrix.tocoo()
        nnz = int(np.count_nonzero(coo.data))
    else:
        nnz = int(np.count_nonzero(np.asarray(matrix)))
    density = nnz / float(n * n) if n else 0.0
    return n, nnz, density


def full_to_banded(matrix, k: int) -> np.ndarray:
    """Pack the upper band of ``matrix`` into LAPACK upper band storage.

    Row ``k`` of the ``(k + 1, n)`` result holds the main diagonal and row
    ``k - d`` the ``d``-th superdiagonal, right-aligned.
    """
    dense = as_dense(matrix)
    n = check_square_pair(dense)
    if k < 0 or k >= max(n, 1):
        raise ValueError(f"bandwidth k must satisfy 0 <= k < n, got k={k}, n={n}.")
    banded = np.zeros((k + 1, n), dtype=dense.dtype)
    for d in range(k + 1):
        banded[k - d, d:] = np.diagonal(dense, offset=d)
    return banded


def banded_to_full(banded: np.ndarray, k: int, n: int, *, hermitian: bool = True) -> np.ndarray:
    """Expand upper band storage back to a full ``(n, n)`` matrix.

    The strict lower triangle is filled with the conjugate of the upper band
    unless ``hermitian=False``.
    """
    banded = np.asarray(banded)
    if banded.shape != (k + 1, n):
        raise ValueError(f"expected banded shape {(k + 1, n)}, got {banded.shape}.")
    full = np.zeros((n, n), dtype=banded.dtype)
    for d in range(k + 1):
        diagonal = banded[k - d, d:]
        full += np.diag(diagonal, d)
        if hermitian and d > 0:
            full += np.diag(np.conj(diagonal), -d)
    return full


def feast_banded_info(banded: np.ndarray, k: int, n: int) -> Tuple[int, int, int]:
    """Return ``(n, bandwidth, nnz)``; bandwidth is ``2k + 1`` for symmetric storage."""
    banded = np.asarray(banded)
    if banded.shape != (k + 1, n):
        raise ValueError(f"expected banded shape {(k + 1, n)}, got {banded.shape}.")
    nnz = int(np.count_nonzero(banded))
    return n, 2 * k + 1, nnz


def gershgorin_bounds(matrix) -> Tuple[float, float]:
    """Real enclosure of the spectrum from Gershgorin discs."""
    if issparse(matrix):
        csr = matrix.tocsr()
        diagonal = csr.diagonal()
        row_abs = np.asarray(abs(csr).sum(axis=1)).ravel()
    else:
        dense = np.asarray(matrix)
        diagonal = np.diagonal(dense)
        row_abs = np.abs(dense).sum(axis=1)
    radii = row_abs - np.abs(diagonal)
    centers = np.real(diagonal)
    return float(np.min(centers - radii)), float(np.max(centers + radii))
