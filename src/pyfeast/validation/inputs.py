"""Precondition checks run before any numerical work."""
from __future__ import annotations

from typing import Tuple

import numpy as np

from pyfeast.config.parameters import FPM_LENGTH
from pyfeast.matrices.storage import gershgorin_bounds
from pyfeast.status import FeastInputError, FeastStatus


def _check_sizes(N: int, M0: int, fpm) -> None:
    if N <= 0:
        raise FeastInputError(f"N must be positive, got {N}.", FeastStatus.ERROR_N)
    if M0 <= 0 or M0 > N:
        raise FeastInputError(
            f"M0 must satisfy 0 < M0 <= N={N}, got {M0}.", FeastStatus.ERROR_M0)
    if fpm is None or len(fpm) != FPM_LENGTH:
        length = None if fpm is None else len(fpm)
        raise FeastInputError(
            f"fpm must have exactly {FPM_LENGTH} entries, got {length}.",
            FeastStatus.ERROR_FPM,
        )


def check_feast_input(N: int, M0: int, emin: float, emax: float, fpm) -> bool:
    """Validate a real-interval search; returns ``True`` or raises :class:`FeastInputError`."""
    _check_sizes(N, M0, fpm)
    if not emin < emax:
        raise FeastInputError(
            f"Emin must be smaller than Emax, got [{emin}, {emax}].",
            FeastStatus.ERROR_INTERVAL,
        )
    return True


check_feast_srci_input = check_feast_input


def check_feast_gcontour_input(N: int, M0: int, center: complex, radius: float, fpm) -> bool:
    """Validate a complex-disk search."""
    _check_sizes(N, M0, fpm)
    if not np.isfinite(center) or not radius > 0:
        raise FeastInputError(
            f"disk needs a finite center and positive radius, got ({center}, {radius}).",
            FeastStatus.ERROR_INTERVAL,
        )
    return True


def feast_validate_interval(A, interval: Tuple[float, float]) -> Tuple[float, float]:
    """Clamp ``interval`` to the Gershgorin enclosure of ``A``'s spectrum.

    An interval lying entirely outside the enclosure is returned unchanged
    so the caller still gets an empty, not an inverted, search.
    """
    emin, emax = float(interval[0]), float(interval[1])
    if not emin < emax:
        raise FeastInputError(
            f"Emin must be smaller than Emax, got [{emin}, {emax}].",
            FeastStatus.ERROR_INTERVAL,
        )
    lower, upper = gershgorin_bounds(A)
    lo = max(emin, lower)
    hi = min(emax, upper)
    if lo >= hi:
        return emin, emax
    return lo, hi
