"""Angular quadrature rules used to discretise the contour integral."""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np


def gauss_legendre(n: int, tol: float = 1e-15) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``n``-point Gauss-Legendre nodes and weights on ``[-1, 1]``.

    Nodes come out in ascending order. Roots are refined by Newton's method
    on the three-term recurrence, starting from the Tricomi estimate.
    """
    if n <= 0:
        raise ValueError("n must be a positive integer.")

    nodes = np.zeros(n, dtype=float)
    weights = np.zeros(n, dtype=float)

    for i in range((n + 1) // 2):
        x = math.cos(math.pi * (i + 0.75) / (n + 0.5))
        derivative = 0.0
        for _ in range(100):
            p_prev, p_curr = 1.0, x
            for k in range(2, n + 1):
                p_prev, p_curr = p_curr, ((2 * k - 1) * x * p_curr - (k - 1) * p_prev) / k
            derivative = n * (p_prev - x * p_curr) / (1.0 - x * x)
            step = p_curr / derivative
            x -= step
            if abs(step) < tol:
                break

        if derivative == 0.0:
            raise RuntimeError("Gauss-Legendre root iteration did not converge.")

        weight = 2.0 / ((1.0 - x * x) * derivative * derivative)
        nodes[i], nodes[n - 1 - i] = -x, x
        weights[i] = weights[n - 1 - i] = weight

    return nodes, weights


def trapezoidal_angles(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Midpoint angles ``2*pi*(k + 1/2)/n`` and their equal weights over one turn."""
    if n <= 0:
        raise ValueError("n must be a positive integer.")
    angles = 2.0 * np.pi * (np.arange(n, dtype=float) + 0.5) / n
    weights = np.full(n, 2.0 * np.pi / n)
    return angles, weights


def gauss_angles(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Gauss-Legendre angles over one turn, split between the two half-turns.

    The upper half ``(0, pi)`` receives ``ceil(n/2)`` nodes and the lower half
    ``(pi, 2*pi)`` the rest, so an even ``n`` gives a node set that is
    symmetric under reflection through the horizontal axis.
    """
    if n <= 0:
        raise ValueError("n must be a positive integer.")
    upper = (n + 1) // 2
    lower = n // 2

    angle_parts = []
    weight_parts = []
    for count, offset in ((upper, 0.0), (lower, np.pi)):
        if count == 0:
            continue
        x, w = gauss_legendre(count)
        angle_parts.append(offset + 0.5 * np.pi * (x + 1.0))
        weight_parts.append(0.5 * np.pi * w)
    return np.concatenate(angle_parts), np.concatenate(weight_parts)
