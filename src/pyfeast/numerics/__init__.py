"""Quadrature rules, contours and search regions."""

from .contour import (
    Contour,
    Disk,
    Interval,
    as_region,
    feast_contour,
    feast_gcontour,
    feast_inside_contour,
    feast_inside_gcontour,
)
from .quadrature import gauss_angles, gauss_legendre, trapezoidal_angles

__all__ = [
    "Contour",
    "Disk",
    "Interval",
    "as_region",
    "feast_contour",
    "feast_gcontour",
    "feast_inside_contour",
    "feast_inside_gcontour",
    "gauss_angles",
    "gauss_legendre",
    "trapezoidal_angles",
]
