"""Integration contours and search regions.

A contour is the ellipse ``z(t) = c + a cos t + i b sin t`` sampled at the
angles of a quadrature rule. The weight attached to node ``z_k`` is
``z'(t_k) q_k / (2 pi i)``, so that ``sum_k w_k f(z_k)`` approximates
``(1 / 2 pi i)`` times the closed contour integral of ``f``. With
``f(z) = (z B - A)^{-1} B`` the sum approximates the spectral projector onto
the eigenvectors whose eigenvalues are enclosed by the curve.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from pyfeast.config.parameters import (
    QUADRATURE_GAUSS,
    SHAPE_CIRCLE,
    FeastConfig,
)
from pyfeast.numerics.quadrature import gauss_angles, trapezoidal_angles
from pyfeast.status import FeastInputError, FeastStatus


@dataclass(frozen=True)
class Contour:
    """Quadrature nodes (``Zne``) and weights (``Wne``) on an ellipse."""

    center: complex
    semi_major: float
    semi_minor: float
    angles: np.ndarray
    angular_weights: np.ndarray
    nodes: np.ndarray
    weights: np.ndarray

    @property
    def Zne(self) -> np.ndarray:
        return self.nodes

    @property
    def Wne(self) -> np.ndarray:
        return self.weights

    def __len__(self) -> int:
        return int(self.nodes.size)

    @property
    def is_conjugate_symmetric(self) -> bool:
        """True when the node/weight set is closed under complex conjugation."""
        if self.center.imag != 0.0:
            return False
        order = np.argsort(self.angles)
        mirrored = np.argsort(np.mod(2.0 * np.pi - self.angles, 2.0 * np.pi))
        return bool(
            np.allclose(self.nodes[order], np.conj(self.nodes[mirrored]))
            and np.allclose(self.weights[order], np.conj(self.weights[mirrored]))
        )

    def point(self, angle: float) -> Tuple[complex, complex]:
        """Curve point and derivative ``(z(t), z'(t))`` at angle ``t``."""
        cos_t = np.cos(angle)
        sin_t = np.sin(angle)
        z = self.center + self.semi_major * cos_t + 1j * self.semi_minor * sin_t
        dz = -self.semi_major * sin_t + 1j * self.semi_minor * cos_t
        return complex(z), complex(dz)

    def perturbed(self, index: int, fraction: float = 0.25) -> Tuple[complex, complex]:
        """Node ``index`` moved along the curve by ``fraction`` of its angular spacing."""
        angle = float(self.angles[index]) + fraction * float(self.angular_weights[index])
        z, dz = self.point(angle)
        return z, _weight(dz, float(self.angular_weights[index]))


def _weight(dz, q):
    return dz * q / (2j * np.pi)


def _build(center: complex, semi_major: float, semi_minor: float, config: FeastConfig) -> Contour:
    if config.node_count <= 0:
        raise FeastInputError(
            f"contour node count must be positive, got {config.node_count}.",
            FeastStatus.ERROR_FPM,
        )
    if config.quadrature == QUADRATURE_GAUSS:
        angles, q = gauss_angles(config.node_count)
    else:
        angles, q = trapezoidal_angles(config.node_count)

    cos_t = np.cos(angles)
    sin_t = np.sin(angles)
    nodes = center + semi_major * cos_t + 1j * semi_minor * sin_t
    derivative = -semi_major * sin_t + 1j * semi_minor * cos_t
    weights = _weight(derivative, q)

    for array in (angles, q, nodes, weights):
        array.setflags(write=False)
    return Contour(
        center=complex(center),
        semi_major=float(semi_major),
        semi_minor=float(semi_minor),
        angles=angles,
        angular_weights=q,
        nodes=nodes,
        weights=weights,
    )


def _as_config(fpm) -> FeastConfig:
    if isinstance(fpm, FeastConfig):
        return fpm
    return FeastConfig.from_fpm(fpm)


def feast_contour(emin: float, emax: float, fpm=None) -> Contour:
    """Elliptical contour whose major axis is the real segment ``[emin, emax]``."""
    config = _as_config(fpm)
    if not emin < emax:
        raise FeastInputError(
            f"Emin must be smaller than Emax, got [{emin}, {emax}].",
            FeastStatus.ERROR_INTERVAL,
        )
    semi_major = 0.5 * (emax - emin)
    ratio = 1.0 if config.contour_shape == SHAPE_CIRCLE else config.ellipse_ratio
    return _build(0.5 * (emin + emax), semi_major, semi_major * ratio, config)


def feast_gcontour(center: complex, radius: float, fpm=None) -> Contour:
    """Circular contour of the given ``center`` and ``radius``."""
    config = _as_config(fpm)
    if not radius > 0:
        raise FeastInputError(
            f"radius must be positive, got {radius}.", FeastStatus.ERROR_INTERVAL)
    return _build(complex(center), float(radius), float(radius), config)


def _as_scalar_or_array(mask):
    if np.ndim(mask) == 0:
        return bool(mask)
    return mask


def feast_inside_contour(values, emin: float, emax: float, ratio: float = 1.0):
    """Strict containment in the interval ``(emin, emax)``.

    Complex values are tested against the interior of the ellipse built on
    the interval with minor/major axis ``ratio``.
    """
    values = np.asarray(values)
    center = 0.5 * (emin + emax)
    semi_major = 0.5 * (emax - emin)
    x = (values.real - center) / semi_major
    if np.iscomplexobj(values):
        y = values.imag / (semi_major * ratio)
    else:
        y = 0.0
    return _as_scalar_or_array(x * x + y * y < 1.0)


def feast_inside_gcontour(values, center: complex, radius: float):
    """Containment in the closed disk ``|value - center| <= radius``."""
    return _as_scalar_or_array(np.abs(np.asarray(values) - center) <= radius)


@dataclass(frozen=True)
class Interval:
    """Real search interval ``[emin, emax]``."""

    emin: float
    emax: float

    def contour(self, config: FeastConfig) -> Contour:
        return feast_contour(self.emin, self.emax, config)

    def contains(self, values, contour: Contour):
        ratio = contour.semi_minor / contour.semi_major
        return feast_inside_contour(values, self.emin, self.emax, ratio)

    def validate(self) -> None:
        if not (np.isfinite(self.emin) and np.isfinite(self.emax)) or not self.emin < self.emax:
            raise FeastInputError(
                f"Emin must be smaller than Emax, got [{self.emin}, {self.emax}].",
                FeastStatus.ERROR_INTERVAL,
            )


@dataclass(frozen=True)
class Disk:
    """Complex search disk ``|z - center| <= radius``."""

    center: complex
    radius: float

    def contour(self, config: FeastConfig) -> Contour:
        return feast_gcontour(self.center, self.radius, config)

    def contains(self, values, contour: Contour):
        return feast_inside_gcontour(values, self.center, self.radius)

    def validate(self) -> None:
        if not np.isfinite(self.radius) or not self.radius > 0:
            raise FeastInputError(
                f"radius must be positive, got {self.radius}.", FeastStatus.ERROR_INTERVAL)


Region = Union[Interval, Disk]


def as_region(region) -> Region:
    """Coerce a region argument.

    ``Interval``/``Disk`` pass through; a pair whose first entry is complex is
    read as ``(center, radius)``, any other pair as ``(emin, emax)``.
    """
    if isinstance(region, (Interval, Disk)):
        return region
    try:
        first, second = region
    except (TypeError, ValueError) as exc:
        raise FeastInputError(
            f"region must be a pair, got {region!r}.", FeastStatus.ERROR_INTERVAL) from exc
    if isinstance(first, (complex, np.complexfloating)):
        return Disk(complex(first), float(second))
    return Interval(float(first), float(second))
