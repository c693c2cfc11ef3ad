import numpy as np
import pytest

from pyfeast import (
    Disk,
    FeastConfig,
    FeastInputError,
    FeastStatus,
    Interval,
    feast_contour,
    feast_gcontour,
    feast_inside_contour,
    feast_inside_gcontour,
    feastinit,
)
from pyfeast.config.parameters import (
    QUADRATURE_GAUSS,
    SHAPE_CIRCLE,
    SLOT_CONTOUR_SHAPE,
    SLOT_ELLIPSE_RATIO,
    SLOT_NODE_COUNT,
    SLOT_QUADRATURE,
)
from pyfeast.numerics.contour import as_region


def test_default_contour_is_conjugate_symmetric():
    contour = feast_contour(0.0, 2.0)
    assert len(contour) == 8
    assert contour.is_conjugate_symmetric
    np.testing.assert_allclose(np.sort_complex(contour.Zne), np.sort_complex(np.conj(contour.Zne)))
    np.testing.assert_allclose(np.abs(contour.Zne - 1.0), 1.0)


@pytest.mark.parametrize("quadrature", [QUADRATURE_GAUSS, 1])
def test_weights_reproduce_cauchy_integral(quadrature):
    fpm = feastinit()
    fpm[SLOT_QUADRATURE] = quadrature
    contour = feast_contour(0.0, 2.0, fpm)
    inside = np.sum(contour.Wne / (contour.Zne - 1.0))
    outside = np.sum(contour.Wne / (contour.Zne - 10.0))
    assert inside == pytest.approx(1.0, abs=1e-12)
    assert abs(outside) < 1e-3
    assert abs(np.sum(contour.Wne)) < 1e-12


def test_odd_gauss_rule_is_not_conjugate_symmetric():
    fpm = feastinit()
    fpm[SLOT_QUADRATURE] = QUADRATURE_GAUSS
    fpm[SLOT_NODE_COUNT] = 5
    contour = feast_contour(0.0, 2.0, fpm)
    assert len(contour) == 5
    assert not contour.is_conjugate_symmetric


def test_ellipse_ratio_and_circle_shape():
    fpm = feastinit()
    fpm[SLOT_ELLIPSE_RATIO] = 50
    ellipse = feast_contour(-1.0, 1.0, fpm)
    assert ellipse.semi_minor == pytest.approx(0.5)
    np.testing.assert_allclose(ellipse.Zne.real ** 2 + (ellipse.Zne.imag / 0.5) ** 2, 1.0)

    fpm[SLOT_CONTOUR_SHAPE] = SHAPE_CIRCLE
    circle = feast_contour(-1.0, 1.0, fpm)
    assert circle.semi_minor == pytest.approx(1.0)


def test_general_contour_around_complex_center():
    contour = feast_gcontour(1.0 + 1.0j, 0.5)
    np.testing.assert_allclose(np.abs(contour.Zne - (1.0 + 1.0j)), 0.5)
    assert not contour.is_conjugate_symmetric


def test_perturbed_node_stays_on_the_curve():
    contour = feast_contour(0.0, 2.0)
    z, w = contour.perturbed(3)
    assert abs(z - 1.0) == pytest.approx(1.0)
    assert z != contour.Zne[3]
    assert abs(w) == pytest.approx(abs(contour.Wne[3]))


def test_invalid_contours_raise():
    with pytest.raises(FeastInputError) as excinfo:
        feast_contour(2.0, 1.0)
    assert excinfo.value.status == FeastStatus.ERROR_INTERVAL
    with pytest.raises(FeastInputError):
        feast_gcontour(0.0j, 0.0)


def test_interval_containment_is_strict():
    mask = feast_inside_contour(np.array([0.0, 0.5, 1.0, 2.0, 2.5]), 0.0, 2.0)
    np.testing.assert_array_equal(mask, [False, True, True, False, False])
    assert feast_inside_contour(1.0, 0.0, 2.0) is True
    assert feast_inside_contour(1.0 + 0.5j, 0.0, 2.0)
    assert not feast_inside_contour(1.0 + 1.5j, 0.0, 2.0)


def test_disk_containment_is_closed():
    assert feast_inside_gcontour(1.0 + 0.0j, 0.0j, 1.0) is True
    mask = feast_inside_gcontour(np.array([0.5j, 2.0]), 0.0j, 1.0)
    np.testing.assert_array_equal(mask, [True, False])


def test_region_coercion():
    assert as_region((0.0, 1.0)) == Interval(0.0, 1.0)
    assert as_region((1.0 + 0.0j, 2.0)) == Disk(1.0 + 0.0j, 2.0)
    interval = Interval(-1.0, 1.0)
    assert as_region(interval) is interval
    with pytest.raises(FeastInputError):
        as_region(5)


def test_zero_node_count_is_rejected():
    config = FeastConfig(node_count=0)
    for build, args in ((feast_contour, (0.0, 2.0)), (feast_gcontour, (0j, 1.0))):
        with pytest.raises(FeastInputError) as excinfo:
            build(*args, config)
        assert excinfo.value.status == FeastStatus.ERROR_FPM
