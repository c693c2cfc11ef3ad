import dataclasses

import numpy as np
import pytest
from scipy.linalg import block_diag, eigh

from pyfeast import (
    Disk,
    FeastInputError,
    FeastRuntimeError,
    FeastStatus,
    Interval,
    feast,
)
from pyfeast.config.parameters import (
    CRITERION_TRACE,
    FeastConfig,
    QUADRATURE_GAUSS,
    SLOT_CONVERGENCE_CRITERION,
    SLOT_INITIAL_GUESS,
    SLOT_ITERATIVE_TOLERANCE_EXPONENT,
    SLOT_MAX_LOOPS,
    SLOT_QUADRATURE,
    SLOT_SOLVER_VARIANT,
    SLOT_TOLERANCE_EXPONENT,
    SOLVER_GMRES,
)
from pyfeast.parallel.executors import ContourExecutor
from pyfeast.solver.controller import ControllerState, ConvergenceController
from pyfeast.solver.moments import AccumulatorPayload
from pyfeast.status import LinearSolveError

# 2 - 2 cos(2 pi / 5): the only eigenvalue of the 4 x 4 Laplacian in (0.5, 2.5)
LAPLACIAN_4_INSIDE = 1.381966011250105


def test_small_laplacian_interval(laplacian, quiet_fpm):
    A = laplacian(4)
    result = feast(A, (0.5, 2.5), fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.converged
    assert result.M == 1
    assert result.E[0] == pytest.approx(LAPLACIAN_4_INSIDE, abs=1e-10)
    x = result.X[:, 0]
    assert np.linalg.norm(x) == pytest.approx(1.0)
    assert np.linalg.norm(A @ x - result.E[0] * x) < 1e-10
    assert result.epsout < 1e-12
    assert result.loops >= 2


def test_result_is_immutable(laplacian, quiet_fpm):
    result = feast(laplacian(4), (0.5, 2.5), fpm=quiet_fpm)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.M = 3
    with pytest.raises(ValueError):
        result.eigenvalues[0] = 0.0


def test_empty_region_reports_no_eigenvalues(laplacian, quiet_fpm):
    result = feast(laplacian(4), (10.0, 11.0), fpm=quiet_fpm)
    assert result.info == FeastStatus.NO_EIGENVALUES
    assert result.M == 0
    assert result.eigenvectors.shape == (4, 0)
    assert result.loops == 1
    assert not result.converged


def test_repeated_calls_are_identical(laplacian, quiet_fpm):
    A = laplacian(20, sparse=True)
    first = feast(A, (0.5, 1.5), M0=8, fpm=quiet_fpm)
    second = feast(A, (0.5, 1.5), M0=8, fpm=quiet_fpm)
    np.testing.assert_array_equal(first.eigenvalues, second.eigenvalues)
    np.testing.assert_array_equal(first.eigenvectors, second.eigenvectors)
    assert first.loops == second.loops


@pytest.mark.parametrize("sparse", [False, True])
def test_laplacian_window_matches_analytic_spectrum(laplacian, laplacian_spectrum, quiet_fpm, sparse):
    expected = laplacian_spectrum(20)
    expected = expected[(expected > 0.5) & (expected < 1.5)]
    result = feast(laplacian(20, sparse=sparse), Interval(0.5, 1.5), M0=8, fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.M == expected.size == 4
    np.testing.assert_allclose(result.eigenvalues, expected, atol=1e-10)
    assert np.all(result.residuals < 1e-12)


def test_generalized_problem(laplacian, quiet_fpm):
    A = laplacian(6)
    B = np.diag(np.linspace(1.0, 2.0, 6))
    reference = eigh(A, B, eigvals_only=True)
    emin = 0.5 * (reference[1] + reference[2])
    emax = 0.5 * (reference[3] + reference[4])
    result = feast(A, (emin, emax), B, fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    np.testing.assert_allclose(result.eigenvalues, reference[2:4], atol=1e-10)
    X = result.eigenvectors
    np.testing.assert_allclose(X.T @ B @ X, np.eye(2), atol=1e-10)
    residual = A @ X - B @ X * result.eigenvalues
    assert np.linalg.norm(residual) < 1e-9


def test_complex_hermitian_window(quiet_fpm):
    rng = np.random.default_rng(42)
    n = 30
    H = rng.standard_normal((n, n)) + 1j * rng.standard_normal((n, n))
    H = H + H.conj().T
    reference = np.linalg.eigvalsh(H)
    mid = n // 2
    emin = 0.5 * (reference[mid - 3] + reference[mid - 2])
    emax = 0.5 * (reference[mid + 2] + reference[mid + 3])
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    quiet_fpm[SLOT_MAX_LOOPS] = 50
    result = feast(H, (emin, emax), M0=15, fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.M == 5
    np.testing.assert_allclose(result.eigenvalues, reference[mid - 2:mid + 3], atol=1e-8)


def test_disk_region_with_non_hermitian_matrix(quiet_fpm):
    A = np.diag([1.0, 2.0, 3.0, 4.0, 5.0]) + np.triu(0.3 * np.ones((5, 5)), 1)
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    result = feast(A, (2.0 + 0.0j, 0.6), fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.M == 1
    assert result.eigenvalues[0] == pytest.approx(2.0, abs=1e-8)
    x = result.eigenvectors[:, 0]
    assert np.linalg.norm(A @ x - result.eigenvalues[0] * x) < 1e-8


def test_real_matrix_with_complex_eigenvalues(quiet_fpm):
    A = block_diag(np.array([[0.0, -1.0], [1.0, 0.0]]), np.array([[3.0]]))
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    result = feast(A, Disk(1j, 0.5), fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.M == 1
    assert result.eigenvalues[0] == pytest.approx(1j, abs=1e-8)


@pytest.mark.parametrize("slot, value", [
    (SLOT_QUADRATURE, QUADRATURE_GAUSS),
    (SLOT_CONVERGENCE_CRITERION, CRITERION_TRACE),
])
def test_alternative_rules_find_the_same_eigenvalue(laplacian, quiet_fpm, slot, value):
    quiet_fpm[slot] = value
    result = feast(laplacian(4), (0.5, 2.5), fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.E[0] == pytest.approx(LAPLACIAN_4_INSIDE, abs=1e-10)


def test_iterative_solver_variant(laplacian, quiet_fpm):
    quiet_fpm[SLOT_SOLVER_VARIANT] = SOLVER_GMRES
    quiet_fpm[SLOT_ITERATIVE_TOLERANCE_EXPONENT] = 12
    result = feast(laplacian(4), (0.5, 2.5), fpm=quiet_fpm)
    assert result.M == 1
    assert result.E[0] == pytest.approx(LAPLACIAN_4_INSIDE, abs=1e-8)


def test_user_initial_subspace(laplacian, quiet_fpm):
    quiet_fpm[SLOT_INITIAL_GUESS] = 1
    result = feast(laplacian(4), (0.5, 2.5), M0=4, fpm=quiet_fpm, X0=np.eye(4))
    assert result.E[0] == pytest.approx(LAPLACIAN_4_INSIDE, abs=1e-10)


def test_loop_limit_reports_non_convergence(laplacian, quiet_fpm):
    quiet_fpm[SLOT_MAX_LOOPS] = 1
    result = feast(laplacian(20, sparse=True), (0.5, 1.5), M0=8, fpm=quiet_fpm)
    assert result.info == FeastStatus.NOT_CONVERGED
    assert result.loops == 1
    assert result.M > 0
    assert not result.converged


def test_full_subspace_is_flagged(quiet_fpm):
    A = np.diag([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    result = feast(A, (0.5, 3.5), M0=3, fpm=quiet_fpm)
    assert result.info == FeastStatus.SUBSPACE_TOO_SMALL
    assert result.M == 3
    np.testing.assert_allclose(result.eigenvalues, [1.0, 2.0, 3.0], atol=1e-8)


@pytest.mark.parametrize("kwargs, status", [
    (dict(A=np.ones((3, 4)), region=(0.0, 1.0)), FeastStatus.ERROR_MATRIX),
    (dict(A=np.eye(3), region=(0.0, 1.0), B=np.eye(4)), FeastStatus.ERROR_MATRIX),
    (dict(A=np.zeros((0, 0)), region=(0.0, 1.0)), FeastStatus.ERROR_N),
    (dict(A=np.eye(4), region=(0.0, 1.0), M0=0), FeastStatus.ERROR_M0),
    (dict(A=np.eye(4), region=(0.0, 1.0), M0=5), FeastStatus.ERROR_M0),
    (dict(A=np.eye(4), region=(2.0, 1.0)), FeastStatus.ERROR_INTERVAL),
    (dict(A=np.eye(4), region=(0.0j, -1.0)), FeastStatus.ERROR_INTERVAL),
    (dict(A=np.eye(4), region=(0.0, 1.0), fpm=np.zeros(10, dtype=np.int64)), FeastStatus.ERROR_FPM),
    (dict(A=np.eye(4), region=(0.0, 1.0), M0=2, X0=np.ones((4, 3))), FeastStatus.ERROR_M0),
])
def test_invalid_input_fails_fast(kwargs, status):
    with pytest.raises(FeastInputError) as excinfo:
        feast(**kwargs)
    assert excinfo.value.status == status
    assert isinstance(excinfo.value, ValueError)


def test_initial_guess_flag_requires_subspace(quiet_fpm):
    quiet_fpm[SLOT_INITIAL_GUESS] = 1
    with pytest.raises(FeastInputError) as excinfo:
        feast(np.eye(4), (0.0, 2.0), fpm=quiet_fpm)
    assert excinfo.value.status == FeastStatus.ERROR_FPM


class _FailingExecutor(ContourExecutor):
    def run(self, chunks, contour, rhs):
        raise LinearSolveError("shift is singular", node_index=2)


def test_controller_escalates_linear_solve_failure():
    A = np.diag([1.0, 2.0, 3.0])
    payload = AccumulatorPayload(A=A, B=None, variant=0, iterative_tolerance=1e-6,
                                 reuse_factorization=True)
    controller = ConvergenceController(
        A=A, B=None, region=Interval(0.5, 2.5), config=FeastConfig(print_level=0),
        m0=3, executor=_FailingExecutor(payload))
    with pytest.raises(FeastRuntimeError) as excinfo:
        controller.run(np.eye(3))
    assert excinfo.value.status == FeastStatus.LINEAR_SOLVE_FAILED
    assert controller.state is ControllerState.FAILED


def test_verbose_run_prints_progress(laplacian, capsys):
    feast(laplacian(4), (0.5, 2.5))
    out = capsys.readouterr().out
    assert "FEAST: N=4, M0=4" in out
    assert "loop   1" in out
    assert "FEAST finished: successful exit (info=0)" in out


def test_real_non_hermitian_pair_on_real_centred_disk(quiet_fpm):
    A = block_diag(np.array([[0.0, -1.0], [1.0, 0.0]]), np.diag([3.0, 4.0, 5.0]))
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    result = feast(A, Disk(0j, 1.5), M0=3, fpm=quiet_fpm)
    assert result.info == FeastStatus.SUCCESS
    assert result.M == 2
    values = result.eigenvalues[np.argsort(result.eigenvalues.imag)]
    np.testing.assert_allclose(values, [-1j, 1j], atol=1e-8)
    assert np.all(result.residuals < 1e-10)


def test_real_non_hermitian_pair_matches_complex_input(quiet_fpm):
    rng = np.random.default_rng(11)
    D = block_diag(np.array([[0.2, -0.7], [0.7, 0.2]]), np.diag(np.linspace(2.0, 6.0, 10)))
    S = np.eye(12) + 0.1 * rng.standard_normal((12, 12))
    A = S @ D @ np.linalg.inv(S)
    quiet_fpm[SLOT_TOLERANCE_EXPONENT] = 10
    real_input = feast(A, Disk(0j, 1.0), M0=4, fpm=quiet_fpm)
    complex_input = feast(A.astype(complex), Disk(0j, 1.0), M0=4, fpm=quiet_fpm)
    for result in (real_input, complex_input):
        assert result.info == FeastStatus.SUCCESS
        values = result.eigenvalues[np.argsort(result.eigenvalues.imag)]
        np.testing.assert_allclose(values, [0.2 - 0.7j, 0.2 + 0.7j], atol=1e-8)
