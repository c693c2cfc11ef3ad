import numpy as np
import pytest

from pyfeast import feast, pfeast_benchmark
from pyfeast.config.parameters import EXECUTION_THREADS, SLOT_EXECUTION, SLOT_WORKERS


@pytest.fixture
def window_problem(laplacian):
    return laplacian(20, sparse=True), (0.5, 1.5)


def _assert_identical(first, second):
    np.testing.assert_array_equal(first.eigenvalues, second.eigenvalues)
    np.testing.assert_array_equal(first.eigenvectors, second.eigenvectors)
    np.testing.assert_array_equal(first.residuals, second.residuals)
    assert first.loops == second.loops
    assert first.info == second.info


@pytest.mark.parametrize("use_threads, workers", [(True, 2), (True, 3), (False, 2)])
def test_parallel_runs_reproduce_serial_run(window_problem, quiet_fpm, use_threads, workers):
    A, interval = window_problem
    serial = feast(A, interval, M0=8, fpm=quiet_fpm, parallel=False)
    parallel = feast(A, interval, M0=8, fpm=quiet_fpm, parallel=True,
                     use_threads=use_threads, workers=workers)
    _assert_identical(serial, parallel)


def test_execution_mode_from_parameter_array(window_problem, quiet_fpm):
    A, interval = window_problem
    serial = feast(A, interval, M0=8, fpm=quiet_fpm)
    quiet_fpm[SLOT_EXECUTION] = EXECUTION_THREADS
    quiet_fpm[SLOT_WORKERS] = 4
    threaded = feast(A, interval, M0=8, fpm=quiet_fpm)
    _assert_identical(serial, threaded)


def test_more_workers_than_nodes(laplacian, quiet_fpm):
    A = laplacian(4)
    serial = feast(A, (0.5, 2.5), fpm=quiet_fpm, parallel=False)
    crowded = feast(A, (0.5, 2.5), fpm=quiet_fpm, parallel=True, use_threads=True, workers=12)
    _assert_identical(serial, crowded)


def test_benchmark_reports_agreement(window_problem, capsys):
    A, interval = window_problem
    runs = pfeast_benchmark(A, None, interval, 8, worker_counts=(2,))
    assert set(runs) == {"serial", "threadsx2"}
    assert runs["threadsx2"].max_deviation == 0.0
    assert runs["threadsx2"].M == runs["serial"].M == 4
    out = capsys.readouterr().out
    assert "[PASS]" in out
    assert "[WARN]" not in out
