"""Public entry point of the eigensolver."""
from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.sparse import csr_matrix, issparse

from pyfeast.config.parameters import (
    EXECUTION_PROCESSES,
    EXECUTION_SERIAL,
    EXECUTION_THREADS,
    FPM_LENGTH,
    FeastConfig,
)
from pyfeast.matrices.storage import as_operand, check_square_pair, is_hermitian
from pyfeast.numerics.contour import Disk, as_region
from pyfeast.parallel.executors import make_executor
from pyfeast.solver.controller import ConvergenceController
from pyfeast.solver.moments import AccumulatorPayload
from pyfeast.solver.result import FeastResult
from pyfeast.status import FeastInputError, FeastStatus
from pyfeast.validation.inputs import check_feast_gcontour_input, check_feast_input


def default_m0(n: int) -> int:
    return min(n, max(n // 2, 20))


def _execution_mode(config: FeastConfig, parallel: Optional[bool], use_threads: Optional[bool]) -> int:
    if parallel is None:
        parallel = config.parallel
    if not parallel:
        return EXECUTION_SERIAL
    if use_threads is None:
        use_threads = config.execution != EXECUTION_PROCESSES
    return EXECUTION_THREADS if use_threads else EXECUTION_PROCESSES


def _initial_subspace(X0, n: int, m0: int, config: FeastConfig, seed: Optional[int]) -> np.ndarray:
    if X0 is not None:
        X0 = np.asarray(X0)
        if X0.shape != (n, m0):
            raise FeastInputError(
                f"initial subspace must have shape {(n, m0)}, got {X0.shape}.",
                FeastStatus.ERROR_M0,
            )
        return np.array(X0, copy=True)
    if config.use_initial_guess:
        raise FeastInputError(
            "fpm requests a user initial subspace but X0 was not given.",
            FeastStatus.ERROR_FPM,
        )
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n, m0))


def feast(
    A,
    region,
    B=None,
    *,
    M0: Optional[int] = None,
    fpm=None,
    X0=None,
    parallel: Optional[bool] = None,
    use_threads: Optional[bool] = None,
    workers: Optional[int] = None,
    hermitian: Optional[bool] = None,
    seed: Optional[int] = 0,
) -> FeastResult:
    """Find the eigenpairs of ``A x = lambda B x`` inside ``region``.

    Parameters
    ----------
    A, B : array_like or scipy.sparse matrix
        Square matrices of equal shape; ``B=None`` stands for the identity.
    region : Interval, Disk or pair
        ``(emin, emax)`` searches a real interval, ``(center, radius)`` with
        a complex ``center`` searches a disk of the complex plane.
    M0 : int, optional
        Search subspace size; must be at least the number of eigenvalues in
        the region. Defaults to ``min(N, max(N // 2, 20))``.
    fpm : array_like, optional
        64-slot parameter array (see :func:`pyfeast.feastinit`).
    X0 : ndarray, optional
        Initial ``(N, M0)`` search subspace.
    parallel, use_threads, workers : optional
        Override the execution slots of ``fpm``: ``parallel=False`` runs
        serially, otherwise threads or worker processes are used.
    hermitian : bool, optional
        Force the Hermitian or non-Hermitian code path; detected by default.
    seed : int, optional
        Seed of the random initial subspace.

    Returns
    -------
    FeastResult
        Non-convergence and empty regions are reported through ``info``.

    Raises
    ------
    FeastInputError
        For malformed matrices, regions, sizes or parameter arrays.
    FeastRuntimeError
        When a contour node stays singular after perturbation or the
        search subspace collapses.
    """
    if fpm is not None and len(fpm) != FPM_LENGTH:
        raise FeastInputError(
            f"fpm must have exactly {FPM_LENGTH} entries, got {len(fpm)}.",
            FeastStatus.ERROR_FPM,
        )
    config = FeastConfig.from_fpm(fpm)
    region = as_region(region)
    region.validate()

    A = as_operand(A)
    B = None if B is None else as_operand(B)
    n = check_square_pair(A, B)
    if issparse(A) or issparse(B):
        A = csr_matrix(A)
        B = None if B is None else csr_matrix(B)

    m0 = default_m0(n) if M0 is None else int(M0)
    validation_fpm = config.to_fpm()
    if isinstance(region, Disk):
        check_feast_gcontour_input(n, m0, region.center, region.radius, validation_fpm)
    else:
        check_feast_input(n, m0, region.emin, region.emax, validation_fpm)

    if hermitian is None:
        hermitian = is_hermitian(A) and (B is None or is_hermitian(B))
    real_arithmetic = bool(hermitian) and not np.iscomplexobj(A) and (
        B is None or not np.iscomplexobj(B))
    Y0 = _initial_subspace(X0, n, m0, config, seed)

    mode = _execution_mode(config, parallel, use_threads)
    if mode == EXECUTION_SERIAL:
        worker_count = 1
    else:
        worker_count = int(workers) if workers else config.resolve_worker_count()

    payload = AccumulatorPayload(
        A=A,
        B=B,
        variant=config.solver_variant,
        iterative_tolerance=config.iterative_tolerance,
        reuse_factorization=config.reuse_factorization,
    )
    with make_executor(mode, payload, worker_count) as executor:
        controller = ConvergenceController(
            A=A,
            B=B,
            region=region,
            config=config,
            m0=m0,
            executor=executor,
            hermitian=bool(hermitian),
            real_arithmetic=real_arithmetic,
            seed=seed,
        )
        return controller.run(Y0)
