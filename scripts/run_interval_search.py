"""Search a real interval of the 1-D Laplacian spectrum with FEAST."""
from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
from scipy.sparse import diags

from pyfeast import feast, feast_contour, feast_summary, feastinit
from pyfeast.config.parameters import (
    EXECUTION_PROCESSES,
    EXECUTION_THREADS,
    SLOT_EXECUTION,
    SLOT_MAX_LOOPS,
    SLOT_NODE_COUNT,
    SLOT_TOLERANCE_EXPONENT,
    SLOT_WORKERS,
)
from pyfeast.io import FeastResultCache


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find the eigenvalues of tridiag(-1, 2, -1) inside [emin, emax].")
    parser.add_argument("--size", type=int, default=200,
                        help="Matrix dimension N.")
    parser.add_argument("--emin", type=float, default=0.0,
                        help="Lower end of the search interval.")
    parser.add_argument("--emax", type=float, default=0.1,
                        help="Upper end of the search interval.")
    parser.add_argument("--m0", type=int, default=None,
                        help="Search subspace size (default: min(N, max(N // 2, 20))).")
    parser.add_argument("--nodes", type=int, default=8,
                        help="Number of contour quadrature nodes.")
    parser.add_argument("--tol-exponent", type=int, default=12,
                        help="Convergence tolerance is 10**(-tol_exponent).")
    parser.add_argument("--max-loops", type=int, default=20,
                        help="Maximum number of refinement loops.")
    parser.add_argument("--dense", action="store_true",
                        help="Use a dense matrix instead of CSR storage.")
    parser.add_argument("--workers", type=int, default=0,
                        help="Number of execution units (0: PYFEAST_WORKERS or CPU count).")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--threads", action="store_true",
                      help="Solve the contour nodes on a thread pool.")
    mode.add_argument("--processes", action="store_true",
                      help="Solve the contour nodes on a process pool.")
    parser.add_argument("--use-cache", dest="use_cache", action="store_true",
                        default=True, help="Load/save cached results when available (default: on).")
    parser.add_argument("--no-cache", dest="use_cache", action="store_false",
                        help="Disable cache usage for this run.")
    parser.add_argument("--refresh-cache", action="store_true",
                        help="Force recomputation even if cached data exist.")
    parser.add_argument("--cache-dir", type=Path, default=Path("cache"),
                        help="Directory used to store cached results.")
    parser.add_argument("--cache-key", default="laplacian_interval",
                        help="Cache subdirectory name to use.")
    parser.add_argument("--plot", type=Path, default=None,
                        help="Write a figure of the contour and eigenvalues to this path.")
    return parser.parse_args()


def laplacian_1d(n: int, dense: bool):
    matrix = diags([-np.ones(n - 1), 2.0 * np.ones(n), -np.ones(n - 1)],
                   offsets=[-1, 0, 1], format="csr")
    return matrix.toarray() if dense else matrix


def main() -> None:
    args = parse_args()

    fpm = feastinit()
    fpm[SLOT_NODE_COUNT] = args.nodes
    fpm[SLOT_TOLERANCE_EXPONENT] = args.tol_exponent
    fpm[SLOT_MAX_LOOPS] = args.max_loops
    fpm[SLOT_WORKERS] = args.workers
    if args.threads:
        fpm[SLOT_EXECUTION] = EXECUTION_THREADS
    elif args.processes:
        fpm[SLOT_EXECUTION] = EXECUTION_PROCESSES

    metadata = {
        "size": args.size,
        "emin": args.emin,
        "emax": args.emax,
        "m0": args.m0,
        "nodes": args.nodes,
        "tol_exponent": args.tol_exponent,
        "max_loops": args.max_loops,
        "dense": args.dense,
    }

    cache = FeastResultCache(args.cache_dir)
    if args.use_cache and not args.refresh_cache and cache.available(args.cache_key, metadata=metadata):
        print(f"Loading cached result '{args.cache_key}' from {args.cache_dir}")
        result = cache.load(args.cache_key)
    else:
        A = laplacian_1d(args.size, args.dense)
        result = feast(A, (args.emin, args.emax), M0=args.m0, fpm=fpm)
        if args.use_cache:
            cache.save(args.cache_key, result, metadata=metadata)

    feast_summary(result)

    exact = 2.0 - 2.0 * np.cos(np.pi * np.arange(1, args.size + 1) / (args.size + 1))
    expected = exact[(exact > args.emin) & (exact < args.emax)]
    print(f"Analytic count inside the interval: {expected.size}")
    if expected.size == result.M and result.M:
        deviation = np.max(np.abs(np.sort(result.eigenvalues.real) - expected))
        print(f"Max deviation from analytic eigenvalues: {deviation:.3e}")

    if args.plot is not None:
        from pyfeast.reporting.plotting import plot_contour

        contour = feast_contour(args.emin, args.emax, fpm)
        plot_contour(contour, result.eigenvalues,
                     title=f"1-D Laplacian, N={args.size}", output_path=str(args.plot))
        print(f"Figure written to {args.plot}")


if __name__ == "__main__":
    main()
