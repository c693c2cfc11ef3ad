"""Human-readable reports: result summaries, routine names, memory estimates."""
from __future__ import annotations

import sys
from typing import Optional, TextIO

import numpy as np

from pyfeast.solver.result import FeastResult
from pyfeast.status import FeastStatus

# Six-digit routine codes ``abcdef``:
#   a  precision/arithmetic  b  matrix storage  c  symmetry
#   d  problem type          e  interface       f  contour family
_ARITHMETIC = {1: "s", 2: "d", 3: "c", 4: "z"}
_STORAGE = {1: "dense", 2: "banded", 3: "csr", 4: "rci"}
_SYMMETRY = {1: "sy", 2: "he", 3: "ge"}
_PROBLEM = {1: "ev", 2: "gv", 3: "pev", 4: "sv", 5: "gv"}
_INTERFACE = {0: "", 1: "x", 2: "p"}
_CONTOUR = {0: "", 1: "_gcontour"}


def feast_name(code: int) -> str:
    """Decode a routine code such as ``241500`` into a name like ``dfeast_rci_sy...``.

    Unknown digits decode to ``?`` rather than raising.
    """
    digits = f"{int(code):06d}"[-6:]
    a, b, c, d, e, f = (int(ch) for ch in digits)
    arithmetic = _ARITHMETIC.get(a, "?")
    storage = _STORAGE.get(b, "?")
    symmetry = _SYMMETRY.get(c, "?")
    problem = _PROBLEM.get(d, "?")
    interface = _INTERFACE.get(e, "?")
    contour = _CONTOUR.get(f, "?")
    return f"{arithmetic}feast_{storage}_{symmetry}{problem}{interface}{contour}"


def feast_memory_estimate(N: int, M0: int, dtype=np.float64, node_count: int = 8,
                          dense_factorization: bool = True) -> int:
    """Rough peak memory in bytes of one solve call.

    Counts the search block, right-hand side, moment and eigenvector blocks,
    one complex solution block and one moment slot per contour node, the
    reduced matrices and, for dense input, one complex ``N x N`` factor per
    node.
    """
    if N <= 0 or M0 <= 0:
        raise ValueError("N and M0 must be positive.")
    real_bytes = np.dtype(dtype).itemsize
    complex_bytes = np.dtype(np.result_type(dtype, np.complex64)).itemsize
    blocks = 4 * N * M0 * real_bytes
    solves = (1 + node_count) * N * M0 * complex_bytes
    reduced = 3 * M0 * M0 * complex_bytes
    factors = node_count * N * N * complex_bytes if dense_factorization else 0
    return int(blocks + solves + reduced + factors)


def feast_summary(result: FeastResult, stream: Optional[TextIO] = None) -> None:
    """Print the eigenvalues, residuals and status of ``result``."""
    out = stream if stream is not None else sys.stdout
    status = FeastStatus(result.info)
    out.write("==== FEAST summary ====\n")
    out.write(f"  status          : {status.name} (info={result.info}) - {status.describe()}\n")
    out.write(f"  eigenvalues (M) : {result.M}\n")
    out.write(f"  loops           : {result.loops}\n")
    out.write(f"  epsout          : {result.epsout:.3e}\n")
    if result.M:
        out.write("     #        eigenvalue                residual\n")
        for index, (value, residual) in enumerate(zip(result.eigenvalues, result.residuals)):
            if np.iscomplexobj(result.eigenvalues):
                text = f"{value.real:.12e}{value.imag:+.6e}j"
            else:
                text = f"{value:.15e}"
            out.write(f"  {index + 1:4d}  {text:>32s}  {residual:.3e}\n")
    out.flush()
