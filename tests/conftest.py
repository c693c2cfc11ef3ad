import os

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest
from scipy.sparse import diags

from pyfeast import feastinit
from pyfeast.config.parameters import SLOT_PRINT_LEVEL


@pytest.fixture
def quiet_fpm():
    fpm = feastinit()
    fpm[SLOT_PRINT_LEVEL] = 0
    return fpm


@pytest.fixture
def laplacian():
    """Factory for the tridiagonal matrix tridiag(-1, 2, -1)."""

    def build(n, sparse=False):
        matrix = diags([-np.ones(n - 1), 2.0 * np.ones(n), -np.ones(n - 1)],
                       offsets=[-1, 0, 1], format="csr")
        return matrix if sparse else matrix.toarray()

    return build


@pytest.fixture
def laplacian_spectrum():
    def spectrum(n):
        return 2.0 - 2.0 * np.cos(np.pi * np.arange(1, n + 1) / (n + 1))

    return spectrum
