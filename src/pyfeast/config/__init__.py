"""Solver configuration: the parameter array and its immutable view."""

from .parameters import (
    FPM_LENGTH,
    FeastConfig,
    feastdefault,
    feastinit,
)

__all__ = [
    "FPM_LENGTH",
    "FeastConfig",
    "feastdefault",
    "feastinit",
]
