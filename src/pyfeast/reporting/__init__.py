"""Reports and figures.

Plotting lives in :mod:`pyfeast.reporting.plotting` so that importing the
solver does not pull in matplotlib.
"""

from .summary import feast_memory_estimate, feast_name, feast_summary

__all__ = [
    "feast_memory_estimate",
    "feast_name",
    "feast_summary",
]
