"""Per-loop convergence history of the refinement loop."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np


def relative_change(previous: complex, current: complex) -> float:
    """``|current - previous| / max(|current|, |previous|)``; 0 when both vanish."""
    scale = max(abs(current), abs(previous))
    if scale == 0.0:
        return 0.0
    return abs(current - previous) / scale


@dataclass
class ConvergenceTracker:
    """Records eigenvalue count, trace and worst residual of every loop."""

    counts: List[int] = field(default_factory=list)
    traces: List[complex] = field(default_factory=list)
    residuals: List[float] = field(default_factory=list)

    def record(self, count: int, values: np.ndarray, residuals: np.ndarray) -> None:
        self.counts.append(int(count))
        self.traces.append(complex(np.sum(values)) if values.size else 0.0j)
        self.residuals.append(float(np.max(residuals)) if residuals.size else 0.0)

    @property
    def loops(self) -> int:
        return len(self.counts)

    @property
    def count_stable(self) -> bool:
        return self.loops >= 2 and self.counts[-1] == self.counts[-2]

    def trace_change(self) -> Optional[float]:
        if self.loops < 2:
            return None
        return relative_change(self.traces[-2], self.traces[-1])

    def latest_residual(self) -> float:
        return self.residuals[-1] if self.residuals else float("inf")

    def residual_ratios(self) -> np.ndarray:
        """Loop-to-loop contraction factors of the worst residual."""
        values = np.asarray(self.residuals, dtype=float)
        if values.size < 2:
            return np.zeros(0)
        previous = values[:-1]
        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = np.where(previous > 0.0, values[1:] / previous, np.inf)
        return ratios
