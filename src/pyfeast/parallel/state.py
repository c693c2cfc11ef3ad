"""Per-solve bookkeeping of partial moments awaiting reduction."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

import numpy as np


@dataclass
class ParallelFeastState:
    """Holds one moment contribution slot per contour node.

    Execution units hand their per-node contributions over through
    :meth:`store`; :meth:`reduce` then folds them in ascending node index,
    which makes the reduced moment independent of the chunking and of the
    order in which units finished.
    """

    total_points: int
    m0: int
    use_parallel: bool = False
    use_threads: bool = False
    dtype: np.dtype = np.dtype(complex)
    moment_contributions: List[Optional[np.ndarray]] = field(init=False)

    def __post_init__(self) -> None:
        if self.total_points <= 0:
            raise ValueError("total_points must be positive.")
        if self.m0 <= 0:
            raise ValueError("m0 must be positive.")
        self.dtype = np.dtype(self.dtype)
        self.moment_contributions = [None] * self.total_points

    def store(self, contributions: Mapping[int, np.ndarray]) -> None:
        for index, block in contributions.items():
            if not 0 <= index < self.total_points:
                raise IndexError(f"node index {index} outside 0..{self.total_points - 1}.")
            if self.moment_contributions[index] is not None:
                raise RuntimeError(f"node {index} was reported twice in one loop.")
            self.moment_contributions[index] = block

    @property
    def complete(self) -> bool:
        return all(block is not None for block in self.moment_contributions)

    def reduce(self) -> np.ndarray:
        """Sum the contributions in ascending node index and clear the slots."""
        missing = [i for i, block in enumerate(self.moment_contributions) if block is None]
        if missing:
            raise RuntimeError(f"moment contributions missing for nodes {missing}.")
        total = np.array(self.moment_contributions[0], dtype=self.dtype, copy=True)
        for block in self.moment_contributions[1:]:
            total += block
        self.reset()
        return total

    def reset(self) -> None:
        self.moment_contributions = [None] * self.total_points
