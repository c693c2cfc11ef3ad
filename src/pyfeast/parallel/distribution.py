"""Partition contour nodes into chunks for independent execution units."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from pyfeast.status import FeastInputError, FeastStatus


@dataclass(frozen=True)
class ContourChunk:
    """Ascending run of contour-node indices owned by one execution unit."""

    chunk_id: int
    indices: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.indices)

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)


def distribute_contour_points(node_count: int, worker_count: int) -> List[ContourChunk]:
    """Split ``0..node_count-1`` into balanced contiguous chunks.

    Chunk sizes differ by at most one and the larger chunks come first.
    With fewer nodes than workers only ``node_count`` single-node chunks are
    produced; empty chunks are never created.
    """
    if worker_count <= 0:
        raise FeastInputError(
            f"worker count must be positive, got {worker_count}.", FeastStatus.ERROR_FPM)
    if node_count <= 0:
        raise FeastInputError(
            f"node count must be positive, got {node_count}.", FeastStatus.ERROR_FPM)

    chunk_count = min(worker_count, node_count)
    base, extra = divmod(node_count, chunk_count)
    chunks: List[ContourChunk] = []
    start = 0
    for chunk_id in range(chunk_count):
        size = base + (1 if chunk_id < extra else 0)
        chunks.append(ContourChunk(chunk_id, tuple(range(start, start + size))))
        start += size
    return chunks
