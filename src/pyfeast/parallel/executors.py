"""Executors running the chunked moment accumulation once per refinement loop.

All executors return chunk results sorted by chunk id; the reduction order
is fixed afterwards by :class:`pyfeast.parallel.state.ParallelFeastState`.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import multiprocessing as mp
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from pyfeast.config.parameters import (
    EXECUTION_PROCESSES,
    EXECUTION_SERIAL,
    EXECUTION_THREADS,
)
from pyfeast.numerics.contour import Contour
from pyfeast.parallel.distribution import ContourChunk
from pyfeast.solver.moments import AccumulatorPayload, ChunkMoments, MomentAccumulator


class ContourExecutor:
    """Base class; subclasses decide where :meth:`run` executes the chunks."""

    use_parallel = False
    use_threads = False

    def __init__(self, payload: AccumulatorPayload, workers: int = 1) -> None:
        self.payload = payload
        self.workers = max(1, int(workers))
        self._accumulators: Dict[int, MomentAccumulator] = {}

    def _accumulator(self, chunk: ContourChunk) -> MomentAccumulator:
        accumulator = self._accumulators.get(chunk.chunk_id)
        if accumulator is None or accumulator.chunk != chunk:
            accumulator = self.payload.make_accumulator(chunk)
            self._accumulators[chunk.chunk_id] = accumulator
        return accumulator

    def run(self, chunks: Sequence[ContourChunk], contour: Contour, rhs: np.ndarray) -> List[ChunkMoments]:
        raise NotImplementedError

    def close(self) -> None:
        self._accumulators.clear()

    def __enter__(self) -> "ContourExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SerialExecutor(ContourExecutor):
    def run(self, chunks, contour, rhs):
        return [self._accumulator(chunk).accumulate(contour, rhs) for chunk in chunks]


class ThreadExecutor(ContourExecutor):
    """Runs each chunk on a thread; every chunk owns its accumulator exclusively."""

    use_parallel = True
    use_threads = True

    def __init__(self, payload: AccumulatorPayload, workers: int = 1) -> None:
        super().__init__(payload, workers)
        self._pool = ThreadPoolExecutor(max_workers=self.workers,
                                        thread_name_prefix="pyfeast")

    def run(self, chunks, contour, rhs):
        # accumulators are created here, before any task starts
        accumulators = [self._accumulator(chunk) for chunk in chunks]
        futures = [self._pool.submit(acc.accumulate, contour, rhs) for acc in accumulators]
        results = [future.result() for future in futures]
        return sorted(results, key=lambda r: r.chunk_id)

    def close(self) -> None:
        self._pool.shutdown(wait=True)
        super().close()


_WORKER_PAYLOAD: Optional[AccumulatorPayload] = None
_WORKER_ACCUMULATORS: Dict[int, MomentAccumulator] = {}


def _process_worker_init(payload: AccumulatorPayload) -> None:
    global _WORKER_PAYLOAD
    _WORKER_PAYLOAD = payload
    _WORKER_ACCUMULATORS.clear()


def _process_accumulate(task: Tuple[ContourChunk, Contour, np.ndarray]) -> ChunkMoments:
    if _WORKER_PAYLOAD is None:
        raise RuntimeError("Worker payload is not initialized.")
    chunk, contour, rhs = task
    accumulator = _WORKER_ACCUMULATORS.get(chunk.chunk_id)
    if accumulator is None or accumulator.chunk != chunk:
        accumulator = _WORKER_PAYLOAD.make_accumulator(chunk)
        _WORKER_ACCUMULATORS[chunk.chunk_id] = accumulator
    return accumulator.accumulate(contour, rhs)


class ProcessExecutor(ContourExecutor):
    """Runs chunks in a worker-process pool created once per solve."""

    use_parallel = True
    use_threads = False

    def __init__(self, payload: AccumulatorPayload, workers: int = 1) -> None:
        super().__init__(payload, workers)
        # fork where available, spawn otherwise
        self.start_method = "fork" if "fork" in mp.get_all_start_methods() else "spawn"
        ctx = mp.get_context(self.start_method)
        self._pool = ctx.Pool(
            processes=self.workers,
            initializer=_process_worker_init,
            initargs=(payload,),
        )

    def run(self, chunks, contour, rhs):
        tasks = [(chunk, contour, rhs) for chunk in chunks]
        results = list(self._pool.imap_unordered(_process_accumulate, tasks, chunksize=1))
        return sorted(results, key=lambda r: r.chunk_id)

    def close(self) -> None:
        self._pool.close()
        self._pool.join()
        super().close()


def make_executor(mode: int, payload: AccumulatorPayload, workers: int = 1) -> ContourExecutor:
    if mode == EXECUTION_SERIAL:
        return SerialExecutor(payload, 1)
    if mode == EXECUTION_THREADS:
        return ThreadExecutor(payload, workers)
    if mode == EXECUTION_PROCESSES:
        return ProcessExecutor(payload, workers)
    raise ValueError(f"unknown execution mode {mode}.")
