"""Threaded similarity engine.

Two ways of spreading work over a bounded pool of worker threads:

Pair enumeration (full similarity matrix)
    A producer streams every unordered pair ``(i, j), i < j`` into a bounded job
    queue. Workers compute the similarity and publish ``(i, j, score)`` on a
    bounded result queue. The calling thread is the only collector and therefore
    the only writer of the matrix; it stores each result symmetrically.

Partition (candidate scoring)
    The candidate list is cut into contiguous, disjoint slices, one per worker.
    Each worker fills a private dict for its slice; the dicts are merged only
    after every worker has finished.

Workers never mutate the input vectors. Results match the sequential
computation up to floating-point summation order.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Hashable, List, Sequence, TypeVar

import numpy as np

from .similarity.metrics import Metric, metric_function
from .similarity.sparse import SparseVector

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Jobs/results buffered per worker before producers block.
QUEUE_SLOTS_PER_WORKER = 100

_DONE = object()


def pair_count(n: int) -> int:
    """Number of unordered pairs among `n` entities."""
    return n * (n - 1) // 2 if n > 1 else 0


def _check_workers(workers: int) -> int:
    workers = int(workers)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    return workers


def _identity_matrix(n: int) -> np.ndarray:
    matrix = np.zeros((n, n), dtype=np.float64)
    np.fill_diagonal(matrix, 1.0)
    return matrix


def compute_similarity_matrix_sequential(
    vectors: Sequence[SparseVector],
    metric: Any = Metric.COSINE,
) -> np.ndarray:
    """Reference single-threaded build of the full similarity matrix."""
    sim = metric_function(metric)
    n = len(vectors)
    matrix = _identity_matrix(n)
    for i in range(n):
        for j in range(i + 1, n):
            score = sim(vectors[i], vectors[j])
            matrix[i, j] = score
            matrix[j, i] = score
    return matrix


def compute_similarity_matrix(
    vectors: Sequence[SparseVector],
    metric: Any = Metric.COSINE,
    workers: int = 1,
) -> np.ndarray:
    """Build the symmetric, unit-diagonal similarity matrix with `workers` threads.

    Parameters
    ----------
    vectors:
        Entities in matrix order; row/column ``i`` is ``vectors[i]``.
    metric:
        A :class:`Metric` (unrecognised selectors fall back to cosine).
    workers:
        Number of worker threads (>= 1). More workers than pairs is fine; the
        extra ones simply get no work.
    """
    workers = _check_workers(workers)
    sim = metric_function(metric)
    n = len(vectors)
    total = pair_count(n)
    matrix = _identity_matrix(n)
    if total == 0:
        return matrix

    buffer_size = max(1, min(total, workers * QUEUE_SLOTS_PER_WORKER))
    jobs: "queue.Queue[Any]" = queue.Queue(maxsize=buffer_size)
    results: "queue.Queue[Any]" = queue.Queue(maxsize=buffer_size)
    # Set on the first worker failure: the producer stops enqueueing and the
    # workers drain what is left without computing it.
    stop = threading.Event()
    errors: list[BaseException] = []

    def _produce() -> None:
        try:
            for i in range(n):
                if stop.is_set():
                    break
                for j in range(i + 1, n):
                    jobs.put((i, j))
        finally:
            for _ in range(workers):
                jobs.put(_DONE)

    def _work() -> None:
        try:
            while True:
                job = jobs.get()
                if job is _DONE:
                    break
                if stop.is_set():
                    continue
                i, j = job
                try:
                    score = sim(vectors[i], vectors[j])
                except BaseException as exc:  # re-raised by the collector
                    errors.append(exc)
                    stop.set()
                    continue
                results.put((i, j, score))
        finally:
            results.put(_DONE)

    t0 = time.perf_counter()
    producer = threading.Thread(target=_produce, name="simrec-pairs", daemon=True)
    pool = [threading.Thread(target=_work, name=f"simrec-worker-{w}", daemon=True) for w in range(workers)]
    producer.start()
    for t in pool:
        t.start()

    finished = 0
    received = 0
    while finished < workers:
        item = results.get()
        if item is _DONE:
            finished += 1
            continue
        i, j, score = item
        matrix[i, j] = score
        matrix[j, i] = score
        received += 1

    producer.join()
    for t in pool:
        t.join()

    if errors:
        raise errors[0]

    logger.info(
        "similarity matrix metric=%s n=%d pairs=%d workers=%d elapsed_s=%.4f",
        getattr(metric, "value", metric),
        n,
        received,
        workers,
        time.perf_counter() - t0,
    )
    return matrix


def partition(items: Sequence[T], workers: int) -> List[Sequence[T]]:
    """Split `items` into `workers` contiguous, disjoint slices.

    ``chunk = max(1, len(items) // workers)``; the last slice absorbs whatever
    integer division leaves over, so every item lands in exactly one slice.
    Workers past the end of the list get empty slices.
    """
    workers = _check_workers(workers)
    n = len(items)
    chunk = max(1, n // workers)

    slices: List[Sequence[T]] = []
    for w in range(workers):
        start = min(w * chunk, n)
        end = n if w == workers - 1 else min(start + chunk, n)
        slices.append(items[start:end])
    return slices


def score_partitioned(
    candidates: Sequence[Hashable],
    score_fn: Callable[[Hashable], float],
    workers: int = 1,
) -> Dict[Hashable, float]:
    """Score every candidate, one private partial mapping per worker.

    `score_fn` must only read shared state. Partials are combined sequentially
    after all workers complete, so no locking is needed.
    """
    workers = _check_workers(workers)
    if workers == 1 or len(candidates) <= 1:
        return {c: score_fn(c) for c in candidates}

    def _score_slice(chunk: Sequence[Hashable]) -> Dict[Hashable, float]:
        partial: Dict[Hashable, float] = {}
        for c in chunk:
            partial[c] = score_fn(c)
        return partial

    slices = partition(candidates, workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="simrec-part") as pool:
        futures = [pool.submit(_score_slice, s) for s in slices]
        partials = [f.result() for f in futures]

    merged: Dict[Hashable, float] = {}
    for part in partials:
        merged.update(part)
    return merged

