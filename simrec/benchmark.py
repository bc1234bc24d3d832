"""Sequential vs threaded timing runs for the similarity engine and recommenders."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Hashable, Iterable, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from .cf.item_based import recommend_item_based
from .data import Dataset
from .engine import compute_similarity_matrix, compute_similarity_matrix_sequential, pair_count
from .similarity.metrics import Metric
from .similarity.sparse import SparseVector

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESULT_COLUMNS = ["algorithm", "size", "mode", "workers", "time_ms", "speedup", "efficiency", "comparisons"]


def measure_time(fn: Callable[[], T]) -> Tuple[T, float]:
    """Run `fn` and return ``(result, elapsed_ms)``."""
    t0 = time.perf_counter()
    result = fn()
    return result, (time.perf_counter() - t0) * 1000.0


def speedup(sequential_ms: float, parallel_ms: float) -> float:
    if parallel_ms == 0:
        return 0.0
    return sequential_ms / parallel_ms


def efficiency(speedup_value: float, workers: int) -> float:
    if workers == 0:
        return 0.0
    return speedup_value / workers


def _row(algorithm: str, size: int, mode: str, workers: int, ms: float, seq_ms: float, comparisons: int) -> dict:
    s = speedup(seq_ms, ms)
    return {
        "algorithm": algorithm,
        "size": int(size),
        "mode": mode,
        "workers": int(workers),
        "time_ms": round(ms, 2),
        "speedup": round(s, 2),
        "efficiency": round(efficiency(s, workers), 2),
        "comparisons": int(comparisons),
    }


def benchmark_matrix(
    vectors: Sequence[SparseVector],
    *,
    metrics: Iterable[Metric],
    sizes: Iterable[int],
    workers_list: Iterable[int],
) -> pd.DataFrame:
    """Time full-matrix builds (sequential and threaded) for each metric and size.

    Each threaded matrix is checked against the sequential one (atol 1e-9); a
    mismatch raises RuntimeError. Sizes larger than `vectors` are skipped.
    """
    workers_list = list(workers_list)
    metrics = list(metrics)
    rows: list[dict] = []
    for size in sizes:
        if size > len(vectors):
            logger.warning("Size %d exceeds available entities (%d); skipping", size, len(vectors))
            continue
        subset = vectors[:size]
        comparisons = pair_count(size)
        logger.info("Benchmarking %d entities (%d comparisons)", size, comparisons)

        for metric in metrics:
            expected, seq_ms = measure_time(lambda: compute_similarity_matrix_sequential(subset, metric))
            rows.append(_row(metric.label, size, "sequential", 1, seq_ms, seq_ms, comparisons))

            for w in workers_list:
                got, par_ms = measure_time(lambda: compute_similarity_matrix(subset, metric, w))
                if not np.allclose(got, expected, rtol=0.0, atol=1e-9):
                    raise RuntimeError(f"{metric.label}: threaded matrix (workers={w}) differs from sequential")
                rows.append(_row(metric.label, size, "concurrent", w, par_ms, seq_ms, comparisons))
                logger.info(
                    "%s size=%d workers=%d: %.2f ms (speedup %.2fx)",
                    metric.label,
                    size,
                    w,
                    par_ms,
                    speedup(seq_ms, par_ms),
                )

    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def benchmark_recommender(
    dataset: Dataset,
    target: Hashable,
    *,
    metrics: Iterable[Metric],
    workers_list: Iterable[int],
    top_k: int = 10,
    neighbor_k: int = 30,
) -> pd.DataFrame:
    """Time item-based recommendation, sequential vs partitioned, per metric."""
    workers_list = list(workers_list)
    n_candidates = dataset.n_columns - len(dataset.row(target))
    rows: list[dict] = []
    for metric in metrics:
        expected, seq_ms = measure_time(
            lambda: recommend_item_based(dataset, target, top_k, metric, neighbor_k, workers=1)
        )
        rows.append(_row(metric.label, n_candidates, "sequential", 1, seq_ms, seq_ms, n_candidates))
        for w in workers_list:
            got, par_ms = measure_time(
                lambda: recommend_item_based(dataset, target, top_k, metric, neighbor_k, workers=w)
            )
            if not np.allclose([r.score for r in got], [r.score for r in expected], rtol=0.0, atol=1e-9):
                raise RuntimeError(f"{metric.label}: partitioned scores (workers={w}) differ from sequential")
            rows.append(_row(metric.label, n_candidates, "concurrent", w, par_ms, seq_ms, n_candidates))

    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def write_results(df: pd.DataFrame, path: Path) -> Path:
    """Write benchmark rows to CSV, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Benchmark results written to %s (%d rows)", path, len(df))
    return path


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Best speedup per algorithm and size (concurrent rows only)."""
    conc = df[df["mode"] == "concurrent"]
    if conc.empty:
        return pd.DataFrame(columns=["algorithm", "size", "workers", "speedup"])
    idx = conc.groupby(["algorithm", "size"])["speedup"].idxmax()
    return conc.loc[idx, ["algorithm", "size", "workers", "speedup"]].reset_index(drop=True)
