"""Similarity metrics between two sparse vectors.

Every metric is total: empty vectors, disjoint supports and zero variances all
resolve to a similarity of 0 instead of raising.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable

from .sparse import SparseVector, common_keys, dot, features, scalar, squared_norm


class Metric(str, Enum):
    COSINE = "cosine"
    PEARSON = "pearson"
    JACCARD = "jaccard"
    JACCARD_WEIGHTED = "jaccard_weighted"

    @classmethod
    def parse(cls, name: "str | Metric") -> "Metric":
        """Parse a metric name (case-insensitive, '-' and '_' interchangeable)."""
        if isinstance(name, Metric):
            return name
        key = str(name).strip().lower().replace("-", "_")
        for m in cls:
            if m.value == key:
                return m
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown metric: {name!r} (expected one of: {valid})")

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Metric.COSINE: "Cosine Similarity",
    Metric.PEARSON: "Pearson Correlation",
    Metric.JACCARD: "Jaccard Index",
    Metric.JACCARD_WEIGHTED: "Jaccard Weighted",
}


def cosine(a: SparseVector, b: SparseVector) -> float:
    """Cosine similarity.

    The dot product only runs over keys present in both vectors, but each norm
    covers the vector's complete key set.
    """
    norm_a = squared_norm(a)
    norm_b = squared_norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    num = 0.0
    for k in common_keys(a, b):
        num += dot(a[k], b[k])
    return num / math.sqrt(norm_a * norm_b)


def pearson(a: SparseVector, b: SparseVector) -> float:
    """Pearson correlation over co-rated keys only (needs at least 2)."""
    common = common_keys(a, b)
    if len(common) < 2:
        return 0.0

    values_a: list[float] = []
    values_b: list[float] = []
    for k in common:
        values_a.extend(features(a[k]))
        values_b.extend(features(b[k]))

    n = len(values_a)
    mean_a = sum(values_a) / n
    mean_b = sum(values_b) / n

    num = 0.0
    den_a = 0.0
    den_b = 0.0
    for va, vb in zip(values_a, values_b):
        da = va - mean_a
        db = vb - mean_b
        num += da * db
        den_a += da * da
        den_b += db * db

    if den_a == 0 or den_b == 0:
        return 0.0
    return num / (math.sqrt(den_a) * math.sqrt(den_b))


def jaccard(a: SparseVector, b: SparseVector) -> float:
    """Jaccard index on the key sets; weights are ignored."""
    inter = len(common_keys(a, b))
    union = len(a) + len(b) - inter
    if union == 0:
        return 0.0
    return inter / union


def jaccard_weighted(a: SparseVector, b: SparseVector) -> float:
    """Weighted Jaccard: sum of per-key minimums over sum of per-key maximums.

    Each key contributes the sum of the entity's feature weights at that key
    (0 when the entity has not observed the key).
    """
    min_sum = 0.0
    max_sum = 0.0
    for k in set(a).union(b):
        va = scalar(a[k]) if k in a else 0.0
        vb = scalar(b[k]) if k in b else 0.0
        if va < vb:
            min_sum += va
            max_sum += vb
        else:
            min_sum += vb
            max_sum += va

    if max_sum == 0:
        return 0.0
    return min_sum / max_sum


_METRIC_FUNCS: dict[Metric, Callable[[SparseVector, SparseVector], float]] = {
    Metric.COSINE: cosine,
    Metric.PEARSON: pearson,
    Metric.JACCARD: jaccard,
    Metric.JACCARD_WEIGHTED: jaccard_weighted,
}


def metric_function(metric: Any) -> Callable[[SparseVector, SparseVector], float]:
    """Return the implementation for `metric`; anything unrecognised maps to cosine."""
    try:
        return _METRIC_FUNCS.get(Metric(metric), cosine)
    except ValueError:
        return cosine


def similarity(a: SparseVector, b: SparseVector, metric: Any = Metric.COSINE) -> float:
    """Similarity between `a` and `b` under `metric` (cosine for unknown selectors)."""
    return metric_function(metric)(a, b)
