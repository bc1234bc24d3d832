"""User-based collaborative filtering.

Rank every other user by similarity to the target, keep the `neighbor_k` closest
and predict each item they rated (and the target did not) as the
similarity-weighted average of the neighbours' ratings for it.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Hashable, List, Optional

from ..data import Dataset
from ..engine import score_partitioned
from ..neighbors import Neighbor, select_neighbors
from ..similarity.metrics import Metric, metric_function
from .scoring import ScoredItem, top_k as top_k_scores, weighted_average

logger = logging.getLogger(__name__)


def similar_entities(
    dataset: Dataset,
    target: Hashable,
    metric: Any = Metric.COSINE,
    *,
    workers: int = 1,
    min_similarity: Optional[float] = None,
) -> Dict[Hashable, float]:
    """Similarity between `target` and every other row entity.

    Entities scoring below `min_similarity` are left out before anything else
    sees them; ``None`` keeps all of them. Unknown targets give ``{}``.
    """
    if not dataset.has_row(target):
        return {}

    sim = metric_function(metric)
    target_vec = dataset.row(target)
    others = [u for u in dataset.entity_ids() if u != target]

    scores = score_partitioned(others, lambda u: sim(target_vec, dataset.row(u)), workers)
    if min_similarity is not None:
        scores = {u: s for u, s in scores.items() if s >= min_similarity}
    return scores


def predict_from_neighbors(dataset: Dataset, neighbors: List[Neighbor], item: Hashable) -> float:
    """Weighted average over the neighbours that rated `item`."""
    pairs = []
    for nb in neighbors:
        ratings = dataset.row(nb.id)
        if item in ratings:
            pairs.append((nb.score, ratings[item]))
    return weighted_average(pairs)


def recommend_user_based(
    dataset: Dataset,
    target: Hashable,
    top_k: int,
    metric: Any = Metric.COSINE,
    neighbor_k: int = 0,
    workers: int = 1,
    min_similarity: Optional[float] = None,
) -> List[ScoredItem]:
    """Top `top_k` items for `target` drawn from its nearest neighbours.

    `neighbor_k <= 0` uses every other user as a neighbour. `workers > 1`
    partitions the user-similarity pass across threads.
    """
    if not dataset.has_row(target):
        return []

    t0 = time.perf_counter()
    target_ratings = dataset.row(target)
    sims = similar_entities(dataset, target, metric, workers=workers, min_similarity=min_similarity)
    neighbors = select_neighbors(sims, neighbor_k)
    if not neighbors:
        return []

    candidates = set()
    for nb in neighbors:
        for item in dataset.row(nb.id):
            if item not in target_ratings:
                candidates.add(item)

    scores = {item: predict_from_neighbors(dataset, neighbors, item) for item in candidates}
    out = top_k_scores(scores, top_k)

    logger.info(
        "user-based target=%s metric=%s neighbors=%d candidates=%d workers=%d elapsed_s=%.4f",
        target,
        getattr(metric, "value", metric),
        len(neighbors),
        len(candidates),
        workers,
        time.perf_counter() - t0,
    )
    return out
