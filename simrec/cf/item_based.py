"""Item-based collaborative filtering.

For every item the target has not rated, compare the item's column vector with
each item the target did rate, keep the `neighbor_k` most similar rated items
and predict the target's rating as the similarity-weighted average of its own
ratings on those neighbours.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Hashable, List

from ..data import Dataset
from ..engine import score_partitioned
from ..neighbors import select_neighbors
from ..similarity.metrics import Metric, metric_function
from ..similarity.sparse import SparseVector
from .scoring import ScoredItem, top_k as top_k_scores, weighted_average

logger = logging.getLogger(__name__)


def unrated_candidates(dataset: Dataset, rated: SparseVector) -> List[Hashable]:
    """Every column entity absent from `rated`, in a stable order."""
    cands = [c for c in dataset.by_column if c not in rated]
    try:
        cands.sort()
    except TypeError:
        cands.sort(key=str)
    return cands


def predict_item_score(
    dataset: Dataset,
    target_ratings: SparseVector,
    candidate: Hashable,
    metric: Any = Metric.COSINE,
    neighbor_k: int = 0,
) -> float:
    """Predicted rating of `candidate` for a user whose ratings are `target_ratings`."""
    sim = metric_function(metric)
    cand_vec = dataset.column(candidate)
    sims = {rated: sim(dataset.column(rated), cand_vec) for rated in target_ratings}
    neighbors = select_neighbors(sims, neighbor_k)
    return weighted_average((nb.score, target_ratings[nb.id]) for nb in neighbors)


def recommend_item_based(
    dataset: Dataset,
    target: Hashable,
    top_k: int,
    metric: Any = Metric.COSINE,
    neighbor_k: int = 0,
    workers: int = 1,
) -> List[ScoredItem]:
    """Top `top_k` unrated items for `target`, best first.

    Parameters
    ----------
    dataset:
        Loaded dataset (read-only during the call).
    target:
        Row entity to recommend for. Unknown targets or targets with no ratings
        yield an empty list.
    top_k:
        Number of recommendations to return.
    metric:
        Similarity between item column vectors.
    neighbor_k:
        Rated items used per candidate; ``<= 0`` uses all of them.
    workers:
        ``> 1`` splits the candidate list across that many threads (partition
        mode); the result matches the sequential run within float tolerance.
    """
    target_ratings = dataset.row(target)
    if not target_ratings:
        return []

    t0 = time.perf_counter()
    candidates = unrated_candidates(dataset, target_ratings)

    def _score(candidate: Hashable) -> float:
        return predict_item_score(dataset, target_ratings, candidate, metric, neighbor_k)

    scores = score_partitioned(candidates, _score, workers)
    out = top_k_scores(scores, top_k)

    logger.info(
        "item-based target=%s metric=%s candidates=%d neighbor_k=%d workers=%d elapsed_s=%.4f",
        target,
        getattr(metric, "value", metric),
        len(candidates),
        neighbor_k,
        workers,
        time.perf_counter() - t0,
    )
    return out
