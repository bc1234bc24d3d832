from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, List, Mapping, Tuple

from ..similarity.sparse import Weight, scalar


@dataclass(frozen=True)
class ScoredItem:
    item_id: Hashable
    score: float


def weighted_average(pairs: Iterable[Tuple[float, Weight]]) -> float:
    """Similarity-weighted average of ratings: sum(sim * r) / sum(|sim|).

    Returns 0 when the denominator is 0 (no neighbours, or all similarities 0).
    """
    num = 0.0
    den = 0.0
    for sim, rating in pairs:
        num += sim * scalar(rating)
        den += abs(sim)
    if den == 0:
        return 0.0
    return num / den


def top_k(scores: Mapping[Hashable, float], k: int) -> List[ScoredItem]:
    """Sort all scores descending and keep the first `k` (order among ties is unspecified)."""
    if k <= 0:
        return []
    ranked = sorted(scores.items(), key=lambda x: x[1], reverse=True)
    return [ScoredItem(item_id=i, score=float(s)) for i, s in ranked[:k]]
