from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Hashable, List, Literal, Optional

from ..config import RecommenderConfig
from ..data import Dataset
from ..neighbors import select_neighbors
from ..similarity.metrics import Metric
from .item_based import recommend_item_based
from .scoring import ScoredItem
from .user_based import recommend_user_based, similar_entities

logger = logging.getLogger(__name__)

Mode = Literal["item", "user"]


@dataclass(frozen=True)
class SimilarUser:
    user_id: Hashable
    similarity: float
    common_rated: int


class CollaborativeRecommender:
    """Item-/user-based recommender over one loaded dataset.

    The class is designed to be instantiated once at process startup and reused
    across requests; the dataset is never mutated.
    """

    def __init__(self, dataset: Dataset, config: RecommenderConfig | None = None) -> None:
        self.dataset = dataset
        self.config = config if config is not None else RecommenderConfig()
        logger.info(
            "CollaborativeRecommender ready: users=%d items=%d ratings=%d metric=%s workers=%d",
            dataset.n_rows,
            dataset.n_columns,
            dataset.n_ratings,
            self.config.metric.value,
            self.config.workers,
        )

    def has_user(self, user_id: Hashable) -> bool:
        return self.dataset.has_row(user_id)

    def resolve_user(self, raw: Hashable) -> Hashable:
        """Map an id as typed by a caller onto a dataset key.

        MovieLens ids are ints and Steam ids are strings, while CLI and JSON
        callers may send either form.
        """
        if self.has_user(raw):
            return raw
        for convert in (int, str):
            try:
                key = convert(raw)
            except (TypeError, ValueError):
                continue
            if self.has_user(key):
                return key
        return raw

    def _require_user(self, user_id: Hashable) -> None:
        if not self.has_user(user_id):
            raise KeyError(f"Unknown user: {user_id}")

    def recommend_items(
        self,
        user_id: Hashable,
        *,
        k: Optional[int] = None,
        mode: Mode = "item",
        metric: Any = None,
        neighbor_k: Optional[int] = None,
        workers: Optional[int] = None,
    ) -> List[ScoredItem]:
        """Recommend unrated items for `user_id`; unset options come from the config."""
        self._require_user(user_id)
        k_final = int(k if k is not None else self.config.top_k)
        metric_final = Metric.parse(metric) if metric is not None else self.config.metric
        nk = int(neighbor_k if neighbor_k is not None else self.config.neighbor_k)
        w = int(workers if workers is not None else self.config.workers)

        if mode == "item":
            return recommend_item_based(self.dataset, user_id, k_final, metric_final, nk, w)
        if mode == "user":
            return recommend_user_based(
                self.dataset,
                user_id,
                k_final,
                metric_final,
                nk,
                w,
                min_similarity=self.config.min_similarity,
            )
        raise ValueError(f"Unsupported mode: {mode!r} (expected: item, user)")

    def similar_users(
        self,
        user_id: Hashable,
        *,
        top_n: int = 10,
        metric: Any = None,
    ) -> List[SimilarUser]:
        """The `top_n` users most similar to `user_id`, best first."""
        self._require_user(user_id)
        metric_final = Metric.parse(metric) if metric is not None else self.config.metric
        sims = similar_entities(
            self.dataset,
            user_id,
            metric_final,
            workers=self.config.workers,
            min_similarity=self.config.min_similarity,
        )
        target_items = self.dataset.row(user_id).keys()

        out: List[SimilarUser] = []
        for nb in select_neighbors(sims, int(top_n)):
            common = len(target_items & self.dataset.row(nb.id).keys())
            out.append(SimilarUser(user_id=nb.id, similarity=float(nb.score), common_rated=int(common)))
        return out
