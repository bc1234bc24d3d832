"""Neighbourhood collaborative filtering (item-based and user-based).

Both variants score candidates the target has not rated with a similarity
weighted average of the target's (or its neighbours') ratings, then return the
best `top_k` as `ScoredItem`s.
"""

from .item_based import recommend_item_based
from .recommender import CollaborativeRecommender, SimilarUser
from .scoring import ScoredItem
from .user_based import recommend_user_based, similar_entities

__all__ = [
    "CollaborativeRecommender",
    "ScoredItem",
    "SimilarUser",
    "recommend_item_based",
    "recommend_user_based",
    "similar_entities",
]
