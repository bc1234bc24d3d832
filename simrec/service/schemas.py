"""Pydantic schemas for the recommendation API."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

UserId = Union[int, str]


class RecommendRequest(BaseModel):
    """Request for item- or user-based recommendations."""

    userId: UserId = Field(..., description="Row entity id (MovieLens userId or Steam id)")
    k: int = Field(10, ge=1, le=100, description="Number of recommendations to return (1..100)")
    mode: Literal["item", "user"] = Field("item", description="Item-based or user-based filtering")
    metric: Optional[Literal["cosine", "pearson", "jaccard", "jaccard_weighted"]] = Field(
        None, description="Similarity metric; defaults to config.yaml"
    )
    neighbor_k: Optional[int] = Field(None, ge=0, le=1000, description="Neighbours per prediction (0 = all)")
    workers: Optional[int] = Field(None, ge=1, le=64, description="Worker threads")


class RecommendationItem(BaseModel):
    itemId: UserId
    score: float


class RecommendResponse(BaseModel):
    userId: UserId
    mode: str
    metric: str
    k: int
    results: list[RecommendationItem]


class SimilarUsersRequest(BaseModel):
    """Request for users with similar rating patterns."""

    userId: UserId = Field(..., description="Row entity id")
    top_n: int = Field(10, ge=1, le=100, description="Number of similar users to return")
    metric: Optional[Literal["cosine", "pearson", "jaccard", "jaccard_weighted"]] = None


class SimilarUserItem(BaseModel):
    userId: UserId
    similarity: float
    common_rated: int


class SimilarUsersResponse(BaseModel):
    userId: UserId
    top_n: int
    results: list[SimilarUserItem]
