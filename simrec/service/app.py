"""FastAPI service entrypoint for the collaborative-filtering recommender."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..cf.recommender import CollaborativeRecommender
from ..config import load_config
from ..data import load_dataset
from ..paths import get_repo_root
from ..utils import setup_logging
from .schemas import (
    RecommendRequest,
    RecommendResponse,
    SimilarUsersRequest,
    SimilarUsersResponse,
)

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    config_path = _get_env_path("CONFIG_PATH", get_repo_root() / "config.yaml")
    cfg = load_config(config_path)
    dataset = load_dataset(
        cfg.dataset.ratings_path,
        fmt=cfg.dataset.format,
        rating_scale=cfg.dataset.rating_scale,
    )

    logger.info("Starting service with config=%s dataset=%s", config_path, cfg.dataset.ratings_path)
    app.state.recommender = CollaborativeRecommender(dataset, cfg.recommender)
    yield


app = FastAPI(title="Sparse Similarity CF Service", lifespan=lifespan)


def _recommender(app_: FastAPI) -> CollaborativeRecommender:
    rec = getattr(app_.state, "recommender", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="Recommender not initialized")
    return rec


@app.get("/health")
def health() -> dict:
    rec = getattr(app.state, "recommender", None)
    if rec is None:
        return {"status": "starting"}
    return {
        "status": "ok",
        "users": rec.dataset.n_rows,
        "items": rec.dataset.n_columns,
        "ratings": rec.dataset.n_ratings,
    }


@app.post("/recommend", response_model=RecommendResponse)
def recommend(req: RecommendRequest) -> dict:
    """Recommend unrated items for a user (item- or user-based)."""
    rec = _recommender(app)
    user_id = rec.resolve_user(req.userId)
    metric = req.metric if req.metric is not None else rec.config.metric.value
    try:
        items = rec.recommend_items(
            user_id,
            k=int(req.k),
            mode=req.mode,
            metric=metric,
            neighbor_k=req.neighbor_k,
            workers=req.workers,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "userId": user_id,
        "mode": req.mode,
        "metric": str(metric),
        "k": int(req.k),
        "results": [{"itemId": r.item_id, "score": float(r.score)} for r in items],
    }


@app.post("/similar_users", response_model=SimilarUsersResponse)
def similar_users(req: SimilarUsersRequest) -> dict:
    """Return users with similar rating patterns."""
    rec = _recommender(app)
    user_id = rec.resolve_user(req.userId)
    try:
        sims = rec.similar_users(user_id, top_n=int(req.top_n), metric=req.metric)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "userId": user_id,
        "top_n": int(req.top_n),
        "results": [
            {"userId": s.user_id, "similarity": s.similarity, "common_rated": s.common_rated} for s in sims
        ],
    }
