"""Command-line entry point.

Examples:
    simrec recommend --user-id 1 --mode item --k 10 --neighbor-k 30 --workers 4
    simrec similar-users --user-id 1 --top-n 10
    simrec matrix --limit 200 --metric pearson --workers 8 --out results/matrix.csv
    simrec benchmark
    simrec benchmark --recommender --user-id 1 --workers 4
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from .benchmark import benchmark_matrix, benchmark_recommender, summarize, write_results
from .cf.recommender import CollaborativeRecommender
from .config import RecommenderConfig, SimrecConfig, load_config
from .data import load_dataset
from .engine import compute_similarity_matrix
from .similarity.metrics import Metric
from .utils import setup_logging

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Sparse-vector similarity and collaborative filtering")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: <repo>/config.yaml)")
    p.add_argument("--ratings", type=Path, default=None, help="Override dataset.ratings_path")
    p.add_argument("--format", dest="fmt", choices=["movielens", "steam"], default=None, help="Override dataset.format")
    p.add_argument("--metric", type=str, default=None, help="cosine | pearson | jaccard | jaccard_weighted")
    p.add_argument("--workers", type=int, default=None, help="Worker threads")
    p.add_argument("--log-level", type=str, default="INFO")

    sub = p.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recommend", help="Top-K recommendations for one user")
    rec.add_argument("--user-id", type=str, required=True, help="Row entity id")
    rec.add_argument("--mode", choices=["item", "user"], default="item")
    rec.add_argument("--k", type=int, default=None, help="How many recommendations to return")
    rec.add_argument("--neighbor-k", type=int, default=None, help="Neighbours per prediction (0 = all)")

    sim = sub.add_parser("similar-users", help="Most similar users to one user")
    sim.add_argument("--user-id", type=str, required=True)
    sim.add_argument("--top-n", type=int, default=10)

    mat = sub.add_parser("matrix", help="Build the full user-user similarity matrix")
    mat.add_argument("--limit", type=int, default=None, help="Only the first N users (sorted by id)")
    mat.add_argument("--out", type=Path, default=None, help="Write the matrix as CSV")

    bench = sub.add_parser("benchmark", help="Sequential vs threaded timings")
    bench.add_argument(
        "--recommender",
        action="store_true",
        help="Time item-based recommendation for --user-id instead of matrix builds",
    )
    bench.add_argument("--user-id", type=str, default=None, help="Target user for --recommender")
    return p


def _apply_overrides(cfg: SimrecConfig, args: argparse.Namespace) -> RecommenderConfig:
    base = cfg.recommender
    return RecommenderConfig(
        metric=Metric.parse(args.metric) if args.metric else base.metric,
        top_k=int(base.top_k if getattr(args, "k", None) is None else args.k),
        neighbor_k=int(base.neighbor_k if getattr(args, "neighbor_k", None) is None else args.neighbor_k),
        workers=int(base.workers if args.workers is None else args.workers),
        min_similarity=base.min_similarity,
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "benchmark" and args.recommender and args.user_id is None:
        parser.error("benchmark --recommender requires --user-id")
    setup_logging(args.log_level)

    cfg = load_config(args.config)
    ratings_path = args.ratings if args.ratings is not None else cfg.dataset.ratings_path
    dataset = load_dataset(
        ratings_path,
        fmt=args.fmt or cfg.dataset.format,
        rating_scale=cfg.dataset.rating_scale,
    )
    rec_cfg = _apply_overrides(cfg, args)

    if args.command == "recommend":
        rec = CollaborativeRecommender(dataset, rec_cfg)
        user_id = rec.resolve_user(args.user_id)
        recs = rec.recommend_items(user_id, mode=args.mode)
        print(f"\n=== Recommended items ({args.mode}-based, {rec_cfg.metric.value}) ===")
        if recs:
            print(pd.DataFrame([r.__dict__ for r in recs]).to_string(index=False))
        else:
            print("No recommendations found.")

    elif args.command == "similar-users":
        rec = CollaborativeRecommender(dataset, rec_cfg)
        user_id = rec.resolve_user(args.user_id)
        sims = rec.similar_users(user_id, top_n=int(args.top_n))
        print("\n=== Similar Users ===")
        if sims:
            print(pd.DataFrame([s.__dict__ for s in sims]).to_string(index=False))
        else:
            print("No similar users found.")

    elif args.command == "matrix":
        ids, vectors = dataset.vectors(limit=args.limit)
        matrix = compute_similarity_matrix(vectors, rec_cfg.metric, rec_cfg.workers)
        df = pd.DataFrame(matrix, index=ids, columns=ids)
        if args.out is not None:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(args.out)
            logger.info("Similarity matrix %s written to %s", matrix.shape, args.out)
        else:
            print(df.round(4).to_string())

    elif args.command == "benchmark":
        bench = cfg.benchmark
        workers_list = [rec_cfg.workers] if args.workers is not None else list(bench.workers)
        metrics = [rec_cfg.metric] if args.metric else list(bench.metrics)
        if args.recommender:
            rec = CollaborativeRecommender(dataset, rec_cfg)
            user_id = rec.resolve_user(args.user_id)
            if not rec.has_user(user_id):
                raise KeyError(f"Unknown user: {args.user_id}")
            results = benchmark_recommender(
                dataset,
                user_id,
                metrics=metrics,
                workers_list=workers_list,
                top_k=rec_cfg.top_k,
                neighbor_k=rec_cfg.neighbor_k,
            )
            print(f"\n=== Item-based recommendation timings (user {user_id}) ===")
        else:
            _, vectors = dataset.vectors()
            results = benchmark_matrix(vectors, metrics=metrics, sizes=bench.sizes, workers_list=workers_list)
        write_results(results, bench.results_path)
        print(results.to_string(index=False))
        print("\n=== Best speedup ===")
        print(summarize(results).to_string(index=False))


if __name__ == "__main__":
    main()
