"""`config.yaml` loading into typed, frozen settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .paths import get_repo_root, resolve_path
from .similarity.metrics import Metric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetConfig:
    ratings_path: Path = Path("data/ratings.csv")
    format: str = "movielens"
    rating_scale: float = 5.0


@dataclass(frozen=True)
class RecommenderConfig:
    metric: Metric = Metric.COSINE
    top_k: int = 10
    neighbor_k: int = 30
    workers: int = 1
    min_similarity: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metric", Metric.parse(self.metric))
        if int(self.top_k) < 1:
            raise ValueError(f"recommender.top_k must be >= 1, got {self.top_k}")
        if int(self.neighbor_k) < 0:
            raise ValueError(f"recommender.neighbor_k must be >= 0, got {self.neighbor_k}")
        if int(self.workers) < 1:
            raise ValueError(f"recommender.workers must be >= 1, got {self.workers}")


@dataclass(frozen=True)
class BenchmarkConfig:
    sizes: tuple[int, ...] = (100, 200, 400)
    workers: tuple[int, ...] = (2, 4, 8)
    metrics: tuple[Metric, ...] = tuple(Metric)
    results_path: Path = Path("results/results_benchmark.csv")


@dataclass(frozen=True)
class SimrecConfig:
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    recommender: RecommenderConfig = field(default_factory=RecommenderConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    raw = cfg.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"config section {name!r} must be a mapping, got {type(raw).__name__}")
    return raw


def parse_config(cfg: dict[str, Any], *, repo_root: Path | None = None) -> SimrecConfig:
    """Build settings from an already-parsed YAML mapping (missing keys keep defaults)."""
    if not isinstance(cfg, dict):
        raise ValueError(f"Expected config to be a mapping, got: {type(cfg)}")
    root = repo_root if repo_root is not None else get_repo_root()

    ds_raw = _section(cfg, "dataset")
    dataset = DatasetConfig(
        ratings_path=resolve_path(root, ds_raw.get("ratings_path", DatasetConfig.ratings_path)),
        format=str(ds_raw.get("format", DatasetConfig.format)),
        rating_scale=float(ds_raw.get("rating_scale", DatasetConfig.rating_scale)),
    )

    rec_raw = _section(cfg, "recommender")
    min_sim = rec_raw.get("min_similarity", None)
    recommender = RecommenderConfig(
        metric=Metric.parse(rec_raw.get("metric", RecommenderConfig.metric)),
        top_k=int(rec_raw.get("top_k", RecommenderConfig.top_k)),
        neighbor_k=int(rec_raw.get("neighbor_k", RecommenderConfig.neighbor_k)),
        workers=int(rec_raw.get("workers", RecommenderConfig.workers)),
        min_similarity=(None if min_sim is None else float(min_sim)),
    )

    bench_raw = _section(cfg, "benchmark")
    defaults = BenchmarkConfig()
    benchmark = BenchmarkConfig(
        sizes=tuple(int(s) for s in bench_raw.get("sizes", defaults.sizes)),
        workers=tuple(int(w) for w in bench_raw.get("workers", defaults.workers)),
        metrics=tuple(Metric.parse(m) for m in bench_raw.get("metrics", [m.value for m in defaults.metrics])),
        results_path=resolve_path(root, bench_raw.get("results_path", defaults.results_path)),
    )

    return SimrecConfig(dataset=dataset, recommender=recommender, benchmark=benchmark)


def load_config(path: Path | None = None) -> SimrecConfig:
    """Read `config.yaml` (default: at the repo root) into :class:`SimrecConfig`."""
    repo_root = get_repo_root()
    config_path = resolve_path(repo_root, path) if path is not None else repo_root / "config.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text())
    if raw is None:
        raw = {}
    cfg = parse_config(raw, repo_root=repo_root)
    logger.info("Loaded configuration from %s", config_path)
    return cfg
