from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd

from .similarity.sparse import SparseVector, Weight

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "movielens": ("userId", "movieId", "rating"),
    "steam": ("app_id", "steam_id", "playtime_norm", "rating"),
}

_EMPTY: Mapping[Hashable, Weight] = {}


@dataclass(frozen=True)
class Dataset:
    """Two mirrored, read-only indexes over the same observations.

    - ``by_row``: row entity (user) -> {column entity (item) -> weight}
    - ``by_column``: column entity (item) -> {row entity (user) -> weight}
    """

    by_row: Dict[Hashable, Dict[Hashable, Weight]]
    by_column: Dict[Hashable, Dict[Hashable, Weight]] = field(repr=False)

    @classmethod
    def from_rows(cls, by_row: Mapping[Hashable, Mapping[Hashable, Weight]]) -> "Dataset":
        """Build a dataset from the row index, deriving the column index once."""
        rows = {r: dict(vec) for r, vec in by_row.items()}
        columns: Dict[Hashable, Dict[Hashable, Weight]] = {}
        for r, vec in rows.items():
            for c, w in vec.items():
                columns.setdefault(c, {})[r] = w
        return cls(by_row=rows, by_column=columns)

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[Hashable, Hashable, Weight]]) -> "Dataset":
        """Build from ``(row, column, weight)`` triples; later duplicates win."""
        rows: Dict[Hashable, Dict[Hashable, Weight]] = {}
        for r, c, w in triples:
            rows.setdefault(r, {})[c] = w
        return cls.from_rows(rows)

    @property
    def n_rows(self) -> int:
        return len(self.by_row)

    @property
    def n_columns(self) -> int:
        return len(self.by_column)

    @property
    def n_ratings(self) -> int:
        return sum(len(v) for v in self.by_row.values())

    def has_row(self, row_id: Hashable) -> bool:
        return row_id in self.by_row

    def row(self, row_id: Hashable) -> SparseVector:
        """Observed weights of a row entity (empty when unknown)."""
        return self.by_row.get(row_id, _EMPTY)

    def column(self, column_id: Hashable) -> SparseVector:
        """Observed weights of a column entity (empty when unknown)."""
        return self.by_column.get(column_id, _EMPTY)

    def entity_ids(self) -> List[Hashable]:
        """Row entity ids in a stable order (sorted where comparable)."""
        return _stable_order(self.by_row)

    def vectors(self, limit: int | None = None) -> Tuple[List[Hashable], List[SparseVector]]:
        """Row ids and their vectors in matrix order, optionally truncated."""
        ids = self.entity_ids()
        if limit is not None:
            ids = ids[: max(0, int(limit))]
        return ids, [self.by_row[i] for i in ids]


def _stable_order(keys: Iterable[Hashable]) -> List[Hashable]:
    keys = list(keys)
    try:
        return sorted(keys)
    except TypeError:
        return sorted(keys, key=str)


def validate_columns(df: pd.DataFrame, required: Sequence[str], name: str) -> None:
    """Raise ValueError if `df` lacks any of `required`."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{name} missing columns: {missing}")


def _coerce_numeric(df: pd.DataFrame, columns: Sequence[str], name: str) -> pd.DataFrame:
    out = df.copy()
    for c in columns:
        out[c] = pd.to_numeric(out[c], errors="coerce")
    bad = out[list(columns)].isna().any(axis=1)
    if bad.any():
        logger.warning("%s: dropping %d row(s) with unparsable values", name, int(bad.sum()))
        out = out.loc[~bad]
    return out


def load_movielens_ratings(path: Path, *, rating_scale: float = 5.0) -> Dataset:
    """Load a MovieLens-style ``ratings.csv`` (userId, movieId, rating[, timestamp]).

    Ratings are divided by `rating_scale` so that the usual 0.5..5 stars land in
    [0, 1]. When a (userId, movieId) pair repeats, the last row wins.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ratings file not found: {path}")
    if rating_scale <= 0:
        raise ValueError(f"rating_scale must be > 0, got {rating_scale}")

    df = pd.read_csv(path)
    validate_columns(df, REQUIRED_COLUMNS["movielens"], path.name)
    df = _coerce_numeric(df, REQUIRED_COLUMNS["movielens"], path.name)

    users = df["userId"].astype("int64").tolist()
    items = df["movieId"].astype("int64").tolist()
    ratings = (df["rating"].astype("float64") / float(rating_scale)).tolist()

    ds = Dataset.from_triples(zip(users, items, ratings))
    logger.info(
        "Loaded %s: users=%d items=%d ratings=%d",
        path,
        ds.n_rows,
        ds.n_columns,
        ds.n_ratings,
    )
    return ds


def load_steam_interactions(path: Path) -> Dataset:
    """Load Steam user/game interactions (app_id, steam_id, playtime_norm, rating).

    Rows are users (steam ids, kept as strings); each game carries the feature
    pair ``(playtime_norm, rating)``, both expected pre-normalised.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Interactions file not found: {path}")

    df = pd.read_csv(path, dtype={"steam_id": "string"})
    validate_columns(df, REQUIRED_COLUMNS["steam"], path.name)
    df = _coerce_numeric(df, ("app_id", "playtime_norm", "rating"), path.name)
    df = df.dropna(subset=["steam_id"])

    apps = df["app_id"].astype("int64").tolist()
    users = df["steam_id"].astype(str).tolist()
    playtime = df["playtime_norm"].astype("float64").tolist()
    rating = df["rating"].astype("float64").tolist()

    ds = Dataset.from_triples(
        (u, a, (float(p), float(r))) for u, a, p, r in zip(users, apps, playtime, rating)
    )
    logger.info(
        "Loaded %s: users=%d games=%d interactions=%d",
        path,
        ds.n_rows,
        ds.n_columns,
        ds.n_ratings,
    )
    return ds


def load_dataset(path: Path, *, fmt: str = "movielens", rating_scale: float = 5.0) -> Dataset:
    """Load a dataset in one of the supported formats (``movielens`` or ``steam``)."""
    fmt = str(fmt).strip().lower()
    if fmt == "movielens":
        return load_movielens_ratings(path, rating_scale=rating_scale)
    if fmt == "steam":
        return load_steam_interactions(path)
    raise ValueError(f"Unsupported dataset format: {fmt!r} (expected: movielens, steam)")
