from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
import yaml

from simrec.cli import main


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    ratings = tmp_path / "ratings.csv"
    ratings.write_text(
        "userId,movieId,rating\n"
        "1,10,5.0\n1,20,4.0\n1,30,1.0\n"
        "2,10,4.5\n2,20,3.5\n2,40,3.0\n"
        "3,20,1.5\n3,30,5.0\n3,50,4.5\n"
    )
    cfg = {
        "dataset": {"ratings_path": str(ratings), "format": "movielens"},
        "recommender": {"metric": "cosine", "top_k": 5, "neighbor_k": 0, "workers": 2},
        "benchmark": {"sizes": [2, 3], "workers": [2], "metrics": ["jaccard"], "results_path": str(tmp_path / "b.csv")},
    }
    p = tmp_path / "config.yaml"
    p.write_text(yaml.safe_dump(cfg))
    return p


def test_recommend_command(config_path: Path, capsys) -> None:
    main(["--config", str(config_path), "recommend", "--user-id", "1", "--mode", "user"])
    out = capsys.readouterr().out
    assert "Recommended items (user-based, cosine)" in out
    assert "40" in out


def test_similar_users_command(config_path: Path, capsys) -> None:
    main(["--config", str(config_path), "--metric", "jaccard", "similar-users", "--user-id", "1", "--top-n", "1"])
    out = capsys.readouterr().out
    assert "Similar Users" in out


def test_matrix_command_writes_csv(config_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "matrix.csv"
    main(["--config", str(config_path), "matrix", "--out", str(out)])
    df = pd.read_csv(out, index_col=0)
    assert df.shape == (3, 3)
    assert list(df.index) == [1, 2, 3]


def test_benchmark_command(config_path: Path, tmp_path: Path) -> None:
    main(["--config", str(config_path), "benchmark"])
    df = pd.read_csv(tmp_path / "b.csv")
    assert set(df["size"]) == {2, 3}
    assert set(df["algorithm"]) == {"Jaccard Index"}


def test_benchmark_recommender_command(config_path: Path, tmp_path: Path, capsys) -> None:
    main(["--config", str(config_path), "benchmark", "--recommender", "--user-id", "1"])
    out = capsys.readouterr().out
    assert "Item-based recommendation timings (user 1)" in out

    df = pd.read_csv(tmp_path / "b.csv")
    assert list(df["mode"]) == ["sequential", "concurrent"]
    assert set(df["algorithm"]) == {"Jaccard Index"}
    # user 1 rated 3 of the 5 movies
    assert set(df["size"]) == {2}


def test_benchmark_recommender_overrides(config_path: Path, tmp_path: Path) -> None:
    main(["--config", str(config_path), "--metric", "cosine", "--workers", "3", "benchmark", "--recommender", "--user-id", "2"])
    df = pd.read_csv(tmp_path / "b.csv")
    assert set(df["algorithm"]) == {"Cosine Similarity"}
    assert list(df["workers"]) == [1, 3]


def test_benchmark_recommender_needs_user(config_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["--config", str(config_path), "benchmark", "--recommender"])
    with pytest.raises(KeyError):
        main(["--config", str(config_path), "benchmark", "--recommender", "--user-id", "999"])


@pytest.mark.parametrize(
    "argv",
    [
        ["--workers", "0", "recommend", "--user-id", "1"],
        ["recommend", "--user-id", "1", "--k", "0"],
        ["recommend", "--user-id", "1", "--neighbor-k", "-1"],
    ],
)
def test_explicit_invalid_overrides_are_rejected(config_path: Path, argv: list[str]) -> None:
    with pytest.raises(ValueError):
        main(["--config", str(config_path), *argv])
