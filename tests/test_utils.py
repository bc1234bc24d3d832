from __future__ import annotations

import logging
from pathlib import Path

from simrec.paths import get_repo_root, resolve_path
from simrec.utils import setup_logging


def test_get_repo_root_walks_up_to_config(tmp_path: Path) -> None:
    proj = tmp_path / "proj"
    nested = proj / "a" / "b"
    nested.mkdir(parents=True)
    (proj / "config.yaml").write_text("recommender: {}\n")

    assert get_repo_root(nested) == proj.resolve()
    assert get_repo_root(proj / "config.yaml") == proj.resolve()


def test_get_repo_root_falls_back_to_package_location(tmp_path: Path) -> None:
    root = get_repo_root(tmp_path)
    assert (root / "config.yaml").exists() or (root / ".git").exists()


def test_resolve_path(tmp_path: Path) -> None:
    assert resolve_path(tmp_path, "data/x.csv") == (tmp_path / "data" / "x.csv").resolve()
    assert resolve_path(tmp_path, Path("/abs/x.csv")) == Path("/abs/x.csv").resolve()


def test_setup_logging_accepts_any_case() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        setup_logging(logging.WARNING)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
