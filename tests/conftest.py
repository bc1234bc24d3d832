from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Ensure `import simrec...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from simrec.data import Dataset  # noqa: E402


@pytest.fixture
def small_dataset() -> Dataset:
    """Five users over six items, ratings already scaled to [0, 1]."""
    return Dataset.from_rows(
        {
            1: {10: 1.0, 20: 0.8, 30: 0.2},
            2: {10: 0.9, 20: 0.7, 40: 0.6},
            3: {20: 0.3, 30: 1.0, 50: 0.9},
            4: {10: 0.8, 40: 0.9, 60: 0.4},
            5: {30: 0.6, 50: 0.7, 60: 1.0},
        }
    )


def _random_vectors(n: int, *, n_keys: int = 30, density: float = 0.3, seed: int = 7) -> list[dict[int, float]]:
    rng = random.Random(seed)
    out = []
    for _ in range(n):
        out.append({k: round(rng.uniform(0.1, 1.0), 3) for k in range(n_keys) if rng.random() < density})
    return out


@pytest.fixture
def make_vectors():
    """Factory for reproducible random sparse vectors."""
    return _random_vectors
