from __future__ import annotations

import random

import pytest

from simrec.neighbors import BoundedTopN, Neighbor, select_neighbors


def test_drain_returns_min_of_capacity_and_offered() -> None:
    top = BoundedTopN(5)
    for i, s in enumerate([0.3, 0.9, 0.1]):
        top.offer(i, s)
    out = top.drain()
    assert len(out) == 3
    assert [n.score for n in out] == [0.9, 0.3, 0.1]
    assert len(top) == 0
    assert top.drain() == []


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_keeps_true_top_n_for_any_offer_order(seed: int) -> None:
    rng = random.Random(seed)
    scores = {i: rng.uniform(-1.0, 1.0) for i in range(200)}
    expected = sorted(scores.values(), reverse=True)[:10]

    items = list(scores.items())
    rng.shuffle(items)
    top = BoundedTopN(10)
    for i, s in items:
        top.offer(i, s)

    out = top.drain()
    assert [n.score for n in out] == expected
    assert all(scores[n.id] == n.score for n in out)


def test_replacement_requires_strictly_greater_score() -> None:
    top = BoundedTopN(2)
    assert top.offer("a", 0.5)
    assert top.offer("b", 0.7)
    assert not top.offer("c", 0.5)
    assert top.peek_min() == 0.5
    assert top.offer("d", 0.6)
    assert {n.id for n in top.drain()} == {"b", "d"}


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedTopN(0)


def test_select_neighbors_bounded_and_use_all_mode() -> None:
    scores = {"u1": 0.2, "u2": 0.9, "u3": -0.4, "u4": 0.5}
    assert select_neighbors(scores, 2) == [Neighbor("u2", 0.9), Neighbor("u4", 0.5)]

    everything = select_neighbors(scores, 0)
    assert [n.id for n in everything] == ["u2", "u4", "u1", "u3"]
    assert len(select_neighbors(scores, -3)) == 4


def test_select_neighbors_accepts_pairs() -> None:
    out = select_neighbors([(1, 0.1), (2, 0.3)], 1)
    assert out == [Neighbor(2, 0.3)]
