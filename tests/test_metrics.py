from __future__ import annotations

import math

import pytest

from simrec.similarity.metrics import (
    Metric,
    cosine,
    jaccard,
    jaccard_weighted,
    metric_function,
    pearson,
    similarity,
)


E1 = {1: 1.0, 2: 0.5}
E2 = {1: 1.0, 2: 0.5}
E3 = {1: 0.0, 3: 1.0}


def test_cosine_end_to_end_scenario() -> None:
    assert cosine(E1, E2) == pytest.approx(1.0)
    assert cosine(E1, E3) == 0.0


def test_cosine_self_and_symmetry(make_vectors) -> None:
    vecs = [v for v in make_vectors(12) if v]
    for a in vecs:
        assert cosine(a, a) == pytest.approx(1.0)
        for b in vecs:
            assert cosine(a, b) == pytest.approx(cosine(b, a))


def test_cosine_uses_full_norms_not_intersection() -> None:
    a = {1: 1.0, 2: 1.0}
    b = {1: 1.0, 3: 1.0}
    # dot = 1 over the shared key, norms cover both keys of each vector.
    assert cosine(a, b) == pytest.approx(1.0 / (math.sqrt(2) * math.sqrt(2)))


def test_cosine_degenerate_inputs_are_zero() -> None:
    assert cosine({}, {}) == 0.0
    assert cosine({1: 1.0}, {}) == 0.0
    assert cosine({1: 0.0}, {1: 0.0}) == 0.0


def test_pearson_needs_two_shared_keys() -> None:
    assert pearson({1: 1.0, 2: 0.2, 3: 0.9}, {1: 0.5, 7: 0.1}) == 0.0
    assert pearson({}, {}) == 0.0
    assert pearson({1: 1.0}, {1: 1.0}) == 0.0


def test_pearson_perfect_correlation_on_common_keys() -> None:
    a = {1: 0.2, 2: 0.4, 3: 0.6, 99: 5.0}
    b = {1: 0.1, 2: 0.2, 3: 0.3, 42: 0.0}
    assert pearson(a, b) == pytest.approx(1.0)

    c = {1: 0.6, 2: 0.4, 3: 0.2}
    assert pearson(a, c) == pytest.approx(-1.0)


def test_pearson_zero_variance_is_zero() -> None:
    assert pearson({1: 0.5, 2: 0.5}, {1: 0.1, 2: 0.9}) == 0.0


def test_jaccard_bounds_self_and_empty(make_vectors) -> None:
    vecs = make_vectors(10)
    for a in vecs:
        for b in vecs:
            assert 0.0 <= jaccard(a, b) <= 1.0
        if a:
            assert jaccard(a, a) == 1.0
    assert jaccard({}, {}) == 0.0


def test_jaccard_ignores_weights() -> None:
    assert jaccard({1: 0.1, 2: 9.0}, {2: 0.3, 3: 0.3}) == pytest.approx(1 / 3)


def test_jaccard_weighted_min_over_max() -> None:
    a = {1: 1.0, 2: 0.5}
    b = {1: 0.5, 3: 1.0}
    # mins: 0.5 + 0 + 0 ; maxs: 1.0 + 0.5 + 1.0
    assert jaccard_weighted(a, b) == pytest.approx(0.5 / 2.5)
    assert jaccard_weighted({}, {}) == 0.0
    assert jaccard_weighted({1: 0.0}, {2: 0.0}) == 0.0


def test_jaccard_weighted_sums_feature_tuples() -> None:
    a = {10: (0.2, 0.8)}
    b = {10: (0.5, 0.0), 11: (0.1, 0.4)}
    # per-key scalars: a -> {10: 1.0}, b -> {10: 0.5, 11: 0.5}
    assert jaccard_weighted(a, b) == pytest.approx(0.5 / 1.5)


def test_feature_tuples_behave_like_extra_dimensions() -> None:
    a = {1: (0.3, 0.4)}
    b = {1: (0.3, 0.4), 2: (0.0, 0.0)}
    assert cosine(a, b) == pytest.approx(1.0)

    c = {1: (0.1, 0.9), 2: (0.4, 0.6)}
    d = {1: (0.2, 1.8), 2: (0.8, 1.2)}
    assert pearson(c, d) == pytest.approx(1.0)


def test_metric_parse_and_dispatch() -> None:
    assert Metric.parse("Jaccard-Weighted") is Metric.JACCARD_WEIGHTED
    assert Metric.parse(Metric.PEARSON) is Metric.PEARSON
    with pytest.raises(ValueError):
        Metric.parse("euclidean")

    a = {1: 1.0, 2: 0.2, 3: 0.5}
    b = {1: 0.4, 2: 0.9, 4: 0.3}
    assert similarity(a, b, Metric.JACCARD) == jaccard(a, b)
    assert similarity(a, b, "pearson") == pearson(a, b)


def test_unknown_selector_falls_back_to_cosine() -> None:
    a = {1: 1.0, 2: 0.2}
    b = {1: 0.4, 2: 0.9}
    assert metric_function("manhattan") is cosine
    assert metric_function(42) is cosine
    assert similarity(a, b, None) == cosine(a, b)
