"""Sparse weighted feature vectors.

A vector is a plain mapping from an entity key to its observed weight. Keys that
are not present carry an implicit weight of 0 and are never stored.

A weight is either a single real number (a normalised rating) or a tuple of real
feature weights observed at the same key (e.g. ``(playtime_norm, rating)`` for a
user/game interaction). Metrics treat the tuple components as extra dimensions of
the same key, so scalar-weighted vectors behave exactly like one-feature tuples.
"""

from __future__ import annotations

from typing import Hashable, Mapping, Sequence, Tuple, Union

Key = Hashable
Weight = Union[float, Tuple[float, ...]]
SparseVector = Mapping[Key, Weight]


def features(weight: Weight) -> Sequence[float]:
    """Return the feature components of a weight (a scalar is a 1-tuple)."""
    if isinstance(weight, (tuple, list)):
        return weight
    return (weight,)


def scalar(weight: Weight) -> float:
    """Collapse a weight into one number: the sum of its feature components."""
    if isinstance(weight, (tuple, list)):
        return float(sum(weight))
    return float(weight)


def dot(wa: Weight, wb: Weight) -> float:
    if isinstance(wa, (tuple, list)) or isinstance(wb, (tuple, list)):
        return float(sum(x * y for x, y in zip(features(wa), features(wb))))
    return float(wa) * float(wb)


def squared_norm(vector: SparseVector) -> float:
    """Sum of squared feature components over the vector's own key set."""
    total = 0.0
    for w in vector.values():
        if isinstance(w, (tuple, list)):
            total += sum(x * x for x in w)
        else:
            total += float(w) * float(w)
    return total


def common_keys(a: SparseVector, b: SparseVector) -> list[Key]:
    """Keys present in both vectors (iterates the smaller one)."""
    if len(a) > len(b):
        a, b = b, a
    return [k for k in a if k in b]
