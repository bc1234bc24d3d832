"""Sparse vectors and the similarity metrics defined over them."""

from .metrics import Metric, cosine, jaccard, jaccard_weighted, metric_function, pearson, similarity
from .sparse import SparseVector

__all__ = [
    "Metric",
    "SparseVector",
    "cosine",
    "jaccard",
    "jaccard_weighted",
    "metric_function",
    "pearson",
    "similarity",
]
