"""Pairwise similarity and neighbourhood collaborative filtering over sparse rating vectors.

Core pieces:
- similarity metrics (cosine, Pearson, Jaccard, weighted Jaccard) on sparse vectors
- a bounded top-N neighbour selector
- a threaded engine that builds full similarity matrices or scores candidate partitions
- item-based and user-based recommenders built on top of them
"""
