"""Bounded top-N neighbour selection."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Hashable, Iterable, Mapping, Tuple, Union


@dataclass(frozen=True)
class Neighbor:
    id: Hashable
    score: float


class BoundedTopN:
    """Keep the N highest-scoring candidates seen so far.

    Backed by a min-heap of at most N entries, so each offer costs O(log N) and a
    stream of M candidates costs O(M log N); the full candidate set is never sorted.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        # (score, seq, id): seq keeps heap comparisons away from the ids.
        self._heap: list[tuple[float, int, Hashable]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def peek_min(self) -> float | None:
        """Lowest score currently held, or None when empty."""
        if not self._heap:
            return None
        return self._heap[0][0]

    def offer(self, id_: Hashable, score: float) -> bool:
        """Offer a candidate; return True if it is now held."""
        entry = (float(score), next(self._seq), id_)
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, entry)
            return True
        if entry[0] > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def drain(self) -> list[Neighbor]:
        """Return held entries sorted by descending score and empty the selector."""
        out: list[Neighbor] = []
        while self._heap:
            score, _, id_ = heapq.heappop(self._heap)
            out.append(Neighbor(id=id_, score=score))
        out.reverse()
        return out


Scores = Union[Mapping[Hashable, float], Iterable[Tuple[Hashable, float]]]


def select_neighbors(scores: Scores, n: int) -> list[Neighbor]:
    """Pick the `n` best (id, score) pairs, best first.

    `n <= 0` means "use every candidate": all of them are returned, sorted.
    """
    items = scores.items() if isinstance(scores, Mapping) else scores
    if n <= 0:
        everything = [Neighbor(id=i, score=float(s)) for i, s in items]
        everything.sort(key=lambda nb: nb.score, reverse=True)
        return everything

    top = BoundedTopN(n)
    for i, s in items:
        top.offer(i, s)
    return top.drain()
