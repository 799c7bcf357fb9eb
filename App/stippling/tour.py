"""Tour construction (nearest neighbour) and improvement (2-opt).

Tours are open paths: there is no implicit edge from the last point back
to the first.

AIDEV-NOTE: Algorithms work on index arrays and ask a _DistanceOracle for
distances. Any object implementing the Metric protocol can be toured;
Point tours get vectorised numpy distances with the same results.
"""

import logging
from typing import Sequence, TypeVar

import numpy as np

from models import Metric, Point

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Metric)


class _DistanceOracle:
    """Distances between elements of a fixed sequence, looked up by index."""

    def __init__(self, items: "Sequence[Metric]"):
        self.items = items
        self.coords = None
        if all(isinstance(p, Point) for p in items):
            self.coords = np.array([(p.x, p.y) for p in items], dtype=np.float64).reshape(-1, 2)

    def pairwise(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Elementwise distances between items ``a[j]`` and ``b[j]``."""
        if self.coords is not None:
            diff = self.coords[a] - self.coords[b]
            return np.hypot(diff[:, 0], diff[:, 1])
        items = self.items
        return np.fromiter(
            (items[i].distance(items[j]) for i, j in zip(a, b)), dtype=np.float64, count=len(a)
        )

    def from_one(self, i: int, b: np.ndarray) -> np.ndarray:
        return self.pairwise(np.full(len(b), i), b)


def total_distance(tour: "Sequence[Metric]") -> float:
    """Length of the open path through ``tour``."""
    return sum(tour[i - 1].distance(tour[i]) for i in range(1, len(tour)))


def make_nn_tour(points: "Sequence[M]") -> "list[M]":
    """Order points by repeatedly visiting the nearest unvisited one.

    Starts at ``points[0]``. Ties go to the point that comes first in the
    input, so the result is deterministic for a given input order.

    AIDEV-NOTE: Points stay in place; a visited mask replaces removal.
    """
    count = len(points)
    if count == 0:
        return []

    oracle = _DistanceOracle(points)
    indices = np.arange(count)
    visited = np.zeros(count, dtype=bool)

    current = 0
    visited[current] = True
    order = [current]

    for _ in range(count - 1):
        distances = oracle.from_one(current, indices)
        distances[visited] = np.inf
        current = int(np.argmin(distances))
        visited[current] = True
        order.append(current)

    return [points[i] for i in order]


def two_opt_pass(tour: "Sequence[M]") -> "tuple[list[M], float]":
    """One first-improvement 2-opt sweep over an open tour.

    For every pair of edges (i-1, i) and (k-1, k) with i < k, reversing
    ``tour[i:k]`` replaces them with (i-1, k-1) and (i, k). A shortening
    reversal is applied at once and later candidates see the updated tour.

    Returns:
        Tuple of (new tour, fractional improvement ``(old - new) / old``)
    """
    count = len(tour)
    if count < 4:
        return list(tour), 0.0

    oracle = _DistanceOracle(tour)
    order = np.arange(count)
    old_distance = total_distance(tour)

    for i in range(1, count - 1):
        k_start = i + 1
        while k_start < count:
            ks = np.arange(k_start, count)
            a, b = order[i - 1], order[i]
            c, d = order[ks - 1], order[ks]

            delta = (
                oracle.from_one(a, c)
                + oracle.from_one(b, d)
                - oracle.from_one(a, np.array([b]))[0]
                - oracle.pairwise(c, d)
            )

            hits = np.flatnonzero(delta < 0.0)
            if hits.size == 0:
                break

            k = int(ks[hits[0]])
            order[i:k] = order[i:k][::-1].copy()
            k_start = k + 1

    improved = [tour[j] for j in order]
    new_distance = total_distance(improved)
    improvement = (old_distance - new_distance) / old_distance if old_distance > 0.0 else 0.0

    logger.debug("Tour improved by %.3f", improvement)
    return improved, improvement


def optimize(tour: "Sequence[M]", threshold: float) -> "list[M]":
    """Repeat 2-opt passes until one improves by no more than ``threshold``.

    At least one pass always runs. With ``threshold == 0`` this stops on the
    first pass that does not shorten the tour; callers that want no 2-opt
    at all must not call this.

    Raises:
        ValueError: If ``threshold`` is negative; a converged tour would
            never satisfy the stopping rule
    """
    if not threshold >= 0.0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")

    tour = list(tour)
    while True:
        tour, improvement = two_opt_pass(tour)
        if improvement <= threshold:
            return tour
