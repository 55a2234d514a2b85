"""Nearest-neighbour surrogate model.

English:
    A cheap stand-in for a Gaussian Process. For a candidate point we look up
    the closest observed point and predict
      - mean = score of that neighbour
      - std  = max(std_floor, distance to that neighbour)
    so uncertainty grows as we move away from known data.

    Distance per dimension:
      - continuous / integer: ((v1 - v2) / (high - low))^2
      - discrete: 1 if the values differ else 0
    and the total is the square root of the sum.

日本語:
    ガウス過程の簡易な代替です。候補点に最も近い観測点を探し、
      - 平均 = その観測点のスコア
      - 標準偏差 = max(std_floor, その点までの距離)
    を返します。既知のデータから離れるほど不確実性が大きくなります。
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple
import numpy as np

from ..space import HyperparameterSpace


@dataclass(frozen=True)
class SurrogatePrediction:
    mean: float
    std: float


def pairwise_distance(A: np.ndarray, B: np.ndarray, space: HyperparameterSpace) -> np.ndarray:
    """Normalized distances between raw rows of A (n, d) and B (m, d) -> (n, m)."""
    A = np.atleast_2d(np.asarray(A, dtype=float))
    B = np.atleast_2d(np.asarray(B, dtype=float))
    num = space.numeric_mask
    # EN: zero-width dimensions hold a single value, so their difference is always 0.
    # JP: 幅0の次元は値が1つしかないため、差は常に0です。
    scale = np.where(space.widths > 0, space.widths, 1.0)[num]

    diff = A[:, None, num] / scale - B[None, :, num] / scale
    sq = (diff ** 2).sum(axis=2)
    sq += (A[:, None, ~num] != B[None, :, ~num]).sum(axis=2)
    return np.sqrt(sq)


def distance(a: Mapping[str, Any], b: Mapping[str, Any], space: HyperparameterSpace) -> float:
    return float(pairwise_distance(space.encode(a), space.encode(b), space)[0, 0])


class NearestNeighborSurrogate:
    """Nearest-neighbour mean / distance-based uncertainty.

    `observations` are any objects with `.params` and `.score`.
    The instance only caches the empirical score statistics from `fit`.
    """

    def __init__(self, space: HyperparameterSpace, std_floor: float = 0.01):
        self.space = space
        self.std_floor = std_floor
        self.mean_ = 0.0
        self.std_ = 1.0

    def fit(self, observations: Sequence) -> "NearestNeighborSurrogate":
        scores = np.array([o.score for o in observations], dtype=float)
        if len(scores) == 0:
            self.mean_, self.std_ = 0.0, 1.0
        else:
            self.mean_ = float(np.mean(scores))
            self.std_ = float(np.std(scores))
        return self

    def predict_raw(self, X: np.ndarray, observations: Sequence) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorized prediction for raw candidate rows X (n, d)."""
        X = np.atleast_2d(np.asarray(X, dtype=float))
        n = len(X)
        if not observations:
            return np.zeros(n), np.ones(n)

        O = np.array([self.space.encode(o.params) for o in observations], dtype=float)
        O = O.reshape(len(observations), len(self.space))
        scores = np.array([o.score for o in observations], dtype=float)

        D = pairwise_distance(X, O, self.space)
        # argmin returns the first minimum, so earlier observations win ties.
        nearest = np.argmin(D, axis=1)
        d_min = D[np.arange(n), nearest]
        return scores[nearest], np.maximum(self.std_floor, d_min)

    def predict(self, candidate: Mapping[str, Any], observations: Sequence) -> SurrogatePrediction:
        mean, std = self.predict_raw(self.space.encode(candidate), observations)
        return SurrogatePrediction(mean=float(mean[0]), std=float(std[0]))
