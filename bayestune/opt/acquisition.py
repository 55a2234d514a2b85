"""Expected Improvement acquisition.

English:
    Score random candidates with EI (maximization) and keep the best one.
    This is a Monte-Carlo approximation of maximizing the acquisition function;
    more candidates give a better maximizer at a higher cost.

日本語:
    ランダムな候補点を EI（最大化問題）で評価し、最良の点を選びます。
    獲得関数の最大化をモンテカルロで近似しているため、候補数を増やすほど
    精度は上がりますが計算量も増えます。
"""

from __future__ import annotations
from typing import Any, Dict, Sequence
import numpy as np

from ..space import HyperparameterSpace
from .stats import normal_cdf, normal_pdf
from .surrogate import NearestNeighborSurrogate


def expected_improvement(mean, std, best: float):
    # EN: EI for maximization (higher is better); 0 where std is not positive.
    # JP: 最大化問題のEI。std が正でない点は 0。
    mean = np.asarray(mean, dtype=float)
    std = np.asarray(std, dtype=float)
    imp = mean - best
    positive = std > 0
    z = imp / np.where(positive, std, 1.0)
    ei = imp * normal_cdf(z) + std * normal_pdf(z)
    ei = np.where(positive, ei, 0.0)
    return float(ei) if ei.ndim == 0 else ei


def select_next(
    space: HyperparameterSpace,
    surrogate: NearestNeighborSurrogate,
    observations: Sequence,
    rng: np.random.Generator,
    n_candidates: int = 1000,
) -> Dict[str, Any]:
    """Pick the candidate with the greatest EI.

    Parameters
    ----------
    observations:
        history so far (objects with `.params` and `.score`).
    n_candidates:
        random candidate points drawn from `space`.

    Returns
    -------
    A parameter assignment drawn from `space`. Ties go to the first candidate.
    """
    if n_candidates < 1:
        raise ValueError("n_candidates must be >= 1")

    cand = space.sample_raw(rng, n_candidates)
    if not observations:
        # EN: no current best to improve on; any candidate is as good as another.
        # JP: 比較対象の最良値がないため、最初の候補を返します。
        return space.decode(cand[0])

    best = max(o.score for o in observations)
    mu, std = surrogate.predict_raw(cand, observations)
    with np.errstate(invalid="ignore"):
        ei = expected_improvement(mu, std, best=best)
    # EN: infinite sentinel scores can give NaN; never prefer those.
    # JP: 無限大のスコアから NaN が出た場合は選ばないようにします。
    ei = np.where(np.isnan(ei), -np.inf, ei)
    return space.decode(cand[int(np.argmax(ei))])
