"""Sequential Bayesian-style optimizer (maximization).

English:
    Two phases:
      1) exploration: `n_initial_points` random points
      2) refinement: fit surrogate -> pick next point by Expected Improvement
         -> evaluate, stopping early once the last few scores stop improving.
    The objective is called strictly one at a time because every choice
    depends on all previous results. `optimize_async` runs the same loop for
    coroutine objectives.

    One optimizer instance serves one run at a time; starting a second run
    while one is in progress raises RuntimeError.

日本語:
    2段階で探索します。
      1) 探索: `n_initial_points` 個のランダム点
      2) 改善: サロゲートを当てはめ、Expected Improvement で次の点を選び評価。
         直近のスコアが伸びなくなったら早期終了します。
    各ステップは過去の全結果に依存するため、目的関数は必ず1つずつ呼びます。
    `optimize_async` はコルーチンの目的関数に対して同じループを実行します。

    1つのインスタンスで同時に実行できるのは1回だけです（二重実行は RuntimeError）。
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generator, List, Mapping, Optional, Sequence, Tuple
import logging
import math
import numpy as np
import pandas as pd

from ..config import OptimizerConfig
from ..space import HyperparameterSpace, sample_random
from .acquisition import select_next
from .surrogate import NearestNeighborSurrogate

logger = logging.getLogger(__name__)

Params = Dict[str, Any]


@dataclass(frozen=True)
class Observation:
    params: Params
    score: float
    iteration: int


@dataclass(frozen=True)
class OptimizationResult:
    best_params: Params
    best_score: float
    history: Tuple[Observation, ...] = field(default_factory=tuple)
    convergence_rate: float = 0.0

    @property
    def n_evaluations(self) -> int:
        return len(self.history)

    def to_frame(self) -> pd.DataFrame:
        """History as a tidy table: iteration, score, best_so_far, param_<name>..."""
        names = list(self.best_params)
        rows = []
        for o in self.history:
            row = {"iteration": o.iteration, "score": o.score}
            row.update({f"param_{k}": o.params[k] for k in names})
            rows.append(row)
        df = pd.DataFrame(rows, columns=["iteration", "score"] + [f"param_{k}" for k in names])
        df["best_so_far"] = df["score"].cummax()
        return df

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_params": dict(self.best_params),
            "best_score": self.best_score,
            "convergence_rate": self.convergence_rate,
            "history": [asdict(o) for o in self.history],
        }


def has_converged(
    scores: Sequence[float],
    iteration: int,
    min_iterations: int = 10,
    window: int = 5,
    tolerance: float = 0.001,
) -> bool:
    """True when the last `window` scores beat the earlier best by at most `tolerance` (relative)."""
    if iteration < min_iterations:
        return False
    if len(scores) <= window:
        # EN: nothing before the window yet -> not converged.
        # JP: ウィンドウより前のスコアがまだない -> 未収束。
        return False
    recent = max(scores[-window:])
    prior = max(scores[:-window])
    return recent <= prior * (1.0 + tolerance)


def convergence_rate(scores: Sequence[float], target_fraction: float = 0.95) -> float:
    """1 - k/n, where k is the first (1-based) step reaching target_fraction * best."""
    n = len(scores)
    if n < 2:
        return 0.0
    target = max(scores) * target_fraction
    k = n
    for i, s in enumerate(scores):
        if s >= target:
            k = i + 1
            break
    return 1.0 - k / n


class BayesianOptimizer:
    """Maximize a black-box objective over a HyperparameterSpace.

    Parameters
    ----------
    space:
        HyperparameterSpace or a plain dict of descriptors.
    config:
        OptimizerConfig; defaults are used when omitted.
    rng:
        numpy Generator shared by sampling and acquisition. Built from
        `config.random_seed` when omitted.
    """

    def __init__(
        self,
        space: Mapping,
        config: Optional[OptimizerConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.space = space if isinstance(space, HyperparameterSpace) else HyperparameterSpace(space)
        self.config = config or OptimizerConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)
        self.surrogate = NearestNeighborSurrogate(self.space, std_floor=self.config.std_floor)
        self.history_: List[Observation] = []
        self._running = False

    def optimize(
        self,
        objective: Callable[[Params], float],
        n_iterations: Optional[int] = None,
        n_initial_points: Optional[int] = None,
    ) -> OptimizationResult:
        """Run the optimization loop; any exception from `objective` propagates as-is."""
        steps = self._begin(n_iterations, n_initial_points)
        try:
            params = next(steps)
            while True:
                score = objective(params)
                try:
                    params = steps.send(score)
                except StopIteration as stop:
                    return stop.value
        finally:
            steps.close()
            self._running = False

    async def optimize_async(
        self,
        objective: Callable[[Params], Awaitable[float]],
        n_iterations: Optional[int] = None,
        n_initial_points: Optional[int] = None,
    ) -> OptimizationResult:
        """Same as `optimize`, awaiting each evaluation before choosing the next point."""
        steps = self._begin(n_iterations, n_initial_points)
        try:
            params = next(steps)
            while True:
                score = await objective(params)
                try:
                    params = steps.send(score)
                except StopIteration as stop:
                    return stop.value
        finally:
            steps.close()
            self._running = False

    # ------------------------------------------------------------------
    def _begin(self, n_iterations: Optional[int], n_initial_points: Optional[int]):
        n_iterations = self.config.n_iterations if n_iterations is None else n_iterations
        n_initial_points = self.config.n_initial_points if n_initial_points is None else n_initial_points
        if n_iterations < 1:
            raise ValueError("n_iterations must be >= 1")
        if n_initial_points < 0:
            raise ValueError("n_initial_points must be >= 0")
        if self._running:
            raise RuntimeError("optimizer is already running; use one instance per concurrent run")
        self._running = True
        return self._steps(n_iterations, n_initial_points)

    def _steps(self, n_iterations: int, n_initial_points: int) -> Generator[Params, float, OptimizationResult]:
        # EN: yields the next point to evaluate and receives its score via send().
        # JP: 次に評価する点を yield し、send() でスコアを受け取ります。
        cfg = self.config
        self.history_ = []
        n_explore = min(n_initial_points, n_iterations)

        logger.info("Exploration phase: %d random points", n_explore)
        for i in range(n_explore):
            params = sample_random(self.space, self.rng)
            score = yield dict(params)
            self._record(params, score, i)

        if n_explore < n_iterations:
            logger.info("Refinement phase: up to %d points", n_iterations - n_explore)
        for i in range(n_explore, n_iterations):
            self.surrogate.fit(self.history_)
            params = select_next(self.space, self.surrogate, self.history_, self.rng, cfg.n_candidates)
            score = yield dict(params)
            self._record(params, score, i)

            scores = [o.score for o in self.history_]
            if has_converged(
                scores, i,
                min_iterations=cfg.min_iterations,
                window=cfg.convergence_window,
                tolerance=cfg.convergence_tolerance,
            ):
                logger.info("Converged early after %d evaluations", i + 1)
                break

        return self._result()

    def _record(self, params: Params, score: float, iteration: int) -> None:
        score = float(score)
        if math.isnan(score):
            raise ValueError(f"objective returned NaN at iteration {iteration}")
        self.history_.append(Observation(params=params, score=score, iteration=iteration))
        logger.info("Iteration %d: score=%.4f", iteration + 1, score)

    def _result(self) -> OptimizationResult:
        scores = [o.score for o in self.history_]
        best_idx = int(np.argmax(scores))  # first occurrence on ties
        best = self.history_[best_idx]
        logger.info("Best score %.4f with params %s", best.score, best.params)
        return OptimizationResult(
            best_params=dict(best.params),
            best_score=best.score,
            history=tuple(self.history_),
            convergence_rate=convergence_rate(scores, self.config.target_fraction),
        )
