"""Central configuration dataclasses.

English:
    Keep optimizer settings in one place.

日本語:
    最適化の設定を一箇所で管理します。
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OptimizerConfig:
    """Bayesian optimization settings.

    EN: `n_iterations` / `n_initial_points` are defaults for `optimize()`;
        explicit arguments win.
    JP: `n_iterations` / `n_initial_points` は `optimize()` の既定値です。
        引数で渡した値が優先されます。
    """

    n_iterations: int = 50
    n_initial_points: int = 10
    n_candidates: int = 1000     # random candidates scored per refinement step
    random_seed: Optional[int] = None
    std_floor: float = 0.01      # surrogate uncertainty never drops below this
    # early stopping
    min_iterations: int = 10
    convergence_window: int = 5
    convergence_tolerance: float = 0.001
    # post-hoc convergence rate
    target_fraction: float = 0.95
