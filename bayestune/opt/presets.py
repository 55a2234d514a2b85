"""Ready-made search spaces for common model families.

English:
    Each preset tunes the same five knobs with ranges suited to the model
    family. They are plain inputs for BayesianOptimizer; nothing here changes
    how the search works.

日本語:
    よく使うモデル向けの探索空間プリセットです。5つのパラメータを
    モデルに合った範囲で定義しています。探索アルゴリズム自体には影響しません。
"""

from __future__ import annotations
from typing import Dict, Optional
import numpy as np

from ..config import OptimizerConfig
from ..space import HyperparameterSpace
from .optimizer import BayesianOptimizer


PRESETS: Dict[str, Dict[str, dict]] = {
    "neural_network": {
        "learning_rate": {"type": "continuous", "min": 0.0001, "max": 0.01},
        "batch_size": {"type": "discrete", "values": [16, 32, 64, 128]},
        "dropout_rate": {"type": "continuous", "min": 0.1, "max": 0.5},
        "hidden_units": {"type": "integer", "min": 32, "max": 512},
        "layers": {"type": "integer", "min": 2, "max": 6},
    },
    "gradient_boosting": {
        "learning_rate": {"type": "continuous", "min": 0.01, "max": 0.3},
        "batch_size": {"type": "discrete", "values": [100, 200, 500]},
        "dropout_rate": {"type": "continuous", "min": 0.0, "max": 0.2},
        "hidden_units": {"type": "integer", "min": 50, "max": 200},
        "layers": {"type": "integer", "min": 3, "max": 10},
    },
    "svm": {
        "learning_rate": {"type": "continuous", "min": 0.001, "max": 1.0},
        "batch_size": {"type": "discrete", "values": [32, 64, 128]},
        "dropout_rate": {"type": "continuous", "min": 0.0, "max": 0.1},
        "hidden_units": {"type": "integer", "min": 10, "max": 100},
        "layers": {"type": "integer", "min": 1, "max": 3},
    },
}


def preset_space(scenario: str) -> HyperparameterSpace:
    if scenario not in PRESETS:
        raise ValueError(f"Unknown scenario: {scenario!r} (choose from {sorted(PRESETS)})")
    return HyperparameterSpace(PRESETS[scenario])


def create_optimizer(
    scenario: str,
    config: Optional[OptimizerConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> BayesianOptimizer:
    """Return a new optimizer over the preset space (one per caller)."""
    return BayesianOptimizer(preset_space(scenario), config=config, rng=rng)
