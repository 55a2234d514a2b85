"""bayestune package.

English:
    Sequential hyperparameter search over mixed continuous / discrete / integer
    spaces with a nearest-neighbour surrogate and Expected Improvement.

日本語:
    連続・離散・整数が混在するハイパーパラメータ空間を、最近傍サロゲートと
    Expected Improvement で逐次探索するためのパッケージです。
"""

from .version import __version__
from .space import (
    Continuous,
    Discrete,
    HyperparameterSpace,
    Integer,
    SpaceConfigError,
    sample_random,
)
from .config import OptimizerConfig
from .opt.optimizer import BayesianOptimizer, Observation, OptimizationResult
from .opt.presets import create_optimizer, preset_space
