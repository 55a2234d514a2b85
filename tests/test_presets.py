import numpy as np
import pytest
from sklearn.datasets import make_classification

from bayestune.opt.optimizer import BayesianOptimizer
from bayestune.opt.presets import PRESETS, create_optimizer, preset_space
from bayestune.models.harness import build_estimator, make_objective
from bayestune.space import sample_random


@pytest.mark.parametrize("scenario", sorted(PRESETS))
def test_presets_build_valid_spaces(scenario):
    space = preset_space(scenario)
    assert set(space) == {"learning_rate", "batch_size", "dropout_rate", "hidden_units", "layers"}
    p = sample_random(space, np.random.default_rng(0))
    space.validate(p)


def test_create_optimizer_returns_fresh_instances():
    a = create_optimizer("svm")
    b = create_optimizer("svm")
    assert isinstance(a, BayesianOptimizer)
    assert a is not b


def test_unknown_scenario():
    with pytest.raises(ValueError):
        preset_space("random_forest")


@pytest.mark.parametrize("scenario", sorted(PRESETS))
def test_estimators_accept_preset_params(scenario):
    p = sample_random(preset_space(scenario), np.random.default_rng(1))
    model = build_estimator(scenario, p)
    assert hasattr(model, "fit")


def test_harness_objective_end_to_end():
    X, y = make_classification(n_samples=60, n_features=5, random_state=0)
    objective = make_objective("svm", X, y, cv=3)
    opt = create_optimizer("svm", rng=np.random.default_rng(0))
    res = opt.optimize(objective, n_iterations=3, n_initial_points=2)
    assert 0.0 <= res.best_score <= 1.0
    assert res.n_evaluations == 3
