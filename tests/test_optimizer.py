import asyncio
import math

import numpy as np
import pytest

from bayestune.config import OptimizerConfig
from bayestune.opt.optimizer import BayesianOptimizer, convergence_rate, has_converged


UNIT = {"x": {"type": "continuous", "min": 0, "max": 1}}
CHOICE = {"choice": {"type": "discrete", "values": [1, 2, 3]}}


class Counter:
    """Objective whose scores keep growing, so early stopping never triggers."""

    def __init__(self):
        self.calls = 0

    def __call__(self, params):
        self.calls += 1
        return 2.0 ** self.calls


def make(space, seed=0, **cfg):
    return BayesianOptimizer(space, config=OptimizerConfig(random_seed=seed, **cfg))


def test_evaluation_budget_and_iteration_numbers(mixed_space):
    f = Counter()
    res = make(mixed_space).optimize(f, n_iterations=15, n_initial_points=5)
    assert f.calls == 15
    assert [o.iteration for o in res.history] == list(range(15))
    for o in res.history:
        mixed_space.validate(o.params)


def test_flat_objective_stops_early():
    calls = []
    res = make(UNIT).optimize(lambda p: calls.append(p) or 1.0, n_iterations=50, n_initial_points=5)
    # first check at iteration 10 already sees no improvement
    assert len(calls) == len(res.history) == 11


def test_best_is_first_argmax():
    scores = iter([1.0, 3.0, 2.0, 3.0, 0.5])
    res = make(UNIT).optimize(lambda p: next(scores), n_iterations=5, n_initial_points=5)
    assert res.best_score == 3.0
    assert res.best_params == res.history[1].params
    assert res.best_score == max(o.score for o in res.history)


def test_convergence_rate_range(mixed_space):
    rng = np.random.default_rng(11)
    res = make(mixed_space).optimize(lambda p: float(rng.normal()), n_iterations=20, n_initial_points=5)
    assert 0.0 <= res.convergence_rate <= 1.0

    single = make(mixed_space).optimize(lambda p: 1.0, n_iterations=1)
    assert single.convergence_rate == 0.0
    assert single.n_evaluations == 1


def test_scenario_monotone_continuous():
    res = make(UNIT, seed=5).optimize(lambda p: p["x"], n_iterations=15, n_initial_points=5)
    scores = [o.score for o in res.history]
    best_so_far = np.maximum.accumulate(scores)
    assert np.all(np.diff(best_so_far) >= 0)
    assert res.best_score >= max(scores[:5])
    assert res.best_score == pytest.approx(res.best_params["x"])


def test_scenario_discrete_single_optimum():
    hits = 0
    for seed in range(100):
        res = make(CHOICE, seed=seed).optimize(
            lambda p: 10.0 if p["choice"] == 2 else 0.0, n_iterations=20, n_initial_points=5
        )
        hits += res.best_params["choice"] == 2 and res.best_score == 10.0
    assert hits >= 95


def test_empty_space_runs():
    res = make({}).optimize(lambda p: 1.0, n_iterations=3, n_initial_points=1)
    assert res.best_params == {}
    assert res.n_evaluations == 3


@pytest.mark.parametrize("n_iterations", [3, 10, 50])
def test_objective_failure_propagates(n_iterations):
    class Boom(Exception):
        pass

    err = Boom("third call")
    calls = []

    def objective(p):
        calls.append(p)
        if len(calls) == 3:
            raise err
        return 0.0

    opt = make(UNIT)
    with pytest.raises(Boom) as info:
        opt.optimize(objective, n_iterations=n_iterations, n_initial_points=2)
    assert info.value is err
    assert len(calls) == 3
    # instance is usable again afterwards
    assert opt.optimize(lambda p: 1.0, n_iterations=2).n_evaluations == 2


def test_initial_points_clamped_to_budget():
    f = Counter()
    res = make(UNIT).optimize(f, n_iterations=3, n_initial_points=10)
    assert f.calls == res.n_evaluations == 3


def test_zero_initial_points_goes_straight_to_refinement():
    f = Counter()
    res = make(UNIT).optimize(f, n_iterations=4, n_initial_points=0)
    assert f.calls == 4
    assert [o.iteration for o in res.history] == [0, 1, 2, 3]


def test_config_supplies_defaults():
    f = Counter()
    make(UNIT, n_iterations=7, n_initial_points=2).optimize(f)
    assert f.calls == 7


def test_invalid_arguments():
    opt = make(UNIT)
    with pytest.raises(ValueError):
        opt.optimize(lambda p: 0.0, n_iterations=0)
    with pytest.raises(ValueError):
        opt.optimize(lambda p: 0.0, n_iterations=5, n_initial_points=-1)


def test_nan_score_is_rejected():
    with pytest.raises(ValueError):
        make(UNIT).optimize(lambda p: float("nan"), n_iterations=3)


def test_reentrant_use_is_refused():
    opt = make(UNIT)

    def objective(p):
        opt.optimize(lambda q: 0.0, n_iterations=1)
        return 0.0

    with pytest.raises(RuntimeError):
        opt.optimize(objective, n_iterations=2)
    assert opt.optimize(lambda p: 0.0, n_iterations=1).n_evaluations == 1


def test_same_seed_reproduces_history(mixed_space):
    a = make(mixed_space, seed=3).optimize(lambda p: p["lr"] * p["units"], n_iterations=12, n_initial_points=4)
    b = make(mixed_space, seed=3).optimize(lambda p: p["lr"] * p["units"], n_iterations=12, n_initial_points=4)
    assert [o.params for o in a.history] == [o.params for o in b.history]


def test_objective_cannot_corrupt_history():
    def objective(p):
        p["x"] = -1.0
        return 0.5

    res = make(UNIT).optimize(objective, n_iterations=3, n_initial_points=3)
    assert all(0.0 <= o.params["x"] <= 1.0 for o in res.history)


def test_async_matches_sync(mixed_space):
    def f(p):
        return p["lr"] + p["batch"] / 64.0

    async def af(p):
        await asyncio.sleep(0)
        return f(p)

    sync = make(mixed_space, seed=9).optimize(f, n_iterations=12, n_initial_points=4)
    asy = asyncio.run(make(mixed_space, seed=9).optimize_async(af, n_iterations=12, n_initial_points=4))
    assert [o.params for o in asy.history] == [o.params for o in sync.history]
    assert asy.best_score == sync.best_score


def test_result_frame_and_dict():
    res = make(UNIT).optimize(lambda p: p["x"], n_iterations=6, n_initial_points=3)
    df = res.to_frame()
    assert list(df.columns) == ["iteration", "score", "param_x", "best_so_far"]
    assert len(df) == 6
    assert df["best_so_far"].iloc[-1] == res.best_score
    d = res.to_dict()
    assert d["best_score"] == res.best_score
    assert len(d["history"]) == 6


def test_has_converged_rules():
    flat = [1.0] * 12
    assert not has_converged(flat, iteration=9)
    assert has_converged(flat, iteration=11)
    # prior window empty -> not converged
    assert not has_converged([1.0] * 5, iteration=10)
    assert not has_converged([], iteration=10)
    # last window improves by more than 0.1%
    assert not has_converged([1.0] * 7 + [1.01] + [1.0] * 3, iteration=10)
    assert has_converged([1.0] * 7 + [1.0005] + [1.0] * 3, iteration=10)


def test_convergence_rate_values():
    assert convergence_rate([]) == 0.0
    assert convergence_rate([4.0]) == 0.0
    assert convergence_rate([1.0, 2.0, 3.0, 4.0]) == 0.0
    assert convergence_rate([10.0, 1.0, 1.0, 1.0]) == 0.75
    assert math.isclose(convergence_rate([1.0, 9.6, 10.0, 2.0]), 0.5)


def test_nan_discrete_candidate_survives_refinement():
    nan = float("nan")
    space = {"v": {"type": "discrete", "values": [nan, 1.0]}}
    res = make(space).optimize(lambda p: 0.0 if p["v"] is nan else 1.0, n_iterations=8, n_initial_points=3)
    assert res.n_evaluations == 8
    assert res.best_params == {"v": 1.0}


def test_async_objective_failure_propagates():
    class Boom(Exception):
        pass

    calls = []

    async def objective(p):
        calls.append(p)
        if len(calls) == 3:
            raise Boom("third call")
        return 0.0

    opt = make(UNIT)
    with pytest.raises(Boom):
        asyncio.run(opt.optimize_async(objective, n_iterations=10, n_initial_points=2))
    assert len(calls) == 3

    async def ok(p):
        return 1.0

    assert asyncio.run(opt.optimize_async(ok, n_iterations=2)).n_evaluations == 2


def test_async_concurrent_runs_on_one_instance_are_refused():
    opt = make(UNIT)

    async def slow(p):
        await asyncio.sleep(0)
        return p["x"]

    async def both():
        return await asyncio.gather(
            opt.optimize_async(slow, n_iterations=5),
            opt.optimize_async(slow, n_iterations=5),
            return_exceptions=True,
        )

    first, second = asyncio.run(both())
    assert first.n_evaluations == 5
    assert isinstance(second, RuntimeError)
    # the instance is free again once the first run finishes
    assert not opt._running
