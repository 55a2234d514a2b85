#!/usr/bin/env python3
"""Bayesian hyperparameter search for a preset model family.

Example:
  python scripts/tune_preset_bo.py --scenario gradient_boosting --out artifacts/gb_bo.json
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from sklearn.datasets import load_digits

# EN: Allow running as a script without install.
# JP: インストール前でも実行できるようにパスを追加。
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from bayestune.config import OptimizerConfig
from bayestune.models.harness import make_objective
from bayestune.opt.presets import PRESETS, create_optimizer


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--scenario", choices=sorted(PRESETS), default="neural_network")
    p.add_argument("--out", default="artifacts/preset_bo.json")
    p.add_argument("--n-iter", type=int, default=30)
    p.add_argument("--n-init", type=int, default=8)
    p.add_argument("--cv", type=int, default=3)
    p.add_argument("--seed", type=int, default=42)
    args = p.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

    X, y = load_digits(return_X_y=True)
    objective = make_objective(args.scenario, X, y, cv=args.cv, random_state=args.seed)

    cfg = OptimizerConfig(random_seed=args.seed)
    opt = create_optimizer(args.scenario, config=cfg)
    result = opt.optimize(objective, n_iterations=args.n_iter, n_initial_points=args.n_init)

    serializable = {
        "scenario": args.scenario,
        "space": opt.space.to_dict(),
        **result.to_dict(),
    }

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(serializable, f, indent=2)

    print(f"Saved: {args.out}")
    print("Best:", result.best_params, f"accuracy={result.best_score:.4f}")
    print(f"Evaluations: {result.n_evaluations}, convergence rate: {result.convergence_rate:.3f}")


if __name__ == "__main__":
    main()
