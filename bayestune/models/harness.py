"""scikit-learn training harness for the preset spaces.

English:
    Turn a preset parameter assignment into an estimator and score it with
    cross-validated accuracy. This is an example objective; the optimizer only
    needs "params -> number".

    Mapping of the shared knobs:
      - neural_network: MLPClassifier (hidden_units x layers, alpha=dropout_rate)
      - gradient_boosting: GradientBoostingClassifier
        (n_estimators=hidden_units, max_depth=layers, subsample=1-dropout_rate)
      - svm: linear SVM trained by SGD (hinge loss, eta0=learning_rate,
        max_iter=hidden_units); `layers` is unused.

日本語:
    プリセットのパラメータから推定器を作り、交差検証の正解率で評価します。
    目的関数の一例であり、最適化側は「params -> 数値」だけを要求します。
"""

from __future__ import annotations
from typing import Any, Callable, Dict
import warnings
import numpy as np
from sklearn.base import BaseEstimator
from sklearn.ensemble import GradientBoostingClassifier
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import SGDClassifier
from sklearn.model_selection import cross_val_score
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler


def build_estimator(scenario: str, params: Dict[str, Any], random_state: int = 42) -> BaseEstimator:
    if scenario == "neural_network":
        clf = MLPClassifier(
            hidden_layer_sizes=(int(params["hidden_units"]),) * int(params["layers"]),
            learning_rate_init=float(params["learning_rate"]),
            batch_size=int(params["batch_size"]),
            alpha=float(params["dropout_rate"]),
            max_iter=200,
            random_state=random_state,
        )
        return make_pipeline(StandardScaler(), clf)
    if scenario == "gradient_boosting":
        # EN: batch_size has no counterpart for tree boosting and is ignored.
        # JP: 勾配ブースティングには batch_size に相当するものがないため無視します。
        return GradientBoostingClassifier(
            learning_rate=float(params["learning_rate"]),
            n_estimators=int(params["hidden_units"]),
            max_depth=int(params["layers"]),
            subsample=1.0 - float(params["dropout_rate"]),
            random_state=random_state,
        )
    if scenario == "svm":
        clf = SGDClassifier(
            loss="hinge",
            learning_rate="constant",
            eta0=float(params["learning_rate"]),
            alpha=float(params["dropout_rate"]),
            max_iter=int(params["hidden_units"]),
            random_state=random_state,
        )
        return make_pipeline(StandardScaler(), clf)
    raise ValueError(f"Unknown scenario: {scenario!r}")


def make_objective(
    scenario: str,
    X: np.ndarray,
    y: np.ndarray,
    cv: int = 3,
    random_state: int = 42,
) -> Callable[[Dict[str, Any]], float]:
    """Return params -> mean cross-validated accuracy."""

    def objective(params: Dict[str, Any]) -> float:
        model = build_estimator(scenario, params, random_state=random_state)
        with warnings.catch_warnings():
            # EN/JP: short training budgets are expected during the search.
            warnings.simplefilter("ignore", category=ConvergenceWarning)
            scores = cross_val_score(model, X, y, cv=cv, scoring="accuracy")
        return float(np.mean(scores))

    return objective
