"""Test configuration.

English:
    Allow running `pytest` without installing the package, and share a few
    small spaces between test modules.

日本語:
    パッケージをインストールしなくても `pytest` が動くように
    import path を調整し、テスト間で使う小さな探索空間を用意します。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Repo root contains the `bayestune/` package directory.
ROOT = Path(__file__).resolve().parents[1]

# EN: Add the parent dir so `import bayestune` works.
# JP: `import bayestune` が通るように親ディレクトリを追加。
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def mixed_space():
    from bayestune.space import HyperparameterSpace

    return HyperparameterSpace.from_dict({
        "lr": {"type": "continuous", "min": 0.001, "max": 0.1},
        "batch": {"type": "discrete", "values": [16, 32, 64]},
        "units": {"type": "integer", "min": 8, "max": 64},
    })
