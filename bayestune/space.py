"""Hyperparameter search spaces and random sampling.

English:
    A space maps parameter names to one of three dimension shapes:
      - Continuous(low, high): real values in [low, high]
      - Discrete(values): one of an ordered list of candidates
      - Integer(low, high): integers in the inclusive range [low, high]
    Anything else is rejected when the space is built.

    Internally a point is also held as a "raw" row of floats: the value itself
    for numeric dimensions and the candidate index for discrete ones. This lets
    the surrogate compute distances for many candidates at once with numpy.

日本語:
    探索空間はパラメータ名から次の3種類の次元への対応です。
      - Continuous(low, high): [low, high] の実数
      - Discrete(values): 候補リストのいずれか
      - Integer(low, high): 両端を含む整数範囲
    それ以外の形は空間の構築時にエラーになります。

    内部では点を float の行（数値次元は値、離散次元は候補のインデックス）
    としても保持し、numpy でまとめて距離計算できるようにしています。
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import numpy as np


class SpaceConfigError(ValueError):
    """Raised when a dimension descriptor is malformed or of unknown type."""


_MAX_EXACT_INT = 2 ** 53


def _check_real(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise SpaceConfigError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise SpaceConfigError(f"{name} must be finite, got {value!r}")
    return value


def _check_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise SpaceConfigError(f"{name} must be an integer, got {value!r}")
    value = int(value)
    # EN: raw rows are float64; larger integers would not round-trip exactly.
    # JP: 内部表現は float64 のため、これを超える整数は正確に扱えません。
    if abs(value) > _MAX_EXACT_INT:
        raise SpaceConfigError(f"{name} must be within +/-2**53, got {value!r}")
    return value


@dataclass(frozen=True)
class Continuous:
    low: float
    high: float

    def __post_init__(self):
        low = _check_real("low", self.low)
        high = _check_real("high", self.high)
        if low > high:
            raise SpaceConfigError(f"low ({low}) must be <= high ({high})")
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)


@dataclass(frozen=True)
class Integer:
    low: int
    high: int

    def __post_init__(self):
        low = _check_int("low", self.low)
        high = _check_int("high", self.high)
        if low > high:
            raise SpaceConfigError(f"low ({low}) must be <= high ({high})")
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)


@dataclass(frozen=True)
class Discrete:
    values: Tuple[Any, ...]

    def __post_init__(self):
        if isinstance(self.values, (str, bytes)) or not hasattr(self.values, "__iter__"):
            raise SpaceConfigError(f"values must be a sequence, got {self.values!r}")
        values = tuple(self.values)
        if not values:
            raise SpaceConfigError("values must not be empty")
        object.__setattr__(self, "values", values)

    def index(self, value: Any) -> int:
        # EN: equality scan keeps unhashable candidates usable; identity covers NaN.
        # JP: ハッシュ不可能な候補も扱えるよう等価比較で探します（NaN は同一性で一致）。
        for k, v in enumerate(self.values):
            if v is value or v == value:
                return k
        raise ValueError(f"{value!r} is not one of {list(self.values)!r}")


Dimension = Union[Continuous, Discrete, Integer]


def dimension_from_dict(name: str, spec: Mapping) -> Dimension:
    """Build a dimension from `{"type": ..., "min": ..., "max": ...}` / `{"type": "discrete", "values": [...]}`."""
    kind = spec.get("type")
    try:
        if kind == "continuous":
            return Continuous(spec["min"], spec["max"])
        if kind == "integer":
            return Integer(spec["min"], spec["max"])
        if kind == "discrete":
            return Discrete(spec["values"])
    except KeyError as exc:
        raise SpaceConfigError(f"{name}: missing key {exc.args[0]!r} for type {kind!r}") from exc
    except SpaceConfigError as exc:
        raise SpaceConfigError(f"{name}: {exc}") from exc
    raise SpaceConfigError(f"{name}: unknown dimension type {kind!r}")


class HyperparameterSpace(Mapping):
    """Immutable mapping from parameter name to dimension.

    Parameters
    ----------
    dimensions:
        mapping name -> Continuous / Discrete / Integer, or name -> plain dict
        descriptor (see `dimension_from_dict`).
    """

    def __init__(self, dimensions: Optional[Mapping[str, Any]] = None):
        dims: Dict[str, Dimension] = {}
        for name, dim in (dimensions or {}).items():
            if not isinstance(name, str):
                raise SpaceConfigError(f"parameter names must be strings, got {name!r}")
            if isinstance(dim, (Continuous, Discrete, Integer)):
                dims[name] = dim
            elif isinstance(dim, Mapping):
                dims[name] = dimension_from_dict(name, dim)
            else:
                raise SpaceConfigError(f"{name}: unsupported dimension descriptor {dim!r}")
        self._dims = dims
        self._names: Tuple[str, ...] = tuple(dims)

        numeric = [not isinstance(d, Discrete) for d in dims.values()]
        self._numeric_mask = np.array(numeric, dtype=bool)
        self._widths = np.array(
            [d.high - d.low if num else 0.0 for d, num in zip(dims.values(), numeric)], dtype=float
        )
        self._numeric_mask.flags.writeable = False
        self._widths.flags.writeable = False

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def numeric_mask(self) -> np.ndarray:
        """Read-only; True for continuous / integer dimensions."""
        return self._numeric_mask

    @property
    def widths(self) -> np.ndarray:
        """Read-only; high - low per numeric dimension, 0 for discrete ones."""
        return self._widths

    @classmethod
    def from_dict(cls, spec: Mapping[str, Mapping]) -> "HyperparameterSpace":
        return cls(spec)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        out: Dict[str, Dict[str, Any]] = {}
        for name, dim in self._dims.items():
            if isinstance(dim, Discrete):
                out[name] = {"type": "discrete", "values": list(dim.values)}
            else:
                kind = "continuous" if isinstance(dim, Continuous) else "integer"
                out[name] = {"type": kind, "min": dim.low, "max": dim.high}
        return out

    # Mapping protocol
    def __getitem__(self, name: str) -> Dimension:
        return self._dims[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __repr__(self) -> str:
        return f"HyperparameterSpace({self._dims!r})"

    # ------------------------------------------------------------------
    def sample_raw(self, rng: np.random.Generator, n: int = 1) -> np.ndarray:
        """Draw `n` i.i.d. points as a raw array of shape (n, d)."""
        X = np.empty((n, len(self)), dtype=float)
        for j, dim in enumerate(self._dims.values()):
            if isinstance(dim, Continuous):
                X[:, j] = rng.uniform(dim.low, dim.high, size=n)
            elif isinstance(dim, Integer):
                X[:, j] = rng.integers(dim.low, dim.high + 1, size=n)
            else:
                X[:, j] = rng.integers(0, len(dim.values), size=n)
        return X

    def decode(self, row: np.ndarray) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for x, (name, dim) in zip(row, self._dims.items()):
            if isinstance(dim, Continuous):
                params[name] = float(x)
            elif isinstance(dim, Integer):
                params[name] = int(x)
            else:
                params[name] = dim.values[int(x)]
        return params

    def encode(self, params: Mapping[str, Any]) -> np.ndarray:
        self.validate(params)
        row = np.empty(len(self), dtype=float)
        for j, (name, dim) in enumerate(self._dims.items()):
            if isinstance(dim, Discrete):
                row[j] = dim.index(params[name])
            else:
                row[j] = float(params[name])
        return row

    def validate(self, params: Mapping[str, Any]) -> None:
        """Check that `params` covers every dimension exactly once with a legal value."""
        missing = [k for k in self.names if k not in params]
        extra = [k for k in params if k not in self._dims]
        if missing or extra:
            raise ValueError(f"parameter keys mismatch: missing={missing}, extra={extra}")
        for name, dim in self._dims.items():
            v = params[name]
            if isinstance(dim, Discrete):
                dim.index(v)
                continue
            if isinstance(v, bool) or not isinstance(v, numbers.Real):
                raise ValueError(f"{name}: expected a number, got {v!r}")
            if isinstance(dim, Integer) and not float(v).is_integer():
                raise ValueError(f"{name}: expected an integer, got {v!r}")
            if not dim.low <= v <= dim.high:
                raise ValueError(f"{name}: {v!r} outside [{dim.low}, {dim.high}]")


def sample_random(space: Mapping, rng: np.random.Generator) -> Dict[str, Any]:
    """Draw one random assignment; each dimension independently and uniformly."""
    if not isinstance(space, HyperparameterSpace):
        space = HyperparameterSpace(space)
    return space.decode(space.sample_raw(rng, 1)[0])
