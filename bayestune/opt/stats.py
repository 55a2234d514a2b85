"""Standard normal distribution helpers.

English:
    Closed-form approximations used by the acquisition function.
    `normal_cdf` follows Abramowitz & Stegun 7.1.26 (about 1e-7 absolute error).
    Both functions accept scalars (-> float) or arrays (-> ndarray).

日本語:
    獲得関数で使う標準正規分布の近似式です。
    `normal_cdf` は Abramowitz & Stegun 7.1.26（絶対誤差 約1e-7）に基づきます。
    スカラー（float を返す）と配列（ndarray を返す）の両方に対応します。
"""

from __future__ import annotations
import numpy as np

_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911

_INV_SQRT_2PI = 1.0 / np.sqrt(2.0 * np.pi)


def _as_output(arr: np.ndarray):
    return float(arr) if arr.ndim == 0 else arr


def normal_cdf(x):
    x = np.asarray(x, dtype=float)
    sign = np.where(x < 0, -1.0, 1.0)
    u = np.abs(x) / np.sqrt(2.0)
    t = 1.0 / (1.0 + _P * u)
    # EN: Horner form of a1*t + a2*t^2 + ... + a5*t^5.
    # JP: a1*t + ... + a5*t^5 をホーナー法で評価。
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    erf = 1.0 - poly * np.exp(-u * u)
    return _as_output(0.5 * (1.0 + sign * erf))


def normal_pdf(x):
    x = np.asarray(x, dtype=float)
    return _as_output(np.exp(-0.5 * x * x) * _INV_SQRT_2PI)
