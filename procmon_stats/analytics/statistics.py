from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from ..models.analytics_result import Distribution

"""Descriptive statistics over numeric sequences.

All functions are pure and accept any iterable of numbers.

- mean: 0.0 for empty input
- std_dev: population standard deviation (ddof=0), 0.0 for N < 2
- z_score: 0.0 when std is 0 (zero-variance data never produces anomalies)
- percentile: nearest-rank, index = ceil(p/100 * n) - 1 clamped to >= 0
"""

__all__ = [
    "mean",
    "std_dev",
    "z_score",
    "percentile",
    "describe",
]


def _as_array(values: Iterable[float]) -> np.ndarray:
    return np.fromiter((float(v) for v in values), dtype=np.float64)


def mean(values: Iterable[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def std_dev(values: Iterable[float]) -> float:
    """Population standard deviation (denominator N)."""
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0
    return float(arr.std(ddof=0))


def z_score(value: float, mean_value: float, std: float) -> float:
    if std == 0:
        return 0.0
    return (value - mean_value) / std


def percentile(values: Iterable[float], p: float) -> float:
    """Nearest-rank percentile.

    Args:
        values: numbers in any order
        p: percentile within [0, 100]

    Returns:
        The element at rank ceil(p/100 * n) of the ascending sort (0.0 for
        empty input).

    Raises:
        ValueError: p outside [0, 100]
    """
    if not 0 <= p <= 100:
        raise ValueError(f"percentile must be within [0, 100]: {p}")
    arr = np.sort(_as_array(values))
    if arr.size == 0:
        return 0.0
    index = max(0, math.ceil(p / 100 * arr.size) - 1)
    return float(arr[index])


def describe(values: Iterable[float]) -> Distribution:
    arr = _as_array(values)
    if arr.size == 0:
        return Distribution(
            count=0, minimum=0.0, maximum=0.0, mean=0.0, std_dev=0.0,
            p50=0.0, p90=0.0, p95=0.0, p99=0.0,
        )
    return Distribution(
        count=int(arr.size),
        minimum=float(arr.min()),
        maximum=float(arr.max()),
        mean=mean(arr),
        std_dev=std_dev(arr),
        p50=percentile(arr, 50),
        p90=percentile(arr, 90),
        p95=percentile(arr, 95),
        p99=percentile(arr, 99),
    )
