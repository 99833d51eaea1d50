"""
Numeric kernels shared by the spending analyzers.

All functions are pure and guard against empty input and zero variance,
returning safe defaults instead of NaN or infinity.
"""

from typing import Sequence

import numpy as np
from sklearn.linear_model import LinearRegression


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def variance(values: Sequence[float]) -> float:
    """Population variance."""
    if len(values) == 0:
        return 0.0
    return float(np.var(values))


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def percentile(values: Sequence[float], pct: float) -> float:
    """Percentile using linear interpolation between order statistics."""
    if len(values) == 0:
        return 0.0
    return float(np.percentile(values, pct, method="linear"))


def percentile_position(value: float, values: Sequence[float]) -> int:
    """Percent of the sorted sample lying below the first element >= value."""
    ordered = np.sort(np.asarray(values, dtype=float))
    if ordered.size == 0:
        return 100
    index = int(np.searchsorted(ordered, value, side="left"))
    if index >= ordered.size:
        return 100
    return int(round(index / ordered.size * 100))


def z_score(value: float, center: float, spread: float) -> float:
    """Absolute distance from ``center`` in units of ``spread`` (0 if spread is 0)."""
    if spread <= 0:
        return 0.0
    return abs((value - center) / spread)


def linear_trend(values: Sequence[float]) -> float:
    """
    Slope of an ordinary least squares fit over an ordered series.

    The series is indexed 0..n-1. Fewer than two points have no trend.
    """
    if len(values) < 2:
        return 0.0
    x = np.arange(len(values)).reshape(-1, 1)
    y = np.asarray(values, dtype=float)
    model = LinearRegression()
    model.fit(x, y)
    return float(model.coef_[0])


def normalized_trend(values: Sequence[float]) -> float:
    """Linear trend slope divided by the series average (0 when the average is 0)."""
    avg = mean(values)
    if avg == 0:
        return 0.0
    return linear_trend(values) / avg


def predictability(values: Sequence[float]) -> float:
    """
    Lag-1 autocorrelation rescaled from [-1, 1] to [0, 1].

    A constant series is perfectly predictable (1.0); fewer than three
    points give the neutral 0.5.
    """
    if len(values) < 3:
        return 0.5

    series = np.asarray(values, dtype=float)
    avg = series.mean()
    var = series.var()
    if var == 0:
        return 1.0

    deviations = series - avg
    autocorr = float(np.sum(deviations[1:] * deviations[:-1])) / ((series.size - 1) * var)
    return float(max(0.0, min(1.0, (autocorr + 1) / 2)))


def coefficient_of_variation(values: Sequence[float]) -> float:
    avg = mean(values)
    if avg == 0:
        return 0.0
    return std_dev(values) / avg
