"""
Numeric helpers for weather series.

Provides utilities for:
- Central tendency and dispersion (mean, median, population stddev)
- Linear trend (OLS slope against the sample index)
- Pearson correlation against the sample index
- Value clamping

Every function is total: empty or short input returns 0.0 and a zero
denominator short-circuits to 0.0 instead of producing NaN or Inf.
"""
from typing import Sequence
import numpy as np

from agroclimate.domain.models import SeriesStatistics


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def is_constant(values: Sequence[float]) -> bool:
    """True when every value is identical (or there are fewer than 2)."""
    if len(values) < 2:
        return True
    return bool(np.ptp(_as_array(values)) == 0)


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean.

    Args:
        values: Numeric sequence

    Returns:
        Mean value, or 0.0 for an empty sequence
    """
    if len(values) == 0:
        return 0.0
    return float(np.mean(_as_array(values)))


def median(values: Sequence[float]) -> float:
    """
    Median of a sorted copy; even lengths average the two middle values.

    Args:
        values: Numeric sequence

    Returns:
        Median value, or 0.0 for an empty sequence
    """
    if len(values) == 0:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return float(ordered[middle])
    return (ordered[middle - 1] + ordered[middle]) / 2.0


def variance(values: Sequence[float]) -> float:
    """Population variance (divides by N), 0.0 when fewer than 2 values."""
    # np.var leaves rounding residue for constants such as 22.1
    if is_constant(values):
        return 0.0
    return float(np.var(_as_array(values)))


def stddev(values: Sequence[float]) -> float:
    """
    Population standard deviation.

    Args:
        values: Numeric sequence

    Returns:
        Standard deviation (divides by N), or 0.0 when fewer than 2 values
        or when every value is identical
    """
    if is_constant(values):
        return 0.0
    return float(np.std(_as_array(values)))


def volatility(values: Sequence[float]) -> float:
    """Volatility of a series, defined as its standard deviation."""
    return stddev(values)


def linear_trend(values: Sequence[float]) -> float:
    """
    Ordinary least squares slope of the series against its index.

    Args:
        values: Numeric sequence ordered in time

    Returns:
        Slope per sample, or 0.0 for short, constant or degenerate input
    """
    n = len(values)
    if is_constant(values):
        return 0.0

    y = _as_array(values)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = float(np.dot(x, y))
    sum_xx = float(np.dot(x, x))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return float((n * sum_xy - sum_x * sum_y) / denominator)


def correlation(values: Sequence[float]) -> float:
    """
    Pearson correlation of the series against its index.

    Args:
        values: Numeric sequence ordered in time

    Returns:
        Correlation coefficient in [-1, 1], or 0.0 for degenerate input
    """
    n = len(values)
    if is_constant(values):
        return 0.0

    y = _as_array(values)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = float(np.dot(x, y))
    sum_xx = float(np.dot(x, x))
    sum_yy = float(np.dot(y, y))

    numerator = n * sum_xy - sum_x * sum_y
    product = (n * sum_xx - sum_x * sum_x) * (n * sum_yy - sum_y * sum_y)
    # Rounding can leave a tiny negative product for constant series
    if product <= 0:
        return 0.0
    return float(np.clip(numerator / np.sqrt(product), -1.0, 1.0))


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value into [lower, upper]."""
    return float(min(max(value, lower), upper))


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def summarize(values: Sequence[float]) -> SeriesStatistics:
    """
    Descriptive statistics for one weather variable.

    Args:
        values: Numeric sequence

    Returns:
        SeriesStatistics; every field is 0 for an empty sequence
    """
    if len(values) == 0:
        return SeriesStatistics()

    low = float(min(values))
    high = float(max(values))
    return SeriesStatistics(
        count=len(values),
        mean=mean(values),
        median=median(values),
        minimum=low,
        maximum=high,
        std_dev=stddev(values),
        range=high - low,
        total=float(np.sum(_as_array(values))),
    )
