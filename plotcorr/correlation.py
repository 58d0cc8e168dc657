"""Rolling-window Pearson correlation between two aligned series."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class InvalidInput(ValueError):
    """Raised when the inputs break the rolling correlation contract."""


@dataclass(frozen=True)
class CorrelationPoint:
    date: Any
    value: Optional[float]


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def check_window(window) -> int:
    # bool is an int subclass; True is not a window size
    if isinstance(window, bool) or not isinstance(window, (int, np.integer)):
        raise InvalidInput(f"window must be an integer, got {window!r}")
    if window < 1:
        raise InvalidInput(f"window must be >= 1, got {window}")
    return int(window)


def pearson(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Sample Pearson correlation of two equal-length windows.

    Returns None when either side has zero variance, fewer than two points,
    or any non-finite value.
    """
    xa = _as_array(a)
    xb = _as_array(b)
    if xa.shape != xb.shape:
        raise InvalidInput(f"length mismatch: {len(xa)} != {len(xb)}")
    n = len(xa)
    if n < 2:
        return None
    if not (np.isfinite(xa).all() and np.isfinite(xb).all()):
        return None
    # identical values means zero variance, checked exactly
    if xa.max() == xa.min() or xb.max() == xb.min():
        return None

    da = xa - xa.mean()
    db = xb - xb.mean()
    cov = float(da @ db) / (n - 1)
    std_a = math.sqrt(float(da @ da) / (n - 1))
    std_b = math.sqrt(float(db @ db) / (n - 1))
    if std_a == 0.0 or std_b == 0.0:
        return None
    return cov / (std_a * std_b)


def range_correlation(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Pearson over the rows where both values are present; blank cells are skipped."""
    xa = _as_array(a)
    xb = _as_array(b)
    if xa.shape != xb.shape:
        raise InvalidInput(f"length mismatch: {len(xa)} != {len(xb)}")
    keep = np.isfinite(xa) & np.isfinite(xb)
    return pearson(xa[keep], xb[keep])


def iter_rolling_correlation(
    series_a: Sequence[float], series_b: Sequence[float], window: int
) -> Iterator[Optional[float]]:
    """Lazily yield the correlation of each trailing window.

    Output k covers input[k : k + window], i.e. the window that ends just
    before input index k + window. Lengths are validated eagerly.
    """
    xa = _as_array(series_a)
    xb = _as_array(series_b)
    if len(xa) != len(xb):
        raise InvalidInput(f"length mismatch: {len(xa)} != {len(xb)}")
    window = check_window(window)
    return _iter_windows(xa, xb, window)


def _iter_windows(xa: np.ndarray, xb: np.ndarray, window: int) -> Iterator[Optional[float]]:
    for i in range(window, len(xa)):
        yield pearson(xa[i - window:i], xb[i - window:i])


def rolling_correlation(
    series_a: Sequence[float], series_b: Sequence[float], window: int
) -> List[Optional[float]]:
    out = list(iter_rolling_correlation(series_a, series_b, window))
    logger.debug("rolling correlation: %d windows of %d", len(out), window)
    return out


def correlation_points(
    dates: Sequence[Any],
    series_a: Sequence[float],
    series_b: Sequence[float],
    window: int,
) -> List[CorrelationPoint]:
    """Pair each rolling value with the date at the same input offset."""
    if len(dates) != len(series_a):
        raise InvalidInput(f"dates/series length mismatch: {len(dates)} != {len(series_a)}")
    values = rolling_correlation(series_a, series_b, window)
    return [CorrelationPoint(d, v) for d, v in zip(list(dates)[window:], values)]


def rolling_correlation_series(
    dates: Sequence[Any],
    series_a: Sequence[float],
    series_b: Sequence[float],
    window: int,
    name: str = "Rolling correlation",
) -> pd.Series:
    """Same as correlation_points, as a float Series (missing values are NaN)."""
    points = correlation_points(dates, series_a, series_b, window)
    return pd.Series(
        [np.nan if p.value is None else p.value for p in points],
        index=pd.Index([p.date for p in points]),
        dtype=float,
        name=name,
    )
