from __future__ import annotations

import logging

import pandas as pd

from . import config
from .correlation import check_window, pearson
from .data import DatasetError, metric_columns

logger = logging.getLogger(__name__)

SCAN_COLUMNS = ["metric", "start", "end", "correlation"]


def scan_correlations(
    df: pd.DataFrame,
    base_metric: str,
    date_column: str,
    window: int = config.DEFAULT_WINDOW,
    threshold: float = config.SCAN_THRESHOLD,
) -> pd.DataFrame:
    """Every rolling window where |r| between base_metric and another metric >= threshold.

    ``start``/``end`` are the first and last dates inside the window.
    """
    window = check_window(window)
    metrics = metric_columns(df, date_column)
    if base_metric not in metrics:
        raise DatasetError(f"Unknown base metric: {base_metric!r}")

    dates = list(pd.to_datetime(df[date_column]))
    base = pd.to_numeric(df[base_metric], errors="coerce").to_numpy(dtype=float)
    rows = []
    for metric in metrics:
        if metric == base_metric:
            continue
        other = pd.to_numeric(df[metric], errors="coerce").to_numpy(dtype=float)
        # every full window [k, k + window), the newest one included
        for k in range(len(dates) - window + 1):
            r = pearson(base[k:k + window], other[k:k + window])
            if r is None or abs(r) < threshold:
                continue
            rows.append(
                {"metric": metric, "start": dates[k], "end": dates[k + window - 1], "correlation": r}
            )

    logger.info("scan of %s: %d windows with |r| >= %.2f", base_metric, len(rows), threshold)
    return pd.DataFrame(rows, columns=SCAN_COLUMNS)
