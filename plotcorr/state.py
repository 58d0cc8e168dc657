"""Explicit viewer state and the plot request it produces."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

import pandas as pd

from . import config
from .correlation import CorrelationPoint, correlation_points
from .data import DatasetError, date_bounds, filter_date_range, metric_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ViewerState:
    """Everything one plot needs: the dataset plus the user's selections."""

    dataset: pd.DataFrame
    date_column: str
    metric_a: str
    metric_b: str
    start: pd.Timestamp
    end: pd.Timestamp
    window: int = config.DEFAULT_WINDOW
    show_correlation: bool = False

    @classmethod
    def from_dataset(
        cls,
        df: pd.DataFrame,
        date_column: str,
        window: int = config.DEFAULT_WINDOW,
    ) -> "ViewerState":
        metrics = metric_columns(df, date_column)
        if not metrics:
            raise DatasetError("Dataset has no numeric metric columns")
        start, end = date_bounds(df, date_column)
        if start is None:
            raise DatasetError(f"Column {date_column!r} holds no dates")
        second = metrics[1] if len(metrics) > 1 else metrics[0]
        return cls(df, date_column, metrics[0], second, start, end, window)

    def with_selection(self, **changes) -> "ViewerState":
        return replace(self, **changes)


@dataclass(frozen=True)
class PlotData:
    metric_a: str
    metric_b: str
    dates: List[pd.Timestamp] = field(default_factory=list)
    values_a: List[float] = field(default_factory=list)
    values_b: List[float] = field(default_factory=list)
    window: int = 0
    correlation: Optional[List[CorrelationPoint]] = None

    @property
    def empty(self) -> bool:
        return not self.dates


def build_plot_data(state: ViewerState) -> PlotData:
    """Filter to the selected range and extract both series (plus the overlay)."""
    df = state.dataset
    for metric in (state.metric_a, state.metric_b):
        if metric not in df.columns or metric == state.date_column:
            raise DatasetError(f"Unknown metric column: {metric!r}")

    rows = filter_date_range(df, state.date_column, state.start, state.end)
    if rows.empty:
        logger.info("no rows between %s and %s", state.start, state.end)
        return PlotData(state.metric_a, state.metric_b, window=state.window)

    dates = list(pd.to_datetime(rows[state.date_column]))
    values_a = [float(v) for v in pd.to_numeric(rows[state.metric_a], errors="coerce")]
    values_b = [float(v) for v in pd.to_numeric(rows[state.metric_b], errors="coerce")]

    corr = None
    if state.show_correlation:
        corr = correlation_points(dates, values_a, values_b, state.window)

    return PlotData(state.metric_a, state.metric_b, dates, values_a, values_b, state.window, corr)
