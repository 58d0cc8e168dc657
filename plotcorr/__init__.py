"""PlotCorr: CSV time-series viewer with a rolling correlation overlay."""

from .correlation import (
    CorrelationPoint,
    InvalidInput,
    correlation_points,
    iter_rolling_correlation,
    pearson,
    rolling_correlation,
    rolling_correlation_series,
)
from .data import DatasetError, filter_date_range, load_dataset, metric_columns
from .state import PlotData, ViewerState, build_plot_data

__all__ = [
    "CorrelationPoint",
    "DatasetError",
    "InvalidInput",
    "PlotData",
    "ViewerState",
    "build_plot_data",
    "correlation_points",
    "filter_date_range",
    "iter_rolling_correlation",
    "load_dataset",
    "metric_columns",
    "pearson",
    "rolling_correlation",
    "rolling_correlation_series",
]
