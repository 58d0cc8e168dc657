"""matplotlib chart sink: named series on up to three y axes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from . import config  # noqa: E402
from .state import PlotData  # noqa: E402

SIDES = ("left", "right", "overlay")


@dataclass(frozen=True)
class ChartSeries:
    name: str
    x: Sequence
    y: Sequence[Optional[float]]
    side: str = "left"
    color: str = config.COLOR_A
    axis_title: Optional[str] = None


# ----- Date-safe plotting helpers -----
def _date_nums(x_like) -> np.ndarray:
    xd = pd.to_datetime(pd.Series(list(x_like)), errors="coerce")
    return mdates.date2num(pd.DatetimeIndex(xd).to_pydatetime())


def plot_datetime(ax, x_like, y_vals, **kwargs):
    """Plot against a real date axis; None in y_vals leaves a gap."""
    y = np.array([np.nan if v is None else v for v in y_vals], dtype=float)
    line = ax.plot(_date_nums(x_like), y, **kwargs)
    ax.xaxis_date()
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m"))
    return line


def _color_axis(ax, color, title):
    ax.set_ylabel(title, color=color)
    ax.tick_params(axis="y", colors=color)


def series_from_plot_data(plot: PlotData) -> List[ChartSeries]:
    series = [
        ChartSeries(plot.metric_a, plot.dates, plot.values_a, "left", config.COLOR_A),
        ChartSeries(plot.metric_b, plot.dates, plot.values_b, "right", config.COLOR_B),
    ]
    if plot.correlation is not None:
        series.append(
            ChartSeries(
                f"Rolling correlation ({plot.window})",
                [p.date for p in plot.correlation],
                [p.value for p in plot.correlation],
                "overlay",
                config.COLOR_CORR,
                axis_title="Correlation",
            )
        )
    return series


def render_time_series(series: Sequence[ChartSeries], title: str = config.CHART_TITLE):
    """Draw series on left/right/overlay axes and return the Figure."""
    for s in series:
        if s.side not in SIDES:
            raise ValueError(f"Unknown axis side: {s.side!r}")

    fig, ax = plt.subplots(figsize=(config.FIG_W, config.FIG_H))
    axes = {"left": ax}
    handles = []

    for s in series:
        if s.side not in axes:
            twin = ax.twinx()
            if s.side == "overlay":
                # third axis: push its spine out past the right-hand axis
                twin.spines["right"].set_position(("axes", 1.12))
                twin.set_ylim(-1.05, 1.05)
                twin.axhline(0.0, color=s.color, alpha=0.25, linewidth=0.8)
            axes[s.side] = twin
        target = axes[s.side]
        handles += plot_datetime(target, s.x, s.y, label=s.name, color=s.color, linewidth=1.2)
        _color_axis(target, s.color, s.axis_title or s.name)

    ax.set_title(title, fontsize=11, pad=8)
    ax.set_xlabel("Date")
    ax.grid(alpha=0.2)
    if handles:
        ax.legend(handles, [h.get_label() for h in handles], fontsize=8, loc="upper left")
    for lbl in ax.get_xticklabels():
        lbl.set_rotation(45)
        lbl.set_horizontalalignment("right")
    fig.tight_layout()
    return fig
