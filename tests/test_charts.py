import unittest

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from plotcorr import config
from plotcorr.charts import ChartSeries, render_time_series, series_from_plot_data
from plotcorr.correlation import CorrelationPoint
from plotcorr.state import PlotData

DATES = list(pd.date_range("2024-01-01", periods=6, freq="D"))


def make_plot(with_corr=True):
    corr = None
    if with_corr:
        corr = [CorrelationPoint(DATES[3], 0.5), CorrelationPoint(DATES[4], None), CorrelationPoint(DATES[5], -0.2)]
    return PlotData("A", "B", DATES, [1, 2, 3, 4, 5, 6], [6, 5, 4, 3, 2, 1], 3, corr)


class TestSeriesFromPlotData(unittest.TestCase):
    def test_two_metric_series(self):
        series = series_from_plot_data(make_plot(with_corr=False))
        self.assertEqual([s.side for s in series], ["left", "right"])
        self.assertEqual([s.color for s in series], [config.COLOR_A, config.COLOR_B])

    def test_overlay_series(self):
        series = series_from_plot_data(make_plot())
        overlay = series[-1]
        self.assertEqual(overlay.side, "overlay")
        self.assertEqual(list(overlay.x), DATES[3:])
        self.assertEqual(list(overlay.y), [0.5, None, -0.2])


class TestRenderTimeSeries(unittest.TestCase):
    def tearDown(self):
        plt.close("all")

    def test_three_axes_with_overlay(self):
        fig = render_time_series(series_from_plot_data(make_plot()))
        self.assertEqual(len(fig.axes), 3)
        self.assertEqual(fig.axes[0].get_title(), config.CHART_TITLE)
        self.assertEqual(fig.axes[2].get_ylim(), (-1.05, 1.05))

    def test_none_becomes_gap(self):
        fig = render_time_series(series_from_plot_data(make_plot()))
        ydata = fig.axes[2].get_lines()[-1].get_ydata()
        self.assertTrue(np.isnan(ydata[1]))
        self.assertEqual(ydata[0], 0.5)

    def test_two_axes_without_overlay(self):
        fig = render_time_series(series_from_plot_data(make_plot(with_corr=False)))
        self.assertEqual(len(fig.axes), 2)
        self.assertEqual(fig.axes[1].get_ylabel(), "B")

    def test_unknown_side(self):
        with self.assertRaises(ValueError):
            render_time_series([ChartSeries("x", DATES, [1] * 6, side="top")])
