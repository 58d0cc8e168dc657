import logging

import streamlit as st
import pandas as pd
import requests

from plotcorr import config
from plotcorr.charts import render_time_series, series_from_plot_data
from plotcorr.correlation import InvalidInput, range_correlation
from plotcorr.data import DatasetError, load_dataset, metric_columns
from plotcorr.scan import scan_correlations
from plotcorr.state import ViewerState, build_plot_data

# ================== CONFIG ==================
st.set_page_config(page_title="PlotCorr — Time Series Viewer", page_icon="📈", layout="wide")
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("plotcorr.app")


# ================== DATA LOADING ==================
@st.cache_data(show_spinner=False)
def cached_repo_dataset(date_column: str):
    return load_dataset(None, date_column)


def load_source(uploaded, date_column: str):
    if uploaded is not None:
        return load_dataset(uploaded, date_column)
    return cached_repo_dataset(date_column)


# ================== SIDEBAR ==================
with st.sidebar:
    st.header("📦 Data Source")
    use_repo = st.toggle("Use repository CSV", value=True, key="use_repo")
    uploaded_file = None
    if not use_repo:
        uploaded_file = st.file_uploader("Upload CSV/Excel", type=["csv", "xlsx"])
    date_column = st.text_input("Date column", value=config.DATE_COLUMN)

    st.divider()
    st.header("🔗 Correlation")
    window = int(st.number_input("Window size (rows)", min_value=1, max_value=1000,
                                 value=config.DEFAULT_WINDOW, step=1))
    show_corr = st.toggle("Show rolling correlation", value=False, key="show_corr")

# ================== MAIN UI ==================
st.title("📈 PlotCorr — Time Series Viewer")
st.caption("Pick two metrics and a date range. Optionally overlay their rolling correlation.")

df = None
try:
    if not use_repo and uploaded_file is None:
        st.info("Upload a file or enable 'Use repository CSV' in the sidebar to proceed.")
        st.stop()
    df, date_col = load_source(uploaded_file, date_column)
    st.success(f"Loaded {len(df):,} rows × {len(df.columns)} cols")
    with st.expander("Preview", expanded=False):
        st.dataframe(df.head(20), use_container_width=True)
except (DatasetError, FileNotFoundError, requests.RequestException) as e:
    logger.warning("load failed: %s", e)
    st.error(f"Failed to load data: {e}")

if df is not None:
    try:
        defaults = ViewerState.from_dataset(df, date_col, window)
    except DatasetError as e:
        st.error(str(e))
        st.stop()

    metrics = metric_columns(df, date_col)
    c1, c2 = st.columns(2)
    metric_a = c1.selectbox("Metric 1", metrics, index=metrics.index(defaults.metric_a), key="metric_a")
    metric_b = c2.selectbox("Metric 2", metrics, index=metrics.index(defaults.metric_b), key="metric_b")

    lo, hi = defaults.start.date(), defaults.end.date()
    d1, d2 = st.columns(2)
    start = d1.date_input("Start date", value=lo, min_value=lo, max_value=hi)
    end = d2.date_input("End date", value=hi, min_value=lo, max_value=hi)

    if st.button("Plot", type="primary", key="plot"):
        st.session_state["viewer_state"] = defaults.with_selection(
            metric_a=metric_a, metric_b=metric_b,
            start=pd.Timestamp(start), end=pd.Timestamp(end),
            show_correlation=show_corr,
        )

    state = st.session_state.get("viewer_state")
    if state is not None:
        # cache_data hands back a fresh copy each rerun; window/overlay apply live
        state = state.with_selection(dataset=df, date_column=date_col,
                                     window=window, show_correlation=show_corr)
        try:
            plot = build_plot_data(state)
        except (DatasetError, InvalidInput) as e:
            st.error(f"Cannot plot: {e}")
            plot = None

        if plot is not None and plot.empty:
            st.info("No rows in the selected date range.")
        elif plot is not None:
            if plot.correlation is not None and not plot.correlation:
                st.warning(f"Only {len(plot.dates)} rows in range; the correlation window ({plot.window}) needs more.")
            fig = render_time_series(series_from_plot_data(plot))
            st.pyplot(fig, use_container_width=True, clear_figure=True)

            overall = range_correlation(plot.values_a, plot.values_b)
            st.metric("Correlation over range",
                      "—" if overall is None else f"{overall:.3f}")

    # ===== Correlation scan =====
    with st.expander("🔎 Correlation scan", expanded=False):
        st.caption("Windows where the base metric moves with another metric.")
        s1, s2 = st.columns(2)
        base_metric = s1.selectbox("Base metric", metrics, key="scan_base")
        threshold = s2.slider("Minimum |correlation|", 0.0, 1.0, config.SCAN_THRESHOLD, step=0.05)
        if st.button("Run scan"):
            with st.spinner("Scanning…"):
                report = scan_correlations(df, base_metric, date_col, window, threshold)
            if report.empty:
                st.info("No windows above the threshold.")
            else:
                st.dataframe(report, use_container_width=True)
