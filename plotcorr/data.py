"""Dataset loading, column discovery and date-range filtering."""

from __future__ import annotations

import io
import logging
import os
import re
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd
import requests

from . import config

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]


class DatasetError(ValueError):
    """The dataset cannot be used (empty, no date column, unknown metric)."""


# ================== READERS ==================
def _try_csv(raw: bytes) -> pd.DataFrame:
    # latin-1 maps every byte, so it is the last resort
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = raw.decode("latin-1")
    return pd.read_csv(io.StringIO(text), skip_blank_lines=True)


def read_uploaded(uploaded) -> pd.DataFrame:
    """Read an uploaded file object (csv, or xlsx through openpyxl)."""
    if uploaded is None:
        raise DatasetError("No file provided")
    uploaded.seek(0)
    raw = uploaded.read()
    uploaded.seek(0)
    name = (getattr(uploaded, "name", "") or "").lower()

    if name.endswith(".xlsx"):
        # real xlsx files are zip archives
        if raw[:2] != b"PK":
            raise DatasetError(f"{name} is not a valid Excel file. Try CSV instead.")
        return pd.read_excel(io.BytesIO(raw), engine="openpyxl")
    return _try_csv(raw)


def read_path(path: str) -> pd.DataFrame:
    with open(path, "rb") as fh:
        return _try_csv(fh.read())


def read_url(url: str, timeout: float = config.HTTP_TIMEOUT) -> pd.DataFrame:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return _try_csv(r.content)


def read_repo_dataset(
    url: str = config.DATA_URL,
    fallbacks: Iterable[str] = config.LOCAL_FALLBACKS,
) -> pd.DataFrame:
    """Remote raw CSV first, then the first local candidate that exists."""
    if url:
        try:
            return read_url(url)
        except requests.RequestException as e:
            logger.warning("remote dataset %s unavailable (%s); trying local files", url, e)
    for candidate in fallbacks:
        if candidate and os.path.exists(candidate):
            logger.info("reading local dataset %s", candidate)
            return read_path(candidate)
    raise FileNotFoundError(
        "Could not load a dataset. Set PLOTCORR_DATA_URL or PLOTCORR_DATA_PATH, "
        "or add data/platodb.csv."
    )


# ================== CLEANING ==================
def clean_numeric(s: pd.Series) -> pd.Series:
    """Coerce to float, tolerating '1,234', '$12' and '5%' style cells."""
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    cleaned = (
        s.astype(str)
        .str.replace(",", "", regex=False)
        .str.replace("$", "", regex=False)
        .str.replace("%", "", regex=False)
        .str.strip()
    )
    return pd.to_numeric(cleaned, errors="coerce").astype(float)


def _parses_as_dates(s: pd.Series, require_all: bool = False) -> bool:
    if pd.api.types.is_datetime64_any_dtype(s):
        return True
    if pd.api.types.is_numeric_dtype(s):
        return False
    parsed = pd.to_datetime(s, errors="coerce")
    present = s.notna()
    if not present.any():
        return False
    ok = parsed[present].notna()
    return bool(ok.all()) if require_all else bool(ok.any())


def find_date_column(df: pd.DataFrame, preferred: str = config.DATE_COLUMN) -> str:
    if preferred in df.columns:
        return preferred
    for c in df.columns:
        if str(c).strip().lower() == preferred.strip().lower():
            return c
    # "Trade Date" or "trade_date", not "Updated"
    for c in df.columns:
        if "date" in re.split(r"[^a-z]+", str(c).lower()) and _parses_as_dates(df[c]):
            return c
    for c in df.columns:
        if _parses_as_dates(df[c], require_all=True):
            return c
    raise DatasetError(f"No date column found (looked for {preferred!r})")


def prepare_dataset(df: pd.DataFrame, date_column: str = config.DATE_COLUMN) -> Tuple[pd.DataFrame, str]:
    """Parse dates, drop undated rows, sort by date, make metrics numeric."""
    if df is None or df.empty:
        raise DatasetError("Dataset is empty")
    out = df.copy()
    out.columns = [str(c).strip() for c in out.columns]
    col = find_date_column(out, date_column)

    out[col] = pd.to_datetime(out[col], errors="coerce")
    bad = int(out[col].isna().sum())
    if bad:
        logger.warning("dropping %d rows with unparseable %r values", bad, col)
        out = out[out[col].notna()]
    if out.empty:
        raise DatasetError(f"No rows with a valid {col!r} value")

    for c in out.columns:
        if c != col:
            out[c] = clean_numeric(out[c])

    # stable sort keeps file order for duplicate dates
    out = out.sort_values(col, kind="mergesort").reset_index(drop=True)
    return out, col


def load_dataset(source=None, date_column: str = config.DATE_COLUMN) -> Tuple[pd.DataFrame, str]:
    """Load a dataset from a path, an http(s) URL or an uploaded file.

    ``None`` means the configured repository dataset. Returns the prepared
    frame and the name of its date column.
    """
    if source is None:
        raw = read_repo_dataset()
    elif isinstance(source, (str, os.PathLike)):
        src = os.fspath(source)
        if src.startswith(("http://", "https://")):
            raw = read_url(src)
        else:
            if not os.path.exists(src):
                raise FileNotFoundError(src)
            raw = read_path(src)
    else:
        raw = read_uploaded(source)

    df, col = prepare_dataset(raw, date_column)
    logger.info("loaded %d rows x %d cols (date column %r)", len(df), len(df.columns), col)
    return df, col


# ================== COLUMNS / RANGES ==================
def metric_columns(df: pd.DataFrame, date_column: str) -> List[str]:
    """Columns other than the date column with at least one numeric value."""
    cols = []
    for c in df.columns:
        if c == date_column:
            continue
        if clean_numeric(df[c]).notna().any():
            cols.append(c)
    return cols


def date_bounds(df: pd.DataFrame, date_column: str) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    s = pd.to_datetime(df[date_column], errors="coerce")
    if not s.notna().any():
        return None, None
    return s.min(), s.max()


def filter_date_range(df: pd.DataFrame, date_column: str, start: DateLike, end: DateLike) -> pd.DataFrame:
    """Rows whose date falls in [start, end], both inclusive, in original order.

    Bounds are compared by calendar day, so ``end`` covers the whole day.
    """
    lo = pd.Timestamp(start).normalize()
    hi = pd.Timestamp(end).normalize()
    days = pd.to_datetime(df[date_column], errors="coerce").dt.normalize()
    mask = (days >= lo) & (days <= hi)
    return df.loc[mask].copy()
