import io
import os
import tempfile
import unittest
from datetime import date
from unittest import mock

import pandas as pd
import requests
from parameterized import parameterized

from plotcorr.data import (
    DatasetError,
    clean_numeric,
    date_bounds,
    filter_date_range,
    find_date_column,
    load_dataset,
    metric_columns,
    prepare_dataset,
    read_repo_dataset,
    read_uploaded,
)

CSV_TEXT = (
    "Date,USDJPYEXClose,SP500Close,Note\n"
    "2024-01-03,141.2,\"4,704.81\",x\n"
    "2024-01-01,140.9,\"4,742.83\",y\n"
    "2024-01-02,141.0,\"4,688.68\",\n"
    "not a date,1,2,z\n"
    "2024-01-04,143.5,\"4,697.24\",w\n"
)


class FakeUpload(io.BytesIO):
    def __init__(self, data: bytes, name: str):
        super().__init__(data)
        self.name = name


class TestCleanNumeric(unittest.TestCase):
    @parameterized.expand(
        [
            ("1,234.5", 1234.5),
            ("$12", 12.0),
            ("5%", 5.0),
            (" 7 ", 7.0),
        ]
    )
    def test_clean(self, raw, expected):
        self.assertEqual(clean_numeric(pd.Series([raw])).iloc[0], expected)

    def test_garbage_becomes_nan(self):
        self.assertTrue(pd.isna(clean_numeric(pd.Series(["n/a"])).iloc[0]))

    def test_numeric_passthrough(self):
        out = clean_numeric(pd.Series([1, 2, 3]))
        self.assertEqual(out.dtype, float)
        self.assertEqual(out.tolist(), [1.0, 2.0, 3.0])


class TestLoadDataset(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "data.csv")
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write(CSV_TEXT)

    def tearDown(self):
        self.tmp.cleanup()

    def test_load_path_sorts_and_cleans(self):
        df, col = load_dataset(self.path)
        self.assertEqual(col, "Date")
        self.assertEqual(len(df), 4)
        self.assertTrue(df["Date"].is_monotonic_increasing)
        self.assertEqual(df["SP500Close"].iloc[0], 4742.83)
        self.assertTrue(pd.api.types.is_datetime64_any_dtype(df["Date"]))

    def test_missing_path(self):
        with self.assertRaises(FileNotFoundError):
            load_dataset(os.path.join(self.tmp.name, "nope.csv"))

    def test_upload_csv_with_bom(self):
        upload = FakeUpload(b"\xef\xbb\xbf" + CSV_TEXT.encode("utf-8"), "prices.csv")
        df, col = load_dataset(upload)
        self.assertEqual(col, "Date")
        self.assertEqual(len(df), 4)

    def test_upload_fake_xlsx(self):
        with self.assertRaises(DatasetError):
            read_uploaded(FakeUpload(CSV_TEXT.encode("utf-8"), "prices.xlsx"))

    def test_upload_none(self):
        with self.assertRaises(DatasetError):
            read_uploaded(None)

    def test_url_source(self):
        resp = mock.Mock(content=CSV_TEXT.encode("utf-8"))
        with mock.patch("plotcorr.data.requests.get", return_value=resp) as get:
            df, _ = load_dataset("https://example.com/data.csv")
        get.assert_called_once()
        self.assertEqual(len(df), 4)

    def test_repo_dataset_falls_back_to_local(self):
        with mock.patch("plotcorr.data.requests.get", side_effect=requests.ConnectionError("down")):
            df = read_repo_dataset("https://example.com/data.csv", [self.path])
        self.assertEqual(len(df), 5)

    def test_repo_dataset_nothing_found(self):
        with self.assertRaises(FileNotFoundError):
            read_repo_dataset("", [os.path.join(self.tmp.name, "missing.csv")])

    def test_empty_dataset(self):
        with self.assertRaises(DatasetError):
            prepare_dataset(pd.DataFrame())


class TestFindDateColumn(unittest.TestCase):
    def test_preferred(self):
        df = pd.DataFrame({"Date": ["2024-01-01"], "x": [1]})
        self.assertEqual(find_date_column(df, "Date"), "Date")

    def test_case_insensitive(self):
        df = pd.DataFrame({"x": [1], "date": ["2024-01-01"]})
        self.assertEqual(find_date_column(df, "Date"), "date")

    def test_parses_unnamed_column(self):
        df = pd.DataFrame({"x": [1, 2], "when": ["2024-01-01", "2024-01-02"]})
        self.assertEqual(find_date_column(df, "Date"), "when")

    def test_word_match_skips_non_date_headers(self):
        df = pd.DataFrame(
            {
                "Updated": ["yes", "no"],
                "Trade Date": ["2024-01-01", "2024-01-02"],
                "x": [1, 2],
            }
        )
        self.assertEqual(find_date_column(df, "Date"), "Trade Date")

    def test_named_date_column_must_parse(self):
        df = pd.DataFrame({"date_note": ["n/a", "tbd"], "when": ["2024-01-01", "2024-01-02"]})
        self.assertEqual(find_date_column(df, "Date"), "when")

    def test_validated_header_not_taken_for_dates(self):
        df = pd.DataFrame({"Validated": ["y", "n"], "x": [1, 2]})
        with self.assertRaises(DatasetError):
            find_date_column(df, "Date")

    def test_no_date_column(self):
        df = pd.DataFrame({"x": [1, 2], "y": [3, 4]})
        with self.assertRaises(DatasetError):
            find_date_column(df, "Date")


class TestColumnsAndRanges(unittest.TestCase):
    def setUp(self):
        self.df, self.col = prepare_dataset(pd.read_csv(io.StringIO(CSV_TEXT)))

    def test_metric_columns_skip_date_and_text(self):
        self.assertEqual(metric_columns(self.df, self.col), ["USDJPYEXClose", "SP500Close"])

    def test_date_bounds(self):
        lo, hi = date_bounds(self.df, self.col)
        self.assertEqual(lo, pd.Timestamp("2024-01-01"))
        self.assertEqual(hi, pd.Timestamp("2024-01-04"))

    def test_filter_inclusive(self):
        out = filter_date_range(self.df, self.col, "2024-01-02", date(2024, 1, 3))
        self.assertEqual(list(out[self.col].dt.day), [2, 3])

    def test_filter_end_covers_whole_day(self):
        df = pd.DataFrame({"Date": pd.to_datetime(["2024-01-01 09:30", "2024-01-02 16:00"]), "v": [1, 2]})
        out = filter_date_range(df, "Date", "2024-01-01", "2024-01-01")
        self.assertEqual(out["v"].tolist(), [1])

    def test_filter_preserves_order(self):
        df = pd.DataFrame({"Date": pd.to_datetime(["2024-01-03", "2024-01-01", "2024-01-02"]), "v": [3, 1, 2]})
        out = filter_date_range(df, "Date", "2024-01-01", "2024-01-03")
        self.assertEqual(out["v"].tolist(), [3, 1, 2])

    def test_filter_reversed_bounds_is_empty(self):
        self.assertTrue(filter_date_range(self.df, self.col, "2024-01-04", "2024-01-01").empty)

    def test_filter_returns_copy(self):
        out = filter_date_range(self.df, self.col, "2024-01-01", "2024-01-04")
        out.loc[out.index[0], "USDJPYEXClose"] = -1.0
        self.assertNotEqual(self.df["USDJPYEXClose"].iloc[0], -1.0)
