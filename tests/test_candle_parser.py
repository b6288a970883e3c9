from __future__ import annotations

from datetime import datetime, timezone

import pytest

from candle_odds.candles.parser import (
    DatasetLoadError,
    MissingColumnsError,
    load_candle_dir,
    normalize_column_name,
    parse_candle_text,
)


def _epoch(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def test_column_names_are_case_and_whitespace_normalized():
    assert normalize_column_name("  Event Timestamp ") == "event_timestamp"
    assert normalize_column_name("CLOSE") == "close"
    assert normalize_column_name("date-time") == "date_time"


def test_date_and_time_columns_are_joined():
    text = "Date, Time, Open, High, Low, Close\n2024-01-02,09:15,1.0,2.0,0.5,1.5\n2024-01-02,09:16,1.5,2.5,1.0,2.0\n"
    candles = parse_candle_text(text)

    assert [c.ts for c in candles] == [_epoch(2024, 1, 2, 9, 15), _epoch(2024, 1, 2, 9, 16)]
    c = candles[0]
    assert (c.open, c.high, c.low, c.close) == (1.0, 2.0, 0.5, 1.5)
    assert c.synthetic is False


def test_combined_event_timestamp_column():
    text = "Event Timestamp,open,high,low,close\n2024-03-01T10:00:00Z,10,11,9,10.5\n2024-03-01 10:01:00,10.5,12,10,11\n"
    candles = parse_candle_text(text)

    assert [c.ts for c in candles] == [_epoch(2024, 3, 1, 10, 0), _epoch(2024, 3, 1, 10, 1)]


def test_epoch_seconds_and_milliseconds():
    ts = _epoch(2024, 3, 1, 10, 0)
    text = f"timestamp,open,high,low,close\n{ts},1,2,0.5,1\n{(ts + 60) * 1000},1,2,0.5,1\n"
    candles = parse_candle_text(text)

    assert [c.ts for c in candles] == [ts, ts + 60]


def test_malformed_rows_are_dropped():
    text = "\n".join(
        [
            "date,time,open,high,low,close",
            "2024-01-02,09:15,1,2,0.5,1.5",
            "not-a-date,09:16,1,2,0.5,1.5",
            "2024-01-02,09:17,abc,2,0.5,1.5",
            "2024-01-02,09:18,1,inf,0.5,1.5",
            "2024-01-02,09:19,1,2,0.5",
            "2024-01-02,09:20,1,2,0.5,1.25",
        ]
    )
    candles = parse_candle_text(text)

    assert [c.close for c in candles] == [1.5, 1.25]


def test_missing_columns_are_reported_by_name():
    with pytest.raises(MissingColumnsError) as ei:
        parse_candle_text("date,open,high,low\n2024-01-02,1,2,0.5\n", source="bad.csv")

    assert ei.value.missing == ["timestamp (or date + time)", "close"]
    assert "bad.csv" in str(ei.value)


def test_header_only_and_empty_input_yield_no_rows():
    assert parse_candle_text("timestamp,open,high,low,close\n") == []
    assert parse_candle_text("") == []


def test_load_candle_dir_merges_csv_files(tmp_path):
    (tmp_path / "a.csv").write_text("date,time,open,high,low,close\n2024-01-02,09:16,2,3,1,2\n")
    (tmp_path / "b.CSV").write_text("date,time,open,high,low,close\n2024-01-02,09:15,1,2,0.5,1\n")
    (tmp_path / "notes.txt").write_text("ignored")

    candles = load_candle_dir(tmp_path)

    assert sorted(c.ts for c in candles) == [_epoch(2024, 1, 2, 9, 15), _epoch(2024, 1, 2, 9, 16)]


def test_undecodable_bytes_only_drop_their_row(tmp_path):
    (tmp_path / "bars.csv").write_bytes(
        b"date,time,open,high,low,close\n"
        b"2024-01-02,09:15,1,2,0.5,1.5\n"
        b"2024-01-02,09:16,1.5,2,1,1\xff\n"
        b"2024-01-02,09:17,1,1.5,1,1.25\n"
    )

    candles = load_candle_dir(tmp_path)

    assert [c.close for c in candles] == [1.5, 1.25]
    assert [c.ts for c in candles] == [_epoch(2024, 1, 2, 9, 15), _epoch(2024, 1, 2, 9, 17)]


def test_load_candle_dir_fails_fast(tmp_path):
    with pytest.raises(DatasetLoadError):
        load_candle_dir(tmp_path / "missing")

    (tmp_path / "ok.csv").write_text("date,time,open,high,low,close\n2024-01-02,09:15,1,2,0.5,1\n")
    (tmp_path / "zz_bad.csv").write_text("date,time,open,high,low\n2024-01-02,09:16,1,2,0.5\n")
    with pytest.raises(MissingColumnsError) as ei:
        load_candle_dir(tmp_path)
    assert ei.value.missing == ["close"]
