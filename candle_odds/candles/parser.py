from __future__ import annotations

import io
import re
from pathlib import Path

import numpy as np
import pandas as pd
from loguru import logger

from candle_odds.candles.models import Candle

PRICE_COLUMNS = ("open", "high", "low", "close")
# Single-column timestamp headers, in lookup order.
TIMESTAMP_COLUMNS = ("timestamp", "datetime", "date_time", "event_timestamp", "event_time", "time_stamp")

# Epoch values at or above this are milliseconds.
_EPOCH_MS_THRESHOLD = 1e11


class DatasetLoadError(RuntimeError):
    pass


class MissingColumnsError(ValueError):
    def __init__(self, missing: list[str], source: str | None = None):
        self.missing = list(missing)
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"missing required columns{where}: {', '.join(self.missing)}")


def normalize_column_name(name: object) -> str:
    return re.sub(r"[\s\-]+", "_", str(name).strip().lower())


def _locate_columns(columns: list[str], source: str | None) -> tuple[list[str], dict[str, str]]:
    """Return (timestamp source columns, price column map) or raise MissingColumnsError."""

    by_norm: dict[str, str] = {}
    for col in columns:
        # First occurrence wins on duplicate headers.
        by_norm.setdefault(normalize_column_name(col), col)

    missing: list[str] = []

    ts_cols: list[str] = []
    for name in TIMESTAMP_COLUMNS:
        if name in by_norm:
            ts_cols = [by_norm[name]]
            break
    if not ts_cols:
        if "date" in by_norm and "time" in by_norm:
            ts_cols = [by_norm["date"], by_norm["time"]]
        else:
            missing.append("timestamp (or date + time)")

    prices: dict[str, str] = {}
    for name in PRICE_COLUMNS:
        if name in by_norm:
            prices[name] = by_norm[name]
        else:
            missing.append(name)

    if missing:
        raise MissingColumnsError(missing, source)
    return ts_cols, prices


def _strip(col: pd.Series) -> pd.Series:
    return col.map(lambda v: v.strip() if isinstance(v, str) else np.nan).astype(object)


def _join(date: pd.Series, time: pd.Series) -> pd.Series:
    joined = [f"{d} {t}" if isinstance(d, str) and isinstance(t, str) else np.nan for d, t in zip(date, time)]
    return pd.Series(joined, index=date.index, dtype=object)


def parse_timestamps(raw: pd.Series) -> pd.Series:
    """Epoch seconds as float; NaN where the value cannot be parsed."""

    text = _strip(raw)
    numeric = pd.to_numeric(text, errors="coerce").astype("float64")
    epoch = numeric.where(numeric.abs() < _EPOCH_MS_THRESHOLD, numeric / 1000.0)

    # Naive wall-clock values are taken as UTC.
    parsed = pd.to_datetime(text.where(numeric.isna()), errors="coerce", utc=True, format="mixed")
    parsed_epoch = (parsed - pd.Timestamp(0, tz="UTC")) / pd.Timedelta(seconds=1)

    return epoch.fillna(parsed_epoch.astype("float64"))


def parse_candle_frame(df: pd.DataFrame, source: str | None = None) -> list[Candle]:
    """Turn a raw string frame into candles; malformed rows are skipped."""

    ts_cols, prices = _locate_columns([str(c) for c in df.columns], source)
    if df.empty:
        return []

    if len(ts_cols) == 1:
        ts_raw = df[ts_cols[0]]
    else:
        ts_raw = _join(_strip(df[ts_cols[0]]), _strip(df[ts_cols[1]]))
    epoch = parse_timestamps(ts_raw)

    values = pd.DataFrame(
        {name: pd.to_numeric(_strip(df[col]), errors="coerce") for name, col in prices.items()}
    ).astype("float64")

    ok = np.isfinite(epoch.to_numpy()) & np.isfinite(values.to_numpy()).all(axis=1)
    dropped = int((~ok).sum())
    if dropped:
        logger.debug("Dropped {n} malformed row(s) from {src}", n=dropped, src=source or "<input>")

    out: list[Candle] = []
    for ts, o, h, l, c in zip(
        epoch.to_numpy()[ok],
        values["open"].to_numpy()[ok],
        values["high"].to_numpy()[ok],
        values["low"].to_numpy()[ok],
        values["close"].to_numpy()[ok],
    ):
        out.append(Candle(ts=int(ts), open=float(o), high=float(h), low=float(l), close=float(c)))
    return out


def _read_frame(buf, source: str | None) -> pd.DataFrame | None:
    try:
        # Undecodable bytes become U+FFFD so the damaged row fails coercion and is dropped.
        return pd.read_csv(buf, dtype=str, skipinitialspace=True, on_bad_lines="skip", encoding_errors="replace")
    except pd.errors.EmptyDataError:
        logger.warning("Empty candle file: {src}", src=source or "<input>")
        return None


def parse_candle_text(text: str, source: str | None = None) -> list[Candle]:
    df = _read_frame(io.StringIO(text), source)
    if df is None:
        return []
    return parse_candle_frame(df, source)


def read_candle_csv(path: str | Path) -> list[Candle]:
    p = Path(path)
    df = _read_frame(p, p.name)
    if df is None:
        return []
    candles = parse_candle_frame(df, p.name)
    logger.info("Loaded {n} candle(s) from {src} ({rows} row(s))", n=len(candles), src=p.name, rows=len(df))
    return candles


def load_candle_dir(data_dir: str | Path) -> list[Candle]:
    """Merge every CSV file in a directory. Missing columns in any file are fatal."""

    root = Path(data_dir)
    if not root.is_dir():
        raise DatasetLoadError(f"candle data directory not found: {root}")

    files = sorted(p for p in root.iterdir() if p.is_file() and p.name.lower().endswith(".csv"))
    if not files:
        logger.warning("No CSV files in {dir}", dir=str(root))

    merged: list[Candle] = []
    for path in files:
        merged.extend(read_candle_csv(path))
    return merged
