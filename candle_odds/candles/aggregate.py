from __future__ import annotations

from typing import Sequence

from loguru import logger

from candle_odds.candles.models import Candle


def bucket_end(ts: int, span_seconds: int) -> int:
    """Next multiple of the span at or after ts (aligned to epoch, not to the series)."""
    return -(-int(ts) // int(span_seconds)) * int(span_seconds)


def timeframe_label(seconds: int) -> str:
    s = int(seconds)
    if s % 86400 == 0:
        return f"{s // 86400}d"
    if s % 3600 == 0:
        return f"{s // 3600}h"
    if s % 60 == 0:
        return f"{s // 60}m"
    return f"{s}s"


def _merge(bucket: list[Candle], ts: int) -> Candle:
    return Candle(
        ts=int(ts),
        open=bucket[0].open,
        high=max(c.high for c in bucket),
        low=min(c.low for c in bucket),
        close=bucket[-1].close,
        synthetic=all(c.synthetic for c in bucket),
    )


def aggregate_candles(series: Sequence[Candle], width: int, interval_seconds: int = 60) -> list[Candle]:
    """Resample a normalized series into buckets of `width` base intervals.

    A bucket closes on the candle whose timestamp equals the bucket end and is
    stamped with that end. A trailing bucket that never reaches its end is not
    emitted.
    """

    width = int(width)
    if width < 1:
        raise ValueError("width must be >= 1")
    if width == 1:
        return list(series)

    span = width * int(interval_seconds)
    out: list[Candle] = []
    bucket: list[Candle] = []
    end = 0
    restarts = 0
    for c in series:
        if not bucket:
            end = bucket_end(c.ts, span)
        elif c.ts > end:
            # Skipped past the boundary; the partial bucket is discarded.
            restarts += 1
            bucket = []
            end = bucket_end(c.ts, span)
        bucket.append(c)
        if c.ts == end:
            out.append(_merge(bucket, end))
            bucket = []

    if restarts:
        logger.debug("Aggregation width={w}: restarted {n} bucket(s) on a skipped boundary", w=width, n=restarts)
    return out
