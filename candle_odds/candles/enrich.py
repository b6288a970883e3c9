from __future__ import annotations

from typing import Sequence

from candle_odds.candles.models import BodyBucket, Candle, CandleRelation, Direction, EnrichedCandle

_BUCKETS = (
    (20.0, BodyBucket.B0_20),
    (40.0, BodyBucket.B20_40),
    (60.0, BodyBucket.B40_60),
    (80.0, BodyBucket.B60_80),
)


def relate(current: Candle, reference: Candle) -> CandleRelation:
    took_high = current.high > reference.high
    took_low = current.low < reference.low
    return CandleRelation(
        took_high=took_high,
        took_low=took_low,
        closed_above_high=current.close > reference.high,
        closed_below_low=current.close < reference.low,
        closed_inside=reference.low <= current.close <= reference.high,
        took_high_closed_below=took_high and current.close < reference.high,
        took_low_closed_above=took_low and current.close > reference.low,
    )


def candle_direction(c: Candle) -> Direction:
    # close == open counts as bearish.
    return Direction.BULLISH if c.close > c.open else Direction.BEARISH


def body_bucket(c: Candle) -> BodyBucket:
    rng = c.high - c.low
    if rng <= 0:
        return BodyBucket.B0_20
    pct = abs(c.close - c.open) / rng * 100.0
    for upper, bucket in _BUCKETS:
        if pct < upper:
            return bucket
    return BodyBucket.B80_100


def enrich_candles(series: Sequence[Candle]) -> tuple[EnrichedCandle, ...]:
    out: list[EnrichedCandle] = []
    prev: Candle | None = None
    for c in series:
        if prev is None:
            out.append(EnrichedCandle(candle=c))
        else:
            out.append(
                EnrichedCandle(
                    candle=c,
                    direction=candle_direction(c),
                    relation=relate(c, prev),
                    body_bucket=body_bucket(c),
                )
            )
        prev = c
    return tuple(out)
