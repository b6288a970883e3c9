from __future__ import annotations

from candle_odds.candles.enrich import body_bucket, candle_direction, enrich_candles, relate
from candle_odds.candles.models import BodyBucket, Candle, Direction
from candle_odds.candles.normalize import normalize_candles


def _c(o: float, h: float, l: float, c: float, ts: int = 60) -> Candle:
    return Candle(ts=ts, open=o, high=h, low=l, close=c)


def test_first_candle_has_no_derived_fields():
    out = enrich_candles([_c(10, 12, 9, 11, ts=60), _c(11, 13, 10, 12, ts=120)])

    assert out[0].direction is None and out[0].relation is None and out[0].body_bucket is None
    assert out[1].direction is Direction.BULLISH
    assert out[1].relation is not None and out[1].relation.took_high


def test_relation_flags():
    prev = _c(10, 12, 9, 11)

    rel = relate(_c(11, 13, 8, 10), prev)
    assert rel.took_high and rel.took_low and rel.took_both and not rel.took_none
    assert rel.closed_inside and rel.took_high_closed_below and rel.took_low_closed_above

    rel = relate(_c(11, 11.5, 9.5, 11), prev)
    assert rel.took_none and not rel.took_both and rel.closed_inside

    rel = relate(_c(11, 14, 10, 13), prev)
    assert rel.closed_above_high and not rel.took_high_closed_below and not rel.closed_inside

    rel = relate(_c(9, 9.5, 7, 8), prev)
    assert rel.closed_below_low and not rel.took_low_closed_above


def test_inside_range_is_inclusive():
    prev = _c(10, 12, 9, 11)
    assert relate(_c(11, 12, 9, 12), prev).closed_inside
    assert relate(_c(11, 12, 9, 9), prev).closed_inside


def test_body_buckets():
    assert body_bucket(_c(10, 10, 10, 10)) is BodyBucket.B0_20  # zero range
    assert body_bucket(_c(10, 20, 10, 11)) is BodyBucket.B0_20
    assert body_bucket(_c(10, 20, 10, 12)) is BodyBucket.B20_40  # exactly 20%
    assert body_bucket(_c(10, 20, 10, 15)) is BodyBucket.B40_60
    assert body_bucket(_c(17, 20, 10, 10)) is BodyBucket.B60_80
    assert body_bucket(_c(10, 20, 10, 20)) is BodyBucket.B80_100


def test_doji_direction_resolves_to_bearish():
    # Pinned behaviour: close == open is labelled bearish by the enricher.
    assert candle_direction(_c(10, 11, 9, 10)) is Direction.BEARISH


def test_gap_fillers_feed_neighbor_enrichment():
    # Pinned behaviour: a real bar after a gap is related to the flat filler,
    # not to the last real bar.
    base = normalize_candles([_c(10, 15, 9, 12, ts=60), _c(12, 13, 11.5, 12.5, ts=180)], 60)
    out = enrich_candles(base)

    filler, real = out[1], out[2]
    assert filler.candle.synthetic
    assert filler.relation.took_none
    assert filler.body_bucket is BodyBucket.B0_20
    assert real.relation.took_high and real.relation.took_low  # vs flat bar at 12
