from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Direction(str, Enum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    ANY = "Any"


class BodyBucket(str, Enum):
    """Body size as a share of the candle's own high-low range (percent)."""

    B0_20 = "0-20"
    B20_40 = "20-40"
    B40_60 = "40-60"
    B60_80 = "60-80"
    B80_100 = "80-100"


@dataclass(frozen=True)
class Candle:
    ts: int  # epoch seconds, UTC
    open: float
    high: float
    low: float
    close: float
    synthetic: bool = False  # gap filler, no trading happened

    @classmethod
    def flat(cls, ts: int, price: float) -> "Candle":
        p = float(price)
        return cls(ts=int(ts), open=p, high=p, low=p, close=p, synthetic=True)

    @property
    def time(self) -> datetime:
        return datetime.fromtimestamp(int(self.ts), tz=timezone.utc)


@dataclass(frozen=True)
class CandleRelation:
    """How a candle's wick and close sit against a reference candle."""

    took_high: bool
    took_low: bool
    closed_above_high: bool
    closed_below_low: bool
    closed_inside: bool
    took_high_closed_below: bool
    took_low_closed_above: bool

    @property
    def took_both(self) -> bool:
        return self.took_high and self.took_low

    @property
    def took_none(self) -> bool:
        return not self.took_high and not self.took_low


@dataclass(frozen=True)
class EnrichedCandle:
    candle: Candle
    # Predecessor-derived; None for the first bar of a series.
    direction: Direction | None = None
    relation: CandleRelation | None = None
    body_bucket: BodyBucket | None = None

    @property
    def ts(self) -> int:
        return self.candle.ts

    @property
    def open(self) -> float:
        return self.candle.open

    @property
    def high(self) -> float:
        return self.candle.high

    @property
    def low(self) -> float:
        return self.candle.low

    @property
    def close(self) -> float:
        return self.candle.close
