from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from loguru import logger

from candle_odds.candles.models import Candle


def align_ts(ts: int, interval_seconds: int) -> int:
    return int(ts) - (int(ts) % int(interval_seconds))


def normalize_candles(candles: Iterable[Candle], interval_seconds: int = 60) -> list[Candle]:
    """Sort, dedupe and gap-fill into a contiguous one-interval series.

    Timestamps are floored onto the interval grid first. A candle that lands on
    or before the last accepted slot is dropped (first one wins). Missing slots
    are filled with flat candles priced at the last accepted close.
    """

    step = int(interval_seconds)
    if step < 1:
        raise ValueError("interval_seconds must be >= 1")

    aligned = [c if c.ts % step == 0 else replace(c, ts=align_ts(c.ts, step)) for c in candles]
    # Stable: among equal timestamps the earliest input row is kept.
    aligned.sort(key=lambda c: c.ts)

    out: list[Candle] = []
    dropped = 0
    filled = 0
    for c in aligned:
        if not out:
            out.append(c)
            continue
        last = out[-1]
        gap = (c.ts - last.ts) // step
        if gap <= 0:
            dropped += 1
            continue
        for k in range(1, gap):
            out.append(Candle.flat(last.ts + k * step, last.close))
        filled += gap - 1
        out.append(c)

    if dropped or filled:
        logger.info("Normalized {n} candle(s): dropped {d} duplicate(s), filled {f} gap slot(s)", n=len(out), d=dropped, f=filled)
    return out
