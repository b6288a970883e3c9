from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from loguru import logger

from candle_odds.candles.aggregate import aggregate_candles, timeframe_label
from candle_odds.candles.enrich import enrich_candles
from candle_odds.candles.models import Candle, EnrichedCandle
from candle_odds.candles.normalize import normalize_candles
from candle_odds.candles.parser import load_candle_dir
from candle_odds.utils.perf import perf_span


@dataclass(frozen=True)
class Dataset:
    """Read-only candle state shared by every analysis call.

    `base` is the normalized base series; `series` maps a timeframe key
    (e.g. "1m", "5m", "1h") to its enriched form.
    """

    base: tuple[Candle, ...]
    series: Mapping[str, tuple[EnrichedCandle, ...]]
    base_timeframe: str
    interval_seconds: int

    @property
    def timeframes(self) -> list[str]:
        return list(self.series.keys())

    def get(self, timeframe: str | None) -> tuple[EnrichedCandle, ...]:
        key = timeframe or self.base_timeframe
        return self.series[key]


def build_dataset(candles: Iterable[Candle], *, interval_seconds: int = 60, widths: Sequence[int] = ()) -> Dataset:
    step = int(interval_seconds)
    with perf_span("dataset.build", widths=list(widths)):
        base = tuple(normalize_candles(candles, step))
        base_key = timeframe_label(step)

        series: dict[str, tuple[EnrichedCandle, ...]] = {base_key: enrich_candles(base)}
        for width in widths:
            key = timeframe_label(int(width) * step)
            if key in series:
                continue
            series[key] = enrich_candles(aggregate_candles(base, int(width), step))

    logger.info(
        "Dataset ready: {n} base candle(s); timeframes {tfs}",
        n=len(base),
        tfs={k: len(v) for k, v in series.items()},
    )
    return Dataset(base=base, series=MappingProxyType(series), base_timeframe=base_key, interval_seconds=step)


def load_dataset(data_dir: str | Path, *, interval_seconds: int = 60, widths: Sequence[int] = ()) -> Dataset:
    """Load every CSV in data_dir and build the dataset. Ingestion errors propagate."""

    candles = load_candle_dir(data_dir)
    logger.info("Parsed {n} candle row(s) from {dir}", n=len(candles), dir=str(data_dir))
    return build_dataset(candles, interval_seconds=interval_seconds, widths=widths)
