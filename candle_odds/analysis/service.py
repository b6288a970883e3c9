from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from candle_odds.analysis.matcher import scan
from candle_odds.analysis.probability import AnalysisResult, summarize
from candle_odds.analysis.profiles import EngineProfile
from candle_odds.analysis.rules import BodyFilter, ClosePosition, SequenceValidationError, WickInteraction, parse_sequence
from candle_odds.candles.dataset import Dataset
from candle_odds.candles.models import Direction
from candle_odds.utils.perf import perf_span


class AnalysisService:
    """status/analyze over one immutable Dataset. Safe to share between requests."""

    def __init__(self, dataset: Dataset, profile: EngineProfile):
        self.dataset = dataset
        self.profile = profile

    def status(self) -> dict[str, Any]:
        base = self.dataset.base
        out: dict[str, Any] = {"totalCandles": len(base)}
        if base:
            out["start"] = base[0].time.isoformat()
            out["end"] = base[-1].time.isoformat()
        out["timeframes"] = {k: len(v) for k, v in self.dataset.series.items()}
        return out

    def options(self) -> dict[str, Any]:
        return {
            "profile": self.profile.name,
            "minLength": self.profile.min_length,
            "maxLength": self.profile.max_length,
            "toggles": sorted(self.profile.toggles),
            "requireActiveConstraint": self.profile.require_active_constraint,
            "timeframes": self.dataset.timeframes,
            "defaultTimeframe": self.dataset.base_timeframe,
            "direction": [d.value for d in Direction],
            "wickInteraction": [w.value for w in WickInteraction],
            "closePosition": [c.value for c in ClosePosition],
            "bodySize": [b.value for b in BodyFilter],
            "outcomes": self.profile.outcome_names,
        }

    def analyze(self, payload: Any) -> AnalysisResult:
        if not isinstance(payload, Mapping):
            raise SequenceValidationError("request body must be an object")

        timeframe = payload.get("timeframe")
        if timeframe is not None and (not isinstance(timeframe, str) or timeframe not in self.dataset.series):
            raise SequenceValidationError(
                f"unknown timeframe {timeframe!r}; expected one of {', '.join(self.dataset.timeframes)}",
                field="timeframe",
            )
        key = timeframe or self.dataset.base_timeframe

        sequence = parse_sequence(payload.get("sequence"), self.profile)
        series = self.dataset.get(key)

        with perf_span("analysis.scan", timeframe=key, rules=len(sequence), candles=len(series)):
            result = summarize(scan(series, sequence), self.profile.outcomes, timeframe=key)

        logger.debug("Analyzed {n}-rule sequence on {tf}: sample={s}", n=len(sequence), tf=key, s=result.sample_size)
        return result
