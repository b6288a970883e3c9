from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from candle_odds.analysis.matcher import MatchResult
from candle_odds.analysis.profiles import OutcomeCategory


def percent(count: int, sample_size: int) -> float:
    if sample_size <= 0:
        return 0.0
    return round(100.0 * int(count) / int(sample_size), 2)


@dataclass(frozen=True)
class AnalysisResult:
    timeframe: str
    sample_size: int
    counts: dict[str, int] = field(default_factory=dict)
    probabilities: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeframe": self.timeframe,
            "sampleSize": self.sample_size,
            "counts": dict(self.counts),
            "probabilities": dict(self.probabilities),
        }


def summarize(matches: Iterable[MatchResult], categories: Sequence[OutcomeCategory], *, timeframe: str) -> AnalysisResult:
    counts = {c.name: 0 for c in categories}
    sample_size = 0
    for m in matches:
        sample_size += 1
        for c in categories:
            if c.hit(m.anchor, m.prior):
                counts[c.name] += 1

    return AnalysisResult(
        timeframe=timeframe,
        sample_size=sample_size,
        counts=counts,
        probabilities={name: percent(n, sample_size) for name, n in counts.items()},
    )
