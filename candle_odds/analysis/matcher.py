from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from candle_odds.analysis.rules import BodyFilter, ClosePosition, Rule, WickInteraction
from candle_odds.candles.enrich import relate
from candle_odds.candles.models import CandleRelation, Direction, EnrichedCandle


@dataclass(frozen=True)
class MatchResult:
    start: int
    # Outcome candle vs. the last matched candle.
    anchor: CandleRelation
    # Outcome candle vs. the second-to-last matched candle (None for 1-rule sequences).
    prior: CandleRelation | None = None


def predecessor(series: Sequence[EnrichedCandle], index: int, start: int) -> EnrichedCandle | None:
    """Reference candle for the rule evaluated at `index` in a window opened at `start`.

    The first slot looks back to the bar before the window, later slots to the
    previous matched bar. Both are series[index - 1]; there is none at index 0.
    """
    if index < start or index >= len(series):
        raise IndexError(f"index {index} outside window starting at {start}")
    if index == 0:
        return None
    return series[index - 1]


def matches_direction(c: EnrichedCandle, direction: Direction) -> bool:
    if direction is Direction.ANY:
        return True
    if direction is Direction.BULLISH:
        return c.close > c.open
    # Doji (close == open) matches neither side here.
    return c.close < c.open


def matches_wick(rel: CandleRelation, wick: WickInteraction) -> bool:
    if wick is WickInteraction.IGNORE:
        return True
    if wick is WickInteraction.TOOK_HIGH:
        return rel.took_high
    if wick is WickInteraction.TOOK_LOW:
        return rel.took_low
    if wick is WickInteraction.TOOK_BOTH:
        return rel.took_both
    return rel.took_none


def matches_close(rel: CandleRelation, close: ClosePosition) -> bool:
    if close is ClosePosition.IGNORE:
        return True
    if close is ClosePosition.ABOVE_HIGH:
        return rel.closed_above_high
    if close is ClosePosition.BELOW_LOW:
        return rel.closed_below_low
    if close is ClosePosition.INSIDE:
        return rel.closed_inside
    if close is ClosePosition.TOOK_HIGH_CLOSED_BELOW:
        return rel.took_high_closed_below
    return rel.took_low_closed_above


def matches_rule(series: Sequence[EnrichedCandle], index: int, start: int, rule: Rule) -> bool:
    current = series[index]
    if not matches_direction(current, rule.direction):
        return False

    prev = predecessor(series, index, start)
    if prev is None:
        return rule.is_unconditional

    # Enrichment relates every bar to series[index - 1], which is `prev`.
    rel = current.relation if current.relation is not None else relate(current.candle, prev.candle)
    if not matches_wick(rel, rule.wick):
        return False
    if not matches_close(rel, rule.close):
        return False
    if rule.body is not BodyFilter.IGNORE:
        return current.body_bucket is not None and current.body_bucket.value == rule.body.value
    return True


def scan(series: Sequence[EnrichedCandle], sequence: Sequence[Rule]) -> Iterator[MatchResult]:
    """Yield one result per window matching every rule that has a following candle."""

    n = len(sequence)
    if n == 0:
        return
    last_start = len(series) - n - 1
    for start in range(0, last_start + 1):
        matched = True
        for offset, rule in enumerate(sequence):
            if not matches_rule(series, start + offset, start, rule):
                matched = False
                break
        if not matched:
            continue

        outcome = series[start + n].candle
        anchor = series[start + n - 1].candle
        prior = relate(outcome, series[start + n - 2].candle) if n >= 2 else None
        yield MatchResult(start=start, anchor=relate(outcome, anchor), prior=prior)
