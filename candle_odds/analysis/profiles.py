from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from candle_odds.candles.models import CandleRelation

# Conditional (predecessor-relative) constraints a rule can carry.
CONSTRAINTS = ("wick", "close", "body")


@dataclass(frozen=True)
class OutcomeCategory:
    """One counted outcome: a CandleRelation field of the outcome candle,
    measured against the anchor (last matched candle) or the prior
    (second-to-last matched candle)."""

    name: str
    reference: Literal["anchor", "prior"]
    field: str

    def hit(self, anchor: CandleRelation, prior: CandleRelation | None) -> bool:
        rel = anchor if self.reference == "anchor" else prior
        if rel is None:
            return False
        return bool(getattr(rel, self.field))


ANCHOR_OUTCOMES = (
    OutcomeCategory("take_high", "anchor", "took_high"),
    OutcomeCategory("take_low", "anchor", "took_low"),
    OutcomeCategory("close_above_high", "anchor", "closed_above_high"),
    OutcomeCategory("close_below_low", "anchor", "closed_below_low"),
    OutcomeCategory("took_both", "anchor", "took_both"),
    OutcomeCategory("took_none", "anchor", "took_none"),
)

PRIOR_OUTCOMES = (
    OutcomeCategory("prior_take_high", "prior", "took_high"),
    OutcomeCategory("prior_take_low", "prior", "took_low"),
    OutcomeCategory("prior_close_above_high", "prior", "closed_above_high"),
    OutcomeCategory("prior_close_below_low", "prior", "closed_below_low"),
)


@dataclass(frozen=True)
class EngineProfile:
    name: str
    min_length: int
    max_length: int
    outcomes: tuple[OutcomeCategory, ...]
    # Constraints the caller may switch off per rule (useWick/useClose/useBody).
    toggles: frozenset[str] = frozenset()
    # Reject rules with direction Any and every constraint ignored/disabled.
    require_active_constraint: bool = False

    def __post_init__(self) -> None:
        if self.min_length < 1 or self.max_length < self.min_length:
            raise ValueError(f"invalid sequence bounds for profile {self.name}: [{self.min_length}, {self.max_length}]")
        if self.min_length < 2 and any(o.reference == "prior" for o in self.outcomes):
            raise ValueError(f"profile {self.name} measures prior-candle outcomes and needs min_length >= 2")
        unknown = set(self.toggles) - set(CONSTRAINTS)
        if unknown:
            raise ValueError(f"unknown toggle constraint(s): {sorted(unknown)}")

    @property
    def outcome_names(self) -> list[str]:
        return [o.name for o in self.outcomes]


PROFILES: dict[str, EngineProfile] = {
    "classic": EngineProfile(
        name="classic",
        min_length=1,
        max_length=4,
        outcomes=ANCHOR_OUTCOMES,
    ),
    "extended": EngineProfile(
        name="extended",
        min_length=2,
        max_length=5,
        outcomes=ANCHOR_OUTCOMES + PRIOR_OUTCOMES,
        toggles=frozenset(CONSTRAINTS),
        require_active_constraint=True,
    ),
}


def resolve_profile(name: str, *, min_length: int | None = None, max_length: int | None = None) -> EngineProfile:
    key = str(name or "").strip().lower()
    if key not in PROFILES:
        raise ValueError(f"unknown engine profile: {name!r} (expected one of {sorted(PROFILES)})")
    profile = PROFILES[key]
    if min_length is None and max_length is None:
        return profile
    return replace(
        profile,
        min_length=int(min_length) if min_length is not None else profile.min_length,
        max_length=int(max_length) if max_length is not None else profile.max_length,
    )
