from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from candle_odds.analysis.profiles import EngineProfile
from candle_odds.candles.models import Direction


class WickInteraction(str, Enum):
    IGNORE = "Ignore"
    TOOK_HIGH = "Took previous HIGH"
    TOOK_LOW = "Took previous LOW"
    TOOK_BOTH = "Took BOTH previous HIGH & LOW"
    TOOK_NONE = "Took NONE (inside candle)"


class ClosePosition(str, Enum):
    IGNORE = "Ignore"
    ABOVE_HIGH = "Closed ABOVE previous HIGH"
    BELOW_LOW = "Closed BELOW previous LOW"
    INSIDE = "Closed INSIDE previous range"
    TOOK_HIGH_CLOSED_BELOW = "Took previous HIGH but CLOSED BELOW previous HIGH"
    TOOK_LOW_CLOSED_ABOVE = "Took previous LOW but CLOSED ABOVE previous LOW"


class BodyFilter(str, Enum):
    IGNORE = "Ignore"
    B0_20 = "0-20"
    B20_40 = "20-40"
    B40_60 = "40-60"
    B60_80 = "60-80"
    B80_100 = "80-100"


class SequenceValidationError(ValueError):
    def __init__(self, message: str, *, index: int | None = None, field: str | None = None):
        self.message = message
        self.index = index
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "index": self.index, "field": self.field}


@dataclass(frozen=True)
class Rule:
    direction: Direction = Direction.ANY
    wick: WickInteraction = WickInteraction.IGNORE
    close: ClosePosition = ClosePosition.IGNORE
    body: BodyFilter = BodyFilter.IGNORE

    @property
    def is_unconditional(self) -> bool:
        """True when nothing needs a predecessor candle."""
        return self.wick is WickInteraction.IGNORE and self.close is ClosePosition.IGNORE and self.body is BodyFilter.IGNORE

    @property
    def is_active(self) -> bool:
        return self.direction is not Direction.ANY or not self.is_unconditional


# wire field -> (constraint key, enum, toggle field)
_FIELDS: dict[str, tuple[str, type[Enum], str | None]] = {
    "direction": ("direction", Direction, None),
    "wickInteraction": ("wick", WickInteraction, "useWick"),
    "closePosition": ("close", ClosePosition, "useClose"),
    "bodySize": ("body", BodyFilter, "useBody"),
}

_OPTIONAL = {"bodySize"}


def _enum_value(enum_cls: type[Enum], raw: Any, *, index: int, field: str) -> Enum:
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise SequenceValidationError(
            f"invalid value {raw!r} for {field} at rule {index}; expected one of {allowed}",
            index=index,
            field=field,
        ) from None


def parse_rule(raw: Any, index: int, profile: EngineProfile) -> Rule:
    if not isinstance(raw, Mapping):
        raise SequenceValidationError(f"rule {index} must be an object", index=index)

    values: dict[str, Enum] = {}
    for field, (key, enum_cls, toggle) in _FIELDS.items():
        if field not in raw or raw[field] is None:
            if field in _OPTIONAL:
                continue
            raise SequenceValidationError(f"rule {index} is missing {field}", index=index, field=field)
        value = _enum_value(enum_cls, raw[field], index=index, field=field)

        if toggle is not None and key in profile.toggles and toggle in raw:
            enabled = raw[toggle]
            if not isinstance(enabled, bool):
                raise SequenceValidationError(f"{toggle} at rule {index} must be a boolean", index=index, field=toggle)
            if not enabled:
                value = enum_cls("Ignore")
        values[key] = value

    rule = Rule(**values)
    if profile.require_active_constraint and not rule.is_active:
        raise SequenceValidationError(f"rule {index} has no active constraint", index=index)
    return rule


def parse_sequence(raw: Any, profile: EngineProfile) -> tuple[Rule, ...]:
    if not isinstance(raw, list):
        raise SequenceValidationError("sequence must be an array", field="sequence")
    if not (profile.min_length <= len(raw) <= profile.max_length):
        raise SequenceValidationError(
            f"sequence must be an array with length {profile.min_length} to {profile.max_length}",
            field="sequence",
        )
    return tuple(parse_rule(item, i, profile) for i, item in enumerate(raw))
