from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class StatusOut(BaseModel):
    totalCandles: int = Field(..., description="Normalized base candles, gap fillers included")
    start: Optional[str] = Field(None, description="ISO-8601 UTC timestamp of the first base candle")
    end: Optional[str] = Field(None, description="ISO-8601 UTC timestamp of the last base candle")
    timeframes: dict[str, int] = Field(default_factory=dict)


class AnalyzeOut(BaseModel):
    timeframe: str
    sampleSize: int
    counts: dict[str, int]
    probabilities: dict[str, float]


class OptionsOut(BaseModel):
    profile: str
    minLength: int
    maxLength: int
    toggles: list[str]
    requireActiveConstraint: bool
    timeframes: list[str]
    defaultTimeframe: str
    direction: list[str]
    wickInteraction: list[str]
    closePosition: list[str]
    bodySize: list[str]
    outcomes: list[str]
