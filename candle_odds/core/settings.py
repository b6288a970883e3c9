from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_timeframe_widths(raw: str | None) -> list[int]:
    """Comma-separated widths in base intervals, deduplicated in order. Raises ValueError."""

    out: list[int] = []
    for part in str(raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        width = int(part)
        if width < 1:
            raise ValueError(f"timeframe widths must be >= 1, got {width}")
        if width not in out:
            out.append(width)
    return out


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Timing logs: one line per HTTP request, plus slow dataset builds and scans.
    PERF_LOG_ENABLED: bool = True
    # At or above this many ms a request or span is logged at WARNING.
    PERF_LOG_SLOW_MS: int = 250
    PERF_LOG_INNER_ENABLED: bool = True
    # Log every dataset/scan span at DEBUG, not only slow ones.
    PERF_LOG_INNER_ALWAYS: bool = False

    # Candle data
    # Every *.csv file in this directory is merged into one series at startup.
    DATA_DIR: str = "./data"
    # Width of one base candle. Gaps are filled and buckets aligned on this grid.
    BASE_INTERVAL_SECONDS: int = 60
    # Aggregated timeframes, in base intervals (comma-separated).
    TIMEFRAMES: str = "5,15,30,60,120,240,1440"

    # Sequence engine
    # classic: 1-4 rules, anchor outcomes only.
    # extended: 2-5 rules, anchor + prior-candle outcomes, per-rule constraint toggles.
    ENGINE_PROFILE: str = "classic"
    # Optional overrides for the profile's sequence length bounds.
    SEQUENCE_MIN_LENGTH: int | None = None
    SEQUENCE_MAX_LENGTH: int | None = None

    # CORS
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    def timeframe_widths(self) -> list[int]:
        return parse_timeframe_widths(self.TIMEFRAMES)


settings = Settings()
