import os
import sys

import pytest

# Ensure repository root is on sys.path so `import candle_odds` works when running pytest.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    """Keep tests off the developer's ./data directory and .env overrides."""

    from candle_odds.core.settings import settings as app_settings

    monkeypatch.setattr(app_settings, "APP_ENV", "test", raising=False)
    monkeypatch.setattr(app_settings, "DATA_DIR", str(tmp_path / "data"), raising=False)
    monkeypatch.setattr(app_settings, "BASE_INTERVAL_SECONDS", 60, raising=False)
    monkeypatch.setattr(app_settings, "TIMEFRAMES", "5,15,30,60,120,240,1440", raising=False)
    monkeypatch.setattr(app_settings, "ENGINE_PROFILE", "classic", raising=False)
    monkeypatch.setattr(app_settings, "SEQUENCE_MIN_LENGTH", None, raising=False)
    monkeypatch.setattr(app_settings, "SEQUENCE_MAX_LENGTH", None, raising=False)
    monkeypatch.setattr(app_settings, "PERF_LOG_INNER_ALWAYS", False, raising=False)
    yield
