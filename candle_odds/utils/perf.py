from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any

from loguru import logger

from candle_odds.core.settings import settings


@contextmanager
def perf_span(op: str, **tags: Any):
    """Time a block of dataset or analysis work.

    Logged at WARNING when it takes PERF_LOG_SLOW_MS or longer, and at DEBUG
    for every span when PERF_LOG_INNER_ALWAYS is set.
    """

    if not (settings.PERF_LOG_ENABLED and settings.PERF_LOG_INNER_ENABLED):
        yield
        return

    started = time.perf_counter()
    failed = False
    try:
        yield
    except Exception:
        failed = True
        raise
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        slow = elapsed_ms >= settings.PERF_LOG_SLOW_MS
        if slow or settings.PERF_LOG_INNER_ALWAYS:
            logger.bind(op=op, **tags).log(
                "WARNING" if slow else "DEBUG",
                "PERF {op} {outcome} in {ms:.1f}ms {tags}",
                op=op,
                outcome="failed" if failed else "done",
                ms=elapsed_ms,
                tags={k: v for k, v in tags.items() if v is not None},
            )
