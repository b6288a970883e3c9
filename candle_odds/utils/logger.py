from __future__ import annotations

import sys
from loguru import logger

from candle_odds.core.settings import settings
from candle_odds.utils.request_context import current_request_id

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "rid={extra[rid]} | <cyan>{name}</cyan> - <level>{message}</level>"
)


def _attach_request_id(record) -> None:
    record["extra"].setdefault("rid", current_request_id())


def configure_logging(level: str | None = None) -> None:
    """Route loguru to stderr, text or JSON depending on LOG_JSON.

    Every record carries the active request id in extra["rid"].
    """

    logger.remove()
    logger.configure(patcher=_attach_request_id)
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
        serialize=settings.LOG_JSON,
    )
