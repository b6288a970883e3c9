from __future__ import annotations

from fastapi import APIRouter

from candle_odds.api.analysis import router as analysis_router

api_router = APIRouter(prefix="/api")
api_router.include_router(analysis_router)
