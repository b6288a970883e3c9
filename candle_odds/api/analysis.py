from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from candle_odds.analysis.rules import SequenceValidationError
from candle_odds.analysis.service import AnalysisService
from candle_odds.api.schemas import AnalyzeOut, OptionsOut, StatusOut

router = APIRouter(tags=["analysis"])


def _service(request: Request) -> AnalysisService:
    svc = getattr(request.app.state, "analysis", None)
    if svc is None:
        raise HTTPException(status_code=503, detail="candle dataset not loaded")
    return svc


@router.get("/status", response_model=StatusOut, response_model_exclude_none=True)
def status(request: Request) -> dict[str, Any]:
    return _service(request).status()


@router.get("/options", response_model=OptionsOut)
def options(request: Request) -> dict[str, Any]:
    return _service(request).options()


@router.post("/analyze", response_model=AnalyzeOut)
async def analyze(request: Request) -> dict[str, Any]:
    svc = _service(request)
    try:
        payload = await request.json()
    except ValueError as e:
        err = SequenceValidationError("request body must be valid JSON")
        raise HTTPException(status_code=400, detail=err.to_dict()) from e

    try:
        result = await run_in_threadpool(svc.analyze, payload)
    except SequenceValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict()) from e
    return result.to_dict()
