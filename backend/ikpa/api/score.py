"""Cash Flow Score endpoints."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from ikpa.config import get_settings
from ikpa.models.schemas import (
    CompositeScoreRequest,
    CompositeScoreResponse,
    FinancialDataRequest,
    MetricDetailResponse,
    ScoreHistoryResponse,
)
from ikpa.services.cash_flow_score import CashFlowScoreCalculator
from ikpa.services.composite_calculator import CASH_FLOW_WEIGHTS, compute_composite_score
from ikpa.services.score_bands import DEFAULT_SCORE_BANDS
from ikpa.services.score_history import (
    HISTORY_PERIODS,
    get_metric_detail,
    get_score_history,
    record_snapshot,
)
from ikpa.services.scoring_exceptions import (
    InsufficientFinancialDataError,
    InvalidMetricError,
    ScoreHistoryNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

calculator = CashFlowScoreCalculator()


@router.post("/cash-flow", response_model=CompositeScoreResponse)
async def calculate_cash_flow_score(request: FinancialDataRequest) -> Dict[str, Any]:
    """Calculate the Cash Flow Score and record it in the user's history."""
    try:
        result = calculator.calculate(
            request.to_financial_data(),
            user_id=request.user_id,
            previous_score=request.previous_score,
        )
    except InsufficientFinancialDataError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if request.user_id:
        try:
            record_snapshot(request.user_id, result)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to record score snapshot for user %s: %s", request.user_id, exc)
            raise HTTPException(status_code=500, detail=f"Error saving score history: {exc}") from exc

    return result.to_dict()


@router.post("/composite", response_model=CompositeScoreResponse)
async def calculate_composite_score(request: CompositeScoreRequest) -> Dict[str, Any]:
    """Score arbitrary metrics with the cash-flow weights."""
    try:
        result = compute_composite_score(
            request.metrics,
            CASH_FLOW_WEIGHTS,
            prenormalized=request.prenormalized,
            previous_score=request.previous_score,
        )
    except InsufficientFinancialDataError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return result.to_dict()


@router.get("/history", response_model=ScoreHistoryResponse)
async def score_history(
    user_id: str = Query(..., max_length=128),
    days: Optional[int] = Query(default=None),
) -> Dict[str, Any]:
    """Return score history for the last 30, 90, or 365 days with trend analysis."""
    period = days or get_settings().default_history_days
    if period not in HISTORY_PERIODS:
        raise HTTPException(
            status_code=400,
            detail=f"days must be one of {', '.join(str(p) for p in HISTORY_PERIODS)}",
        )

    try:
        return get_score_history(user_id, period)
    except ScoreHistoryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/metrics/{metric}", response_model=MetricDetailResponse)
async def metric_detail(metric: str, user_id: str = Query(..., max_length=128)) -> Dict[str, Any]:
    """Return current value, change, and history for one metric."""
    try:
        return get_metric_detail(user_id, metric)
    except InvalidMetricError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ScoreHistoryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/weights")
async def score_weights() -> Dict[str, Any]:
    """Return the cash-flow weights and score bands for display."""
    return {
        "weights": CASH_FLOW_WEIGHTS.to_dict(),
        "bands": DEFAULT_SCORE_BANDS.to_list(),
    }
