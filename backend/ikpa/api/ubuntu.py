"""Ubuntu (family support) endpoints."""
from typing import Any, Dict

from fastapi import APIRouter

from ikpa.models.schemas import (
    DependencyRatioRequest,
    DependencyRatioResponse,
    EmergencyImpactRequest,
    EmergencyImpactResponse,
)
from ikpa.services.dependency_ratio import DependencyRatioCalculator

router = APIRouter()

calculator = DependencyRatioCalculator()


@router.post("/dependency-ratio", response_model=DependencyRatioResponse)
async def dependency_ratio(request: DependencyRatioRequest) -> Dict[str, Any]:
    """Calculate the dependency ratio and its relationship breakdown."""
    result = calculator.calculate(
        [item.to_family_support() for item in request.family_support],
        request.monthly_income,
        currency=request.currency.upper(),
        previous_ratio=request.previous_ratio,
    )
    return result.to_dict()


@router.post("/emergency-impact", response_model=EmergencyImpactResponse)
async def emergency_impact(request: EmergencyImpactRequest) -> Dict[str, Any]:
    """Estimate the effect of a family emergency on goal probability."""
    impact = calculator.calculate_emergency_impact(
        request.emergency_amount,
        request.current_goal_probability,
        request.emergency_fund_balance,
        request.monthly_income,
    )
    return {
        "new_probability": impact.new_probability,
        "recovery_weeks": impact.recovery_weeks,
    }
