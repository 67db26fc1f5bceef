"""Pydantic schemas for API models."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ikpa.services.cash_flow_score import FinancialData
from ikpa.services.dependency_ratio import FamilySupport, Frequency, Relationship, RiskLevel
from ikpa.services.metric_normalizer import MetricKind


# Cash Flow Score schemas
class FinancialDataRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, max_length=128)
    monthly_income: float = Field(ge=0)
    monthly_expenses: float = Field(ge=0)
    monthly_savings: float
    monthly_debt_payments: float = Field(default=0, ge=0)
    total_family_support: float = Field(default=0, ge=0)
    emergency_fund: float = Field(default=0, ge=0)
    net_income: float = 0
    last_6_months_income: List[float] = Field(default_factory=list, max_length=12)
    income_variance_weighted: Optional[float] = Field(default=None, ge=0)
    previous_score: Optional[float] = Field(default=None, ge=0, le=100)

    def to_financial_data(self) -> FinancialData:
        return FinancialData(
            monthly_income=self.monthly_income,
            monthly_expenses=self.monthly_expenses,
            monthly_savings=self.monthly_savings,
            monthly_debt_payments=self.monthly_debt_payments,
            total_family_support=self.total_family_support,
            emergency_fund=self.emergency_fund,
            net_income=self.net_income,
            last_6_months_income=list(self.last_6_months_income),
            income_variance_weighted=self.income_variance_weighted,
        )


class CompositeScoreRequest(BaseModel):
    metrics: Dict[MetricKind, float]
    prenormalized: bool = False
    previous_score: Optional[float] = Field(default=None, ge=0, le=100)


class ComponentScoreOut(BaseModel):
    value: float
    score: float


class CompositeScoreResponse(BaseModel):
    final_score: int
    components: Dict[str, ComponentScoreOut]
    calculation: str
    timestamp: datetime
    label: Optional[str] = None
    color: Optional[str] = None
    previous_score: Optional[float] = None
    change: Optional[float] = None
    clamped: List[str] = Field(default_factory=list)


# History schemas
class ScoreHistoryEntry(BaseModel):
    date: str
    score: float


class ScoreHistoryResponse(BaseModel):
    history: List[ScoreHistoryEntry]
    trend: Literal["up", "down", "stable"]
    average_score: float
    period_days: int


class MetricHistoryPoint(BaseModel):
    date: str
    value: float


class MetricDetailResponse(BaseModel):
    metric: str
    current: float
    change: float
    trend: Literal["up", "down", "stable"]
    history: List[MetricHistoryPoint]


# Ubuntu dependency ratio schemas
class FamilySupportItem(BaseModel):
    amount: float = Field(ge=0)
    frequency: Frequency = Frequency.MONTHLY
    relationship: Relationship
    is_active: bool = True

    def to_family_support(self) -> FamilySupport:
        return FamilySupport(
            amount=self.amount,
            frequency=self.frequency,
            relationship=self.relationship,
            is_active=self.is_active,
        )


class DependencyRatioRequest(BaseModel):
    family_support: List[FamilySupportItem] = Field(default_factory=list)
    monthly_income: float = Field(ge=0)
    currency: str = Field(default="NGN", min_length=3, max_length=3)
    previous_ratio: Optional[float] = Field(default=None, ge=0)


class UbuntuMessage(BaseModel):
    headline: str
    subtext: str


class DependencyRatioResponse(BaseModel):
    total_ratio: float
    risk_level: RiskLevel
    components: Dict[str, float]
    monthly_total: float
    monthly_income: float
    currency: str
    message: UbuntuMessage
    trend: Literal["improving", "stable", "increasing"]
    score: float
    label: str
    color: str


class EmergencyImpactRequest(BaseModel):
    emergency_amount: float = Field(gt=0)
    current_goal_probability: float = Field(ge=0, le=1)
    emergency_fund_balance: float = Field(default=0, ge=0)
    monthly_income: float = Field(gt=0)


class EmergencyImpactResponse(BaseModel):
    new_probability: float
    recovery_weeks: int
