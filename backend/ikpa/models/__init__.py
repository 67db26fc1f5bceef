"""Database client and API schemas."""
from ikpa.models.database import get_supabase_client
from ikpa.models.schemas import (
    CompositeScoreRequest,
    CompositeScoreResponse,
    DependencyRatioRequest,
    DependencyRatioResponse,
    FinancialDataRequest,
    MetricDetailResponse,
    ScoreHistoryResponse,
)

__all__ = [
    "get_supabase_client",
    "CompositeScoreRequest",
    "CompositeScoreResponse",
    "DependencyRatioRequest",
    "DependencyRatioResponse",
    "FinancialDataRequest",
    "MetricDetailResponse",
    "ScoreHistoryResponse",
]
