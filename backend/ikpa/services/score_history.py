"""Score snapshot persistence and history queries."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ikpa.config import get_settings
from ikpa.models.database import get_supabase_client, supabase_configured
from ikpa.services.composite_calculator import CompositeScoreResult
from ikpa.services.local_cache import fallback_snapshots, store_fallback_snapshot
from ikpa.services.metric_normalizer import MetricKind
from ikpa.services.scoring_exceptions import InvalidMetricError, ScoreHistoryNotFoundError
from ikpa.services.trend_analyzer import HistoryEntry, compare_points, compute_trend
from ikpa.utils.supabase_errors import is_supabase_table_missing_error

logger = logging.getLogger(__name__)

HISTORY_PERIODS = (30, 90, 365)
METRIC_DETAIL_DAYS = 90

# Public metric name -> snapshot column
METRIC_COLUMNS = {
    "cash-flow": "cash_flow_score",
    "savings-rate": MetricKind.SAVINGS_RATE.value,
    "runway": MetricKind.RUNWAY_MONTHS.value,
    "dependency": MetricKind.DEPENDENCY_RATIO.value,
}
VALID_METRICS = list(METRIC_COLUMNS)


def build_snapshot(user_id: str, result: CompositeScoreResult, on: Optional[date] = None) -> Dict[str, Any]:
    """Flatten a score result into one snapshot row: raw values plus component scores."""
    snapshot_date = on or result.timestamp.date()
    row: Dict[str, Any] = {
        "user_id": user_id,
        "date": snapshot_date.isoformat(),
        "cash_flow_score": result.final_score,
        "calculated_at": result.timestamp.isoformat(),
    }
    for kind, component in result.components.items():
        row[kind.value] = component.value
        row[f"{kind.value}_score"] = component.score
    return row


def record_snapshot(user_id: str, result: CompositeScoreResult, on: Optional[date] = None) -> Dict[str, Any]:
    """Store today's snapshot, replacing any earlier one from the same day."""
    row = build_snapshot(user_id, result, on)
    settings = get_settings()

    if supabase_configured(settings):
        try:
            supabase = get_supabase_client()
            supabase.table(settings.score_history_table).upsert(row, on_conflict="user_id,date").execute()
            return row
        except Exception as exc:  # noqa: BLE001
            if not is_supabase_table_missing_error(exc):
                raise
            logger.warning("Score history table missing; storing snapshot locally")

    store_fallback_snapshot(user_id, row)
    return row


def load_snapshots(user_id: str, days: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Return snapshots from the last ``days`` days, oldest first."""
    end = today or datetime.now(timezone.utc).date()
    start = end - timedelta(days=days - 1)
    settings = get_settings()

    if supabase_configured(settings):
        try:
            supabase = get_supabase_client()
            response = supabase.table(settings.score_history_table)\
                .select("*")\
                .eq("user_id", user_id)\
                .gte("date", start.isoformat())\
                .order("date")\
                .execute()
            return response.data or []
        except Exception as exc:  # noqa: BLE001
            if not is_supabase_table_missing_error(exc):
                raise
            logger.warning("Score history table missing; reading local snapshots")

    rows = fallback_snapshots.get(str(user_id), {})
    return [
        rows[key]
        for key in sorted(rows)
        if start.isoformat() <= key <= end.isoformat()
    ]


def get_score_history(user_id: str, days: int, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Return the user's score history with trend analysis.

    Raises:
        ScoreHistoryNotFoundError: When no snapshots fall in the window
    """
    snapshots = load_snapshots(user_id, days, today=today)
    if not snapshots:
        raise ScoreHistoryNotFoundError(user_id)

    history = [
        HistoryEntry.from_value(row["date"], row["cash_flow_score"])
        for row in snapshots
    ]
    trend = compute_trend(history, days, threshold=get_settings().trend_threshold)

    return {
        "history": [entry.to_dict() for entry in history],
        **trend.to_dict(),
    }


def get_metric_detail(user_id: str, metric: str, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Return the current value, change, and history of a single metric.

    Raises:
        InvalidMetricError: When ``metric`` is not a known metric name
        ScoreHistoryNotFoundError: When the user has no snapshots
    """
    column = METRIC_COLUMNS.get(metric)
    if column is None:
        raise InvalidMetricError(metric, VALID_METRICS)

    snapshots = [row for row in load_snapshots(user_id, METRIC_DETAIL_DAYS, today=today) if row.get(column) is not None]
    if not snapshots:
        raise ScoreHistoryNotFoundError(user_id)

    current = float(snapshots[-1][column])
    previous = float(snapshots[-2][column]) if len(snapshots) > 1 else None
    comparison = compare_points(current, previous, threshold=get_settings().metric_trend_threshold)

    return {
        "metric": metric,
        "current": current,
        "change": comparison.change,
        "trend": comparison.trend,
        "history": [{"date": row["date"], "value": float(row[column])} for row in snapshots],
    }
