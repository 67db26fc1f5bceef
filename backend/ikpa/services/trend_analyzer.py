"""Score trend analysis over historical entries."""
import logging
import statistics
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from ikpa.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

DEFAULT_TREND_THRESHOLD = 2.0


@dataclass(frozen=True)
class HistoryEntry:
    """One dated score, ``date`` formatted ``YYYY-MM-DD``."""

    date: str
    score: float

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    @classmethod
    def from_value(cls, day: Union[str, date], score: float) -> "HistoryEntry":
        if isinstance(day, date):
            day = day.isoformat()
        return cls(date=str(day)[:10], score=float(score))

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "score": self.score}


@dataclass(frozen=True)
class TrendResult:
    trend: str
    average_score: float
    period_days: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend": self.trend,
            "average_score": self.average_score,
            "period_days": self.period_days,
        }


@dataclass(frozen=True)
class PointComparison:
    current: float
    previous: Optional[float]
    change: float
    trend: str


def classify_change(change: float, threshold: float = DEFAULT_TREND_THRESHOLD) -> str:
    """Map a signed difference to up/down/stable."""
    if change > threshold:
        return TREND_UP
    if change < -threshold:
        return TREND_DOWN
    return TREND_STABLE


def window_entries(history: Iterable[HistoryEntry], window_days: int) -> List[HistoryEntry]:
    """Return entries from the ``window_days`` ending at the latest entry, oldest first."""
    ordered = sorted(history, key=lambda entry: entry.date)
    if not ordered or window_days <= 0:
        return ordered
    start = ordered[-1].day - timedelta(days=window_days - 1)
    return [entry for entry in ordered if entry.day >= start]


def compute_trend(
    history: Iterable[HistoryEntry],
    window_days: int,
    threshold: float = DEFAULT_TREND_THRESHOLD,
) -> TrendResult:
    """
    Classify score movement over a history window.

    The window is split into an older and a recent half of equal length (the
    middle entry of an odd-length window is in neither) and the half means are
    compared against ``threshold``.

    Args:
        history: Dated scores, expected in ascending date order
        window_days: Window length in days, ending at the latest entry
        threshold: Minimum mean difference, in points, to count as movement

    Returns:
        TrendResult with trend, average score, and the window length
    """
    entries = window_entries(history, window_days)
    scores = [entry.score for entry in entries]

    if not scores:
        return TrendResult(trend=TREND_STABLE, average_score=0, period_days=window_days)

    average_score = round_half_up(statistics.fmean(scores))
    if len(scores) < 2:
        return TrendResult(trend=TREND_STABLE, average_score=average_score, period_days=window_days)

    half = len(scores) // 2
    older_mean = statistics.fmean(scores[:half])
    recent_mean = statistics.fmean(scores[-half:])
    trend = classify_change(recent_mean - older_mean, threshold)

    logger.debug(
        "Trend over %s entries: older=%.2f recent=%.2f -> %s",
        len(scores), older_mean, recent_mean, trend,
    )
    return TrendResult(trend=trend, average_score=average_score, period_days=window_days)


def compare_points(
    current: float,
    previous: Optional[float],
    threshold: float = DEFAULT_TREND_THRESHOLD,
) -> PointComparison:
    """Compare a current value to a previous one."""
    if previous is None:
        return PointComparison(current=current, previous=None, change=0.0, trend=TREND_STABLE)
    change = round_half_up(current - previous, 2)
    return PointComparison(
        current=current,
        previous=previous,
        change=change,
        trend=classify_change(current - previous, threshold),
    )
