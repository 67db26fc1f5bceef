"""Custom exceptions for the scoring engine."""
from typing import List, Optional


class ScoringError(Exception):
    """Base exception for all scoring errors."""
    pass


class ConfigurationError(ScoringError):
    """Raised when a weight, curve, or band table is invalid."""
    pass


class InsufficientFinancialDataError(ScoringError):
    """Raised when a weighted metric has no input value."""

    def __init__(self, missing: Optional[List[str]] = None):
        """
        Initialize insufficient data error.

        Args:
            missing: Names of the metrics that were not supplied
        """
        self.missing = list(missing or [])
        if self.missing:
            message = f"Insufficient financial data to calculate score. Missing: {', '.join(self.missing)}"
        else:
            message = "Insufficient financial data to calculate score."
        super().__init__(message)


class ScoreHistoryNotFoundError(ScoringError):
    """Raised when no score history exists for the requested window."""

    def __init__(self, user_id: Optional[str] = None):
        super().__init__("No score history found for the requested period.")
        self.user_id = user_id


class InvalidMetricError(ScoringError):
    """Raised when an unknown metric name is requested."""

    def __init__(self, metric: str, valid_metrics: List[str]):
        super().__init__(
            f"Invalid metric '{metric}'. Valid metrics are: {', '.join(valid_metrics)}"
        )
        self.metric = metric
        self.valid_metrics = list(valid_metrics)


class DomainClampWarning(UserWarning):
    """Emitted when a raw metric outside its expected domain is clamped."""
    pass
