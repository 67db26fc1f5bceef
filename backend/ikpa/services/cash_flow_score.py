"""Cash Flow Score calculation service."""
import logging
import math
import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ikpa.services.composite_calculator import (
    CASH_FLOW_WEIGHTS,
    CompositeScorer,
    CompositeScoreResult,
)
from ikpa.services.metric_normalizer import ComponentScore, MetricKind
from ikpa.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

# Runway reported when there are no expenses to divide by
MAX_RUNWAY_MONTHS = 24.0
# Income stability score used when there is not enough income history
NEUTRAL_STABILITY_SCORE = 60.0


@dataclass(frozen=True)
class FinancialData:
    """Monthly figures aggregated from a user's income, expenses, savings and debts."""

    monthly_income: float
    monthly_expenses: float
    monthly_savings: float
    monthly_debt_payments: float
    total_family_support: float
    emergency_fund: float
    net_income: float
    last_6_months_income: List[float] = field(default_factory=list)
    income_variance_weighted: Optional[float] = None


class CashFlowScoreCalculator:
    """
    Calculate the Cash Flow Score, a 0-100 measure of overall financial health.

    Five raw metrics are derived from the aggregated figures and combined
    with the cash-flow weights:

    - Savings rate (30%): savings / income * 100
    - Runway months (25%): emergency fund / expenses
    - Debt-to-income (20%): debt payments / income * 100
    - Income stability (15%): coefficient of variation of income
    - Dependency ratio (10%): family support / net income * 100
    """

    def __init__(self, scorer: Optional[CompositeScorer] = None):
        self.scorer = scorer or CompositeScorer(weights=CASH_FLOW_WEIGHTS)

    def calculate(
        self,
        data: FinancialData,
        user_id: Optional[str] = None,
        previous_score: Optional[float] = None,
    ) -> CompositeScoreResult:
        components, clamped = self.scorer.build_components(self.raw_metrics(data))
        if not self.has_income_history(data):
            components[MetricKind.INCOME_STABILITY] = ComponentScore(value=0.0, score=NEUTRAL_STABILITY_SCORE)
        result = self.scorer.score_components(components, clamped).with_previous(previous_score)

        if result.clamped:
            logger.warning(
                "Clamped out-of-range inputs for user %s: %s",
                user_id, [kind.value for kind in result.clamped],
            )
        logger.info("Calculated Cash Flow Score for user %s: %s", user_id, result.final_score)
        return result

    def raw_metrics(self, data: FinancialData) -> Dict[MetricKind, float]:
        return {
            MetricKind.SAVINGS_RATE: self.savings_rate(data),
            MetricKind.RUNWAY_MONTHS: self.runway_months(data),
            MetricKind.DEBT_TO_INCOME: self.debt_to_income(data),
            MetricKind.INCOME_STABILITY: self.income_variation(data),
            MetricKind.DEPENDENCY_RATIO: self.dependency_ratio(data),
        }

    # Raw metric derivations

    def savings_rate(self, data: FinancialData) -> float:
        """Savings Rate = (Monthly Savings / Monthly Income) * 100"""
        if data.monthly_income == 0:
            return 0.0
        return round_half_up(data.monthly_savings / data.monthly_income * 100, 2)

    def runway_months(self, data: FinancialData) -> float:
        """Runway = Emergency Fund / Monthly Expenses"""
        if data.monthly_expenses == 0:
            return MAX_RUNWAY_MONTHS
        return round_half_up(data.emergency_fund / data.monthly_expenses, 1)

    def debt_to_income(self, data: FinancialData) -> float:
        """Debt-to-Income = (Monthly Debt Payments / Monthly Income) * 100"""
        if data.monthly_income == 0:
            # No income to service debt is the worst case
            return 100.0
        return round_half_up(data.monthly_debt_payments / data.monthly_income * 100, 2)

    def income_variation(self, data: FinancialData) -> float:
        """
        Income variation as a percentage.

        Uses the weighted variance from income sources when available,
        otherwise the coefficient of variation of recent monthly income.
        Without enough history the raw value is 0 and ``calculate`` scores
        the metric a neutral 60.
        """
        if data.income_variance_weighted is not None:
            return round_half_up(data.income_variance_weighted, 2)

        if not self.has_income_history(data):
            return 0.0

        incomes = data.last_6_months_income
        if not all(math.isfinite(income) for income in incomes):
            return 100.0

        # Scaled into [-1, 1] so the sums cannot overflow
        largest = max(abs(income) for income in incomes)
        if largest == 0:
            return 100.0
        scaled = [income / largest for income in incomes]

        avg = statistics.fmean(scaled)
        if avg == 0:
            return 100.0
        return round_half_up(statistics.pstdev(scaled, mu=avg) / avg * 100, 2)

    def has_income_history(self, data: FinancialData) -> bool:
        return data.income_variance_weighted is not None or len(data.last_6_months_income) >= 2

    def dependency_ratio(self, data: FinancialData) -> float:
        """Dependency Ratio = (Total Family Support / Net Income) * 100"""
        if data.net_income == 0:
            return 0.0
        return round_half_up(data.total_family_support / data.net_income * 100, 2)

    def get_weights(self) -> Dict[str, float]:
        return self.scorer.weights.to_dict()


def calculate_cash_flow_score(
    data: FinancialData,
    user_id: Optional[str] = None,
    previous_score: Optional[float] = None,
) -> CompositeScoreResult:
    """
    Convenience function to calculate the Cash Flow Score.

    Args:
        data: Aggregated monthly financial figures
        user_id: Optional user id for logging
        previous_score: Optional prior score to compare against

    Returns:
        CompositeScoreResult with label, colour, and component breakdown
    """
    calculator = CashFlowScoreCalculator()
    return calculator.calculate(data, user_id=user_id, previous_score=previous_score)
