"""Unit tests for the Cash Flow Score calculator."""
import pytest

from ikpa.services.cash_flow_score import (
    CashFlowScoreCalculator,
    FinancialData,
    calculate_cash_flow_score,
)
from ikpa.services.metric_normalizer import MetricKind
from ikpa.services.scoring_exceptions import DomainClampWarning


@pytest.fixture
def sample_financial_data():
    """A user saving 12% of income with three months of runway."""
    return FinancialData(
        monthly_income=500000,
        monthly_expenses=440000,
        monthly_savings=60000,
        monthly_debt_payments=75000,
        total_family_support=50000,
        emergency_fund=1320000,
        net_income=500000,
        last_6_months_income=[500000, 500000, 500000, 500000, 500000, 500000],
    )


@pytest.fixture
def calculator():
    return CashFlowScoreCalculator()


class TestRawMetrics:
    """Test raw metric derivation."""

    def test_raw_metrics(self, calculator, sample_financial_data):
        metrics = calculator.raw_metrics(sample_financial_data)

        # 60000 / 500000 * 100
        assert metrics[MetricKind.SAVINGS_RATE] == 12
        # 1320000 / 440000
        assert metrics[MetricKind.RUNWAY_MONTHS] == 3
        # 75000 / 500000 * 100
        assert metrics[MetricKind.DEBT_TO_INCOME] == 15
        # Flat income has no variation
        assert metrics[MetricKind.INCOME_STABILITY] == 0
        # 50000 / 500000 * 100
        assert metrics[MetricKind.DEPENDENCY_RATIO] == 10

    def test_zero_income(self, calculator):
        data = FinancialData(
            monthly_income=0,
            monthly_expenses=1000,
            monthly_savings=0,
            monthly_debt_payments=500,
            total_family_support=0,
            emergency_fund=0,
            net_income=0,
        )
        assert calculator.savings_rate(data) == 0
        assert calculator.debt_to_income(data) == 100
        assert calculator.dependency_ratio(data) == 0

    def test_zero_expenses_caps_runway(self, calculator, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "monthly_expenses": 0})
        assert calculator.runway_months(data) == 24

    def test_weighted_variance_takes_priority(self, calculator, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "income_variance_weighted": 22.5})
        assert calculator.income_variation(data) == 22.5

    def test_coefficient_of_variation(self, calculator, sample_financial_data):
        # Mean 100, population std dev 20
        data = FinancialData(**{**sample_financial_data.__dict__, "last_6_months_income": [80, 120, 80, 120]})
        assert calculator.income_variation(data) == 20

    def test_short_income_history_reports_zero(self, calculator, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "last_6_months_income": [500000]})
        assert calculator.income_variation(data) == 0

    def test_huge_incomes_do_not_overflow(self, calculator, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "last_6_months_income": [1e308, 1e308, 5e307]})
        # Same spread as [2, 2, 1]
        assert calculator.income_variation(data) == pytest.approx(28.28, abs=0.01)


class TestCashFlowScore:
    """Test the full score."""

    def test_calculate(self, calculator, sample_financial_data):
        result = calculator.calculate(sample_financial_data, user_id="user-1")

        components = result.components
        assert components[MetricKind.SAVINGS_RATE].score == 68
        assert components[MetricKind.RUNWAY_MONTHS].score == 60
        assert components[MetricKind.DEBT_TO_INCOME].score == 90
        assert components[MetricKind.INCOME_STABILITY].score == 100
        assert components[MetricKind.DEPENDENCY_RATIO].score == 100

        # 20.4 + 15 + 18 + 15 + 10 = 78.4
        assert result.final_score == 78
        assert result.label == "Good"
        assert 0 <= result.final_score <= 100

    def test_short_income_history_scores_neutral(self, calculator, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "last_6_months_income": []})
        result = calculator.calculate(data)

        stability = result.components[MetricKind.INCOME_STABILITY]
        assert stability.value == 0
        assert stability.score == 60
        # 20.4 + 15 + 18 + 9 + 10 = 72.4
        assert result.final_score == 72

    def test_huge_savings_clamped_not_raised(self, sample_financial_data):
        data = FinancialData(**{**sample_financial_data.__dict__, "monthly_income": 1, "monthly_savings": 1e30})
        with pytest.warns(DomainClampWarning):
            result = calculate_cash_flow_score(data)

        assert result.components[MetricKind.SAVINGS_RATE].score == 100
        assert MetricKind.SAVINGS_RATE in result.clamped
        assert 0 <= result.final_score <= 100

    def test_previous_score(self, sample_financial_data):
        result = calculate_cash_flow_score(sample_financial_data, previous_score=70)
        assert result.change == 8

    def test_struggling_user_scores_low(self, calculator):
        data = FinancialData(
            monthly_income=200000,
            monthly_expenses=230000,
            monthly_savings=-30000,
            monthly_debt_payments=120000,
            total_family_support=80000,
            emergency_fund=0,
            net_income=200000,
            last_6_months_income=[50000, 300000, 120000, 260000],
        )
        result = calculator.calculate(data)

        assert result.final_score < 30
        assert result.label == "Critical"

    def test_get_weights(self, calculator):
        assert sum(calculator.get_weights().values()) == pytest.approx(1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
