"""Unit tests for the Ubuntu dependency ratio calculator."""
import pytest

from ikpa.services.dependency_ratio import (
    DependencyRatioCalculator,
    FamilySupport,
    Frequency,
    Relationship,
    RiskLevel,
    to_monthly,
)


@pytest.fixture
def calculator():
    return DependencyRatioCalculator()


def support(amount, relationship, frequency=Frequency.MONTHLY, is_active=True):
    return FamilySupport(amount=amount, frequency=frequency, relationship=relationship, is_active=is_active)


class TestDependencyRatio:

    def test_green_for_low_ratio(self, calculator):
        result = calculator.calculate([support(20000, Relationship.PARENT)], 500000, "NGN")

        assert result.total_ratio == 0.04
        assert result.risk_level == RiskLevel.GREEN
        assert result.components["parent_support"] == 20000
        assert result.monthly_total == 20000
        assert "well-balanced" in result.message["headline"]
        assert result.score == 100

    def test_orange_for_moderate_ratio(self, calculator):
        result = calculator.calculate(
            [support(40000, Relationship.PARENT), support(25000, Relationship.SIBLING)],
            350000,
            "NGN",
        )

        assert result.total_ratio == pytest.approx(0.186, abs=0.001)
        assert result.risk_level == RiskLevel.ORANGE
        assert result.components["sibling_education"] == 25000
        assert "Family comes first" in result.message["headline"]

    def test_red_for_high_ratio(self, calculator):
        result = calculator.calculate(
            [
                support(80000, Relationship.PARENT),
                support(50000, Relationship.SIBLING),
                support(30000, Relationship.EXTENDED_FAMILY),
            ],
            350000,
            "NGN",
        )

        assert result.total_ratio > 0.35
        assert result.risk_level == RiskLevel.RED
        assert "heavy load" in result.message["headline"]

    def test_relationship_categories(self, calculator):
        result = calculator.calculate(
            [
                support(40000, Relationship.PARENT),
                support(20000, Relationship.SPOUSE),
                support(25000, Relationship.SIBLING),
                support(10000, Relationship.EXTENDED_FAMILY),
                support(5000, Relationship.COMMUNITY),
            ],
            500000,
        )

        assert result.components == {
            "parent_support": 60000,
            "sibling_education": 25000,
            "extended_family": 10000,
            "community_contribution": 5000,
        }

    def test_inactive_support_ignored(self, calculator):
        result = calculator.calculate(
            [support(40000, Relationship.PARENT), support(50000, Relationship.SIBLING, is_active=False)],
            350000,
        )
        assert result.monthly_total == 40000
        assert result.components["sibling_education"] == 0

    def test_zero_income(self, calculator):
        result = calculator.calculate([support(40000, Relationship.PARENT)], 0)
        assert result.total_ratio == 0
        assert result.risk_level == RiskLevel.GREEN

    def test_trend(self, calculator):
        items = [support(50000, Relationship.PARENT)]
        assert calculator.calculate(items, 500000, previous_ratio=0.2).trend == "improving"
        assert calculator.calculate(items, 500000, previous_ratio=0.05).trend == "increasing"
        assert calculator.calculate(items, 500000, previous_ratio=0.105).trend == "stable"
        assert calculator.calculate(items, 500000).trend == "stable"


class TestFrequencies:

    def test_weekly(self):
        assert to_monthly(10000, Frequency.WEEKLY) == pytest.approx(43300)

    def test_annually(self):
        assert to_monthly(120000, Frequency.ANNUALLY) == pytest.approx(9960)

    def test_one_time_not_counted(self):
        assert to_monthly(100000, Frequency.ONE_TIME) == 0


class TestEmergencyImpact:

    def test_covered_by_fund(self, calculator):
        impact = calculator.calculate_emergency_impact(50000, 0.8, 100000, 500000)

        # 50000 / 100000 * 0.05
        assert impact.new_probability == pytest.approx(0.775)
        # 50000 / (500000 * 0.10)
        assert impact.recovery_weeks == 1

    def test_shortfall(self, calculator):
        impact = calculator.calculate_emergency_impact(300000, 0.8, 100000, 200000)

        # shortfall 200000 is one month of income: 0.05 drop
        assert impact.new_probability == pytest.approx(0.75)
        # 300000 / (200000 * 0.15)
        assert impact.recovery_weeks == 10

    def test_drop_is_capped(self, calculator):
        impact = calculator.calculate_emergency_impact(2000000, 0.1, 0, 100000)
        assert impact.new_probability == 0
