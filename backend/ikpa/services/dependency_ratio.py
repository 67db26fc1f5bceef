"""Ubuntu dependency ratio calculation service.

Supporting family is treated as a value, not a problem: thresholds are
calibrated so that 10-35% of income going to family is still "healthy".
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ikpa.services.metric_normalizer import DEFAULT_CURVES, MetricKind, NormalizationCurves
from ikpa.services.score_bands import DEFAULT_SCORE_BANDS, ScoreBandTable
from ikpa.services.trend_analyzer import TREND_DOWN, TREND_UP, compare_points
from ikpa.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUALLY = "ANNUALLY"
    ONE_TIME = "ONE_TIME"


class Relationship(str, Enum):
    PARENT = "PARENT"
    SIBLING = "SIBLING"
    CHILD = "CHILD"
    SPOUSE = "SPOUSE"
    EXTENDED_FAMILY = "EXTENDED_FAMILY"
    COMMUNITY = "COMMUNITY"
    FRIEND = "FRIEND"
    OTHER = "OTHER"


class RiskLevel(str, Enum):
    GREEN = "GREEN"
    ORANGE = "ORANGE"
    RED = "RED"


# One-time payments do not recur, so they add nothing to the monthly ratio
MONTHLY_MULTIPLIERS = {
    Frequency.DAILY: 30,
    Frequency.WEEKLY: 4.33,
    Frequency.BIWEEKLY: 2.17,
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 0.33,
    Frequency.ANNUALLY: 0.083,
    Frequency.ONE_TIME: 0,
}

RELATIONSHIP_CATEGORIES = {
    "parent_support": (Relationship.PARENT, Relationship.SPOUSE, Relationship.CHILD),
    "sibling_education": (Relationship.SIBLING,),
    "extended_family": (Relationship.EXTENDED_FAMILY,),
    "community_contribution": (Relationship.COMMUNITY, Relationship.FRIEND, Relationship.OTHER),
}

RISK_THRESHOLDS = {
    "green_max": 0.10,
    "orange_max": 0.35,
}

UBUNTU_MESSAGES = {
    RiskLevel.GREEN: {
        "headline": "Your family support is well-balanced",
        "subtext": "You are caring for your people while keeping your own goals on track.",
    },
    RiskLevel.ORANGE: {
        "headline": "Family comes first, and your plan still holds",
        "subtext": "This level of support is common and healthy. Keep an eye on your emergency fund.",
    },
    RiskLevel.RED: {
        "headline": "You are carrying a heavy load",
        "subtext": "Consider sharing responsibilities with other family members or setting a monthly limit.",
    },
}

RATIO_TREND_THRESHOLD = 0.01


@dataclass(frozen=True)
class FamilySupport:
    amount: float
    frequency: Frequency
    relationship: Relationship
    is_active: bool = True


@dataclass(frozen=True)
class DependencyRatioResult:
    total_ratio: float
    risk_level: RiskLevel
    components: Dict[str, float]
    monthly_total: float
    monthly_income: float
    currency: str
    message: Dict[str, str]
    trend: str
    score: float
    label: str
    color: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_ratio": self.total_ratio,
            "risk_level": self.risk_level.value,
            "components": dict(self.components),
            "monthly_total": self.monthly_total,
            "monthly_income": self.monthly_income,
            "currency": self.currency,
            "message": dict(self.message),
            "trend": self.trend,
            "score": self.score,
            "label": self.label,
            "color": self.color,
        }


@dataclass(frozen=True)
class EmergencyImpact:
    new_probability: float
    recovery_weeks: int


def to_monthly(amount: float, frequency: Frequency) -> float:
    """Convert an amount paid at ``frequency`` to its monthly equivalent."""
    return float(amount) * MONTHLY_MULTIPLIERS[Frequency(frequency)]


class DependencyRatioCalculator:
    """Calculate the dependency ratio (family support / income) by relationship category."""

    def __init__(
        self,
        curves: NormalizationCurves = DEFAULT_CURVES,
        bands: ScoreBandTable = DEFAULT_SCORE_BANDS,
    ):
        self.curves = curves
        self.bands = bands

    def calculate(
        self,
        family_support: Iterable[FamilySupport],
        monthly_income: float,
        currency: str = "NGN",
        previous_ratio: Optional[float] = None,
    ) -> DependencyRatioResult:
        components = self.calculate_components(family_support)
        monthly_total = sum(components.values())
        total_ratio = monthly_total / monthly_income if monthly_income > 0 else 0.0
        risk_level = self.determine_risk_level(total_ratio)
        trend = self.calculate_trend(total_ratio, previous_ratio)

        score = self.curves.normalize(MetricKind.DEPENDENCY_RATIO, total_ratio * 100).score
        band = self.bands.classify(score)

        logger.debug(
            "Dependency ratio=%.4f monthly=%s income=%s risk=%s trend=%s",
            total_ratio, monthly_total, monthly_income, risk_level.value, trend,
        )

        return DependencyRatioResult(
            total_ratio=round_half_up(total_ratio, 4),
            risk_level=risk_level,
            components=components,
            monthly_total=monthly_total,
            monthly_income=monthly_income,
            currency=currency,
            message=dict(UBUNTU_MESSAGES[risk_level]),
            trend=trend,
            score=score,
            label=band.label,
            color=band.color,
        )

    def calculate_components(self, family_support: Iterable[FamilySupport]) -> Dict[str, float]:
        active = [support for support in family_support if support.is_active]
        return {
            category: self._sum_for(active, relationships)
            for category, relationships in RELATIONSHIP_CATEGORIES.items()
        }

    def _sum_for(self, support: List[FamilySupport], relationships) -> float:
        return sum(
            to_monthly(item.amount, item.frequency)
            for item in support
            if Relationship(item.relationship) in relationships
        )

    def determine_risk_level(self, ratio: float) -> RiskLevel:
        if ratio <= RISK_THRESHOLDS["green_max"]:
            return RiskLevel.GREEN
        if ratio <= RISK_THRESHOLDS["orange_max"]:
            return RiskLevel.ORANGE
        return RiskLevel.RED

    def calculate_trend(self, current_ratio: float, previous_ratio: Optional[float]) -> str:
        """A falling ratio is 'improving', a rising one 'increasing'."""
        comparison = compare_points(current_ratio, previous_ratio, threshold=RATIO_TREND_THRESHOLD)
        if comparison.trend == TREND_DOWN:
            return "improving"
        if comparison.trend == TREND_UP:
            return "increasing"
        return "stable"

    def calculate_emergency_impact(
        self,
        emergency_amount: float,
        current_goal_probability: float,
        emergency_fund_balance: float,
        monthly_income: float,
    ) -> EmergencyImpact:
        """
        Estimate how a family emergency affects goal probability.

        Covered by the emergency fund: at most a 5% drop, recovered at a 10%
        savings rate. Otherwise the drop grows with the shortfall (capped at
        15%) and recovery assumes an aggressive 15% savings rate.
        """
        if emergency_fund_balance > 0 and emergency_fund_balance >= emergency_amount:
            probability_drop = emergency_amount / emergency_fund_balance * 0.05
            recovery_rate = 0.10
        else:
            shortfall = emergency_amount - max(emergency_fund_balance, 0)
            months_of_income = shortfall / monthly_income if monthly_income > 0 else math.inf
            probability_drop = min(0.15, months_of_income * 0.05)
            recovery_rate = 0.15

        recovery_per_period = monthly_income * recovery_rate
        recovery_weeks = math.ceil(emergency_amount / recovery_per_period) if recovery_per_period > 0 else 0
        return EmergencyImpact(
            new_probability=max(0.0, current_goal_probability - probability_drop),
            recovery_weeks=recovery_weeks,
        )
