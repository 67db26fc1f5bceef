"""Metric normalization: raw financial quantities to 0-100 sub-scores."""
import logging
import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from ikpa.services.scoring_exceptions import ConfigurationError, DomainClampWarning
from ikpa.utils.numbers import clamp, round_half_up

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0


class MetricKind(str, Enum):
    """Financial metrics that feed a composite score.

    Declaration order is the enumeration order used for calculation strings.
    """

    SAVINGS_RATE = "savings_rate"
    RUNWAY_MONTHS = "runway_months"
    DEBT_TO_INCOME = "debt_to_income"
    INCOME_STABILITY = "income_stability"
    DEPENDENCY_RATIO = "dependency_ratio"


@dataclass(frozen=True)
class MetricInput:
    kind: MetricKind
    raw_value: float


@dataclass(frozen=True)
class ComponentScore:
    """Raw metric value alongside its normalized 0-100 score."""

    value: float
    score: float

    def to_dict(self) -> Dict[str, float]:
        return {"value": self.value, "score": self.score}


@dataclass(frozen=True)
class NormalizedMetric:
    score: float
    clamped: bool


@dataclass(frozen=True)
class NormalizationCurve:
    """
    Piecewise-linear mapping from a raw value to a 0-100 score.

    Attributes:
        breakpoints: ``(raw, score)`` pairs, strictly ascending in ``raw``.
            Scores between breakpoints are interpolated; beyond the first or
            last breakpoint the curve saturates at that breakpoint's score.
        domain_min: Smallest raw value considered valid.
        domain_max: Largest raw value considered valid.
    """

    breakpoints: Tuple[Tuple[float, float], ...]
    domain_min: float = -math.inf
    domain_max: float = math.inf

    def __post_init__(self):
        if len(self.breakpoints) < 2:
            raise ConfigurationError("A normalization curve needs at least two breakpoints")
        raws = [raw for raw, _ in self.breakpoints]
        if any(b <= a for a, b in zip(raws, raws[1:])):
            raise ConfigurationError(f"Curve breakpoints must be strictly ascending: {raws}")
        for _, score in self.breakpoints:
            if not MIN_SCORE <= score <= MAX_SCORE:
                raise ConfigurationError(f"Curve score {score} is outside [0, 100]")
        if self.domain_min > self.domain_max:
            raise ConfigurationError("Curve domain_min is greater than domain_max")

    def evaluate(self, raw_value: float) -> NormalizedMetric:
        clamped = False
        value = raw_value
        if math.isnan(value):
            value = self.breakpoints[0][0]
            clamped = True
        elif value < self.domain_min or value > self.domain_max:
            value = clamp(value, self.domain_min, self.domain_max)
            clamped = True

        first_raw, first_score = self.breakpoints[0]
        last_raw, last_score = self.breakpoints[-1]
        if value <= first_raw:
            return NormalizedMetric(first_score, clamped)
        if value >= last_raw:
            return NormalizedMetric(last_score, clamped)

        for (x0, y0), (x1, y1) in zip(self.breakpoints, self.breakpoints[1:]):
            if x0 <= value <= x1:
                score = y0 + (y1 - y0) * (value - x0) / (x1 - x0)
                return NormalizedMetric(clamp(score, MIN_SCORE, MAX_SCORE), clamped)

        # Unreachable for a validated curve
        return NormalizedMetric(last_score, clamped)


class NormalizationCurves:
    """Curve table covering every :class:`MetricKind`."""

    def __init__(self, curves: Mapping[MetricKind, NormalizationCurve]):
        missing = [kind.value for kind in MetricKind if kind not in curves]
        if missing:
            raise ConfigurationError(f"No normalization curve for: {', '.join(missing)}")
        self._curves: Dict[MetricKind, NormalizationCurve] = dict(curves)

    def __getitem__(self, kind: MetricKind) -> NormalizationCurve:
        return self._curves[kind]

    def normalize(self, kind: MetricKind, raw_value: float) -> NormalizedMetric:
        """
        Normalize one raw value.

        Out-of-domain input is clamped and reported with a
        :class:`DomainClampWarning`; it never raises.
        """
        result = self._curves[kind].evaluate(float(raw_value))
        if result.clamped:
            message = f"{kind.value} raw value {raw_value!r} is outside its expected domain; clamped"
            logger.warning(message)
            warnings.warn(message, DomainClampWarning, stacklevel=3)
        return NormalizedMetric(round_half_up(result.score, 2), result.clamped)

    def component(self, kind: MetricKind, raw_value: float) -> Tuple[ComponentScore, bool]:
        normalized = self.normalize(kind, raw_value)
        return ComponentScore(value=float(raw_value), score=normalized.score), normalized.clamped


# Savings rate: % of monthly income kept. 20%+ is full marks.
SAVINGS_RATE_CURVE = NormalizationCurve(
    breakpoints=((-20, 0), (0, 20), (5, 40), (10, 60), (15, 80), (20, 100)),
    domain_min=-100,
    domain_max=100,
)

# Runway: months of expenses covered by the emergency fund.
RUNWAY_MONTHS_CURVE = NormalizationCurve(
    breakpoints=((0, 0), (1, 40), (3, 60), (6, 80), (9, 100)),
    domain_min=0,
)

# Debt-to-income: % of monthly income going to debt. Lower is better.
DEBT_TO_INCOME_CURVE = NormalizationCurve(
    breakpoints=((0, 100), (10, 100), (20, 80), (35, 60), (50, 40), (100, 0)),
    domain_min=0,
)

# Income stability: coefficient of variation (%). Lower is better.
INCOME_STABILITY_CURVE = NormalizationCurve(
    breakpoints=((0, 100), (15, 100), (30, 60), (60, 20), (100, 0)),
    domain_min=0,
)

# Dependency ratio: family support as % of net income. 10-35% is healthy,
# heavy support bottoms out at 40 rather than 0.
DEPENDENCY_RATIO_CURVE = NormalizationCurve(
    breakpoints=((0, 100), (10, 100), (35, 80), (60, 40)),
    domain_min=0,
)

DEFAULT_CURVES = NormalizationCurves(
    {
        MetricKind.SAVINGS_RATE: SAVINGS_RATE_CURVE,
        MetricKind.RUNWAY_MONTHS: RUNWAY_MONTHS_CURVE,
        MetricKind.DEBT_TO_INCOME: DEBT_TO_INCOME_CURVE,
        MetricKind.INCOME_STABILITY: INCOME_STABILITY_CURVE,
        MetricKind.DEPENDENCY_RATIO: DEPENDENCY_RATIO_CURVE,
    }
)


def normalize_metric(
    kind: MetricKind,
    raw_value: float,
    curves: Optional[NormalizationCurves] = None,
) -> float:
    """Convenience function to normalize a single raw value."""
    return (curves or DEFAULT_CURVES).normalize(kind, raw_value).score
