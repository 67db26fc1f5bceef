"""Weighted composite score calculation."""
import logging
import math
import warnings
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from ikpa.services.metric_normalizer import (
    DEFAULT_CURVES,
    MAX_SCORE,
    MIN_SCORE,
    ComponentScore,
    MetricInput,
    MetricKind,
    NormalizationCurves,
)
from ikpa.services.score_bands import DEFAULT_SCORE_BANDS, ScoreBandTable
from ikpa.services.scoring_exceptions import (
    ConfigurationError,
    DomainClampWarning,
    InsufficientFinancialDataError,
)
from ikpa.utils.numbers import clamp, format_number, round_half_up

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-9


class ScoreWeights:
    """
    Fixed weight table for one composite score.

    Weights must be within [0, 1] and sum to 1.0; checked at construction.
    """

    def __init__(self, weights: Mapping[MetricKind, float], name: str = "composite"):
        if not weights:
            raise ConfigurationError(f"Weight table '{name}' is empty")
        for kind, weight in weights.items():
            if not isinstance(kind, MetricKind):
                raise ConfigurationError(f"Unknown metric kind in '{name}': {kind!r}")
            if not 0 <= weight <= 1:
                raise ConfigurationError(f"Weight for {kind.value} in '{name}' is outside [0, 1]: {weight}")
        total = math.fsum(weights.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ConfigurationError(f"Weights for '{name}' must sum to 1.0, got {total}")

        self.name = name
        # Enumeration order, not insertion order
        self._weights: Dict[MetricKind, float] = {
            kind: float(weights[kind]) for kind in MetricKind if kind in weights
        }

    def __getitem__(self, kind: MetricKind) -> float:
        return self._weights[kind]

    def __contains__(self, kind: object) -> bool:
        return kind in self._weights

    def __iter__(self):
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def items(self):
        return self._weights.items()

    def total(self) -> float:
        return math.fsum(self._weights.values())

    def to_dict(self) -> Dict[str, float]:
        return {kind.value: weight for kind, weight in self._weights.items()}


# Savings 30%, runway 25%, debt 20%, income stability 15%, family support 10%
CASH_FLOW_WEIGHTS = ScoreWeights(
    {
        MetricKind.SAVINGS_RATE: 0.30,
        MetricKind.RUNWAY_MONTHS: 0.25,
        MetricKind.DEBT_TO_INCOME: 0.20,
        MetricKind.INCOME_STABILITY: 0.15,
        MetricKind.DEPENDENCY_RATIO: 0.10,
    },
    name="cash_flow",
)


@dataclass(frozen=True)
class CompositeScoreResult:
    final_score: int
    components: Dict[MetricKind, ComponentScore]
    calculation: str
    timestamp: datetime
    label: Optional[str] = None
    color: Optional[str] = None
    previous_score: Optional[float] = None
    change: Optional[float] = None
    clamped: Tuple[MetricKind, ...] = field(default_factory=tuple)

    def with_previous(self, previous_score: Optional[float]) -> "CompositeScoreResult":
        """Return a copy carrying the comparison against ``previous_score``."""
        if previous_score is None:
            return self
        return replace(
            self,
            previous_score=previous_score,
            change=round_half_up(self.final_score - previous_score, 2),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_score": self.final_score,
            "components": {kind.value: comp.to_dict() for kind, comp in self.components.items()},
            "calculation": self.calculation,
            "timestamp": self.timestamp.isoformat(),
            "label": self.label,
            "color": self.color,
            "previous_score": self.previous_score,
            "change": self.change,
            "clamped": [kind.value for kind in self.clamped],
        }


def as_metric_map(metrics: Union[Mapping[MetricKind, float], Iterable[MetricInput]]) -> Dict[MetricKind, float]:
    """Accept either a kind-to-value mapping or a sequence of :class:`MetricInput`."""
    if isinstance(metrics, Mapping):
        return dict(metrics)
    return {item.kind: item.raw_value for item in metrics}


def calculate_weighted_score(components: Mapping[MetricKind, ComponentScore], weights: ScoreWeights) -> int:
    """Sum weighted sub-scores, round half up, and clamp to [0, 100]."""
    total = math.fsum(components[kind].score * weight for kind, weight in weights.items())
    return int(clamp(round_half_up(total), MIN_SCORE, MAX_SCORE))


def format_calculation(components: Mapping[MetricKind, ComponentScore], weights: ScoreWeights) -> str:
    """Render ``(score*weight) + ...`` in metric enumeration order."""
    return " + ".join(
        f"({format_number(components[kind].score)}*{format_number(weight)})"
        for kind, weight in weights.items()
    )


class CompositeScorer:
    """
    Combine metric inputs into a composite score.

    Weights, curves, and bands are configuration objects validated when they
    are built. ``score`` is pure apart from the timestamp it stamps on the
    result.
    """

    def __init__(
        self,
        weights: ScoreWeights = CASH_FLOW_WEIGHTS,
        curves: NormalizationCurves = DEFAULT_CURVES,
        bands: ScoreBandTable = DEFAULT_SCORE_BANDS,
    ):
        self.weights = weights
        self.curves = curves
        self.bands = bands

    def build_components(
        self,
        metrics: Union[Mapping[MetricKind, float], Iterable[MetricInput]],
        prenormalized: bool = False,
    ) -> Tuple[Dict[MetricKind, ComponentScore], Tuple[MetricKind, ...]]:
        metrics = as_metric_map(metrics)
        missing = [kind.value for kind in self.weights if metrics.get(kind) is None]
        if missing:
            raise InsufficientFinancialDataError(missing)

        ignored = [kind for kind in metrics if kind not in self.weights]
        if ignored:
            logger.debug("Ignoring unweighted metrics for %s: %s", self.weights.name, ignored)

        components: Dict[MetricKind, ComponentScore] = {}
        clamped = []
        for kind in self.weights:
            raw = float(metrics[kind])
            if prenormalized:
                score = clamp(raw, MIN_SCORE, MAX_SCORE)
                if score != raw:
                    warnings.warn(
                        f"{kind.value} sub-score {raw!r} is outside [0, 100]; clamped",
                        DomainClampWarning,
                        stacklevel=3,
                    )
                    clamped.append(kind)
                components[kind] = ComponentScore(value=raw, score=score)
            else:
                component, was_clamped = self.curves.component(kind, raw)
                components[kind] = component
                if was_clamped:
                    clamped.append(kind)
        return components, tuple(clamped)

    def score_components(
        self,
        components: Mapping[MetricKind, ComponentScore],
        clamped: Tuple[MetricKind, ...] = (),
    ) -> CompositeScoreResult:
        final_score = calculate_weighted_score(components, self.weights)
        band = self.bands.classify(final_score)
        return CompositeScoreResult(
            final_score=final_score,
            components={kind: components[kind] for kind in self.weights},
            calculation=format_calculation(components, self.weights),
            timestamp=datetime.now(timezone.utc),
            label=band.label,
            color=band.color,
            clamped=clamped,
        )

    def score(
        self,
        metrics: Union[Mapping[MetricKind, float], Iterable[MetricInput]],
        prenormalized: bool = False,
        previous_score: Optional[float] = None,
    ) -> CompositeScoreResult:
        components, clamped = self.build_components(metrics, prenormalized=prenormalized)
        result = self.score_components(components, clamped)
        return result.with_previous(previous_score)


def compute_composite_score(
    metrics: Union[Mapping[MetricKind, float], Iterable[MetricInput]],
    weights: ScoreWeights = CASH_FLOW_WEIGHTS,
    prenormalized: bool = False,
    curves: NormalizationCurves = DEFAULT_CURVES,
    bands: ScoreBandTable = DEFAULT_SCORE_BANDS,
    previous_score: Optional[float] = None,
) -> CompositeScoreResult:
    """
    Convenience function to compute a composite score.

    Args:
        metrics: Raw value per metric kind (mapping or MetricInput list), or 0-100 sub-scores when
            ``prenormalized`` is set
        weights: Validated weight table
        prenormalized: Treat ``metrics`` as sub-scores and skip the curves
        curves: Normalization curves for raw input
        bands: Label/colour table
        previous_score: Optional prior score to report ``change`` against

    Returns:
        CompositeScoreResult with components, calculation string, and band
    """
    scorer = CompositeScorer(weights=weights, curves=curves, bands=bands)
    return scorer.score(metrics, prenormalized=prenormalized, previous_score=previous_score)
