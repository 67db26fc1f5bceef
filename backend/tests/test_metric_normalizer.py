"""Unit tests for metric normalization."""
import math

import pytest

from ikpa.services.metric_normalizer import (
    DEFAULT_CURVES,
    MetricKind,
    NormalizationCurve,
    NormalizationCurves,
    normalize_metric,
)
from ikpa.services.scoring_exceptions import ConfigurationError, DomainClampWarning


class TestDefaultCurves:
    """Test the default curve table."""

    def test_every_kind_has_a_curve(self):
        for kind in MetricKind:
            assert DEFAULT_CURVES[kind] is not None

    def test_savings_rate_saturation(self):
        assert normalize_metric(MetricKind.SAVINGS_RATE, 20) == 100
        assert normalize_metric(MetricKind.SAVINGS_RATE, 45) == 100

    def test_savings_rate_far_below_floor_is_zero(self):
        assert normalize_metric(MetricKind.SAVINGS_RATE, -60) == 0

    def test_savings_rate_interpolates(self):
        # Halfway between (10, 60) and (15, 80)
        assert normalize_metric(MetricKind.SAVINGS_RATE, 12.5) == 70

    def test_runway_zero_months_is_zero(self):
        assert normalize_metric(MetricKind.RUNWAY_MONTHS, 0) == 0
        assert normalize_metric(MetricKind.RUNWAY_MONTHS, 6) == 80
        assert normalize_metric(MetricKind.RUNWAY_MONTHS, 24) == 100

    def test_debt_to_income_is_inverse(self):
        assert normalize_metric(MetricKind.DEBT_TO_INCOME, 0) == 100
        assert normalize_metric(MetricKind.DEBT_TO_INCOME, 35) == 60
        assert normalize_metric(MetricKind.DEBT_TO_INCOME, 150) == 0
        assert (
            normalize_metric(MetricKind.DEBT_TO_INCOME, 25)
            > normalize_metric(MetricKind.DEBT_TO_INCOME, 45)
        )

    def test_income_stability(self):
        assert normalize_metric(MetricKind.INCOME_STABILITY, 10) == 100
        assert normalize_metric(MetricKind.INCOME_STABILITY, 30) == 60

    def test_dependency_ratio_is_not_harshly_penalized(self):
        assert normalize_metric(MetricKind.DEPENDENCY_RATIO, 5) == 100
        assert normalize_metric(MetricKind.DEPENDENCY_RATIO, 35) == 80
        assert normalize_metric(MetricKind.DEPENDENCY_RATIO, 90) == 40

    @pytest.mark.filterwarnings("ignore::ikpa.services.scoring_exceptions.DomainClampWarning")
    def test_scores_stay_in_range(self):
        for kind in MetricKind:
            for raw in (-1e6, -50, -1, 0, 0.5, 7, 33, 99, 1e6):
                assert 0 <= normalize_metric(kind, raw) <= 100


class TestDomainClamping:
    """Test out-of-domain input handling."""

    def test_negative_runway_is_clamped_with_warning(self):
        with pytest.warns(DomainClampWarning):
            result = DEFAULT_CURVES.normalize(MetricKind.RUNWAY_MONTHS, -3)
        assert result.score == 0
        assert result.clamped is True

    def test_in_domain_value_does_not_warn(self, recwarn):
        result = DEFAULT_CURVES.normalize(MetricKind.RUNWAY_MONTHS, 4)
        assert result.clamped is False
        assert not [w for w in recwarn if issubclass(w.category, DomainClampWarning)]

    def test_nan_is_clamped_not_raised(self):
        with pytest.warns(DomainClampWarning):
            result = DEFAULT_CURVES.normalize(MetricKind.SAVINGS_RATE, math.nan)
        assert 0 <= result.score <= 100


class TestCurveValidation:
    """Test that bad curve configuration is rejected up front."""

    def test_unsorted_breakpoints_rejected(self):
        with pytest.raises(ConfigurationError):
            NormalizationCurve(breakpoints=((5, 50), (1, 10)))

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ConfigurationError):
            NormalizationCurve(breakpoints=((0, 0), (1, 120)))

    def test_single_breakpoint_rejected(self):
        with pytest.raises(ConfigurationError):
            NormalizationCurve(breakpoints=((0, 0),))

    def test_missing_kind_rejected(self):
        curves = {kind: DEFAULT_CURVES[kind] for kind in MetricKind if kind != MetricKind.RUNWAY_MONTHS}
        with pytest.raises(ConfigurationError, match="runway_months"):
            NormalizationCurves(curves)
