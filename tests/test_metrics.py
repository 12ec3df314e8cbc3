"""Tests for model performance reporting."""

import pytest

from modma_fusion.core.data_types import ModelPerformanceMetrics
from modma_fusion.reporting.metrics import MetricsReporter, REFERENCE_METRICS, f1_from


class TestReport:
    """Reference record with bounded jitter."""

    def test_values_within_bounds(self):
        metrics = MetricsReporter(seed=0).report()
        for name, (center, spread) in REFERENCE_METRICS.items():
            value = getattr(metrics, name)
            assert 0.0 <= value <= 1.0
            assert abs(value - center) <= spread + 1e-12

    def test_f1_consistent(self):
        metrics = MetricsReporter(seed=1).report()
        assert metrics.f1_score == pytest.approx(f1_from(metrics.precision, metrics.recall))

    def test_seeded_reports_repeat(self):
        assert MetricsReporter(seed=3).report() == MetricsReporter(seed=3).report()

    def test_dashboard_keys(self):
        record = MetricsReporter(seed=0).report().to_dict()
        for key in ("accuracy", "precision", "recall", "f1Score", "specificity",
                    "robustnessIndex", "inferenceTime", "falsePositiveRate"):
            assert key in record

    def test_optional_fields_dropped(self):
        metrics = ModelPerformanceMetrics(0.9, 0.9, 0.9, 0.9, 0.9, 0.9, 10.0)
        assert "noiseSensitivity" not in metrics.to_dict()


class TestEvaluate:
    """Metrics derived from labelled predictions."""

    def test_perfect_predictions(self):
        labels = ["Healthy", "Bipolar Disorder", "Healthy", "Major Depressive Disorder"]
        metrics = MetricsReporter().evaluate(labels, labels, inference_time=12.0)
        assert metrics.accuracy == 1.0
        assert metrics.precision == 1.0
        assert metrics.specificity == 1.0
        assert metrics.false_positive_rate == 0.0
        assert metrics.inference_time == 12.0

    def test_mixed_predictions(self):
        y_true = ["a", "a", "b", "b"]
        y_pred = ["a", "b", "b", "b"]
        metrics = MetricsReporter().evaluate(y_true, y_pred)
        assert metrics.accuracy == 0.75
        assert metrics.recall == pytest.approx(0.75)
        assert metrics.specificity == pytest.approx(0.75)
        assert metrics.robustness_index == pytest.approx(0.75)

    def test_f1_from_zero(self):
        assert f1_from(0.0, 0.0) == 0.0

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            MetricsReporter().evaluate(["a"], ["a", "b"])
