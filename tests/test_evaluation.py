"""Tests for label selection and classification metrics."""

from __future__ import annotations

import pytest

from bayes_engine.evaluation import best_label, compute_metrics


class TestBestLabel:
    def test_highest_probability(self):
        assert best_label({"ham": 0.2, "spam": 0.8}) == "spam"

    def test_tie_goes_to_first_sorted(self):
        assert best_label({"b": 0.5, "a": 0.5}) == "a"

    def test_empty(self):
        assert best_label({}) is None


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_perfect_predictions(self):
        m = compute_metrics(["a", "a", "b", "c"], ["a", "a", "b", "c"])
        assert m.accuracy == 1.0
        assert m.macro_f1 == 1.0
        assert m.weighted_f1 == 1.0
        assert m.support == {"a": 2, "b": 1, "c": 1}

    def test_all_wrong_predictions(self):
        m = compute_metrics(["a", "a", "b", "b"], ["b", "b", "a", "a"])
        assert m.accuracy == 0.0
        assert m.macro_f1 == 0.0

    def test_missing_prediction_counts_as_wrong(self):
        m = compute_metrics(["a", "a", "b", "b"], ["a", "b", "b", None])
        assert m.accuracy == 0.5
        assert m.per_class["a"] == pytest.approx({"precision": 1.0, "recall": 0.5, "f1": 2 / 3})
        assert m.per_class["b"] == pytest.approx({"precision": 0.5, "recall": 0.5, "f1": 0.5})
        assert m.macro_f1 == pytest.approx(7 / 12)
        assert m.weighted_f1 == pytest.approx(7 / 12)
        assert set(m.confusion_matrix) == {"a", "b"}
        assert m.confusion_matrix["b"] == {"a": 0, "b": 1}

    def test_predicted_only_class(self):
        m = compute_metrics(["a", "a"], ["a", "z"])
        assert m.per_class["z"]["precision"] == 0.0
        assert m.support == {"a": 2}
        assert m.weighted_f1 == pytest.approx(m.per_class["a"]["f1"])

    def test_empty(self):
        m = compute_metrics([], [])
        assert m.accuracy == 0.0
        assert m.per_class == {}

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            compute_metrics(["a"], [])

    def test_to_dict_rounds(self):
        data = compute_metrics(["a", "b", "b"], ["a", "b", "a"]).to_dict()
        assert data["accuracy"] == 0.6667
        assert set(data) == {
            "accuracy", "macro_f1", "weighted_f1", "per_class", "confusion_matrix", "support",
        }
