"""Accuracy and per-class metrics for predicted labels."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence


@dataclass
class ClassificationMetrics:
    """Scores of one evaluation run.

    Attributes:
        accuracy: Share of examples whose predicted label is the true one.
        per_class: ``{label: {"precision", "recall", "f1"}}``.
        macro_f1: Mean F1 over labels.
        weighted_f1: F1 averaged with true-label support as weights.
        confusion_matrix: ``{true: {predicted: count}}`` over every label.
        support: Number of test examples per true label.
    """

    accuracy: float = 0.0
    per_class: dict[str, dict[str, float]] = field(default_factory=dict)
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[str, dict[str, int]] = field(default_factory=dict)
    support: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                label: {name: round(score, 4) for name, score in scores.items()}
                for label, scores in self.per_class.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "support": self.support,
        }


def best_label(distribution: Mapping[str, float]) -> Optional[str]:
    """Class with the highest probability; ties go to the first in sort order."""
    if not distribution:
        return None
    return max(sorted(distribution), key=distribution.__getitem__)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _harmonic_mean(a: float, b: float) -> float:
    return _ratio(2 * a * b, a + b)


def compute_metrics(
    y_true: Sequence[str],
    y_pred: Sequence[Optional[str]],
) -> ClassificationMetrics:
    """Score predicted labels against the true ones.

    A ``None`` prediction (the model had no classes) is counted as wrong
    and does not appear as a label of its own.

    Raises:
        ValueError: If the label lists differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError(
            f"y_true ({len(y_true)}) and y_pred ({len(y_pred)}) must have the same length"
        )

    pairs = Counter(zip(y_true, y_pred))
    support = Counter(y_true)
    predicted = Counter(p for p in y_pred if p is not None)
    labels = sorted(set(support) | set(predicted))

    confusion = {
        true: {pred: pairs[(true, pred)] for pred in labels}
        for true in labels
    }

    per_class: dict[str, dict[str, float]] = {}
    for label in labels:
        hits = pairs[(label, label)]
        precision = _ratio(hits, predicted[label])
        recall = _ratio(hits, support[label])
        per_class[label] = {
            "precision": precision,
            "recall": recall,
            "f1": _harmonic_mean(precision, recall),
        }

    f1_scores = {label: scores["f1"] for label, scores in per_class.items()}
    correct = sum(pairs[(label, label)] for label in labels)

    return ClassificationMetrics(
        accuracy=_ratio(correct, len(y_true)),
        per_class=per_class,
        macro_f1=_ratio(sum(f1_scores.values()), len(labels)),
        weighted_f1=_ratio(
            sum(f1_scores[label] * support[label] for label in labels),
            sum(support.values()),
        ),
        confusion_matrix=confusion,
        support=dict(support),
    )
