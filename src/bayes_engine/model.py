"""High-level train/predict API over a statistics store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .config import ModelConfig
from .models import Feature, LabeledExample
from .predictor import Predictor
from .preprocessing import Tokenizer
from .store import InMemoryStore, StatisticsStore
from .trainer import Trainer, TrainingReport


@dataclass
class Prediction:
    """Most likely class of one feature list, with the full distribution."""

    label: Optional[str]
    confidence: float
    probabilities: dict[str, float]

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "confidence": round(self.confidence, 4),
            "probabilities": {
                k: round(v, 4) for k, v in sorted(
                    self.probabilities.items(),
                    key=lambda x: x[1],
                    reverse=True,
                )
            },
        }


@dataclass
class ModelSummary:
    """Snapshot of what a model has accumulated."""

    name: str
    classes: list[str] = field(default_factory=list)
    total_data_count: float = 0.0
    prior_counts: dict[str, float] = field(default_factory=dict)
    vocabulary_sizes: dict[str, int] = field(default_factory=dict)
    gaussian_features: list[str] = field(default_factory=list)

    @property
    def is_trained(self) -> bool:
        return bool(self.classes)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "classes": self.classes,
            "total_data_count": self.total_data_count,
            "prior_counts": self.prior_counts,
            "vocabulary_sizes": self.vocabulary_sizes,
            "gaussian_features": self.gaussian_features,
        }


class Model:
    """Incremental Naive Bayes over text, category and Gaussian features.

    One ``Model`` owns one store, which may hold any number of named
    models. Training can be repeated at any time; statistics only grow.

    Example::

        model = Model().configure(pseudo_count=0.1)
        model.train("mood", [
            ("happy", [Feature.text("words", "good")]),
            ("sad", [Feature.text("words", "bad")]),
        ])
        model.predict("mood", [Feature.text("words", "GOOD")])
        # {'happy': 0.666..., 'sad': 0.333...}

    Args:
        store: Statistics backend (defaults to a fresh ``InMemoryStore``).
        config: Initial options (defaults to ``ModelConfig()``).
    """

    def __init__(
        self,
        store: Optional[StatisticsStore] = None,
        config: Optional[ModelConfig] = None,
    ) -> None:
        self.store = store if store is not None else InMemoryStore()
        self._apply(config or ModelConfig())

    @property
    def config(self) -> ModelConfig:
        return self._config

    def _apply(self, config: ModelConfig) -> None:
        self._config = config
        tokenizer = Tokenizer(config.alphabet_pattern)
        self._trainer = Trainer(self.store, config, tokenizer)
        self._predictor = Predictor(self.store, config, tokenizer)

    def configure(self, **options) -> "Model":
        """Change options and return ``self`` for chaining.

        Accepted options are the fields of :class:`ModelConfig`. Unset
        options keep their current values.

        Raises:
            TypeError: If an option name is unknown.
            ConfigurationError: If a value is out of range.
        """
        self._apply(self._config.replace(**options))
        return self

    def train(self, model_name: str, examples: Iterable[LabeledExample]) -> TrainingReport:
        """Add labeled examples to ``model_name``."""
        return self._trainer.train(model_name, examples)

    def predict(self, model_name: str, features: Sequence[Feature]) -> dict[str, float]:
        """Class probabilities for one feature list (empty if untrained)."""
        return self._predictor.predict(model_name, features)

    def predict_batch(
        self,
        model_name: str,
        feature_lists: Sequence[Sequence[Feature]],
    ) -> list[dict[str, float]]:
        """Class probabilities for each feature list, computed in parallel."""
        return self._predictor.predict_batch(model_name, feature_lists)

    def log_scores(self, model_name: str, features: Sequence[Feature]) -> dict[str, float]:
        """Unnormalized per-class log-scores for one feature list."""
        return self._predictor.log_scores(model_name, features)

    def classify(self, model_name: str, features: Sequence[Feature]) -> Prediction:
        """Most likely class for one feature list."""
        return _to_prediction(self.predict(model_name, features))

    def classify_batch(
        self,
        model_name: str,
        feature_lists: Sequence[Sequence[Feature]],
    ) -> list[Prediction]:
        return [_to_prediction(p) for p in self.predict_batch(model_name, feature_lists)]

    def summary(self, model_name: str) -> ModelSummary:
        """Describe the statistics accumulated for ``model_name``."""
        store = self.store
        with store.reading(model_name):
            classes = sorted(store.all_classes(model_name))
            summary = ModelSummary(
                name=model_name,
                classes=classes,
                total_data_count=store.get_total_data_count(model_name),
                prior_counts={c: store.get_prior_count(model_name, c) for c in classes},
            )
            for feature in sorted(store.feature_names(model_name)):
                size = store.vocabulary_size(model_name, feature)
                if size:
                    summary.vocabulary_sizes[feature] = size
                if store.has_gaussian(model_name, feature):
                    summary.gaussian_features.append(feature)
        return summary


def _to_prediction(probabilities: dict[str, float]) -> Prediction:
    if not probabilities:
        return Prediction(label=None, confidence=0.0, probabilities={})
    label = max(sorted(probabilities), key=probabilities.get)  # type: ignore[arg-type]
    return Prediction(label=label, confidence=probabilities[label], probabilities=probabilities)
