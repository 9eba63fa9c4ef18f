"""Accumulate sufficient statistics from labeled examples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from loguru import logger

from .config import GaussianScheme, ModelConfig
from .errors import FeatureValueError
from .models import Feature, FeatureType, LabeledExample
from .preprocessing import Tokenizer
from .store import StatisticsStore


@dataclass
class TrainingReport:
    """Counts from one ``train`` call.

    Attributes:
        examples: Labeled examples consumed.
        features: Feature instances added to the prior and total counts.
        skipped: Gaussian features skipped for a malformed value.
    """

    examples: int = 0
    features: int = 0
    skipped: int = 0

    def to_dict(self) -> dict:
        return {"examples": self.examples, "features": self.features, "skipped": self.skipped}


class Trainer:
    """Update a store's statistics from labeled examples.

    Priors and the total data count are incremented once per *feature
    instance*, not once per example: an example with three features adds
    three to its class prior. Training never reads back its own writes.
    """

    def __init__(self, store: StatisticsStore, config: ModelConfig, tokenizer: Tokenizer) -> None:
        self.store = store
        self.config = config
        self.tokenizer = tokenizer

    def train(self, model: str, examples: Iterable[LabeledExample]) -> TrainingReport:
        """Fold every example into the statistics of ``model``.

        The model's write lock is held for the whole call.
        """
        report = TrainingReport()
        with self.store.writing(model):
            for cls, features in examples:
                report.examples += 1
                for feature in features:
                    report.features += 1
                    if not self._train_feature(model, cls, feature):
                        report.skipped += 1

        logger.debug(
            "Trained model '{}': {} examples, {} features, {} skipped",
            model, report.examples, report.features, report.skipped,
        )
        return report

    def _train_feature(self, model: str, cls: str, feature: Feature) -> bool:
        store = self.store
        store.add_to_prior_count(model, cls, 1)
        store.add_to_total_data_count(model, 1)

        if feature.kind is FeatureType.TEXT:
            counts = self.tokenizer.tokenize(feature.value, self.config.stop_words)
            for word, count in counts.items():
                store.add_count(model, feature.name, cls, word, count)
                store.add_to_class_total(model, feature.name, cls, count)
        elif feature.kind is FeatureType.CATEGORY:
            token = self.tokenizer.category_token(feature.value)
            store.add_count(model, feature.name, cls, token, 1)
            store.add_to_class_total(model, feature.name, cls, 1)
        else:
            try:
                value = feature.numeric_value()
            except FeatureValueError as e:
                logger.warning("Skipping feature while training model '{}': {}", model, e)
                return False
            if self.config.gaussian_scheme is GaussianScheme.SHARED_SIGMA:
                store.update_gaussian_shared(model, feature.name, cls, value)
            else:
                store.update_gaussian_welford(
                    model, feature.name, cls, value,
                    initial_m2=self.config.default_gaussian_m2,
                )
        return True
