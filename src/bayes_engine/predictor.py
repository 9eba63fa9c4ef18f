"""Turn accumulated statistics into class probabilities.

Every feature list in a batch is scored independently against a
read-only view of the store, so batches are spread over a thread pool.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from loguru import logger

from .config import GaussianScheme, ModelConfig
from .errors import FeatureValueError
from .models import Feature, FeatureType
from .preprocessing import Tokenizer
from .scoring import (
    gaussian_log_density,
    log_likelihood_term,
    normalize,
    shared_sigma,
    welford_sigma,
)
from .store import StatisticsStore


class Predictor:
    """Score feature vectors against one store."""

    def __init__(self, store: StatisticsStore, config: ModelConfig, tokenizer: Tokenizer) -> None:
        self.store = store
        self.config = config
        self.tokenizer = tokenizer

    def predict(self, model: str, features: Sequence[Feature]) -> dict[str, float]:
        """Class probabilities for a single feature list."""
        return self.predict_batch(model, [features])[0]

    def predict_batch(
        self,
        model: str,
        feature_lists: Sequence[Sequence[Feature]],
    ) -> list[dict[str, float]]:
        """Class probabilities for many feature lists, in input order.

        Returns one empty mapping per input when ``model`` has never been
        trained.
        """
        feature_lists = list(feature_lists)
        with self.store.reading(model):
            priors = self._prior_terms(model)
            if not priors:
                return [{} for _ in feature_lists]

            def score(features: Sequence[Feature]) -> dict[str, float]:
                return normalize(self._log_scores(model, features, priors))

            if len(feature_lists) <= 1 or self.config.max_workers == 1:
                return [score(features) for features in feature_lists]

            logger.debug(
                "Scoring {} feature lists for model '{}' in parallel", len(feature_lists), model
            )
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(score, feature_lists))

    def log_scores(self, model: str, features: Sequence[Feature]) -> dict[str, float]:
        """Unnormalized per-class log-scores for one feature list."""
        with self.store.reading(model):
            priors = self._prior_terms(model)
            if not priors:
                return {}
            return self._log_scores(model, features, priors)

    def _prior_terms(self, model: str) -> dict[str, float]:
        """Weighted log prior of every class; the total is read once."""
        classes = sorted(self.store.all_classes(model))
        if not classes:
            return {}
        factor = self.config.prior_factor
        if factor == 0:
            return {cls: 0.0 for cls in classes}

        total = self.store.get_total_data_count(model)
        log_total = math.log(total) if total > 0 else 0.0
        priors: dict[str, float] = {}
        for cls in classes:
            count = self.store.get_prior_count(model, cls)
            priors[cls] = factor * (math.log(count) - log_total) if count > 0 else -math.inf
        return priors

    def _log_scores(
        self,
        model: str,
        features: Sequence[Feature],
        priors: dict[str, float],
    ) -> dict[str, float]:
        scores = dict(priors)
        for feature in features:
            if feature.kind is FeatureType.TEXT:
                tokens = self.tokenizer.tokenize(feature.value, self.config.stop_words)
                self._add_token_terms(model, feature.name, tokens, scores)
            elif feature.kind is FeatureType.CATEGORY:
                token = self.tokenizer.category_token(feature.value)
                self._add_token_terms(model, feature.name, {token: 1}, scores)
            else:
                self._add_gaussian_terms(model, feature, scores)
        return scores

    def _add_token_terms(
        self,
        model: str,
        feature_name: str,
        tokens: dict[str, int],
        scores: dict[str, float],
    ) -> None:
        store = self.store
        # Unknown tokens contribute nothing to any class.
        known = [(w, c) for w, c in tokens.items() if store.is_known_token(model, feature_name, w)]
        if not known:
            return

        vocabulary_size = store.vocabulary_size(model, feature_name)
        pseudo_count = self.config.pseudo_count
        for cls in scores:
            class_total = store.get_class_total(model, feature_name, cls)
            for word, count in known:
                scores[cls] += log_likelihood_term(
                    count,
                    store.get_count(model, feature_name, cls, word),
                    class_total,
                    vocabulary_size,
                    pseudo_count,
                )

    def _add_gaussian_terms(self, model: str, feature: Feature, scores: dict[str, float]) -> None:
        try:
            value = feature.numeric_value()
        except FeatureValueError as e:
            logger.warning("Ignoring feature while predicting with model '{}': {}", model, e)
            return

        store = self.store
        if not store.has_gaussian(model, feature.name):
            return

        soft = self.config.soft_gaussian
        if self.config.gaussian_scheme is GaussianScheme.SHARED_SIGMA:
            sigma = shared_sigma(
                store.gaussian_range(model, feature.name),
                self.config.default_gaussian_sigma_factor,
            )
            for cls in scores:
                mean = store.gaussian_moments(model, feature.name, cls).mean
                scores[cls] += gaussian_log_density(value, mean, sigma, soft=soft)
        else:
            for cls in scores:
                moments = store.gaussian_moments(model, feature.name, cls)
                scores[cls] += gaussian_log_density(
                    value, moments.mean, welford_sigma(moments), soft=soft
                )
