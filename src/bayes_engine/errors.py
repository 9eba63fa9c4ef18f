"""Exception hierarchy for the Naive Bayes engine."""

from __future__ import annotations


class BayesEngineError(Exception):
    """Base class for all engine errors."""


class FeatureValueError(BayesEngineError, ValueError):
    """A feature value could not be interpreted for its kind.

    Raised when a Gaussian feature's value is not a finite number. The
    trainer and predictor catch it and skip the offending feature.
    """

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Feature '{name}' has a non-numeric value: {value!r}")


class ConfigurationError(BayesEngineError, ValueError):
    """A model option was given an invalid value."""


class DatasetError(BayesEngineError):
    """A dataset file or schema could not be read."""


class FeatureKindError(BayesEngineError, ValueError):
    """A feature was built with a kind that is not text, category or gaussian."""
