"""Bayes Engine -- incremental Naive Bayes over heterogeneous features."""

__version__ = "0.3.0"

from .config import GaussianScheme, ModelConfig
from .errors import (
    BayesEngineError,
    ConfigurationError,
    DatasetError,
    FeatureKindError,
    FeatureValueError,
)
from .evaluation import ClassificationMetrics, best_label, compute_metrics
from .model import Model, ModelSummary, Prediction
from .models import Feature, FeatureRange, FeatureType, GaussianMoments, LabeledExample
from .predictor import Predictor
from .preprocessing import Tokenizer, load_stop_words
from .scoring import (
    gaussian_log_density,
    log_likelihood_term,
    normalize,
    shared_sigma,
    welford_sigma,
)
from .store import InMemoryStore, ReadWriteLock, StatisticsStore
from .trainer import Trainer, TrainingReport

__all__ = [
    # Core
    "Model",
    "ModelConfig",
    "GaussianScheme",
    "Prediction",
    "ModelSummary",
    # Features
    "Feature",
    "FeatureType",
    "LabeledExample",
    "Tokenizer",
    "load_stop_words",
    # Statistics
    "StatisticsStore",
    "InMemoryStore",
    "ReadWriteLock",
    "GaussianMoments",
    "FeatureRange",
    # Engine
    "Trainer",
    "TrainingReport",
    "Predictor",
    "log_likelihood_term",
    "gaussian_log_density",
    "welford_sigma",
    "shared_sigma",
    "normalize",
    # Evaluation
    "ClassificationMetrics",
    "best_label",
    "compute_metrics",
    # Errors
    "BayesEngineError",
    "ConfigurationError",
    "DatasetError",
    "FeatureKindError",
    "FeatureValueError",
]
