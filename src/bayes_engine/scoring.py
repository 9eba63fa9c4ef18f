"""Closed-form scoring terms and log-score normalization."""

from __future__ import annotations

import math
from typing import Mapping, Optional

from .models import FeatureRange, GaussianMoments

LOG_SQRT_2PI = math.log(math.sqrt(2.0 * math.pi))

MIN_WELFORD_SIGMA = 1.0
MIN_SHARED_SIGMA = 1e-3


def log_likelihood_term(
    token_count: float,
    count_in_class: float,
    class_total: float,
    vocabulary_size: int,
    pseudo_count: float,
) -> float:
    """Lidstone-smoothed multinomial log-likelihood of a token.

    ``t * (ln(c_fc + a) - ln(c_c + V * a))``, scaled linearly by the
    number of times the token occurs in the query.

    Args:
        token_count: Occurrences of the token in the query (t).
        count_in_class: Trained count of the token for the class (c_fc).
        class_total: Trained token total for the feature and class (c_c).
        vocabulary_size: Distinct tokens seen for the feature (V).
        pseudo_count: Smoothing constant (a).
    """
    return token_count * (
        math.log(count_in_class + pseudo_count)
        - math.log(class_total + vocabulary_size * pseudo_count)
    )


def gaussian_log_density(value: float, mean: float, sigma: float, soft: bool = False) -> float:
    """Log-density of ``value`` under a normal approximation.

    With ``soft=True`` the quadratic penalty is replaced by
    ``ln(1 + z)``, which grows much more slowly for outliers.
    """
    z = (value - mean) ** 2 / (2.0 * sigma * sigma)
    penalty = math.log1p(z) if soft else z
    return -math.log(sigma) - LOG_SQRT_2PI - penalty


def welford_sigma(moments: GaussianMoments) -> float:
    """Sample deviation of a Welford accumulator, never below 1."""
    variance = moments.variance
    sigma = math.sqrt(variance) if variance is not None else 1.0
    return max(sigma, MIN_WELFORD_SIGMA)


def shared_sigma(feature_range: Optional[FeatureRange], sigma_factor: float) -> float:
    """Feature-wide sigma derived from the observed value range."""
    span = feature_range.span if feature_range is not None else 0.0
    return max(span * sigma_factor, MIN_SHARED_SIGMA)


def normalize(log_scores: Mapping[str, float]) -> dict[str, float]:
    """Convert unnormalized log-scores into probabilities.

    Uses log-sum-exp: the maximum score is subtracted before
    exponentiating, so large magnitudes cannot overflow and adding a
    constant to every score leaves the result unchanged.

    Args:
        log_scores: Mapping of class to log-score.

    Returns:
        Mapping of class to probability (sums to 1). Empty for empty input.
    """
    if not log_scores:
        return {}

    max_score = max(log_scores.values())
    if max_score == -math.inf:
        # Every class is impossible; fall back to uniform.
        return {cls: 1.0 / len(log_scores) for cls in log_scores}
    exp_scores = {cls: math.exp(s - max_score) for cls, s in log_scores.items()}
    total = sum(exp_scores.values())

    return {cls: score / total for cls, score in exp_scores.items()}
