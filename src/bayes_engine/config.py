"""Model configuration.

Options can be set in code through :meth:`bayes_engine.Model.configure`
or read from the environment (and a ``.env`` file) with
:meth:`ModelConfig.from_env`::

    BAYES_ENGINE_PSEUDO_COUNT=0.1
    BAYES_ENGINE_PRIOR_FACTOR=1.0
    BAYES_ENGINE_SIGMA_FACTOR=0.05
    BAYES_ENGINE_DEFAULT_M2=0.0
    BAYES_ENGINE_GAUSSIAN_SCHEME=welford
    BAYES_ENGINE_SOFT_GAUSSIAN=false
    BAYES_ENGINE_MAX_WORKERS=8
"""

from __future__ import annotations

import dataclasses
import math
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

ENV_PREFIX = "BAYES_ENGINE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class GaussianScheme(str, Enum):
    """How per-class sigma is derived for Gaussian features."""

    # Per-class sample deviation from a Welford accumulator, floored at 1.
    WELFORD = "welford"
    # One sigma per feature from the observed range times a sigma factor.
    SHARED_SIGMA = "shared_sigma"


@dataclass(frozen=True)
class ModelConfig:
    """Immutable option set shared by the trainer and predictor.

    Attributes:
        pseudo_count: Additive (Lidstone) smoothing constant.
        prior_factor: Weight of the class prior term relative to likelihoods.
        default_gaussian_sigma_factor: Fraction of the observed range used
            as sigma by the shared-sigma scheme (1/6 spans about 6 sigma).
        default_gaussian_m2: Initial ``m2`` of a new Welford accumulator.
        stop_words: Words dropped from text features, or ``None``.
        gaussian_scheme: Welford or shared-sigma variance scheme.
        soft_gaussian: Use the heavy-tailed log-density approximation.
        alphabet_pattern: Regex of characters stripped from text values.
        max_workers: Thread pool size for batch prediction.
    """

    pseudo_count: float = 1.0
    prior_factor: float = 1.0
    default_gaussian_sigma_factor: float = 1.0 / 6.0
    default_gaussian_m2: float = 0.0
    stop_words: Optional[frozenset[str]] = None
    gaussian_scheme: GaussianScheme = GaussianScheme.WELFORD
    soft_gaussian: bool = False
    alphabet_pattern: Optional[str] = None
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        # Normalize loosely typed inputs before validation.
        if self.stop_words is not None and not isinstance(self.stop_words, frozenset):
            object.__setattr__(self, "stop_words", _as_stop_words(self.stop_words))
        if not isinstance(self.gaussian_scheme, GaussianScheme):
            try:
                scheme = GaussianScheme(str(self.gaussian_scheme).lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown gaussian_scheme: {self.gaussian_scheme!r}. "
                    f"Known: {[s.value for s in GaussianScheme]}"
                ) from None
            object.__setattr__(self, "gaussian_scheme", scheme)
        self.validate()

    def validate(self) -> None:
        """Check option values.

        Raises:
            ConfigurationError: If any option is out of range.
        """
        if not _positive(self.pseudo_count):
            raise ConfigurationError(f"pseudo_count must be > 0, got {self.pseudo_count}")
        if not (isinstance(self.prior_factor, (int, float)) and math.isfinite(self.prior_factor)
                and self.prior_factor >= 0):
            raise ConfigurationError(f"prior_factor must be >= 0, got {self.prior_factor}")
        if not _positive(self.default_gaussian_sigma_factor):
            raise ConfigurationError(
                "default_gaussian_sigma_factor must be > 0, "
                f"got {self.default_gaussian_sigma_factor}"
            )
        if not (isinstance(self.default_gaussian_m2, (int, float))
                and math.isfinite(self.default_gaussian_m2) and self.default_gaussian_m2 >= 0):
            raise ConfigurationError(
                f"default_gaussian_m2 must be >= 0, got {self.default_gaussian_m2}"
            )
        if self.max_workers is not None and (
            not isinstance(self.max_workers, int) or self.max_workers < 1
        ):
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.alphabet_pattern is not None:
            try:
                re.compile(self.alphabet_pattern)
            except re.error as e:
                raise ConfigurationError(f"Invalid alphabet_pattern: {e}") from None

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(cls))

    def replace(self, **options) -> "ModelConfig":
        """Return a copy with some options changed.

        Raises:
            TypeError: If an option name is unknown.
            ConfigurationError: If a value is invalid.
        """
        unknown = sorted(set(options) - set(self.option_names()))
        if unknown:
            raise TypeError(
                f"Unknown option(s): {', '.join(unknown)}. Known: {', '.join(self.option_names())}"
            )
        return dataclasses.replace(self, **options)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "ModelConfig":
        """Build a config from ``BAYES_ENGINE_*`` environment variables.

        A ``.env`` file is loaded first (without overriding variables that
        are already set). Unset variables keep their defaults.
        """
        load_dotenv(dotenv_path)
        options: dict = {}

        for env_name, option, parse in (
            ("PSEUDO_COUNT", "pseudo_count", float),
            ("PRIOR_FACTOR", "prior_factor", float),
            ("SIGMA_FACTOR", "default_gaussian_sigma_factor", float),
            ("DEFAULT_M2", "default_gaussian_m2", float),
            ("GAUSSIAN_SCHEME", "gaussian_scheme", str),
            ("SOFT_GAUSSIAN", "soft_gaussian", _parse_bool),
            ("MAX_WORKERS", "max_workers", int),
        ):
            raw = os.getenv(ENV_PREFIX + env_name)
            if raw is None or not raw.strip():
                continue
            try:
                options[option] = parse(raw.strip())
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX + env_name}: {raw!r}"
                ) from None

        return cls(**options)

    def to_dict(self) -> dict:
        return {
            "pseudo_count": self.pseudo_count,
            "prior_factor": self.prior_factor,
            "default_gaussian_sigma_factor": self.default_gaussian_sigma_factor,
            "default_gaussian_m2": self.default_gaussian_m2,
            "stop_words": len(self.stop_words) if self.stop_words is not None else None,
            "gaussian_scheme": self.gaussian_scheme.value,
            "soft_gaussian": self.soft_gaussian,
            "alphabet_pattern": self.alphabet_pattern,
            "max_workers": self.max_workers,
        }


def _positive(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def _parse_bool(raw: str) -> bool:
    value = raw.lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _as_stop_words(words: AbstractSet[str]) -> frozenset[str]:
    if isinstance(words, str):
        raise ConfigurationError("stop_words must be a collection of words, not a string")
    return frozenset(w.lower() for w in words)
