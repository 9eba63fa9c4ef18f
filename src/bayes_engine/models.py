"""Data models for features and accumulated statistics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from .errors import FeatureKindError, FeatureValueError


class FeatureType(str, Enum):
    """How a feature's raw value is interpreted."""

    TEXT = "text"
    CATEGORY = "category"
    GAUSSIAN = "gaussian"


@dataclass(frozen=True)
class Feature:
    """A single named feature of an example.

    The value is always kept as the raw string and interpreted lazily:
    text is tokenized into words, a category is one verbatim token, and
    a Gaussian value is parsed as a float.
    """

    kind: FeatureType
    name: str
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FeatureType):
            try:
                kind = FeatureType(str(self.kind).lower())
            except ValueError:
                raise FeatureKindError(
                    f"Unknown feature kind {self.kind!r} for feature {self.name!r}. "
                    f"Known: {[t.value for t in FeatureType]}"
                ) from None
            object.__setattr__(self, "kind", kind)
        if not isinstance(self.value, str):
            object.__setattr__(self, "value", str(self.value))

    @classmethod
    def text(cls, name: str, value: str) -> "Feature":
        return cls(FeatureType.TEXT, name, value)

    @classmethod
    def category(cls, name: str, value: str) -> "Feature":
        return cls(FeatureType.CATEGORY, name, value)

    @classmethod
    def gaussian(cls, name: str, value: Union[str, float, int]) -> "Feature":
        return cls(FeatureType.GAUSSIAN, name, str(value))

    def numeric_value(self) -> float:
        """Parse the value as a finite float.

        Raises:
            FeatureValueError: If the value is not a finite number.
        """
        try:
            number = float(self.value.strip())
        except ValueError:
            raise FeatureValueError(self.name, self.value) from None
        if not math.isfinite(number):
            raise FeatureValueError(self.name, self.value)
        return number

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "name": self.name, "value": self.value}


# (class label, features)
LabeledExample = Tuple[str, Sequence[Feature]]


@dataclass
class GaussianMoments:
    """Welford running accumulator for one (feature, class) pair.

    Attributes:
        count: Number of observations.
        mean: Running mean.
        m2: Sum of squared differences from the running mean.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def update(self, value: float) -> None:
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        delta2 = value - self.mean
        self.m2 += delta * delta2

    @property
    def variance(self) -> Optional[float]:
        """Sample variance, or ``None`` before two observations."""
        if self.count < 2:
            return None
        return self.m2 / (self.count - 1)

    def to_dict(self) -> dict:
        return {"count": self.count, "mean": self.mean, "m2": self.m2}


@dataclass
class FeatureRange:
    """Observed extrema of a Gaussian feature across every class."""

    minimum: float
    maximum: float

    @classmethod
    def from_value(cls, value: float) -> "FeatureRange":
        return cls(minimum=value, maximum=value)

    def update(self, value: float) -> None:
        if value < self.minimum:
            self.minimum = value
        if value > self.maximum:
            self.maximum = value

    @property
    def span(self) -> float:
        return self.maximum - self.minimum

    def to_dict(self) -> dict:
        return {"min": self.minimum, "max": self.maximum}
