"""Statistics storage for incremental Naive Bayes models.

A :class:`StatisticsStore` holds the sufficient statistics of any number
of independently named models. Every operation is keyed first by model
name. Lookups never fail for missing keys: absent statistics read as
zero, an empty set, or ``None``, because unseen features, classes and
words are routine at prediction time.

The store only guarantees consistency under a single writer per model.
:meth:`StatisticsStore.reading` and :meth:`StatisticsStore.writing`
expose the locking discipline; :class:`InMemoryStore` backs them with a
per-model reader/writer lock so batches of predictions can run in
parallel while training is excluded.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import ContextManager, Iterator, Optional

from .models import FeatureRange, GaussianMoments


class StatisticsStore(ABC):
    """Abstract keyed counter and accumulator storage."""

    # -- word counts ---------------------------------------------------------

    @abstractmethod
    def add_count(self, model: str, feature: str, cls: str, word: str, delta: float) -> float:
        """Add to the count of ``word`` under ``feature`` for ``cls``.

        Also registers ``word`` in the feature's vocabulary and ``cls`` in
        the model's class set.

        Returns:
            The new count.
        """
        ...

    @abstractmethod
    def get_count(self, model: str, feature: str, cls: str, word: str) -> float:
        ...

    @abstractmethod
    def add_to_class_total(self, model: str, feature: str, cls: str, delta: float) -> None:
        ...

    @abstractmethod
    def get_class_total(self, model: str, feature: str, cls: str) -> float:
        ...

    # -- priors --------------------------------------------------------------

    @abstractmethod
    def add_to_prior_count(self, model: str, cls: str, delta: float) -> None:
        ...

    @abstractmethod
    def get_prior_count(self, model: str, cls: str) -> float:
        ...

    @abstractmethod
    def add_to_total_data_count(self, model: str, delta: float) -> None:
        ...

    @abstractmethod
    def get_total_data_count(self, model: str) -> float:
        ...

    # -- vocabulary and classes ----------------------------------------------

    @abstractmethod
    def vocabulary_size(self, model: str, feature: str) -> int:
        ...

    @abstractmethod
    def is_known_token(self, model: str, feature: str, word: str) -> bool:
        ...

    @abstractmethod
    def all_classes(self, model: str) -> frozenset[str]:
        ...

    # -- gaussian accumulators -----------------------------------------------

    @abstractmethod
    def update_gaussian_welford(
        self,
        model: str,
        feature: str,
        cls: str,
        value: float,
        initial_m2: float = 0.0,
    ) -> None:
        """Fold ``value`` into the Welford accumulator of (feature, cls).

        A missing accumulator is created with ``m2 = initial_m2``.
        """
        ...

    @abstractmethod
    def gaussian_moments(self, model: str, feature: str, cls: str) -> GaussianMoments:
        """Return a copy of the accumulator; zeroed if absent."""
        ...

    @abstractmethod
    def update_gaussian_shared(self, model: str, feature: str, cls: str, value: float) -> None:
        """Fold ``value`` into the per-class mean and the feature-wide range."""
        ...

    @abstractmethod
    def gaussian_range(self, model: str, feature: str) -> Optional[FeatureRange]:
        ...

    @abstractmethod
    def has_gaussian(self, model: str, feature: str) -> bool:
        """Whether any class has a Gaussian observation for ``feature``."""
        ...

    # -- introspection -------------------------------------------------------

    @abstractmethod
    def feature_names(self, model: str) -> frozenset[str]:
        ...

    @abstractmethod
    def model_names(self) -> frozenset[str]:
        ...

    # -- concurrency ---------------------------------------------------------

    def reading(self, model: str) -> ContextManager:
        """Context held while reading a model. No locking by default."""
        return nullcontext()

    def writing(self, model: str) -> ContextManager:
        """Context held while writing a model. No locking by default."""
        return nullcontext()


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Writers take priority over new readers once they are waiting, so a
    steady stream of prediction batches cannot starve training.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


@dataclass
class _ModelState:
    """All statistics of one model, as nested dicts."""

    total_data_count: float = 0.0
    prior_counts: dict[str, float] = field(default_factory=lambda: defaultdict(float))
    classes: set[str] = field(default_factory=set)
    # feature -> class -> word -> count
    word_counts: dict[str, dict[str, dict[str, float]]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(lambda: defaultdict(float)))
    )
    # feature -> class -> total tokens
    class_totals: dict[str, dict[str, float]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(float))
    )
    # feature -> distinct tokens
    vocabulary: dict[str, set[str]] = field(default_factory=lambda: defaultdict(set))
    # feature -> class -> accumulator
    moments: dict[str, dict[str, GaussianMoments]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    # feature -> observed extrema
    ranges: dict[str, FeatureRange] = field(default_factory=dict)


class InMemoryStore(StatisticsStore):
    """Process-local store of nested dictionaries.

    State for a model is created on its first write. Its reader/writer
    lock lives apart from the statistics, so a reader that arrives before
    the first write still excludes that write. Reads never create
    statistics: every getter looks keys up with ``.get`` so that concurrent
    readers do not mutate the ``defaultdict`` tables.

    Example::

        store = InMemoryStore()
        store.add_count("spam", "subject", "spam", "viagra", 1)
        store.get_count("spam", "subject", "spam", "viagra")  # 1.0
        store.get_count("spam", "subject", "ham", "viagra")   # 0.0
    """

    def __init__(self) -> None:
        self._models: dict[str, _ModelState] = {}
        self._locks: dict[str, ReadWriteLock] = {}
        self._models_lock = threading.Lock()

    def _state(self, model: str) -> _ModelState:
        """Get or lazily create the state of a model (write path)."""
        state = self._models.get(model)
        if state is None:
            with self._models_lock:
                state = self._models.setdefault(model, _ModelState())
        return state

    def _lock(self, model: str) -> ReadWriteLock:
        lock = self._locks.get(model)
        if lock is None:
            with self._models_lock:
                lock = self._locks.setdefault(model, ReadWriteLock())
        return lock

    def _peek(self, model: str) -> Optional[_ModelState]:
        return self._models.get(model)

    @staticmethod
    def _check_delta(delta: float) -> None:
        if delta < 0:
            raise ValueError(f"Counts only grow; got negative delta {delta}")

    # -- word counts ---------------------------------------------------------

    def add_count(self, model: str, feature: str, cls: str, word: str, delta: float) -> float:
        self._check_delta(delta)
        state = self._state(model)
        per_class = state.word_counts[feature][cls]
        per_class[word] += delta
        state.vocabulary[feature].add(word)
        state.classes.add(cls)
        return per_class[word]

    def get_count(self, model: str, feature: str, cls: str, word: str) -> float:
        state = self._peek(model)
        if state is None:
            return 0.0
        return state.word_counts.get(feature, {}).get(cls, {}).get(word, 0.0)

    def add_to_class_total(self, model: str, feature: str, cls: str, delta: float) -> None:
        self._check_delta(delta)
        self._state(model).class_totals[feature][cls] += delta

    def get_class_total(self, model: str, feature: str, cls: str) -> float:
        state = self._peek(model)
        if state is None:
            return 0.0
        return state.class_totals.get(feature, {}).get(cls, 0.0)

    # -- priors --------------------------------------------------------------

    def add_to_prior_count(self, model: str, cls: str, delta: float) -> None:
        self._check_delta(delta)
        state = self._state(model)
        state.prior_counts[cls] += delta
        state.classes.add(cls)

    def get_prior_count(self, model: str, cls: str) -> float:
        state = self._peek(model)
        if state is None:
            return 0.0
        return state.prior_counts.get(cls, 0.0)

    def add_to_total_data_count(self, model: str, delta: float) -> None:
        self._check_delta(delta)
        self._state(model).total_data_count += delta

    def get_total_data_count(self, model: str) -> float:
        state = self._peek(model)
        return state.total_data_count if state is not None else 0.0

    # -- vocabulary and classes ----------------------------------------------

    def vocabulary_size(self, model: str, feature: str) -> int:
        state = self._peek(model)
        if state is None:
            return 0
        return len(state.vocabulary.get(feature, ()))

    def is_known_token(self, model: str, feature: str, word: str) -> bool:
        state = self._peek(model)
        if state is None:
            return False
        return word in state.vocabulary.get(feature, ())

    def all_classes(self, model: str) -> frozenset[str]:
        state = self._peek(model)
        return frozenset(state.classes) if state is not None else frozenset()

    # -- gaussian accumulators -----------------------------------------------

    def update_gaussian_welford(
        self,
        model: str,
        feature: str,
        cls: str,
        value: float,
        initial_m2: float = 0.0,
    ) -> None:
        state = self._state(model)
        per_class = state.moments[feature]
        moments = per_class.get(cls)
        if moments is None:
            moments = per_class[cls] = GaussianMoments(m2=initial_m2)
        moments.update(value)
        state.classes.add(cls)

    def gaussian_moments(self, model: str, feature: str, cls: str) -> GaussianMoments:
        state = self._peek(model)
        if state is None:
            return GaussianMoments()
        moments = state.moments.get(feature, {}).get(cls)
        if moments is None:
            return GaussianMoments()
        return GaussianMoments(count=moments.count, mean=moments.mean, m2=moments.m2)

    def update_gaussian_shared(self, model: str, feature: str, cls: str, value: float) -> None:
        state = self._state(model)
        per_class = state.moments[feature]
        moments = per_class.get(cls)
        if moments is None:
            moments = per_class[cls] = GaussianMoments()
        # Only count and mean are meaningful in this scheme.
        moments.count += 1
        moments.mean += (value - moments.mean) / moments.count

        feature_range = state.ranges.get(feature)
        if feature_range is None:
            state.ranges[feature] = FeatureRange.from_value(value)
        else:
            feature_range.update(value)
        state.classes.add(cls)

    def gaussian_range(self, model: str, feature: str) -> Optional[FeatureRange]:
        state = self._peek(model)
        if state is None:
            return None
        feature_range = state.ranges.get(feature)
        if feature_range is None:
            return None
        return FeatureRange(feature_range.minimum, feature_range.maximum)

    def has_gaussian(self, model: str, feature: str) -> bool:
        state = self._peek(model)
        if state is None:
            return False
        return any(m.count for m in state.moments.get(feature, {}).values())

    # -- introspection -------------------------------------------------------

    def feature_names(self, model: str) -> frozenset[str]:
        state = self._peek(model)
        if state is None:
            return frozenset()
        return frozenset(state.vocabulary) | frozenset(state.moments)

    def model_names(self) -> frozenset[str]:
        return frozenset(self._models)

    # -- concurrency ---------------------------------------------------------

    def reading(self, model: str) -> ContextManager:
        return self._lock(model).read_locked()

    def writing(self, model: str) -> ContextManager:
        return self._lock(model).write_locked()
