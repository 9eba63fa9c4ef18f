"""Shared test fixtures for bayes-engine tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_engine import Feature, InMemoryStore, Model


@pytest.fixture
def model() -> Model:
    """A fresh model with default options."""
    return Model()


@pytest.fixture
def store() -> InMemoryStore:
    """An empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def mood_examples() -> list:
    """Two one-word text examples, one per class."""
    return [
        ("happy", [Feature.text("words", "good")]),
        ("sad", [Feature.text("words", "bad")]),
    ]


@pytest.fixture
def currency_examples() -> list:
    """Ages labeled with a currency: eur has mean 30, usd has mean 45."""
    return [
        ("eur", [Feature.gaussian("age", "20")]),
        ("eur", [Feature.gaussian("age", "30")]),
        ("usd", [Feature.gaussian("age", "40")]),
        ("usd", [Feature.gaussian("age", "50")]),
        ("eur", [Feature.gaussian("age", "40")]),
    ]


@pytest.fixture
def weather_examples() -> list:
    """Mixed gaussian and category features describing the weather."""
    def day(degree, title, wind):
        return [
            Feature.gaussian("weather.degree", degree),
            Feature.category("weather.title", title),
            Feature.gaussian("weather.wind.level", wind),
        ]

    return [
        ("wear more cloth", day(0, "sunny", 2)),
        ("wear more cloth", day(-5, "cloudy", 4)),
        ("wear more cloth", day(2, "snowy", 3)),
        ("take umbrella", day(18, "rainy", 5)),
        ("take umbrella", day(22, "rainy", 6)),
        ("take umbrella", day(15, "stormy", 8)),
        ("go play well", day(25, "sunny", 1)),
        ("go play well", day(28, "sunny", 2)),
        ("go play well", day(24, "cloudy", 3)),
    ]


@pytest.fixture
def spam_file(tmp_path: Path) -> Path:
    """A tiny ``<label> <text>`` dataset."""
    file = tmp_path / "spam.txt"
    file.write_text(
        "spam win a free prize now\n"
        "spam free money claim your prize\n"
        "\n"
        "ham meeting moved to monday\n"
        "ham lunch with the team on monday\n",
        encoding="utf-8",
    )
    return file


@pytest.fixture
def weather_csv(tmp_path: Path) -> Path:
    """A tiny delimited dataset with the label in the last column."""
    file = tmp_path / "weather.csv"
    file.write_text(
        "0, sunny, 2, wear more cloth\n"
        "-5, cloudy, 4, wear more cloth\n"
        "18, rainy, 5, take umbrella\n"
        "22, rainy, 6, take umbrella.\n"
        "25, sunny, 1, go play well\n"
        "28, ?, 2, go play well\n",
        encoding="utf-8",
    )
    return file


@pytest.fixture
def weather_schema() -> str:
    """Column schema of ``weather_csv``."""
    return "degree:gaussian,title:category,wind:gaussian"
