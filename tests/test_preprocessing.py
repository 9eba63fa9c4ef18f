"""Tests for the tokenizer and stop-word loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_engine.errors import DatasetError
from bayes_engine.preprocessing import Tokenizer, load_stop_words


@pytest.fixture
def tokenizer() -> Tokenizer:
    return Tokenizer()


class TestClean:
    """Tests for Tokenizer.clean()."""

    def test_lowercases_and_trims(self, tokenizer: Tokenizer) -> None:
        assert tokenizer.clean("  Hello World  ") == "hello world"

    def test_replaces_non_letters(self, tokenizer: Tokenizer) -> None:
        assert tokenizer.clean("a1b...c_d") == "a b c d"

    def test_keeps_unicode_letters(self, tokenizer: Tokenizer) -> None:
        assert tokenizer.clean("Café, Straße!") == "café straße"

    def test_empty(self, tokenizer: Tokenizer) -> None:
        assert tokenizer.clean("") == ""
        assert tokenizer.clean("123 ...") == ""

    def test_custom_alphabet(self) -> None:
        tokenizer = Tokenizer(r"[^a-zA-Z0-9]+")
        assert tokenizer.clean("R2-D2 rocks") == "r2 d2 rocks"
        assert tokenizer.pattern == r"[^a-zA-Z0-9]+"


class TestTokenize:
    """Tests for Tokenizer.tokenize()."""

    def test_counts_case_insensitively(self, tokenizer: Tokenizer) -> None:
        counts = tokenizer.tokenize("This is good good ... Rust rust RUST")
        assert dict(counts) == {"this": 1, "is": 1, "good": 2, "rust": 3}

    def test_filters_stop_words(self, tokenizer: Tokenizer) -> None:
        counts = tokenizer.tokenize("This is good", stop_words=frozenset({"this", "is"}))
        assert dict(counts) == {"good": 1}

    def test_no_empty_tokens(self, tokenizer: Tokenizer) -> None:
        counts = tokenizer.tokenize("  ...  !! ")
        assert dict(counts) == {}

    def test_is_deterministic(self, tokenizer: Tokenizer) -> None:
        text = "the quick brown fox jumps over the lazy dog"
        assert tokenizer.tokenize(text) == Tokenizer().tokenize(text)


class TestCategoryToken:
    """Tests for Tokenizer.category_token()."""

    def test_verbatim_but_trimmed(self) -> None:
        assert Tokenizer.category_token("  Light Rain ") == "Light Rain"

    def test_not_tokenized(self) -> None:
        assert Tokenizer.category_token("a-b c") == "a-b c"


class TestLoadStopWords:
    """Tests for load_stop_words()."""

    def test_one_per_line(self, tmp_path: Path) -> None:
        path = tmp_path / "stop.txt"
        path.write_text("The\nand\n\n# comment\nof\n", encoding="utf-8")
        assert load_stop_words(path) == frozenset({"the", "and", "of"})

    def test_whitespace_separated(self, tmp_path: Path) -> None:
        path = tmp_path / "stop.txt"
        path.write_text("a an the\nto", encoding="utf-8")
        assert load_stop_words(str(path)) == frozenset({"a", "an", "the", "to"})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DatasetError):
            load_stop_words(tmp_path / "missing.txt")
