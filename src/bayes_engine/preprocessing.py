"""Text cleaning and tokenization for text and category features.

Text features are reduced to lowercase words made only of letters, then
counted. Category features are never tokenized: the trimmed value is a
single token. Stop words can be filtered out of text features; the list
is usually loaded from a plain word-per-line file with
:func:`load_stop_words`.
"""

from __future__ import annotations

import re
from collections import Counter
from pathlib import Path
from typing import AbstractSet, Optional, Pattern, Union

from .errors import DatasetError

# Any run of characters that is not a letter (Unicode aware).
DEFAULT_ALPHABET_PATTERN = r"[\W\d_]+"


class Tokenizer:
    """Turn raw feature values into token counts.

    Tokenization is a pure function of the text, the stop-word set and
    the alphabet pattern; the tokenizer holds no other state and is safe
    to share between threads.

    Example::

        tokenizer = Tokenizer()
        tokenizer.tokenize("This is good good ... Rust rust RUST")
        # Counter({'rust': 3, 'good': 2, 'this': 1, 'is': 1})
    """

    def __init__(self, alphabet_pattern: Union[str, Pattern[str], None] = None) -> None:
        """Initialize the tokenizer.

        Args:
            alphabet_pattern: Regex matching characters *outside* the
                alphabet. Each match is replaced by a space. Defaults to
                anything that is not a letter.
        """
        if alphabet_pattern is None:
            alphabet_pattern = DEFAULT_ALPHABET_PATTERN
        if isinstance(alphabet_pattern, str):
            alphabet_pattern = re.compile(alphabet_pattern)
        self._non_alphabet_re = alphabet_pattern

    @property
    def pattern(self) -> str:
        return self._non_alphabet_re.pattern

    def clean(self, text: str) -> str:
        """Lowercase, replace non-alphabet runs with a space, and trim."""
        if not text:
            return ""
        return self._non_alphabet_re.sub(" ", text.lower()).strip()

    def tokenize(
        self,
        text: str,
        stop_words: Optional[AbstractSet[str]] = None,
    ) -> Counter:
        """Count the words of a text value.

        Args:
            text: Raw feature value.
            stop_words: Optional set of lowercase words to drop.

        Returns:
            Counter of ``{word: occurrences}``.
        """
        words = self.clean(text).split()
        if stop_words:
            words = [w for w in words if w not in stop_words]
        return Counter(words)

    @staticmethod
    def category_token(value: str) -> str:
        """Return the single token a category value stands for."""
        return value.strip()


def load_stop_words(path: Union[str, Path]) -> frozenset[str]:
    """Load a stop-word list from a text file.

    Words may be one per line or whitespace separated. Blank lines and
    lines starting with ``#`` are ignored. Words are lowercased.

    Raises:
        DatasetError: If the file cannot be read.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DatasetError(f"Cannot read stop words from {path}: {e}") from e

    words: set[str] = set()
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        words.update(w.lower() for w in line.split())
    return frozenset(words)
