"""Loaders for labeled datasets stored as plain text or delimited files.

Two layouts are supported:

- *labeled text*: one example per line, ``<label> <free text>``, as in
  the 20 newsgroups and spam corpora. Each line becomes a single text
  feature.
- *delimited*: CSV-like rows whose columns are described by a schema,
  as in the UCI adult dataset. One column holds the label.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Union

from loguru import logger

from .errors import DatasetError
from .models import Feature, FeatureType, LabeledExample

MISSING_VALUE = "?"


def load_labeled_text(
    path: Union[str, Path],
    feature_name: str = "text",
) -> list[LabeledExample]:
    """Load ``<label> <text>`` lines.

    Blank lines are skipped. A line with a label but no text yields an
    example with an empty text feature.

    Raises:
        DatasetError: If the file cannot be read.
    """
    path = Path(path)
    examples: list[LabeledExample] = []
    for line in _read_lines(path):
        line = line.strip()
        if not line:
            continue
        label, _, text = line.partition(" ")
        examples.append((label, [Feature.text(feature_name, text)]))
    return examples


def parse_schema(spec: str) -> list[tuple[str, FeatureType]]:
    """Parse ``"name:kind,name:kind"`` into column definitions.

    Kinds are ``text``, ``category`` or ``gaussian`` (case-insensitive).

    Raises:
        DatasetError: On an empty schema or an unknown kind.
    """
    columns: list[tuple[str, FeatureType]] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, kind = part.rpartition(":")
        if not sep or not name.strip():
            raise DatasetError(f"Schema entry must look like 'name:kind', got {part!r}")
        try:
            columns.append((name.strip(), FeatureType(kind.strip().lower())))
        except ValueError:
            raise DatasetError(
                f"Unknown feature kind {kind!r} for column {name!r}. "
                f"Known: {[t.value for t in FeatureType]}"
            ) from None
    if not columns:
        raise DatasetError("Schema is empty")
    return columns


def load_delimited(
    path: Union[str, Path],
    schema: list[tuple[str, FeatureType]],
    label_column: int = -1,
    delimiter: str = ",",
) -> list[LabeledExample]:
    """Load delimited rows described by ``schema``.

    Fields are stripped. Fields equal to ``?`` are treated as missing and
    left out of the example. A trailing ``.`` on the label is removed.
    Rows whose width is not ``len(schema) + 1`` are skipped with a
    warning.

    Args:
        path: File to read.
        schema: Column names and kinds, in order, excluding the label.
        label_column: Index of the label column (negative from the end).
        delimiter: Field separator.

    Raises:
        DatasetError: If the file cannot be read.
    """
    path = Path(path)
    width = len(schema) + 1
    examples: list[LabeledExample] = []
    skipped = 0

    for row_number, row in enumerate(csv.reader(_read_lines(path), delimiter=delimiter), 1):
        if not row or not any(field.strip() for field in row):
            continue
        if len(row) != width:
            skipped += 1
            logger.warning(
                "{}:{}: expected {} fields, got {}; row skipped", path, row_number, width, len(row)
            )
            continue

        fields = [field.strip() for field in row]
        label = fields.pop(label_column).rstrip(".")
        features = [
            Feature(kind, name, value)
            for (name, kind), value in zip(schema, fields)
            if value != MISSING_VALUE
        ]
        examples.append((label, features))

    if skipped:
        logger.info("Loaded {} rows from {} ({} skipped)", len(examples), path, skipped)
    return examples


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        raise DatasetError(f"Cannot read dataset {path}: {e}") from e
