"""Labeled corpus loading and seeded partitioning.

Reads delimited flat files such as the LIAR statement dataset, where each
row holds a label column and one or more text columns. The text columns
of a row form one :class:`Document`.
"""

from __future__ import annotations

import csv
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Hashable, Iterator, Sequence, Union

logger = logging.getLogger(__name__)

# LIAR layout: id, label, statement, subject(s), speaker, ...
LIAR_LABEL_COLUMN = 1
LIAR_TEXT_COLUMNS = (2,)

Column = Union[int, str]


@dataclass(frozen=True)
class Document:
    """One unit of input text: an ordered list of raw text fields."""

    fields: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "Document":
        return cls((text,))

    @property
    def text(self) -> str:
        """The fields joined by single spaces, empty fields skipped."""
        return " ".join(f for f in self.fields if f)

    def __str__(self) -> str:
        return self.text


def as_text(document: Union[Document, str]) -> str:
    """Accept either a :class:`Document` or a plain string."""
    if isinstance(document, Document):
        return document.text
    return document


@dataclass
class LabeledCorpus:
    """Parallel lists of documents and their class labels."""

    documents: list[Document] = field(default_factory=list)
    labels: list[Hashable] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.documents) != len(self.labels):
            raise ValueError(
                f"documents ({len(self.documents)}) and labels ({len(self.labels)}) "
                "must have same length"
            )

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[tuple[Document, Hashable]]:
        return iter(zip(self.documents, self.labels))

    @property
    def texts(self) -> list[str]:
        return [doc.text for doc in self.documents]

    def subset(self, indices: Sequence[int]) -> "LabeledCorpus":
        return LabeledCorpus(
            documents=[self.documents[i] for i in indices],
            labels=[self.labels[i] for i in indices],
        )


def _resolve_column(column: Column, header: list[str] | None) -> int:
    if isinstance(column, int):
        return column
    if header is None:
        raise ValueError(f"Column name {column!r} requires has_header=True")
    try:
        return header.index(column)
    except ValueError:
        raise ValueError(f"Column {column!r} not found in header {header}") from None


def load_tsv(
    path: Union[str, Path],
    label_column: Column = LIAR_LABEL_COLUMN,
    text_columns: Sequence[Column] = LIAR_TEXT_COLUMNS,
    delimiter: str = "\t",
    has_header: bool = False,
    encoding: str = "utf-8",
) -> LabeledCorpus:
    """Load a labeled corpus from a delimited text file.

    Args:
        path: File to read.
        label_column: Index (or header name) of the label column.
        text_columns: Indices (or header names) of the text fields, in the
            order they are concatenated.
        delimiter: Field separator.
        has_header: Whether the first row names the columns.
        encoding: File encoding.

    Returns:
        LabeledCorpus with one document per non-blank row.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If a row lacks the label column or a column name is unknown.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")
    if not text_columns:
        raise ValueError("At least one text column is required")

    corpus = LabeledCorpus()
    with open(path, "r", encoding=encoding, newline="") as f:
        reader = csv.reader(f, delimiter=delimiter, quoting=csv.QUOTE_NONE)
        header = next(reader, None) if has_header else None
        label_idx = _resolve_column(label_column, header)
        text_idx = [_resolve_column(c, header) for c in text_columns]

        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if label_idx >= len(row) or not row[label_idx].strip():
                raise ValueError(
                    f"{path.name}:{reader.line_num}: missing label in column {label_column!r}"
                )
            fields = tuple(row[i].strip() if i < len(row) else "" for i in text_idx)
            corpus.documents.append(Document(fields))
            corpus.labels.append(row[label_idx].strip())

    logger.info("Loaded %d labeled documents from %s", len(corpus), path)
    return corpus


def train_test_split(
    corpus: LabeledCorpus,
    test_fraction: float = 0.2,
    seed: int = 42,
) -> tuple[LabeledCorpus, LabeledCorpus]:
    """Shuffle and split a corpus with an explicit seed.

    Args:
        corpus: Corpus to split.
        test_fraction: Fraction of documents placed in the test split.
        seed: Seed for a private ``random.Random`` instance.

    Returns:
        Tuple of (train, test) corpora.
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction!r}")

    indices = list(range(len(corpus)))
    random.Random(seed).shuffle(indices)
    n_test = int(round(len(indices) * test_fraction))
    test_idx = sorted(indices[:n_test])
    train_idx = sorted(indices[n_test:])
    return corpus.subset(train_idx), corpus.subset(test_idx)
