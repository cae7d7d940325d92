"""Sparse document-term count vectors."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping, Sequence

from .errors import DimensionMismatchError
from .vocabulary import Vocabulary


@dataclass(frozen=True)
class DocumentTermVector:
    """Sparse term counts for one document.

    Only nonzero counts are stored. ``dimension`` is the size of the
    vocabulary the vector was encoded against and ``fingerprint`` identifies
    that vocabulary's index layout.

    Attributes:
        counts: Mapping of vocabulary index to positive count.
        dimension: Length of the (implicit) dense vector.
        fingerprint: :attr:`Vocabulary.fingerprint` of the source vocabulary,
            or ``None`` for hand-built vectors.
    """

    counts: Mapping[int, int]
    dimension: int
    fingerprint: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        counts = {int(i): int(c) for i, c in dict(self.counts).items() if c}
        for index, count in counts.items():
            if not 0 <= index < self.dimension:
                raise DimensionMismatchError(
                    f"Index {index} out of range for dimension {self.dimension}"
                )
            if count < 0:
                raise ValueError(f"Counts must be non-negative, got {count} at index {index}")
        object.__setattr__(self, "counts", counts)

    @property
    def total(self) -> int:
        """Number of in-vocabulary tokens in the document."""
        return sum(self.counts.values())

    @property
    def is_empty(self) -> bool:
        return not self.counts

    def items(self):
        return self.counts.items()

    def to_dense(self) -> list[int]:
        """Expand to a dense list. Intended for inspection of single vectors."""
        dense = [0] * self.dimension
        for index, count in self.counts.items():
            dense[index] = count
        return dense


def encode(tokens: Iterable[str], vocabulary: Vocabulary) -> DocumentTermVector:
    """Count in-vocabulary tokens of one document.

    Out-of-vocabulary tokens are skipped. A document without any known term
    yields an empty vector of the full dimension.

    Args:
        tokens: Normalized tokens of one document.
        vocabulary: Fixed training vocabulary.

    Returns:
        Sparse count vector over ``vocabulary``.
    """
    counts: Counter[int] = Counter()
    for token in tokens:
        index = vocabulary.index_of(token)
        if index is not None:
            counts[index] += 1
    return DocumentTermVector(
        counts=counts,
        dimension=len(vocabulary),
        fingerprint=vocabulary.fingerprint,
    )


def encode_corpus(
    token_sequences: Iterable[Sequence[str]],
    vocabulary: Vocabulary,
) -> Iterator[DocumentTermVector]:
    """Lazily encode a stream of token sequences."""
    for tokens in token_sequences:
        yield encode(tokens, vocabulary)


def check_compatible(vector: DocumentTermVector, vocabulary: Vocabulary) -> None:
    """Ensure ``vector`` was encoded against ``vocabulary``.

    Raises:
        DimensionMismatchError: If the dimension differs, or both sides carry
            a fingerprint and the fingerprints differ.
    """
    if vector.dimension != len(vocabulary):
        raise DimensionMismatchError(
            f"Vector dimension {vector.dimension} does not match "
            f"vocabulary size {len(vocabulary)}"
        )
    if vector.fingerprint is not None and vector.fingerprint != vocabulary.fingerprint:
        raise DimensionMismatchError(
            "Vector was encoded against a different vocabulary "
            f"(fingerprint {vector.fingerprint[:12]} != {vocabulary.fingerprint[:12]})"
        )
