"""Training vocabulary construction with document-frequency pruning."""

from __future__ import annotations

import hashlib
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from .errors import DimensionMismatchError, EmptyVocabularyError, InvalidConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Immutable, index-assigned term set.

    Terms are stored in lexicographic order and indexed by position, so two
    vocabularies with the same terms always agree on indexing.

    Attributes:
        terms: Ordered terms; ``terms[i]`` has index ``i``.
    """

    terms: tuple[str, ...]
    _index: dict[str, int] = field(init=False, repr=False, compare=False)
    _fingerprint: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        terms = tuple(self.terms)
        if list(terms) != sorted(set(terms)):
            raise DimensionMismatchError(
                "Vocabulary terms must be unique and lexicographically sorted"
            )
        object.__setattr__(self, "terms", terms)
        object.__setattr__(self, "_index", {term: i for i, term in enumerate(terms)})
        digest = hashlib.sha1("\n".join(terms).encode("utf-8")).hexdigest()
        object.__setattr__(self, "_fingerprint", digest)

    @classmethod
    def from_terms(cls, terms: Iterable[str]) -> "Vocabulary":
        """Build a vocabulary from an unordered collection of terms."""
        return cls(tuple(sorted(set(terms))))

    @property
    def fingerprint(self) -> str:
        """SHA-1 digest of the ordered terms; identifies the index layout."""
        return self._fingerprint

    def index_of(self, term: str) -> Optional[int]:
        """Return the index of ``term``, or ``None`` if it is out of vocabulary."""
        return self._index.get(term)

    def __contains__(self, term: object) -> bool:
        return term in self._index

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self.terms)

    def __getitem__(self, index: int) -> str:
        return self.terms[index]

    def to_list(self) -> list[str]:
        return list(self.terms)


def document_frequencies(token_sequences: Iterable[Sequence[str]]) -> tuple[Counter[str], int]:
    """Count, per term, how many documents contain it at least once.

    Returns:
        Tuple of (document frequency counter, number of documents seen).
    """
    doc_freq: Counter[str] = Counter()
    n_docs = 0
    for tokens in token_sequences:
        n_docs += 1
        doc_freq.update(set(tokens))
    return doc_freq, n_docs


def build_vocabulary(
    token_sequences: Iterable[Sequence[str]],
    min_doc_frequency_fraction: float = 0.01,
) -> Vocabulary:
    """Derive a pruned vocabulary from tokenized training documents.

    A term is kept when the fraction of training documents containing it is
    at least ``min_doc_frequency_fraction``. The input is consumed once, so a
    generator of token lists works.

    Args:
        token_sequences: One token sequence per training document.
        min_doc_frequency_fraction: Pruning threshold in ``[0, 1]``.

    Returns:
        The surviving terms as a :class:`Vocabulary`.

    Raises:
        InvalidConfigError: If the threshold is outside ``[0, 1]``.
        EmptyVocabularyError: If no term survives pruning.
    """
    if not 0.0 <= min_doc_frequency_fraction <= 1.0:
        raise InvalidConfigError(
            f"min_doc_frequency_fraction must be in [0, 1], got {min_doc_frequency_fraction!r}"
        )

    doc_freq, n_docs = document_frequencies(token_sequences)
    if n_docs == 0:
        raise EmptyVocabularyError("Cannot build a vocabulary from an empty corpus")

    kept = [term for term, df in doc_freq.items() if df / n_docs >= min_doc_frequency_fraction]
    if not kept:
        raise EmptyVocabularyError(
            f"All {len(doc_freq)} terms fall below min_doc_frequency_fraction="
            f"{min_doc_frequency_fraction} across {n_docs} documents"
        )

    vocabulary = Vocabulary.from_terms(kept)
    logger.info(
        "Built vocabulary of %d terms (%d pruned) from %d documents",
        len(vocabulary), len(doc_freq) - len(vocabulary), n_docs,
    )
    return vocabulary
