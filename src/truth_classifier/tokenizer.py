"""Text normalization and tokenization.

Turns raw statement text into an ordered multiset of normalized tokens.
Processing runs in a fixed order:

1. Lowercasing
2. Removal of punctuation/symbol characters and numeric-only substrings
3. Whitespace splitting
4. Stopword filtering
5. Reduction to a root form: WordNet lemmatization, Porter stemming,
   or both (lemma first), depending on :class:`NormalizationMode`

Token order and repetition are preserved since downstream counts are
multinomial.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Iterable, Iterator, Optional, Protocol

from nltk.stem import PorterStemmer, WordNetLemmatizer

from .config import STOP_WORDS, NormalizationMode, PipelineConfig

logger = logging.getLogger(__name__)

__all__ = [
    "STOP_WORDS",
    "Tokenizer",
    "ensure_nltk_data",
    "strip_text",
    "tokenize",
]

_NUMERIC_RE = re.compile(r"\b\d+\b")
_WHITESPACE_RE = re.compile(r"\s+")


class Lemmatizer(Protocol):
    def lemmatize(self, word: str) -> str: ...


class Stemmer(Protocol):
    def stem(self, word: str) -> str: ...


def ensure_nltk_data(quiet: bool = True) -> None:
    """Download the WordNet corpus used for lemmatization if it is missing."""
    import nltk

    for resource, package in (("corpora/wordnet", "wordnet"), ("corpora/omw-1.4", "omw-1.4")):
        try:
            nltk.data.find(resource)
        except LookupError:
            logger.info("Downloading NLTK resource %s", package)
            nltk.download(package, quiet=quiet)


def strip_text(text: str) -> str:
    """Lowercase text and remove punctuation, symbols and bare numbers.

    Punctuation is deleted rather than replaced, so ``"don't"`` becomes
    ``"dont"`` and ``"U.S."`` becomes ``"us"``. Numeric-only runs such as
    ``"2016"`` are blanked; mixed tokens like ``"covid19"`` are kept.
    """
    text = text.lower()
    text = "".join(
        ch for ch in text if not unicodedata.category(ch).startswith(("P", "S"))
    )
    return _NUMERIC_RE.sub(" ", text)


class Tokenizer:
    """Configurable tokenizer producing normalized word tokens.

    Reductions are memoized per instance; a tokenizer is safe to share
    between threads since the cache only ever grows with identical values.

    Example::

        tokenizer = Tokenizer(PipelineConfig(normalization_mode="stem_only"))
        tokens = tokenizer.tokenize("The senators were voting against it")

    Args:
        config: Pipeline options (stopwords and normalization mode are used).
        lemmatizer: Object with a ``lemmatize(word)`` method. Defaults to
            NLTK's WordNet lemmatizer, which needs the ``wordnet`` corpus.
        stemmer: Object with a ``stem(word)`` method. Defaults to NLTK's
            Porter stemmer.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        lemmatizer: Optional[Lemmatizer] = None,
        stemmer: Optional[Stemmer] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.mode = self.config.normalization_mode
        self._lemmatizer = lemmatizer
        self._stemmer = stemmer
        # Stopwords go through the same stripping as text so "don't" matches "dont"
        self._stopwords = frozenset(
            w for word in self.config.stopwords for w in strip_text(word).split()
        )
        self._cache: dict[str, str] = {}

    @property
    def lemmatizer(self) -> Lemmatizer:
        if self._lemmatizer is None:
            self._lemmatizer = WordNetLemmatizer()
        return self._lemmatizer

    @property
    def stemmer(self) -> Stemmer:
        if self._stemmer is None:
            self._stemmer = PorterStemmer()
        return self._stemmer

    def tokenize(self, text: str) -> list[str]:
        """Tokenize one document.

        Args:
            text: Raw document text. Empty input yields an empty list.

        Returns:
            Normalized tokens in document order, repeats included.
        """
        if not text:
            return []

        tokens: list[str] = []
        for word in _WHITESPACE_RE.split(strip_text(text)):
            if not word or word in self._stopwords:
                continue
            reduced = self.reduce(word)
            if reduced:
                tokens.append(reduced)
        return tokens

    def tokenize_many(self, texts: Iterable[str]) -> Iterator[list[str]]:
        """Lazily tokenize a stream of documents."""
        for text in texts:
            yield self.tokenize(text)

    def reduce(self, word: str) -> str:
        """Reduce a single stripped, lowercase word to its root form."""
        cached = self._cache.get(word)
        if cached is not None:
            return cached

        root = word
        if self.mode.lemmatizes:
            root = self.lemmatizer.lemmatize(root)
        if self.mode.stems and root:
            root = self.stemmer.stem(root)

        self._cache[word] = root
        return root


def tokenize(text: str, config: Optional[PipelineConfig] = None) -> list[str]:
    """Tokenize text with a one-off :class:`Tokenizer`.

    Prefer building a :class:`Tokenizer` once when processing a corpus,
    since reductions are cached per instance.
    """
    return Tokenizer(config).tokenize(text)
