"""Pipeline configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Hashable, Mapping, Optional

from .errors import InvalidConfigError

# English stopwords removed before lemmatization
STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "not", "no", "nor", "so", "if", "then", "than", "that", "this",
    "these", "those", "it", "its", "he", "she", "they", "them", "their",
    "his", "her", "our", "your", "we", "you", "who", "whom", "which",
    "what", "where", "when", "how", "all", "each", "every", "both",
    "few", "more", "most", "other", "some", "such", "any", "only",
    "own", "same", "too", "very", "just", "about", "above", "after",
    "again", "also", "because", "before", "between", "during", "into",
    "through", "under", "until", "up", "out", "over", "here", "there",
    "i", "me", "my", "am", "him", "hers", "theirs", "ours",
    "yours", "itself", "himself", "herself", "themselves", "while",
    "whose", "why", "don't", "doesn't", "didn't", "it's",
})

# Tolerance used when checking that probabilities sum to one
PROBABILITY_TOLERANCE = 1e-9


class NormalizationMode(str, Enum):
    """How surviving tokens are reduced to their root form."""

    LEMMATIZE_THEN_STEM = "lemmatize_then_stem"
    STEM_ONLY = "stem_only"
    LEMMATIZE_ONLY = "lemmatize_only"

    @property
    def lemmatizes(self) -> bool:
        return self in (NormalizationMode.LEMMATIZE_THEN_STEM, NormalizationMode.LEMMATIZE_ONLY)

    @property
    def stems(self) -> bool:
        return self in (NormalizationMode.LEMMATIZE_THEN_STEM, NormalizationMode.STEM_ONLY)


def validate_prior(prior: Mapping[Hashable, float]) -> None:
    """Check that an explicit prior is a probability distribution.

    Raises:
        InvalidConfigError: If the prior is empty, has values outside
            ``[0, 1]``, or does not sum to one.
    """
    if not prior:
        raise InvalidConfigError("prior_override must name at least one class")
    for label, value in prior.items():
        if not isinstance(value, (int, float)) or math.isnan(value) or not 0.0 <= value <= 1.0:
            raise InvalidConfigError(
                f"prior_override[{label!r}] must be a probability in [0, 1], got {value!r}"
            )
    total = math.fsum(prior.values())
    if abs(total - 1.0) > PROBABILITY_TOLERANCE:
        raise InvalidConfigError(f"prior_override must sum to 1, got {total!r}")


@dataclass(frozen=True)
class PipelineConfig:
    """Options controlling tokenization, vocabulary pruning and smoothing.

    Instances are immutable so a trained model always tokenizes with the
    settings it was fit on.

    Args:
        stopwords: Terms removed during tokenization.
        min_doc_frequency_fraction: Terms found in a smaller fraction of
            training documents than this are pruned from the vocabulary.
        laplace_alpha: Additive smoothing constant (``0`` disables smoothing).
        prior_override: Optional explicit class prior; must sum to one and
            cover exactly the classes seen in training.
        normalization_mode: Token reduction strategy.

    Raises:
        InvalidConfigError: On any out-of-range value.
    """

    stopwords: frozenset[str] = STOP_WORDS
    min_doc_frequency_fraction: float = 0.01
    laplace_alpha: float = 1.0
    prior_override: Optional[Mapping[Hashable, float]] = field(default=None, hash=False)
    normalization_mode: NormalizationMode = NormalizationMode.LEMMATIZE_THEN_STEM

    def __post_init__(self) -> None:
        object.__setattr__(self, "stopwords", frozenset(self.stopwords))
        try:
            object.__setattr__(
                self, "normalization_mode", NormalizationMode(self.normalization_mode)
            )
        except ValueError:
            valid = ", ".join(m.value for m in NormalizationMode)
            raise InvalidConfigError(
                f"Unknown normalization_mode {self.normalization_mode!r}. Expected one of: {valid}"
            ) from None

        fraction = self.min_doc_frequency_fraction
        if not isinstance(fraction, (int, float)) or math.isnan(fraction) or not 0.0 <= fraction <= 1.0:
            raise InvalidConfigError(
                f"min_doc_frequency_fraction must be in [0, 1], got {fraction!r}"
            )

        alpha = self.laplace_alpha
        if not isinstance(alpha, (int, float)) or math.isnan(alpha) or math.isinf(alpha) or alpha < 0:
            raise InvalidConfigError(f"laplace_alpha must be a finite number >= 0, got {alpha!r}")

        if self.prior_override is not None:
            prior = dict(self.prior_override)
            validate_prior(prior)
            object.__setattr__(self, "prior_override", MappingProxyType(prior))

    def to_dict(self) -> dict:
        return {
            "stopwords": sorted(self.stopwords),
            "min_doc_frequency_fraction": self.min_doc_frequency_fraction,
            "laplace_alpha": self.laplace_alpha,
            "prior_override": (
                [[label, p] for label, p in self.prior_override.items()]
                if self.prior_override is not None
                else None
            ),
            "normalization_mode": self.normalization_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        """Rebuild a config from :meth:`to_dict` output.

        Missing keys fall back to their defaults.
        """
        prior = data.get("prior_override")
        return cls(
            stopwords=frozenset(data.get("stopwords", STOP_WORDS)),
            min_doc_frequency_fraction=data.get("min_doc_frequency_fraction", 0.01),
            laplace_alpha=data.get("laplace_alpha", 1.0),
            prior_override={label: p for label, p in prior} if prior is not None else None,
            normalization_mode=data.get(
                "normalization_mode", NormalizationMode.LEMMATIZE_THEN_STEM.value
            ),
        )
