"""Multinomial Naive Bayes over sparse term counts.

Training aggregates per-class term totals, applies additive (Laplace)
smoothing, and stores everything in log space:

    P(t|c) = (T_ct + alpha) / (sum_t' T_ct' + alpha * |V|)

Scoring a document is then a sum instead of a product of small
probabilities:

    score(c) = log P(c) + sum_t count_t * log P(t|c)

All learned parameters live on an immutable :class:`Model`; prediction
never mutates it, so one model can serve any number of threads.
"""

from __future__ import annotations

import logging
import math
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Hashable, Iterable, Optional, Sequence

from .config import PROBABILITY_TOLERANCE, PipelineConfig, validate_prior
from .encoder import DocumentTermVector, check_compatible
from .errors import DimensionMismatchError, InvalidConfigError, UntrainedModelError
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)

Label = Hashable


def class_order_key(label: Label) -> tuple[str, Label]:
    """Total order over class labels used for ordering and tie-breaking."""
    return (type(label).__name__, label)


def _log(value: float) -> float:
    return math.log(value) if value > 0 else float("-inf")


def _dump_log(value: float) -> Optional[float]:
    # JSON has no infinity; log(0) is written as null
    return None if value == float("-inf") else value


def _load_log(value: Optional[float]) -> float:
    return float("-inf") if value is None else float(value)



# ---------------------------------------------------------------------------
# Per-class term totals (map-reduce unit)
# ---------------------------------------------------------------------------

@dataclass
class ClassTermTotals:
    """Running per-class term counts ``T_ct`` and per-class document counts.

    Partial totals can be built independently (one per worker or per
    corpus shard) and combined with :meth:`merge`; merging is associative
    and commutative, so the result never depends on how the corpus was
    split.

    Args:
        dimension: Vocabulary size the vectors are encoded against.
        fingerprint: Optional vocabulary fingerprint to enforce on ``add``.
    """

    dimension: int
    fingerprint: Optional[str] = None
    term_totals: dict[Label, Counter[int]] = field(
        default_factory=lambda: defaultdict(Counter), repr=False
    )
    doc_counts: Counter[Label] = field(default_factory=Counter)

    def add(self, vector: DocumentTermVector, label: Label) -> None:
        """Accumulate one labeled document."""
        if vector.dimension != self.dimension:
            raise DimensionMismatchError(
                f"Vector dimension {vector.dimension} does not match {self.dimension}"
            )
        if (
            self.fingerprint is not None
            and vector.fingerprint is not None
            and vector.fingerprint != self.fingerprint
        ):
            raise DimensionMismatchError("Vector was encoded against a different vocabulary")
        self.doc_counts[label] += 1
        self.term_totals[label].update(vector.counts)

    def merge(self, other: "ClassTermTotals") -> "ClassTermTotals":
        """Return a new object holding the sum of ``self`` and ``other``."""
        if other.dimension != self.dimension:
            raise DimensionMismatchError(
                f"Cannot merge totals of dimension {self.dimension} and {other.dimension}"
            )
        if (
            self.fingerprint is not None
            and other.fingerprint is not None
            and self.fingerprint != other.fingerprint
        ):
            raise DimensionMismatchError("Cannot merge totals built on different vocabularies")

        merged = ClassTermTotals(self.dimension, self.fingerprint or other.fingerprint)
        for source in (self, other):
            merged.doc_counts.update(source.doc_counts)
            for label, totals in source.term_totals.items():
                merged.term_totals[label].update(totals)
        return merged

    __add__ = merge

    @property
    def classes(self) -> tuple[Label, ...]:
        return tuple(sorted(self.doc_counts, key=class_order_key))

    @property
    def n_documents(self) -> int:
        return sum(self.doc_counts.values())

    def class_total(self, label: Label) -> int:
        """Total in-vocabulary token count for ``label`` (``sum_t T_ct``)."""
        return sum(self.term_totals.get(label, Counter()).values())


# ---------------------------------------------------------------------------
# Trained model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Model:
    """Trained multinomial Naive Bayes parameters.

    A ``Model()`` built without arguments is untrained; :func:`fit` is the
    only producer of trained models.

    Attributes:
        vocabulary: Vocabulary the model was fit on.
        classes: Class labels in fixed order.
        class_log_prior: ``log P(c)``, aligned with ``classes``.
        feature_log_prob: One row per class of ``log P(t|c)``, aligned with
            vocabulary indices.
        alpha: Smoothing constant used during training.
        config: Pipeline configuration used to tokenize training text, if
            the model was built from raw documents.
    """

    vocabulary: Optional[Vocabulary] = None
    classes: tuple[Label, ...] = ()
    class_log_prior: tuple[float, ...] = ()
    feature_log_prob: tuple[tuple[float, ...], ...] = field(default=(), repr=False)
    alpha: float = 1.0
    config: Optional[PipelineConfig] = field(default=None, compare=False)

    @property
    def is_trained(self) -> bool:
        return bool(self.classes) and self.vocabulary is not None

    def class_index(self, label: Label) -> int:
        try:
            return self.classes.index(label)
        except ValueError:
            raise ValueError(f"Unknown class: {label!r}. Known: {list(self.classes)}") from None

    def prior(self, label: Label) -> float:
        return math.exp(self.class_log_prior[self.class_index(label)])

    def log_likelihood(self, term: str, label: Label) -> float:
        """Return ``log P(term|label)``.

        Raises:
            KeyError: If ``term`` is not in the vocabulary.
        """
        self._require_trained()
        index = self.vocabulary.index_of(term)
        if index is None:
            raise KeyError(term)
        return self.feature_log_prob[self.class_index(label)][index]

    def likelihood(self, term: str, label: Label) -> float:
        return math.exp(self.log_likelihood(term, label))

    def with_config(self, config: PipelineConfig) -> "Model":
        """Return a copy carrying ``config``."""
        return Model(
            vocabulary=self.vocabulary,
            classes=self.classes,
            class_log_prior=self.class_log_prior,
            feature_log_prob=self.feature_log_prob,
            alpha=self.alpha,
            config=config,
        )

    def _require_trained(self) -> None:
        if not self.is_trained:
            raise UntrainedModelError("Model has not been fitted. Call fit() first.")

    def most_informative_features(
        self,
        label: Label,
        top_n: int = 20,
    ) -> list[tuple[str, float]]:
        """Return the terms most indicative of ``label``.

        Measures how much more likely a term is under the target class
        compared to the average log-likelihood under all other classes.

        Args:
            label: Target class.
            top_n: Number of terms to return.

        Returns:
            List of (term, log_likelihood_ratio) tuples, sorted by
            discriminative power (descending).
        """
        self._require_trained()
        target = self.feature_log_prob[self.class_index(label)]
        others = [row for cls, row in zip(self.classes, self.feature_log_prob) if cls != label]

        if not others:
            ranked = sorted(zip(self.vocabulary, target), key=lambda x: x[1], reverse=True)
            return ranked[:top_n]

        ratios: list[tuple[str, float]] = []
        for index, term in enumerate(self.vocabulary):
            avg_other = sum(row[index] for row in others) / len(others)
            ratios.append((term, target[index] - avg_other))

        ratios.sort(key=lambda x: x[1], reverse=True)
        return ratios[:top_n]

    def to_dict(self) -> dict:
        """Serialize model parameters."""
        self._require_trained()
        return {
            "vocabulary": self.vocabulary.to_list(),
            "classes": list(self.classes),
            "class_log_prior": [_dump_log(p) for p in self.class_log_prior],
            "feature_log_prob": [[_dump_log(p) for p in row] for row in self.feature_log_prob],
            "alpha": self.alpha,
            "config": self.config.to_dict() if self.config is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Model":
        """Deserialize a model from :meth:`to_dict` output."""
        vocabulary = Vocabulary(tuple(data["vocabulary"]))
        classes = tuple(data["classes"])
        priors = tuple(_load_log(p) for p in data["class_log_prior"])
        table = tuple(tuple(_load_log(p) for p in row) for row in data["feature_log_prob"])

        if len(priors) != len(classes) or len(table) != len(classes):
            raise DimensionMismatchError("Serialized model has inconsistent class tables")
        if any(len(row) != len(vocabulary) for row in table):
            raise DimensionMismatchError("Serialized likelihood rows do not match vocabulary size")

        config = data.get("config")
        return cls(
            vocabulary=vocabulary,
            classes=classes,
            class_log_prior=priors,
            feature_log_prob=table,
            alpha=float(data["alpha"]),
            config=PipelineConfig.from_dict(config) if config is not None else None,
        )


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------

def fit(
    vectors: Sequence[DocumentTermVector],
    labels: Sequence[Label],
    vocabulary: Vocabulary,
    alpha: float = 1.0,
    prior_override: Optional[dict[Label, float]] = None,
) -> Model:
    """Train a multinomial Naive Bayes model.

    Args:
        vectors: Encoded training documents.
        labels: Class label per document (same length as ``vectors``).
        vocabulary: Vocabulary the vectors were encoded against.
        alpha: Additive smoothing constant, ``>= 0``. With ``alpha == 0``
            any term unseen in a class gets probability exactly zero.
        prior_override: Optional explicit class prior covering exactly the
            classes found in ``labels``.

    Returns:
        A trained :class:`Model`.

    Raises:
        DimensionMismatchError: If lengths differ, the corpus is empty, or a
            vector was not encoded against ``vocabulary``.
        InvalidConfigError: For a negative alpha or a malformed prior, or
            when ``alpha == 0`` and some class has no in-vocabulary terms.
    """
    if len(vectors) != len(labels):
        raise DimensionMismatchError(
            f"vectors ({len(vectors)}) and labels ({len(labels)}) must have same length"
        )
    if len(vectors) == 0:
        raise DimensionMismatchError("Cannot fit on an empty training set")
    if math.isnan(alpha) or math.isinf(alpha) or alpha < 0:
        raise InvalidConfigError(f"alpha must be a finite number >= 0, got {alpha!r}")

    classes = tuple(sorted(set(labels), key=class_order_key))
    if prior_override is not None:
        validate_prior(prior_override)
        if set(prior_override) != set(classes):
            raise InvalidConfigError(
                f"prior_override classes {sorted(prior_override, key=class_order_key)} "
                f"do not match training classes {list(classes)}"
            )

    for vector in vectors:
        check_compatible(vector, vocabulary)

    totals = ClassTermTotals(len(vocabulary), vocabulary.fingerprint)
    for vector, label in zip(vectors, labels):
        totals.add(vector, label)

    return fit_from_totals(totals, vocabulary, alpha=alpha, prior_override=prior_override)


def fit_from_totals(
    totals: ClassTermTotals,
    vocabulary: Vocabulary,
    alpha: float = 1.0,
    prior_override: Optional[dict[Label, float]] = None,
) -> Model:
    """Build a model from pre-aggregated :class:`ClassTermTotals`.

    This is the reduce step when totals were accumulated in parallel.
    """
    if totals.dimension != len(vocabulary):
        raise DimensionMismatchError(
            f"Totals dimension {totals.dimension} does not match vocabulary size {len(vocabulary)}"
        )
    if totals.fingerprint is not None and totals.fingerprint != vocabulary.fingerprint:
        raise DimensionMismatchError("Totals were built on a different vocabulary")
    if totals.n_documents == 0:
        raise DimensionMismatchError("Cannot fit on an empty training set")
    if math.isnan(alpha) or math.isinf(alpha) or alpha < 0:
        raise InvalidConfigError(f"alpha must be a finite number >= 0, got {alpha!r}")

    classes = totals.classes
    vocab_size = len(vocabulary)

    if prior_override is not None:
        validate_prior(prior_override)
        if set(prior_override) != set(classes):
            raise InvalidConfigError(
                f"prior_override classes do not match training classes {list(classes)}"
            )
        log_prior = tuple(_log(prior_override[cls]) for cls in classes)
    else:
        n_total = totals.n_documents
        log_prior = tuple(math.log(totals.doc_counts[cls] / n_total) for cls in classes)

    rows: list[tuple[float, ...]] = []
    for cls in classes:
        class_counts = totals.term_totals.get(cls, Counter())
        denominator = totals.class_total(cls) + alpha * vocab_size
        if denominator <= 0:
            raise InvalidConfigError(
                f"Class {cls!r} has no in-vocabulary terms; alpha must be > 0 to estimate it"
            )
        log_denominator = math.log(denominator)
        rows.append(tuple(
            _log(class_counts.get(index, 0) + alpha) - log_denominator
            for index in range(vocab_size)
        ))

    logger.info(
        "Trained Naive Bayes model: %d classes, %d terms, %d documents, alpha=%s",
        len(classes), vocab_size, totals.n_documents, alpha,
    )
    for cls, row in zip(classes, rows):
        mass = math.fsum(math.exp(lp) for lp in row)
        if abs(mass - 1.0) > PROBABILITY_TOLERANCE:
            logger.warning("Likelihood row for class %r sums to %r", cls, mass)

    return Model(
        vocabulary=vocabulary,
        classes=classes,
        class_log_prior=log_prior,
        feature_log_prob=tuple(rows),
        alpha=alpha,
    )


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PredictionResult:
    """Outcome of scoring one document.

    Attributes:
        label: Arg-max class.
        scores: Unnormalized log posterior per class, in model class order.
    """

    label: Label
    scores: dict[Label, float]

    @property
    def probabilities(self) -> dict[Label, float]:
        """Normalized posterior probabilities (log-sum-exp)."""
        max_score = max(self.scores.values())
        if max_score == float("-inf"):
            uniform = 1.0 / len(self.scores)
            return {cls: uniform for cls in self.scores}
        exp_scores = {cls: math.exp(s - max_score) for cls, s in self.scores.items()}
        total = sum(exp_scores.values())
        return {cls: score / total for cls, score in exp_scores.items()}

    @property
    def confidence(self) -> float:
        return self.probabilities[self.label]

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "confidence": round(self.confidence, 4),
            "scores": [[cls, _dump_log(score)] for cls, score in self.scores.items()],
        }


def log_scores(model: Model, vector: DocumentTermVector) -> dict[Label, float]:
    """Compute unnormalized log posterior scores for each class."""
    if model is None or not model.is_trained:
        raise UntrainedModelError("Model has not been fitted. Call fit() first.")
    check_compatible(vector, model.vocabulary)

    scores: dict[Label, float] = {}
    for cls, prior, row in zip(model.classes, model.class_log_prior, model.feature_log_prob):
        score = prior
        for index, count in vector.counts.items():
            score += count * row[index]
        scores[cls] = score
    return scores


def predict(model: Model, vector: DocumentTermVector) -> PredictionResult:
    """Predict the class of one encoded document.

    Ties are broken in favour of the class that comes first in the model's
    class order. An empty vector scores by the priors alone.

    Raises:
        UntrainedModelError: If ``model`` was never fitted.
        DimensionMismatchError: If ``vector`` does not match the model's
            vocabulary.
    """
    scores = log_scores(model, vector)
    best_label = model.classes[0]
    best_score = scores[best_label]
    for cls in model.classes[1:]:
        if scores[cls] > best_score:
            best_label, best_score = cls, scores[cls]
    return PredictionResult(label=best_label, scores=scores)


def predict_batch(
    model: Model,
    vectors: Iterable[DocumentTermVector],
    workers: Optional[int] = None,
) -> list[PredictionResult]:
    """Predict classes for many encoded documents.

    Each document is scored independently. With ``workers > 1`` scoring
    runs on a thread pool; results keep input order.
    """
    if model is None or not model.is_trained:
        raise UntrainedModelError("Model has not been fitted. Call fit() first.")
    if workers is None or workers <= 1:
        return [predict(model, vec) for vec in vectors]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda vec: predict(model, vec), vectors))
