"""Document-level classification pipeline.

Chains tokenization, vocabulary construction, encoding and Naive Bayes
training behind a document-in, label-out interface, plus JSON model
persistence and cross-validation.

Example::

    model = fit(statements, labels, PipelineConfig(laplace_alpha=1.0))
    result = predict(model, "Says the unemployment rate doubled last year.")
    print(result.label, result.confidence)

    save_model(model, "model.json")
    model = load_model("model.json")
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Hashable, Optional, Sequence, Union

from . import naive_bayes
from .config import PipelineConfig
from .datasets import Document, as_text
from .encoder import encode, encode_corpus
from .errors import DimensionMismatchError, InvalidConfigError, UntrainedModelError
from .evaluation import ClassificationMetrics, compute_metrics, stratified_k_fold
from .naive_bayes import Model, PredictionResult
from .tokenizer import Lemmatizer, Stemmer, Tokenizer
from .vocabulary import build_vocabulary

logger = logging.getLogger(__name__)

MODEL_FORMAT_VERSION = "1.0"

DocumentLike = Union[Document, str]


# ---------------------------------------------------------------------------
# Functional API
# ---------------------------------------------------------------------------

def fit(
    corpus: Sequence[DocumentLike],
    labels: Sequence[Hashable],
    config: Optional[PipelineConfig] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> Model:
    """Train a model from raw documents.

    Args:
        corpus: Training documents (``Document`` or plain strings).
        labels: Class label per document.
        config: Pipeline options; defaults to :class:`PipelineConfig()`.
        tokenizer: Optional pre-built tokenizer (for example with a custom
            lemmatizer). Built from ``config`` when omitted.

    Returns:
        A trained :class:`Model` carrying ``config``.

    Raises:
        DimensionMismatchError: If ``corpus`` and ``labels`` differ in
            length or are empty.
        InvalidConfigError: If the prior override does not match the
            training classes.
        EmptyVocabularyError: If pruning removes every term.
    """
    config = config or PipelineConfig()
    if len(corpus) != len(labels):
        raise DimensionMismatchError(
            f"corpus ({len(corpus)}) and labels ({len(labels)}) must have same length"
        )
    if len(corpus) == 0:
        raise DimensionMismatchError("Cannot fit on an empty corpus")
    if config.prior_override is not None and set(config.prior_override) != set(labels):
        raise InvalidConfigError(
            "prior_override classes do not match the classes found in the training labels"
        )

    tokenizer = tokenizer or Tokenizer(config)
    token_seqs = [tokenizer.tokenize(as_text(doc)) for doc in corpus]
    logger.debug("Tokenized %d training documents", len(token_seqs))

    vocabulary = build_vocabulary(token_seqs, config.min_doc_frequency_fraction)
    vectors = list(encode_corpus(token_seqs, vocabulary))

    model = naive_bayes.fit(
        vectors,
        labels,
        vocabulary,
        alpha=config.laplace_alpha,
        prior_override=config.prior_override,
    )
    return model.with_config(config)


def _require_trained(model: Optional[Model]) -> None:
    if model is None or not model.is_trained:
        raise UntrainedModelError("Model has not been fitted. Call fit() first.")


def _tokenizer_for(model: Model, tokenizer: Optional[Tokenizer]) -> Tokenizer:
    return tokenizer or Tokenizer(model.config or PipelineConfig())


def predict(
    model: Model,
    document: DocumentLike,
    tokenizer: Optional[Tokenizer] = None,
) -> PredictionResult:
    """Classify one raw document.

    Raises:
        UntrainedModelError: If ``model`` was never fitted.
    """
    _require_trained(model)
    tokenizer = _tokenizer_for(model, tokenizer)
    vector = encode(tokenizer.tokenize(as_text(document)), model.vocabulary)
    return naive_bayes.predict(model, vector)


def predict_batch(
    model: Model,
    documents: Sequence[DocumentLike],
    tokenizer: Optional[Tokenizer] = None,
    workers: Optional[int] = None,
) -> list[PredictionResult]:
    """Classify many raw documents independently.

    With ``workers > 1`` tokenization, encoding and scoring run on a thread
    pool; results keep input order.
    """
    _require_trained(model)
    tokenizer = _tokenizer_for(model, tokenizer)

    def classify_one(document: DocumentLike) -> PredictionResult:
        vector = encode(tokenizer.tokenize(as_text(document)), model.vocabulary)
        return naive_bayes.predict(model, vector)

    if workers is None or workers <= 1:
        return [classify_one(doc) for doc in documents]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(classify_one, documents))


def save_model(model: Model, path: Union[str, Path]) -> None:
    """Write a trained model to a JSON file.

    Raises:
        UntrainedModelError: If ``model`` was never fitted.
    """
    _require_trained(model)
    data = {"version": MODEL_FORMAT_VERSION, **model.to_dict()}

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, allow_nan=False)
    logger.info("Saved model (%d terms, %d classes) to %s",
                len(model.vocabulary), len(model.classes), path)


def load_model(path: Union[str, Path]) -> Model:
    """Load a model written by :func:`save_model`.

    Raises:
        ValueError: If the file declares an unsupported format version.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    version = data.get("version")
    if version != MODEL_FORMAT_VERSION:
        raise ValueError(f"Unsupported model format version: {version!r}")
    return Model.from_dict(data)


def cross_validate(
    documents: Sequence[DocumentLike],
    labels: Sequence[Hashable],
    k: int = 5,
    config: Optional[PipelineConfig] = None,
    seed: int = 42,
    tokenizer: Optional[Tokenizer] = None,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation of the full pipeline.

    A fresh vocabulary and model are built from each training fold, so
    test folds never influence the vocabulary.

    Returns:
        List of ClassificationMetrics (one per fold).
    """
    config = config or PipelineConfig()
    tokenizer = tokenizer or Tokenizer(config)
    results: list[ClassificationMetrics] = []

    for fold, (train_idx, test_idx) in enumerate(stratified_k_fold(labels, k=k, seed=seed)):
        if not test_idx:
            continue
        model = fit(
            [documents[i] for i in train_idx],
            [labels[i] for i in train_idx],
            config,
            tokenizer=tokenizer,
        )
        predictions = predict_batch(model, [documents[i] for i in test_idx], tokenizer=tokenizer)
        metrics = compute_metrics([labels[i] for i in test_idx], [p.label for p in predictions])
        logger.debug("Fold %d accuracy: %.4f", fold, metrics.accuracy)
        results.append(metrics)

    return results


# ---------------------------------------------------------------------------
# Classification Pipeline (High-Level API)
# ---------------------------------------------------------------------------

class TruthClassifier:
    """High-level statement classifier.

    Wraps tokenization and Naive Bayes into a simple train/classify
    interface with model persistence.

    Example::

        classifier = TruthClassifier()
        classifier.train(statements, labels)

        result = classifier.classify("Says taxes went up under the governor.")
        print(result.label)       # "half-true"
        print(result.confidence)  # 0.41

        classifier.save("model.json")
        loaded = TruthClassifier.load("model.json")

    Args:
        config: Pipeline options.
        lemmatizer: Optional lemmatizer override passed to the tokenizer.
        stemmer: Optional stemmer override passed to the tokenizer.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        lemmatizer: Optional[Lemmatizer] = None,
        stemmer: Optional[Stemmer] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._tokenizer = Tokenizer(self.config, lemmatizer=lemmatizer, stemmer=stemmer)
        self._model: Optional[Model] = None

    @property
    def is_trained(self) -> bool:
        """Whether the classifier has been trained."""
        return self._model is not None and self._model.is_trained

    @property
    def classes(self) -> list[Hashable]:
        """List of known classes."""
        if self._model:
            return list(self._model.classes)
        return []

    @property
    def model(self) -> Model:
        """The trained model.

        Raises:
            UntrainedModelError: If the classifier has not been trained.
        """
        _require_trained(self._model)
        return self._model

    def train(
        self,
        documents: Sequence[DocumentLike],
        labels: Sequence[Hashable],
    ) -> ClassificationMetrics:
        """Train the classifier and return training-set metrics.

        Args:
            documents: Training documents.
            labels: Corresponding class labels.

        Returns:
            ClassificationMetrics on the training set (for sanity checking).
        """
        self._model = fit(documents, labels, self.config, tokenizer=self._tokenizer)
        predictions = self.classify_batch(documents)
        return compute_metrics(list(labels), [p.label for p in predictions])

    def classify(self, document: DocumentLike) -> PredictionResult:
        """Classify a single document.

        Raises:
            UntrainedModelError: If the classifier has not been trained.
        """
        return predict(self.model, document, tokenizer=self._tokenizer)

    def classify_batch(
        self,
        documents: Sequence[DocumentLike],
        workers: Optional[int] = None,
    ) -> list[PredictionResult]:
        """Classify multiple documents."""
        return predict_batch(self.model, documents, tokenizer=self._tokenizer, workers=workers)

    def evaluate(
        self,
        documents: Sequence[DocumentLike],
        labels: Sequence[Hashable],
        k: int = 5,
        seed: int = 42,
    ) -> list[ClassificationMetrics]:
        """Run k-fold cross-validation with this classifier's configuration."""
        return cross_validate(
            documents, labels, k=k, config=self.config, seed=seed, tokenizer=self._tokenizer
        )

    def score(
        self,
        documents: Sequence[DocumentLike],
        labels: Sequence[Hashable],
    ) -> ClassificationMetrics:
        """Compute metrics of the trained model on a held-out set."""
        predictions = self.classify_batch(documents)
        return compute_metrics(list(labels), [p.label for p in predictions])

    def most_informative_features(
        self,
        label: Hashable,
        top_n: int = 20,
    ) -> list[tuple[str, float]]:
        """Get the most discriminative terms for a class."""
        return self.model.most_informative_features(label, top_n)

    def save(self, path: Union[str, Path]) -> None:
        """Save the trained model to a JSON file."""
        save_model(self.model, path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TruthClassifier":
        """Load a trained model from a JSON file."""
        model = load_model(path)
        tc = cls(config=model.config)
        tc._model = model
        return tc
