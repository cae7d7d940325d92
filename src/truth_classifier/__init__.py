"""Truth Classifier -- multinomial Naive Bayes for statement truthfulness."""

__version__ = "0.1.0"

from .config import STOP_WORDS, NormalizationMode, PipelineConfig
from .datasets import Document, LabeledCorpus, load_tsv, train_test_split
from .encoder import DocumentTermVector, encode, encode_corpus
from .errors import (
    DimensionMismatchError,
    EmptyVocabularyError,
    InvalidConfigError,
    TruthClassifierError,
    UntrainedModelError,
)
from .evaluation import (
    ClassificationMetrics,
    accuracy_confidence_interval,
    compute_metrics,
    stratified_k_fold,
)
from .naive_bayes import ClassTermTotals, Model, PredictionResult
from .pipeline import (
    TruthClassifier,
    cross_validate,
    fit,
    load_model,
    predict,
    predict_batch,
    save_model,
)
from .tokenizer import Tokenizer, ensure_nltk_data, tokenize
from .vocabulary import Vocabulary, build_vocabulary

__all__ = [
    # Pipeline
    "TruthClassifier",
    "fit",
    "predict",
    "predict_batch",
    "save_model",
    "load_model",
    "cross_validate",
    # Configuration
    "PipelineConfig",
    "NormalizationMode",
    "STOP_WORDS",
    # Features
    "Tokenizer",
    "tokenize",
    "ensure_nltk_data",
    "Vocabulary",
    "build_vocabulary",
    "DocumentTermVector",
    "encode",
    "encode_corpus",
    # Estimator
    "Model",
    "ClassTermTotals",
    "PredictionResult",
    # Data and evaluation
    "Document",
    "LabeledCorpus",
    "load_tsv",
    "train_test_split",
    "ClassificationMetrics",
    "compute_metrics",
    "accuracy_confidence_interval",
    "stratified_k_fold",
    # Errors
    "TruthClassifierError",
    "EmptyVocabularyError",
    "InvalidConfigError",
    "DimensionMismatchError",
    "UntrainedModelError",
]
