"""Exception hierarchy for the classification pipeline.

Every error derives from :class:`TruthClassifierError` and also from the
builtin exception a caller would naturally expect (``ValueError`` for bad
input, ``RuntimeError`` for misuse), so existing ``except ValueError``
handlers keep working.
"""

from __future__ import annotations


class TruthClassifierError(Exception):
    """Base class for all pipeline errors."""


class EmptyVocabularyError(TruthClassifierError, ValueError):
    """Vocabulary pruning removed every term."""


class InvalidConfigError(TruthClassifierError, ValueError):
    """A configuration value is malformed or out of range."""


class DimensionMismatchError(TruthClassifierError, ValueError):
    """Vector, label or vocabulary sizes disagree."""


class UntrainedModelError(TruthClassifierError, RuntimeError):
    """Prediction was requested from a model that was never fitted."""
