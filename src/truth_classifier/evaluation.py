"""Evaluation metrics and fold generation."""

from __future__ import annotations

import math
import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Hashable, Sequence

from .naive_bayes import class_order_key


# ---------------------------------------------------------------------------
# Evaluation Metrics
# ---------------------------------------------------------------------------

def accuracy_confidence_interval(
    correct: int,
    total: int,
    z: float = 1.96,
) -> tuple[float, float]:
    """Wilson score interval for a binomial accuracy estimate.

    Args:
        correct: Number of correct predictions.
        total: Number of predictions.
        z: Standard normal quantile (1.96 for a 95% interval).

    Returns:
        Tuple of (lower, upper) bounds in ``[0, 1]``. ``(0.0, 1.0)`` when
        ``total`` is zero.
    """
    if total <= 0:
        return (0.0, 1.0)
    if not 0 <= correct <= total:
        raise ValueError(f"correct ({correct}) must be between 0 and total ({total})")

    p = correct / total
    z2 = z * z
    denom = 1 + z2 / total
    centre = (p + z2 / (2 * total)) / denom
    half_width = z * math.sqrt(p * (1 - p) / total + z2 / (4 * total * total)) / denom
    return (max(0.0, centre - half_width), min(1.0, centre + half_width))


@dataclass
class ClassificationMetrics:
    """Evaluation metrics for a set of predictions.

    Attributes:
        accuracy: Overall accuracy.
        accuracy_interval: 95% Wilson interval around ``accuracy``.
        per_class: Per-class precision, recall, F1 scores.
        macro_precision: Unweighted mean precision across classes.
        macro_recall: Unweighted mean recall across classes.
        macro_f1: Unweighted mean F1 across classes.
        weighted_f1: Support-weighted mean F1 across classes.
        confusion_matrix: Nested dict ``{true: {predicted: count}}``.
        support: Per-class sample counts in the true labels.
    """

    accuracy: float = 0.0
    accuracy_interval: tuple[float, float] = (0.0, 1.0)
    per_class: dict[Hashable, dict[str, float]] = field(default_factory=dict)
    macro_precision: float = 0.0
    macro_recall: float = 0.0
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[Hashable, dict[Hashable, int]] = field(default_factory=dict)
    support: dict[Hashable, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "accuracy_interval": [round(b, 4) for b in self.accuracy_interval],
            "macro_precision": round(self.macro_precision, 4),
            "macro_recall": round(self.macro_recall, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                str(cls): {k: round(v, 4) for k, v in metrics.items()}
                for cls, metrics in self.per_class.items()
            },
            "confusion_matrix": {
                str(t): {str(p): n for p, n in row.items()}
                for t, row in self.confusion_matrix.items()
            },
            "support": {str(cls): n for cls, n in self.support.items()},
        }

    def summary(self) -> str:
        """Human-readable summary of metrics."""
        low, high = self.accuracy_interval
        rows = [
            f"{str(cls):<20}{scores['precision']:>11.3f}{scores['recall']:>9.3f}"
            f"{scores['f1']:>9.3f}{self.support.get(cls, 0):>9}"
            for cls, scores in self.per_class.items()
        ]
        return "\n".join([
            f"Accuracy {self.accuracy:.2%} (95% CI {low:.2%} - {high:.2%})",
            f"Macro F1 {self.macro_f1:.3f}, weighted F1 {self.weighted_f1:.3f}",
            "",
            f"{'class':<20}{'precision':>11}{'recall':>9}{'f1':>9}{'support':>9}",
            *rows,
        ])


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def compute_metrics(
    y_true: Sequence[Hashable],
    y_pred: Sequence[Hashable],
) -> ClassificationMetrics:
    """Score predicted labels against the true ones.

    Rows and columns of the confusion matrix, like ``per_class``, follow
    the fixed class order used by the model.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    pairs = Counter(zip(y_true, y_pred))
    classes = sorted(set(y_true) | set(y_pred), key=class_order_key)
    support = Counter(y_true)
    predicted = Counter(y_pred)
    correct = sum(pairs[cls, cls] for cls in classes)

    per_class: dict[Hashable, dict[str, float]] = {}
    for cls in classes:
        precision = _ratio(pairs[cls, cls], predicted[cls])
        recall = _ratio(pairs[cls, cls], support[cls])
        f1 = _ratio(2 * precision * recall, precision + recall)
        per_class[cls] = {"precision": precision, "recall": recall, "f1": f1}

    def macro(key: str) -> float:
        return _ratio(sum(scores[key] for scores in per_class.values()), len(classes))

    return ClassificationMetrics(
        accuracy=_ratio(correct, len(y_true)),
        accuracy_interval=accuracy_confidence_interval(correct, len(y_true)),
        per_class=per_class,
        macro_precision=macro("precision"),
        macro_recall=macro("recall"),
        macro_f1=macro("f1"),
        weighted_f1=_ratio(
            sum(per_class[cls]["f1"] * support[cls] for cls in classes), len(y_true)
        ),
        confusion_matrix={t: {p: pairs[t, p] for p in classes} for t in classes},
        support=dict(support),
    )


# ---------------------------------------------------------------------------
# Fold generation
# ---------------------------------------------------------------------------

def stratified_k_fold(
    labels: Sequence[Hashable],
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Split indices into ``k`` folds that each keep the class mix.

    Indices of each class are shuffled with a private ``random.Random(seed)``
    and dealt round-robin. The dealing position carries over from one class
    to the next, so the remainders of small classes land in different folds.

    Returns:
        List of ``(train_indices, test_indices)`` tuples, both sorted.

    Raises:
        ValueError: If ``k < 2``.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    rng = random.Random(seed)
    by_class: dict[Hashable, list[int]] = defaultdict(list)
    for idx, label in enumerate(labels):
        by_class[label].append(idx)

    held_out: list[list[int]] = [[] for _ in range(k)]
    position = 0
    for label in sorted(by_class, key=class_order_key):
        members = by_class[label]
        rng.shuffle(members)
        for idx in members:
            held_out[position % k].append(idx)
            position += 1

    folds: list[tuple[list[int], list[int]]] = []
    for test in held_out:
        test_set = set(test)
        train = [i for i in range(len(labels)) if i not in test_set]
        folds.append((train, sorted(test)))
    return folds
