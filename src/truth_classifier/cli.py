"""Command-line interface for the truth classifier.

Provides ``train``, ``predict``, and ``evaluate`` commands with rich
terminal output using the ``click`` and ``rich`` libraries.

Usage::

    truth-classifier train liar_train.tsv --model model.json
    truth-classifier predict model.json "Says the state budget doubled."
    truth-classifier evaluate liar_test.tsv --model model.json
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import NormalizationMode, PipelineConfig
from .datasets import LIAR_LABEL_COLUMN, LIAR_TEXT_COLUMNS, load_tsv, train_test_split
from .errors import TruthClassifierError
from .evaluation import ClassificationMetrics
from .pipeline import TruthClassifier
from .tokenizer import ensure_nltk_data

console = Console()

_ERRORS = (TruthClassifierError, OSError, ValueError)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _parse_text_columns(value: str) -> tuple[int, ...]:
    try:
        return tuple(int(c) for c in value.split(",") if c.strip())
    except ValueError:
        raise click.BadParameter(f"expected comma-separated column indices, got {value!r}")


@click.group()
@click.version_option(package_name="truth-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Truth Classifier -- Naive Bayes statement truthfulness classification.

    Train a model on labeled statements, classify new statements, and
    evaluate a trained model on held-out data.
    """
    _configure_logging(verbose)


@main.command()
@click.argument("data", type=click.Path(exists=True, path_type=Path))
@click.option("--model", "-m", "model_path", type=click.Path(path_type=Path),
              required=True, help="Where to write the trained model (JSON).")
@click.option("--label-column", type=int, default=LIAR_LABEL_COLUMN, show_default=True,
              help="Index of the label column.")
@click.option("--text-columns", default=",".join(str(c) for c in LIAR_TEXT_COLUMNS),
              show_default=True, help="Comma-separated indices of text columns.")
@click.option("--min-df", type=float, default=0.01, show_default=True,
              help="Minimum document frequency fraction for vocabulary terms.")
@click.option("--alpha", type=float, default=1.0, show_default=True,
              help="Laplace smoothing constant.")
@click.option("--mode", type=click.Choice([m.value for m in NormalizationMode]),
              default=NormalizationMode.LEMMATIZE_THEN_STEM.value, show_default=True,
              help="Token normalization mode.")
@click.option("--test-fraction", type=float, default=0.2, show_default=True,
              help="Fraction held out for evaluation (0 disables).")
@click.option("--seed", type=int, default=42, show_default=True,
              help="Seed for the train/test split.")
def train(
    data: Path,
    model_path: Path,
    label_column: int,
    text_columns: str,
    min_df: float,
    alpha: float,
    mode: str,
    test_fraction: float,
    seed: int,
) -> None:
    """Train a classifier on a labeled TSV file.

    Example: truth-classifier train train.tsv --model model.json
    """
    try:
        config = PipelineConfig(
            min_doc_frequency_fraction=min_df,
            laplace_alpha=alpha,
            normalization_mode=mode,
        )
        if config.normalization_mode.lemmatizes:
            ensure_nltk_data()

        corpus = load_tsv(data, label_column=label_column,
                          text_columns=_parse_text_columns(text_columns))
        if test_fraction > 0:
            train_set, test_set = train_test_split(corpus, test_fraction=test_fraction, seed=seed)
        else:
            train_set, test_set = corpus, None

        classifier = TruthClassifier(config)
        with console.status("[bold blue]Training model...", spinner="dots"):
            train_metrics = classifier.train(train_set.documents, train_set.labels)
        classifier.save(model_path)
    except _ERRORS as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    _render_metrics(train_metrics, f"Training set ({len(train_set)} documents)")
    if test_set is not None and len(test_set):
        _render_metrics(
            classifier.score(test_set.documents, test_set.labels),
            f"Held-out set ({len(test_set)} documents)",
        )
    console.print(f"[dim]Model saved to {model_path}[/]")


@main.command()
@click.argument("model_path", type=click.Path(exists=True, path_type=Path))
@click.argument("texts", nargs=-1, required=True)
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def predict(model_path: Path, texts: tuple[str, ...], output: str) -> None:
    """Classify one or more statements with a trained model.

    Example: truth-classifier predict model.json "Says crime fell by half."
    """
    try:
        classifier = TruthClassifier.load(model_path)
        if classifier.config.normalization_mode.lemmatizes:
            ensure_nltk_data()
        results = classifier.classify_batch(list(texts))
    except _ERRORS as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(
            [{"text": text, **result.to_dict()} for text, result in zip(texts, results)],
            indent=2,
            allow_nan=False,
        ))
        return

    table = Table(title="Predictions", show_lines=True)
    table.add_column("Statement", style="white", max_width=60)
    table.add_column("Label", style="cyan")
    table.add_column("Conf.", justify="center", width=6)
    for text, result in zip(texts, results):
        excerpt = text[:120] + ("..." if len(text) > 120 else "")
        table.add_row(excerpt, str(result.label), f"{result.confidence:.0%}")
    console.print(table)


@main.command()
@click.argument("data", type=click.Path(exists=True, path_type=Path))
@click.option("--model", "-m", "model_path", type=click.Path(exists=True, path_type=Path),
              required=True, help="Trained model (JSON).")
@click.option("--label-column", type=int, default=LIAR_LABEL_COLUMN, show_default=True,
              help="Index of the label column.")
@click.option("--text-columns", default=",".join(str(c) for c in LIAR_TEXT_COLUMNS),
              show_default=True, help="Comma-separated indices of text columns.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def evaluate(
    data: Path,
    model_path: Path,
    label_column: int,
    text_columns: str,
    output: str,
) -> None:
    """Evaluate a trained model on a labeled TSV file.

    Example: truth-classifier evaluate test.tsv --model model.json
    """
    try:
        classifier = TruthClassifier.load(model_path)
        if classifier.config.normalization_mode.lemmatizes:
            ensure_nltk_data()
        corpus = load_tsv(data, label_column=label_column,
                          text_columns=_parse_text_columns(text_columns))
        with console.status("[bold blue]Evaluating...", spinner="dots"):
            metrics = classifier.score(corpus.documents, corpus.labels)
    except _ERRORS as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(metrics.to_dict(), indent=2))
    else:
        _render_metrics(metrics, f"{data.name} ({len(corpus)} documents)")


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_metrics(metrics: ClassificationMetrics, title: str) -> None:
    """Render ClassificationMetrics as a panel plus per-class table."""
    low, high = metrics.accuracy_interval
    console.print()
    console.print(Panel(
        f"Accuracy: [bold]{metrics.accuracy:.2%}[/] (95% CI {low:.2%} - {high:.2%})\n"
        f"Macro F1: {metrics.macro_f1:.4f} | Weighted F1: {metrics.weighted_f1:.4f}",
        title=title,
        border_style="blue",
    ))

    table = Table(show_lines=False)
    table.add_column("Class", style="cyan")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F1", justify="right")
    table.add_column("Support", justify="right")
    for cls in sorted(metrics.per_class, key=str):
        m = metrics.per_class[cls]
        table.add_row(
            str(cls),
            f"{m['precision']:.4f}",
            f"{m['recall']:.4f}",
            f"{m['f1']:.4f}",
            str(metrics.support.get(cls, 0)),
        )
    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
