"""Shared test fixtures for truth-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from truth_classifier.config import PipelineConfig


class DictionaryLemmatizer:
    """Lemmatizer backed by a fixed lookup table; unknown words pass through."""

    def __init__(self, table: dict[str, str] | None = None) -> None:
        self.table = table or {}
        self.calls = 0

    def lemmatize(self, word: str) -> str:
        self.calls += 1
        return self.table.get(word, word)


def wordnet_available() -> bool:
    import nltk

    try:
        nltk.data.find("corpora/wordnet")
    except LookupError:
        return False
    return True


requires_wordnet = pytest.mark.skipif(
    not wordnet_available(), reason="NLTK wordnet corpus not installed"
)


@pytest.fixture
def lemmatizer() -> DictionaryLemmatizer:
    return DictionaryLemmatizer({
        "mice": "mouse",
        "geese": "goose",
        "ran": "run",
        "children": "child",
        "zzz": "",
    })


@pytest.fixture
def stem_config() -> PipelineConfig:
    """Stem-only configuration that needs no downloaded NLTK corpora."""
    return PipelineConfig(
        normalization_mode="stem_only",
        min_doc_frequency_fraction=0.0,
    )


@pytest.fixture
def toy_corpus() -> tuple[list[str], list[str]]:
    """Two-document corpus with a hand-computable model."""
    return ["cat dog cat", "fish fish bird"], ["A", "B"]


@pytest.fixture
def statements() -> tuple[list[str], list[str]]:
    """Small synthetic corpus of political statements with two labels."""
    true_docs = [
        "The unemployment rate fell to four percent according to official labor statistics.",
        "Official census figures show the population of the state grew last decade.",
        "Labor statistics confirm wages grew for manufacturing workers.",
        "The official budget report shows revenue grew faster than spending.",
        "Census data confirm the median household income grew.",
        "Official statistics show the unemployment rate fell for six straight months.",
    ]
    false_docs = [
        "Secret aliens control the governor and hide the hoax from voters.",
        "The senator invented a hoax about vaccines to control voters.",
        "A secret plot by aliens will cancel the election.",
        "Voters were told a hoax that the moon landing never happened.",
        "The governor is secretly an alien who wants to cancel elections.",
        "A hoax claims secret agents control every election machine.",
    ]
    docs = true_docs + false_docs
    labels = ["true"] * len(true_docs) + ["false"] * len(false_docs)
    return docs, labels


@pytest.fixture
def liar_tsv(tmp_path: Path) -> Path:
    """A tiny TSV file in the LIAR column layout (id, label, statement, subject)."""
    rows = [
        ("1.json", "true", "Official statistics show the unemployment rate fell.", "economy"),
        ("2.json", "false", "Secret aliens control the election hoax.", "elections"),
        ("3.json", "true", "Census figures show the population grew.", "census"),
        ("4.json", "false", "A hoax says aliens cancel the vote.", "elections"),
        ("5.json", "true", "Labor statistics confirm wages grew.", "economy"),
        ("6.json", "false", "The governor is an alien who hides the hoax.", "states"),
    ]
    path = tmp_path / "liar.tsv"
    path.write_text("\n".join("\t".join(r) for r in rows) + "\n", encoding="utf-8")
    return path
