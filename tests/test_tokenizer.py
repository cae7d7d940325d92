"""Tests for text normalization and tokenization."""

from __future__ import annotations

import pytest

from conftest import DictionaryLemmatizer, requires_wordnet
from truth_classifier.config import PipelineConfig
from truth_classifier.tokenizer import Tokenizer, strip_text, tokenize


@pytest.fixture
def lemma_tokenizer(lemmatizer: DictionaryLemmatizer) -> Tokenizer:
    """Lemmatize-only tokenizer with a lookup lemmatizer (no stemming)."""
    return Tokenizer(PipelineConfig(normalization_mode="lemmatize_only"), lemmatizer=lemmatizer)


class TestStripText:
    def test_lowercases(self):
        assert strip_text("HeLLo") == "hello"

    def test_deletes_punctuation_inside_words(self):
        assert strip_text("don't") == "dont"
        assert strip_text("U.S.") == "us"

    def test_blanks_numeric_only_runs(self):
        assert strip_text("in 2016 there").split() == ["in", "there"]

    def test_keeps_mixed_alphanumerics(self):
        assert strip_text("covid19").split() == ["covid19"]

    def test_removes_symbols(self):
        assert strip_text("$100 + 5%").split() == []


class TestTokenizer:
    """Tests for the tokenization pipeline order and guarantees."""

    def test_empty_input(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("") == []
        assert lemma_tokenizer.tokenize("   \n\t ") == []

    def test_punctuation_only_input(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("?!... --- ,,,") == []

    def test_removes_stopwords(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("The budget and the deficit") == ["budget", "deficit"]

    def test_country_abbreviation_survives(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("The U.S. economy") == ["us", "economy"]

    def test_contracted_stopwords_match_after_stripping(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("Don't panic") == ["panic"]

    def test_preserves_order_and_repetition(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("cat dog cat") == ["cat", "dog", "cat"]

    def test_drops_numbers(self, lemma_tokenizer):
        tokens = lemma_tokenizer.tokenize("Taxes rose 15 percent in 2016")
        assert tokens == ["taxes", "rose", "percent"]

    def test_unicode_punctuation(self, lemma_tokenizer):
        text = "“Quoted” claim — repeated…"
        assert lemma_tokenizer.tokenize(text) == ["quoted", "claim", "repeated"]

    def test_custom_stopwords(self, lemmatizer):
        config = PipelineConfig(stopwords={"cat"}, normalization_mode="lemmatize_only")
        tokens = Tokenizer(config, lemmatizer=lemmatizer).tokenize("the cat and dog")
        assert tokens == ["the", "and", "dog"]

    def test_lemmatize_only(self, lemma_tokenizer):
        assert lemma_tokenizer.tokenize("mice geese children") == ["mouse", "goose", "child"]

    def test_lemmatize_then_stem_applies_lemma_first(self, lemmatizer):
        tokenizer = Tokenizer(PipelineConfig(), lemmatizer=lemmatizer)
        assert tokenizer.tokenize("ran") == ["run"]

    def test_stem_only_skips_lemmatizer(self, lemmatizer):
        tokenizer = Tokenizer(PipelineConfig(normalization_mode="stem_only"), lemmatizer=lemmatizer)
        assert tokenizer.tokenize("ran") == ["ran"]
        assert lemmatizer.calls == 0

    def test_porter_stemming(self):
        tokenizer = Tokenizer(PipelineConfig(normalization_mode="stem_only"))
        assert tokenizer.tokenize("cats running ponies") == ["cat", "run", "poni"]

    def test_empty_reduction_is_dropped(self, lemmatizer):
        tokenizer = Tokenizer(PipelineConfig(), lemmatizer=lemmatizer)
        assert tokenizer.tokenize("zzz budget zzz") == ["budget"]

    def test_deterministic(self, lemma_tokenizer):
        text = "The Governor's budget, passed in 2019, cut taxes; taxes fell!"
        first = lemma_tokenizer.tokenize(text)
        second = lemma_tokenizer.tokenize(text)
        assert first == second
        assert first == Tokenizer(
            PipelineConfig(normalization_mode="lemmatize_only"),
            lemmatizer=DictionaryLemmatizer(),
        ).tokenize(text)

    def test_reductions_are_cached(self, lemmatizer):
        tokenizer = Tokenizer(PipelineConfig(normalization_mode="lemmatize_only"), lemmatizer=lemmatizer)
        tokenizer.tokenize("mice mice mice")
        assert lemmatizer.calls == 1

    def test_tokenize_many_is_lazy(self, lemma_tokenizer):
        stream = lemma_tokenizer.tokenize_many(["cat", "dog"])
        assert next(stream) == ["cat"]
        assert list(stream) == [["dog"]]


class TestTokenizeFunction:
    def test_uses_config(self):
        config = PipelineConfig(normalization_mode="stem_only")
        assert tokenize("The dogs barked", config) == ["dog", "bark"]


@requires_wordnet
class TestWordNetLemmatization:
    def test_irregular_plurals(self):
        tokenizer = Tokenizer(PipelineConfig(normalization_mode="lemmatize_only"))
        assert tokenizer.tokenize("geese mice") == ["goose", "mouse"]

    def test_default_mode_is_deterministic(self):
        tokenizer = Tokenizer()
        text = "Senators were voting on the bills"
        assert tokenizer.tokenize(text) == tokenizer.tokenize(text)
