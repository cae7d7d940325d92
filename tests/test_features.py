"""Tests for vocabulary construction and document-term encoding."""

from __future__ import annotations

import pytest

from truth_classifier.encoder import DocumentTermVector, check_compatible, encode, encode_corpus
from truth_classifier.errors import DimensionMismatchError, EmptyVocabularyError, InvalidConfigError
from truth_classifier.vocabulary import Vocabulary, build_vocabulary, document_frequencies


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

class TestDocumentFrequencies:
    def test_counts_documents_not_occurrences(self):
        doc_freq, n_docs = document_frequencies([["cat", "cat", "cat"], ["cat", "dog"]])
        assert n_docs == 2
        assert doc_freq["cat"] == 2
        assert doc_freq["dog"] == 1


class TestBuildVocabulary:
    def test_lexicographic_indexing(self):
        vocab = build_vocabulary([["cat", "dog", "cat"], ["fish", "fish", "bird"]])
        assert vocab.to_list() == ["bird", "cat", "dog", "fish"]
        assert vocab.index_of("bird") == 0
        assert vocab.index_of("fish") == 3

    def test_order_independent_of_corpus_order(self):
        a = build_vocabulary([["zeta", "alpha"], ["mid"]])
        b = build_vocabulary([["mid"], ["alpha", "zeta"]])
        assert a == b
        assert a.fingerprint == b.fingerprint

    def test_prunes_rare_term(self):
        docs = [["common", "word"] for _ in range(999)] + [["common", "rare"]]
        vocab = build_vocabulary(docs, min_doc_frequency_fraction=0.01)
        assert "rare" not in vocab
        assert "common" in vocab
        assert "word" in vocab

    def test_threshold_is_inclusive(self):
        docs = [["edge"]] + [["filler"] for _ in range(99)]
        vocab = build_vocabulary(docs, min_doc_frequency_fraction=0.01)
        assert "edge" in vocab

    def test_zero_threshold_keeps_everything(self):
        vocab = build_vocabulary([["a1"], ["b1"], ["c1"]], min_doc_frequency_fraction=0.0)
        assert len(vocab) == 3

    def test_accepts_generator(self):
        vocab = build_vocabulary(iter([["cat"], ["dog"]]), min_doc_frequency_fraction=0.5)
        assert vocab.to_list() == ["cat", "dog"]

    def test_empty_after_pruning(self):
        with pytest.raises(EmptyVocabularyError):
            build_vocabulary([["cat"], ["dog"]], min_doc_frequency_fraction=1.0)

    def test_empty_corpus(self):
        with pytest.raises(EmptyVocabularyError):
            build_vocabulary([])

    def test_corpus_of_empty_documents(self):
        with pytest.raises(EmptyVocabularyError):
            build_vocabulary([[], []])

    @pytest.mark.parametrize("fraction", [-0.1, 1.5])
    def test_invalid_fraction(self, fraction):
        with pytest.raises(InvalidConfigError):
            build_vocabulary([["cat"]], min_doc_frequency_fraction=fraction)


class TestVocabulary:
    def test_rejects_unsorted_terms(self):
        with pytest.raises(DimensionMismatchError):
            Vocabulary(("dog", "cat"))

    def test_rejects_duplicates(self):
        with pytest.raises(DimensionMismatchError):
            Vocabulary(("cat", "cat"))

    def test_container_protocol(self):
        vocab = Vocabulary.from_terms(["dog", "cat"])
        assert len(vocab) == 2
        assert list(vocab) == ["cat", "dog"]
        assert vocab[1] == "dog"
        assert "cat" in vocab
        assert vocab.index_of("emu") is None

    def test_is_immutable(self):
        vocab = Vocabulary.from_terms(["cat"])
        with pytest.raises(AttributeError):
            vocab.terms = ("dog",)

    def test_fingerprint_depends_on_terms(self):
        assert (
            Vocabulary.from_terms(["cat", "dog"]).fingerprint
            != Vocabulary.from_terms(["cat", "emu"]).fingerprint
        )


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------

@pytest.fixture
def vocab() -> Vocabulary:
    return Vocabulary.from_terms(["bird", "cat", "dog", "fish"])


class TestEncode:
    def test_counts_tokens(self, vocab):
        vec = encode(["cat", "dog", "cat"], vocab)
        assert vec.counts == {1: 2, 2: 1}
        assert vec.dimension == 4
        assert vec.total == 3

    def test_skips_oov_tokens(self, vocab):
        vec = encode(["cat", "zebra", "zebra", "fish"], vocab)
        assert vec.counts == {1: 1, 3: 1}
        assert vec.dimension == len(vocab)

    def test_all_oov_gives_zero_vector(self, vocab):
        vec = encode(["zebra", "lion"], vocab)
        assert vec.is_empty
        assert vec.dimension == 4
        assert vec.to_dense() == [0, 0, 0, 0]

    def test_empty_tokens(self, vocab):
        assert encode([], vocab).is_empty

    def test_to_dense(self, vocab):
        assert encode(["fish", "fish", "bird"], vocab).to_dense() == [1, 0, 0, 2]

    def test_carries_vocabulary_fingerprint(self, vocab):
        assert encode(["cat"], vocab).fingerprint == vocab.fingerprint

    def test_encode_corpus_streams(self, vocab):
        stream = encode_corpus(iter([["cat"], ["dog", "dog"]]), vocab)
        first = next(stream)
        assert first.counts == {1: 1}
        assert [v.counts for v in stream] == [{2: 2}]

    def test_pruned_term_is_ignored(self):
        docs = [["common"] for _ in range(999)] + [["common", "rare"]]
        vocab = build_vocabulary(docs, min_doc_frequency_fraction=0.01)
        vec = encode(["rare", "common", "rare"], vocab)
        assert vec.counts == {vocab.index_of("common"): 1}


class TestDocumentTermVector:
    def test_drops_zero_counts(self):
        vec = DocumentTermVector({0: 0, 2: 3}, dimension=3)
        assert vec.counts == {2: 3}

    def test_index_out_of_range(self):
        with pytest.raises(DimensionMismatchError):
            DocumentTermVector({5: 1}, dimension=3)

    def test_negative_count(self):
        with pytest.raises(ValueError):
            DocumentTermVector({0: -1}, dimension=3)


class TestCheckCompatible:
    def test_same_vocabulary(self, vocab):
        check_compatible(encode(["cat"], vocab), vocab)

    def test_different_size(self, vocab):
        other = Vocabulary.from_terms(["cat", "dog"])
        with pytest.raises(DimensionMismatchError):
            check_compatible(encode(["cat"], other), vocab)

    def test_same_size_different_terms(self, vocab):
        other = Vocabulary.from_terms(["ant", "bee", "cat", "dog"])
        with pytest.raises(DimensionMismatchError):
            check_compatible(encode(["cat"], other), vocab)

    def test_hand_built_vector_checks_dimension_only(self, vocab):
        check_compatible(DocumentTermVector({1: 2}, dimension=4), vocab)
