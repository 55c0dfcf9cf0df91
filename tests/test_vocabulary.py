"""Tests for vocabulary construction, pruning and combination.

Expected counts for the shared corpus (5 documents):
cat=5 (3 docs), the=3 (3), a=2 (1), dog=2 (2), sat=2 (2), and=1 (1), end=1 (1)
"""

import numpy as np
import pytest

from textvec import (
    ParallelConfig,
    combine_vocabularies,
    create_vocabulary,
    ifiles,
    itoken,
    itoken_parallel,
    prune_vocabulary,
)
from textvec.vocabulary import generate_ngrams


def _counts(vocab):
    return {t: (int(tc), int(dc)) for t, tc, dc in zip(vocab.terms, vocab.term_count, vocab.doc_count)}


class TestCreateVocabulary:
    def test_counts_and_order(self, corpus_files):
        vocab = create_vocabulary(itoken(ifiles(corpus_files)))
        assert vocab.terms == ["cat", "the", "a", "dog", "sat", "and", "end"]
        assert _counts(vocab)["cat"] == (5, 3)
        assert _counts(vocab)["a"] == (2, 1)
        assert vocab.document_count == 5

    def test_stopwords_removed(self, texts):
        vocab = create_vocabulary(itoken(texts), stopwords=["the", "a", "and"])
        assert set(vocab.terms) == {"cat", "sat", "dog", "end"}
        assert vocab.stopwords == frozenset({"the", "a", "and"})

    def test_bigrams(self):
        vocab = create_vocabulary(itoken(["new york city"]), ngram=(1, 2))
        assert set(vocab.terms) == {"new", "york", "city", "new_york", "york_city"}

    def test_bigrams_only_with_custom_sep(self):
        vocab = create_vocabulary(itoken(["new york city"]), ngram=(2, 2), sep_ngram=" ")
        assert sorted(vocab.terms) == ["new york", "york city"]

    def test_invalid_ngram(self, texts):
        with pytest.raises(ValueError, match="ngram"):
            create_vocabulary(itoken(texts), ngram=(2, 1))
        with pytest.raises(ValueError, match="ngram"):
            create_vocabulary(itoken(texts), ngram=(0, 1))

    def test_from_terms_has_zero_counts(self):
        vocab = create_vocabulary(["b", "a", "b"])
        assert vocab.terms == ["b", "a"]
        assert vocab.term_count.tolist() == [0, 0]
        assert vocab.document_count == 0

    def test_membership(self, texts):
        vocab = create_vocabulary(itoken(texts))
        assert "cat" in vocab
        assert "zebra" not in vocab
        assert vocab.index["cat"] == 0

    def test_parallel_matches_serial(self, texts):
        serial = create_vocabulary(itoken(texts))
        threaded = create_vocabulary(itoken_parallel(texts, n_chunks=3), parallel=ParallelConfig("thread", 3))
        assert threaded.terms == serial.terms
        np.testing.assert_array_equal(threaded.term_count, serial.term_count)
        np.testing.assert_array_equal(threaded.doc_count, serial.doc_count)
        assert threaded.document_count == serial.document_count

    def test_process_backend(self, corpus_files):
        serial = create_vocabulary(itoken(ifiles(corpus_files)))
        par = create_vocabulary(itoken_parallel(ifiles(corpus_files), n_chunks=2), parallel=ParallelConfig("process", 2))
        assert _counts(par) == _counts(serial)

    def test_empty_iterator_list(self):
        vocab = create_vocabulary([], ngram=(1, 1))
        assert len(vocab) == 0


class TestGenerateNgrams:
    def test_stopwords_dropped_before_ngrams(self):
        assert generate_ngrams(["a", "the", "b"], (2, 2), "_", frozenset({"the"})) == ["a_b"]

    def test_short_input(self):
        assert generate_ngrams(["a"], (2, 3)) == []


class TestPruneVocabulary:
    @pytest.fixture
    def vocab(self, texts):
        return create_vocabulary(itoken(texts))

    def test_term_count_bounds(self, vocab):
        pruned = prune_vocabulary(vocab, term_count_min=2, term_count_max=3)
        assert pruned.terms == ["the", "a", "dog", "sat"]

    def test_doc_proportion(self, vocab):
        # 5 documents: cat and the appear in 3 (0.6), the rest in <= 2 (<= 0.4)
        pruned = prune_vocabulary(vocab, doc_proportion_max=0.5)
        assert "cat" not in pruned and "the" not in pruned
        pruned = prune_vocabulary(vocab, doc_proportion_min=0.5)
        assert pruned.terms == ["cat", "the"]

    def test_doc_count_bounds(self, vocab):
        pruned = prune_vocabulary(vocab, doc_count_min=2, doc_count_max=2)
        assert pruned.terms == ["dog", "sat"]

    def test_vocab_term_max_keeps_most_frequent(self, vocab):
        pruned = prune_vocabulary(vocab, vocab_term_max=3)
        assert pruned.terms == ["cat", "the", "a"]

    def test_keeps_document_count(self, vocab):
        assert prune_vocabulary(vocab, term_count_min=100).document_count == 5

    def test_invalid_proportions(self, vocab):
        with pytest.raises(ValueError):
            prune_vocabulary(vocab, doc_proportion_min=0.8, doc_proportion_max=0.2)


class TestCombineVocabularies:
    def test_sums_counts(self):
        v1 = create_vocabulary(itoken(["x y", "y"]))
        v2 = create_vocabulary(itoken(["y z"]))
        combined = combine_vocabularies(v1, v2)
        assert _counts(combined) == {"y": (3, 3), "x": (1, 1), "z": (1, 1)}
        assert combined.document_count == 3

    def test_rejects_mismatched_ngram(self):
        v1 = create_vocabulary(itoken(["x y"]))
        v2 = create_vocabulary(itoken(["x y"]), ngram=(1, 2))
        with pytest.raises(ValueError, match="Cannot combine"):
            combine_vocabularies(v1, v2)

    def test_needs_input(self):
        with pytest.raises(ValueError):
            combine_vocabularies()
