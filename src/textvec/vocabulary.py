from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property

import numpy as np

from .iterators import TokenIterator
from .parallel import ParallelConfig, map_chunks

logger = logging.getLogger(__name__)


def check_ngram(ngram: tuple[int, int]) -> tuple[int, int]:
    n_min, n_max = int(ngram[0]), int(ngram[1])
    if n_min < 1 or n_max < n_min:
        raise ValueError(f"ngram must satisfy 1 <= n_min <= n_max, got {ngram}")
    return n_min, n_max


def generate_ngrams(
    tokens: Sequence[str],
    ngram: tuple[int, int] = (1, 1),
    sep: str = "_",
    stopwords: frozenset[str] = frozenset(),
) -> list[str]:
    """All n-grams of `tokens` for n in [n_min, n_max].

    Stopwords are dropped first, so n-grams bridge over them.
    """
    n_min, n_max = ngram
    toks = [t for t in tokens if t not in stopwords] if stopwords else list(tokens)
    if n_min == 1 and n_max == 1:
        return toks
    out: list[str] = []
    for n in range(n_min, n_max + 1):
        for i in range(len(toks) - n + 1):
            out.append(sep.join(toks[i : i + n]))
    return out


@dataclass
class Vocabulary:
    terms: list[str]
    term_count: np.ndarray
    doc_count: np.ndarray
    document_count: int = 0
    ngram: tuple[int, int] = (1, 1)
    sep_ngram: str = "_"
    stopwords: frozenset[str] = field(default_factory=frozenset)

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: str) -> bool:
        return term in self.index

    @cached_property
    def index(self) -> dict[str, int]:
        return {t: i for i, t in enumerate(self.terms)}

    def to_rows(self) -> list[dict]:
        return [
            {"term": t, "term_count": int(tc), "doc_count": int(dc)}
            for t, tc, dc in zip(self.terms, self.term_count, self.doc_count)
        ]


def _sorted_vocabulary(
    term_counts: Counter,
    doc_counts: Counter,
    document_count: int,
    ngram: tuple[int, int],
    sep_ngram: str,
    stopwords: frozenset[str],
) -> Vocabulary:
    terms = sorted(term_counts, key=lambda t: (-term_counts[t], t))
    return Vocabulary(
        terms=terms,
        term_count=np.array([term_counts[t] for t in terms], dtype=np.int64),
        doc_count=np.array([doc_counts[t] for t in terms], dtype=np.int64),
        document_count=document_count,
        ngram=ngram,
        sep_ngram=sep_ngram,
        stopwords=stopwords,
    )


@dataclass(frozen=True)
class _VocabJob:
    ngram: tuple[int, int]
    stopwords: frozenset[str]
    sep_ngram: str

    def __call__(self, it: TokenIterator) -> Vocabulary:
        term_counts: Counter = Counter()
        doc_counts: Counter = Counter()
        n_docs = 0
        for chunk in it:
            for tokens in chunk.tokens:
                grams = generate_ngrams(tokens, self.ngram, self.sep_ngram, self.stopwords)
                term_counts.update(grams)
                doc_counts.update(set(grams))
                n_docs += 1
        return _sorted_vocabulary(term_counts, doc_counts, n_docs, self.ngram, self.sep_ngram, self.stopwords)


def create_vocabulary(
    it: TokenIterator | Sequence[TokenIterator] | Sequence[str],
    ngram: tuple[int, int] = (1, 1),
    stopwords: Iterable[str] = (),
    sep_ngram: str = "_",
    parallel: ParallelConfig | None = None,
) -> Vocabulary:
    """Collect term and document frequencies.

    `it` can be a single TokenIterator, a list of them (one per chunk, merged
    with combine_vocabularies), or a plain list of terms, which yields a
    vocabulary with zero counts.
    """
    ngram = check_ngram(ngram)
    stops = frozenset(stopwords)

    if not isinstance(it, TokenIterator) and isinstance(it, Sequence) and not isinstance(it, str) and all(isinstance(t, str) for t in it):
        terms = list(dict.fromkeys(t for t in it if t not in stops))
        zeros = np.zeros(len(terms), dtype=np.int64)
        return Vocabulary(terms, zeros, zeros.copy(), 0, ngram, sep_ngram, stops)

    job = _VocabJob(ngram=ngram, stopwords=stops, sep_ngram=sep_ngram)
    if isinstance(it, TokenIterator):
        vocab = job(it)
    else:
        parts = map_chunks(job, list(it), parallel)
        if not parts:
            vocab = _sorted_vocabulary(Counter(), Counter(), 0, ngram, sep_ngram, stops)
        else:
            vocab = combine_vocabularies(*parts)

    logger.info("Vocabulary: %d terms from %d documents", len(vocab), vocab.document_count)
    return vocab


def combine_vocabularies(*vocabs: Vocabulary) -> Vocabulary:
    if not vocabs:
        raise ValueError("combine_vocabularies needs at least one vocabulary")
    first = vocabs[0]
    for v in vocabs[1:]:
        if v.ngram != first.ngram or v.sep_ngram != first.sep_ngram:
            raise ValueError(
                f"Cannot combine vocabularies with ngram={v.ngram}/sep={v.sep_ngram!r} "
                f"and ngram={first.ngram}/sep={first.sep_ngram!r}"
            )

    term_counts: Counter = Counter()
    doc_counts: Counter = Counter()
    for v in vocabs:
        for t, tc, dc in zip(v.terms, v.term_count, v.doc_count):
            term_counts[t] += int(tc)
            doc_counts[t] += int(dc)
    return _sorted_vocabulary(
        term_counts,
        doc_counts,
        sum(v.document_count for v in vocabs),
        first.ngram,
        first.sep_ngram,
        frozenset().union(*(v.stopwords for v in vocabs)),
    )


def prune_vocabulary(
    vocab: Vocabulary,
    term_count_min: int = 1,
    term_count_max: float = math.inf,
    doc_proportion_min: float = 0.0,
    doc_proportion_max: float = 1.0,
    doc_count_min: int = 1,
    doc_count_max: float = math.inf,
    vocab_term_max: float = math.inf,
) -> Vocabulary:
    """Drop terms outside the given frequency bounds.

    Keeps the vocabulary order; `vocab_term_max` then keeps the most frequent
    of the survivors.
    """
    if doc_proportion_min > doc_proportion_max:
        raise ValueError(f"doc_proportion_min ({doc_proportion_min}) > doc_proportion_max ({doc_proportion_max})")

    n_docs = max(1, vocab.document_count)
    doc_prop = vocab.doc_count / n_docs
    keep = (
        (vocab.term_count >= term_count_min)
        & (vocab.term_count <= term_count_max)
        & (vocab.doc_count >= doc_count_min)
        & (vocab.doc_count <= doc_count_max)
        & (doc_prop >= doc_proportion_min)
        & (doc_prop <= doc_proportion_max)
    )
    idx = np.flatnonzero(keep)

    if math.isfinite(vocab_term_max) and len(idx) > vocab_term_max:
        # stable sort keeps the existing tie order
        by_freq = idx[np.argsort(-vocab.term_count[idx], kind="stable")]
        idx = np.sort(by_freq[: int(vocab_term_max)])

    pruned = Vocabulary(
        terms=[vocab.terms[i] for i in idx],
        term_count=vocab.term_count[idx].copy(),
        doc_count=vocab.doc_count[idx].copy(),
        document_count=vocab.document_count,
        ngram=vocab.ngram,
        sep_ngram=vocab.sep_ngram,
        stopwords=vocab.stopwords,
    )
    logger.info("Pruned vocabulary: %d -> %d terms", len(vocab), len(pruned))
    return pruned
