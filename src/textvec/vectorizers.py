from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from sklearn.utils import murmurhash3_32

from .vocabulary import Vocabulary, check_ngram, generate_ngrams


class Vectorizer(Protocol):
    ngram: tuple[int, int]

    @property
    def n_features(self) -> int: ...

    @property
    def feature_names(self) -> list[str]: ...

    def terms(self, tokens: Sequence[str]) -> list[str]: ...

    def lookup(self, term: str) -> tuple[int, float] | None: ...

    def encode(self, tokens: Sequence[str]) -> list[tuple[int, float]]: ...

    def positions(self, tokens: Sequence[str]) -> list[tuple[int, float] | None]: ...


@dataclass
class VocabVectorizer:
    """Maps terms to the column of a fixed vocabulary; unknown terms are dropped."""

    vocab: Vocabulary

    @property
    def ngram(self) -> tuple[int, int]:
        return self.vocab.ngram

    @property
    def n_features(self) -> int:
        return len(self.vocab)

    @property
    def feature_names(self) -> list[str]:
        return list(self.vocab.terms)

    def terms(self, tokens: Sequence[str]) -> list[str]:
        return generate_ngrams(tokens, self.vocab.ngram, self.vocab.sep_ngram, self.vocab.stopwords)

    def lookup(self, term: str) -> tuple[int, float] | None:
        col = self.vocab.index.get(term)
        return None if col is None else (col, 1.0)

    def encode(self, tokens: Sequence[str]) -> list[tuple[int, float]]:
        out: list[tuple[int, float]] = []
        for term in self.terms(tokens):
            hit = self.lookup(term)
            if hit is not None:
                out.append(hit)
        return out

    def positions(self, tokens: Sequence[str]) -> list[tuple[int, float] | None]:
        """One entry per raw token; stopwords and unknown tokens are None."""
        stop = self.vocab.stopwords
        return [None if t in stop else self.lookup(t) for t in tokens]


@dataclass
class HashVectorizer:
    """Feature hashing: no vocabulary, fixed number of columns.

    Column = abs(murmurhash3_32(term)) % hash_size. With `signed_hash`, terms
    whose hash is negative contribute -1, which keeps inner products unbiased
    under collisions. Stopwords are removed before n-grams are built, as in
    create_vocabulary.
    """

    hash_size: int = 2**18
    ngram: tuple[int, int] = (1, 1)
    signed_hash: bool = False
    sep_ngram: str = "_"
    stopwords: frozenset[str] = frozenset()

    def __post_init__(self):
        if self.hash_size < 1:
            raise ValueError(f"hash_size must be positive, got {self.hash_size}")
        self.ngram = check_ngram(self.ngram)
        self.stopwords = frozenset(self.stopwords)

    @property
    def n_features(self) -> int:
        return self.hash_size

    @property
    def feature_names(self) -> list[str]:
        return [f"h{i}" for i in range(self.hash_size)]

    def terms(self, tokens: Sequence[str]) -> list[str]:
        return generate_ngrams(tokens, self.ngram, self.sep_ngram, self.stopwords)

    def lookup(self, term: str) -> tuple[int, float] | None:
        h = murmurhash3_32(term, seed=0)
        value = -1.0 if (self.signed_hash and h < 0) else 1.0
        return abs(h) % self.hash_size, value

    def encode(self, tokens: Sequence[str]) -> list[tuple[int, float]]:
        return [self.lookup(term) for term in self.terms(tokens)]

    def positions(self, tokens: Sequence[str]) -> list[tuple[int, float] | None]:
        return [None if t in self.stopwords else self.lookup(t) for t in tokens]


def vocab_vectorizer(vocab: Vocabulary) -> VocabVectorizer:
    return VocabVectorizer(vocab=vocab)


def hash_vectorizer(
    hash_size: int = 2**18,
    ngram: tuple[int, int] = (1, 1),
    signed_hash: bool = False,
    sep_ngram: str = "_",
    stopwords: Iterable[str] = (),
) -> HashVectorizer:
    return HashVectorizer(
        hash_size=hash_size,
        ngram=ngram,
        signed_hash=signed_hash,
        sep_ngram=sep_ngram,
        stopwords=frozenset(stopwords),
    )


def build_vectorizer(cfg: dict | None, vocab: Vocabulary | None = None):
    cfg = cfg or {}
    typ = str(cfg.get("type", "vocab")).lower()

    if typ == "vocab":
        if vocab is None:
            raise ValueError("vocab vectorizer needs a vocabulary")
        return vocab_vectorizer(vocab)

    if typ == "hash":
        ngram = cfg.get("ngram", [1, 1])
        return hash_vectorizer(
            hash_size=int(cfg.get("hash_size", 2**18)),
            ngram=(int(ngram[0]), int(ngram[1])),
            signed_hash=bool(cfg.get("signed_hash", False)),
            sep_ngram=str(cfg.get("sep_ngram", "_")),
            stopwords=[str(w) for w in (cfg.get("stopwords") or [])],
        )

    raise ValueError(f"Unknown vectorizer type: {typ}")
