"""YAML pipeline configuration.

Example:

    reader: {type: jsonl, id_field: id, text_field: text}
    tokenizer: word
    preprocess: {lowercase: true, remove_numbers: true}
    vocabulary:
      ngram: [1, 2]
      stopwords: [the, a]
      stopwords_file: stopwords.txt
      prune: {term_count_min: 2, doc_proportion_max: 0.5}
    vectorizer: {type: vocab}          # or {type: hash, hash_size: 1048576}
    tfidf: {enabled: true, norm: l2}
    tcm: {enabled: true, window: 5, context: symmetric}
    parallel: {backend: process, n_workers: 4, n_chunks: 8}

Every section is optional; missing keys fall back to the defaults below.
With a hash vectorizer, `vocabulary.ngram`, `sep_ngram` and the stopwords
still apply; only pruning needs a vocabulary.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .parallel import ParallelConfig, parallel_cfg_from
from .preprocess import PreprocessProfile, profile_from_cfg


@dataclass(frozen=True)
class PruneConfig:
    term_count_min: int = 1
    term_count_max: float = math.inf
    doc_proportion_min: float = 0.0
    doc_proportion_max: float = 1.0
    doc_count_min: int = 1
    doc_count_max: float = math.inf
    vocab_term_max: float = math.inf

    def as_kwargs(self) -> dict:
        return {
            "term_count_min": self.term_count_min,
            "term_count_max": self.term_count_max,
            "doc_proportion_min": self.doc_proportion_min,
            "doc_proportion_max": self.doc_proportion_max,
            "doc_count_min": self.doc_count_min,
            "doc_count_max": self.doc_count_max,
            "vocab_term_max": self.vocab_term_max,
        }


@dataclass(frozen=True)
class TcmConfig:
    enabled: bool = False
    window: int = 5
    context: str = "symmetric"
    binary: bool = False


@dataclass(frozen=True)
class PipelineConfig:
    reader: dict = field(default_factory=dict)
    tokenizer: str = "word"
    preprocess: PreprocessProfile = PreprocessProfile()
    ngram: tuple[int, int] = (1, 1)
    sep_ngram: str = "_"
    stopwords: frozenset[str] = frozenset()
    prune: PruneConfig = PruneConfig()
    vectorizer: dict = field(default_factory=lambda: {"type": "vocab"})
    tfidf: dict = field(default_factory=dict)
    tcm: TcmConfig = TcmConfig()
    parallel: ParallelConfig = ParallelConfig()
    n_chunks: int = 4

    @property
    def tfidf_enabled(self) -> bool:
        return bool(self.tfidf.get("enabled", False))


def _inf_or(value, cast):
    if value is None:
        return math.inf
    return cast(value)


def load_stopwords(path: Path) -> frozenset[str]:
    words: set[str] = set()
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            w = line.strip()
            if w and not w.startswith("#"):
                words.add(w)
    return frozenset(words)


def config_from_cfg(cfg: dict | None, base_dir: Path | None = None) -> PipelineConfig:
    cfg = cfg or {}
    base_dir = base_dir or Path(".")

    vocab_cfg = cfg.get("vocabulary") or {}
    ngram = vocab_cfg.get("ngram", [1, 1])

    stopwords = set(str(w) for w in (vocab_cfg.get("stopwords") or []))
    if vocab_cfg.get("stopwords_file"):
        stop_path = Path(vocab_cfg["stopwords_file"])
        if not stop_path.is_absolute():
            stop_path = base_dir / stop_path
        stopwords |= load_stopwords(stop_path)

    prune_cfg = vocab_cfg.get("prune") or {}
    prune = PruneConfig(
        term_count_min=int(prune_cfg.get("term_count_min", 1)),
        term_count_max=_inf_or(prune_cfg.get("term_count_max"), int),
        doc_proportion_min=float(prune_cfg.get("doc_proportion_min", 0.0)),
        doc_proportion_max=float(prune_cfg.get("doc_proportion_max", 1.0)),
        doc_count_min=int(prune_cfg.get("doc_count_min", 1)),
        doc_count_max=_inf_or(prune_cfg.get("doc_count_max"), int),
        vocab_term_max=_inf_or(prune_cfg.get("vocab_term_max"), int),
    )

    tcm_cfg = cfg.get("tcm") or {}
    tcm = TcmConfig(
        enabled=bool(tcm_cfg.get("enabled", False)),
        window=int(tcm_cfg.get("window", 5)),
        context=str(tcm_cfg.get("context", "symmetric")),
        binary=bool(tcm_cfg.get("binary", False)),
    )

    par_cfg = cfg.get("parallel") or {}

    return PipelineConfig(
        reader=dict(cfg.get("reader") or {}),
        tokenizer=str(cfg.get("tokenizer", "word")),
        preprocess=profile_from_cfg(cfg.get("preprocess")),
        ngram=(int(ngram[0]), int(ngram[1])),
        sep_ngram=str(vocab_cfg.get("sep_ngram", "_")),
        stopwords=frozenset(stopwords),
        prune=prune,
        vectorizer=dict(cfg.get("vectorizer") or {"type": "vocab"}),
        tfidf=dict(cfg.get("tfidf") or {}),
        tcm=tcm,
        parallel=parallel_cfg_from(par_cfg),
        n_chunks=int(par_cfg.get("n_chunks", 4)),
    )


def load_config(path: Path | None) -> tuple[PipelineConfig, dict]:
    """Returns the parsed config and the raw dict (for run artifacts)."""
    if path is None:
        return config_from_cfg({}), {}
    path = Path(path)
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    return config_from_cfg(raw, base_dir=path.parent), raw
