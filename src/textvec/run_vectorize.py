from __future__ import annotations

"""Corpus vectorization runner.

Reads files through the configured reader, then writes into a run directory:
- vocab.csv                    term, term_count, doc_count (after pruning)
- dtm.npz / dtm.names.json     document-term matrix + row/column names
- tfidf.npz / tfidf.names.json (optional)
- tcm.npz / tcm.names.json     (optional) term-co-occurrence matrix
- pipeline_config.yaml         the config used for the run
- summary.json                 counts, shapes and timings
"""

import argparse
import csv
import json
import logging
import time
from datetime import datetime
from pathlib import Path

import yaml

from .config import PipelineConfig, load_config
from .dtm import create_dtm
from .iterators import FileIterator, TokenIterator, ifiles, itoken, itoken_parallel
from .preprocess import Preprocessor
from .readers import build_reader
from .tcm import create_tcm
from .tokenizers import build_tokenizer
from .vectorizers import build_vectorizer
from .vocabulary import Vocabulary, create_vocabulary, prune_vocabulary
from .weighting import tfidf_from_cfg

logger = logging.getLogger(__name__)


def collect_files(inputs: list[str], pattern: str) -> list[Path]:
    files: list[Path] = []
    for item in inputs:
        p = Path(item)
        if p.is_dir():
            files.extend(sorted(f for f in p.glob(pattern) if f.is_file()))
        elif p.is_file():
            files.append(p)
        else:
            raise FileNotFoundError(f"Input not found: {p}")
    return files


def build_token_iterators(files: list[Path], cfg: PipelineConfig) -> TokenIterator | list[TokenIterator]:
    fi: FileIterator = ifiles(files, reader=build_reader(cfg.reader))
    tokenizer = build_tokenizer(cfg.tokenizer)
    preprocessor = Preprocessor(cfg.preprocess)
    if cfg.parallel.backend == "serial":
        return itoken(fi, tokenizer=tokenizer, preprocessor=preprocessor)
    return itoken_parallel(fi, tokenizer=tokenizer, preprocessor=preprocessor, n_chunks=cfg.n_chunks)


def write_vocab_csv(vocab: Vocabulary, out_path: Path) -> None:
    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=["term", "term_count", "doc_count"])
        w.writeheader()
        for row in vocab.to_rows():
            w.writerow(row)


def run(files: list[Path], cfg: PipelineConfig, run_dir: Path) -> dict:
    run_dir.mkdir(parents=True, exist_ok=True)
    its = build_token_iterators(files, cfg)
    timings: dict[str, float] = {}

    vocab = None
    vec_cfg = dict(cfg.vectorizer)
    if str(vec_cfg.get("type", "vocab")).lower() == "vocab":
        t0 = time.perf_counter()
        vocab = create_vocabulary(
            its, ngram=cfg.ngram, stopwords=cfg.stopwords, sep_ngram=cfg.sep_ngram, parallel=cfg.parallel
        )
        vocab = prune_vocabulary(vocab, **cfg.prune.as_kwargs())
        timings["vocabulary_s"] = time.perf_counter() - t0
        write_vocab_csv(vocab, run_dir / "vocab.csv")
    else:
        vec_cfg.setdefault("ngram", list(cfg.ngram))
        vec_cfg.setdefault("sep_ngram", cfg.sep_ngram)
        vec_cfg.setdefault("stopwords", sorted(cfg.stopwords))

    vectorizer = build_vectorizer(vec_cfg, vocab)

    t0 = time.perf_counter()
    dtm = create_dtm(its, vectorizer, parallel=cfg.parallel)
    timings["dtm_s"] = time.perf_counter() - t0
    dtm.save(run_dir / "dtm.npz")

    summary: dict = {
        "n_files": len(files),
        "n_documents": dtm.shape[0],
        "n_features": dtm.shape[1],
        "dtm_nnz": int(dtm.matrix.nnz),
        "vocab_size": len(vocab) if vocab is not None else None,
        "vectorizer": vec_cfg.get("type", "vocab"),
        "parallel_backend": cfg.parallel.backend,
    }

    if cfg.tfidf_enabled:
        t0 = time.perf_counter()
        tfidf = tfidf_from_cfg(cfg.tfidf).fit_transform(dtm)
        timings["tfidf_s"] = time.perf_counter() - t0
        tfidf.save(run_dir / "tfidf.npz")

    if cfg.tcm.enabled:
        t0 = time.perf_counter()
        tcm = create_tcm(
            its,
            vectorizer,
            skip_grams_window=cfg.tcm.window,
            skip_grams_window_context=cfg.tcm.context,
            binary_cooccurence=cfg.tcm.binary,
            parallel=cfg.parallel,
        )
        timings["tcm_s"] = time.perf_counter() - t0
        tcm.save(run_dir / "tcm.npz")
        summary["tcm_nnz"] = int(tcm.matrix.nnz)

    summary["timings"] = timings
    return summary


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Vectorize a corpus of text files (vocabulary, DTM, optional TF-IDF/TCM)")
    p.add_argument("--input", required=True, action="append", help="File or directory (repeatable)")
    p.add_argument("--pattern", default="*.txt", help="Glob for directories (default *.txt)")
    p.add_argument("--config", required=False, help="YAML pipeline config (optional)")
    p.add_argument("--outdir", default="results/runs", help="Output directory for run artifacts")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default WARNING)")
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg, raw_cfg = load_config(Path(args.config) if args.config else None)
    files = collect_files(args.input, args.pattern)

    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(args.outdir) / f"{run_id}_vectorize"

    t0 = time.perf_counter()
    summary = run(files, cfg, run_dir)
    summary["run_id"] = run_id
    summary["total_s"] = time.perf_counter() - t0

    (run_dir / "pipeline_config.yaml").write_text(yaml.safe_dump(raw_cfg, sort_keys=False), encoding="utf-8")
    (run_dir / "summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")

    print(
        f"Vectorized {summary['n_documents']} documents from {summary['n_files']} files "
        f"-> {summary['n_features']} features ({summary['dtm_nnz']} non-zeros)"
    )
    print(f"Wrote run artifacts to {run_dir}")


if __name__ == "__main__":
    main()
