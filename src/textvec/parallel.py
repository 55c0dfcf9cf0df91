"""Chunk-level parallelism.

Work is pre-split into independent chunks (one iterator per chunk), each chunk
is processed by a worker, and partial results come back in input order so the
caller can merge them deterministically.

The default backend is registered module-wide with `register_backend`, the
same way a foreach backend is registered once per session. Individual calls
can override it by passing a `ParallelConfig`.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

BACKENDS = ("serial", "thread", "process")


@dataclass(frozen=True)
class ParallelConfig:
    backend: str = "serial"
    n_workers: int | None = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown parallel backend: {self.backend} (expected one of {', '.join(BACKENDS)})")
        if self.n_workers is not None and self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")

    def workers_for(self, n_chunks: int) -> int:
        n = self.n_workers or os.cpu_count() or 1
        return max(1, min(n, n_chunks))


_registered = ParallelConfig()


def register_backend(backend: str = "serial", n_workers: int | None = None) -> ParallelConfig:
    global _registered
    _registered = ParallelConfig(backend=backend, n_workers=n_workers)
    logger.info("Registered %s backend (n_workers=%s)", backend, n_workers)
    return _registered


def get_backend() -> ParallelConfig:
    return _registered


def parallel_cfg_from(cfg: dict | None) -> ParallelConfig:
    cfg = cfg or {}
    n_workers = cfg.get("n_workers")
    return ParallelConfig(
        backend=str(cfg.get("backend", "serial")).lower(),
        n_workers=int(n_workers) if n_workers is not None else None,
    )


def split_into(seq: Sequence[T], n: int) -> list[Sequence[T]]:
    """Split `seq` into at most `n` contiguous, near-equal slices.

    Slices are never empty (an empty `seq` gives an empty list).
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    total = len(seq)
    n = min(n, total)
    if n == 0:
        return []
    base, extra = divmod(total, n)
    out: list[Sequence[T]] = []
    start = 0
    for i in range(n):
        size = base + (1 if i < extra else 0)
        out.append(seq[start : start + size])
        start += size
    return out


def _make_executor(config: ParallelConfig, n_chunks: int) -> Executor:
    workers = config.workers_for(n_chunks)
    if config.backend == "process":
        return ProcessPoolExecutor(max_workers=workers)
    return ThreadPoolExecutor(max_workers=workers)


def map_chunks(fn: Callable[[T], R], chunks: Sequence[T], config: ParallelConfig | None = None) -> list[R]:
    """Apply `fn` to every chunk; results are returned in chunk order.

    A worker exception is re-raised here once the executor has shut down.
    """
    config = config or get_backend()
    chunks = list(chunks)
    if not chunks:
        return []

    if config.backend == "serial" or len(chunks) == 1:
        return [fn(c) for c in chunks]

    results: dict[int, Any] = {}
    with _make_executor(config, len(chunks)) as ex:
        futures = {ex.submit(fn, c): i for i, c in enumerate(chunks)}
        for fut in as_completed(futures):
            i = futures[fut]
            results[i] = fut.result()
            logger.debug("Chunk %d/%d done (%s backend)", i + 1, len(chunks), config.backend)

    return [results[i] for i in range(len(chunks))]
