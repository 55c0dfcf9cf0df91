from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import sparse

from .iterators import TokenIterator
from .matrix import MATRIX_TYPES, LabeledMatrix, convert
from .parallel import ParallelConfig, map_chunks
from .vectorizers import Vectorizer

logger = logging.getLogger(__name__)

CONTEXTS = ("symmetric", "right", "left")


def default_weights(window: int) -> list[float]:
    return [1.0 / d for d in range(1, window + 1)]


@dataclass(frozen=True)
class _TcmJob:
    vectorizer: Vectorizer
    window: int
    context: str
    weights: tuple[float, ...]
    binary: bool

    def _cell(self, focus: int, ctx: int) -> tuple[int, int]:
        if self.context == "symmetric":
            return (focus, ctx) if focus <= ctx else (ctx, focus)
        if self.context == "right":
            return focus, ctx
        return ctx, focus

    def __call__(self, it: TokenIterator) -> sparse.csr_matrix:
        acc: dict[tuple[int, int], float] = defaultdict(float)
        for chunk in it:
            for tokens in chunk.tokens:
                # stopwords and out-of-vocabulary tokens keep their position
                cols = self.vectorizer.positions(tokens)
                seen: set[tuple[int, int]] = set()
                for i, focus in enumerate(cols):
                    if focus is None:
                        continue
                    for d in range(1, self.window + 1):
                        j = i + d
                        if j >= len(cols):
                            break
                        ctx = cols[j]
                        if ctx is None:
                            continue
                        cell = self._cell(focus[0], ctx[0])
                        if self.binary:
                            if cell in seen:
                                continue
                            seen.add(cell)
                            acc[cell] = acc[cell] + 1.0
                        else:
                            acc[cell] = acc[cell] + self.weights[d - 1] * focus[1] * ctx[1]

        n = self.vectorizer.n_features
        if not acc:
            return sparse.csr_matrix((n, n), dtype=np.float64)
        keys = np.array(list(acc.keys()), dtype=np.int64)
        vals = np.fromiter(acc.values(), dtype=np.float64, count=len(acc))
        return sparse.coo_matrix((vals, (keys[:, 0], keys[:, 1])), shape=(n, n)).tocsr()


def create_tcm(
    it: TokenIterator | Sequence[TokenIterator],
    vectorizer: Vectorizer,
    skip_grams_window: int = 5,
    skip_grams_window_context: str = "symmetric",
    weights: Sequence[float] | None = None,
    binary_cooccurence: bool = False,
    type: str = "csr",
    parallel: ParallelConfig | None = None,
) -> LabeledMatrix:
    """Term-co-occurrence matrix over a sliding window.

    Each pair of terms at distance d <= window adds weights[d-1] (1/d by
    default). The symmetric context stores only the upper triangle.
    """
    if skip_grams_window < 1:
        raise ValueError(f"skip_grams_window must be >= 1, got {skip_grams_window}")
    if skip_grams_window_context not in CONTEXTS:
        raise ValueError(f"Unknown window context: {skip_grams_window_context} (expected one of {', '.join(CONTEXTS)})")
    if tuple(vectorizer.ngram) != (1, 1):
        raise ValueError(f"TCM needs a unigram vectorizer, got ngram={tuple(vectorizer.ngram)}")
    if type not in MATRIX_TYPES:
        raise ValueError(f"Unknown sparse matrix type: {type} (expected one of {', '.join(MATRIX_TYPES)})")

    w = list(weights) if weights is not None else default_weights(skip_grams_window)
    if len(w) != skip_grams_window:
        raise ValueError(f"Expected {skip_grams_window} weights, got {len(w)}")

    job = _TcmJob(
        vectorizer=vectorizer,
        window=skip_grams_window,
        context=skip_grams_window_context,
        weights=tuple(float(x) for x in w),
        binary=binary_cooccurence,
    )
    if isinstance(it, TokenIterator):
        parts = [job(it)]
    else:
        parts = map_chunks(job, list(it), parallel)

    n = vectorizer.n_features
    mat = sparse.csr_matrix((n, n), dtype=np.float64)
    for p in parts:
        mat = mat + p

    names = vectorizer.feature_names
    logger.info("TCM: %d x %d, %d non-zeros (window=%d, %s)", n, n, mat.nnz, skip_grams_window, skip_grams_window_context)
    return LabeledMatrix(matrix=convert(mat.tocsr(), type), row_names=names, col_names=list(names))
