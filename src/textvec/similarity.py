from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .matrix import LabeledMatrix


@dataclass
class SimilarityResult:
    idx: int
    name: str
    score: float


def _check_cols(x: LabeledMatrix, y: LabeledMatrix) -> None:
    if x.shape[1] != y.shape[1]:
        raise ValueError(f"Column mismatch: {x.shape[1]} vs {y.shape[1]}")


def sim2(x: LabeledMatrix, y: LabeledMatrix | None = None) -> np.ndarray:
    """Pairwise cosine similarity between the rows of x and y (or x itself).

    Works with sparse matrices directly (scikit handles it).
    """
    if y is None:
        return cosine_similarity(x.matrix)
    _check_cols(x, y)
    return cosine_similarity(x.matrix, y.matrix)


def most_similar(query: LabeledMatrix, matrix: LabeledMatrix, k: int = 5) -> list[SimilarityResult]:
    """Top-k rows of `matrix` by cosine similarity to the first row of `query`."""
    _check_cols(query, matrix)
    if query.shape[0] == 0:
        raise ValueError("Empty query: expected at least one row")
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    sims = cosine_similarity(query.matrix.tocsr()[0], matrix.matrix)[0]
    if k >= len(sims):
        top_idx = np.argsort(-sims, kind="stable")
    else:
        top_idx = np.argpartition(-sims, kth=k - 1)[:k]
        top_idx = top_idx[np.argsort(-sims[top_idx], kind="stable")]
    return [SimilarityResult(idx=int(i), name=matrix.row_names[int(i)], score=float(sims[i])) for i in top_idx]
