from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import sparse

from .iterators import TokenIterator
from .matrix import MATRIX_TYPES, LabeledMatrix, convert
from .parallel import ParallelConfig, map_chunks
from .vectorizers import Vectorizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _DtmJob:
    vectorizer: Vectorizer

    def __call__(self, it: TokenIterator) -> tuple[sparse.csr_matrix, list[str]]:
        rows: list[int] = []
        cols: list[int] = []
        vals: list[float] = []
        ids: list[str] = []

        for chunk in it:
            for doc_id, tokens in zip(chunk.ids, chunk.tokens):
                r = len(ids)
                ids.append(doc_id)
                for col, value in self.vectorizer.encode(tokens):
                    rows.append(r)
                    cols.append(col)
                    vals.append(value)

        n_features = self.vectorizer.n_features
        # coo -> csr sums repeated (row, col) entries
        mat = sparse.coo_matrix(
            (np.asarray(vals, dtype=np.float64), (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
            shape=(len(ids), n_features),
        ).tocsr()
        mat.eliminate_zeros()
        return mat, ids


def create_dtm(
    it: TokenIterator | Sequence[TokenIterator],
    vectorizer: Vectorizer,
    type: str = "csr",
    parallel: ParallelConfig | None = None,
) -> LabeledMatrix:
    """Document-term matrix: one row per document, in iterator order.

    A list of iterators is processed chunk by chunk (possibly in parallel)
    and the partial matrices are stacked in chunk order.
    """
    if type not in MATRIX_TYPES:
        raise ValueError(f"Unknown sparse matrix type: {type} (expected one of {', '.join(MATRIX_TYPES)})")

    job = _DtmJob(vectorizer=vectorizer)
    if isinstance(it, TokenIterator):
        parts = [job(it)]
    else:
        parts = map_chunks(job, list(it), parallel)

    names = vectorizer.feature_names
    if not parts:
        mat = sparse.csr_matrix((0, vectorizer.n_features), dtype=np.float64)
        ids: list[str] = []
    else:
        mat = sparse.vstack([m for m, _ in parts], format="csr")
        ids = [doc_id for _, part_ids in parts for doc_id in part_ids]

    dup = len(ids) - len(set(ids))
    if dup:
        logger.warning("DTM has %d duplicated document ids", dup)
    logger.info("DTM: %d documents x %d features, %d non-zeros", mat.shape[0], mat.shape[1], mat.nnz)
    return LabeledMatrix(matrix=convert(mat, type), row_names=ids, col_names=names)
