from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.feature_extraction.text import TfidfTransformer
from sklearn.preprocessing import normalize as _sk_normalize

from .matrix import LabeledMatrix

NORMS = ("l1", "l2", "none")


def normalize(dtm: LabeledMatrix, norm: str = "l1") -> LabeledMatrix:
    """Row-normalize a DTM. "l1" turns counts into within-document frequencies."""
    if norm not in NORMS:
        raise ValueError(f"Unknown norm: {norm} (expected one of {', '.join(NORMS)})")
    if norm == "none":
        return dtm
    mat = _sk_normalize(dtm.matrix.tocsr().astype(np.float64), norm=norm, axis=1)
    return LabeledMatrix(matrix=mat, row_names=list(dtm.row_names), col_names=list(dtm.col_names))


@dataclass
class TfIdf:
    """TF-IDF reweighting of a DTM built by create_dtm.

    Thin wrapper around scikit-learn's TfidfTransformer that keeps the row
    and column names attached. Fit once on a training DTM, then transform
    new DTMs built with the same vectorizer.
    """

    norm: str = "l2"
    smooth_idf: bool = True
    sublinear_tf: bool = False

    def __post_init__(self):
        if self.norm not in NORMS:
            raise ValueError(f"Unknown norm: {self.norm} (expected one of {', '.join(NORMS)})")
        self.transformer: TfidfTransformer | None = None
        self._col_names: list[str] | None = None

    def fit(self, dtm: LabeledMatrix) -> "TfIdf":
        self.transformer = TfidfTransformer(
            norm=None if self.norm == "none" else self.norm,
            smooth_idf=self.smooth_idf,
            sublinear_tf=self.sublinear_tf,
        )
        self.transformer.fit(dtm.matrix.tocsr())
        self._col_names = list(dtm.col_names)
        return self

    def transform(self, dtm: LabeledMatrix) -> LabeledMatrix:
        if self.transformer is None:
            raise RuntimeError("TfIdf.transform called before fit")
        if dtm.shape[1] != len(self._col_names or []):
            raise ValueError(f"DTM has {dtm.shape[1]} columns, model was fit on {len(self._col_names or [])}")
        mat = self.transformer.transform(dtm.matrix.tocsr())
        return LabeledMatrix(matrix=mat.astype(np.float64), row_names=list(dtm.row_names), col_names=list(dtm.col_names))

    def fit_transform(self, dtm: LabeledMatrix) -> LabeledMatrix:
        return self.fit(dtm).transform(dtm)

    @property
    def idf(self) -> np.ndarray:
        if self.transformer is None:
            raise RuntimeError("TfIdf.idf accessed before fit")
        return self.transformer.idf_


def tfidf_from_cfg(cfg: dict | None) -> TfIdf:
    cfg = cfg or {}
    return TfIdf(
        norm=str(cfg.get("norm", "l2")),
        smooth_idf=bool(cfg.get("smooth_idf", True)),
        sublinear_tf=bool(cfg.get("sublinear_tf", False)),
    )
