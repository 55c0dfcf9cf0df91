from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from scipy import sparse

MATRIX_TYPES = ("csr", "csc", "coo", "dok")


def convert(mat: sparse.spmatrix, type: str) -> sparse.spmatrix:
    if type not in MATRIX_TYPES:
        raise ValueError(f"Unknown sparse matrix type: {type} (expected one of {', '.join(MATRIX_TYPES)})")
    return mat.asformat(type)


@dataclass
class LabeledMatrix:
    """A scipy.sparse matrix with row and column names."""

    matrix: sparse.spmatrix
    row_names: list[str]
    col_names: list[str]

    def __post_init__(self):
        n_rows, n_cols = self.matrix.shape
        if len(self.row_names) != n_rows or len(self.col_names) != n_cols:
            raise ValueError(
                f"Names do not match matrix shape {self.matrix.shape}: "
                f"{len(self.row_names)} row names, {len(self.col_names)} column names"
            )

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape

    def save(self, path: Path) -> tuple[Path, Path]:
        """Write `<path>.npz` plus a `<path>.names.json` sidecar."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)
        sparse.save_npz(path, self.matrix.tocsr())
        names_path = path.with_suffix(".names.json")
        names_path.write_text(
            json.dumps({"rows": self.row_names, "cols": self.col_names}, ensure_ascii=False),
            encoding="utf-8",
        )
        return path, names_path

    @classmethod
    def load(cls, path: Path) -> "LabeledMatrix":
        path = Path(path).with_suffix(".npz")
        names = json.loads(path.with_suffix(".names.json").read_text(encoding="utf-8"))
        return cls(matrix=sparse.load_npz(path), row_names=list(names["rows"]), col_names=list(names["cols"]))
