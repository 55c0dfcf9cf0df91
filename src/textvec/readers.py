"""File readers and the reader contract.

A reader takes a path and returns the documents stored in that file:

- a mapping ``{doc_id: text}``: the keys become the document ids;
- any other iterable of strings: one document per element, with ids
  generated as ``"{file_name}_{n}"`` (1-based, i.e. one document per line
  for line-oriented files).

``as_documents`` enforces this contract for every file the iterators read.
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Union


ReaderOutput = Union[Mapping[str, str], Iterable[str]]
Reader = Callable[[Path], ReaderOutput]


@dataclass
class Documents:
    ids: list[str]
    texts: list[str]
    source: str | None = None

    def __len__(self) -> int:
        return len(self.texts)


def auto_ids(file_name: str, n: int) -> list[str]:
    return [f"{file_name}_{i}" for i in range(1, n + 1)]


def as_documents(path: Path, output: Any) -> Documents:
    """Apply the reader contract to whatever a reader returned for `path`."""
    path = Path(path)
    if isinstance(output, (str, bytes)):
        raise TypeError(
            f"Reader output for {path.name} must be a collection of strings, got a single {type(output).__name__}"
        )

    if isinstance(output, Mapping):
        ids = [str(k) for k in output.keys()]
        texts = list(output.values())
    elif isinstance(output, Iterable):
        texts = list(output)
        ids = auto_ids(path.name, len(texts))
    else:
        raise TypeError(f"Reader output for {path.name} is not iterable: {type(output).__name__}")

    for doc_id, text in zip(ids, texts):
        if not isinstance(text, str):
            raise TypeError(f"Document {doc_id!r} from {path.name} is {type(text).__name__}, expected str")

    return Documents(ids=ids, texts=texts, source=str(path))


# ---- Built-in readers ----


def read_lines(path: Path) -> list[str]:
    """One document per physical line, blank lines included.

    Unnamed, so the generated ids carry the line number.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        return [line.rstrip("\r\n") for line in f]


def read_file(path: Path) -> dict[str, str]:
    """The whole file is one document named after the file stem."""
    path = Path(path)
    return {path.stem: path.read_text(encoding="utf-8")}


@dataclass(frozen=True)
class JsonlReader:
    """Named documents from JSONL, one object per line."""

    id_field: str = "id"
    text_field: str = "text"

    def __call__(self, path: Path) -> dict[str, str]:
        docs: dict[str, str] = {}
        with Path(path).open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                obj = json.loads(line)
                docs[str(obj[self.id_field])] = str(obj[self.text_field])
        return docs


def read_jsonl(path: Path) -> dict[str, str]:
    return JsonlReader()(path)


def read_pdf_pages(path: Path) -> dict[str, str]:
    """Extract text per page using PyMuPDF.

    Returns {"{stem}_p0001": text, ...}
    """
    import fitz  # PyMuPDF

    path = Path(path)
    doc = fitz.open(path)
    pages: dict[str, str] = {}
    try:
        for i in range(doc.page_count):
            page = doc.load_page(i)
            pages[f"{path.stem}_p{i + 1:04d}"] = page.get_text("text")
    finally:
        doc.close()
    return pages


def build_reader(cfg: dict | None) -> Reader:
    cfg = cfg or {}
    typ = str(cfg.get("type", "lines")).lower()

    if typ == "lines":
        return read_lines
    if typ == "file":
        return read_file
    if typ == "jsonl":
        return JsonlReader(
            id_field=str(cfg.get("id_field", "id")),
            text_field=str(cfg.get("text_field", "text")),
        )
    if typ == "pdf":
        return read_pdf_pages

    raise ValueError(f"Unknown reader type: {typ}")
