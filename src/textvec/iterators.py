from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .parallel import split_into
from .readers import Documents, Reader, as_documents, read_lines
from .tokenizers import Tokenizer, word_tokenizer

logger = logging.getLogger(__name__)


@dataclass
class TokenChunk:
    ids: list[str]
    tokens: list[list[str]]

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass
class FileIterator:
    """Lazily reads one file at a time through `reader`.

    Re-iterable: every pass re-opens the files. Holds only paths and the
    reader, so it pickles cleanly for process workers as long as the reader
    is a module-level function or a picklable callable.
    """

    files: list[Path]
    reader: Reader = read_lines

    def __post_init__(self):
        self.files = [Path(f) for f in self.files]

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[Documents]:
        for path in self.files:
            docs = as_documents(path, self.reader(path))
            logger.debug("Read %d documents from %s", len(docs), path.name)
            yield docs


def ifiles(files: Iterable[str | Path], reader: Reader = read_lines) -> FileIterator:
    return FileIterator(files=list(files), reader=reader)


def idir(path: str | Path, pattern: str = "*", reader: Reader = read_lines) -> FileIterator:
    root = Path(path)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    files = sorted(p for p in root.glob(pattern) if p.is_file())
    return FileIterator(files=files, reader=reader)


def ifiles_parallel(files: Iterable[str | Path], reader: Reader = read_lines, n_chunks: int = 4) -> list[FileIterator]:
    """Pre-split a file list into `n_chunks` independent iterators."""
    return [FileIterator(files=list(part), reader=reader) for part in split_into(list(files), n_chunks)]


@dataclass
class TokenIterator:
    """Re-iterable stream of TokenChunk.

    `source` yields Documents: a FileIterator (one chunk per file) or a list
    of in-memory Documents (one chunk each). When `pretokenized` is set, the
    texts are already token lists and are passed through untouched.
    """

    source: Iterable[Documents]
    tokenizer: Tokenizer = word_tokenizer
    preprocessor: Callable[[str], str] | None = None
    pretokenized: bool = False

    def __iter__(self) -> Iterator[TokenChunk]:
        for docs in self.source:
            if self.pretokenized:
                tokens = [list(t) for t in docs.texts]
            else:
                tokens = [self.tokenizer(self._prep(t)) for t in docs.texts]
            yield TokenChunk(ids=list(docs.ids), tokens=tokens)

    def _prep(self, text: str) -> str:
        return self.preprocessor(text) if self.preprocessor is not None else text


def _is_pretokenized(docs: Sequence) -> bool:
    return bool(docs) and all(isinstance(d, (list, tuple)) for d in docs)


def _in_memory_documents(
    docs: Mapping[str, str] | Sequence[str] | Sequence[list[str]],
    ids: Sequence[str] | None,
) -> tuple[list[str], list]:
    if isinstance(docs, Mapping):
        if ids is not None:
            raise ValueError("ids must not be given together with a mapping of documents")
        return [str(k) for k in docs.keys()], list(docs.values())

    if isinstance(docs, (str, bytes)):
        raise TypeError("docs must be a collection of documents, got a single string")

    texts = list(docs)
    if ids is None:
        return [str(i) for i in range(1, len(texts) + 1)], texts

    ids = [str(i) for i in ids]
    if len(ids) != len(texts):
        raise ValueError(f"Got {len(ids)} ids for {len(texts)} documents")
    return ids, texts


def _chunked(
    docs,
    ids: Sequence[str] | None,
    n_chunks: int,
) -> tuple[list[list[Documents]], bool]:
    doc_ids, texts = _in_memory_documents(docs, ids)
    pretokenized = _is_pretokenized(texts)
    if not pretokenized:
        for doc_id, text in zip(doc_ids, texts):
            if not isinstance(text, str):
                raise TypeError(f"Document {doc_id!r} is {type(text).__name__}, expected str")

    id_parts = split_into(doc_ids, n_chunks)
    text_parts = split_into(texts, n_chunks)
    chunks = [Documents(ids=list(i), texts=list(t)) for i, t in zip(id_parts, text_parts)]
    return [[c] for c in chunks], pretokenized


def itoken(
    docs,
    tokenizer: Tokenizer = word_tokenizer,
    preprocessor: Callable[[str], str] | None = None,
    ids: Sequence[str] | None = None,
    n_chunks: int = 10,
) -> TokenIterator:
    """Token iterator over files or in-memory documents.

    - FileIterator: one chunk per file, ids follow the reader contract.
    - Mapping {id: text}: keys are the ids.
    - Sequence of strings: `ids` or "1".."n".
    - Sequence of token lists: tokenization and preprocessing are skipped.
    """
    if isinstance(docs, FileIterator):
        if ids is not None:
            raise ValueError("ids come from the reader when iterating over files")
        return TokenIterator(source=docs, tokenizer=tokenizer, preprocessor=preprocessor)

    parts, pretokenized = _chunked(docs, ids, n_chunks)
    flat = [c for part in parts for c in part]
    return TokenIterator(source=flat, tokenizer=tokenizer, preprocessor=preprocessor, pretokenized=pretokenized)


def itoken_parallel(
    docs,
    tokenizer: Tokenizer = word_tokenizer,
    preprocessor: Callable[[str], str] | None = None,
    ids: Sequence[str] | None = None,
    n_chunks: int = 4,
) -> list[TokenIterator]:
    """One TokenIterator per chunk, for the parallel create_* paths."""
    if isinstance(docs, list) and docs and all(isinstance(d, FileIterator) for d in docs):
        return [TokenIterator(source=fi, tokenizer=tokenizer, preprocessor=preprocessor) for fi in docs]

    if isinstance(docs, FileIterator):
        return [
            TokenIterator(source=FileIterator(files=list(part), reader=docs.reader), tokenizer=tokenizer, preprocessor=preprocessor)
            for part in split_into(docs.files, n_chunks)
        ]

    parts, pretokenized = _chunked(docs, ids, n_chunks)
    return [
        TokenIterator(source=part, tokenizer=tokenizer, preprocessor=preprocessor, pretokenized=pretokenized)
        for part in parts
    ]
