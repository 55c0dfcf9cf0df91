"""Streaming text vectorization.

Files are read lazily through a reader function, tokenized chunk by chunk,
and turned into vocabularies, document-term matrices and term-co-occurrence
matrices. Every step accepts either one iterator or a list of pre-split
iterators, in which case chunks are processed on the registered parallel
backend and merged.
"""

from .dtm import create_dtm
from .iterators import FileIterator, TokenChunk, TokenIterator, idir, ifiles, ifiles_parallel, itoken, itoken_parallel
from .matrix import LabeledMatrix
from .parallel import ParallelConfig, get_backend, register_backend
from .preprocess import PreprocessProfile, Preprocessor
from .readers import Documents, JsonlReader, read_file, read_jsonl, read_lines, read_pdf_pages
from .similarity import most_similar, sim2
from .tcm import create_tcm
from .tokenizers import char_tokenizer, punct_tokenizer, space_tokenizer, word_tokenizer
from .vectorizers import hash_vectorizer, vocab_vectorizer
from .vocabulary import Vocabulary, combine_vocabularies, create_vocabulary, prune_vocabulary
from .weighting import TfIdf, normalize

__all__ = [
    "Documents",
    "FileIterator",
    "JsonlReader",
    "LabeledMatrix",
    "ParallelConfig",
    "PreprocessProfile",
    "Preprocessor",
    "TfIdf",
    "TokenChunk",
    "TokenIterator",
    "Vocabulary",
    "char_tokenizer",
    "combine_vocabularies",
    "create_dtm",
    "create_tcm",
    "create_vocabulary",
    "get_backend",
    "hash_vectorizer",
    "idir",
    "ifiles",
    "ifiles_parallel",
    "itoken",
    "itoken_parallel",
    "most_similar",
    "normalize",
    "prune_vocabulary",
    "punct_tokenizer",
    "read_file",
    "read_jsonl",
    "read_lines",
    "read_pdf_pages",
    "register_backend",
    "sim2",
    "space_tokenizer",
    "vocab_vectorizer",
    "word_tokenizer",
]
