"""Shared fixtures for the textvec test suite.

WHY: Most modules are exercised end to end (files -> tokens -> vocabulary ->
matrices), so the same small corpus is needed in many places.

HOW: A three-file line corpus is written to tmp_path; the expected counts
below are derived from it by hand.

RULES:
- All file I/O goes through tmp_path.
- Texts are lowercase and punctuation-free so word_tokenizer output is obvious.
"""

import pytest

from textvec import parallel

CORPUS = {
    "a.txt": ["the cat sat", "the dog sat"],
    "b.txt": ["a cat and a dog"],
    "c.txt": ["the end", "cat cat cat"],
}


@pytest.fixture
def corpus_files(tmp_path):
    paths = []
    for name, lines in CORPUS.items():
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        paths.append(p)
    return paths


@pytest.fixture
def texts():
    return [line for lines in CORPUS.values() for line in lines]


@pytest.fixture(autouse=True)
def reset_backend():
    """The registered backend is module state; keep tests independent."""
    yield
    parallel.register_backend("serial")
