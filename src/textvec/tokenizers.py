from __future__ import annotations

import re
from typing import Callable


_re_word = re.compile(r"\w+", flags=re.UNICODE)
_re_word_punct = re.compile(r"\w+|[^\w\s]", flags=re.UNICODE)

Tokenizer = Callable[[str], list[str]]


def word_tokenizer(text: str) -> list[str]:
    """Split on anything that is not a word character."""
    return _re_word.findall(text)


def space_tokenizer(text: str, sep: str = " ") -> list[str]:
    return [tok for tok in text.split(sep) if tok]


def char_tokenizer(text: str) -> list[str]:
    return list(text)


def punct_tokenizer(text: str) -> list[str]:
    """Tokenize without external deps (tokens ≈ words/punct)."""
    return _re_word_punct.findall(text)


_NO_SPACE_BEFORE = frozenset(".,:;?!)]}")
_NO_SPACE_AFTER = frozenset("([{")


def detokenize(tokens: list[str]) -> str:
    """Join punct_tokenizer output back into readable text."""
    parts: list[str] = []
    prev = None
    for tok in tokens:
        if prev is not None and tok not in _NO_SPACE_BEFORE and prev not in _NO_SPACE_AFTER:
            parts.append(" ")
        parts.append(tok)
        prev = tok
    return "".join(parts)


_TOKENIZERS: dict[str, Tokenizer] = {
    "word": word_tokenizer,
    "space": space_tokenizer,
    "char": char_tokenizer,
    "punct": punct_tokenizer,
}


def build_tokenizer(name: str | None) -> Tokenizer:
    typ = str(name or "word").lower()
    try:
        return _TOKENIZERS[typ]
    except KeyError:
        raise ValueError(f"Unknown tokenizer: {typ}") from None
