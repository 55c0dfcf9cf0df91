from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass


_WS_RE = re.compile(r"\s+")
_NONPRINT_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_HYPHEN_BREAK_RE = re.compile(r"(\w)-\n(\w)")  # dehyphenate across line breaks
_DIGITS_RE = re.compile(r"\d+")
_PUNCT_RE = re.compile(r"[^\w\s]|_", flags=re.UNICODE)


@dataclass(frozen=True)
class PreprocessProfile:
    name: str = "basic"

    lowercase: bool = True
    strip_accents: bool = False
    strip_nonprinting: bool = True
    dehyphenate: bool = False
    remove_numbers: bool = False
    remove_punctuation: bool = False
    collapse_whitespace: bool = True


def profile_from_cfg(cfg: dict | None) -> PreprocessProfile:
    # allow empty cfg
    cfg = cfg or {}
    return PreprocessProfile(
        name=str(cfg.get("name", "basic")),
        lowercase=bool(cfg.get("lowercase", True)),
        strip_accents=bool(cfg.get("strip_accents", False)),
        strip_nonprinting=bool(cfg.get("strip_nonprinting", True)),
        dehyphenate=bool(cfg.get("dehyphenate", False)),
        remove_numbers=bool(cfg.get("remove_numbers", False)),
        remove_punctuation=bool(cfg.get("remove_punctuation", False)),
        collapse_whitespace=bool(cfg.get("collapse_whitespace", True)),
    )


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def apply_preprocessing(text: str | None, prof: PreprocessProfile) -> str:
    """Document-level cleanup. Runs before tokenization."""
    if not text:
        return ""

    t = text

    if prof.strip_nonprinting:
        t = _NONPRINT_RE.sub("", t)

    # reno-\nvascular -> renovascular
    if prof.dehyphenate:
        t = _HYPHEN_BREAK_RE.sub(r"\1\2", t)

    if prof.lowercase:
        t = t.lower()

    if prof.strip_accents:
        t = _strip_accents(t)

    if prof.remove_numbers:
        t = _DIGITS_RE.sub(" ", t)

    if prof.remove_punctuation:
        t = _PUNCT_RE.sub(" ", t)

    if prof.collapse_whitespace:
        t = _WS_RE.sub(" ", t).strip()

    return t


@dataclass(frozen=True)
class Preprocessor:
    """Picklable wrapper so a profile can travel to worker processes."""

    profile: PreprocessProfile = PreprocessProfile()

    def __call__(self, text: str | None) -> str:
        return apply_preprocessing(text, self.profile)
