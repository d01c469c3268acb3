"""
Text helpers shared by the extractor and the rule engine.

Keyword matching is diacritic-insensitive: both sides go through fold()
so that "đà nẵng" matches "Da Nang".
"""

import re
import unicodedata
from typing import List


_WS_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_DASHES_RE = re.compile(r"-+")


def fold(text: str) -> str:
    """Lower-case and strip Vietnamese diacritics (đ -> d)."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").strip()


def normalize_ws(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def words(text: str) -> List[str]:
    return (text or "").split()


def word_count(text: str) -> int:
    return len(words(text))


def first_words(text: str, n: int) -> str:
    return " ".join(words(text)[:n])


def last_words(text: str, n: int) -> str:
    tokens = words(text)
    return " ".join(tokens[-n:]) if n > 0 else ""


def to_slug(text: str) -> str:
    slug = _SLUG_STRIP_RE.sub("", fold(text))
    slug = _WS_RE.sub("-", slug.strip())
    return _DASHES_RE.sub("-", slug).strip("-")


def contains(haystack: str, needle: str) -> bool:
    """Folded substring test; an empty needle never matches."""
    needle = fold(needle)
    if not needle:
        return False
    return needle in fold(haystack)


def count_occurrences(text: str, keyword: str) -> int:
    """Non-overlapping folded occurrences of keyword in text."""
    needle = fold(keyword)
    if not needle:
        return 0
    return fold(text).count(needle)


def similarity(a: str, b: str) -> float:
    """Jaccard similarity of the folded word sets."""
    fa, fb = fold(a), fold(b)
    if fa == fb:
        return 1.0
    set_a, set_b = set(fa.split()), set(fb.split())
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
