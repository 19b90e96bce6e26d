"""Pure-Python counterparts of the PostgreSQL text-search functions.

Registered on SQLite connections so the ranked query runs unchanged in
local development and tests. ``trigram_similarity`` follows pg_trgm;
``match_rank`` approximates ``plainto_tsquery`` matching (every lexeme must
be present) with a density score in place of ``ts_rank_cd``.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set

_WORD_RE = re.compile(r"[0-9a-z]+")

# Subset of the PostgreSQL english stop list
_ENGLISH_STOPWORDS = frozenset(
    """
    a an and are as at be but by for from has have in into is it its of on or
    that the their then there these they this to was were will with
    """.split()
)

_SUFFIXES = ("ing", "es", "ed", "s")


def _words(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return _WORD_RE.findall(value.lower())


def trigrams(value: Optional[str]) -> Set[str]:
    """Trigram set of ``value`` using pg_trgm word padding."""
    grams: Set[str] = set()
    for word in _words(value):
        padded = f"  {word} "
        for index in range(len(padded) - 2):
            grams.add(padded[index:index + 3])
    return grams


def trigram_similarity(left: Optional[str], right: Optional[str]) -> float:
    left_grams = trigrams(left)
    right_grams = trigrams(right)
    if not left_grams or not right_grams:
        return 0.0
    shared = len(left_grams & right_grams)
    return shared / float(len(left_grams | right_grams))


def _stem(word: str) -> str:
    for suffix in _SUFFIXES:
        if len(word) > len(suffix) + 2 and word.endswith(suffix):
            return word[: -len(suffix)]
    return word


def lexemes(value: Optional[str], config: str = "english") -> List[str]:
    words = _words(value)
    if config == "english":
        return [_stem(word) for word in words if word not in _ENGLISH_STOPWORDS]
    return words


def _unique(items: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def match_rank(document: Optional[str], query: Optional[str], config: str = "english") -> float:
    """Score > 0 when every query lexeme occurs in ``document``."""
    terms = _unique(lexemes(query, config))
    if not terms:
        return 0.0
    tokens = lexemes(document, config)
    if not tokens:
        return 0.0
    hits = 0
    for term in terms:
        count = tokens.count(term)
        if count == 0:
            return 0.0
        hits += count
    return hits / float(len(tokens))


__all__ = ["trigrams", "trigram_similarity", "lexemes", "match_rank"]
