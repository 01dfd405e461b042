"""Fuzzy full-text search over aggregate views, boosted by popularity."""

from __future__ import annotations

from .fuzzy import bounded_levenshtein, relevance, term_score, tokenize
from .index import ScoredHit, SearchField, SearchIndex

__all__ = [
    "ScoredHit",
    "SearchField",
    "SearchIndex",
    "bounded_levenshtein",
    "relevance",
    "term_score",
    "tokenize",
]
