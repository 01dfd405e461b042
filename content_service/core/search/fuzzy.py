"""Fuzzy term matching used to rank search candidates.

Matching rules for one query term against one document token:

- equal tokens score 1.0
- tokens sharing the first ``prefix_length`` characters whose edit
  distance is at most ``max_edits`` score ``1 - distance / (len(term) + 1)``
- anything else scores 0

A document's relevance is the sum, over query terms, of the term's best
match among the document's tokens.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_WORD = re.compile(r"\w+")


def tokenize(text: str) -> list[str]:
    """Lowercased word tokens of ``text``."""
    return _WORD.findall(text.lower())


def bounded_levenshtein(left: str, right: str, limit: int) -> int | None:
    """Edit distance between ``left`` and ``right``, or ``None`` if above ``limit``."""
    if abs(len(left) - len(right)) > limit:
        return None
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (left_char != right_char),
                )
            )
        if min(current) > limit:
            return None
        previous = current
    distance = previous[-1]
    return distance if distance <= limit else None


def term_score(term: str, token: str, *, max_edits: int, prefix_length: int) -> float:
    if term == token:
        return 1.0
    if term[:prefix_length] != token[:prefix_length]:
        return 0.0
    distance = bounded_levenshtein(term, token, max_edits)
    if distance is None:
        return 0.0
    return 1.0 - distance / (len(term) + 1)


def relevance(
    terms: Sequence[str],
    tokens: Iterable[str],
    *,
    max_edits: int,
    prefix_length: int,
) -> float:
    """Sum of each term's best match against ``tokens``."""
    vocabulary = set(tokens)
    if not vocabulary:
        return 0.0
    total = 0.0
    for term in terms:
        if term in vocabulary:
            total += 1.0
            continue
        total += max(
            term_score(term, token, max_edits=max_edits, prefix_length=prefix_length)
            for token in vocabulary
        )
    return total


__all__ = ["bounded_levenshtein", "relevance", "term_score", "tokenize"]
