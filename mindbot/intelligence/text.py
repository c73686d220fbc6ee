"""Text normalisation and token-overlap scoring.

Pure functions, total over every str input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

_NON_WORD = re.compile(r"\W+", re.UNICODE)
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, turn non-word characters into spaces, collapse whitespace."""
    if not text:
        return ""
    lowered = text.lower()
    spaced = _NON_WORD.sub(" ", lowered)
    return _WHITESPACE.sub(" ", spaced).strip()


def tokenize(text: str) -> list[str]:
    """Split normalised text into tokens. Empty input gives an empty list."""
    normalized = normalize(text)
    if not normalized:
        return []
    return normalized.split(" ")


def token_set(parts: Iterable[str]) -> frozenset[str]:
    """Token set of several strings joined together."""
    return frozenset(tokenize(" ".join(parts)))


def token_overlap_score(query_tokens: Sequence[str], reference: Iterable[str]) -> float:
    """Fraction of query tokens that appear in the reference token set.

    Repeated query tokens count once per occurrence. Returns 0.0 for an
    empty query.
    """
    if not query_tokens:
        return 0.0
    ref = reference if isinstance(reference, (set, frozenset)) else set(reference)
    hits = sum(1 for tok in query_tokens if tok in ref)
    return hits / len(query_tokens)
