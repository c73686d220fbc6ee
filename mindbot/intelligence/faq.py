"""FAQ lookup by token overlap against question text plus tags."""

from __future__ import annotations

from mindbot.intelligence.catalog import Catalog
from mindbot.intelligence.models import FAQEntry
from mindbot.intelligence.text import token_overlap_score, tokenize
from mindbot.log import logger


def best_faq(query: str, catalog: Catalog | None = None) -> tuple[FAQEntry | None, float]:
    """Highest-scoring FAQ entry and its score, ignoring the threshold.

    Ties keep the entry that comes first in catalog order.
    """
    catalog = catalog or Catalog.get()
    tokens = tokenize(query)
    if not tokens:
        return None, 0.0

    best_entry = None
    best_score = 0.0
    for entry, haystack in zip(catalog.faq, catalog.faq_haystacks):
        score = token_overlap_score(tokens, haystack)
        # Strict comparison keeps the first entry on ties
        if score > best_score:
            best_entry, best_score = entry, score
    return best_entry, best_score


def find_faq(query: str, catalog: Catalog | None = None) -> FAQEntry | None:
    """Return the matching FAQ entry when its overlap clears the threshold."""
    catalog = catalog or Catalog.get()
    entry, score = best_faq(query, catalog)
    if entry is None or score < catalog.thresholds.faq_min_score:
        return None
    logger.debug("FAQ match %r (score %.2f)", entry.question, score)
    return entry
