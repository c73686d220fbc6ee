"""Crisis detection -- runs before anything else and cannot be overridden.

Matching is plain substring containment on normalised text, not word
boundary aware: a false positive costs a safety message, a false negative
costs far more.
"""

from __future__ import annotations

from mindbot.intelligence.catalog import Catalog
from mindbot.intelligence.text import normalize


def matched_crisis_keyword(text: str, catalog: Catalog | None = None) -> str | None:
    """Return the first crisis fragment found in text, or None."""
    catalog = catalog or Catalog.get()
    normalized = normalize(text)
    if not normalized:
        return None
    for keyword in catalog.crisis_keywords:
        if keyword in normalized:
            return keyword
    return None


def detect_crisis(text: str, catalog: Catalog | None = None) -> bool:
    return matched_crisis_keyword(text, catalog) is not None


def crisis_message(catalog: Catalog | None = None) -> str:
    """The fixed safety reply. Never randomised or paraphrased."""
    return (catalog or Catalog.get()).crisis_message
