"""Exercise triggers -- which self-help tool the UI should offer.

Checked in catalog order (breathing, grounding, journaling in the shipped
config); the first tool with a matching phrase wins.
"""

from __future__ import annotations

from mindbot.intelligence.catalog import Catalog
from mindbot.intelligence.text import normalize


def detect_tool(text: str, catalog: Catalog | None = None) -> str | None:
    catalog = catalog or Catalog.get()
    normalized = normalize(text)
    if not normalized:
        return None
    for tool, phrases in catalog.tools.items():
        if any(phrase in normalized for phrase in phrases):
            return tool
    return None
