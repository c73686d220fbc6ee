"""Intent scoring -- token overlap, exact tag phrases and recent history.

Each intent's score is:

    overlap(query, tags + cores)
    + tag_boost * (tags found as substrings of the normalised message)
    + history_weight * overlap(recent user tokens, tags)

The history term lets a sustained topic carry short replies like "yeah".
"""

from __future__ import annotations

from collections.abc import Sequence

from mindbot.intelligence.catalog import Catalog
from mindbot.intelligence.models import Message
from mindbot.intelligence.text import normalize, token_overlap_score, tokenize

CLARIFY = "clarify"


def recent_user_texts(history: Sequence[Message], limit: int) -> list[str]:
    """Texts of the last `limit` user-authored messages, oldest first."""
    if limit <= 0:
        return []
    texts = [m.text for m in history if m.role == "user"]
    return texts[-limit:]


def score_intents(
    text: str,
    recent_history: Sequence[Message] = (),
    catalog: Catalog | None = None,
) -> dict[str, float]:
    """Score every intent in the catalog for this message. All scores >= 0."""
    catalog = catalog or Catalog.get()
    th = catalog.thresholds

    normalized = normalize(text)
    query_tokens = normalized.split(" ") if normalized else []

    recent = recent_user_texts(recent_history, th.history_user_turns)
    recent_tokens = tokenize(" ".join(recent))

    board: dict[str, float] = {}
    for intent in catalog.intents:
        overlap = token_overlap_score(query_tokens, catalog.intent_haystacks[intent.key])
        boost = sum(th.tag_boost for tag in intent.tags if normalized and tag in normalized)
        score = overlap + boost
        if recent_tokens:
            recent_overlap = token_overlap_score(recent_tokens, catalog.intent_tag_tokens[intent.key])
            score += recent_overlap * th.history_weight
        board[intent.key] = score
    return board


def pick_winner(board: dict[str, float], catalog: Catalog | None = None) -> tuple[str, float]:
    """Argmax over the board; equal scores go to the earlier catalog intent."""
    catalog = catalog or Catalog.get()
    best_key = catalog.intents[0].key
    best_score = board.get(best_key, 0.0)
    for intent in catalog.intents[1:]:
        score = board.get(intent.key, 0.0)
        if score > best_score:
            best_key, best_score = intent.key, score
    return best_key, best_score


def classify(
    text: str,
    recent_history: Sequence[Message] = (),
    catalog: Catalog | None = None,
) -> tuple[str, dict[str, float]]:
    """Return the winning intent key (or "clarify") and the full board."""
    catalog = catalog or Catalog.get()
    board = score_intents(text, recent_history, catalog)
    key, score = pick_winner(board, catalog)
    if score < catalog.thresholds.clarify_floor:
        return CLARIFY, board
    return key, board
