"""Triage orchestrator -- the single entry point shared by every adapter.

Order is fixed and each call is independent:

    normalise -> crisis check -> FAQ check -> intent scoring -> assembly

Crisis detection always runs on the full input and short-circuits with the
fixed safety message. Every str input produces a result; nothing here raises
for odd text (empty, punctuation-only, unicode, very long).
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from mindbot.intelligence.assembler import ResponseAssembler
from mindbot.intelligence.catalog import DEFAULT_INTENT, Catalog
from mindbot.intelligence.crisis import matched_crisis_keyword
from mindbot.intelligence.faq import find_faq
from mindbot.intelligence.models import Message, TriageContext, TriageResult
from mindbot.intelligence.scoring import CLARIFY, classify
from mindbot.intelligence.text import normalize
from mindbot.intelligence.tools import detect_tool
from mindbot.log import logger

CRISIS = "crisis"
FAQ = "faq"
EMPTY = "empty"


def coerce_history(history: Sequence[Message | Mapping] | None, window: int) -> list[Message]:
    """Validate the trailing window of caller history.

    Entries that are neither Message nor a valid message mapping are skipped
    with a warning so a single bad record cannot break a reply.
    """
    if not history:
        return []
    messages: list[Message] = []
    for item in list(history)[-window:]:
        if isinstance(item, Message):
            messages.append(item)
            continue
        try:
            messages.append(Message.model_validate(item))
        except ValidationError:
            logger.warning("Skipping invalid history entry of type %s", type(item).__name__)
    return messages


def coerce_context(context: TriageContext | Mapping | None) -> TriageContext:
    if context is None:
        return TriageContext()
    if isinstance(context, TriageContext):
        return context
    return TriageContext.model_validate(context)


def latest_excerpt(history: Sequence[Message], min_chars: int) -> str | None:
    """Most recent user message longer than min_chars, if any."""
    for message in reversed(history):
        if message.role == "user" and len(message.text.strip()) > min_chars:
            return message.text.strip()
    return None


def triage(
    user_text: str,
    recent_history: Sequence[Message | Mapping] | None = None,
    context: TriageContext | Mapping | None = None,
    *,
    catalog: Catalog | None = None,
    rng: random.Random | None = None,
) -> TriageResult:
    """Classify one user message and build the reply.

    Args:
        user_text: Raw message text (typed or transcribed).
        recent_history: Prior messages, oldest first. Only the trailing
            window is read and it is never modified.
        context: Optional hints; sleep_hours feeds the sleep remark and
            mode picks the tone of closers.
        catalog: Catalog to use; defaults to the process-wide one.
        rng: Random source for assembly. Pass a seeded random.Random for
            reproducible replies.
    """
    catalog = catalog or Catalog.get()
    th = catalog.thresholds
    text = user_text if isinstance(user_text, str) else ""
    ctx = coerce_context(context)

    if not normalize(text):
        return TriageResult(kind=EMPTY, reply=catalog.messages["empty"])

    keyword = matched_crisis_keyword(text, catalog)
    if keyword is not None:
        logger.warning("Crisis language detected (keyword %r), returning safety message", keyword)
        return TriageResult(kind=CRISIS, reply=catalog.crisis_message)

    if len(text) > th.max_scoring_chars:
        logger.debug("Message truncated from %d to %d chars for scoring", len(text), th.max_scoring_chars)
        text = text[: th.max_scoring_chars]

    tool = detect_tool(text, catalog)

    entry = find_faq(text, catalog)
    if entry is not None:
        return TriageResult(kind=FAQ, reply=entry.answer, tool=tool, faq_question=entry.question)

    history = coerce_history(recent_history, th.history_window)
    key, board = classify(text, history, catalog)
    clarify = key == CLARIFY
    intent_key = DEFAULT_INTENT if clarify else key
    logger.debug("Classified message (%d chars) as %s", len(text), key)

    assembler = ResponseAssembler(catalog, rng)
    reply = assembler.assemble(
        intent_key,
        sleep_hours=ctx.sleep_hours,
        excerpt=latest_excerpt(history, th.excerpt_min_chars),
        mode=ctx.mode,
        clarify=clarify,
    )
    return TriageResult(kind=key, reply=reply, intent=intent_key, tool=tool, scores=board)
