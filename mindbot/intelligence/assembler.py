"""Reply assembly from per-intent clause banks.

A reply is built from up to six fragments (opener, one or two cores, a
sleep remark, a quoted acknowledgement, a follow-up question, a closer),
each included with a configured probability. All randomness comes from the
injected random.Random, so a seeded generator pins the exact output.

Only clause-bank text goes through the synonym pass. The user's own words
and the numeric remarks are kept verbatim.
"""

from __future__ import annotations

import random
import re
from collections.abc import Mapping

from mindbot.intelligence.catalog import DEFAULT_INTENT, Catalog
from mindbot.log import logger

_WHITESPACE = re.compile(r"\s+")


def build_synonym_pattern(synonyms: Mapping[str, tuple[str, ...]]) -> re.Pattern | None:
    if not synonyms:
        return None
    words = sorted(synonyms, key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


def paraphrase(
    text: str,
    synonyms: Mapping[str, tuple[str, ...]],
    rng: random.Random,
    pattern: re.Pattern | None = None,
) -> str:
    """Swap vocabulary words for a random synonym, keeping leading capitals.

    Words outside the vocabulary are untouched. Replacements are not
    rescanned, so "try" -> "you might try" cannot cascade.
    """
    if not text:
        return text
    pattern = pattern or build_synonym_pattern(synonyms)
    if pattern is None:
        return text

    def _swap(match: re.Match) -> str:
        word = match.group(0)
        options = synonyms.get(word.lower())
        if not options:
            return word
        choice = rng.choice(options)
        if choice and word[0].isupper():
            choice = choice[0].upper() + choice[1:]
        return choice

    return pattern.sub(_swap, text)


def truncate_excerpt(text: str, max_chars: int) -> str:
    """Clip to max_chars including a trailing ellipsis when shortened."""
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


class ResponseAssembler:
    """Builds replies for one catalog using one random source."""

    def __init__(self, catalog: Catalog | None = None, rng: random.Random | None = None) -> None:
        self._catalog = catalog or Catalog.get()
        self._rng = rng or random.Random()
        self._synonym_pattern = build_synonym_pattern(self._catalog.synonyms)

    def sleep_remark(self, hours: float) -> str:
        th = self._catalog.thresholds
        if hours < th.sleep_low_hours:
            branch = "low"
        elif hours < th.sleep_healthy_hours:
            branch = "borderline"
        else:
            branch = "healthy"
        template = self._catalog.sleep_remarks.get(branch, "")
        return template.format(hours=f"{hours:g}") if template else ""

    def assemble(
        self,
        intent_key: str,
        *,
        sleep_hours: float | None = None,
        excerpt: str | None = None,
        mode: str | None = None,
        clarify: bool = False,
    ) -> str:
        """Assemble a reply for intent_key; unknown keys use the default intent."""
        catalog = self._catalog
        th = catalog.thresholds
        rng = self._rng

        intent = catalog.intent(intent_key)
        if intent is None:
            logger.debug("Unknown intent %r, assembling from default", intent_key)
            intent = catalog.default_intent

        # (text, paraphrasable)
        fragments: list[tuple[str, bool]] = []

        if intent.openers and rng.random() < th.opener_probability:
            fragments.append((rng.choice(intent.openers), True))

        if len(intent.cores) == 1 or rng.random() < th.single_core_probability:
            fragments.append((rng.choice(intent.cores), True))
        else:
            for core in rng.sample(intent.cores, 2):
                fragments.append((core, True))

        if intent.key == "sleep" and sleep_hours is not None:
            remark = self.sleep_remark(sleep_hours)
            if remark:
                fragments.append((remark, False))

        if excerpt and rng.random() < th.context_probability:
            quoted = truncate_excerpt(excerpt, th.excerpt_max_chars)
            fragments.append((catalog.messages["acknowledge"].format(excerpt=quoted), False))

        if intent.followups and rng.random() < th.followup_probability:
            fragments.append((rng.choice(intent.followups), True))

        closers = intent.closers + catalog.tone_closers(mode)
        if closers and rng.random() < th.closer_probability:
            fragments.append((rng.choice(closers), True))

        if clarify:
            fragments.append((catalog.messages["clarify"], False))

        parts = [
            paraphrase(text, catalog.synonyms, rng, self._synonym_pattern) if rewrite else text
            for text, rewrite in fragments
        ]
        reply = _WHITESPACE.sub(" ", " ".join(parts)).strip()
        if not reply:
            return catalog.messages["fallback"]
        return reply


def assemble(
    intent_key: str,
    *,
    sleep_hours: float | None = None,
    excerpt: str | None = None,
    mode: str | None = None,
    clarify: bool = False,
    catalog: Catalog | None = None,
    rng: random.Random | None = None,
) -> str:
    return ResponseAssembler(catalog, rng).assemble(
        intent_key or DEFAULT_INTENT,
        sleep_hours=sleep_hours,
        excerpt=excerpt,
        mode=mode,
        clarify=clarify,
    )
