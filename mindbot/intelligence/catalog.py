"""Process-wide, read-only catalog: FAQ, intents, synonyms, crisis terms.

Built once from the merged config (defaults.json + local override) and
never mutated afterwards. Tests and embedders can build isolated catalogs
with Catalog.from_config().
"""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Mapping

from mindbot.intelligence.models import FAQEntry, Intent, Thresholds
from mindbot.intelligence.text import normalize, token_set
from mindbot.log import logger

DEFAULT_INTENT = "default"

_DEFAULT_MESSAGES = {
    "empty": "Say a little about what's on your mind.",
    "clarify": "Could you tell me a bit more about what's going on?",
    "fallback": "I'm here to help — tell me more.",
    "acknowledge": "You mentioned \"{excerpt}\".",
}


class Catalog:
    """Immutable lookup tables for one engine configuration."""

    _instance = None
    _lock = threading.Lock()

    def __init__(
        self,
        intents: list[Intent],
        faq: list[FAQEntry] | None = None,
        crisis_keywords: list[str] | None = None,
        crisis_message: str = "",
        synonyms: Mapping[str, list[str]] | None = None,
        thresholds: Thresholds | None = None,
        messages: Mapping[str, str] | None = None,
        sleep_remarks: Mapping[str, str] | None = None,
        tones: Mapping[str, list[str]] | None = None,
        default_tone: str = "calm",
        tools: Mapping[str, list[str]] | None = None,
    ) -> None:
        if not intents:
            raise ValueError("intent catalog must not be empty")
        keys = [i.key for i in intents]
        if len(set(keys)) != len(keys):
            raise ValueError(f"duplicate intent keys in catalog: {keys}")
        if DEFAULT_INTENT not in keys:
            raise ValueError(f"intent catalog must contain a '{DEFAULT_INTENT}' intent")
        if not crisis_message:
            raise ValueError("crisis message must not be empty")
        for word, options in (synonyms or {}).items():
            if not word.strip() or any(not isinstance(o, str) or not o.strip() for o in options):
                raise ValueError(f"synonym entry {word!r} has an empty word or option")

        # Tags are matched against normalised text, so store them normalised
        self.intents: tuple[Intent, ...] = tuple(
            i.model_copy(update={"tags": tuple(t for t in (normalize(tag) for tag in i.tags) if t)})
            for i in intents
        )
        self._by_key = MappingProxyType({i.key: i for i in self.intents})
        self.faq: tuple[FAQEntry, ...] = tuple(faq or ())
        self.crisis_keywords: tuple[str, ...] = tuple(
            k for k in (normalize(word) for word in (crisis_keywords or ())) if k
        )
        self.crisis_message = crisis_message
        self.synonyms = MappingProxyType({
            word.lower(): tuple(options)
            for word, options in (synonyms or {}).items()
            if options
        })
        self.thresholds = thresholds or Thresholds()
        self.messages = MappingProxyType({**_DEFAULT_MESSAGES, **(messages or {})})
        self.sleep_remarks = MappingProxyType(dict(sleep_remarks or {}))
        self.tones = MappingProxyType({k: tuple(v) for k, v in (tones or {}).items()})
        self.default_tone = default_tone
        self.tools = MappingProxyType({
            name: tuple(n for n in (normalize(p) for p in phrases) if n)
            for name, phrases in (tools or {}).items()
        })

        # Haystacks are fixed per catalog; precompute once
        self.faq_haystacks: tuple[frozenset[str], ...] = tuple(
            token_set([entry.question, *entry.tags]) for entry in self.faq
        )
        self.intent_haystacks = MappingProxyType({
            i.key: token_set([*i.tags, *i.cores]) for i in self.intents
        })
        self.intent_tag_tokens = MappingProxyType({
            i.key: token_set(i.tags) for i in self.intents
        })

    @classmethod
    def get(cls) -> "Catalog":
        """Get or create the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls._create_from_config()
            return cls._instance

    @classmethod
    def _create_from_config(cls) -> "Catalog":
        from mindbot.config.loader import get_config
        catalog = cls.from_config(get_config())
        logger.debug(
            "Catalog loaded: %d intents, %d FAQ entries, %d crisis keywords",
            len(catalog.intents), len(catalog.faq), len(catalog.crisis_keywords),
        )
        return catalog

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton. Mainly for testing."""
        with cls._lock:
            cls._instance = None

    @classmethod
    def from_config(cls, cfg: dict) -> "Catalog":
        """Build a catalog from a config dict shaped like defaults.json."""
        crisis = cfg.get("crisis", {})
        tones = cfg.get("tones", {})
        return cls(
            intents=[Intent.model_validate(i) for i in cfg.get("intents", [])],
            faq=[FAQEntry.model_validate(f) for f in cfg.get("faq", [])],
            crisis_keywords=crisis.get("keywords", []),
            crisis_message=crisis.get("message", ""),
            synonyms=cfg.get("synonyms", {}),
            thresholds=Thresholds.model_validate(cfg.get("thresholds", {})),
            messages=cfg.get("messages", {}),
            sleep_remarks=cfg.get("sleep_remarks", {}),
            tones=tones.get("closers", {}),
            default_tone=tones.get("default", "calm"),
            tools=cfg.get("tools", {}),
        )

    def intent(self, key: str) -> Intent | None:
        return self._by_key.get(key)

    @property
    def default_intent(self) -> Intent:
        return self._by_key[DEFAULT_INTENT]

    def tone_closers(self, mode: str | None) -> tuple[str, ...]:
        """Closers for a tone; unknown or missing tones use the default tone."""
        if mode and mode in self.tones:
            return self.tones[mode]
        return self.tones.get(self.default_tone, ())
