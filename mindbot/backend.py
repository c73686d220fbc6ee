"""Optional remote chat backend with the local engine as fallback.

The remote service is a black box: POST {text, history, mode} and read
{reply, audio?}. It is only used when a URL is configured, and only after
the local empty and crisis checks have passed. Any failure falls back to
the local triage engine.
"""

from __future__ import annotations

import http.client
import json
import os
import random
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping, Sequence

from mindbot.intelligence.catalog import Catalog
from mindbot.intelligence.crisis import matched_crisis_keyword
from mindbot.intelligence.models import Message, TriageContext, TriageResult
from mindbot.intelligence.text import normalize
from mindbot.intelligence.triage import coerce_context, coerce_history, triage
from mindbot.log import logger

REMOTE = "remote"
_BACKEND_ENV = "MINDBOT_BACKEND_URL"
_MAX_RESPONSE_BYTES = 1024 * 1024  # 1 MB limit


class RemoteBackend:
    """Thin client for the remote chat/voice service."""

    _instance = None
    _lock = threading.Lock()

    def __init__(self, url: str = "", timeout: float = 8.0, history_messages: int = 10) -> None:
        self.url = url.strip()
        self.timeout = timeout
        self.history_messages = history_messages

    @classmethod
    def get(cls) -> "RemoteBackend":
        """Get or create the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls._create_from_config()
            return cls._instance

    @classmethod
    def _create_from_config(cls) -> "RemoteBackend":
        from mindbot.config.loader import get_config
        cfg = get_config().get("backend", {})
        url = os.environ.get(_BACKEND_ENV, "") or cfg.get("url", "")
        return cls(
            url=url,
            timeout=cfg.get("timeout_seconds", 8),
            history_messages=cfg.get("history_messages", 10),
        )

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton. Mainly for testing."""
        with cls._lock:
            cls._instance = None

    @property
    def configured(self) -> bool:
        return self.url.startswith(("http://", "https://"))

    def ask(self, text: str, history: Sequence[Message], mode: str | None = None) -> dict | None:
        """Send one message to the backend. Returns {reply, audio} or None on any failure."""
        if not self.configured:
            if self.url:
                logger.warning("Backend URL is not http(s), skipping remote call")
            return None

        payload = json.dumps({
            "text": text,
            "history": [{"role": m.role, "text": m.text} for m in history[-self.history_messages:]],
            "mode": mode or "calm",
        }).encode("utf-8")
        req = urllib.request.Request(
            self.url,
            data=payload,
            headers={"Content-Type": "application/json", "User-Agent": "mindbot/0.1.0"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read(_MAX_RESPONSE_BYTES)
            data = json.loads(raw.decode("utf-8"))
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError):
            logger.warning("Remote backend call failed, using local engine", exc_info=True)
            return None

        if not isinstance(data, dict):
            logger.warning("Remote backend returned a non-object body, using local engine")
            return None
        reply = data.get("reply") or data.get("replyTextUserLanguage") or data.get("replyText")
        if not isinstance(reply, str) or not reply.strip():
            logger.warning("Remote backend returned no reply text, using local engine")
            return None
        audio = data.get("audio") or data.get("audioBase64")
        return {"reply": reply.strip(), "audio": audio if isinstance(audio, str) else None}


def respond(
    user_text: str,
    recent_history: Sequence[Message | Mapping] | None = None,
    context: TriageContext | Mapping | None = None,
    *,
    backend: RemoteBackend | None = None,
    catalog: Catalog | None = None,
    rng: random.Random | None = None,
) -> TriageResult:
    """Answer via the remote backend when configured, else the local engine.

    Empty input and crisis language are always handled locally so the
    safety message never depends on the network.
    """
    catalog = catalog or Catalog.get()
    backend = backend or RemoteBackend.get()
    text = user_text if isinstance(user_text, str) else ""

    local_first = not normalize(text) or matched_crisis_keyword(text, catalog) is not None
    if local_first or not backend.configured:
        return triage(text, recent_history, context, catalog=catalog, rng=rng)

    ctx = coerce_context(context)
    history = coerce_history(recent_history, catalog.thresholds.history_window)
    remote = backend.ask(text, history, ctx.mode)
    if remote is None:
        return triage(text, history, ctx, catalog=catalog, rng=rng)
    return TriageResult(kind=REMOTE, reply=remote["reply"], audio=remote["audio"])
