"""Typed records shared by the triage engine, API and CLI.

Catalog records (FAQEntry, Intent, Thresholds) are frozen so the tables
built at startup cannot be mutated by a request. Message and TriageContext
are the validated boundary types for caller-supplied data.
"""

from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Message(BaseModel):
    """One chat turn as supplied by the caller."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"]
    text: str
    timestamp: float = Field(default_factory=time.time)


class FAQEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    tags: frozenset[str] = frozenset()


class Intent(BaseModel):
    """A supportive topic with its matching tags and clause banks."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    tags: tuple[str, ...] = ()
    openers: tuple[str, ...] = ()
    cores: tuple[str, ...] = Field(..., min_length=1)
    followups: tuple[str, ...] = ()
    closers: tuple[str, ...] = ()


class Thresholds(BaseModel):
    """Scoring and assembly constants. Empirically chosen; tune via config."""
    model_config = ConfigDict(frozen=True)

    faq_min_score: float = Field(default=0.35, ge=0, le=1)
    clarify_floor: float = Field(default=0.12, ge=0)
    tag_boost: float = Field(default=0.35, ge=0)
    history_weight: float = Field(default=0.6, ge=0)
    history_user_turns: int = Field(default=6, ge=0)
    history_window: int = Field(default=10, ge=1)
    opener_probability: float = Field(default=0.85, ge=0, le=1)
    single_core_probability: float = Field(default=0.4, ge=0, le=1)
    context_probability: float = Field(default=0.6, ge=0, le=1)
    followup_probability: float = Field(default=0.6, ge=0, le=1)
    closer_probability: float = Field(default=0.5, ge=0, le=1)
    excerpt_min_chars: int = Field(default=20, ge=0)
    excerpt_max_chars: int = Field(default=80, ge=2)
    sleep_low_hours: float = Field(default=5.5, ge=0)
    sleep_healthy_hours: float = Field(default=7.0, ge=0)
    max_scoring_chars: int = Field(default=2000, ge=1)

    @model_validator(mode="after")
    def _sleep_bands_ordered(self) -> "Thresholds":
        if self.sleep_low_hours > self.sleep_healthy_hours:
            raise ValueError("sleep_low_hours must not exceed sleep_healthy_hours")
        return self


class TriageContext(BaseModel):
    """Optional hints that shape the assembled reply."""
    model_config = ConfigDict(frozen=True)

    sleep_hours: float | None = Field(default=None, ge=0, le=24, allow_inf_nan=False)
    mode: str | None = Field(default=None, max_length=32)


class TriageResult(BaseModel):
    """Outcome of one triage call.

    kind is "crisis", "faq", "clarify", "empty", "remote" or the winning
    intent key. intent carries the intent whose clause banks produced the
    reply (``default`` for clarify).
    """

    kind: str
    reply: str
    intent: str | None = None
    tool: str | None = None
    faq_question: str | None = None
    audio: str | None = None
    scores: dict[str, float] = Field(default_factory=dict)
