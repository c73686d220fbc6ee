"""Chat endpoints -- triage a message, browse the intent catalog."""

from __future__ import annotations

import random

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mindbot.intelligence.models import Message, TriageContext
from mindbot.log import logger
from mindbot.routes import error_response

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    """Validated schema for chat messages."""
    message: str = Field(default="", max_length=10000)
    history: list[Message] = Field(default_factory=list, max_length=50)
    sleep_hours: float | None = Field(default=None, ge=0, le=24, allow_inf_nan=False)
    mode: str | None = Field(default=None, max_length=32)
    seed: int | None = None


@router.post("/chat")
def chat_endpoint(body: ChatRequest) -> dict:
    """Triage one message; uses the remote backend when one is configured."""
    from mindbot.backend import respond

    rng = random.Random(body.seed) if body.seed is not None else None
    context = TriageContext(sleep_hours=body.sleep_hours, mode=body.mode)
    result = respond(body.message, body.history, context, rng=rng)
    logger.debug("Chat request answered with kind %s", result.kind)
    return result.model_dump()


@router.get("/intents")
def list_intents() -> dict:
    """Intent keys and tags in catalog (tie-break) order."""
    from mindbot.intelligence.catalog import Catalog
    catalog = Catalog.get()
    return {
        "intents": [{"key": i.key, "tags": list(i.tags)} for i in catalog.intents],
        "count": len(catalog.intents),
    }


@router.get("/intents/{key}", response_model=None)
def intent_detail(key: str = Path(max_length=64)) -> dict | JSONResponse:
    """Full clause banks of a single intent."""
    from mindbot.intelligence.catalog import Catalog
    intent = Catalog.get().intent(key)
    if intent is None:
        return error_response(404, "Intent not found", f"Intent '{key}' does not exist")
    return intent.model_dump(mode="json")


@router.get("/faq")
def list_faq() -> dict:
    from mindbot.intelligence.catalog import Catalog
    entries = Catalog.get().faq
    return {
        "entries": [{"question": e.question, "tags": sorted(e.tags)} for e in entries],
        "count": len(entries),
    }
