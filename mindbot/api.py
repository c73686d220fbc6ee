"""MindBot REST API -- the local triage engine served at localhost:8430.

FastAPI application used by the chat widgets: health, status, chat and
catalog browsing endpoints.
"""

from __future__ import annotations

import platform
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mindbot import __version__
from mindbot.log import logger
from mindbot.routes import error_response

_start_time: float = 0.0


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

def _on_startup() -> None:
    """Build the catalog up front so a broken config fails at boot."""
    global _start_time
    _start_time = time.time()

    from mindbot.intelligence.catalog import Catalog
    from mindbot.backend import RemoteBackend

    catalog = Catalog.get()
    backend = RemoteBackend.get()
    logger.info(
        "MindBot API started: %d intents, remote backend %s",
        len(catalog.intents), "configured" if backend.configured else "off",
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    _on_startup()
    yield
    logger.info("MindBot API stopped")


# ---------------------------------------------------------------------------
# App creation + router mounting
# ---------------------------------------------------------------------------

app = FastAPI(
    title="MindBot",
    description="Local supportive chat triage -- crisis check, FAQ, intent replies",
    version=__version__,
    lifespan=_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

from mindbot.routes.chat import router as chat_router

app.include_router(chat_router)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return structured JSON instead of HTML 500."""
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return error_response(500, "Internal server error")


@app.exception_handler(404)
async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(404, "Not found", f"{request.url.path} does not exist")


# ---------------------------------------------------------------------------
# Core endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/status")
def status() -> dict:
    from mindbot.backend import RemoteBackend
    return {
        "agent": "mindbot",
        "version": __version__,
        "hostname": platform.node(),
        "python_version": platform.python_version(),
        "remote_backend": RemoteBackend.get().configured,
        "uptime_seconds": round(time.time() - _start_time, 1),
    }
