"""FastAPI bridge service for chat events.

Classifies incoming listener events, runs the convert-then-upload pipeline against the
reMarkable cloud, and replies with the notice the listener should post.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import FastAPI

import remarkable_client_impl  # noqa: F401  # ensure document store implementation registers itself
from pdf_bridge import commands  # noqa: F401  # register command modules
from pdf_bridge.converters import PdfPipeline
from pdf_bridge.dispatcher import CommandDispatcher
from pdf_bridge.models import BridgeReply, InboundEvent, SessionStatus
from pdf_bridge.outcomes import render_notice
from pdf_bridge.session import CloudSessionManager
from pdf_bridge.session_store import SessionStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("pdf_bridge")

DATA_PATH = Path(os.environ.get("BRIDGE_DATA_PATH", "data"))
CREDENTIAL_FILE = "remarkable.json"

SESSION = CloudSessionManager(SessionStore(DATA_PATH / CREDENTIAL_FILE))
DISPATCHER = CommandDispatcher(SESSION, PdfPipeline())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Resume the stored session before serving events."""
    await SESSION.load()
    yield


app = FastAPI(title="PDF Bridge Service", version="0.1.0", lifespan=lifespan)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health() -> dict[str, str]:
    """Return a basic health payload."""
    return {"status": "ok"}


@app.get("/session/status", response_model=SessionStatus)
async def session_status() -> SessionStatus:
    """Return whether the bridge holds a registered session."""
    return SessionStatus(registered=SESSION.is_registered())


@app.post("/events/message", response_model=BridgeReply)
async def handle_message(event: InboundEvent) -> BridgeReply:
    """Handle one inbound chat event and return the notice to post."""
    result = await DISPATCHER.handle(event)
    if result is None:
        return BridgeReply(reply="")
    logger.info("Outcome for %s in %s: %s", event.message_id, event.room_id, result.kind)
    return BridgeReply(reply=render_notice(result))
