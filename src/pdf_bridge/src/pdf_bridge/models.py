"""Pydantic schemas for listener↔bridge communication."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class InboundEvent(BaseModel):
    """Normalized incoming chat event."""

    provider: str = "discord"
    room_id: str
    sender_id: str
    bot_user_id: str | None = None
    message_id: str | None = None
    redacted: bool = False
    kind: Literal["text", "file", "other"] = "text"
    body: str = ""
    file_name: str | None = None
    mime_type: str | None = None
    content_url: str | None = None


class BridgeReply(BaseModel):
    """Notice returned to a listener; empty when nothing should be sent."""

    reply: str


class SessionStatus(BaseModel):
    """Registration state of the document store session."""

    registered: bool
