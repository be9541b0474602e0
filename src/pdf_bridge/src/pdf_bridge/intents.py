"""Classification of inbound chat events into command intents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal
from urllib.parse import urlsplit

from pydantic import BaseModel

from pdf_bridge.converters import PDF_MIME_TYPE, media_type
from pdf_bridge.outcomes import INVALID_URL, NOT_A_PDF, UNSUPPORTED_MESSAGE

if TYPE_CHECKING:
    from pdf_bridge.models import InboundEvent

REGISTER_COMMAND = "register"
LIST_COMMAND = "list"
URL_PREFIXES = ("http://", "https://")
URL_SCHEMES = {"http", "https"}


class CommandIntent(BaseModel):
    """What an inbound event asks the bridge to do."""

    kind: Literal["register", "list", "convert_url", "upload_file", "help", "invalid"]
    code: str | None = None
    url: str | None = None
    file_name: str | None = None
    content_url: str | None = None
    topic: Literal["general", "register"] = "general"
    reason: str | None = None


def classify(event: InboundEvent) -> CommandIntent:
    """Derive the intent of a chat event."""
    if event.kind == "text":
        return classify_text(event.body)
    if event.kind == "file":
        return classify_file(event)
    return CommandIntent(kind="invalid", reason=UNSUPPORTED_MESSAGE)


def classify_text(body: str) -> CommandIntent:
    """Classify a text body; unmatched text is a help request.

    A body that starts with ``http://`` or ``https://`` but is not a valid URL is rejected as
    ``invalid-url`` rather than answered with help.
    """
    text = body.strip()
    if text.startswith(REGISTER_COMMAND):
        words = text.split()
        if len(words) != 2:  # noqa: PLR2004
            return CommandIntent(kind="help", topic="register")
        return CommandIntent(kind="register", code=words[1])
    if text == LIST_COMMAND:
        return CommandIntent(kind="list")
    if text.startswith(URL_PREFIXES):
        if not is_valid_http_url(text):
            return CommandIntent(kind="invalid", reason=INVALID_URL)
        return CommandIntent(kind="convert_url", url=text)
    return CommandIntent(kind="help")


def classify_file(event: InboundEvent) -> CommandIntent:
    """Accept only attachments declared as PDF; nothing is downloaded here."""
    if media_type(event.mime_type) != PDF_MIME_TYPE or not event.content_url:
        return CommandIntent(kind="invalid", reason=NOT_A_PDF)
    return CommandIntent(kind="upload_file", file_name=event.file_name, content_url=event.content_url)


def is_valid_http_url(text: str) -> bool:
    """Return True for an absolute http(s) URL with a host and no whitespace."""
    if any(char.isspace() for char in text):
        return False
    try:
        parts = urlsplit(text)
        hostname = parts.hostname
        _ = parts.port
    except ValueError:
        return False
    return parts.scheme in URL_SCHEMES and bool(hostname)
