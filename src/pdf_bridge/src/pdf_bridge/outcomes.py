"""Pipeline results and the chat notices they map to.

Every dispatched event ends in exactly one ``PipelineResult`` and ``render_notice`` turns
each result into exactly one notice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Sequence

    from document_store_api import Item

NOT_A_PDF = "not-a-pdf"
CONTENT_MISMATCH = "content-mismatch"
NOT_REGISTERED = "not-registered"
INVALID_URL = "invalid-url"
UNSUPPORTED_MESSAGE = "unsupported-message"

REGISTER_URL = "https://my.remarkable.com/device/desktop/connect"

HELP_TEXT = (
    "This bot can be used to send PDFs and URLs (as PDFs) to the reMarkable™ cloud.\n"
    "Just send me a PDF, or type an URL and I'll send it to your reMarkable™!\n\n"
    "Commands:\n"
    "    - help: Prints this help message.\n"
    "    - register <code>: Registers this bot in the reMarkable™ cloud.\n"
    "    - list: Lists all items in the reMarkable™ cloud."
)
REGISTER_HELP_TEXT = (
    f"To register the bot, go to {REGISTER_URL} copy the code "
    "and then use the following command:\n\n"
    "    register <code>"
)

REJECTION_NOTICES = {
    NOT_A_PDF: "File is not a PDF.",
    CONTENT_MISMATCH: "File content is not a PDF.",
    NOT_REGISTERED: "Bot not registered in the reMarkable™ cloud. Please use the `register` command first.",
    INVALID_URL: "Invalid URL.",
    UNSUPPORTED_MESSAGE: "Unsupported message. Send me a PDF file or a URL.",
}
FAILURE_NOTICES = {
    "download": "Could not download the file.",
    "upload": "Failed to send PDF to reMarkable™.",
    "list": "Failed to list items in the reMarkable™ cloud.",
}
GENERIC_FAILURE_NOTICE = "Something went wrong, please try again."


class PipelineResult(BaseModel):
    """Outcome of one dispatched event."""

    kind: Literal[
        "uploaded",
        "listed",
        "help",
        "registration_succeeded",
        "registration_failed",
        "rejected",
        "failed",
    ]
    name: str | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    topic: Literal["general", "register"] = "general"
    reason: str | None = None
    stage: str | None = None
    subject: str | None = None


# ---------------------------------------------------------------------------
# Result constructors
# ---------------------------------------------------------------------------


def uploaded(name: str) -> PipelineResult:
    """Report a successful upload under its display name."""
    return PipelineResult(kind="uploaded", name=name)


def listed(items: Sequence[Item]) -> PipelineResult:
    """Report the account listing."""
    return PipelineResult(kind="listed", items=[item.to_dict() for item in items])


def help_requested(topic: Literal["general", "register"] = "general") -> PipelineResult:
    """Report a help request for the given topic."""
    return PipelineResult(kind="help", topic=topic)


def registration_succeeded() -> PipelineResult:
    """Report a completed device registration."""
    return PipelineResult(kind="registration_succeeded")


def registration_failed() -> PipelineResult:
    """Report a rejected or failed device registration."""
    return PipelineResult(kind="registration_failed")


def rejected(reason: str) -> PipelineResult:
    """Report a precondition violation."""
    return PipelineResult(kind="rejected", reason=reason)


def failed(stage: str, reason: str, subject: str | None = None) -> PipelineResult:
    """Report a remote failure at ``stage``."""
    return PipelineResult(kind="failed", stage=stage, reason=reason, subject=subject)


# ---------------------------------------------------------------------------
# Notices
# ---------------------------------------------------------------------------


def render_notice(result: PipelineResult) -> str:  # noqa: PLR0911
    """Map a result to the single notice sent back to the chat room."""
    if result.kind == "uploaded":
        return f"PDF '{result.name}' sent to reMarkable™!"
    if result.kind == "listed":
        return _format_items(result.items)
    if result.kind == "help":
        return REGISTER_HELP_TEXT if result.topic == "register" else HELP_TEXT
    if result.kind == "registration_succeeded":
        return "Bot registered!"
    if result.kind == "registration_failed":
        return "Registration failed!"
    if result.kind == "rejected":
        return REJECTION_NOTICES.get(result.reason or "", GENERIC_FAILURE_NOTICE)
    if result.stage == "render":
        return f"PDF could not be generated for {result.subject}." if result.subject else "PDF could not be generated."
    return FAILURE_NOTICES.get(result.stage or "", GENERIC_FAILURE_NOTICE)


def _format_items(items: list[dict[str, Any]]) -> str:
    if not items:
        return "No items found in the reMarkable™ cloud."
    lines = [f"- {item.get('name') or item.get('id')} ({item.get('type')})" for item in items]
    return "Items:\n\n" + "\n".join(lines)
