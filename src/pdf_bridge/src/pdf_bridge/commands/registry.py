"""Command registry for dispatched chat intents."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from pdf_bridge import outcomes

if TYPE_CHECKING:
    from pdf_bridge.converters import PdfPipeline
    from pdf_bridge.intents import CommandIntent
    from pdf_bridge.outcomes import PipelineResult
    from pdf_bridge.session import CloudSessionManager

CommandHandler = Callable[..., Awaitable["PipelineResult"]]

_COMMAND_HANDLERS: dict[str, CommandHandler] = {}
_COMMANDS_REQUIRING_REGISTRATION = {
    "list",
    "convert_url",
    "upload_file",
}
logger = logging.getLogger("pdf_bridge.commands")


# ---------------------------------------------------------------------------
# Registry API
# ---------------------------------------------------------------------------


def register_command(kind: str, handler: CommandHandler) -> None:
    """Register the handler for an intent kind."""
    if kind in _COMMAND_HANDLERS:
        msg = f"Command already registered: {kind}"
        raise ValueError(msg)
    _COMMAND_HANDLERS[kind] = handler


def list_commands() -> list[str]:
    """Return the registered intent kinds."""
    return list(_COMMAND_HANDLERS)


async def run_command(
    intent: CommandIntent,
    *,
    session: CloudSessionManager,
    pipeline: PdfPipeline,
) -> PipelineResult:
    """Execute the handler for ``intent`` behind the registration gate."""
    handler = _COMMAND_HANDLERS.get(intent.kind)
    if handler is None:
        logger.warning("No handler for intent %s", intent.kind)
        return outcomes.help_requested()
    if intent.kind in _COMMANDS_REQUIRING_REGISTRATION and not session.is_registered():
        logger.info("Rejected %s: not registered", intent.kind)
        return outcomes.rejected(outcomes.NOT_REGISTERED)
    try:
        return await handler(intent, session=session, pipeline=pipeline)
    except Exception as exc:
        logger.exception("Command failed (%s)", intent.kind)
        return outcomes.failed(intent.kind, str(exc))
