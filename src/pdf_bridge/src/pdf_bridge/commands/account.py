"""Registration and listing commands against the document store account."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from document_store_api import DocumentStoreError
from pdf_bridge import outcomes
from pdf_bridge.commands.registry import register_command
from pdf_bridge.session import NotRegisteredError

if TYPE_CHECKING:
    from pdf_bridge.intents import CommandIntent
    from pdf_bridge.outcomes import PipelineResult
    from pdf_bridge.session import CloudSessionManager

logger = logging.getLogger("pdf_bridge.commands")


async def register_device(intent: CommandIntent, *, session: CloudSessionManager, **_: object) -> PipelineResult:
    """Pair the bridge with the account using the code from the chat command."""
    if not intent.code:
        return outcomes.help_requested("register")
    try:
        await session.register(intent.code)
    except DocumentStoreError:
        logger.exception("Registration failed")
        return outcomes.registration_failed()
    if not session.is_registered():
        return outcomes.registration_failed()
    return outcomes.registration_succeeded()


async def list_items(_intent: CommandIntent, *, session: CloudSessionManager, **_: object) -> PipelineResult:
    """List every item in the account."""
    try:
        items = await session.list_items()
    except NotRegisteredError:
        return outcomes.rejected(outcomes.NOT_REGISTERED)
    except DocumentStoreError as exc:
        logger.exception("Listing items failed")
        return outcomes.failed("list", str(exc))
    return outcomes.listed(items)


register_command("register", register_device)
register_command("list", list_items)
