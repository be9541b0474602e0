"""Help and rejection commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdf_bridge import outcomes
from pdf_bridge.commands.registry import register_command

if TYPE_CHECKING:
    from pdf_bridge.intents import CommandIntent
    from pdf_bridge.outcomes import PipelineResult

logger = logging.getLogger("pdf_bridge.commands")


async def show_help(intent: CommandIntent, **_: object) -> PipelineResult:
    """Return the general or registration help."""
    return outcomes.help_requested(intent.topic)


async def reject_invalid(intent: CommandIntent, **_: object) -> PipelineResult:
    """Report a precondition violation found while classifying."""
    logger.info("Rejected event: %s", intent.reason)
    return outcomes.rejected(intent.reason or outcomes.UNSUPPORTED_MESSAGE)


register_command("help", show_help)
register_command("invalid", reject_invalid)
