"""Routes inbound chat events through classification and the command registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdf_bridge.commands import registry
from pdf_bridge.intents import classify

if TYPE_CHECKING:
    from pdf_bridge.converters import PdfPipeline
    from pdf_bridge.models import InboundEvent
    from pdf_bridge.outcomes import PipelineResult
    from pdf_bridge.session import CloudSessionManager

logger = logging.getLogger("pdf_bridge.dispatcher")


class CommandDispatcher:
    """Turns each inbound event into at most one pipeline operation and one result."""

    def __init__(self, session: CloudSessionManager, pipeline: PdfPipeline) -> None:
        """Bind the dispatcher to the session manager and the PDF pipeline."""
        self._session = session
        self._pipeline = pipeline

    async def handle(self, event: InboundEvent) -> PipelineResult | None:
        """Dispatch one event.

        Args:
            event: Normalized chat event.

        Returns:
            The result to report, or None for redacted and self-authored events.

        """
        if event.redacted:
            return None
        if event.bot_user_id and event.sender_id == event.bot_user_id:
            return None

        intent = classify(event)
        logger.info("Dispatching %s from %s in %s", intent.kind, event.sender_id, event.room_id)
        return await registry.run_command(intent, session=self._session, pipeline=self._pipeline)
