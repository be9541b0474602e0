"""Convert-then-upload commands for URLs and PDF attachments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import requests
from playwright.async_api import Error as PlaywrightError

from document_store_api import DocumentStoreError
from pdf_bridge import outcomes
from pdf_bridge.commands.registry import register_command
from pdf_bridge.converters import PDF_MIME_TYPE
from pdf_bridge.session import NotRegisteredError, strip_pdf_suffix

if TYPE_CHECKING:
    from pdf_bridge.converters import PdfPipeline
    from pdf_bridge.intents import CommandIntent
    from pdf_bridge.outcomes import PipelineResult
    from pdf_bridge.session import CloudSessionManager

logger = logging.getLogger("pdf_bridge.commands")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _forward(
    intent: CommandIntent,
    session: CloudSessionManager,
    pipeline: PdfPipeline,
    *,
    stage: str,
) -> PipelineResult:
    """Obtain the PDF for ``intent`` and upload it; a failed step ends the pipeline."""
    subject = intent.url or intent.file_name
    try:
        document = await pipeline.fetch(intent)
    except (PlaywrightError, requests.RequestException, OSError) as exc:
        logger.exception("Failed to obtain PDF (%s) for %s", stage, subject)
        return outcomes.failed(stage, str(exc), subject=subject)

    if document.content_type != PDF_MIME_TYPE:
        logger.info("Rejected %s: content type %s", subject, document.content_type or "missing")
        return outcomes.rejected(outcomes.CONTENT_MISMATCH)

    try:
        await session.upload_document(document.name, document.data)
    except NotRegisteredError:
        return outcomes.rejected(outcomes.NOT_REGISTERED)
    except DocumentStoreError as exc:
        logger.exception("Failed to upload %s", document.name)
        return outcomes.failed("upload", str(exc), subject=subject)
    return outcomes.uploaded(strip_pdf_suffix(document.name))


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def convert_url(
    intent: CommandIntent,
    *,
    session: CloudSessionManager,
    pipeline: PdfPipeline,
) -> PipelineResult:
    """Render a web page to PDF and upload it."""
    return await _forward(intent, session, pipeline, stage="render")


async def upload_file(
    intent: CommandIntent,
    *,
    session: CloudSessionManager,
    pipeline: PdfPipeline,
) -> PipelineResult:
    """Download a PDF attachment and upload it unchanged."""
    return await _forward(intent, session, pipeline, stage="download")


register_command("convert_url", convert_url)
register_command("upload_file", upload_file)
