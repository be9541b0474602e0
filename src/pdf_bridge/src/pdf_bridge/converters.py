"""Producers of PDF bytes for the upload pipeline.

Two adapters share one contract, ``PdfPipeline.fetch(intent)``:
    - URL intents are rendered to PDF by headless Chromium.
    - File intents download the attachment as-is; the reported content type is kept so
      the caller can check it before uploading.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING, NamedTuple

import requests
from dotenv import load_dotenv
from playwright.async_api import async_playwright

if TYPE_CHECKING:
    from pdf_bridge.intents import CommandIntent

load_dotenv()
logger = logging.getLogger("pdf_bridge.converters")

PDF_MIME_TYPE = "application/pdf"
DEFAULT_FILE_NAME = "discord.pdf"
DOWNLOAD_TIMEOUT_SECONDS = float(os.environ.get("DOWNLOAD_TIMEOUT_SECONDS", "60"))
PAGE_WIDTH = "210mm"
PAGE_HEIGHT = "280mm"
PAGE_MARGINS = {"top": "1cm", "right": "1cm", "bottom": "1cm", "left": "2cm"}


class PdfDocument(NamedTuple):
    """PDF payload ready for upload."""

    name: str
    data: bytes
    content_type: str


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


async def render_url_to_pdf(url: str) -> PdfDocument:
    """Render ``url`` once its network activity is idle; the page title names the document."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch()
        try:
            page = await browser.new_page()
            await page.goto(url, wait_until="networkidle")
            title = (await page.title()).strip()
            data = await page.pdf(
                width=PAGE_WIDTH,
                height=PAGE_HEIGHT,
                print_background=True,
                margin=PAGE_MARGINS,
            )
        finally:
            await browser.close()
    logger.info("Rendered %s (%d bytes)", url, len(data))
    return PdfDocument(name=title or url, data=data, content_type=PDF_MIME_TYPE)


def download_content(url: str, *, timeout_seconds: float = DOWNLOAD_TIMEOUT_SECONDS) -> tuple[bytes, str]:
    """Download chat content and return its bytes with the reported media type."""
    response = requests.get(url, timeout=timeout_seconds)
    response.raise_for_status()
    return response.content, media_type(response.headers.get("Content-Type"))


async def fetch_file(name: str | None, content_url: str) -> PdfDocument:
    """Download an uploaded chat file without transforming it."""
    data, content_type = await asyncio.to_thread(download_content, content_url)
    return PdfDocument(name=(name or "").strip() or DEFAULT_FILE_NAME, data=data, content_type=content_type)


class PdfPipeline:
    """Get the PDF for a URL or file intent."""

    async def fetch(self, intent: CommandIntent) -> PdfDocument:
        """Return the PDF document behind ``intent``.

        Raises:
            ValueError: The intent carries no URL or file reference.

        """
        if intent.kind == "convert_url" and intent.url:
            return await render_url_to_pdf(intent.url)
        if intent.kind == "upload_file" and intent.content_url:
            return await fetch_file(intent.file_name, intent.content_url)
        raise ValueError(f"No PDF source for intent: {intent.kind}")  # noqa: TRY003, EM102


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def media_type(content_type: str | None) -> str:
    """Return the lower-cased media type of a Content-Type value, without parameters."""
    return (content_type or "").split(";", 1)[0].strip().lower()
