"""Command handlers; importing this package registers them."""

from pdf_bridge.commands import account, documents, general  # noqa: F401
