"""reMarkable item implementation colocated with the reMarkable client."""

from __future__ import annotations

from typing import Any

import document_store_api
from document_store_api import item

# ---------------------------------------------------------------------------
# reMarkable items
# ---------------------------------------------------------------------------


class RemarkableItem(item.Item):
    """Document or collection entry from the document-storage ``docs`` listing."""

    def __init__(self, raw_data: dict[str, Any]) -> None:
        """Wrap a raw listing entry (``ID``, ``VissibleName``, ``Type``, ...)."""
        self._raw = dict(raw_data)

    @property
    def id(self) -> str:
        """Get the document-storage identifier."""
        return str(self._raw.get("ID", ""))

    @property
    def name(self) -> str:
        """Get the visible name (the API spells the key ``VissibleName``)."""
        return str(self._raw.get("VissibleName", ""))

    @property
    def type(self) -> str:
        """Get the item type, ``DocumentType`` or ``CollectionType``."""
        return str(self._raw.get("Type", ""))

    @property
    def parent(self) -> str | None:
        """Get the parent collection id; root items have an empty parent."""
        return self._raw.get("Parent") or None

    @property
    def modified(self) -> str | None:
        """Get the ``ModifiedClient`` timestamp."""
        return self._raw.get("ModifiedClient") or None

    def to_dict(self) -> dict[str, Any]:
        """Return this item as a JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "parent": self.parent,
            "modified": self.modified,
        }


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def get_item_impl(raw_data: dict[str, Any]) -> RemarkableItem:
    """Build a RemarkableItem."""
    return RemarkableItem(raw_data)


# ---------------------------------------------------------------------------
# Factory registration
# ---------------------------------------------------------------------------


def register() -> None:
    """Register the reMarkable item factory with the abstract API."""
    document_store_api.get_item = get_item_impl
    item.get_item = get_item_impl
