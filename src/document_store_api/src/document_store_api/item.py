"""Item contract shared by document store implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

__all__ = ["Item", "get_item"]


class Item(ABC):
    """A document or folder stored in the remote document store."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Return the remote identifier of the item."""
        raise NotImplementedError

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the display name of the item."""
        raise NotImplementedError

    @property
    @abstractmethod
    def type(self) -> str:
        """Return the item type (document or collection)."""
        raise NotImplementedError

    @property
    @abstractmethod
    def parent(self) -> str | None:
        """Return the identifier of the containing folder, if any."""
        raise NotImplementedError

    @property
    @abstractmethod
    def modified(self) -> str | None:
        """Return the last client-side modification timestamp, if known."""
        raise NotImplementedError

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the item."""
        raise NotImplementedError


def get_item(raw_data: dict[str, Any]) -> Item:
    """Build a concrete Item from a raw store payload.

    Args:
        raw_data: Item metadata exactly as returned by the store.

    Returns:
        Concrete Item instance bound by the active implementation.

    """
    raise NotImplementedError
