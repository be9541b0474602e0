"""Abstract interfaces for cloud document stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from document_store_api.item import Item

__all__ = ["Client", "DocumentStoreError", "get_client"]


class DocumentStoreError(RuntimeError):
    """Raised when the remote document store rejects or fails a request."""


class Client(ABC):
    """The contract for a cloud document store bound to one device."""

    @abstractmethod
    def register_device(self, code: str) -> str:
        """Exchange a one-time pairing code for a durable device token.

        Args:
            code: Pairing code obtained by the user from the store's web portal.

        Returns:
            Device token that authenticates this bridge on later runs.

        Raises:
            DocumentStoreError: The code was rejected or the service is unreachable.

        """
        raise NotImplementedError

    @abstractmethod
    def refresh_session(self) -> None:
        """Obtain a fresh user session from the stored device token.

        Raises:
            DocumentStoreError: No device token is set or the token was rejected.

        """
        raise NotImplementedError

    @property
    @abstractmethod
    def device_token(self) -> str | None:
        """Return the device token this client authenticates with, if any."""
        raise NotImplementedError

    @abstractmethod
    def list_items(self) -> Sequence[Item]:
        """Return every item (documents and folders) in the store.

        Raises:
            DocumentStoreError: The listing request failed.

        """
        raise NotImplementedError

    @abstractmethod
    def upload_pdf(self, name: str, item_id: str, data: bytes) -> None:
        """Upload a PDF document as a new item.

        Args:
            name: Display name shown on the device.
            item_id: Identifier for the new remote item.
            data: Raw PDF bytes.

        Raises:
            DocumentStoreError: Any step of the upload failed.

        """
        raise NotImplementedError


def get_client(device_token: str | None = None) -> Client:
    """Return the default document store client implementation.

    Args:
        device_token: Previously issued device token, or None for an unregistered client.

    Returns:
        Client implementation.

    """
    raise NotImplementedError
