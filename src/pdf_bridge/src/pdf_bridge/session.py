"""Registration and session lifecycle against the cloud document store.

The manager is the only owner of the authenticated client handle and of the credential
file. Its state is either ``Unregistered`` or ``Registered(client)``; callers only see it
through ``is_registered`` and the operations below.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

import document_store_api
from document_store_api import Client, DocumentStoreError, Item
from pdf_bridge.session_store import SessionCredential, SessionStore

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("pdf_bridge.session")

PDF_SUFFIX = ".pdf"


class NotRegisteredError(RuntimeError):
    """Raised when a store operation is attempted without a registered session."""


@dataclass(frozen=True)
class Unregistered:
    """No usable session; registration is required."""


@dataclass(frozen=True)
class Registered:
    """Authenticated session holding a live client."""

    client: Client


SessionState = Unregistered | Registered
UNREGISTERED = Unregistered()


class CloudSessionManager:
    """Owns the document store session of one bridge deployment.

    ``register`` and ``upload_document`` are serialized by a single lock so overlapping
    registrations or uploads cannot interleave. ``list_items`` reads a snapshot of the
    state and is not serialized.
    """

    def __init__(
        self,
        store: SessionStore,
        client_factory: Callable[[str | None], Client] | None = None,
    ) -> None:
        """Create an unregistered manager backed by ``store``."""
        self._store = store
        self._client_factory = client_factory
        self._state: SessionState = UNREGISTERED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        """Return the current session state."""
        return self._state

    def is_registered(self) -> bool:
        """Return True iff an authenticated client handle is held."""
        return isinstance(self._state, Registered)

    async def load(self) -> None:
        """Resume the session from the stored credential, if there is one.

        Missing, unreadable or rejected credentials leave the manager unregistered.
        Failures are logged only.
        """
        try:
            credential = self._store.load()
        except (OSError, ValueError):
            logger.exception("Unreadable credential file %s", self._store.path)
            self._state = UNREGISTERED
            return
        if credential is None:
            logger.info("No reMarkable credential found. Not logging in.")
            self._state = UNREGISTERED
            return

        client = self._new_client(credential.device_token)
        try:
            await asyncio.to_thread(client.refresh_session)
        except DocumentStoreError:
            logger.exception("Error refreshing reMarkable session")
            self._state = UNREGISTERED
            return
        self._state = Registered(client)
        logger.info("Resumed reMarkable session")

    async def register(self, code: str) -> None:
        """Pair with the store using a one-time code and persist the device token.

        Raises:
            DocumentStoreError: The exchange or the first session refresh failed. The
                previous state is kept.

        """
        async with self._lock:
            client = self._new_client(None)
            device_token = await asyncio.to_thread(client.register_device, code)
            await asyncio.to_thread(client.refresh_session)
            self._state = Registered(client)
            logger.info("Registered with the reMarkable cloud")
            try:
                self._store.save(SessionCredential(device_token=device_token))
            except OSError:
                # Stays registered until restart; the next load() will find no credential.
                logger.exception("Error saving %s", self._store.path)

    async def list_items(self) -> list[Item]:
        """Return every item in the store.

        Raises:
            NotRegisteredError: No registered session.
            DocumentStoreError: The listing call failed.

        """
        client = self._require_client()
        return list(await asyncio.to_thread(client.list_items))

    async def upload_document(self, name: str, data: bytes) -> str:
        """Upload a PDF under a fresh identifier and return that identifier.

        A trailing ``.pdf`` is stripped from ``name``. Failures are not retried.

        Raises:
            NotRegisteredError: No registered session.
            DocumentStoreError: The upload failed.

        """
        async with self._lock:
            client = self._require_client()
            display_name = strip_pdf_suffix(name)
            item_id = str(uuid.uuid4())
            await asyncio.to_thread(client.upload_pdf, display_name, item_id, data)
            logger.info("Uploaded %s (%d bytes)", display_name, len(data))
            return item_id

    def _require_client(self) -> Client:
        state = self._state
        if not isinstance(state, Registered):
            raise NotRegisteredError("Bot is not registered with the document store.")  # noqa: TRY003, EM101
        return state.client

    def _new_client(self, device_token: str | None) -> Client:
        factory = self._client_factory or document_store_api.get_client
        return factory(device_token)


def strip_pdf_suffix(name: str) -> str:
    """Drop one trailing ``.pdf`` (any case); names without it are returned unchanged."""
    if name.lower().endswith(PDF_SUFFIX) and len(name) > len(PDF_SUFFIX):
        return name[: -len(PDF_SUFFIX)]
    return name
