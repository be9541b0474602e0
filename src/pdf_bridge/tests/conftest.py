"""Shared fakes and fixtures for pdf_bridge tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from pdf_bridge.converters import PDF_MIME_TYPE, PdfDocument
from pdf_bridge.session import CloudSessionManager
from pdf_bridge.session_store import SessionStore

from document_store_api import Client, DocumentStoreError, Item

if TYPE_CHECKING:
    from pathlib import Path

    from pdf_bridge.intents import CommandIntent


class FakeItem(Item):
    def __init__(self, item_id: str, name: str, item_type: str = "DocumentType") -> None:
        self._id = item_id
        self._name = name
        self._type = item_type

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return self._type

    @property
    def parent(self) -> str | None:
        return None

    @property
    def modified(self) -> str | None:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self._id, "name": self._name, "type": self._type, "parent": None, "modified": None}


class FakeStoreClient(Client):
    """In-memory document store client that records calls."""

    def __init__(self, device_token: str | None = None) -> None:
        self._device_token = device_token
        self.fail_register = False
        self.fail_refresh = False
        self.fail_list = False
        self.fail_upload = False
        self.items: list[Item] = []
        self.register_calls: list[str] = []
        self.refresh_calls = 0
        self.list_calls = 0
        self.uploads: list[tuple[str, str, bytes]] = []

    @property
    def device_token(self) -> str | None:
        return self._device_token

    def register_device(self, code: str) -> str:
        self.register_calls.append(code)
        if self.fail_register:
            error_message = "invalid code"
            raise DocumentStoreError(error_message)
        self._device_token = f"device-{code}"
        return self._device_token

    def refresh_session(self) -> None:
        self.refresh_calls += 1
        if self.fail_refresh:
            error_message = "token expired"
            raise DocumentStoreError(error_message)

    def list_items(self) -> list[Item]:
        self.list_calls += 1
        if self.fail_list:
            error_message = "listing failed"
            raise DocumentStoreError(error_message)
        return list(self.items)

    def upload_pdf(self, name: str, item_id: str, data: bytes) -> None:
        if self.fail_upload:
            error_message = "upload failed"
            raise DocumentStoreError(error_message)
        self.uploads.append((name, item_id, data))


class FakeClientFactory:
    """Client factory that hands out FakeStoreClient instances with preset failures."""

    def __init__(self) -> None:
        self.clients: list[FakeStoreClient] = []
        self.failures: dict[str, bool] = {}

    def __call__(self, device_token: str | None) -> FakeStoreClient:
        client = FakeStoreClient(device_token)
        for name, value in self.failures.items():
            setattr(client, name, value)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeStoreClient:
        return self.clients[-1]


class FakePipeline:
    """PDF pipeline returning a preset document or raising a preset error."""

    def __init__(self) -> None:
        self.document = PdfDocument(name="paper.pdf", data=b"%PDF-1.7", content_type=PDF_MIME_TYPE)
        self.error: Exception | None = None
        self.calls: list[CommandIntent] = []

    async def fetch(self, intent: CommandIntent) -> PdfDocument:
        self.calls.append(intent)
        if self.error is not None:
            raise self.error
        return self.document


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    """Credential store inside a temporary data directory."""
    return SessionStore(tmp_path / "data" / "remarkable.json")


@pytest.fixture
def client_factory() -> FakeClientFactory:
    """Factory recording every client the manager creates."""
    return FakeClientFactory()


@pytest.fixture
def manager(store: SessionStore, client_factory: FakeClientFactory) -> CloudSessionManager:
    """Unregistered session manager wired to fakes."""
    return CloudSessionManager(store, client_factory=client_factory)


@pytest.fixture
def pipeline() -> FakePipeline:
    """Fake PDF pipeline."""
    return FakePipeline()


@pytest.fixture
def fake_item() -> type[FakeItem]:
    """FakeItem class for building listings."""
    return FakeItem
