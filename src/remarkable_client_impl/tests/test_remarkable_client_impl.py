"""Tests for the reMarkable client implementation aligned with document_store_api contracts."""

from __future__ import annotations

import importlib
import importlib.util
import io
import json
import zipfile
from typing import TYPE_CHECKING, Any

import dotenv
import pytest
import requests
from remarkable_client_impl import remarkable_impl
from remarkable_client_impl.item_impl import RemarkableItem, get_item_impl
from remarkable_client_impl.remarkable_impl import (
    RemarkableClient,
    build_archive,
    get_client_impl,
    register,
)

import document_store_api
from document_store_api import DocumentStoreError

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

STORAGE_HOST = "document-storage.example.com"


class _StubResponse:
    def __init__(self, *, text: str = "", payload: Any = None, status_code: int = 200) -> None:  # noqa: ANN401
        self.text = text
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:  # noqa: ANN401
        if self._payload is None:
            error_message = "no json"
            raise ValueError(error_message)
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:  # noqa: PLR2004
            error_message = f"{self.status_code} error"
            raise requests.HTTPError(error_message)


class _StubSession:
    """Replays queued responses and records every request."""

    def __init__(self, responses: list[_StubResponse | Exception]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _StubResponse:  # noqa: ANN401
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _discovery() -> _StubResponse:
    return _StubResponse(payload={"Status": "OK", "Host": STORAGE_HOST})


def _authenticated_client(responses: list[_StubResponse | Exception]) -> tuple[RemarkableClient, _StubSession]:
    session = _StubSession([_StubResponse(text="user-token"), *responses])
    client = RemarkableClient(device_token="device-token", session=session)  # type: ignore[arg-type]
    client.refresh_session()
    return client, session


def test_register_device_posts_code_and_stores_token() -> None:
    """register_device sends the pairing code and keeps the issued device token."""
    # ARRANGE
    session = _StubSession([_StubResponse(text=" device-token \n")])
    client = RemarkableClient(session=session)  # type: ignore[arg-type]

    # ACT
    token = client.register_device("abcdefgh")

    # ASSERT
    assert token == "device-token"
    assert client.device_token == "device-token"
    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url.endswith("/token/json/2/device/new")
    assert kwargs["json"]["code"] == "abcdefgh"
    assert kwargs["json"]["deviceDesc"] == remarkable_impl.DEVICE_DESC
    assert kwargs["json"]["deviceID"]


def test_register_device_rejected_code_raises() -> None:
    """HTTP errors from the auth service surface as DocumentStoreError."""
    session = _StubSession([_StubResponse(status_code=400)])
    client = RemarkableClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(DocumentStoreError, match="failed"):
        client.register_device("bad")
    assert client.device_token is None


def test_register_device_empty_token_raises() -> None:
    """An empty body is not a usable device token."""
    session = _StubSession([_StubResponse(text="  ")])
    client = RemarkableClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(DocumentStoreError, match="Empty device token"):
        client.register_device("abcdefgh")


def test_refresh_session_requires_device_token() -> None:
    """refresh_session cannot run on an unregistered client."""
    client = RemarkableClient(session=_StubSession([]))  # type: ignore[arg-type]

    with pytest.raises(DocumentStoreError, match="Device token is required"):
        client.refresh_session()


def test_refresh_session_uses_device_token_bearer() -> None:
    """The user token is requested with the device token as bearer."""
    _, session = _authenticated_client([])

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url.endswith("/token/json/2/user/new")
    assert kwargs["headers"] == {"Authorization": "Bearer device-token"}


def test_refresh_session_transport_error_is_wrapped() -> None:
    """Connection failures are wrapped into DocumentStoreError."""
    session = _StubSession([requests.ConnectionError("offline")])
    client = RemarkableClient(device_token="device-token", session=session)  # type: ignore[arg-type]

    with pytest.raises(DocumentStoreError, match="offline"):
        client.refresh_session()


def test_list_items_requires_session() -> None:
    """Storage calls need a refreshed session."""
    client = RemarkableClient(device_token="device-token", session=_StubSession([]))  # type: ignore[arg-type]

    with pytest.raises(DocumentStoreError, match="not authenticated"):
        client.list_items()


def test_list_items_discovers_host_and_wraps_entries() -> None:
    """list_items resolves the storage host once and returns RemarkableItem objects."""
    # ARRANGE
    docs = [
        {"ID": "1", "VissibleName": "Paper", "Type": "DocumentType", "Parent": "", "ModifiedClient": "t1"},
        {"ID": "2", "VissibleName": "Folder", "Type": "CollectionType", "Parent": "", "ModifiedClient": "t2"},
    ]
    client, session = _authenticated_client(
        [_discovery(), _StubResponse(payload=docs), _StubResponse(payload=docs)],
    )

    # ACT
    first = client.list_items()
    second = client.list_items()

    # ASSERT
    assert all(isinstance(item, RemarkableItem) for item in first)
    assert [item.name for item in first] == ["Paper", "Folder"]
    assert [item.id for item in second] == ["1", "2"]
    urls = [url for _, url, _ in session.calls]
    assert sum(url.endswith("/service/json/1/document-storage") for url in urls) == 1
    assert urls[-1] == f"https://{STORAGE_HOST}/document-storage/json/2/docs"
    assert session.calls[-1][2]["headers"] == {"Authorization": "Bearer user-token"}


def test_list_items_discovery_failure_raises() -> None:
    """A non-OK discovery payload is a store error."""
    client, _ = _authenticated_client([_StubResponse(payload={"Status": "Error"})])

    with pytest.raises(DocumentStoreError, match="discovery"):
        client.list_items()


def test_list_items_invalid_json_raises() -> None:
    """Garbage listing bodies are reported as store errors."""
    client, _ = _authenticated_client([_discovery(), _StubResponse(text="<html>")])

    with pytest.raises(DocumentStoreError, match="Invalid JSON"):
        client.list_items()


def test_upload_pdf_request_blob_and_status() -> None:
    """upload_pdf requests a blob URL, uploads the archive and commits the metadata."""
    # ARRANGE
    client, session = _authenticated_client(
        [
            _discovery(),
            _StubResponse(payload=[{"ID": "id-1", "Success": True, "BlobURLPut": "https://blob.example.com/put"}]),
            _StubResponse(),
            _StubResponse(payload=[{"ID": "id-1", "Success": True}]),
        ],
    )

    # ACT
    client.upload_pdf("report", "id-1", b"%PDF-1.7 data")

    # ASSERT
    request_call, blob_call, status_call = session.calls[-3:]
    assert request_call[0] == "PUT"
    assert request_call[1].endswith("/upload/request")
    assert request_call[2]["json"] == [{"ID": "id-1", "Type": "DocumentType", "Version": 1}]
    assert blob_call[0] == "PUT"
    assert blob_call[1] == "https://blob.example.com/put"
    assert "headers" not in blob_call[2]
    with zipfile.ZipFile(io.BytesIO(blob_call[2]["data"])) as archive:
        assert archive.read("id-1.pdf") == b"%PDF-1.7 data"
    metadata = status_call[2]["json"][0]
    assert status_call[1].endswith("/upload/update-status")
    assert metadata["VissibleName"] == "report"
    assert metadata["ID"] == "id-1"
    assert metadata["Type"] == "DocumentType"
    assert metadata["ModifiedClient"].endswith("Z")


def test_upload_pdf_rejected_request_raises() -> None:
    """A failed upload request stops before any blob is sent."""
    client, session = _authenticated_client(
        [_discovery(), _StubResponse(payload=[{"ID": "id-1", "Success": False, "Message": "quota"}])],
    )

    with pytest.raises(DocumentStoreError, match="quota"):
        client.upload_pdf("report", "id-1", b"%PDF")
    assert len(session.calls) == 3  # noqa: PLR2004


def test_upload_pdf_missing_blob_url_raises() -> None:
    """Successful responses without an upload URL are rejected."""
    client, _ = _authenticated_client([_discovery(), _StubResponse(payload=[{"ID": "id-1", "Success": True}])])

    with pytest.raises(DocumentStoreError, match="No upload URL"):
        client.upload_pdf("report", "id-1", b"%PDF")


def test_build_archive_layout() -> None:
    """Archives carry content, pagedata and pdf entries named by item id."""
    archive_bytes = build_archive("abc", b"%PDF")

    with zipfile.ZipFile(io.BytesIO(archive_bytes)) as archive:
        assert sorted(archive.namelist()) == ["abc.content", "abc.pagedata", "abc.pdf"]
        content = json.loads(archive.read("abc.content"))
    assert content["fileType"] == "pdf"


def test_item_properties_and_serialization() -> None:
    """RemarkableItem exposes the listing fields and normalizes empty parents."""
    item = get_item_impl(
        {"ID": "1", "VissibleName": "Paper", "Type": "DocumentType", "Parent": "", "ModifiedClient": "t"},
    )

    assert isinstance(item, RemarkableItem)
    assert item.parent is None
    assert item.to_dict() == {"id": "1", "name": "Paper", "type": "DocumentType", "parent": None, "modified": "t"}


def test_get_client_impl_returns_new_instance() -> None:
    """Factory returns a fresh client bound to the given token."""
    first = get_client_impl("token")
    second = get_client_impl("token")

    assert isinstance(first, RemarkableClient)
    assert first is not second
    assert first.device_token == "token"


def test_register_binds_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register should replace document_store_api.get_client with the reMarkable factory."""
    # ARRANGE
    client_contract = importlib.import_module("document_store_api.client")
    monkeypatch.setattr(document_store_api, "get_client", client_contract.get_client, raising=False)

    # ACT
    register()

    # ASSERT
    assert document_store_api.get_client is get_client_impl


def test_list_items_builds_items_through_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Listing entries are turned into items by document_store_api.get_item."""
    built: list[dict[str, Any]] = []

    def _fake_get_item(raw_data: dict[str, Any]) -> RemarkableItem:
        built.append(raw_data)
        return RemarkableItem(raw_data)

    monkeypatch.setattr(document_store_api, "get_item", _fake_get_item)
    client, _ = _authenticated_client([_discovery(), _StubResponse(payload=[{"ID": "1"}, "junk"])])

    items = client.list_items()

    assert built == [{"ID": "1"}]
    assert [item.id for item in items] == ["1"]


def _load_isolated_copy(module: ModuleType, name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, module.__file__)
    assert spec is not None
    assert spec.loader is not None
    isolated = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(isolated)
    return isolated


def test_endpoints_read_from_dotenv_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Hosts and device description set only in a .env file are honoured at import."""
    # ARRANGE
    env_file = tmp_path / ".env"
    env_file.write_text(
        "REMARKABLE_AUTH_HOST=https://auth.test\n"
        "REMARKABLE_SERVICE_MANAGER_HOST=https://manager.test\n"
        "REMARKABLE_DEVICE_DESC=desktop-test\n",
        encoding="utf-8",
    )
    for name in ("REMARKABLE_AUTH_HOST", "REMARKABLE_SERVICE_MANAGER_HOST", "REMARKABLE_DEVICE_DESC"):
        monkeypatch.delenv(name, raising=False)

    def _load_test_dotenv(*_args: Any, **_kwargs: Any) -> bool:
        for key, value in dotenv.dotenv_values(env_file).items():
            monkeypatch.setenv(key, value or "")
        return True

    monkeypatch.setattr(dotenv, "load_dotenv", _load_test_dotenv)

    # ACT
    isolated = _load_isolated_copy(remarkable_impl, "remarkable_impl_dotenv_check")

    # ASSERT
    assert isolated.AUTH_HOST == "https://auth.test"
    assert isolated.SERVICE_MANAGER_HOST == "https://manager.test"
    assert isolated.DEVICE_DESC == "desktop-test"
