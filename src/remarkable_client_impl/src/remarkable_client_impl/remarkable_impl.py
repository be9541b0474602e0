"""reMarkable Client Implementation.

Concrete document_store_api.Client backed by the reMarkable cloud document-storage API.
Devices are paired with a one-time code, sessions are refreshed from the device token, and
PDFs are uploaded as zip archives through a signed blob URL.
"""

from __future__ import annotations

import io
import json
import logging
import os
import uuid
import zipfile
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import requests
from dotenv import load_dotenv

import document_store_api
from document_store_api import Client, DocumentStoreError

if TYPE_CHECKING:
    from document_store_api import Item

load_dotenv()
logger = logging.getLogger("remarkable_client_impl")

AUTH_HOST = os.environ.get(
    "REMARKABLE_AUTH_HOST",
    "https://webapp-production-dot-remarkable-production.appspot.com",
)
SERVICE_MANAGER_HOST = os.environ.get(
    "REMARKABLE_SERVICE_MANAGER_HOST",
    "https://service-manager-production-dot-remarkable-production.appspot.com",
)
DEVICE_DESC = os.environ.get("REMARKABLE_DEVICE_DESC", "desktop-linux")
STORAGE_GROUP = "auth0|5a68dc51cb30df3877a1d7c4"
DEFAULT_TIMEOUT_SECONDS = 30.0
DOCUMENT_TYPE = "DocumentType"
PDF_CONTENT = {
    "extraMetadata": {},
    "fileType": "pdf",
    "lastOpenedPage": 0,
    "lineHeight": -1,
    "margins": 180,
    "pageCount": 0,
    "textScale": 1,
    "transformMatrix": {
        "m11": 1,
        "m12": 0,
        "m13": 0,
        "m21": 0,
        "m22": 1,
        "m23": 0,
        "m31": 0,
        "m32": 0,
        "m33": 1,
    },
}

# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------


class RemarkableClient(Client):
    """Concrete document_store_api.Client for the reMarkable cloud.

    Authentication:
        - device token: issued once by ``register_device`` and persisted by the caller.
        - user token: short-lived, obtained by ``refresh_session`` from the device token.

    Attributes:
        _device_token: Durable device token, or None before registration.
        _user_token: Session token used for document-storage calls.
        _storage_host: Document-storage host resolved through the service manager.
        _session: Shared ``requests`` session.

    """

    def __init__(self, device_token: str | None = None, session: requests.Session | None = None) -> None:
        """Create a client, optionally bound to an existing device token."""
        self._device_token = device_token
        self._user_token: str | None = None
        self._storage_host: str | None = None
        self._session = session or requests.Session()
        self._timeout = DEFAULT_TIMEOUT_SECONDS

    @property
    def device_token(self) -> str | None:
        """Get the device token, if the client has been registered."""
        return self._device_token

    def register_device(self, code: str) -> str:
        """Pair this bridge as a new desktop device.

        Args:
            code: One-time code from the reMarkable "connect desktop" page.

        Returns:
            The device token issued by the auth service.

        """
        payload = {"code": code, "deviceDesc": DEVICE_DESC, "deviceID": str(uuid.uuid4())}
        response = self._request("POST", f"{AUTH_HOST}/token/json/2/device/new", json=payload)
        token = response.text.strip()
        if not token:
            raise DocumentStoreError("Empty device token returned.")  # noqa: TRY003, EM101
        self._device_token = token
        self._user_token = None
        logger.info("Registered new reMarkable device")
        return token

    def refresh_session(self) -> None:
        """Exchange the device token for a fresh user token."""
        if not self._device_token:
            raise DocumentStoreError("Device token is required to refresh the session.")  # noqa: TRY003, EM101
        response = self._request(
            "POST",
            f"{AUTH_HOST}/token/json/2/user/new",
            headers=_bearer(self._device_token),
        )
        token = response.text.strip()
        if not token:
            raise DocumentStoreError("Empty user token returned.")  # noqa: TRY003, EM101
        self._user_token = token
        self._storage_host = None

    def list_items(self) -> list[Item]:
        """Return all documents and collections in the account."""
        response = self._storage_request("GET", "/document-storage/json/2/docs")
        payload = _json_payload(response)
        if not isinstance(payload, list):
            raise DocumentStoreError("Unexpected document listing payload.")  # noqa: TRY003, EM101
        return [document_store_api.get_item(entry) for entry in payload if isinstance(entry, dict)]

    def upload_pdf(self, name: str, item_id: str, data: bytes) -> None:
        """Upload a PDF into the root collection.

        Args:
            name: Visible name on the device.
            item_id: Identifier for the new document.
            data: Raw PDF bytes.

        """
        request_payload = [{"ID": item_id, "Type": DOCUMENT_TYPE, "Version": 1}]
        response = self._storage_request("PUT", "/document-storage/json/2/upload/request", json=request_payload)
        entry = _first_entry(_json_payload(response), item_id)
        blob_url = entry.get("BlobURLPut")
        if not blob_url:
            raise DocumentStoreError(f"No upload URL returned for {item_id}.")  # noqa: TRY003, EM102

        self._request("PUT", blob_url, data=build_archive(item_id, data))

        metadata = [
            {
                "ID": item_id,
                "Parent": "",
                "VissibleName": name,
                "Type": DOCUMENT_TYPE,
                "Version": 1,
                "ModifiedClient": _utc_timestamp(),
            }
        ]
        response = self._storage_request("PUT", "/document-storage/json/2/upload/update-status", json=metadata)
        _first_entry(_json_payload(response), item_id)
        logger.info("Uploaded %s as %s", name, item_id)

    # -----------------------------------------------------------------------
    # HTTP helpers
    # -----------------------------------------------------------------------

    def _storage_request(self, method: str, path: str, **kwargs: Any) -> requests.Response:  # noqa: ANN401
        """Send an authenticated request to the document-storage host."""
        if not self._user_token:
            raise DocumentStoreError("Session is not authenticated.")  # noqa: TRY003, EM101
        host = self._discover_storage_host()
        return self._request(method, f"https://{host}{path}", headers=_bearer(self._user_token), **kwargs)

    def _discover_storage_host(self) -> str:
        """Resolve (and cache) the document-storage host for this account."""
        if self._storage_host:
            return self._storage_host
        response = self._request(
            "GET",
            f"{SERVICE_MANAGER_HOST}/service/json/1/document-storage",
            params={"environment": "production", "group": STORAGE_GROUP, "apiVer": "2"},
        )
        payload = _json_payload(response)
        if not isinstance(payload, dict) or payload.get("Status") != "OK" or not payload.get("Host"):
            raise DocumentStoreError("Document storage host discovery failed.")  # noqa: TRY003, EM101
        self._storage_host = str(payload["Host"])
        return self._storage_host

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # noqa: ANN401
        """Send a request and translate transport/HTTP failures into DocumentStoreError."""
        kwargs.setdefault("timeout", self._timeout)
        try:
            response = self._session.request(method, url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DocumentStoreError(f"{method} {url} failed: {exc}") from exc  # noqa: TRY003, EM102
        return response


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def get_client_impl(device_token: str | None = None) -> RemarkableClient:
    """Return a new RemarkableClient for the given device token."""
    return RemarkableClient(device_token=device_token)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_archive(item_id: str, data: bytes) -> bytes:
    """Pack a PDF into the zip layout the document-storage blob endpoint expects."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(f"{item_id}.content", json.dumps(PDF_CONTENT))
        archive.writestr(f"{item_id}.pagedata", "")
        archive.writestr(f"{item_id}.pdf", data)
    return buffer.getvalue()


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _json_payload(response: requests.Response) -> Any:  # noqa: ANN401
    """Decode a JSON body, raising DocumentStoreError on garbage."""
    try:
        return response.json()
    except ValueError as exc:
        raise DocumentStoreError("Invalid JSON returned by document storage.") from exc  # noqa: TRY003, EM101


def _first_entry(payload: Any, item_id: str) -> dict[str, Any]:  # noqa: ANN401
    """Return the status entry for ``item_id``, raising when the store reports failure."""
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        raise DocumentStoreError(f"Unexpected upload response for {item_id}.")  # noqa: TRY003, EM102
    entry = payload[0]
    if not entry.get("Success", False):
        message = entry.get("Message") or "unknown error"
        raise DocumentStoreError(f"Upload of {item_id} rejected: {message}")  # noqa: TRY003, EM102
    return entry


# ---------------------------------------------------------------------------
# Factory registration
# ---------------------------------------------------------------------------


def register() -> None:
    """Bind the reMarkable client factory into document_store_api.get_client."""
    document_store_api.get_client = get_client_impl
