"""Public export surface for ``document_store_api``."""

from document_store_api import item
from document_store_api.client import Client, DocumentStoreError, get_client
from document_store_api.item import Item, get_item

__all__ = ["Client", "DocumentStoreError", "Item", "get_client", "get_item", "item"]
