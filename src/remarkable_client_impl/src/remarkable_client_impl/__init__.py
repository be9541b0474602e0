"""Public exports for the reMarkable document store implementation package."""

from remarkable_client_impl.item_impl import register as _register_item
from remarkable_client_impl.remarkable_impl import register as _register_client


def register() -> None:
    """Register the reMarkable client and item implementations."""
    _register_client()
    _register_item()


register()
