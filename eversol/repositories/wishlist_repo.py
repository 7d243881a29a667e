# eversol/repositories/wishlist_repo.py
from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from eversol.core.storage import KeyValueStore, StorageError
from eversol.schemas.wishlist import WishlistItem

logger = logging.getLogger(__name__)

WISHLIST_STORAGE_KEY = "eversol-wishlist"


def decode_wishlist(data) -> list[WishlistItem]:
    """
    Decode a stored wishlist into records.

    Two shapes are accepted:
      - current: [{"product_id": ..., "title": ..., ...}, ...]
      - legacy:  ["<product_id>", ...]

    Legacy entries become records with the default title and no image.
    Anything that is not a list decodes to an empty wishlist.
    """
    if not isinstance(data, list):
        return []

    items: list[WishlistItem] = []
    for entry in data:
        if isinstance(entry, dict):
            items.append(WishlistItem.model_validate(entry))
        elif isinstance(entry, str):
            items.append(WishlistItem(product_id=entry))
        else:
            raise ValueError(f"Unsupported wishlist entry: {entry!r}")
    return items


class WishlistRepository:
    """
    Reads/writes the wishlist collection as one JSON value.
    """

    def list(self, store: KeyValueStore) -> list[WishlistItem]:
        """
        Return stored items, normalized to the current shape.

        Unparseable data is purged and read as an empty wishlist.
        """
        try:
            raw = store.get(WISHLIST_STORAGE_KEY)
        except StorageError as e:
            logger.error("Error reading wishlist from storage: %s", e)
            return []

        if not raw:
            return []

        try:
            return decode_wishlist(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.error("Corrupted wishlist data, clearing it: %s", e)
            try:
                store.remove(WISHLIST_STORAGE_KEY)
            except StorageError as remove_error:
                logger.error("Failed to purge wishlist: %s", remove_error)
            return []

    def save(self, store: KeyValueStore, items: list[WishlistItem]) -> None:
        """
        Replace the whole collection.

        Raises:
            StorageError: if the backend write fails.
        """
        payload = json.dumps([item.model_dump() for item in items])
        store.set(WISHLIST_STORAGE_KEY, payload)
