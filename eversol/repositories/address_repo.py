# eversol/repositories/address_repo.py
from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError

from eversol.core.storage import KeyValueStore, StorageError
from eversol.schemas.address import Address

logger = logging.getLogger(__name__)

ADDRESS_STORAGE_KEY = "eversol_addresses"
SELECTED_ADDRESS_KEY = "eversol_selected_address"

_address_list = TypeAdapter(list[Address])


class AddressRepository:
    """
    Data access for the address collection and the selected-address pointer.

    - Pure storage operations, no default/selection rules.
    """

    def list(self, store: KeyValueStore) -> list[Address]:
        try:
            raw = store.get(ADDRESS_STORAGE_KEY)
        except StorageError as e:
            logger.error("Error loading addresses: %s", e)
            return []

        if not raw:
            return []

        try:
            return _address_list.validate_json(raw)
        except ValidationError as e:
            logger.error("Error loading addresses: %s", e)
            return []

    def load(self, store: KeyValueStore) -> list[Address]:
        """
        Strict read used before a write.

        Raises:
            StorageError: if the backend fails or the stored value cannot be
                decoded (so a write never replaces data it could not read).
        """
        raw = store.get(ADDRESS_STORAGE_KEY)
        if not raw:
            return []

        try:
            return _address_list.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Stored addresses are unreadable: {e}") from e

    def save_all(self, store: KeyValueStore, addresses: list[Address]) -> None:
        payload = json.dumps([a.model_dump(mode="json") for a in addresses])
        store.set(ADDRESS_STORAGE_KEY, payload)

    def get_selected_id(self, store: KeyValueStore) -> str | None:
        try:
            return store.get(SELECTED_ADDRESS_KEY)
        except StorageError as e:
            logger.error("Error loading selected address: %s", e)
            return None

    def set_selected_id(self, store: KeyValueStore, address_id: str) -> None:
        store.set(SELECTED_ADDRESS_KEY, address_id)

    def clear_selected_id(self, store: KeyValueStore) -> None:
        store.remove(SELECTED_ADDRESS_KEY)
