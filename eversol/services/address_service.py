# eversol/services/address_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError

from eversol.core.events import ADDRESS_UPDATED, EventBus
from eversol.core.storage import KeyValueStore, StorageError
from eversol.repositories.address_repo import AddressRepository
from eversol.schemas.address import Address, AddressCreate, AddressResult, AddressUpdate
from eversol.schemas.common import OperationResult

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available on server"
NOT_FOUND = "Address not found"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_addresses(addresses: list[Address]) -> list[Address]:
    """Default first, then most recently updated first."""
    by_recent = sorted(addresses, key=lambda a: a.updated_at, reverse=True)
    return sorted(by_recent, key=lambda a: not a.is_default)


class AddressService:
    """
    Business logic for the shopper's address book.

    Rules:
      - exactly one address has is_default=True once the book is non-empty
      - the first address ever saved becomes the default
      - the selected-address pointer always resolves to a live address
        (falling back to the default, then the first entry, then None)
      - updates merge onto the existing record and keep created_at
    """

    def __init__(
        self,
        repo: AddressRepository,
        store: KeyValueStore,
        bus: EventBus,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repo = repo
        self.store = store
        self.bus = bus
        self.clock = clock

    # ---- reads ----

    def list(self) -> list[Address]:
        return _sort_addresses(self.repo.list(self.store))

    def count(self) -> int:
        return len(self.repo.list(self.store))

    def get(self, address_id: str) -> Address | None:
        return next((a for a in self.list() if a.id == address_id), None)

    def get_selected(self) -> Address | None:
        if not self.store.available:
            return None

        addresses = self.list()
        selected_id = self.repo.get_selected_id(self.store)
        if selected_id:
            found = next((a for a in addresses if a.id == selected_id), None)
            if found:
                return found

        default = next((a for a in addresses if a.is_default), None)
        return default or (addresses[0] if addresses else None)

    # ---- mutations ----

    def save(
        self,
        payload: AddressCreate | AddressUpdate,
        address_id: str | None = None,
    ) -> AddressResult:
        """
        Insert (AddressCreate) or merge-update (AddressUpdate + address_id).
        """
        if isinstance(payload, AddressUpdate):
            return self.update(address_id or "", payload)
        return self.create(payload)

    def _load_for_write(self) -> list[Address] | None:
        try:
            return self.repo.load(self.store)
        except StorageError as e:
            logger.error("Refusing to modify addresses: %s", e)
            return None

    def _point_selection(self, address_id: str | None) -> None:
        """
        Best-effort pointer write; get_selected() falls back to the
        default when the pointer is stale.
        """
        try:
            if address_id:
                self.repo.set_selected_id(self.store, address_id)
            else:
                self.repo.clear_selected_id(self.store)
        except StorageError as e:
            logger.warning("Failed to update selected address: %s", e)

    def create(self, payload: AddressCreate) -> AddressResult:
        if not self.store.available:
            return AddressResult(
                success=False, message=NOT_AVAILABLE, error="StorageUnavailable"
            )

        addresses = self._load_for_write()
        if addresses is None:
            return AddressResult(success=False, message="Failed to save address")

        now = self.clock()
        address = Address(
            **payload.model_dump(),
            id=f"addr_{uuid.uuid4().hex}",
            created_at=now,
            updated_at=now,
        )

        first_address = not addresses
        if first_address or address.is_default:
            address.is_default = True
            for other in addresses:
                other.is_default = False

        try:
            self.repo.save_all(self.store, [*addresses, address])
        except StorageError as e:
            logger.error("Error saving address: %s", e)
            return AddressResult(success=False, message="Failed to save address")

        if address.is_default:
            self._point_selection(address.id)

        self.bus.emit(ADDRESS_UPDATED)
        return AddressResult(success=True, address=address)

    def update(self, address_id: str, payload: AddressUpdate) -> AddressResult:
        """
        Merge the provided fields onto an existing address.

        Setting is_default=True moves the default flag (and the selection)
        here. Clearing the flag on the current default is ignored: the
        default only moves when another address claims it.
        """
        if not self.store.available:
            return AddressResult(
                success=False, message=NOT_AVAILABLE, error="StorageUnavailable"
            )

        addresses = self._load_for_write()
        if addresses is None:
            return AddressResult(success=False, message="Failed to save address")

        index = next((i for i, a in enumerate(addresses) if a.id == address_id), -1)
        if index < 0:
            return AddressResult(success=False, message=NOT_FOUND, error="NotFound")

        existing = addresses[index]
        changes = payload.model_dump(exclude_unset=True)
        becomes_default = changes.pop("is_default", None) is True

        try:
            updated = Address.model_validate(
                {**existing.model_dump(), **changes, "updated_at": self.clock()}
            )
        except ValidationError as e:
            logger.warning("Rejected address update for %s: %s", address_id, e)
            return AddressResult(
                success=False, message="Invalid address fields", error="Validation"
            )

        if becomes_default:
            updated.is_default = True
            for other in addresses:
                if other.id != address_id:
                    other.is_default = False
        addresses[index] = updated

        try:
            self.repo.save_all(self.store, addresses)
        except StorageError as e:
            logger.error("Error saving address: %s", e)
            return AddressResult(success=False, message="Failed to save address")

        if becomes_default:
            self._point_selection(updated.id)

        self.bus.emit(ADDRESS_UPDATED)
        return AddressResult(success=True, address=updated)

    def delete(self, address_id: str) -> OperationResult:
        """
        Delete an address.

        - If it was the default, the most recently updated survivor
          becomes the default.
        - If it was selected, the selection moves to the default
          (or is cleared when the book is now empty).
        """
        if not self.store.available:
            return OperationResult(
                success=False, message=NOT_AVAILABLE, error="StorageUnavailable"
            )

        addresses = self._load_for_write()
        if addresses is None:
            return OperationResult(success=False, message="Failed to delete address")

        remaining = [a for a in addresses if a.id != address_id]
        if len(remaining) == len(addresses):
            return OperationResult(success=False, message=NOT_FOUND, error="NotFound")

        if remaining and not any(a.is_default for a in remaining):
            _sort_addresses(remaining)[0].is_default = True

        try:
            self.repo.save_all(self.store, remaining)
        except StorageError as e:
            logger.error("Error deleting address: %s", e)
            return OperationResult(success=False, message="Failed to delete address")

        if self.repo.get_selected_id(self.store) == address_id:
            new_default = next((a for a in remaining if a.is_default), None)
            self._point_selection(new_default.id if new_default else None)

        self.bus.emit(ADDRESS_UPDATED)
        return OperationResult(success=True)

    def set_selected(self, address_id: str) -> OperationResult:
        """
        Make `address_id` both the selected address and the only default.
        """
        if not self.store.available:
            return OperationResult(
                success=False, message=NOT_AVAILABLE, error="StorageUnavailable"
            )

        addresses = self._load_for_write()
        if addresses is None:
            return OperationResult(
                success=False, message="Failed to set selected address"
            )

        if not any(a.id == address_id for a in addresses):
            return OperationResult(success=False, message=NOT_FOUND, error="NotFound")

        for address in addresses:
            address.is_default = address.id == address_id

        try:
            self.repo.save_all(self.store, addresses)
        except StorageError as e:
            logger.error("Error setting selected address: %s", e)
            return OperationResult(
                success=False, message="Failed to set selected address"
            )

        self._point_selection(address_id)

        self.bus.emit(ADDRESS_UPDATED)
        return OperationResult(success=True)

    def on_change(self, handler: Callable[[None], None]) -> Callable[[], None]:
        return self.bus.subscribe(ADDRESS_UPDATED, handler)

    @staticmethod
    def get_update_event_name() -> str:
        return ADDRESS_UPDATED
