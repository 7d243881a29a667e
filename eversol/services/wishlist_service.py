# eversol/services/wishlist_service.py
from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urlencode

from eversol.core.events import EventBus, SHOW_TOAST, WISHLIST_UPDATED
from eversol.core.storage import KeyValueStore, StorageError
from eversol.repositories.wishlist_repo import WishlistRepository
from eversol.schemas.common import Notification, NotificationType, OperationResult
from eversol.schemas.wishlist import WishlistItem

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available on server"

# Callback used by move_to_cart: (item, quantity) -> result
AddToCart = Callable[[WishlistItem, int], OperationResult]


class WishlistService:
    """
    Business logic for the shopper's wishlist.

    Responsibilities:
      - at most one entry per product_id
      - persist the whole collection on every change (replace, not patch)
      - emit "wishlist-updated" only after the write succeeded
      - emit "show-toast" notifications for add / remove / clear
    """

    def __init__(self, repo: WishlistRepository, store: KeyValueStore, bus: EventBus):
        self.repo = repo
        self.store = store
        self.bus = bus

    # ---- internal helpers ----

    def _notify(self, message: str, type_: NotificationType) -> None:
        self.bus.emit(SHOW_TOAST, Notification(message=message, type=type_))

    def _persist(self, items: list[WishlistItem]) -> bool:
        try:
            self.repo.save(self.store, items)
        except StorageError as e:
            logger.error("Error saving wishlist to storage: %s", e)
            return False
        self.bus.emit(WISHLIST_UPDATED)
        return True

    def _unavailable(self) -> OperationResult:
        return OperationResult(
            success=False, message=NOT_AVAILABLE, error="StorageUnavailable"
        )

    # ---- reads ----

    def list(self) -> list[WishlistItem]:
        return self.repo.list(self.store)

    def count(self) -> int:
        return len(self.list())

    def is_present(self, product_id: str) -> bool:
        """
        Safe without storage (always False).
        """
        if not self.store.available:
            return False
        return any(item.product_id == product_id for item in self.list())

    # ---- mutations ----

    def add(self, item: WishlistItem) -> OperationResult:
        """
        Add an item unless its product is already saved.

        Adding an already-saved product is a successful no-op.
        """
        if not self.store.available:
            return self._unavailable()
        if not item.product_id:
            return OperationResult(
                success=False, message="Product id is required", error="Validation"
            )

        current = self.list()
        if any(existing.product_id == item.product_id for existing in current):
            return OperationResult(success=True, message="Already in wishlist")

        record = item.model_copy()
        if not record.id:
            record.id = record.product_id

        if not self._persist([*current, record]):
            return OperationResult(success=False, message="Failed to update wishlist")

        self._notify("Item(s) successfully added to the wishlist", "success")
        return OperationResult(success=True)

    def remove(self, product_id: str) -> OperationResult:
        """
        Remove the entry for `product_id`. No write and no event if absent.
        """
        if not self.store.available:
            return self._unavailable()
        if not product_id:
            return OperationResult(
                success=False, message="Product id is required", error="Validation"
            )

        current = self.list()
        remaining = [item for item in current if item.product_id != product_id]
        if len(remaining) == len(current):
            return OperationResult(
                success=False, message="Item not in wishlist", error="NotFound"
            )

        if not self._persist(remaining):
            return OperationResult(success=False, message="Failed to update wishlist")

        self._notify("Product removed from wishlist.", "info")
        return OperationResult(success=True)

    def toggle(self, item: WishlistItem) -> OperationResult:
        """Remove if present, else add (heart / favorite buttons)."""
        if self.is_present(item.product_id):
            return self.remove(item.product_id)
        return self.add(item)

    def clear(self) -> OperationResult:
        if not self.store.available:
            return self._unavailable()

        if not self._persist([]):
            return OperationResult(success=False, message="Failed to update wishlist")

        self._notify("Wishlist cleared.", "info")
        return OperationResult(success=True)

    def move_to_cart(self, product_id: str, add_to_cart: AddToCart) -> OperationResult:
        """
        Hand a saved item to the cart (quantity 1), then drop it from the
        wishlist. The item stays saved if the cart refuses it.
        """
        item = next((i for i in self.list() if i.product_id == product_id), None)
        if item is None:
            return OperationResult(
                success=False, message="Item not in wishlist", error="NotFound"
            )

        try:
            result = add_to_cart(item, 1)
        except Exception:
            logger.exception("Failed to move item to cart")
            result = OperationResult(success=False)

        if not result.success:
            self._notify("Could not move item to cart.", "error")
            return OperationResult(
                success=False,
                message=result.message or "Could not move item to cart.",
                error=result.error,
            )

        self.remove(product_id)
        self._notify("Product moved to cart.", "success")
        return OperationResult(success=True)

    # ---- misc ----

    def shareable_link(self, base_url: str) -> str:
        """
        Link to the wishlist page carrying the saved product ids.
        """
        if not self.store.available:
            return ""
        base = base_url.rstrip("/")
        items = self.list()
        if not items:
            return f"{base}/wishlist"
        query = urlencode(
            {"shared_wishlist": ",".join(item.product_id for item in items)}
        )
        return f"{base}/wishlist?{query}"

    def on_change(self, handler: Callable[[None], None]) -> Callable[[], None]:
        return self.bus.subscribe(WISHLIST_UPDATED, handler)

    @staticmethod
    def get_update_event_name() -> str:
        return WISHLIST_UPDATED
