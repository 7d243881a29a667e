# eversol/repositories/cart_repo.py
import logging

from pydantic import ValidationError

from eversol.core.storage import KeyValueStore, StorageError
from eversol.schemas.cart import StoredCart

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "eversol_cart"


class CartRepository:
    """
    Reads/writes the cart aggregate (items, membership flag, discount)
    as a single JSON value.
    """

    def get(self, store: KeyValueStore) -> StoredCart:
        """
        Return the stored cart, or a fresh empty one if none is stored
        or the stored value cannot be decoded.
        """
        try:
            raw = store.get(CART_STORAGE_KEY)
        except StorageError as e:
            logger.error("Error reading cart from storage: %s", e)
            return StoredCart()

        if not raw:
            return StoredCart()

        try:
            return StoredCart.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Corrupted cart data, starting empty: %s", e)
            return StoredCart()

    def save(self, store: KeyValueStore, cart: StoredCart) -> None:
        """
        Replace the stored cart.

        Raises:
            StorageError: if the backend write fails.
        """
        store.set(CART_STORAGE_KEY, cart.model_dump_json())
