# eversol/storefront.py
import logging
from functools import lru_cache

from eversol.core.config import Settings, get_settings
from eversol.core.events import EventBus
from eversol.core.storage import (
    KeyValueStore,
    MemoryStore,
    NamespacedStore,
    SQLStore,
    UnavailableStore,
)
from eversol.repositories.address_repo import AddressRepository
from eversol.repositories.cart_repo import CartRepository
from eversol.repositories.coupon_repo import CouponRepository
from eversol.repositories.pincode_repo import PincodeDirectory
from eversol.repositories.wishlist_repo import WishlistRepository
from eversol.services.address_service import AddressService
from eversol.services.cart_service import CartService
from eversol.services.pincode_service import PincodeCache, PincodeService
from eversol.services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)

wishlist_repo = WishlistRepository()
address_repo = AddressRepository()
cart_repo = CartRepository()
pincode_directory = PincodeDirectory()


class Storefront:
    """
    One shopper's engines, sharing a namespaced store and an event bus.
    """

    def __init__(
        self,
        store: KeyValueStore,
        session_store: KeyValueStore,
        coupons: CouponRepository,
        pincode_cache: PincodeCache,
        settings: Settings,
    ):
        self.store = store
        self.bus = EventBus()

        self.wishlist = WishlistService(wishlist_repo, store, self.bus)
        self.addresses = AddressService(address_repo, store, self.bus)
        self.cart = CartService(
            cart_repo,
            coupons,
            store,
            self.bus,
            tax_rate=settings.TAX_RATE,
        )
        self.pincode = PincodeService(
            pincode_directory,
            pincode_cache,
            store,
            session_store,
            lookup_delay=settings.PINCODE_LOOKUP_DELAY_MS / 1000,
        )


class StorefrontRegistry:
    """
    Builds a Storefront for a shopper id on every call.

    The engines hold no state of their own, so nothing per shopper is
    kept in memory here. Durable state lives in `backend`; session-scoped
    state lives in a process-local MemoryStore. Requests without a shopper
    id get a Storefront over an UnavailableStore.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        coupons: CouponRepository | None = None,
        settings: Settings | None = None,
    ):
        self.backend = backend
        self.session_backend = MemoryStore()
        self.coupons = coupons or CouponRepository()
        self.pincode_cache = PincodeCache()
        self.settings = settings or get_settings()

    def get(self, shopper_id: str | None) -> Storefront:
        if not shopper_id:
            store: KeyValueStore = UnavailableStore()
            session_store: KeyValueStore = UnavailableStore()
        else:
            store = NamespacedStore(self.backend, shopper_id)
            session_store = NamespacedStore(self.session_backend, shopper_id)

        return Storefront(
            store,
            session_store,
            self.coupons,
            self.pincode_cache,
            self.settings,
        )


def build_backend(settings: Settings) -> KeyValueStore:
    """
    Durable store selected by STORAGE_BACKEND.
    """
    if settings.STORAGE_BACKEND == "memory":
        return MemoryStore()

    if settings.STORAGE_BACKEND == "supabase":
        from eversol.core.supabase_client import supabase_admin
        from eversol.core.supabase_store import SupabaseStore

        return SupabaseStore(supabase_admin(), settings.STORAGE_BUCKET)

    from eversol.database import engine

    return SQLStore(engine)


def build_coupons(settings: Settings) -> CouponRepository:
    if not settings.COUPONS_FILE:
        return CouponRepository()
    coupons = CouponRepository.from_file(settings.COUPONS_FILE)
    logger.info("Loaded %d coupon(s) from %s", len(coupons.list()), settings.COUPONS_FILE)
    return coupons


@lru_cache
def get_registry() -> StorefrontRegistry:
    """
    Process-wide registry (FastAPI dependency; override in tests).
    """
    settings = get_settings()
    return StorefrontRegistry(build_backend(settings), build_coupons(settings), settings)
