import os

# Settings are read once and cached; configure before importing the app.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["PINCODE_LOOKUP_DELAY_MS"] = "0"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["TAX_RATE"] = "0.05"

import pytest
from fastapi.testclient import TestClient

from eversol.core.config import get_settings
from eversol.core.events import EventBus, SHOW_TOAST
from eversol.core.storage import MemoryStore
from eversol.main import app
from eversol.repositories.address_repo import AddressRepository
from eversol.repositories.cart_repo import CartRepository
from eversol.repositories.pincode_repo import PincodeDirectory
from eversol.repositories.wishlist_repo import WishlistRepository
from eversol.schemas.product import CartProduct, ProductVariant
from eversol.services.address_service import AddressService
from eversol.services.cart_service import CartService
from eversol.services.pincode_service import PincodeCache, PincodeService
from eversol.services.wishlist_service import WishlistService
from eversol.storefront import StorefrontRegistry, get_registry
from tests.factories import NOW, TickingClock, make_coupons


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def toasts(bus: EventBus) -> list:
    received: list = []
    bus.subscribe(SHOW_TOAST, received.append)
    return received


@pytest.fixture
def wishlist(store, bus) -> WishlistService:
    return WishlistService(WishlistRepository(), store, bus)


@pytest.fixture
def addresses(store, bus) -> AddressService:
    return AddressService(AddressRepository(), store, bus, clock=TickingClock())


@pytest.fixture
def cart(store, bus) -> CartService:
    return CartService(
        CartRepository(),
        make_coupons(),
        store,
        bus,
        tax_rate=0.05,
        clock=lambda: NOW,
    )


@pytest.fixture
def pincode(store) -> PincodeService:
    return PincodeService(
        PincodeDirectory(),
        PincodeCache(),
        store,
        MemoryStore(),
        lookup_delay=0,
    )


@pytest.fixture
def apples() -> CartProduct:
    return CartProduct(
        id="prod-apple",
        name="Organic Apples",
        image_url="https://cdn.example.com/apples.jpg",
        variants=[
            ProductVariant(id="apple-500g", name="500 g", price=100, coop_price=85, stock=5),
            ProductVariant(id="apple-1kg", name="1 kg", price=180, coop_price=150, stock=3),
        ],
    )


@pytest.fixture
def registry() -> StorefrontRegistry:
    return StorefrontRegistry(MemoryStore(), make_coupons(), get_settings())


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def guest_headers() -> dict[str, str]:
    return {"X-Client-Id": "tab-1"}
