import json

from eversol.core.config import Settings
from eversol.core.storage import MemoryStore
from eversol.schemas.wishlist import WishlistItem
from eversol.storefront import StorefrontRegistry, build_backend, build_coupons


def test_state_persists_across_requests(registry):
    registry.get("guest:a").wishlist.add(WishlistItem(product_id="p1"))

    assert registry.get("guest:a").wishlist.count() == 1
    assert registry.get("guest:b").wishlist.count() == 0


def test_registry_keeps_nothing_per_shopper(registry):
    for n in range(50):
        registry.get(f"guest:{n}")

    assert registry.get("guest:1") is not registry.get("guest:1")
    assert registry.backend.keys() == []


def test_missing_identity_gets_unavailable_storage(registry):
    storefront = registry.get(None)

    assert storefront.store.available is False
    assert storefront.wishlist.list() == []
    assert storefront.addresses.get_selected() is None


def test_engines_share_one_bus_per_shopper(registry):
    storefront = registry.get("guest:a")
    seen: list = []
    storefront.bus.subscribe("show-toast", seen.append)

    storefront.wishlist.clear()

    assert [n.message for n in seen] == ["Wishlist cleared."]
    assert registry.get("guest:b").bus is not storefront.bus


def test_shoppers_share_the_backend_under_their_namespace():
    backend = MemoryStore()
    registry = StorefrontRegistry(backend)

    registry.get("user:42").pincode.persist_pincode("560001")

    assert backend.get("user:42:eversol_pincode") == "560001"


def test_build_backend_memory():
    assert isinstance(build_backend(Settings(STORAGE_BACKEND="memory")), MemoryStore)


def test_build_coupons_from_file(tmp_path):
    path = tmp_path / "coupons.json"
    path.write_text(
        json.dumps(
            [
                {"code": "monsoon15", "discount_type": "percentage", "discount_value": 15},
                {"code": "FLAT100", "discount_type": "fixed", "discount_value": 100, "min_purchase": 999},
            ]
        ),
        encoding="utf-8",
    )

    coupons = build_coupons(Settings(COUPONS_FILE=str(path)))

    assert coupons.get_by_code("Monsoon15").discount_value == 15
    assert len(coupons.list()) == 2


def test_build_coupons_without_file():
    assert build_coupons(Settings(COUPONS_FILE=None)).list() == []
