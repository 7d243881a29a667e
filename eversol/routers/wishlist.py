# eversol/routers/wishlist.py
from fastapi import APIRouter, Depends, HTTPException, status

from eversol.core.auth import get_storefront
from eversol.core.config import get_settings
from eversol.core.responses import ok, raise_for_result
from eversol.schemas.cart import CartItemCreate
from eversol.schemas.wishlist import WishlistItem, WishlistShareLink
from eversol.storefront import Storefront

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

settings = get_settings()


@router.get("")
def list_wishlist(storefront: Storefront = Depends(get_storefront)):
    """
    List saved items.

    Without a shopper identity this is always empty.
    """
    items = storefront.wishlist.list()
    return ok({"items": items, "count": len(items)})


@router.post("", status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    payload: WishlistItem,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Save a product. Saving an already-saved product is a no-op.
    """
    result = storefront.wishlist.add(payload)
    raise_for_result(result)
    return ok(storefront.wishlist.list(), result.message)


@router.post("/toggle")
def toggle_wishlist(
    payload: WishlistItem,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Heart button: remove if saved, else save.
    """
    result = storefront.wishlist.toggle(payload)
    raise_for_result(result)
    return ok({"saved": storefront.wishlist.is_present(payload.product_id)})


@router.get("/share", response_model=WishlistShareLink)
def share_wishlist(storefront: Storefront = Depends(get_storefront)):
    """Shareable link to the shopper's wishlist."""
    return WishlistShareLink(url=storefront.wishlist.shareable_link(settings.STOREFRONT_URL))


@router.get("/{product_id}")
def wishlist_contains(
    product_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    return ok({"saved": storefront.wishlist.is_present(product_id)})


@router.delete("/{product_id}")
def remove_from_wishlist(
    product_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    result = storefront.wishlist.remove(product_id)
    raise_for_result(result)
    return ok(storefront.wishlist.list())


@router.delete("")
def clear_wishlist(storefront: Storefront = Depends(get_storefront)):
    result = storefront.wishlist.clear()
    raise_for_result(result)
    return ok([])


@router.post("/{product_id}/move-to-cart")
def move_to_cart(
    product_id: str,
    payload: CartItemCreate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Move a saved item into the cart.

    The body carries the product snapshot and the variant to add
    (its `quantity` is ignored; one unit is moved). The snapshot must be
    the saved product.
    """
    if payload.product.id != product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product does not match the wishlist item",
        )

    result = storefront.wishlist.move_to_cart(
        product_id,
        lambda item, qty: storefront.cart.add_item(payload.product, payload.variant_id, qty),
    )
    raise_for_result(result)
    return ok(storefront.cart.get_state())
