# eversol/routers/cart.py
from fastapi import APIRouter, Depends

from eversol.core.auth import get_storefront
from eversol.core.responses import ok, raise_for_result
from eversol.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    DiscountApply,
    MembershipUpdate,
)
from eversol.storefront import Storefront

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("")
def get_my_cart(storefront: Storefront = Depends(get_storefront)):
    """
    Get the current cart with subtotal, discount, tax and total.
    """
    return ok(storefront.cart.get_state())


@router.post("/items")
def add_to_cart(
    payload: CartItemCreate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Add a product variant to the cart.

    - 400 quantity < 1, 404 unknown variant, 409 not enough stock.
    Returns the updated cart.
    """
    result = storefront.cart.add_item(payload.product, payload.variant_id, payload.quantity)
    raise_for_result(result)
    return ok(result.cart)


@router.patch("/items/{item_id}")
def update_cart_item(
    item_id: str,
    payload: CartItemUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Update the quantity of a cart line.

    A quantity of 0 or less removes the line; clients confirm
    that with the shopper first.
    """
    result = storefront.cart.update_quantity(item_id, payload.quantity)
    raise_for_result(result)
    return ok(result.cart)


@router.delete("/items/{item_id}")
def remove_cart_item(
    item_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    result = storefront.cart.remove_item(item_id)
    raise_for_result(result)
    return ok(result.cart)


@router.post("/discount")
def apply_discount(
    payload: DiscountApply,
    storefront: Storefront = Depends(get_storefront),
):
    result = storefront.cart.apply_discount(payload.code)
    raise_for_result(result)
    return ok(result.cart)


@router.delete("/discount")
def clear_discount(storefront: Storefront = Depends(get_storefront)):
    result = storefront.cart.clear_discount()
    raise_for_result(result)
    return ok(result.cart)


@router.put("/membership")
def set_membership(
    payload: MembershipUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Switch co-op member pricing on or off.
    """
    result = storefront.cart.set_coop_membership(payload.is_coop_member)
    raise_for_result(result)
    return ok(result.cart)


@router.delete("")
def clear_cart(storefront: Storefront = Depends(get_storefront)):
    """
    Clear the entire cart.

    Returns an empty cart (membership flag kept).
    """
    result = storefront.cart.clear()
    raise_for_result(result)
    return ok(result.cart)
