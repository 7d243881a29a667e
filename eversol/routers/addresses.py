# eversol/routers/addresses.py
from fastapi import APIRouter, Depends, status

from eversol.core.auth import get_storefront
from eversol.core.responses import ok, raise_for_result
from eversol.schemas.address import AddressCreate, AddressUpdate
from eversol.storefront import Storefront

router = APIRouter(prefix="/addresses", tags=["Addresses"])


@router.get("")
def list_addresses(storefront: Storefront = Depends(get_storefront)):
    """
    Saved addresses, default first, then most recently updated.
    """
    return ok(storefront.addresses.list())


@router.get("/selected")
def get_selected_address(storefront: Storefront = Depends(get_storefront)):
    """
    Address to use at checkout (null when the book is empty).
    """
    return ok(storefront.addresses.get_selected())


@router.post("", status_code=status.HTTP_201_CREATED)
def create_address(
    payload: AddressCreate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Save a new address. The first address becomes the default.
    """
    result = storefront.addresses.save(payload)
    raise_for_result(result)
    return ok(result.address)


@router.patch("/{address_id}")
def update_address(
    address_id: str,
    payload: AddressUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Partially update an address; only provided fields change.
    """
    result = storefront.addresses.save(payload, address_id)
    raise_for_result(result)
    return ok(result.address)


@router.delete("/{address_id}")
def delete_address(
    address_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    result = storefront.addresses.delete(address_id)
    raise_for_result(result)
    return ok(message="Address deleted")


@router.put("/{address_id}/select")
def select_address(
    address_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Make this the selected and default address.
    """
    result = storefront.addresses.set_selected(address_id)
    raise_for_result(result)
    return ok(storefront.addresses.get_selected())
