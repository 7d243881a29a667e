# eversol/routers/pincode.py
from fastapi import APIRouter, Depends

from eversol.core.auth import get_storefront
from eversol.core.responses import ok
from eversol.schemas.pincode import (
    DetectedLocation,
    GeoPosition,
    LocationReport,
    PincodeSave,
    SavedPincode,
)
from eversol.services.pincode_service import GeolocationFailure, GeolocationProvider
from eversol.storefront import Storefront

router = APIRouter(prefix="/pincode", tags=["Pincode"])


def _provider_from_report(report: LocationReport) -> GeolocationProvider | None:
    """
    Turn what the client's geolocation call produced into a provider.
    """
    if report.error_code is not None:
        code = report.error_code

        async def failing() -> GeoPosition:
            raise GeolocationFailure(code)

        return failing

    if report.latitude is None or report.longitude is None:
        return None

    position = GeoPosition(latitude=report.latitude, longitude=report.longitude)

    async def reported() -> GeoPosition:
        return position

    return reported


# Fixed paths first so they are not captured by "/{pincode}"


@router.get("/saved", response_model=SavedPincode)
def get_saved_pincode(storefront: Storefront = Depends(get_storefront)):
    return SavedPincode(pincode=storefront.pincode.get_saved_pincode())


@router.put("/saved", response_model=SavedPincode)
def save_pincode(
    payload: PincodeSave,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Remember the last used pincode (best-effort).
    """
    storefront.pincode.persist_pincode(payload.pincode)
    return SavedPincode(pincode=storefront.pincode.get_saved_pincode())


@router.post("/detect", response_model=DetectedLocation)
async def detect_location(
    payload: LocationReport,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Map the client's reported position to a pincode.

    Errors are rendered as {"success": false, "type": ..., "message": ...}.
    """
    pincode = await storefront.pincode.detect_location(_provider_from_report(payload))
    return DetectedLocation(pincode=pincode)


@router.get("/{pincode}")
async def get_pincode_details(
    pincode: str,
    storefront: Storefront = Depends(get_storefront),
):
    return ok(await storefront.pincode.lookup_details(pincode))


@router.get("/{pincode}/availability")
async def check_delivery_availability(
    pincode: str,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Delivery estimate and COD availability.

    - 400 invalid format, 404 unknown pincode, 422 not serviceable
    """
    return ok(await storefront.pincode.check_delivery_availability(pincode))


@router.get("/{pincode}/address")
async def resolve_address(
    pincode: str,
    storefront: Storefront = Depends(get_storefront),
):
    return ok(await storefront.pincode.resolve_address(pincode))
