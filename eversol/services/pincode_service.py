# eversol/services/pincode_service.py
"""
Pincode validation, delivery serviceability and location detection.

Lookups go through a simulated, latency-bound directory call and are cached
per pincode in a PincodeCache owned by the caller. The cache never evicts;
`invalidate()` is the only way to drop entries.
"""
import asyncio
import logging
import re
from typing import Awaitable, Callable

from eversol.core.errors import PincodeServiceError
from eversol.core.storage import KeyValueStore, StorageError
from eversol.repositories.pincode_repo import PincodeDirectory
from eversol.schemas.pincode import (
    DeliveryAvailability,
    GeoPosition,
    PincodeDetails,
    ResolvedAddress,
)

logger = logging.getLogger(__name__)

PINCODE_REGEX = re.compile(r"^[1-9][0-9]{5}$")
SAVED_PINCODE_KEY = "eversol_pincode"

# Browser GeolocationPositionError codes
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

# (latitude, longitude, tolerance in degrees, pincode), first match wins
CITY_CENTERS: list[tuple[float, float, float, str]] = [
    (12.97, 77.59, 1.0, "560001"),  # Bengaluru
    (12.52, 76.89, 0.5, "571401"),  # Mandya
]
FALLBACK_PINCODE = "110001"  # New Delhi


class GeolocationFailure(Exception):
    """
    Raised by a geolocation provider; `code` follows the browser's
    GeolocationPositionError codes.
    """

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"Geolocation failed with code {code}")
        self.code = code


GeolocationProvider = Callable[[], Awaitable[GeoPosition]]


class PincodeCache:
    """
    Per-process lookup cache keyed by pincode. Unbounded.
    """

    def __init__(self):
        self._entries: dict[str, PincodeDetails] = {}

    def get(self, pincode: str) -> PincodeDetails | None:
        return self._entries.get(pincode)

    def set(self, details: PincodeDetails) -> None:
        self._entries[details.pincode] = details

    def invalidate(self, pincode: str | None = None) -> None:
        """Drop one pincode, or everything when called without one."""
        if pincode is None:
            self._entries.clear()
        else:
            self._entries.pop(pincode, None)

    def __contains__(self, pincode: str) -> bool:
        return pincode in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def validate_pincode(pincode: str) -> bool:
    """Exactly six digits, first digit non-zero."""
    return isinstance(pincode, str) and PINCODE_REGEX.match(pincode) is not None


def reverse_geocode(latitude: float, longitude: float) -> str:
    """
    Map coordinates to the pincode of the nearest known city center
    (box test), falling back to FALLBACK_PINCODE.
    """
    for center_lat, center_lon, tolerance, pincode in CITY_CENTERS:
        if abs(latitude - center_lat) < tolerance and abs(longitude - center_lon) < tolerance:
            return pincode
    return FALLBACK_PINCODE


class PincodeService:
    """
    Business logic for pincode lookups.

    Flow per lookup:
        validate -> cache hit? -> resolve (simulated latency) -> classify
    """

    def __init__(
        self,
        directory: PincodeDirectory,
        cache: PincodeCache,
        store: KeyValueStore,
        session_store: KeyValueStore,
        lookup_delay: float = 0.5,
    ):
        self.directory = directory
        self.cache = cache
        self.store = store
        self.session_store = session_store
        self.lookup_delay = lookup_delay

    @staticmethod
    def validate_pincode(pincode: str) -> bool:
        return validate_pincode(pincode)

    async def lookup_details(self, pincode: str) -> PincodeDetails:
        """
        Full details for a pincode, including serviceability.

        Raises:
            PincodeServiceError("Validation"): bad format.
            PincodeServiceError("ApiService"): pincode unknown.
        """
        if not validate_pincode(pincode):
            raise PincodeServiceError(
                "Validation",
                "Invalid pincode format. Please enter a 6-digit pincode.",
            )

        cached = self.cache.get(pincode)
        if cached is not None:
            return cached

        await asyncio.sleep(self.lookup_delay)

        location = self.directory.locate(pincode)
        if location is None:
            raise PincodeServiceError(
                "ApiService",
                "Pincode not found. Please check and try again.",
            )

        terms = self.directory.delivery_terms(pincode)
        details = PincodeDetails(
            pincode=pincode,
            city=location.city,
            state=location.state,
            serviceable=terms is not None,
            delivery_estimate=terms.delivery_estimate if terms else None,
            cod_available=terms.cod_available if terms else False,
        )
        self.cache.set(details)
        return details

    async def check_delivery_availability(self, pincode: str) -> DeliveryAvailability:
        """
        Raises:
            PincodeServiceError("NotServiceable"): known pincode without delivery.
            (plus everything lookup_details raises)
        """
        details = await self.lookup_details(pincode)

        if not details.serviceable:
            raise PincodeServiceError(
                "NotServiceable",
                f"Sorry, delivery is not available for {details.city} ({pincode}) yet.",
            )

        return DeliveryAvailability(
            serviceable=details.serviceable,
            delivery_estimate=details.delivery_estimate,
            cod_available=details.cod_available,
            city=details.city,
            state=details.state,
        )

    async def resolve_address(self, pincode: str) -> ResolvedAddress:
        details = await self.lookup_details(pincode)
        return ResolvedAddress(city=details.city, state=details.state)

    # ---- last used pincode ----

    def persist_pincode(self, pincode: str) -> None:
        """
        Remember the pincode in durable and session storage (best-effort).
        """
        if not self.store.available:
            return
        try:
            self.store.set(SAVED_PINCODE_KEY, pincode)
            self.session_store.set(SAVED_PINCODE_KEY, pincode)
        except StorageError as e:
            logger.warning("Failed to save pincode to storage: %s", e)

    def get_saved_pincode(self) -> str | None:
        if not self.store.available:
            return None
        try:
            return self.store.get(SAVED_PINCODE_KEY)
        except StorageError as e:
            logger.warning("Failed to read saved pincode: %s", e)
            return None

    # ---- location ----

    async def detect_location(self, provider: GeolocationProvider | None) -> str:
        """
        Ask the provider for the current position and map it to a pincode.

        Raises:
            PincodeServiceError("GeolocationError"): no provider, position
                unavailable, timeout or unknown failure.
            PincodeServiceError("GeolocationPermission"): access denied.
        """
        if provider is None:
            raise PincodeServiceError(
                "GeolocationError",
                "Geolocation is not supported by your browser.",
            )

        try:
            position = await provider()
        except GeolocationFailure as e:
            raise _geolocation_error(e.code) from e

        return reverse_geocode(position.latitude, position.longitude)


def _geolocation_error(code: int) -> PincodeServiceError:
    if code == PERMISSION_DENIED:
        return PincodeServiceError(
            "GeolocationPermission",
            "Location access was denied. Please enable it in your browser settings.",
        )
    if code == POSITION_UNAVAILABLE:
        return PincodeServiceError(
            "GeolocationError", "Location information is unavailable."
        )
    if code == TIMEOUT:
        return PincodeServiceError(
            "GeolocationError", "The request to get user location timed out."
        )
    return PincodeServiceError(
        "GeolocationError", "An unknown error occurred while detecting location."
    )
