import asyncio

import pytest

from eversol.core.errors import PincodeServiceError
from eversol.core.storage import MemoryStore, UnavailableStore
from eversol.repositories.pincode_repo import PincodeDirectory
from eversol.schemas.pincode import GeoPosition
from eversol.services.pincode_service import (
    FALLBACK_PINCODE,
    GeolocationFailure,
    PincodeCache,
    PincodeService,
    SAVED_PINCODE_KEY,
    reverse_geocode,
    validate_pincode,
)


def run(coro):
    return asyncio.run(coro)


def provider_at(latitude: float, longitude: float):
    async def provider() -> GeoPosition:
        return GeoPosition(latitude=latitude, longitude=longitude)

    return provider


def failing_provider(code: int):
    async def provider() -> GeoPosition:
        raise GeolocationFailure(code)

    return provider


@pytest.mark.parametrize(
    "value, expected",
    [
        ("560001", True),
        ("110001", True),
        ("012345", False),
        ("56001", False),
        ("5600011", False),
        ("56000a", False),
        ("", False),
    ],
)
def test_validate_pincode(value, expected):
    assert validate_pincode(value) is expected
    assert PincodeService.validate_pincode(value) is expected


def test_lookup_serviceable_pincode(pincode):
    details = run(pincode.lookup_details("560001"))

    assert details.city == "Bengaluru"
    assert details.state == "Karnataka"
    assert details.serviceable is True
    assert details.cod_available is True
    assert details.delivery_estimate


def test_lookup_known_but_not_serviceable(pincode):
    details = run(pincode.lookup_details("800001"))

    assert details.city == "Patna"
    assert details.serviceable is False
    assert details.delivery_estimate is None
    assert details.cod_available is False


def test_lookup_invalid_format(pincode):
    with pytest.raises(PincodeServiceError) as exc:
        run(pincode.lookup_details("012345"))
    assert exc.value.kind == "Validation"


def test_lookup_unknown_pincode(pincode):
    with pytest.raises(PincodeServiceError) as exc:
        run(pincode.lookup_details("999999"))
    assert exc.value.kind == "ApiService"


def test_lookups_are_cached():
    cache = PincodeCache()
    directory = PincodeDirectory()
    service = PincodeService(directory, cache, MemoryStore(), MemoryStore(), lookup_delay=0)

    first = run(service.lookup_details("560001"))
    assert "560001" in cache
    assert len(cache) == 1

    # A cache hit never touches the directory again
    directory.serviceable = {}
    assert run(service.lookup_details("560001")) == first

    cache.invalidate("560001")
    with pytest.raises(PincodeServiceError):
        run(service.lookup_details("560001"))


def test_cache_invalidate_everything():
    cache = PincodeCache()
    service = PincodeService(PincodeDirectory(), cache, MemoryStore(), MemoryStore(), lookup_delay=0)
    run(service.lookup_details("560001"))
    run(service.lookup_details("800001"))

    cache.invalidate()

    assert len(cache) == 0


def test_failed_lookups_are_not_cached(pincode):
    with pytest.raises(PincodeServiceError):
        run(pincode.lookup_details("999999"))
    assert len(pincode.cache) == 0


def test_delivery_availability_for_serviceable_pincode(pincode):
    availability = run(pincode.check_delivery_availability("571401"))

    assert availability.serviceable is True
    assert availability.city == "Mandya"
    assert availability.cod_available is False


def test_delivery_availability_names_the_city_when_not_serviceable(pincode):
    with pytest.raises(PincodeServiceError) as exc:
        run(pincode.check_delivery_availability("800001"))

    assert exc.value.kind == "NotServiceable"
    assert "Patna" in exc.value.message
    assert "800001" in exc.value.message


def test_resolve_address(pincode):
    address = run(pincode.resolve_address("400001"))

    assert (address.city, address.state) == ("Mumbai", "Maharashtra")


def test_persist_and_read_saved_pincode(pincode, store):
    assert pincode.get_saved_pincode() is None

    pincode.persist_pincode("560038")

    assert pincode.get_saved_pincode() == "560038"
    assert store.get(SAVED_PINCODE_KEY) == "560038"
    assert pincode.session_store.get(SAVED_PINCODE_KEY) == "560038"


def test_persist_without_storage_is_silent():
    service = PincodeService(
        PincodeDirectory(), PincodeCache(), UnavailableStore(), UnavailableStore(), lookup_delay=0
    )

    service.persist_pincode("560001")

    assert service.get_saved_pincode() is None


@pytest.mark.parametrize(
    "latitude, longitude, expected",
    [
        (12.97, 77.59, "560001"),
        (12.52, 76.89, "560001"),
        (12.52, 76.45, "571401"),
        (28.61, 77.21, FALLBACK_PINCODE),
    ],
)
def test_reverse_geocode(latitude, longitude, expected):
    assert reverse_geocode(latitude, longitude) == expected


def test_detect_location_maps_coordinates(pincode):
    assert run(pincode.detect_location(provider_at(12.98, 77.6))) == "560001"
    assert run(pincode.detect_location(provider_at(19.07, 72.87))) == FALLBACK_PINCODE


def test_detect_location_without_support(pincode):
    with pytest.raises(PincodeServiceError) as exc:
        run(pincode.detect_location(None))
    assert exc.value.kind == "GeolocationError"


@pytest.mark.parametrize(
    "code, kind",
    [
        (1, "GeolocationPermission"),
        (2, "GeolocationError"),
        (3, "GeolocationError"),
        (99, "GeolocationError"),
    ],
)
def test_detect_location_failures(pincode, code, kind):
    with pytest.raises(PincodeServiceError) as exc:
        run(pincode.detect_location(failing_provider(code)))
    assert exc.value.kind == kind
