# eversol/repositories/pincode_repo.py
from sqlmodel import SQLModel


class PincodeLocation(SQLModel):
    city: str
    state: str


class DeliveryTerms(SQLModel):
    delivery_estimate: str
    cod_available: bool


def _loc(city: str, state: str) -> PincodeLocation:
    return PincodeLocation(city=city, state=state)


def _terms(estimate: str, cod: bool) -> DeliveryTerms:
    return DeliveryTerms(delivery_estimate=estimate, cod_available=cod)


# Pincodes we deliver to
SERVICEABLE_PINCODES: dict[str, tuple[PincodeLocation, DeliveryTerms]] = {
    "560001": (_loc("Bengaluru", "Karnataka"), _terms("Next business day", True)),
    "560038": (_loc("Bengaluru", "Karnataka"), _terms("1-2 business days", True)),
    "571401": (_loc("Mandya", "Karnataka"), _terms("Next business day", False)),
    "110001": (_loc("New Delhi", "Delhi"), _terms("2-3 business days", True)),
    "400001": (_loc("Mumbai", "Maharashtra"), _terms("2-3 business days", True)),
}

# Known pincodes we do not deliver to (yet)
OTHER_PINCODES: dict[str, PincodeLocation] = {
    "800001": _loc("Patna", "Bihar"),
    "700001": _loc("Kolkata", "West Bengal"),
}


class PincodeDirectory:
    """
    Read-only pincode lookup tables.

    - `locate()` answers "which city/state is this?" for any known pincode
    - `delivery_terms()` is only set for serviceable pincodes
    """

    def __init__(
        self,
        serviceable: dict[str, tuple[PincodeLocation, DeliveryTerms]] | None = None,
        others: dict[str, PincodeLocation] | None = None,
    ):
        self.serviceable = SERVICEABLE_PINCODES if serviceable is None else serviceable
        self.others = OTHER_PINCODES if others is None else others

    def locate(self, pincode: str) -> PincodeLocation | None:
        if pincode in self.serviceable:
            return self.serviceable[pincode][0]
        return self.others.get(pincode)

    def delivery_terms(self, pincode: str) -> DeliveryTerms | None:
        entry = self.serviceable.get(pincode)
        return entry[1] if entry else None
