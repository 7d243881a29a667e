# eversol/schemas/pincode.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class PincodeDetails(SQLModel):
    """
    Result of a pincode lookup (cached per pincode).
    """

    pincode: str
    city: str
    state: str
    serviceable: bool
    delivery_estimate: str | None = None
    cod_available: bool = False


class DeliveryAvailability(SQLModel):
    serviceable: bool
    delivery_estimate: str | None = None
    cod_available: bool
    city: str
    state: str


class ResolvedAddress(SQLModel):
    city: str
    state: str


class SavedPincode(SQLModel):
    pincode: str | None = None


class PincodeSave(SQLModel):
    model_config = ConfigDict(extra="forbid")

    pincode: str


class GeoPosition(SQLModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationReport(SQLModel):
    """
    What the client's geolocation call produced.

    - coordinates on success
    - `error_code` (1 = permission denied, 2 = position unavailable,
      3 = timeout) on failure
    - neither when the client has no geolocation support
    """

    model_config = ConfigDict(extra="forbid")

    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    error_code: int | None = None


class DetectedLocation(SQLModel):
    pincode: str
