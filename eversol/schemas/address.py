# eversol/schemas/address.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from eversol.schemas.common import OperationResult

AddressType = Literal["home", "work", "other"]


class Address(SQLModel):
    """
    Stored delivery address.
    """

    id: str
    name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    pincode: str
    is_default: bool = False
    type: AddressType | None = None
    created_at: datetime
    updated_at: datetime


class AddressCreate(SQLModel):
    """
    Payload for a brand-new address (id and timestamps are generated).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    phone: str = Field(max_length=20)
    address_line1: str = Field(max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    pincode: str
    is_default: bool = False
    type: AddressType | None = None

    @field_validator("name", "phone", "address_line1", "city", "state", "pincode")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AddressUpdate(SQLModel):
    """
    Partial update payload, merged onto an existing address.
    All fields are optional; only address_line2 and type may be sent
    as null (to clear them).
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = None
    is_default: bool | None = None
    type: AddressType | None = None

    @field_validator("name", "phone", "address_line1", "city", "state", "pincode")
    @classmethod
    def not_empty(cls, v: str | None) -> str:
        # Only runs for fields that were sent; omitted fields keep their default
        if v is None:
            raise ValueError("field cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AddressResult(OperationResult):
    address: Address | None = None
