# eversol/schemas/cart.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from eversol.schemas.common import OperationResult
from eversol.schemas.product import CartProduct

DiscountType = Literal["percentage", "fixed"]


class CartItem(SQLModel):
    """
    One cart line: a single product variant and its quantity.

    price / coop_price / stock are snapshots taken at the last add/update.
    """

    id: str
    product_id: str
    product_name: str
    product_image: str = ""
    variant_id: str
    variant_name: str
    price: float
    coop_price: float
    quantity: int = Field(ge=1)
    stock: int = Field(ge=0)


class Discount(SQLModel):
    code: str | None = None
    amount: float = 0.0


class StoredCart(SQLModel):
    """
    Persisted cart aggregate. Totals are never stored.
    """

    items: list[CartItem] = Field(default_factory=list)
    is_coop_member: bool = False
    discount: Discount = Field(default_factory=Discount)


class Cart(StoredCart):
    """
    Cart read model with derived totals.
    """

    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    item_count: int = 0


class CartResult(OperationResult):
    cart: Cart | None = None


class Coupon(SQLModel):
    """
    Coupon record, same shape as the back-office coupon model.
    """

    model_config = ConfigDict(extra="ignore")

    code: str
    description: str | None = None
    discount_type: DiscountType
    discount_value: float = Field(ge=0)
    min_purchase: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=0)
    used_count: int = Field(default=0, ge=0)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("code cannot be empty")
        return v


# ---- Request payloads ----


class CartItemCreate(SQLModel):
    """
    Payload for adding a product variant to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    product: CartProduct
    variant_id: str
    quantity: int = 1


class CartItemUpdate(SQLModel):
    """
    Payload for changing a line's quantity (<= 0 removes the line).
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int


class DiscountApply(SQLModel):
    model_config = ConfigDict(extra="forbid")

    code: str


class MembershipUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    is_coop_member: bool
