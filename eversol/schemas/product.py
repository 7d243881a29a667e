# eversol/schemas/product.py
from datetime import datetime, timezone
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

SortCriteria = Literal[
    "relevance",
    "price-low-to-high",
    "price-high-to-low",
    "newest",
    "popular",
]


class Product(SQLModel):
    """
    Catalog entry as consumed by the filter/sort/paginate pipeline.
    """

    id: str
    name: str
    category: str
    price: float = Field(ge=0)
    in_stock: bool = True
    created_at: datetime
    popularity: float = 0
    image_url: str = ""

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Filters(SQLModel):
    """
    Active search, filter and sort options. Never persisted.
    """

    model_config = ConfigDict(extra="forbid")

    search_query: str | None = None
    categories: list[str] | None = None
    price_range: tuple[float, float] | None = None
    availability: bool | None = None
    sort_by: SortCriteria = "relevance"

    @field_validator("price_range")
    @classmethod
    def ordered_range(
        cls, v: tuple[float, float] | None
    ) -> tuple[float, float] | None:
        if v is not None and v[0] > v[1]:
            raise ValueError("price_range min cannot exceed max")
        return v


class PaginatedProducts(SQLModel):
    products: list[Product]
    total_products: int
    total_pages: int
    current_page: int


class ProductQuery(SQLModel):
    """
    Request body for the product listing endpoint.
    """

    model_config = ConfigDict(extra="forbid")

    products: list[Product]
    filters: Filters = Field(default_factory=Filters)
    page: int = 1
    page_size: int = Field(default=12, gt=0)


class ProductPage(PaginatedProducts):
    active_filters: int


# ---- Cart-facing product shape ----


class ProductVariant(SQLModel):
    """
    One purchasable variant (e.g. "500 g") of a product.
    """

    id: str
    name: str
    price: float = Field(ge=0)
    coop_price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def default_coop_price(self) -> "ProductVariant":
        # No member discount configured => members pay the regular price
        if self.coop_price is None:
            self.coop_price = self.price
        return self


class CartProduct(SQLModel):
    """
    Product snapshot passed to the cart when adding a line item.
    """

    id: str
    name: str
    image_url: str = ""
    variants: list[ProductVariant]

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v
