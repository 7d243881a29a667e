# eversol/schemas/wishlist.py
from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel

DEFAULT_WISHLIST_TITLE = "Wishlist Item"


class WishlistItem(SQLModel):
    """
    One saved product (optionally a specific variant).

    Identity key is `product_id`; `id` defaults to it.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    product_id: str
    title: str | None = DEFAULT_WISHLIST_TITLE
    image_url: str | None = ""
    variant_id: str | None = None
    variant_name: str | None = None
    price: float | None = None
    coop_price: float | None = None

    @model_validator(mode="after")
    def fill_defaults(self) -> "WishlistItem":
        if not self.id:
            self.id = self.product_id
        if not self.title:
            self.title = DEFAULT_WISHLIST_TITLE
        if self.image_url is None:
            self.image_url = ""
        return self


class WishlistShareLink(SQLModel):
    url: str
