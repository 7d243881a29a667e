# eversol/models/stored_value.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class StoredValue(SQLModel, table=True):
    """
    One key of the durable key-value store.

    Keys are already namespaced by shopper (e.g. "client-42:eversol_cart"),
    values are the JSON strings written by the repositories.
    """

    __tablename__ = "stored_values"

    key: str = Field(
        primary_key=True,
        max_length=255,
        description="Namespaced storage key",
    )

    value: str = Field(
        description="Serialized (JSON) value",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
