# eversol/core/storage.py
"""
Persistent key-value store adapters.

Every storefront engine reads and writes its state through the same tiny
contract:

    get(key)        -> str | None
    set(key, value) -> None
    remove(key)     -> None
    available       -> bool

Backends:
  - MemoryStore       : process-lifetime dict (also the "session" store)
  - SQLStore          : `stored_values` table via SQLModel
  - SupabaseStore     : one object per key in a Supabase Storage bucket
                        (eversol.core.supabase_store)
  - UnavailableStore  : no durable storage in this context; reads return
                        None and writes are dropped
  - NamespacedStore   : prefixes keys with a shopper id

Backends raise StorageError when the underlying I/O fails. Callers decide
whether that is fatal (repositories propagate, best-effort writers log it).
"""
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from eversol.models.stored_value import StoredValue


class StorageError(Exception):
    """Raised when a backend cannot complete a read or write."""


class KeyValueStore:
    """
    Base class for string-keyed, string-valued stores.
    """

    available: bool = True

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class UnavailableStore(KeyValueStore):
    """
    Stand-in used when the request identifies no shopper.

    All operations are no-ops returning empty results.
    """

    available = False

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        return None

    def remove(self, key: str) -> None:
        return None


class MemoryStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SQLStore(KeyValueStore):
    """
    Durable store backed by the `stored_values` table.

    Each call opens its own short-lived Session, so one instance can be
    shared by every shopper namespace.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, key: str) -> str | None:
        try:
            with Session(self.engine) as session:
                row = session.get(StoredValue, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with Session(self.engine) as session:
                row = session.get(StoredValue, key)
                if row is None:
                    row = StoredValue(key=key, value=value)
                else:
                    row.value = value
                    row.updated_at = datetime.now(timezone.utc)
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                row = session.get(StoredValue, key)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e


class NamespacedStore(KeyValueStore):
    """
    View over another store where every key is prefixed with `namespace:`.
    """

    def __init__(self, backend: KeyValueStore, namespace: str):
        self.backend = backend
        self.namespace = namespace

    @property
    def available(self) -> bool:  # type: ignore[override]
        return self.backend.available

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self.backend.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.backend.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.backend.remove(self._key(key))
