# eversol/core/supabase_store.py
from storage3.utils import StorageException

from eversol.core.storage import KeyValueStore, StorageError


def object_path(key: str) -> str:
    """
    Object path (relative to the bucket) for a storage key.

    Example:
        'guest:abc:eversol_cart' -> 'state/guest:abc:eversol_cart.json'
    """
    return f"state/{key}.json"


def _is_missing(exc: StorageException) -> bool:
    # Missing objects surface as a 404 / "not found" StorageException
    text = str(exc).lower()
    return "not found" in text or "404" in text


class SupabaseStore(KeyValueStore):
    """
    Durable store backed by a Supabase Storage bucket, one object per key.

    Uploads use the 'upsert' option so a key is overwritten in place.
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def get(self, key: str) -> str | None:
        try:
            raw = self.client.storage.from_(self.bucket).download(object_path(key))
        except StorageException as e:
            if _is_missing(e):
                return None
            raise StorageError(f"Failed to read '{key}': {e}") from e
        return raw.decode("utf-8")

    def set(self, key: str, value: str) -> None:
        try:
            self.client.storage.from_(self.bucket).upload(
                object_path(key),
                value.encode("utf-8"),
                {"upsert": "true", "content-type": "application/json"},
            )
        except StorageException as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            # Supabase Python client expects a list of paths.
            self.client.storage.from_(self.bucket).remove([object_path(key)])
        except StorageException as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e
