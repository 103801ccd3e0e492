"""
Persistent Store Adapter

Typed load/save on top of a KeyValueStore.

DESIGN DECISION: Storage is a convenience, not a source of failure.
- load() never raises: a missing key, a corrupt payload or an
  unavailable backend all yield the caller's default
- save() is best effort: a failed write is logged and reported via
  the return value, and in-memory state is left alone

(De)serialization uses pydantic TypeAdapters, so a payload is either
fully valid for the expected type or rejected as a whole.
"""

from typing import Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from spendwise.audit import AuditLogger
from spendwise.services.storage.interface import KeyValueStore, StorageError


T = TypeVar("T")


class PersistentStore:
    """
    Reads and writes typed values under string keys.

    This is the only component that touches the backing store.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    def load(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        """
        Load and parse the value under `key`.

        Returns `default` when the key is absent, the stored text does
        not parse as the adapter's type, or the backend fails.
        """
        try:
            raw = self._backend.get_item(key)
        except StorageError as e:
            self._audit_logger.log_storage_read_failed(key, str(e))
            return default

        if raw is None:
            return default

        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            self._audit_logger.log_storage_read_failed(
                key,
                f"Stored value is malformed ({e.error_count()} error(s))",
            )
            return default

    def save(self, key: str, value: T, adapter: TypeAdapter[T]) -> bool:
        """
        Serialize `value` and write it under `key`.

        Returns True if the write reached the backend.
        """
        try:
            raw = adapter.dump_json(value).decode("utf-8")
            self._backend.set_item(key, raw)
        except (StorageError, ValueError, TypeError) as e:
            self._audit_logger.log_storage_write_failed(key, str(e))
            return False
        return True
