"""
In-Memory Storage

Dict-backed KeyValueStore. Used by the tests and for sessions that
should not touch disk. Failures can be switched on to exercise the
error paths of the layers above.
"""

from typing import Optional

from spendwise.services.storage.interface import KeyValueStore, StorageUnavailableError


class InMemoryKeyValueStore(KeyValueStore):
    """KeyValueStore holding everything in a dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageUnavailableError(f"Read of '{key}' failed")
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError(f"Write of '{key}' failed")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError(f"Removal of '{key}' failed")
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)
