"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object file is used as the backend
because:
1. It is the closest local equivalent of browser localStorage
2. No database setup required
3. Users can inspect or back up their data by copying one file

TRADEOFFS:
- The whole file is rewritten on every change (fine for personal use)
- No coordination between processes; last write wins

Writes go to a temporary file that then replaces the original, so a
crash mid-write leaves the previous content intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from spendwise.services.storage.interface import KeyValueStore, StorageUnavailableError


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """
    KeyValueStore backed by one JSON file.

    The file holds an object mapping each key to its raw string value.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """
        Read the whole file.

        A missing file is an empty store. An unreadable or corrupt file
        raises StorageUnavailableError.
        """
        if not self._path.exists():
            return {}
        try:
            content = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Could not read {self._path}: {e}")

        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"Storage file {self._path} is corrupt: {e}")
        if not isinstance(data, dict):
            raise StorageUnavailableError(
                f"Storage file {self._path} does not hold a JSON object"
            )
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_all(self, items: dict[str, str]) -> None:
        """Atomically replace the file content."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _read_for_update(self) -> dict[str, str]:
        """Current items, or an empty store if the file is corrupt."""
        try:
            return self._read_all()
        except StorageUnavailableError as e:
            logger.warning(
                "storage_file_reset",
                path=str(self._path),
                error=str(e),
            )
            return {}

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_for_update()
        items[key] = value
        try:
            self._write_all(items)
        except OSError as e:
            raise StorageUnavailableError(f"Could not write {self._path}: {e}")

    def remove_item(self, key: str) -> None:
        items = self._read_for_update()
        if key not in items:
            return
        del items[key]
        try:
            self._write_all(items)
        except OSError as e:
            raise StorageUnavailableError(f"Could not write {self._path}: {e}")
