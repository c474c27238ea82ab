"""
File-backed key-value storage implementation.

Persistent backend keeping every record in memory and mirroring the full
record set to a JSON snapshot on disk after each mutation.
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Optional

from memory_core.memory.kv import KeyValueStore, StorageError


logger = logging.getLogger(__name__)


SNAPSHOT_VERSION = 1


def _atomic_write_text(path: Path, text: str) -> None:
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", delete=False, dir=str(path.parent), suffix=".tmp"
    ) as tmp:
        tmp.write(text)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_name = tmp.name
    try:
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileKeyValueStore(KeyValueStore):
    """
    JSON snapshot key-value storage.

    Features:
    - Survives restarts
    - Atomic snapshot replacement (temp file + rename) per write
    - Thread-safe operations

    Layout:
        <folder>/messages.json   # {"version": 1, "indexes": [...], "records": {...}}
    """

    def __init__(self, path: str | os.PathLike) -> None:
        super().__init__()
        self.path = Path(path)
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = Lock()
        self._initialized = False

    def initialize(self) -> None:
        """Create the storage folder and load an existing snapshot."""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(
                    f"Failed to create memory folder {self.path.parent}: {e}"
                ) from e

            if self.path.exists():
                self._records = self._load_snapshot()
                logger.info(
                    f"Loaded {len(self._records)} records from {self.path}"
                )
            else:
                self._records = {}
                logger.info(f"Starting empty snapshot at {self.path}")
            self._initialized = True

    def close(self) -> None:
        """Drop in-memory records; the snapshot on disk is already current."""
        with self._lock:
            self._records = {}
            self._initialized = False

    def _load_snapshot(self) -> dict[str, dict[str, Any]]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read snapshot {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("records"), dict):
            raise StorageError(f"Invalid snapshot format in {self.path}")

        for field in data.get("indexes", []):
            self._indexes.add(field)
        return data["records"]

    def _write_snapshot(self) -> None:
        payload = {
            "version": SNAPSHOT_VERSION,
            "indexes": sorted(self._indexes),
            "records": self._records,
        }
        try:
            _atomic_write_text(self.path, json.dumps(payload, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write snapshot {self.path}: {e}") from e

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise StorageError("FileKeyValueStore used before initialize()")

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Store a value and persist the snapshot."""
        with self._lock:
            self._require_initialized()
            previous = self._records.get(key)
            self._records[key] = copy.deepcopy(value)
            try:
                self._write_snapshot()
            except StorageError:
                # Keep memory consistent with disk
                if previous is None:
                    self._records.pop(key, None)
                else:
                    self._records[key] = previous
                raise

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Get value by key."""
        with self._lock:
            value = self._records.get(key)
            return copy.deepcopy(value) if value is not None else None

    def delete(self, key: str) -> bool:
        """Delete a key and persist the snapshot."""
        with self._lock:
            self._require_initialized()
            previous = self._records.pop(key, None)
            if previous is None:
                return False
            try:
                self._write_snapshot()
            except StorageError:
                self._records[key] = previous
                raise
            return True

    def delete_many(self, keys: list[str]) -> int:
        """Delete several keys with a single snapshot write."""
        with self._lock:
            self._require_initialized()
            removed = {
                key: self._records.pop(key) for key in keys if key in self._records
            }
            if not removed:
                return 0
            try:
                self._write_snapshot()
            except StorageError:
                self._records.update(removed)
                raise
            return len(removed)

    def keys(self) -> list[str]:
        """List all stored keys."""
        with self._lock:
            return list(self._records)

    def create_index(self, field: str) -> None:
        """Record the index declaration; it is saved with the next write."""
        with self._lock:
            self._indexes.add(field)
