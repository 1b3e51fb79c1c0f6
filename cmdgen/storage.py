"""
Persistent key-value storage for cmdgen.

All keys live in one JSON file. Writes replace the whole file atomically
(temp file + rename), and locked() holds an exclusive flock on a sibling
lock file so read-modify-write cycles from concurrent processes serialize.
"""

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path.home() / ".local" / "share" / "cmdgen" / "storage.json"


class StorageError(Exception):
    """Raised when the storage file cannot be read or written."""


class LocalStorage:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_STORAGE_PATH
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected storage format in {self.path}")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=self.path.name, suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Any:
        """Return the stored value, or None if the key is absent."""
        return self._read_all().get(key)

    def set_item(self, key: str, value: Any) -> None:
        data = self._read_all_for_update()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all_for_update()
        if key in data:
            del data[key]
            self._write_all(data)

    def _read_all_for_update(self) -> Dict[str, Any]:
        # A corrupt file must not block new writes; its contents are lost.
        try:
            return self._read_all()
        except StorageError as e:
            logger.warning(f"{e}; starting from an empty store")
            return {}

    @contextmanager
    def locked(self) -> Iterator["LocalStorage"]:
        """Exclusive lock across processes for a read-modify-write cycle."""
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StorageError(f"Cannot open lock {self.lock_path}: {e}") from e
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield self
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
