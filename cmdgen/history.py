"""
Request history for cmdgen.

Most-recent-first, unique by exact text, capped at MAX_HISTORY entries,
stored as one list under a single storage key.
"""

import asyncio
import logging
from typing import List, Sequence

from .storage import LocalStorage, StorageError

logger = logging.getLogger(__name__)

HISTORY_KEY = "command-history"
MAX_HISTORY = 20


def filter_history(entries: Sequence[str], query: str) -> List[str]:
    """
    Case-insensitive substring filter preserving order.

    A blank query shows the whole history.
    """
    if not query.strip():
        return list(entries)
    needle = query.lower()
    return [entry for entry in entries if needle in entry.lower()]


def promote(entries: Sequence[str], entry: str, limit: int = MAX_HISTORY) -> List[str]:
    """Move (or insert) entry to the front, without duplicates, capped at limit."""
    return ([entry] + [e for e in entries if e != entry])[:limit]


class HistoryStore:
    """Single writer of the persisted history list."""

    def __init__(self, storage: LocalStorage, max_entries: int = MAX_HISTORY, key: str = HISTORY_KEY):
        self.storage = storage
        self.max_entries = max_entries
        self.key = key
        self._lock = asyncio.Lock()

    def _read(self) -> List[str]:
        """Read failures are tolerated by treating the history as empty."""
        try:
            value = self.storage.get_item(self.key)
        except StorageError as e:
            logger.warning(f"Could not read history: {e}")
            return []
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(f"Ignoring malformed history value of type {type(value).__name__}")
            return []
        return [entry for entry in value if isinstance(entry, str)][: self.max_entries]

    def _record(self, entry: str) -> List[str]:
        with self.storage.locked():
            updated = promote(self._read(), entry, self.max_entries)
            self.storage.set_item(self.key, updated)
        return updated

    def _clear(self) -> List[str]:
        with self.storage.locked():
            self.storage.remove_item(self.key)
        return []

    async def list(self) -> List[str]:
        return await asyncio.to_thread(self._read)

    async def record(self, entry: str) -> List[str]:
        """
        Promote entry to the front and persist the whole list.

        Raises:
            StorageError: if the updated list could not be written
        """
        async with self._lock:
            updated = await asyncio.to_thread(self._record, entry)
        logger.debug(f"Recorded history entry ({len(updated)} total)")
        return updated

    async def clear(self) -> List[str]:
        async with self._lock:
            return await asyncio.to_thread(self._clear)

    async def filter(self, query: str) -> List[str]:
        return filter_history(await self.list(), query)
