"""
history.py
-----------

Bounded, newest-first log of analysis results.

The store owns its backing key-value record: every mutation happens under
a lock and is written through to the key-value store before the lock is
released, so concurrent writers cannot lose each other's updates. Failed
reads degrade to an empty history and failed writes keep the in-memory
log, in both cases after logging the problem.
"""

from __future__ import annotations

from threading import RLock
from typing import Iterable, List, Optional, Tuple

from db.models import AnalysisResult
from db.session import HISTORY_KEY, InMemoryKeyValueStore, KeyValueStore
from services.errors import StorageError
from services.logging_utils import get_structured_logger
from services.observability import record_history_size, record_storage_error

logger = get_structured_logger(__name__)

DEFAULT_CAPACITY = 100


class HistoryStore:
    """Append/evict-only log of :class:`AnalysisResult` records."""

    def __init__(
        self,
        kv_store: Optional[KeyValueStore] = None,
        *,
        capacity: int = DEFAULT_CAPACITY,
        key: str = HISTORY_KEY,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.kv_store = kv_store if kv_store is not None else InMemoryKeyValueStore()
        self.capacity = capacity
        self.key = key
        self._lock = RLock()
        self._items: Tuple[AnalysisResult, ...] = self._load()
        record_history_size(len(self._items))

    def _load(self) -> Tuple[AnalysisResult, ...]:
        try:
            raw = self.kv_store.get(self.key, [])
            if not isinstance(raw, list):
                raise StorageError("History record is not a list", key=self.key)
            items = tuple(AnalysisResult.from_dict(entry) for entry in raw)
        except StorageError as e:
            record_storage_error("read")
            logger.error("Error reading analysis history", key=self.key, error=e.message)
            return ()
        # A larger persisted log is cut down to this store's capacity.
        return items[: self.capacity]

    def _persist(self) -> None:
        try:
            self.kv_store.set(self.key, [item.to_dict() for item in self._items])
        except StorageError as e:
            record_storage_error("write")
            logger.error("Error saving analysis history", key=self.key, error=e.message)

    def _replace(self, items: Tuple[AnalysisResult, ...]) -> None:
        evicted = len(items) - self.capacity
        if evicted > 0:
            logger.debug("Evicting oldest analyses", evicted=evicted, capacity=self.capacity)
        self._items = items[: self.capacity]
        self._persist()
        record_history_size(len(self._items))

    def append(self, result: AnalysisResult) -> None:
        """Insert ``result`` as the newest record."""
        with self._lock:
            self._replace((result,) + self._items)

    def append_many(self, results: Iterable[AnalysisResult]) -> None:
        """Append each result in order, then trim once.

        The last result ends up newest. A batch longer than the capacity
        evicts its own earliest members.
        """
        batch = list(results)
        if not batch:
            return
        with self._lock:
            self._replace(tuple(reversed(batch)) + self._items)

    def all(self) -> List[AnalysisResult]:
        """Every retained record, newest first."""
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        """Drop every record. A failed delete is raised after memory is cleared."""
        with self._lock:
            self._items = ()
            record_history_size(0)
            self.kv_store.delete(self.key)

    def __len__(self) -> int:
        return len(self._items)
