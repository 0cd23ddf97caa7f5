"""
Ordered key-value stores backing the charity and donation collections.

A store holds typed records under string keys and iterates them in
ascending key order. It performs no domain validation: `insert` overwrites
an existing key, and uniqueness or existence checks are the caller's job.

Every record carries a version counter that the store bumps on each write.
`insert_new` and `replace` are conditional writes on that counter; they are
the only primitives that stay correct when several processes share one
backend.
"""

import bisect
import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Generic, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class Versioned(NamedTuple):
    value: Any
    version: int


class OrderedRecordStore(ABC, Generic[V]):

    @abstractmethod
    def get(self, key: str) -> V | None:
        ...

    @abstractmethod
    def get_versioned(self, key: str) -> Versioned | None:
        ...

    @abstractmethod
    def insert(self, key: str, value: V) -> V | None:
        """Upserts `value` and returns the value previously stored under `key`."""
        ...

    @abstractmethod
    def insert_new(self, key: str, value: V) -> bool:
        """Stores `value` only if `key` is absent. Returns False when it was taken."""
        ...

    @abstractmethod
    def replace(self, key: str, value: V, expected_version: int) -> bool:
        """
        Overwrites `key` only if it still exists at `expected_version`.
        Returns False when the record was changed or removed in between.
        """
        ...

    @abstractmethod
    def remove(self, key: str) -> V | None:
        ...

    @abstractmethod
    def values(self) -> list[V]:
        """All stored values in ascending key order."""
        ...

    @abstractmethod
    def size(self) -> int:
        ...

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryRecordStore(OrderedRecordStore[V]):
    """
    Process-local store. Values are deep-copied on insert and on every read
    so callers never share a reference with stored state.
    """

    def __init__(self, name: str = "records"):
        self.name = name
        self._items: dict[str, V] = {}
        self._versions: dict[str, int] = {}
        self._keys: list[str] = []
        self._lock = threading.RLock()

    def get(self, key: str) -> V | None:
        with self._lock:
            value = self._items.get(key)
            return copy.deepcopy(value) if value is not None else None

    def get_versioned(self, key: str) -> Versioned | None:
        with self._lock:
            if key not in self._items:
                return None
            return Versioned(copy.deepcopy(self._items[key]), self._versions[key])

    def _write(self, key: str, value: V) -> V | None:
        previous = self._items.get(key)
        if previous is None:
            bisect.insort(self._keys, key)
        self._items[key] = copy.deepcopy(value)
        self._versions[key] = self._versions.get(key, 0) + 1
        logger.debug(f"Stored {self.name} record {key}")
        return previous

    def insert(self, key: str, value: V) -> V | None:
        with self._lock:
            return self._write(key, value)

    def insert_new(self, key: str, value: V) -> bool:
        with self._lock:
            if key in self._items:
                return False
            self._write(key, value)
            return True

    def replace(self, key: str, value: V, expected_version: int) -> bool:
        with self._lock:
            if self._versions.get(key) != expected_version or key not in self._items:
                return False
            self._write(key, value)
            return True

    def remove(self, key: str) -> V | None:
        with self._lock:
            previous = self._items.pop(key, None)
            if previous is not None:
                # the counter survives removal so a re-inserted key never reuses a version
                index = bisect.bisect_left(self._keys, key)
                del self._keys[index]
                logger.debug(f"Removed {self.name} record {key}")
            return previous

    def values(self) -> list[V]:
        with self._lock:
            return [copy.deepcopy(self._items[k]) for k in self._keys]

    def size(self) -> int:
        with self._lock:
            return len(self._items)
