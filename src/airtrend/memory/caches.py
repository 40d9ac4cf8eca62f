"""
Named caches subject to memory budget enforcement.

Caches are populated by the data-fetch layer and trimmed by the cleanup
coordinator. They expose the three eviction operations the coordinator
needs (truncate, evict_lru, clear_all) and know nothing about budgets;
budgets are attached when a cache is registered.

Every cache serializes its own mutations with a lock, so a background
fetch completing on another thread cannot race an eviction pass.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterator, List, Mapping, Optional, Tuple, TypeVar

from ..models.memory import SubsystemBudget

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


@dataclass
class CacheEntry(Generic[V]):
    """One cached value with its last-update bookkeeping."""

    key: Any
    data: V
    updated_at: float
    # Tie-breaker for entries updated at the same clock reading.
    sequence: int
    # Entries currently observed by a chart are never evicted by LRU.
    active: bool = False


class NamedCache(ABC, Generic[K, V]):
    """
    Abstract base class for a named, budget-managed cache.

    Args:
        name: Registry name (e.g. 'remote-data')
        clock: Monotonic clock used to stamp updates
    """

    def __init__(self, name: str, clock: Optional[Callable[[], float]] = None):
        self.name = name
        self._clock = clock or time.monotonic
        self._entries: Dict[K, CacheEntry[V]] = {}
        self._sequence = 0
        self._lock = threading.RLock()

    def _stamp(self, entry: CacheEntry[V]) -> None:
        self._sequence += 1
        entry.updated_at = self._clock()
        entry.sequence = self._sequence

    def set(self, key: K, data: V, active: Optional[bool] = None) -> None:
        """Store data under key, stamping it as the most recent update."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = CacheEntry(key=key, data=data, updated_at=0.0, sequence=0)
                self._entries[key] = entry
            else:
                entry.data = data
            if active is not None:
                entry.active = active
            self._stamp(entry)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            return entry.data if entry is not None else default

    def set_active(self, key: K, active: bool = True) -> bool:
        """Mark an entry as observed (or no longer observed). Does not count as an update."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.active = active
            return True

    def remove(self, key: K) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def keys(self) -> List[K]:
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def evict_lru(self, max_entries: int) -> int:
        """
        Evict the least recently updated inactive entries until at most
        max_entries remain.

        Returns:
            Number of entries evicted
        """
        with self._lock:
            excess = len(self._entries) - max_entries
            if excess <= 0:
                return 0

            candidates = sorted(
                (entry for entry in self._entries.values() if not entry.active),
                key=lambda entry: (entry.updated_at, entry.sequence),
            )
            victims = candidates[:excess]
            for entry in victims:
                del self._entries[entry.key]

            if len(victims) < excess:
                logger.debug(
                    f"Cache '{self.name}' still over its entry limit ({len(self._entries)} > "
                    f"{max_entries}): remaining entries are active"
                )
            return len(victims)

    def clear_all(self) -> int:
        """
        Drop every entry, active or not.

        Returns:
            Number of entries dropped
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    @abstractmethod
    def truncate(self, max_length: int) -> int:
        """
        Shorten held data to max_length items.

        Returns:
            Number of entries affected
        """
        pass


class ArrayCache(NamedCache[K, List[T]]):
    """
    Cache whose entries hold lists appended in fetch order.

    Truncation keeps the tail of each list (the most recently fetched
    items) and does not count as an update for LRU purposes.
    """

    def append(self, key: K, items: List[T]) -> None:
        """Append freshly fetched items to an entry, creating it if needed."""
        with self._lock:
            existing = self._entries.get(key)
            data = (existing.data if existing is not None else []) + list(items)
            self.set(key, data)

    def item_count(self) -> int:
        with self._lock:
            return sum(len(entry.data) for entry in self._entries.values())

    def truncate(self, max_length: int) -> int:
        if max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}")
        truncated = 0
        with self._lock:
            for entry in self._entries.values():
                overflow = len(entry.data) - max_length
                if overflow > 0:
                    entry.data = entry.data[overflow:]
                    truncated += 1
        return truncated


class ValueCache(NamedCache[K, V]):
    """Cache of opaque values that cannot be partially truncated."""

    def truncate(self, max_length: int) -> int:
        return self.clear_all()


class SessionStore:
    """Transient session-scoped key/value storage, wiped on critical pressure."""

    def __init__(self, name: str = "session"):
        self.name = name
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def clear(self) -> int:
        with self._lock:
            count = len(self._data)
            self._data.clear()
            return count


class CacheRegistry:
    """Named caches and the budgets the cleanup coordinator enforces on them."""

    def __init__(self):
        self._caches: Dict[str, Tuple[NamedCache, SubsystemBudget]] = {}

    @classmethod
    def from_budgets(
        cls,
        budgets: Mapping[str, SubsystemBudget],
        clock: Optional[Callable[[], float]] = None,
    ) -> "CacheRegistry":
        """
        Build a registry with one cache per configured subsystem.

        Subsystems with an array-length limit get an ArrayCache, the rest a
        ValueCache.
        """
        registry = cls()
        for name, budget in budgets.items():
            if budget.max_array_length is not None:
                cache: NamedCache = ArrayCache(name, clock=clock)
            else:
                cache = ValueCache(name, clock=clock)
            registry.register(cache, budget)
        return registry

    def register(self, cache: NamedCache, budget: Optional[SubsystemBudget] = None) -> NamedCache:
        if cache.name in self._caches:
            raise ValueError(f"Cache '{cache.name}' is already registered")
        self._caches[cache.name] = (cache, budget or SubsystemBudget())
        logger.debug(f"Registered cache '{cache.name}' with budget {budget}")
        return cache

    def unregister(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    def get(self, name: str) -> NamedCache:
        return self._caches[name][0]

    def budget_for(self, name: str) -> SubsystemBudget:
        return self._caches[name][1]

    def names(self) -> List[str]:
        return list(self._caches.keys())

    def items(self) -> Iterator[Tuple[NamedCache, SubsystemBudget]]:
        return iter(list(self._caches.values()))

    def __len__(self) -> int:
        return len(self._caches)
