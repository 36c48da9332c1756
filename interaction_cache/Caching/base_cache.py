"""
Base Interaction Cache Module

Shared hydration machinery for the membership and recency caches: one in-memory
mirror of one durable key, populated from the store on first use and owned
exclusively by the cache object afterwards.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from interaction_cache.Caching.models import CacheEntry, CacheKind, CacheStatistics
from interaction_cache.database.durable_store import DurableStore

# Configure logging
logger = logging.getLogger(__name__)


def normalize_id(value) -> Optional[str]:
    """
    Validate an identifier coming from the UI.

    Args:
        value: Candidate identifier

    Returns:
        The stripped id, or None if it is not a string or is blank
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class BaseInteractionCache(ABC):
    """Hydration, statistics and persistence bookkeeping common to every cache."""

    kind: CacheKind

    def __init__(self, store: DurableStore, key: str, max_size: int):
        # Validates key and max_size
        entry = CacheEntry(key=key, max_size=max_size, kind=self.kind)
        self.store = store
        self.key = entry.key
        self.max_size = entry.max_size
        self.writes = 0
        self.write_failures = 0
        self._hydration: Optional[asyncio.Future] = None
        # Bumped by clear(); hydrations started under an older generation are dropped
        self._generation = 0

    @property
    @abstractmethod
    def hydrated(self) -> bool:
        """True once the in-memory collection has been loaded."""

    @abstractmethod
    def _items(self) -> List[str]:
        """Current collection in persisted order."""

    @abstractmethod
    def _load(self, ids: List[str]) -> None:
        """Install ids read from the store as the live collection."""

    def _on_hydrated(self) -> None:
        """Hook run right after a successful load."""

    def _is_hydrating(self) -> bool:
        return self._hydration is not None and not self._hydration.done()

    def _start_hydration(self) -> asyncio.Future:
        """Start a store read unless one is already in flight."""
        if not self._is_hydrating():
            self._hydration = asyncio.ensure_future(self._hydrate(self._generation))
        return self._hydration

    async def _hydrate(self, generation: int) -> None:
        ids = await self.store.read_ids(self.key)
        if generation != self._generation:
            logger.debug(f"Dropping stale hydration of '{self.key}'")
            return
        self._load(ids)
        logger.debug(f"Hydrated '{self.key}' with {len(self._items())} ids")
        self._on_hydrated()

    async def _ensure_hydrated(self) -> None:
        if self.hydrated and not self._is_hydrating():
            return
        # Shielded so a cancelled caller does not cancel the shared read
        await asyncio.shield(self._start_hydration())

    async def _persist(self) -> bool:
        ok = await self.store.write_ids(self.key, self._items())
        if ok:
            self.writes += 1
        else:
            self.write_failures += 1
        return ok

    async def _delete(self) -> None:
        if not await self.store.delete(self.key):
            self.write_failures += 1

    def _reset_hydration(self) -> None:
        self._generation += 1
        self._hydration = None

    def snapshot(self) -> CacheEntry:
        """Copy of the current state as a CacheEntry."""
        return CacheEntry(key=self.key, max_size=self.max_size, kind=self.kind, items=list(self._items()))

    def _pending_write(self) -> bool:
        return False

    def statistics(self) -> CacheStatistics:
        return CacheStatistics(
            key=self.key,
            kind=self.kind,
            size=len(self._items()),
            max_size=self.max_size,
            hydrated=self.hydrated,
            pending_write=self._pending_write(),
            writes=self.writes,
            write_failures=self.write_failures,
        )
