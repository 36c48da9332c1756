"""
Membership Cache Module

Tracks which posts the current user has already seen. Reads are synchronous and
O(1) once the cache is hydrated; before that, every id reads as unseen while the
store is loaded in the background. Showing an already-seen post as unseen for a
moment is preferred over making the feed wait on storage I/O.

Writes are fire-and-forget: the in-memory set changes immediately and the full
set is persisted once the debounce window passes without further marks.
"""

import asyncio
import logging
from typing import Dict, FrozenSet, List, Optional, Set

from interaction_cache.Caching.base_cache import BaseInteractionCache, normalize_id
from interaction_cache.Caching.models import CacheKind
from interaction_cache.Caching.persistence_scheduler import DebouncedPersistenceScheduler, TimerFactory
from interaction_cache.database.durable_store import DurableStore

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAX_SEEN_IDS = 500
DEFAULT_DEBOUNCE_SECONDS = 2.0


class MembershipCache(BaseInteractionCache):
    """
    Bounded "seen" set with FIFO eviction and debounced write-back.

    Must be used from within a running event loop: hydration and the debounce
    timer are scheduled on it.
    """

    kind = CacheKind.MEMBERSHIP

    def __init__(self,
                 store: DurableStore,
                 key: str,
                 max_size: int = DEFAULT_MAX_SEEN_IDS,
                 debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
                 timer_factory: Optional[TimerFactory] = None):
        """
        Args:
            store: Fail-soft durable store
            key: Durable store key owned by this cache
            max_size: Maximum number of ids kept, oldest inserted are evicted first
            debounce_seconds: Debounce window for write-back
            timer_factory: Timer override (fake clock in tests)
        """
        super().__init__(store, key, max_size)
        # Ordered set: dict keys keep insertion order for FIFO eviction
        self._ids: Optional[Dict[str, None]] = None
        # Marks issued while a load is in flight, replayed in call order afterwards
        self._pending_marks: List[str] = []
        self.scheduler = DebouncedPersistenceScheduler(self._persist, debounce_seconds, timer_factory)

    @property
    def hydrated(self) -> bool:
        return self._ids is not None

    def _items(self) -> List[str]:
        return list(self._ids) if self._ids is not None else []

    def _load(self, ids: List[str]) -> None:
        loaded = dict.fromkeys(ids)
        self._ids = loaded
        self._evict()

    def _on_hydrated(self) -> None:
        pending, self._pending_marks = self._pending_marks, []
        for post_id in pending:
            self._apply(post_id)

    def _pending_write(self) -> bool:
        return self.scheduler.pending

    def _evict(self) -> int:
        evicted = 0
        while len(self._ids) > self.max_size:
            oldest = next(iter(self._ids))
            del self._ids[oldest]
            evicted += 1
        return evicted

    def _apply(self, post_id: str, persist: bool = True) -> None:
        if post_id in self._ids:
            return
        self._ids[post_id] = None
        evicted = self._evict()
        if evicted:
            logger.debug(f"Evicted {evicted} oldest ids from '{self.key}'")
        if persist:
            self.scheduler.schedule()

    def is_seen(self, post_id: str) -> bool:
        """
        Check whether post_id has been seen.

        Args:
            post_id: Post identifier

        Returns:
            Membership from the in-memory set; False while not yet hydrated
        """
        if self._ids is None:
            self._start_hydration()
            return False
        post_id = normalize_id(post_id)
        if post_id is None:
            return False
        return post_id in self._ids

    def __contains__(self, post_id) -> bool:
        return self.is_seen(post_id)

    def __len__(self) -> int:
        return len(self._ids) if self._ids is not None else 0

    def mark_seen(self, post_id: str) -> None:
        """
        Record that the user has seen post_id. Returns immediately.

        Before hydration the mark is queued and applied once the stored set has
        loaded. Marking an id that is already a member does nothing.

        Args:
            post_id: Post identifier; blank or non-string ids are ignored
        """
        post_id = normalize_id(post_id)
        if post_id is None:
            return

        if self._ids is None or self._is_hydrating():
            self._pending_marks.append(post_id)
            self._start_hydration()

        if self._ids is not None:
            # During a refresh the old set stays readable; the write waits for the reload
            self._apply(post_id, persist=not self._is_hydrating())

    def seen_ids(self) -> FrozenSet[str]:
        """Synchronous snapshot of the seen set (empty before hydration, which it starts)."""
        if self._ids is None:
            self._start_hydration()
            return frozenset()
        return frozenset(self._ids)

    async def hydrate(self) -> Set[str]:
        """
        Load the seen set if needed and return a copy of it.

        Returns:
            The seen ids
        """
        await self._ensure_hydrated()
        return set(self._ids or ())

    async def refresh(self) -> Set[str]:
        """
        Re-read the stored set, discarding marks that were never persisted.

        Joins a load that is already in flight instead of issuing a second read.

        Returns:
            The seen ids after the reload
        """
        if not self._is_hydrating():
            self.scheduler.cancel()
            self._start_hydration()
        await asyncio.shield(self._hydration)
        logger.info(f"Refreshed '{self.key}': {len(self)} seen ids")
        return set(self._ids or ())

    async def flush(self) -> None:
        """Write any debounced change now, e.g. on orderly shutdown."""
        await self.scheduler.flush()

    async def clear(self) -> None:
        """Empty the set and delete the durable key. Cancels any pending write."""
        self.scheduler.cancel()
        self._reset_hydration()
        self._pending_marks = []
        self._ids = {}
        await self.scheduler.wait_idle()
        await self._delete()
        logger.info(f"Cleared '{self.key}'")
