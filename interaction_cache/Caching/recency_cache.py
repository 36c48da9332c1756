"""
Recency Cache Module

Capped, most-recent-first id list used for blocked users and for recently viewed
or interacted profiles. Unlike the seen-post set, every change is persisted
before add()/remove() return: these lists are read back right after a block or
unblock, and they change rarely enough that the extra write costs nothing.
"""

import logging
from typing import List, Optional

from interaction_cache.Caching.base_cache import BaseInteractionCache, normalize_id
from interaction_cache.Caching.models import CacheKind
from interaction_cache.database.durable_store import DurableStore

# Configure logging
logger = logging.getLogger(__name__)


class RecencyCache(BaseInteractionCache):
    """Most-recent-first list with dedup-and-promote and a size cap."""

    kind = CacheKind.RECENCY

    def __init__(self, store: DurableStore, key: str, max_size: int):
        super().__init__(store, key, max_size)
        self._list: Optional[List[str]] = None

    @property
    def hydrated(self) -> bool:
        return self._list is not None

    def _items(self) -> List[str]:
        return list(self._list) if self._list is not None else []

    def _load(self, ids: List[str]) -> None:
        deduped = list(dict.fromkeys(ids))
        self._list = deduped[:self.max_size]

    async def add(self, item_id: str) -> None:
        """
        Move item_id to the front of the list, adding it if absent.

        Args:
            item_id: Identifier; surrounding whitespace is stripped, blank ids are ignored
        """
        item_id = normalize_id(item_id)
        if item_id is None:
            return
        await self._ensure_hydrated()

        # Everything below runs without yielding to the loop
        updated = [item_id] + [existing for existing in self._list if existing != item_id]
        del updated[self.max_size:]
        self._list = updated
        await self._persist()

    async def remove(self, item_id: str) -> None:
        """
        Drop item_id from the list. Removing an absent id is a no-op.

        Args:
            item_id: Identifier to remove
        """
        item_id = normalize_id(item_id)
        if item_id is None:
            return
        await self._ensure_hydrated()

        if item_id not in self._list:
            return
        self._list = [existing for existing in self._list if existing != item_id]
        await self._persist()

    async def contains(self, item_id: str) -> bool:
        """
        Check membership against the hydrated list.

        Returns:
            True if item_id is in the list
        """
        item_id = normalize_id(item_id)
        if item_id is None:
            return False
        await self._ensure_hydrated()
        return item_id in self._list

    async def list(self) -> List[str]:
        """
        Returns:
            Copy of the list, most recent first
        """
        await self._ensure_hydrated()
        return list(self._list)

    async def refresh(self) -> List[str]:
        """Re-read the stored list, joining a load already in flight."""
        await self._ensure_refreshed()
        logger.info(f"Refreshed '{self.key}': {len(self._list)} ids")
        return list(self._list)

    async def _ensure_refreshed(self) -> None:
        if not self._is_hydrating():
            self._start_hydration()
        await self._ensure_hydrated()

    async def clear(self) -> None:
        """Empty the list and delete the durable key."""
        self._reset_hydration()
        self._list = []
        await self._delete()
        logger.info(f"Cleared '{self.key}'")
