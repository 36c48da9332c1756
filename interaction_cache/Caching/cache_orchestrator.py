"""
Cache Orchestrator Module

Builds the three interaction caches once at application start and hands them
out as one object: seen posts, blocked users, and recently viewed or interacted
profiles. Also coordinates whole-app operations such as reconciling with storage
when the app returns to the foreground.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from interaction_cache.config.settings import CacheSettings
from interaction_cache.database.durable_store import DurableStore
from interaction_cache.database.stores import FirestoreStore, JsonFileStore, MemoryStore
from interaction_cache.Caching.cache_query import exclude_blocked, merge_feed_page, sort_unseen_first
from interaction_cache.Caching.membership_cache import MembershipCache
from interaction_cache.Caching.persistence_scheduler import TimerFactory
from interaction_cache.Caching.recency_cache import RecencyCache

# Configure logging
logger = logging.getLogger(__name__)


def build_store(settings: CacheSettings) -> DurableStore:
    """
    Create the durable store selected by settings.backend.

    Args:
        settings: Cache settings

    Returns:
        DurableStore wrapping the chosen backend
    """
    if settings.backend == "memory":
        raw_store = MemoryStore()
    elif settings.backend == "firestore":
        # Imported lazily so the other backends never touch firebase_admin
        from interaction_cache.database.firebase_client import FirebaseClient

        client = FirebaseClient(
            credentials_path=settings.credentials_path,
            collection_name=settings.collection,
            project_id=settings.project_id,
        )
        raw_store = FirestoreStore(client, settings.collection)
    else:
        raw_store = JsonFileStore(settings.file_path)

    logger.info(f"Using '{settings.backend}' interaction cache backend")
    return DurableStore(raw_store)


class InteractionCaches:
    """The per-process set of interaction caches, passed to whatever needs them."""

    def __init__(self,
                 store: DurableStore,
                 settings: Optional[CacheSettings] = None,
                 timer_factory: Optional[TimerFactory] = None):
        """
        Args:
            store: Durable store shared by all caches (each cache owns its own key)
            settings: Keys, sizes and debounce window; defaults if None
            timer_factory: Debounce timer override for the seen-posts cache
        """
        self.settings = settings or CacheSettings()
        self.store = store

        self.seen_posts = MembershipCache(
            store,
            key=self.settings.seen_posts_key,
            max_size=self.settings.seen_posts_max,
            debounce_seconds=self.settings.debounce_seconds,
            timer_factory=timer_factory,
        )
        self.blocked_users = RecencyCache(
            store,
            key=self.settings.blocked_users_key,
            max_size=self.settings.blocked_users_max,
        )
        self.viewed_profiles = RecencyCache(
            store,
            key=self.settings.viewed_profiles_key,
            max_size=self.settings.viewed_profiles_max,
        )

    @classmethod
    def from_settings(cls, settings: Optional[CacheSettings] = None) -> "InteractionCaches":
        """Build the caches and their store from settings (or the environment)."""
        settings = settings or CacheSettings.from_env()
        return cls(build_store(settings), settings)

    # Seen posts ----------------------------------------------------------------

    def mark_post_seen(self, post_id: str) -> None:
        self.seen_posts.mark_seen(post_id)

    def sorted_feed(self, items: Iterable[Any], id_field: str = "id") -> List[Any]:
        """Order a feed with unseen posts first using the in-memory seen set."""
        return sort_unseen_first(items, self.seen_posts.seen_ids(), id_field)

    def merge_feed_page(self, current: List[Any], new_items: Iterable[Any], id_field: str = "id") -> List[Any]:
        return merge_feed_page(current, new_items, self.seen_posts.seen_ids(), id_field)

    async def clear_read_history(self) -> None:
        """User-initiated reset of the seen-posts history."""
        await self.seen_posts.clear()

    # Blocked users ---------------------------------------------------------------

    async def block_user(self, user_id: str) -> None:
        await self.blocked_users.add(user_id)

    async def unblock_user(self, user_id: str) -> None:
        await self.blocked_users.remove(user_id)

    async def is_user_blocked(self, user_id: str) -> bool:
        return await self.blocked_users.contains(user_id)

    async def blocked_user_ids(self) -> List[str]:
        return await self.blocked_users.list()

    async def visible_feed(self, items: Iterable[Any],
                           id_field: str = "id",
                           author_field: str = "author_id") -> List[Any]:
        """Feed without posts by blocked authors, unseen posts first."""
        blocked = set(await self.blocked_users.list())
        return self.sorted_feed(exclude_blocked(items, blocked, author_field), id_field)

    # Viewed / interacted profiles ----------------------------------------------

    async def record_profile_view(self, profile_id: str) -> None:
        """The user opened a profile."""
        await self.viewed_profiles.add(profile_id)

    async def record_author_interaction(self, author_id: str) -> None:
        """The user liked or saved a post by author_id."""
        await self.viewed_profiles.add(author_id)

    async def viewed_or_interacted_ids(self) -> List[str]:
        return await self.viewed_profiles.list()

    # Whole-app operations ------------------------------------------------------

    async def refresh_all(self) -> Dict[str, Any]:
        """
        Reconcile every cache with storage, e.g. when the app regains foreground.

        Returns:
            Dictionary with the size of each cache after the reload and elapsed time
        """
        start_time = time.time()
        seen, blocked, viewed = await asyncio.gather(
            self.seen_posts.refresh(),
            self.blocked_users.refresh(),
            self.viewed_profiles.refresh(),
        )
        elapsed = time.time() - start_time
        logger.info(f"Refreshed interaction caches in {elapsed:.3f}s: {len(seen)} seen, "
                    f"{len(blocked)} blocked, {len(viewed)} viewed")
        return {
            "seen_posts": len(seen),
            "blocked_users": len(blocked),
            "viewed_profiles": len(viewed),
            "elapsed_seconds": round(elapsed, 3),
        }

    async def flush_all(self) -> None:
        """Write any debounced change now. Call on orderly shutdown."""
        await self.seen_posts.flush()

    async def clear_all(self) -> None:
        await asyncio.gather(
            self.seen_posts.clear(),
            self.blocked_users.clear(),
            self.viewed_profiles.clear(),
        )

    def statistics(self) -> Dict[str, Dict[str, Any]]:
        """Statistics for every cache keyed by cache name."""
        return {
            "seen_posts": self.seen_posts.statistics().to_dict(),
            "blocked_users": self.blocked_users.statistics().to_dict(),
            "viewed_profiles": self.viewed_profiles.statistics().to_dict(),
        }
