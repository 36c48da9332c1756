"""
interaction_cache

Local interaction-state caches for the social feed: seen posts, blocked users,
and recently viewed or interacted profiles.
"""

from interaction_cache.config.settings import CacheSettings, load_environment
from interaction_cache.database.durable_store import DurableStore
from interaction_cache.database.stores import MemoryStore, JsonFileStore, FirestoreStore, StoreError
from interaction_cache.Caching import (
    CacheKind,
    CacheEntry,
    CacheStatistics,
    DebouncedPersistenceScheduler,
    MembershipCache,
    RecencyCache,
    InteractionCaches,
    build_store,
    sort_unseen_first,
    partition_by_seen,
    merge_feed_page,
    exclude_blocked,
)

# Package metadata
__version__ = "1.0.0"
