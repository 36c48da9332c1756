"""
Interaction Cache System

Client-resident caches of what the current user has seen or acted on, backed by
a durable key-value store.
"""

# Import public API components for easier access
from interaction_cache.Caching.models import CacheKind, CacheEntry, CacheStatistics
from interaction_cache.Caching.persistence_scheduler import DebouncedPersistenceScheduler
from interaction_cache.Caching.membership_cache import MembershipCache
from interaction_cache.Caching.recency_cache import RecencyCache
from interaction_cache.Caching.cache_query import (
    sort_unseen_first,
    partition_by_seen,
    merge_feed_page,
    exclude_blocked,
)
from interaction_cache.Caching.cache_orchestrator import InteractionCaches, build_store
