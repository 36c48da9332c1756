"""
Database module initialization

This package handles the durable storage behind the interaction caches.
"""

from interaction_cache.database.stores import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    FirestoreStore,
    StoreError,
)
from interaction_cache.database.durable_store import DurableStore, encode_ids, decode_ids

__all__ = [
    'KeyValueStore',
    'MemoryStore',
    'JsonFileStore',
    'FirestoreStore',
    'StoreError',
    'DurableStore',
    'encode_ids',
    'decode_ids',
]
