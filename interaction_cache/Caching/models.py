"""
Interaction Cache Models

Defines the data structures shared by the membership and recency caches.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, List


class CacheKind(str, Enum):
    """Shape of the collection a cache holds."""

    # Unordered "have I seen it" set, insertion order kept for FIFO eviction
    MEMBERSHIP = "membership"
    # Most-recent-first list, re-adding an id moves it to the front
    RECENCY = "recency"


@dataclass
class CacheEntry:
    """
    The unit each cache object owns: one durable key and its bounded id collection.

    For MEMBERSHIP entries `items` is in insertion order (oldest first); for
    RECENCY entries it is most-recent-first.
    """

    key: str
    max_size: int
    kind: CacheKind
    items: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.key:
            raise ValueError("Cache key is required")
        if self.max_size <= 0:
            raise ValueError(f"max_size must be positive, got {self.max_size}")


@dataclass
class CacheStatistics:
    """Point-in-time health metrics for one cache."""

    key: str
    kind: CacheKind
    size: int
    max_size: int
    hydrated: bool
    pending_write: bool = False
    writes: int = 0
    write_failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["fill_percent"] = round(self.size / self.max_size * 100, 2)
        return data
