"""
Durable Store Adapter Module

Fail-soft wrapper around a KeyValueStore plus the codec for the persisted value
format: a JSON array of id strings, no schema version.

Reads that fail come back as "no value"; writes and deletes that fail are logged
and reported through the return value only. Nothing here raises to the caller,
because by the time a cache persists, its in-memory mutation has already
happened and must stand.
"""

import json
import logging
from typing import Iterable, List, Optional

from pydantic import StrictStr, TypeAdapter, ValidationError

from interaction_cache.database.stores import KeyValueStore

# Configure logging
logger = logging.getLogger(__name__)

_ID_LIST_ADAPTER = TypeAdapter(List[StrictStr])


def encode_ids(ids: Iterable[str]) -> str:
    """
    Serialize ids to the stored representation.

    Args:
        ids: Identifiers in the order they should be persisted

    Returns:
        JSON array string
    """
    return json.dumps(list(ids))


def decode_ids(raw: Optional[str]) -> Optional[List[str]]:
    """
    Parse a stored value back into a list of ids.

    Args:
        raw: Stored string, possibly None

    Returns:
        The id list, or None when the value is missing or is not a JSON array of strings
    """
    if raw is None or not isinstance(raw, (str, bytes)):
        return None
    try:
        return _ID_LIST_ADAPTER.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding malformed cache value ({e.error_count()} validation errors)")
        return None


class DurableStore:
    """Best-effort access to a KeyValueStore that never raises."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.write_failures = 0

    async def read(self, key: str) -> Optional[str]:
        """
        Read the raw value for key.

        Args:
            key: Durable store key

        Returns:
            Stored string, or None if missing or the store failed
        """
        try:
            return await self.store.get(key)
        except Exception as e:
            logger.warning(f"Read of '{key}' failed, treating as empty: {e}")
            return None

    async def write(self, key: str, value: str) -> bool:
        """
        Overwrite the value for key.

        Returns:
            True if the store accepted the write, False otherwise
        """
        try:
            await self.store.set(key, value)
            return True
        except Exception as e:
            self.write_failures += 1
            logger.error(f"Persist of '{key}' failed: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """
        Delete key from the store.

        Returns:
            True if the store accepted the delete, False otherwise
        """
        try:
            await self.store.remove(key)
            return True
        except Exception as e:
            self.write_failures += 1
            logger.error(f"Delete of '{key}' failed: {e}")
            return False

    async def read_ids(self, key: str) -> List[str]:
        """Read and decode the id list for key. Missing or malformed values yield []."""
        ids = decode_ids(await self.read(key))
        return ids if ids is not None else []

    async def write_ids(self, key: str, ids: Iterable[str]) -> bool:
        """Encode and write the id list for key."""
        return await self.write(key, encode_ids(ids))
