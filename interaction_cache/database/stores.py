"""
Key-Value Store Module

Raw asynchronous key-value backends the interaction caches persist into.
Every backend stores whole serialized values under string keys and may raise
StoreError; callers go through DurableStore, which never lets those errors out.
"""

import os
import json
import asyncio
import logging
import tempfile
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

# Configure logging
logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised by a backend when the underlying storage operation fails."""


class KeyValueStore(ABC):
    """Abstract asynchronous key-value store holding serialized string values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if there is none."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under key."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is not an error."""


class MemoryStore(KeyValueStore):
    """In-process store. Used for the `memory` backend and throughout the tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.get_count = 0
        self.set_count = 0
        self.remove_count = 0

    async def get(self, key: str) -> Optional[str]:
        self.get_count += 1
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_count += 1
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.remove_count += 1
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store every key in a single JSON object on local disk.

    Writes use the temp-file-then-move pattern so a crash mid-write never leaves
    a truncated file behind. File access runs in a worker thread.
    """

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as store_file:
                data = json.load(store_file)
        except (json.JSONDecodeError, IOError) as e:
            raise StoreError(f"Error reading store file {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            logger.warning(f"Store file {self.file_path} does not hold a JSON object, ignoring it")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        dir_name = self.file_path.parent
        os.makedirs(dir_name, exist_ok=True)

        temp_file = None
        try:
            fd, temp_path = tempfile.mkstemp(dir=str(dir_name))
            temp_file = os.fdopen(fd, 'w', encoding='utf-8')
            json.dump(data, temp_file, indent=2, ensure_ascii=False)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_file.close()
            temp_file = None

            # Atomic replace (atomic on POSIX systems)
            shutil.move(temp_path, str(self.file_path))
        except (OSError, TypeError) as e:
            raise StoreError(f"Error writing store file {self.file_path}: {e}") from e
        finally:
            if temp_file:
                temp_file.close()

    def _load_for_write(self) -> Dict[str, str]:
        try:
            return self._load()
        except StoreError as e:
            logger.warning(f"{e}; starting from an empty store")
            return {}

    def _set_sync(self, key: str, value: str) -> None:
        data = self._load_for_write()
        data[key] = value
        self._save(data)

    def _remove_sync(self, key: str) -> None:
        data = self._load_for_write()
        if key in data:
            del data[key]
            self._save(data)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            # Values are always stored pre-serialized
            return json.dumps(value)
        return value

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._set_sync, key, value)

    async def remove(self, key: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._remove_sync, key)


class FirestoreStore(KeyValueStore):
    """
    Store each key as one Firestore document holding the serialized value.

    The Firebase Admin SDK is blocking, so calls are pushed to a worker thread.
    """

    VALUE_FIELD = "value"

    def __init__(self, client, collection: Optional[str] = None):
        """
        Args:
            client: FirebaseClient (or anything exposing get/set/delete_document)
            collection: Collection override, defaults to the client's collection
        """
        self.client = client
        self.collection = collection

    @staticmethod
    def document_id(key: str) -> str:
        """Firestore document ids cannot contain '/'."""
        return key.replace("/", "|")

    async def get(self, key: str) -> Optional[str]:
        try:
            doc = await asyncio.to_thread(
                self.client.get_document, self.document_id(key), self.collection
            )
        except Exception as e:
            raise StoreError(f"Error retrieving document for {key}: {e}") from e
        if not doc:
            return None
        value = doc.get(self.VALUE_FIELD)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.set_document,
                self.document_id(key),
                {self.VALUE_FIELD: value},
                self.collection,
            )
        except Exception as e:
            raise StoreError(f"Error writing document for {key}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.delete_document, self.document_id(key), self.collection
            )
        except Exception as e:
            raise StoreError(f"Error deleting document for {key}: {e}") from e
