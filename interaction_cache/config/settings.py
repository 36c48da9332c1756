"""
Helpers for loading interaction cache configuration from environment variables.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

BACKENDS = ("memory", "file", "firestore")

DEFAULT_NAMESPACE = "@strivon"
DEFAULT_FILE_PATH = "data/interaction_cache.json"
DEFAULT_COLLECTION = "interaction_cache"
DEFAULT_SEEN_POSTS_MAX = 500
DEFAULT_BLOCKED_USERS_MAX = 1000
DEFAULT_VIEWED_PROFILES_MAX = 50
DEFAULT_DEBOUNCE_SECONDS = 2.0


def load_environment(dotenv_path: Optional[str] = ".env") -> None:
    """
    Load environment variables from a .env file if one exists.

    Args:
        dotenv_path: Path to the .env file. Defaults to ".env".
    """
    if dotenv_path and os.path.isfile(dotenv_path):
        load_dotenv(dotenv_path)


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, using {default}")
        return default
    return value


def _non_negative_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default
    if value < 0:
        logger.warning(f"{name} must not be negative, using {default}")
        return default
    return value


@dataclass
class CacheSettings:
    """Everything needed to build the interaction caches at application start."""

    backend: str = "file"
    file_path: str = DEFAULT_FILE_PATH
    collection: str = DEFAULT_COLLECTION
    namespace: str = DEFAULT_NAMESPACE
    seen_posts_max: int = DEFAULT_SEEN_POSTS_MAX
    blocked_users_max: int = DEFAULT_BLOCKED_USERS_MAX
    viewed_profiles_max: int = DEFAULT_VIEWED_PROFILES_MAX
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    credentials_path: Optional[str] = None
    project_id: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CacheSettings":
        """
        Build settings from the process environment.

        Returns:
            CacheSettings with defaults filled in for anything unset or invalid
        """
        backend = os.getenv("INTERACTION_CACHE_BACKEND", "file").strip().lower()
        if backend not in BACKENDS:
            logger.warning(f"Unknown cache backend '{backend}', falling back to 'file'")
            backend = "file"

        return cls(
            backend=backend,
            file_path=os.getenv("INTERACTION_CACHE_FILE", DEFAULT_FILE_PATH),
            collection=os.getenv("INTERACTION_CACHE_COLLECTION", DEFAULT_COLLECTION),
            namespace=os.getenv("INTERACTION_CACHE_NAMESPACE", DEFAULT_NAMESPACE),
            seen_posts_max=_positive_int("SEEN_POSTS_MAX", DEFAULT_SEEN_POSTS_MAX),
            blocked_users_max=_positive_int("BLOCKED_USERS_MAX", DEFAULT_BLOCKED_USERS_MAX),
            viewed_profiles_max=_positive_int("VIEWED_PROFILES_MAX", DEFAULT_VIEWED_PROFILES_MAX),
            debounce_seconds=_non_negative_float("SEEN_POSTS_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS),
            credentials_path=os.getenv("FIREBASE_CREDENTIALS") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
            project_id=os.getenv("FIREBASE_PROJECT_ID"),
        )

    def key(self, name: str) -> str:
        """Namespaced durable store key for a cache."""
        return f"{self.namespace}:{name}"

    @property
    def seen_posts_key(self) -> str:
        return self.key("seen_post_ids")

    @property
    def blocked_users_key(self) -> str:
        return self.key("blocked_user_ids")

    @property
    def viewed_profiles_key(self) -> str:
        return self.key("viewed_interacted_profile_ids")
