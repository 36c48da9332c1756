"""Configuration loading for the interaction caches."""

from interaction_cache.config.settings import CacheSettings, load_environment

__all__ = ['CacheSettings', 'load_environment']
