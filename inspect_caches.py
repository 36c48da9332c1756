#!/usr/bin/env python3
"""
Inspect or reset the interaction caches stored for this device.

Usage:
    python inspect_caches.py --stats
    python inspect_caches.py --list blocked
    python inspect_caches.py --clear-read-history
"""

import argparse
import asyncio
import json
import logging
import sys

from interaction_cache.config.settings import CacheSettings, load_environment
from interaction_cache.Caching.cache_orchestrator import InteractionCaches

# Load environment variables from .env file
load_environment()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CACHE_NAMES = {
    "seen": "seen_posts",
    "blocked": "blocked_users",
    "viewed": "viewed_profiles",
}


async def run(args: argparse.Namespace) -> int:
    caches = InteractionCaches.from_settings(CacheSettings.from_env())

    if args.clear_all:
        await caches.clear_all()
        logger.info("All interaction caches cleared")
        return 0

    if args.clear_read_history:
        await caches.clear_read_history()
        logger.info("Read history cleared")
        return 0

    await caches.refresh_all()

    if args.list:
        cache = getattr(caches, CACHE_NAMES[args.list])
        if args.list == "seen":
            ids = list(cache.seen_ids())
        else:
            ids = await cache.list()
        print(json.dumps(ids, indent=2))

    if args.stats or not args.list:
        print(json.dumps(caches.statistics(), indent=2))

    return 0


def main():
    """Main entry point for the cache inspection tool."""
    parser = argparse.ArgumentParser(description='Inspect or reset the local interaction caches')
    parser.add_argument(
        '--stats',
        action='store_true',
        help='Print statistics for every cache (default when nothing else is requested)'
    )
    parser.add_argument(
        '--list',
        choices=sorted(CACHE_NAMES),
        help='Print the ids held by one cache'
    )
    parser.add_argument(
        '--clear-read-history',
        action='store_true',
        help='Forget which posts have been seen'
    )
    parser.add_argument(
        '--clear-all',
        action='store_true',
        help='Delete every interaction cache'
    )

    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Cache inspection failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
