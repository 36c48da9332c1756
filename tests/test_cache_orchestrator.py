"""
Integration tests for InteractionCaches: the three caches sharing one store.
"""
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from interaction_cache.Caching.cache_orchestrator import InteractionCaches, build_store
from interaction_cache.config.settings import CacheSettings
from interaction_cache.database.durable_store import DurableStore, decode_ids, encode_ids
from interaction_cache.database.stores import FirestoreStore, JsonFileStore, MemoryStore

from fakes import ManualClock, settle


class TestBuildStore(unittest.TestCase):

    def test_memory_backend(self):
        store = build_store(CacheSettings(backend="memory"))
        self.assertIsInstance(store, DurableStore)
        self.assertIsInstance(store.store, MemoryStore)

    def test_file_backend(self):
        store = build_store(CacheSettings(backend="file", file_path="data/test.json"))
        self.assertIsInstance(store.store, JsonFileStore)
        self.assertEqual(store.store.file_path, Path("data/test.json"))

    @patch("interaction_cache.database.firebase_client.FirebaseClient")
    def test_firestore_backend(self, mock_client):
        settings = CacheSettings(backend="firestore", collection="caches", project_id="demo")

        store = build_store(settings)

        self.assertIsInstance(store.store, FirestoreStore)
        mock_client.assert_called_once_with(
            credentials_path=None,
            collection_name="caches",
            project_id="demo",
        )


class TestInteractionCaches(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.raw = MemoryStore()
        self.clock = ManualClock()
        self.settings = CacheSettings(backend="memory", viewed_profiles_max=2)
        self.caches = InteractionCaches(DurableStore(self.raw), self.settings, self.clock.call_later)

    async def test_caches_use_separate_keys(self):
        await self.caches.seen_posts.hydrate()
        self.caches.mark_post_seen("post-1")
        await self.caches.block_user("user-1")
        await self.caches.record_profile_view("profile-1")
        await self.caches.flush_all()

        self.assertEqual(decode_ids(self.raw.data["@strivon:seen_post_ids"]), ["post-1"])
        self.assertEqual(decode_ids(self.raw.data["@strivon:blocked_user_ids"]), ["user-1"])
        self.assertEqual(decode_ids(self.raw.data["@strivon:viewed_interacted_profile_ids"]), ["profile-1"])

    async def test_block_and_unblock(self):
        await self.caches.block_user("u1")
        await self.caches.block_user("u2")
        self.assertTrue(await self.caches.is_user_blocked("u1"))
        self.assertEqual(await self.caches.blocked_user_ids(), ["u2", "u1"])

        await self.caches.unblock_user("u1")

        self.assertFalse(await self.caches.is_user_blocked("u1"))

    async def test_views_and_interactions_share_one_capped_list(self):
        await self.caches.record_profile_view("a")
        await self.caches.record_author_interaction("b")
        await self.caches.record_profile_view("c")

        self.assertEqual(await self.caches.viewed_or_interacted_ids(), ["c", "b"])

    async def test_sorted_and_visible_feed(self):
        self.raw.data["@strivon:seen_post_ids"] = encode_ids(["A", "D"])
        await self.caches.seen_posts.hydrate()
        await self.caches.block_user("troll")
        feed = [
            {"id": "A", "author_id": "x"},
            {"id": "B", "author_id": "troll"},
            {"id": "C", "author_id": "y"},
            {"id": "D", "author_id": "z"},
        ]

        self.assertEqual([p["id"] for p in self.caches.sorted_feed(feed)], ["B", "C", "A", "D"])
        self.assertEqual([p["id"] for p in await self.caches.visible_feed(feed)], ["C", "A", "D"])

    async def test_sorted_feed_on_cold_start_loads_seen_set(self):
        self.raw.data["@strivon:seen_post_ids"] = encode_ids(["a"])
        feed = [{"id": "a"}, {"id": "b"}]

        self.assertEqual(self.caches.sorted_feed(feed), feed)
        await settle()

        self.assertEqual(self.caches.sorted_feed(feed), [{"id": "b"}, {"id": "a"}])

    async def test_merge_feed_page(self):
        await self.caches.seen_posts.hydrate()
        self.caches.mark_post_seen("A")

        merged = self.caches.merge_feed_page([{"id": "A"}], [{"id": "A"}, {"id": "B"}])

        self.assertEqual(merged, [{"id": "B"}, {"id": "A"}])

    async def test_refresh_all_reports_sizes(self):
        self.raw.data["@strivon:seen_post_ids"] = encode_ids(["p1", "p2"])
        self.raw.data["@strivon:blocked_user_ids"] = encode_ids(["u1"])

        result = await self.caches.refresh_all()

        self.assertEqual(result["seen_posts"], 2)
        self.assertEqual(result["blocked_users"], 1)
        self.assertEqual(result["viewed_profiles"], 0)
        self.assertTrue(self.caches.seen_posts.is_seen("p1"))

    async def test_clear_read_history_leaves_other_caches(self):
        await self.caches.seen_posts.hydrate()
        self.caches.mark_post_seen("p1")
        await self.caches.block_user("u1")

        await self.caches.clear_read_history()

        self.assertFalse(self.caches.seen_posts.is_seen("p1"))
        self.assertTrue(await self.caches.is_user_blocked("u1"))

    async def test_clear_all(self):
        await self.caches.block_user("u1")
        await self.caches.record_profile_view("p1")

        await self.caches.clear_all()

        self.assertEqual(self.raw.data, {})
        self.assertEqual(await self.caches.blocked_user_ids(), [])

    async def test_statistics(self):
        await self.caches.block_user("u1")

        stats = self.caches.statistics()

        self.assertEqual(set(stats), {"seen_posts", "blocked_users", "viewed_profiles"})
        self.assertEqual(stats["blocked_users"]["size"], 1)
        self.assertEqual(stats["blocked_users"]["writes"], 1)
        self.assertFalse(stats["seen_posts"]["hydrated"])

    async def test_from_settings_with_file_backend(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            settings = CacheSettings(backend="file", file_path=str(Path(temp_dir) / "caches.json"))
            caches = InteractionCaches.from_settings(settings)
            await caches.block_user("u1")

            reopened = InteractionCaches.from_settings(settings)
            self.assertTrue(await reopened.is_user_blocked("u1"))


if __name__ == '__main__':
    unittest.main()
