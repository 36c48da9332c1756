"""
Tests for environment-driven cache settings.
"""
import os
import tempfile
import unittest
from unittest.mock import patch

from interaction_cache.config.settings import CacheSettings, load_environment


class TestCacheSettings(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = CacheSettings.from_env()

        self.assertEqual(settings.backend, "file")
        self.assertEqual(settings.seen_posts_max, 500)
        self.assertEqual(settings.viewed_profiles_max, 50)
        self.assertEqual(settings.debounce_seconds, 2.0)
        self.assertEqual(settings.seen_posts_key, "@strivon:seen_post_ids")
        self.assertEqual(settings.blocked_users_key, "@strivon:blocked_user_ids")
        self.assertEqual(settings.viewed_profiles_key, "@strivon:viewed_interacted_profile_ids")

    @patch.dict(os.environ, {
        "INTERACTION_CACHE_BACKEND": "Memory",
        "INTERACTION_CACHE_NAMESPACE": "@test",
        "SEEN_POSTS_MAX": "3",
        "SEEN_POSTS_DEBOUNCE_SECONDS": "0.5",
        "FIREBASE_PROJECT_ID": "demo-project",
    }, clear=True)
    def test_overrides(self):
        settings = CacheSettings.from_env()

        self.assertEqual(settings.backend, "memory")
        self.assertEqual(settings.seen_posts_max, 3)
        self.assertEqual(settings.debounce_seconds, 0.5)
        self.assertEqual(settings.project_id, "demo-project")
        self.assertEqual(settings.seen_posts_key, "@test:seen_post_ids")

    @patch.dict(os.environ, {
        "INTERACTION_CACHE_BACKEND": "redis",
        "SEEN_POSTS_MAX": "many",
        "BLOCKED_USERS_MAX": "-4",
        "SEEN_POSTS_DEBOUNCE_SECONDS": "-1",
    }, clear=True)
    def test_invalid_values_fall_back_to_defaults(self):
        with self.assertLogs("interaction_cache.config.settings", level="WARNING") as logs:
            settings = CacheSettings.from_env()

        self.assertEqual(settings.backend, "file")
        self.assertEqual(settings.seen_posts_max, 500)
        self.assertEqual(settings.blocked_users_max, 1000)
        self.assertEqual(settings.debounce_seconds, 2.0)
        self.assertEqual(len(logs.records), 4)

    @patch.dict(os.environ, {}, clear=True)
    def test_load_environment_reads_dotenv(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            dotenv_path = os.path.join(temp_dir, ".env")
            with open(dotenv_path, "w", encoding="utf-8") as f:
                f.write("SEEN_POSTS_MAX=7\n")

            load_environment(dotenv_path)
            load_environment(os.path.join(temp_dir, "missing.env"))

            self.assertEqual(CacheSettings.from_env().seen_posts_max, 7)


if __name__ == '__main__':
    unittest.main()
