"""
Tests for the inspect_caches maintenance script.
"""
import argparse
import io
import json
import os
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

import inspect_caches


def make_args(**overrides):
    values = {"stats": False, "list": None, "clear_read_history": False, "clear_all": False}
    values.update(overrides)
    return argparse.Namespace(**values)


@patch.dict(os.environ, {"INTERACTION_CACHE_BACKEND": "memory"}, clear=True)
class TestInspectCaches(unittest.IsolatedAsyncioTestCase):

    async def test_stats_printed_by_default(self):
        output = io.StringIO()
        with redirect_stdout(output):
            exit_code = await inspect_caches.run(make_args())

        self.assertEqual(exit_code, 0)
        stats = json.loads(output.getvalue())
        self.assertEqual(stats["seen_posts"]["size"], 0)
        self.assertTrue(stats["blocked_users"]["hydrated"])

    async def test_list_blocked(self):
        output = io.StringIO()
        with redirect_stdout(output):
            exit_code = await inspect_caches.run(make_args(list="blocked"))

        self.assertEqual(exit_code, 0)
        self.assertEqual(json.loads(output.getvalue()), [])

    async def test_clear_read_history(self):
        with self.assertLogs("inspect_caches", level="INFO"):
            exit_code = await inspect_caches.run(make_args(clear_read_history=True))
        self.assertEqual(exit_code, 0)


if __name__ == '__main__':
    unittest.main()
