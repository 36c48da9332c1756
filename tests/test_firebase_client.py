"""
Tests for FirebaseClient with the Firebase Admin SDK mocked out.
"""
import os
import unittest
from unittest.mock import MagicMock, patch

from interaction_cache.database.firebase_client import FirebaseClient


@patch("interaction_cache.database.firebase_client.firestore")
@patch("interaction_cache.database.firebase_client.firebase_admin")
class TestFirebaseClient(unittest.TestCase):

    def setUp(self):
        FirebaseClient._instance = None

    def tearDown(self):
        FirebaseClient._instance = None

    def test_reuses_existing_app_and_instance(self, mock_admin, mock_firestore):
        client = FirebaseClient(collection_name="caches")

        mock_admin.initialize_app.assert_not_called()
        self.assertIs(client.db, mock_firestore.client.return_value)
        self.assertIs(FirebaseClient(), client)
        self.assertEqual(client.collection_name, "caches")

    @patch.dict(os.environ, {}, clear=True)
    def test_falls_back_to_application_default_credentials(self, mock_admin, mock_firestore):
        mock_admin.get_app.side_effect = ValueError("no app")

        FirebaseClient(project_id="demo")

        mock_admin.initialize_app.assert_called_once_with(options={"projectId": "demo"})

    @patch.dict(os.environ, {}, clear=True)
    def test_initialization_failure_raises_connection_error(self, mock_admin, mock_firestore):
        mock_admin.get_app.side_effect = ValueError("no app")
        mock_admin.initialize_app.side_effect = RuntimeError("bad project")

        with self.assertRaises(ConnectionError):
            FirebaseClient()

    def test_document_operations(self, mock_admin, mock_firestore):
        client = FirebaseClient(collection_name="caches")
        document = mock_firestore.client.return_value.collection.return_value.document.return_value
        snapshot = MagicMock(exists=True)
        snapshot.to_dict.return_value = {"value": "[]"}
        document.get.return_value = snapshot

        self.assertEqual(client.get_document("k"), {"value": "[]"})
        client.set_document("k", {"value": '["a"]'})
        client.delete_document("k", collection="other")

        document.set.assert_called_once_with({"value": '["a"]'})
        document.delete.assert_called_once_with()
        mock_firestore.client.return_value.collection.assert_called_with("other")

    def test_missing_document(self, mock_admin, mock_firestore):
        client = FirebaseClient()
        document = mock_firestore.client.return_value.collection.return_value.document.return_value
        document.get.return_value = MagicMock(exists=False)

        self.assertIsNone(client.get_document("missing"))


if __name__ == '__main__':
    unittest.main()
