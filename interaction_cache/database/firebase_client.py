"""
Firebase Database Client Module

Provides a small Firestore interface for the interaction cache: one document per
cache key, read, overwritten and deleted as a whole.
"""

import os
import logging
from typing import Dict, Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "interaction_cache"


class FirebaseClient:
    """Firestore client shared by every cache store in the process."""

    _instance = None  # Singleton instance

    def __new__(cls, *args, **kwargs):
        """Implement singleton pattern for connection reuse."""
        if cls._instance is None:
            cls._instance = super(FirebaseClient, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 collection_name: str = DEFAULT_COLLECTION,
                 project_id: Optional[str] = None):
        """Initialize Firebase client with credentials and default collection.

        Args:
            credentials_path: Path to Firebase service account JSON file (optional)
            collection_name: Default Firestore collection holding cache documents
            project_id: Optional project ID to override default

        Raises:
            ConnectionError: If the Firebase app cannot be initialized
        """
        if self._initialized:
            return

        self.collection_name = collection_name
        self._app = None
        self._db = None

        # Reuse an app somebody else already initialized
        try:
            self._app = firebase_admin.get_app()
            logger.info(f"Using existing Firebase app: {self._app.name}")
            self._db = firestore.client(app=self._app)
            self._initialized = True
            return
        except ValueError:
            pass

        try:
            creds = self._load_credentials(credentials_path)
            options = {"projectId": project_id} if project_id else None

            if creds is not None:
                if getattr(creds, "project_id", None) and not project_id:
                    logger.info(f"Using project ID from credentials: {creds.project_id}")
                self._app = firebase_admin.initialize_app(creds, options)
            else:
                # Application default credentials
                self._app = firebase_admin.initialize_app(options=options)

            self._db = firestore.client(app=self._app)
        except Exception as e:
            logger.error(f"Firebase initialization failed: {str(e)}")
            raise ConnectionError(f"Could not connect to Firebase: {str(e)}")

        self._initialized = True
        logger.info(f"Successfully connected to Firestore, collection '{self.collection_name}'")

    def _load_credentials(self, credentials_path: Optional[str] = None):
        """
        Load Firebase credentials from an explicit path or the environment.

        Args:
            credentials_path: Optional explicit path to credentials file

        Returns:
            Firebase credentials object or None for application default credentials

        Raises:
            ValueError: If a credentials file exists but is not a valid service account
        """
        candidates = [("argument", credentials_path)]
        for env_var in ["FIREBASE_CREDENTIALS", "GOOGLE_APPLICATION_CREDENTIALS"]:
            candidates.append((env_var, os.environ.get(env_var)))

        for source, path in candidates:
            if not path or not os.path.isfile(path):
                continue
            try:
                logger.info(f"Loading Firebase credentials from {source}: {path}")
                creds = credentials.Certificate(path)
            except Exception as e:
                logger.error(f"Invalid credentials at {path}: {str(e)}")
                raise ValueError(f"Invalid credentials at {path}: {str(e)}")
            if not getattr(creds, "project_id", None):
                logger.error(f"Credentials at {path} are invalid (missing project_id)")
                raise ValueError("Invalid credentials: missing project_id")
            return creds

        logger.info("No service account file found, using application default credentials")
        return None

    def get_document(self, doc_id: str, collection: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Get a document by ID.

        Args:
            doc_id: Document ID to retrieve
            collection: Collection name or use default if None

        Returns:
            Document data as dict or None if not found
        """
        coll = collection or self.collection_name
        doc = self._db.collection(coll).document(doc_id).get()
        if doc.exists:
            return doc.to_dict()
        return None

    def set_document(self, doc_id: str, data: Dict[str, Any], collection: Optional[str] = None) -> None:
        """Overwrite a document with the given data."""
        coll = collection or self.collection_name
        self._db.collection(coll).document(doc_id).set(data)

    def delete_document(self, doc_id: str, collection: Optional[str] = None) -> None:
        """Delete a document by ID. Deleting a missing document is not an error."""
        coll = collection or self.collection_name
        self._db.collection(coll).document(doc_id).delete()

    @property
    def db(self) -> firestore.Client:
        """Access to raw Firestore client for advanced operations."""
        return self._db
