"""
Key-based JSON document stores
"""
import json
import logging
import threading
from typing import Any, Dict, Optional
from datetime import datetime
from firebase_admin import firestore

from ...core.exceptions import DocumentStoreException

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Base class for persisted JSON documents addressed by string keys.

    Subclasses only move encoded payloads around; encoding and decoding
    live here so every backend stores the same representation.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get the decoded value stored under a key

        Args:
            key: Document key, e.g. ``reading-stats/user-1``
            default: Returned when the key is absent or unreadable

        Returns:
            The decoded JSON value
        """
        payload = self._read(key)
        if payload is None:
            return default
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            logger.error(f"Discarding unreadable document {key}: {str(e)}")
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under a key

        Raises:
            DocumentStoreException: If the value cannot be encoded or written
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise DocumentStoreException(
                "Document is not JSON serializable",
                details={"key": key, "error": str(e)}
            )
        self._write(key, payload)

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, payload: str) -> None:
        raise NotImplementedError


class InMemoryDocumentStore(DocumentStore):
    """Process-local store, the server-side twin of browser localStorage"""

    def __init__(self):
        self._documents: Dict[str, str] = {}
        self._lock = threading.Lock()

    def _read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._documents.get(key)

    def _write(self, key: str, payload: str) -> None:
        with self._lock:
            self._documents[key] = payload

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._documents.pop(key, None) is not None


class FirestoreDocumentStore(DocumentStore):
    """Documents kept in a single Firestore collection"""

    def __init__(self, collection_name: str):
        """
        Initialize Firestore-backed store

        Args:
            collection_name: Name of the Firestore collection
        """
        self.collection_name = collection_name
        self.db = firestore.client()
        self.collection = self.db.collection(collection_name)

    @staticmethod
    def _doc_id(key: str) -> str:
        # Firestore document ids cannot contain "/"
        return key.replace("/", "__")

    def _read(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.document(self._doc_id(key)).get()
            if not doc.exists:
                return None
            return (doc.to_dict() or {}).get("payload")
        except Exception as e:
            logger.error(f"Error retrieving document {key} from {self.collection_name}: {str(e)}")
            raise DocumentStoreException(
                f"Failed to retrieve document from {self.collection_name}",
                details={"key": key, "error": str(e)}
            )

    def _write(self, key: str, payload: str) -> None:
        try:
            self.collection.document(self._doc_id(key)).set({
                "key": key,
                "payload": payload,
                "updated_at": datetime.utcnow().isoformat(),
            })
            logger.debug(f"Stored document {key} in {self.collection_name}")
        except Exception as e:
            logger.error(f"Error storing document {key} in {self.collection_name}: {str(e)}")
            raise DocumentStoreException(
                f"Failed to store document in {self.collection_name}",
                details={"key": key, "error": str(e)}
            )

    def delete(self, key: str) -> bool:
        try:
            doc_ref = self.collection.document(self._doc_id(key))
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
            logger.info(f"Deleted document {key} from {self.collection_name}")
            return True
        except Exception as e:
            logger.error(f"Error deleting document {key} from {self.collection_name}: {str(e)}")
            raise DocumentStoreException(
                f"Failed to delete document from {self.collection_name}",
                details={"key": key, "error": str(e)}
            )
