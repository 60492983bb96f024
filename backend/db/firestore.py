"""Firestore-backed key-value store.

Each key is one document in the configured collection:
- `{collection}/{key}` - `{"value": <any>, "updated_at": <timestamp>}`
"""

import base64
import json
import logging
import os
import time
from datetime import UTC, datetime
from typing import Any

import firebase_admin
from firebase_admin import credentials
from google.cloud.firestore_v1 import AsyncClient
from google.oauth2 import service_account

from config import get_settings
from db.base import KVStore, KVStoreError

logger = logging.getLogger(__name__)


def _load_firebase_credentials(creds_value: str) -> dict:
    """Load Firebase credentials from JSON string, file path, or base64."""
    if os.path.isfile(creds_value):
        with open(creds_value) as f:
            return json.load(f)

    try:
        return json.loads(creds_value)
    except json.JSONDecodeError:
        pass

    try:
        decoded = base64.b64decode(creds_value).decode("utf-8")
        return json.loads(decoded)
    except (ValueError, UnicodeDecodeError):
        pass

    raise ValueError("FIREBASE_CREDENTIALS is not valid JSON, file path, or base64")


class FirestoreKVStore(KVStore):
    """Key-value store on top of a single Firestore collection."""

    _initialized: bool = False
    _db: AsyncClient | None = None

    def __init__(self, collection: str | None = None) -> None:
        """Initialize Firestore client (shared across instances)."""
        settings = get_settings()
        self.collection = collection or settings.kv_collection

        if FirestoreKVStore._initialized:
            self.db = FirestoreKVStore._db
            return

        if not settings.firebase_credentials:
            raise KVStoreError("FIREBASE_CREDENTIALS is required for KV_BACKEND=firestore")

        try:
            creds_dict = _load_firebase_credentials(settings.firebase_credentials)

            if not firebase_admin._apps:
                cred = credentials.Certificate(creds_dict)
                firebase_admin.initialize_app(cred)

            gcp_credentials = service_account.Credentials.from_service_account_info(
                creds_dict
            )

            FirestoreKVStore._db = AsyncClient(
                project=creds_dict.get("project_id"),
                credentials=gcp_credentials,
            )
            self.db = FirestoreKVStore._db

            FirestoreKVStore._initialized = True
            logger.info("Firestore client initialized successfully")
        except Exception as e:
            logger.error("Failed to initialize Firestore: %s", e)
            raise KVStoreError(f"Failed to initialize Firestore: {e}") from e

    async def get(self, key: str) -> Any | None:
        try:
            doc = await self.db.collection(self.collection).document(key).get()
        except Exception as e:
            logger.error("Failed to read key %s: %s", key, e)
            raise KVStoreError(f"Failed to read {key}: {e}") from e

        if not doc.exists:
            return None
        return (doc.to_dict() or {}).get("value")

    async def set(self, key: str, value: Any) -> None:
        try:
            await self.db.collection(self.collection).document(key).set(
                {"value": value, "updated_at": datetime.now(UTC)}
            )
            logger.debug("Stored key %s", key)
        except Exception as e:
            logger.error("Failed to write key %s: %s", key, e)
            raise KVStoreError(f"Failed to write {key}: {e}") from e

    async def health_check(self) -> dict[str, Any]:
        """Check Firestore connection health."""
        start = time.time()
        try:
            test_ref = self.db.collection("_health_check").document("kv")
            await test_ref.set({"timestamp": datetime.now(UTC)})
            await test_ref.get()

            latency = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "latency_ms": round(latency, 2),
                "backend": "firestore",
            }
        except Exception as e:
            return {"status": "unhealthy", "error": str(e), "backend": "firestore"}
