from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from seeder.core.config import BASE_DIR, Settings, settings

logger = logging.getLogger(__name__)

_db: Optional[firestore.Client] = None


def build_credential(config: Settings = settings) -> credentials.Certificate:
    """Build Firebase credential from JSON env var (production) or file path (local dev)."""
    # 1. Production: service account JSON string stored in env var
    if config.FIREBASE_SERVICE_ACCOUNT_JSON:
        logger.info("Loading Firebase credentials from FIREBASE_SERVICE_ACCOUNT_JSON env var")
        service_info = json.loads(config.FIREBASE_SERVICE_ACCOUNT_JSON)
        return credentials.Certificate(service_info)

    # 2. Local dev: file path to service account key
    if config.FIREBASE_SERVICE_ACCOUNT_PATH:
        service_path = Path(config.FIREBASE_SERVICE_ACCOUNT_PATH)
        if not service_path.is_absolute():
            service_path = (BASE_DIR / service_path).resolve()
        if not service_path.exists():
            raise FileNotFoundError(f"Service account file not found: {service_path}")
        logger.info("Loading Firebase credentials from file: %s", service_path)
        return credentials.Certificate(str(service_path))

    raise ValueError(
        "Firebase credentials not configured. "
        "Set FIREBASE_SERVICE_ACCOUNT_JSON (production) or FIREBASE_SERVICE_ACCOUNT_PATH (local dev)."
    )


def initialize_firebase(config: Settings = settings) -> firebase_admin.App:
    if not firebase_admin._apps:
        cred = build_credential(config)
        options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
        return firebase_admin.initialize_app(cred, options)
    return firebase_admin.get_app()


def get_db(config: Settings = settings) -> firestore.Client:
    """Return the process-wide Firestore client, creating it on first use."""
    global _db
    if _db is None:
        app = initialize_firebase(config)
        _db = firestore.client(app, database_id=config.FIRESTORE_DATABASE)
        logger.info("Firestore client ready — project=%s database=%s", _db.project, config.FIRESTORE_DATABASE)
    return _db


def get_google_credentials(config: Settings = settings):
    """Credentials of the Firebase app, for Google clients firebase_admin does not wrap."""
    return initialize_firebase(config).credential.get_credential()


def verify_connection(db, collection: str = settings.METADATA_COLLECTION) -> None:
    db.collection(collection).document("bootstrap").set(
        {"bootstrapped_at": firestore.SERVER_TIMESTAMP},
        merge=True,
    )
    logger.info("Firestore connection verified")


__all__ = ["build_credential", "get_db", "get_google_credentials", "initialize_firebase", "verify_connection"]
