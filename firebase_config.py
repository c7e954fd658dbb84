import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud import storage as gcs_storage
from functools import lru_cache
import os
import logging

from config import FIREBASE_CREDENTIALS

logger = logging.getLogger(__name__)


def _load_credentials():
    if FIREBASE_CREDENTIALS and os.path.exists(FIREBASE_CREDENTIALS):
        logger.info(f"Using Firebase credentials from {FIREBASE_CREDENTIALS}")
        return credentials.Certificate(FIREBASE_CREDENTIALS)

    if FIREBASE_CREDENTIALS:
        logger.warning(f"Credentials file {FIREBASE_CREDENTIALS} not found")
    logger.info("Falling back to Application Default Credentials")
    return credentials.ApplicationDefault()


def init_firebase():
    # Initialize Firebase app if not already initialized
    if not firebase_admin._apps:
        firebase_admin.initialize_app(_load_credentials())
        logger.info("Firebase Admin SDK initialized successfully")
    return firebase_admin.get_app()


@lru_cache(maxsize=None)
def get_db():
    init_firebase()
    return firestore.client()


@lru_cache(maxsize=None)
def get_storage_client():
    return gcs_storage.Client()
