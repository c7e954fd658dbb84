import logging
from typing import Any, Dict, List

from google.api_core import exceptions as gcp_exceptions

from config import PREDICTIONS_COLLECTION
from firebase_config import get_db
from models.errors import PersistenceError
from models.schema import PredictionRecord

logger = logging.getLogger(__name__)


class PredictionStore:
    """
    Firestore persistence for prediction records, one document per id.
    The client is resolved on first use when no db is given.
    """

    def __init__(self, db=None, collection: str = PREDICTIONS_COLLECTION):
        self._db = db
        self.collection = collection

    @property
    def db(self):
        if self._db is None:
            self._db = get_db()
        return self._db

    def save(self, record: PredictionRecord) -> None:
        try:
            self.db.collection(self.collection).document(record.id).set(record.model_dump())
        except (gcp_exceptions.GoogleAPIError, gcp_exceptions.RetryError) as e:
            raise PersistenceError(f"Failed to save prediction {record.id}: {e}") from e
        logger.info(f"Saved prediction {record.id} ({record.result})")

    def list_all(self) -> List[Dict[str, Any]]:
        try:
            docs = self.db.collection(self.collection).stream()
            return [{"id": doc.id, "history": doc.to_dict()} for doc in docs]
        except (gcp_exceptions.GoogleAPIError, gcp_exceptions.RetryError) as e:
            raise PersistenceError(f"Failed to read predictions: {e}") from e
