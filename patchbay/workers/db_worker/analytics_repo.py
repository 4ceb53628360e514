"""
Analytics Repository - Persisted analytics document

One document per session key in the analytics collection
"""

import logging
from datetime import datetime
from typing import Optional

from pymongo.database import Database

from patchbay.models.analytics import AnalyticsSnapshot
from patchbay.workers.db_worker.mongo_client import MongoDBClient

logger = logging.getLogger(__name__)


class AnalyticsRepository:
    """Repository for the analytics document of a session"""

    COLLECTION_NAME = "analytics"

    def __init__(self, session_key: str, db: Optional[Database] = None):
        """
        Initialize analytics repository

        Args:
            session_key: Key of the session whose analytics are stored
            db: Optional database instance. If not provided, uses MongoDBClient.get_database()
        """
        self.session_key = session_key
        self.db = db if db is not None else MongoDBClient.get_database()
        self.collection = self.db[self.COLLECTION_NAME]

    def save(self, snapshot: AnalyticsSnapshot) -> None:
        doc = snapshot.model_dump()
        doc["updated_at"] = datetime.utcnow()
        self.collection.update_one(
            {"session_key": self.session_key},
            {"$set": doc},
            upsert=True,
        )

    def load(self) -> Optional[AnalyticsSnapshot]:
        """
        Load the stored analytics document

        Returns:
            AnalyticsSnapshot if stored, None otherwise
        """
        doc = self.collection.find_one({"session_key": self.session_key})
        if not doc:
            return None
        doc.pop("_id", None)
        doc.pop("session_key", None)
        doc.pop("updated_at", None)
        return AnalyticsSnapshot(**doc)
