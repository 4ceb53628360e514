"""
Participant Repository - Persisted participant membership

One document per session key in the participants collection
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from pymongo.database import Database

from patchbay.workers.db_worker.mongo_client import MongoDBClient

logger = logging.getLogger(__name__)


class ParticipantRepository:
    """Repository for participant membership (implements the participant store)"""

    COLLECTION_NAME = "participants"

    def __init__(self, session_key: str, db: Optional[Database] = None):
        """
        Initialize participant repository

        Args:
            session_key: Key of the session whose membership is stored
            db: Optional database instance. If not provided, uses MongoDBClient.get_database()
        """
        self.session_key = session_key
        self.db = db if db is not None else MongoDBClient.get_database()
        self.collection = self.db[self.COLLECTION_NAME]

    def save(self, agent_ids: Sequence[str]) -> None:
        """
        Replace the stored membership

        Args:
            agent_ids: Participant ids in membership order
        """
        self.collection.update_one(
            {"session_key": self.session_key},
            {"$set": {"agent_ids": list(agent_ids), "updated_at": datetime.utcnow()}},
            upsert=True,
        )
        logger.debug(f"Saved {len(agent_ids)} participant(s) for session {self.session_key}")

    def load(self) -> List[str]:
        """
        Load the stored membership

        Returns:
            Participant ids in membership order, empty if nothing is stored
        """
        doc = self.collection.find_one({"session_key": self.session_key})
        if not doc:
            return []
        return list(doc.get("agent_ids", []))
