"""
MongoDB client with connection pooling and health checks

This module provides a singleton MongoDB client for the persistence collaborators.
Participant and analytics persistence are synchronous, so only the sync client is used.
"""

import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.server_api import ServerApi

from patchbay.config import get_settings

logger = logging.getLogger(__name__)


class MongoDBClient:
    """
    MongoDB client (singleton pattern)

    This class manages the MongoDB connection and provides access to the database.
    """

    _instance: Optional[MongoClient] = None
    _db: Optional[Database] = None

    @classmethod
    def get_client(cls) -> MongoClient:
        """
        Get or create MongoDB client (singleton pattern)

        Returns:
            MongoClient: MongoDB client instance

        Raises:
            ValueError: If MONGODB_URI is not configured
        """
        if cls._instance is None:
            settings = get_settings()

            if not settings.mongodb_uri:
                raise ValueError("MONGODB_URI environment variable not set")

            cls._instance = MongoClient(
                settings.mongodb_uri,
                maxIdleTimeMS=45000,  # Close idle connections after 45 seconds
                serverSelectionTimeoutMS=5000,  # 5 second server selection timeout
                retryWrites=True,
                server_api=ServerApi("1"),
            )
            logger.info("MongoDB client initialized")

        return cls._instance

    @classmethod
    def get_database(cls) -> Database:
        """
        Get database instance

        Returns:
            Database: MongoDB database instance
        """
        if cls._db is None:
            client = cls.get_client()
            settings = get_settings()
            cls._db = client[settings.mongodb_database]
            logger.info(f"Connected to database: {settings.mongodb_database}")

        return cls._db

    @classmethod
    def health_check(cls) -> bool:
        """
        Perform health check using ping command

        Returns:
            bool: True if connection is healthy, False otherwise
        """
        try:
            client = cls.get_client()
            client.admin.command("ping")
            logger.info("MongoDB health check: OK")
            return True
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return False

    @classmethod
    def close(cls) -> None:
        """Close MongoDB connection"""
        if cls._instance:
            cls._instance.close()
            cls._instance = None
            cls._db = None
            logger.info("MongoDB connection closed")
