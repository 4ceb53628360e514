"""
DB Worker module for MongoDB operations

Provides the database client and the persistence collaborators for
participant membership and analytics
"""

from .mongo_client import MongoDBClient
from .participant_repo import ParticipantRepository
from .analytics_repo import AnalyticsRepository

__all__ = [
    "MongoDBClient",
    "ParticipantRepository",
    "AnalyticsRepository",
]
