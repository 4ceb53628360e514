"""
API module for the shared conversation

Provides JWT-secured REST endpoints and an event stream
"""

from patchbay.api.auth import create_access_token, verify_token, JWTBearer
from patchbay.api.server import create_app

__all__ = [
    "create_access_token",
    "verify_token",
    "JWTBearer",
    "create_app",
]
