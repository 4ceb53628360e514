"""
Audit Logging Middleware

Logs every authenticated API request with its client, method, path and status.
"""

import logging
from datetime import datetime

from fastapi import Request

# Dedicated audit logger
logger = logging.getLogger("audit")


async def audit_log_middleware(request: Request, call_next):
    """
    Audit logging middleware

    The JWT dependency runs inside the route, so the client id is only known
    once the response is back
    """
    response = await call_next(request)

    client_id = getattr(request.state, "client_id", None)
    if client_id:
        logger.info(
            f"API Request | "
            f"Client: {client_id} | "
            f"Method: {request.method} | "
            f"Path: {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    return response
