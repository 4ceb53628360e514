"""
JWT Authentication for the Patchbay API

Client-credential tokens signed with PyJWT, with a renewal hint when a
token is close to expiry
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import jwt
from fastapi import HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from patchbay.config.settings import get_settings

TOKEN_SUBJECT = "patchbay_access"
DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)
RENEWAL_WINDOW_SECONDS = 3600


class TokenPayload(BaseModel):
    """JWT token payload"""
    client_id: str
    exp: int  # Unix timestamp
    iat: int  # Unix timestamp
    sub: str = TOKEN_SUBJECT


class ClientCredentials(BaseModel):
    """Client credentials for authentication"""
    client_id: str
    client_secret: str


class TokenResponse(BaseModel):
    """Token response model"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    expires_at: datetime


def create_access_token(client_id: str, expires_delta: Optional[timedelta] = None) -> Dict[str, Any]:
    """
    Create a new JWT access token

    Args:
        client_id: Client identifier
        expires_delta: Token lifetime (default: 24 hours)

    Returns:
        Dictionary matching TokenResponse
    """
    settings = get_settings()
    expires_delta = expires_delta or DEFAULT_TOKEN_LIFETIME

    now = datetime.utcnow()
    expire = now + expires_delta

    token = jwt.encode(
        {"client_id": client_id, "exp": expire, "iat": now, "sub": TOKEN_SUBJECT},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )

    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_in": int(expires_delta.total_seconds()),
        "expires_at": expire,
    }


def verify_token(token: str) -> TokenPayload:
    """
    Verify JWT token and return payload

    Raises:
        HTTPException: 401 if the token is expired or invalid
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Could not validate credentials: Invalid token - {str(e)}"
        )

    if payload.get("sub") != TOKEN_SUBJECT:
        raise HTTPException(status_code=401, detail="Could not validate credentials: wrong subject")

    return TokenPayload(**payload)


def verify_client_credentials(client_id: str, client_secret: str) -> bool:
    """
    Verify client credentials against the API_CLIENTS setting

    Raises:
        HTTPException: 401 if the credentials are unknown
    """
    stored_secret = get_settings().api_clients.get(client_id)

    if not stored_secret or stored_secret != client_secret:
        raise HTTPException(status_code=401, detail="Invalid client credentials")

    return True


def should_renew_token(token_payload: TokenPayload) -> bool:
    """True if less than an hour of validity is left"""
    time_remaining = token_payload.exp - datetime.utcnow().timestamp()
    return time_remaining < RENEWAL_WINDOW_SECONDS


class JWTBearer(HTTPBearer):
    """
    FastAPI dependency for JWT authentication

    Stores the caller's client id on the request for audit logging
    """

    def __init__(self, auto_error: bool = True):
        super().__init__(auto_error=auto_error)

    async def __call__(self, request: Request) -> TokenPayload:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)

        if not credentials:
            raise HTTPException(status_code=403, detail="Invalid authorization code")
        if credentials.scheme != "Bearer":
            raise HTTPException(status_code=403, detail="Invalid authentication scheme")

        token_payload = verify_token(credentials.credentials)

        request.state.client_id = token_payload.client_id
        if should_renew_token(token_payload):
            request.state.should_renew_token = True

        return token_payload
