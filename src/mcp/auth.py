"""
Authentication Middleware for MCP Server

The bearer token sent by the caller is their Fathom API key. It is only
shape-checked here; Fathom itself decides whether it is valid when the tool
calls the API.
"""

import logging
from typing import Iterable, Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .models import AuthInfo

logger = logging.getLogger(__name__)

# Bearer scheme for the Authorization header
BEARER_SCHEME = HTTPBearer(auto_error=False)

TOKEN_PREFIX = "T"
MIN_TOKEN_LENGTH = 10
FATHOM_READ_SCOPE = "fathom:read"
CLIENT_ID = "fathom-client"


def verify_token(bearer_token: Optional[str]) -> Optional[AuthInfo]:
    """
    Check the shape of a bearer token.

    Args:
        bearer_token: Token from the Authorization header, if any

    Returns:
        AuthInfo carrying the token as the API key, or None if the token is
        missing, does not start with TOKEN_PREFIX, or is shorter than
        MIN_TOKEN_LENGTH
    """
    if not bearer_token:
        return None

    if not bearer_token.startswith(TOKEN_PREFIX) or len(bearer_token) < MIN_TOKEN_LENGTH:
        return None

    return AuthInfo(
        token=bearer_token,
        client_id=CLIENT_ID,
        scopes=[FATHOM_READ_SCOPE],
        extra={"api_key": bearer_token},
    )


def require_scopes(auth_info: AuthInfo, required_scopes: Iterable[str]) -> AuthInfo:
    """
    Raises:
        HTTPException: 403 if any required scope is missing
    """
    missing = [scope for scope in required_scopes if scope not in auth_info.scopes]
    if missing:
        raise HTTPException(
            status_code=403,
            detail=f"Insufficient scope. Missing: {', '.join(missing)}",
            headers={"WWW-Authenticate": 'Bearer error="insufficient_scope"'},
        )
    return auth_info


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(BEARER_SCHEME),
) -> AuthInfo:
    """
    Dependency for endpoints that require a Fathom bearer token.

    Usage:
        @app.post("/endpoint")
        async def endpoint(auth_info: AuthInfo = Security(require_auth)):
            ...

    Raises:
        HTTPException: 401 if the token is missing or malformed, 403 if it
        lacks the fathom:read scope
    """
    token = credentials.credentials if credentials else None
    auth_info = verify_token(token)

    if auth_info is None:
        logger.info("Rejected request with missing or malformed bearer token")
        raise HTTPException(
            status_code=401,
            detail="Missing or invalid bearer token. Please provide 'Authorization: Bearer <Fathom API key>'.",
            headers={"WWW-Authenticate": 'Bearer error="invalid_token"'},
        )

    return require_scopes(auth_info, [FATHOM_READ_SCOPE])
