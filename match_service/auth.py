"""
Authentication Module

Handles API authentication using a shared secret token. End-user identity is
established upstream; the gateway forwards the caller's id in X-User-Id.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import get_settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

USER_ID_HEADER = "X-User-Id"
SESSION_PREFIXES = ("upload-", "user-")


def get_api_secret() -> str:
    """Get the API secret from validated config."""
    settings = get_settings()
    if not settings.match_api_secret:
        raise ValueError("MATCH_API_SECRET environment variable is required for authentication")
    return settings.match_api_secret


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[HTTPAuthorizationCredentials]:
    """
    Verify shared secret token.

    Raises:
        HTTPException: 401 if the token is missing or invalid,
            500 if auth is required but no secret is configured
    """
    if not get_settings().auth_required:
        return credentials

    try:
        expected_secret = get_api_secret()
    except ValueError:
        raise HTTPException(status_code=500, detail="Server authentication not configured")

    if credentials is None or credentials.credentials != expected_secret:
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    return credentials


async def get_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """Caller's user id as forwarded by the identity gateway."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


def verify_session_ownership(session_id: str, user_id: str) -> None:
    """
    Ensure the session belongs to the user.

    Session ids are issued as ``upload-{user_id}-...`` or ``user-{user_id}-...``.

    Raises:
        HTTPException: 403 for sessions owned by someone else
    """
    if not any(session_id.startswith(f"{prefix}{user_id}-") for prefix in SESSION_PREFIXES):
        logger.warning(f"User {user_id} denied access to session {session_id}")
        raise HTTPException(status_code=403, detail="Access denied: session does not belong to user")
