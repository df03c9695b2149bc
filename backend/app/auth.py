"""
Bearer token handling for the MindBridge API.

Identity is established upstream; this API trusts HS256 access tokens
whose ``sub`` claim is the user id.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from jwt import PyJWTError

from .core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _secret_value() -> str:
    return settings.secret_key.get_secret_value()


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token."""
    payload_raw = jwt.decode(token, _secret_value(), algorithms=[settings.algorithm])
    return cast(Dict[str, Any], payload_raw)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The data to encode in the token; ``sub`` must be the user id
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})

    encoded_jwt = cast(str, jwt.encode(to_encode, _secret_value(), algorithm=settings.algorithm))
    logger.debug(f"Created access token for user: {data.get('sub')}")
    return encoded_jwt


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Dependency returning the authenticated user id from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    not_authenticated = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": "Not authenticated", "code": "NOT_AUTHENTICATED", "details": {}},
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise not_authenticated

    try:
        payload = decode_access_token(credentials.credentials)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise not_authenticated

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise not_authenticated
    return user_id
