"""
JWT Token Utilities

Tokens are issued by the account service; this API only signs test tokens
and verifies incoming ones.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.config import settings


class InvalidTokenError(Exception):
    """Raised when a JWT cannot be decoded or is invalid"""


def create_access_token(subject: Any, expires_minutes: Optional[int] = None) -> str:
    """Create a signed access token for the given user id"""
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(subject),
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e
