# lockbox/security/jwt.py
"""
JWT helpers for the authentication collaborator.

The vault never logs users in; it only verifies bearer tokens whose `sub`
claim is the user id. create_access_token exists for tooling and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from lockbox.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises jose.JWTError on bad signature, malformed token or expiry."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
