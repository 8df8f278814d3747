# lockbox/api/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from lockbox.core.config import settings
from lockbox.core.errors import NotAuthenticated
from lockbox.schemas.user import Caller
from lockbox.services.guard import verify_current_session

# Tokens are issued by the authentication service, not by this API
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=settings.AUTH_TOKEN_URL,
    auto_error=False,
)


async def get_current_caller(token: Optional[str] = Depends(reusable_oauth2)) -> Optional[Caller]:
    """
    Resolve the caller, or None.

    No exception here: the vault operation itself fails closed with an
    UNAUTHENTICATED result, which the router maps to 401.
    """
    try:
        return verify_current_session(token)
    except NotAuthenticated:
        return None
