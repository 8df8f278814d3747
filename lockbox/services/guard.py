# lockbox/services/guard.py
"""
Authorization guard.

Vault operations never read ambient request state: the caller identity is
passed in explicitly and checked here first. Missing identity fails closed.
"""
import logging
from typing import Optional, Union

from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.errors import Failure, NotAuthenticated, unauthenticated
from lockbox.models import User
from lockbox.schemas.user import Caller, TokenPayload
from lockbox.security.jwt import decode_access_token

logger = logging.getLogger(__name__)


def require_caller(caller: Optional[Caller]) -> Union[Caller, Failure]:
    if caller is None or not caller.id:
        return unauthenticated()
    return caller


def verify_current_session(token: Optional[str]) -> Caller:
    """
    Resolve the acting user from a bearer token.

    Raises:
        NotAuthenticated: No token, bad signature, expired, or no subject.
    """
    if not token:
        raise NotAuthenticated()
    try:
        token_data = TokenPayload(**decode_access_token(token))
    except (JWTError, ValidationError) as e:
        logger.info("Rejected session token: %s", type(e).__name__)
        raise NotAuthenticated() from e
    if not token_data.sub:
        raise NotAuthenticated()
    return Caller(id=token_data.sub, email=token_data.email)


async def ensure_owner(db: AsyncSession, caller: Caller) -> None:
    """
    Provision the owner row the first time a caller writes.

    Identities come from the authentication collaborator, so the vault may
    see a user id before any row exists for it.
    """
    if await db.get(User, caller.id) is None:
        db.add(User(id=caller.id, email=caller.email))
        await db.flush()
        logger.info("Provisioned owner row for user %s", caller.id)
