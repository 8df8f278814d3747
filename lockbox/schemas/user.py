# lockbox/schemas/user.py
from typing import Optional

from pydantic import BaseModel


class Caller(BaseModel):
    """Identity of the acting user, passed explicitly into every vault operation."""
    id: str
    email: Optional[str] = None


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
