"""Rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiter.
"""

import jwt
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from models.config import settings


def get_caller_key(request: Request) -> str:
    """
    Rate-limit key: the caller's user id when a readable token is sent,
    otherwise the client address.
    """
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = jwt.decode(
                token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
            )
        except jwt.PyJWTError:
            return get_remote_address(request)
        subject = payload.get("sub")
        if subject is not None:
            return f"user:{subject}"
    return get_remote_address(request)


# Create rate limiter - imported by routers and main.py
limiter = Limiter(key_func=get_caller_key)
