from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

from models.config import settings
from models.exceptions import AuthenticationException, TokenExpiredException
from models.identity import ANONYMOUS, CallerIdentity
from repositories.database import get_db
from repositories.user_repository import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: int,
    is_moderator: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed identity token.

    Sign-in lives with the external identity provider; this exists so tests
    and tooling can mint tokens the API accepts.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        settings.MODERATOR_CLAIM: is_moderator,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def decode_identity(token: str) -> CallerIdentity:
    """
    Read the caller identity claim from a bearer token.

    Raises:
        AuthenticationException: If the token is expired, malformed, or
            carries no usable subject.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationException("Could not validate credentials")

    return CallerIdentity(
        user_id=user_id,
        is_moderator=payload.get(settings.MODERATOR_CLAIM) is True,
    )


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    """
    Get the identity of an authenticated caller.

    Raises:
        AuthenticationException: If no valid token is sent or the subject has
            no profile row.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    identity = decode_identity(credentials.credentials)
    if UserRepository(db).get_by_id(identity.user_id) is None:  # type: ignore[arg-type]
        raise AuthenticationException("Could not validate credentials")
    return identity


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    """
    Get the caller identity if a token is sent, otherwise anonymous.

    An expired token still raises AuthenticationException so the client knows
    to sign in again (401). A malformed token or an unknown subject is
    treated as anonymous.
    """
    if credentials is None:
        return ANONYMOUS

    try:
        identity = decode_identity(credentials.credentials)
    except TokenExpiredException:
        raise
    except AuthenticationException:
        return ANONYMOUS

    if UserRepository(db).get_by_id(identity.user_id) is None:  # type: ignore[arg-type]
        return ANONYMOUS
    return identity
