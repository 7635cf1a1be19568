import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from rootpilot.api import schemas
from rootpilot.config import settings
from rootpilot.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    InvalidTokenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    user_id: str, email: str, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> schemas.TokenData:
    """Verify signature and expiry, then return the caller identity."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        raise InvalidTokenError() from e
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError()
    return schemas.TokenData(user_id=user_id, email=payload.get("email"))


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
) -> schemas.TokenData:
    if not token:
        raise AuthenticationError()
    return decode_access_token(token)


def ensure_owner(entity, current_user: schemas.TokenData, not_found_message: str):
    """Return ``entity`` if the caller owns it.

    Missing entities raise NotFoundError; entities owned by someone else raise
    AccessDeniedError, or NotFoundError when HIDE_FOREIGN_RESOURCES is set.
    """
    if entity is None:
        raise NotFoundError(not_found_message)
    if entity.user_id != current_user.user_id:
        logger.warning(
            "User %s denied access to %s %s",
            current_user.user_id,
            type(entity).__name__,
            entity.id,
        )
        if settings.HIDE_FOREIGN_RESOURCES:
            raise NotFoundError(not_found_message)
        raise AccessDeniedError()
    return entity
