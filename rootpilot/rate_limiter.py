from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from rootpilot import auth
from rootpilot.config import settings
from rootpilot.exceptions import InvalidTokenError


def get_user_key(request: Request) -> str:
    """Rate limit bucket for the caller.

    Callers with a valid token are counted per user id, anyone else per client
    address.
    """
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"user:{auth.decode_access_token(token).user_id}"
        except InvalidTokenError:
            pass
    return get_remote_address(request)


AUTH_RATE_LIMIT = f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_TIMESCALE_MINUTES}minute"

limiter = Limiter(
    key_func=get_user_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
