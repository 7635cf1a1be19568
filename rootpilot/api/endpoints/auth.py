import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_user_repository
from rootpilot.exceptions import ConflictError, ValidationError
from rootpilot.infrastructure.repositories.user_repository import UserRepository
from rootpilot.rate_limiter import AUTH_RATE_LIMIT, limiter

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_TAKEN = "User already exists with this email"
INVALID_CREDENTIALS = "Invalid credentials"


@router.post(
    "/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register_user(
    request: Request,
    body: schemas.UserCreate,
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Register a new user and return a session token."""
    if await user_repo.get_by_email(body.email):
        raise ConflictError(EMAIL_TAKEN)

    # Run blocking bcrypt hashing in a separate thread
    hashed_password = await asyncio.to_thread(auth.get_password_hash, body.password)
    try:
        user = await user_repo.create(
            email=body.email, hashed_password=hashed_password, name=body.name
        )
    except IntegrityError:
        await user_repo.db.rollback()
        raise ConflictError(EMAIL_TAKEN)

    logger.info("Registered user %s", user.id)
    token = auth.create_access_token(user.id, user.email)
    return {"user": user, "token": token}


@router.post("/login", response_model=schemas.AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: schemas.UserLogin,
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Authenticate with email and password.

    Unknown emails and wrong passwords fail with the same message.
    """
    user = await user_repo.get_by_email(body.email)
    if not user or not await asyncio.to_thread(
        auth.verify_password, body.password, user.hashed_password
    ):
        logger.info("Failed login attempt")
        raise ValidationError(INVALID_CREDENTIALS)

    token = auth.create_access_token(user.id, user.email)
    return {"user": user, "token": token}
