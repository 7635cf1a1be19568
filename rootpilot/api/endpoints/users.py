from fastapi import APIRouter, Depends

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_user_repository
from rootpilot.exceptions import NotFoundError
from rootpilot.infrastructure.repositories.user_repository import UserRepository

router = APIRouter()

USER_NOT_FOUND = "User not found"


@router.get("/profile", response_model=schemas.User)
async def read_profile(
    current_user: schemas.TokenData = Depends(auth.get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
):
    user = await user_repo.get_by_id(current_user.user_id)
    if not user:
        raise NotFoundError(USER_NOT_FOUND)
    return user


@router.put("/profile", response_model=schemas.User)
async def update_profile(
    body: schemas.UserProfileUpdate,
    current_user: schemas.TokenData = Depends(auth.get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Update name, company and role; email and password are not editable here."""
    user = await user_repo.update(current_user.user_id, body)
    if not user:
        raise NotFoundError(USER_NOT_FOUND)
    return user
