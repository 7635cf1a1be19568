from typing import Optional

from sqlalchemy import select

from rootpilot.api import schemas
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    async def get_by_email(self, email: str) -> Optional[models.User]:
        result = await self.db.execute(
            select(models.User).where(models.User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> Optional[models.User]:
        return await self.db.get(models.User, user_id)

    async def create(
        self,
        *,
        email: str,
        hashed_password: str,
        name: Optional[str] = None,
        company: Optional[str] = None,
        role: Optional[str] = None,
    ) -> models.User:
        user = models.User(
            email=email,
            hashed_password=hashed_password,
            name=name,
            company=company,
            role=role,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update(
        self, user_id: str, data: schemas.UserProfileUpdate
    ) -> Optional[models.User]:
        user = await self.get_by_id(user_id)
        if not user:
            return None
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        user.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(user)
        return user
