from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from rootpilot.api import schemas
from rootpilot.exceptions import ConflictError
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.base_repository import BaseRepository


class RcaResultRepository(BaseRepository):
    async def get_by_id(self, rca_result_id: str) -> Optional[models.RcaResult]:
        return await self.db.get(models.RcaResult, rca_result_id)

    async def get_by_incident_id(self, incident_id: str) -> Optional[models.RcaResult]:
        result = await self.db.execute(
            select(models.RcaResult).where(models.RcaResult.incident_id == incident_id)
        )
        return result.scalar_one_or_none()

    async def create(self, data: schemas.RcaResultCreate) -> models.RcaResult:
        """Persist a new RCA result; an incident holds at most one."""
        if await self.get_by_incident_id(data.incident_id):
            raise ConflictError(
                f"An RCA result already exists for incident {data.incident_id}"
            )
        rca_result = models.RcaResult(**data.model_dump(mode="json"))
        self.db.add(rca_result)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(
                f"An RCA result already exists for incident {data.incident_id}"
            )
        await self.db.refresh(rca_result)
        return rca_result

    async def update(
        self, rca_result_id: str, data: schemas.RcaResultUpdate
    ) -> Optional[models.RcaResult]:
        rca_result = await self.get_by_id(rca_result_id)
        if not rca_result:
            return None
        for field, value in data.model_dump(mode="json", exclude_unset=True).items():
            setattr(rca_result, field, value)
        await self.db.commit()
        await self.db.refresh(rca_result)
        return rca_result

    async def delete(self, rca_result_id: str) -> bool:
        rca_result = await self.get_by_id(rca_result_id)
        if not rca_result:
            return False
        await self.db.delete(rca_result)
        await self.db.commit()
        return True
