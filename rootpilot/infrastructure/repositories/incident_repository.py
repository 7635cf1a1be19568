from typing import List, Optional

from sqlalchemy import select

from rootpilot.api import schemas
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.base_repository import BaseRepository


class IncidentRepository(BaseRepository):
    async def get_by_id(self, incident_id: str) -> Optional[models.Incident]:
        return await self.db.get(models.Incident, incident_id)

    async def list_by_user(self, user_id: str) -> List[models.Incident]:
        result = await self.db.execute(
            select(models.Incident)
            .where(models.Incident.user_id == user_id)
            .order_by(models.Incident.created_at.asc())
        )
        return list(result.scalars().all())

    async def create(
        self, user_id: str, data: schemas.IncidentCreate
    ) -> models.Incident:
        fields = data.model_dump(mode="json", exclude={"incident_date", "status"})
        incident = models.Incident(
            user_id=user_id,
            incident_date=data.incident_date,
            status=models.IncidentStatus(data.status),
            **fields,
        )
        self.db.add(incident)
        await self.db.commit()
        await self.db.refresh(incident)
        return incident

    async def update(
        self, incident_id: str, data: schemas.IncidentUpdate
    ) -> Optional[models.Incident]:
        incident = await self.get_by_id(incident_id)
        if not incident:
            return None
        changes = data.model_dump(mode="json", exclude_unset=True)
        if "incident_date" in changes:
            changes["incident_date"] = data.incident_date
        if "status" in changes:
            changes["status"] = models.IncidentStatus(changes["status"])
        for field, value in changes.items():
            setattr(incident, field, value)
        incident.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(incident)
        return incident

    async def update_status(
        self, incident_id: str, status: models.IncidentStatus
    ) -> Optional[models.Incident]:
        incident = await self.get_by_id(incident_id)
        if not incident:
            return None
        incident.status = status
        incident.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(incident)
        return incident

    async def delete(self, incident_id: str) -> bool:
        incident = await self.get_by_id(incident_id)
        if not incident:
            return False
        await self.db.delete(incident)
        await self.db.commit()
        return True
