from datetime import timedelta
from typing import Iterable, List, Optional

from sqlalchemy import select

from rootpilot.api import schemas
from rootpilot.exceptions import NotFoundError
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.base_repository import BaseRepository


class ActionItemRepository(BaseRepository):
    async def get_by_id(self, action_item_id: str) -> Optional[models.ActionItem]:
        return await self.db.get(models.ActionItem, action_item_id)

    async def list_by_rca_result(self, rca_result_id: str) -> List[models.ActionItem]:
        result = await self.db.execute(
            select(models.ActionItem)
            .where(models.ActionItem.rca_result_id == rca_result_id)
            .order_by(models.ActionItem.created_at.asc())
        )
        return list(result.scalars().all())

    def _build(self, data: schemas.ActionItemCreate) -> models.ActionItem:
        return models.ActionItem(
            rca_result_id=data.rca_result_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            responsible_team=data.responsible_team,
            suggested_deadline=data.suggested_deadline,
            category=data.category,
            status=models.ActionItemStatus.PENDING,
        )

    async def _ensure_rca_result(self, rca_result_id: str) -> None:
        if await self.db.get(models.RcaResult, rca_result_id) is None:
            raise NotFoundError(f"RCA result {rca_result_id} not found")

    async def create(self, data: schemas.ActionItemCreate) -> models.ActionItem:
        await self._ensure_rca_result(data.rca_result_id)
        item = self._build(data)
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def create_many(
        self, items: Iterable[schemas.ActionItemCreate]
    ) -> List[models.ActionItem]:
        """Insert a batch in one commit, preserving the given order."""
        items = list(items)
        for rca_result_id in {item.rca_result_id for item in items}:
            await self._ensure_rca_result(rca_result_id)
        created = [self._build(item) for item in items]
        # Distinct timestamps keep list_by_rca_result in insertion order
        base = models.utcnow()
        for offset, item in enumerate(created):
            item.created_at = item.updated_at = base + timedelta(microseconds=offset)
        self.db.add_all(created)
        await self.db.commit()
        for item in created:
            await self.db.refresh(item)
        return created

    async def update_status(
        self, action_item_id: str, status: models.ActionItemStatus
    ) -> Optional[models.ActionItem]:
        item = await self.get_by_id(action_item_id)
        if not item:
            return None
        item.status = status
        item.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def delete(self, action_item_id: str) -> bool:
        item = await self.get_by_id(action_item_id)
        if not item:
            return False
        await self.db.delete(item)
        await self.db.commit()
        return True
