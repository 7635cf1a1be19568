from typing import List, Optional

from sqlalchemy import select

from rootpilot.api import schemas
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository):
    async def get_by_id(self, project_id: str) -> Optional[models.AnalysisProject]:
        return await self.db.get(models.AnalysisProject, project_id)

    async def list_by_user(self, user_id: str) -> List[models.AnalysisProject]:
        result = await self.db.execute(
            select(models.AnalysisProject)
            .where(models.AnalysisProject.user_id == user_id)
            .order_by(models.AnalysisProject.created_at.asc())
        )
        return list(result.scalars().all())

    async def create(
        self, user_id: str, data: schemas.ProjectCreate
    ) -> models.AnalysisProject:
        project = models.AnalysisProject(
            user_id=user_id,
            title=data.title,
            description=data.description,
            data_file_url=data.data_file_url,
            status=models.ProjectStatus.ACTIVE,
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def update(
        self, project_id: str, data: schemas.ProjectUpdate
    ) -> Optional[models.AnalysisProject]:
        project = await self.get_by_id(project_id)
        if not project:
            return None
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(project, field, value)
        project.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def set_analysis_results(
        self,
        project_id: str,
        analysis_results: dict,
        status: models.ProjectStatus = models.ProjectStatus.COMPLETED,
    ) -> Optional[models.AnalysisProject]:
        project = await self.get_by_id(project_id)
        if not project:
            return None
        project.analysis_results = analysis_results
        project.status = status
        project.updated_at = models.utcnow()
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def delete(self, project_id: str) -> bool:
        project = await self.get_by_id(project_id)
        if not project:
            return False
        await self.db.delete(project)
        await self.db.commit()
        return True
